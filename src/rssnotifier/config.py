"""应用配置管理."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置（环境变量 / .env）."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 数据库
    database_url: str = "sqlite+aiosqlite:///./rss_notifier.db"

    # HTTP 服务
    http_host: str = "0.0.0.0"
    http_port: int = 8000

    # 轮询配置
    polling_time_sec: int = 600
    check_concurrency: int = 16
    fetch_timeout_seconds: float = 30.0

    # 邮件中继配置
    smtp_host: str = "localhost"
    smtp_port: int = 25
    from_email: str = ""
    to_email: str = ""
    smtp_auth_user: str = ""
    smtp_auth_password: str = ""
    smtp_from_name: str = "RSS"
    smtp_starttls: bool = False
    smtp_timeout_seconds: float = 30.0

    # 日志
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> Settings:
    """获取应用配置（带缓存）."""
    return Settings()
