"""数据库初始化和会话管理."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

# 确保所有表模型已注册到 metadata
from rssnotifier.models.feed import RssFeed  # noqa: F401
from rssnotifier.models.smtp_settings import SmtpSettings  # noqa: F401

logger = logging.getLogger(__name__)

# 全局引擎
_engine: Any = None


async def init_db(database_url: str) -> async_sessionmaker[AsyncSession]:
    """初始化数据库，创建所有表，返回会话工厂."""
    global _engine

    _engine = create_async_engine(database_url, echo=False)
    session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    logger.info(f"数据库已就绪: {_engine.url.render_as_string(hide_password=True)}")
    return session_factory


async def close_db() -> None:
    """释放连接池."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None
