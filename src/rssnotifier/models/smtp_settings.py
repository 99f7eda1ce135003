"""邮件中继配置模型."""

from sqlmodel import Field, SQLModel


class SmtpSettings(SQLModel, table=True):
    """邮件中继配置表（单行存储）."""

    __tablename__ = "smtp_settings"  # type: ignore[assignment]

    id: int = Field(default=1, primary_key=True)
    host: str
    port: int
    from_email: str
    from_name: str = Field(default="RSS")
    to_email: str
    auth_user: str
    auth_password: str
