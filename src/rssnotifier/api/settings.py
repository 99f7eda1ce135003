"""设置 API."""

from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from rssnotifier.context import AppContext, get_context, get_session
from rssnotifier.models.smtp_settings import SmtpSettings
from rssnotifier.notifier.mail import MailRelayConfig

router = APIRouter(prefix="/api/settings", tags=["settings"])


class SmtpSettingsResponse(BaseModel):
    """邮件中继配置响应（不含密码）."""

    host: str
    port: int
    from_email: str
    from_name: str
    to_email: str
    auth_user: str
    starttls: bool
    source: Literal["database", "environment"]


class SmtpSettingsUpdateRequest(BaseModel):
    """邮件中继配置更新请求."""

    host: str = Field(min_length=1)
    port: int = Field(ge=1, le=65535)
    from_email: str = Field(min_length=3)
    from_name: str = "RSS"
    to_email: str = Field(min_length=3)
    auth_user: str
    auth_password: str


@router.get("/smtp")
async def get_smtp_settings(
    ctx: AppContext = Depends(get_context),
    session: AsyncSession = Depends(get_session),
) -> SmtpSettingsResponse:
    """获取当前生效的邮件中继配置."""
    record = await session.get(SmtpSettings, 1)
    relay = ctx.notifier.relay

    return SmtpSettingsResponse(
        host=relay.host,
        port=relay.port,
        from_email=relay.from_email,
        from_name=relay.kind,
        to_email=relay.to_email,
        auth_user=relay.username,
        starttls=relay.starttls,
        source="database" if record else "environment",
    )


@router.put("/smtp")
async def update_smtp_settings(
    request: SmtpSettingsUpdateRequest,
    ctx: AppContext = Depends(get_context),
    session: AsyncSession = Depends(get_session),
) -> SmtpSettingsResponse:
    """保存邮件中继配置（立即生效）."""
    record = await session.get(SmtpSettings, 1)
    if not record:
        record = SmtpSettings(id=1, **request.model_dump())
        session.add(record)
    else:
        for key, value in request.model_dump().items():
            setattr(record, key, value)
    await session.commit()

    ctx.notifier.configure(MailRelayConfig.from_record(record, ctx.settings))

    return SmtpSettingsResponse(
        host=record.host,
        port=record.port,
        from_email=record.from_email,
        from_name=record.from_name,
        to_email=record.to_email,
        auth_user=record.auth_user,
        starttls=ctx.settings.smtp_starttls,
        source="database",
    )
