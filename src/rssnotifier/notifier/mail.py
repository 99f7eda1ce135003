"""邮件通知."""

import asyncio
import logging
import smtplib
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from html import escape

from rssnotifier.config import Settings
from rssnotifier.core.errors import (
    NotifierConnectError,
    NotifierSendError,
    RelayTimeoutError,
)
from rssnotifier.fetcher.feed import FetchedItem
from rssnotifier.models.feed import FeedSubscription
from rssnotifier.models.smtp_settings import SmtpSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailRelayConfig:
    """邮件中继配置（只读）."""

    host: str
    port: int
    from_email: str
    to_email: str
    username: str
    password: str
    kind: str = "RSS"
    starttls: bool = False
    timeout: float = 30.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "MailRelayConfig":
        """从环境变量配置构造."""
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            from_email=settings.from_email,
            to_email=settings.to_email,
            username=settings.smtp_auth_user,
            password=settings.smtp_auth_password,
            kind=settings.smtp_from_name,
            starttls=settings.smtp_starttls,
            timeout=settings.smtp_timeout_seconds,
        )

    @classmethod
    def from_record(cls, record: SmtpSettings, settings: Settings) -> "MailRelayConfig":
        """从数据库配置构造，传输层选项仍取自环境变量."""
        return cls(
            host=record.host,
            port=record.port,
            from_email=record.from_email,
            to_email=record.to_email,
            username=record.auth_user,
            password=record.auth_password,
            kind=record.from_name,
            starttls=settings.smtp_starttls,
            timeout=settings.smtp_timeout_seconds,
        )


def build_message(
    subscription: FeedSubscription,
    item: FetchedItem,
    relay: MailRelayConfig,
) -> MIMEMultipart:
    """构造 multipart/alternative 通知邮件."""
    msg = MIMEMultipart("alternative")
    msg["From"] = formataddr((f"{relay.kind} {subscription.name}", relay.from_email))
    msg["To"] = relay.to_email
    msg["Subject"] = item.title

    text_body = f"Original Post: {item.title} - {item.link}\r\n"
    # 描述本身就是 HTML 片段，只附加在 HTML 正文中
    html_body = (
        f'<p>Original Post: <a href="{escape(item.link)}">{escape(item.title)}</a></p>'
        f"{item.description}"
    )

    msg.attach(MIMEText(text_body, "plain", "utf-8"))
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    return msg


class Notifier:
    """通过 SMTP 中继发送变更通知."""

    def __init__(self, relay: MailRelayConfig) -> None:
        self._relay = relay
        self._executor = ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="smtp"
        )

    @property
    def relay(self) -> MailRelayConfig:
        """当前中继配置."""
        return self._relay

    def configure(self, relay: MailRelayConfig) -> None:
        """替换中继配置，已开始的发送不受影响."""
        self._relay = relay
        logger.info(f"邮件中继已切换到 {relay.host}:{relay.port}")

    def close(self) -> None:
        """关闭线程池."""
        self._executor.shutdown(wait=False)

    async def send(self, subscription: FeedSubscription, item: FetchedItem) -> None:
        """
        发送一封通知邮件.

        smtplib 是同步库，这里用线程池包装成异步。

        Raises:
            NotifierConnectError: 无法连接中继
            NotifierSendError: 认证或投递失败
            RelayTimeoutError: 中继操作超时
        """
        relay = self._relay
        msg = build_message(subscription, item, relay)
        logger.info(f"[feed {subscription.id}] 发送通知: {item.title}")

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(self._executor, self._send_sync, relay, msg)

    def _send_sync(self, relay: MailRelayConfig, msg: MIMEMultipart) -> None:
        """同步发送."""
        try:
            server = smtplib.SMTP(relay.host, relay.port, timeout=relay.timeout)
        except TimeoutError as e:
            msg_text = f"连接邮件中继超时: {relay.host}:{relay.port}"
            raise RelayTimeoutError(msg_text) from e
        except (OSError, smtplib.SMTPException) as e:
            msg_text = f"无法连接邮件中继 {relay.host}:{relay.port}: {e}"
            raise NotifierConnectError(msg_text) from e

        try:
            if relay.starttls:
                server.starttls()
            if relay.username:
                server.login(relay.username, relay.password)
            server.send_message(msg)
        except TimeoutError as e:
            msg_text = f"邮件中继响应超时: {relay.host}:{relay.port}"
            raise RelayTimeoutError(msg_text) from e
        except (OSError, smtplib.SMTPException) as e:
            msg_text = f"邮件发送失败: {e}"
            raise NotifierSendError(msg_text) from e
        finally:
            try:
                server.quit()
            except (OSError, smtplib.SMTPException):
                server.close()
