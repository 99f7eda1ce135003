"""测试邮件通知."""

import smtplib
from dataclasses import replace
from unittest.mock import patch

import pytest

from rssnotifier.core.errors import (
    NotifierConnectError,
    NotifierSendError,
    RelayTimeoutError,
)
from rssnotifier.models.feed import FeedSubscription
from rssnotifier.notifier.mail import MailRelayConfig, Notifier, build_message

from conftest import T1, make_item


@pytest.fixture
def subscription() -> FeedSubscription:
    return FeedSubscription(
        id=7,
        name="My Blog",
        feed_url="https://example.com/feed.xml",
    )


def part_text(part) -> str:
    return part.get_payload(decode=True).decode("utf-8")


class TestBuildMessage:
    """测试 build_message 函数."""

    def test_headers(
        self, subscription: FeedSubscription, relay: MailRelayConfig
    ) -> None:
        """发件人显示名为 '<类型> <订阅名>'，主题为条目标题."""
        msg = build_message(subscription, make_item(T1, title="Hello"), relay)

        assert msg["From"] == "RSS My Blog <bot@example.com>"
        assert msg["To"] == "me@example.com"
        assert msg["Subject"] == "Hello"
        assert msg.get_content_subtype() == "alternative"

    def test_bodies(
        self, subscription: FeedSubscription, relay: MailRelayConfig
    ) -> None:
        """纯文本和 HTML 正文都包含标题和链接，描述只出现在 HTML 中."""
        item = make_item(
            T1,
            title="Hello",
            link="https://example.com/hello",
            description="<p>Body text</p>",
        )
        msg = build_message(subscription, item, relay)
        text_part, html_part = msg.get_payload()

        assert text_part.get_content_type() == "text/plain"
        assert part_text(text_part) == (
            "Original Post: Hello - https://example.com/hello\r\n"
        )
        assert "Body text" not in part_text(text_part)

        assert html_part.get_content_type() == "text/html"
        html = part_text(html_part)
        assert '<a href="https://example.com/hello">Hello</a>' in html
        assert html.endswith("<p>Body text</p>")

    def test_custom_kind(
        self, subscription: FeedSubscription, relay: MailRelayConfig
    ) -> None:
        """显示名前缀可配置."""
        custom = MailRelayConfig(
            host=relay.host,
            port=relay.port,
            from_email=relay.from_email,
            to_email=relay.to_email,
            username=relay.username,
            password=relay.password,
            kind="Feed",
        )
        msg = build_message(subscription, make_item(T1), custom)
        assert msg["From"] == "Feed My Blog <bot@example.com>"


class TestNotifierSend:
    """测试 Notifier.send."""

    async def test_send_plain_connection(
        self, subscription: FeedSubscription, relay: MailRelayConfig
    ) -> None:
        """不加密连接，认证后发送."""
        notifier = Notifier(relay)
        with patch("rssnotifier.notifier.mail.smtplib.SMTP") as smtp_cls:
            server = smtp_cls.return_value
            await notifier.send(subscription, make_item(T1, title="Hello"))
        notifier.close()

        smtp_cls.assert_called_once_with("smtp.example.com", 2525, timeout=30.0)
        server.starttls.assert_not_called()
        server.login.assert_called_once_with("bot", "secret")
        server.send_message.assert_called_once()
        sent = server.send_message.call_args.args[0]
        assert sent["Subject"] == "Hello"
        server.quit.assert_called_once()

    async def test_connect_failure(
        self, subscription: FeedSubscription, relay: MailRelayConfig
    ) -> None:
        """无法连接时抛出 NotifierConnectError."""
        notifier = Notifier(relay)
        with patch(
            "rssnotifier.notifier.mail.smtplib.SMTP",
            side_effect=ConnectionRefusedError("refused"),
        ):
            with pytest.raises(NotifierConnectError):
                await notifier.send(subscription, make_item(T1))
        notifier.close()

    async def test_connect_timeout(
        self, subscription: FeedSubscription, relay: MailRelayConfig
    ) -> None:
        """连接超时抛出 RelayTimeoutError."""
        notifier = Notifier(relay)
        with patch(
            "rssnotifier.notifier.mail.smtplib.SMTP",
            side_effect=TimeoutError("timed out"),
        ):
            with pytest.raises(RelayTimeoutError):
                await notifier.send(subscription, make_item(T1))
        notifier.close()

    async def test_send_failure(
        self, subscription: FeedSubscription, relay: MailRelayConfig
    ) -> None:
        """投递失败时抛出 NotifierSendError 并关闭连接."""
        notifier = Notifier(relay)
        with patch("rssnotifier.notifier.mail.smtplib.SMTP") as smtp_cls:
            server = smtp_cls.return_value
            server.send_message.side_effect = smtplib.SMTPDataError(554, b"rejected")
            with pytest.raises(NotifierSendError):
                await notifier.send(subscription, make_item(T1))
        notifier.close()

        server.quit.assert_called_once()

    async def test_auth_failure(
        self, subscription: FeedSubscription, relay: MailRelayConfig
    ) -> None:
        """认证失败时抛出 NotifierSendError."""
        notifier = Notifier(relay)
        with patch("rssnotifier.notifier.mail.smtplib.SMTP") as smtp_cls:
            smtp_cls.return_value.login.side_effect = smtplib.SMTPAuthenticationError(
                535, b"bad credentials"
            )
            with pytest.raises(NotifierSendError):
                await notifier.send(subscription, make_item(T1))
        notifier.close()

    async def test_starttls_opt_in(
        self, subscription: FeedSubscription, relay: MailRelayConfig
    ) -> None:
        """开启 starttls 时先升级连接."""
        tls_relay = replace(relay, starttls=True)
        notifier = Notifier(tls_relay)
        with patch("rssnotifier.notifier.mail.smtplib.SMTP") as smtp_cls:
            await notifier.send(subscription, make_item(T1))
        notifier.close()

        smtp_cls.return_value.starttls.assert_called_once()

    def test_configure_replaces_relay(self, relay: MailRelayConfig) -> None:
        """configure() 替换中继配置."""
        notifier = Notifier(relay)
        new_relay = MailRelayConfig(
            host="mail.example.org",
            port=25,
            from_email="a@example.org",
            to_email="b@example.org",
            username="",
            password="",
        )
        notifier.configure(new_relay)
        notifier.close()

        assert notifier.relay is new_relay


def test_relay_from_settings(relay: MailRelayConfig) -> None:
    """从环境变量配置构造中继配置."""
    assert relay.host == "smtp.example.com"
    assert relay.port == 2525
    assert relay.kind == "RSS"
    assert relay.starttls is False
    assert isinstance(relay.timeout, float)
