"""邮件通知模块."""

from rssnotifier.notifier.mail import MailRelayConfig, Notifier, build_message

__all__ = [
    "MailRelayConfig",
    "Notifier",
    "build_message",
]
