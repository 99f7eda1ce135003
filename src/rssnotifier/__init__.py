"""RSS 订阅更新邮件提醒."""

__version__ = "0.1.0"
