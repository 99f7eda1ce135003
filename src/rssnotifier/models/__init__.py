"""数据模型."""

from rssnotifier.models.database import close_db, init_db
from rssnotifier.models.feed import FeedCreate, FeedSubscription, RssFeed
from rssnotifier.models.smtp_settings import SmtpSettings

__all__ = [
    "FeedCreate",
    "FeedSubscription",
    "RssFeed",
    "SmtpSettings",
    "close_db",
    "init_db",
]
