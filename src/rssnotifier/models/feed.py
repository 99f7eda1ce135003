"""Feed 订阅模型."""

from datetime import datetime

from pydantic import AnyHttpUrl, TypeAdapter, field_validator
from sqlalchemy import Column
from sqlmodel import Field, SQLModel

from rssnotifier.models.types import UTCDateTime

_http_url = TypeAdapter(AnyHttpUrl)


class FeedCreate(SQLModel):
    """创建 / 修改订阅的请求体."""

    name: str = Field(min_length=2, max_length=50, description="显示名称")
    feed_url: str = Field(description="Feed URL")

    @field_validator("feed_url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        _http_url.validate_python(value)
        return value


class RssFeed(SQLModel, table=True):
    """RSS 订阅记录."""

    __tablename__ = "rss_feeds"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(description="显示名称")
    feed_url: str = Field(description="Feed URL")
    last_pub_date: datetime | None = Field(
        default=None,
        sa_column=Column(UTCDateTime(), nullable=True),
        description="最近一次已通知条目的发布时间（检查点）",
    )


class FeedSubscription(SQLModel):
    """核心流程使用的订阅快照（与会话无关）."""

    id: int
    name: str
    feed_url: str
    last_pub_date: datetime | None = None

    @classmethod
    def from_record(cls, record: RssFeed) -> "FeedSubscription":
        """从数据库记录构造快照."""
        return cls.model_validate(record, from_attributes=True)
