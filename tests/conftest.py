"""测试配置和 fixtures."""

import asyncio
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from rssnotifier.config import Settings
from rssnotifier.core.checker import FeedChecker
from rssnotifier.core.store import FeedStore
from rssnotifier.fetcher.feed import FetchedItem
from rssnotifier.models.feed import FeedCreate, FeedSubscription
from rssnotifier.notifier.mail import MailRelayConfig

T1 = datetime(2024, 11, 23, 10, 0, tzinfo=UTC)
T2 = datetime(2024, 11, 24, 10, 0, tzinfo=UTC)


def make_item(
    published_at: datetime,
    title: str = "New Post",
    link: str = "https://example.com/post",
    description: str = "",
) -> FetchedItem:
    """构造测试用的最新条目."""
    return FetchedItem(
        title=title,
        link=link,
        description=description,
        published_at=published_at,
    )


class FakeFetcher:
    """按 URL 返回预设条目或抛出预设异常."""

    def __init__(self) -> None:
        self.items: dict[str, FetchedItem | Exception] = {}
        self.calls: list[str] = []
        self.delay = 0.0

    async def fetch_latest(self, url: str) -> FetchedItem:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        result = self.items[url]
        if isinstance(result, Exception):
            raise result
        return result

    async def close(self) -> None:
        pass


class FakeNotifier:
    """记录发送的通知，可设置为失败."""

    def __init__(self, relay: MailRelayConfig) -> None:
        self.relay = relay
        self.sent: list[tuple[int, FetchedItem]] = []
        self.error: Exception | None = None

    async def send(self, subscription: FeedSubscription, item: FetchedItem) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append((subscription.id, item))

    def configure(self, relay: MailRelayConfig) -> None:
        self.relay = relay

    def close(self) -> None:
        pass


@pytest.fixture
def test_settings() -> Settings:
    """不读取 .env 的配置."""
    return Settings(
        _env_file=None,
        smtp_host="smtp.example.com",
        smtp_port=2525,
        from_email="bot@example.com",
        to_email="me@example.com",
        smtp_auth_user="bot",
        smtp_auth_password="secret",
        check_concurrency=4,
        polling_time_sec=60,
    )


@pytest.fixture
def relay(test_settings: Settings) -> MailRelayConfig:
    """测试用的邮件中继配置."""
    return MailRelayConfig.from_settings(test_settings)


@pytest_asyncio.fixture
async def session_factory(
    tmp_path: Path,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """创建测试用的临时文件数据库（多个会话共享同一个库）."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    await engine.dispose()


@pytest.fixture
def store(session_factory: async_sessionmaker[AsyncSession]) -> FeedStore:
    """测试用的订阅存储."""
    return FeedStore(session_factory)


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def notifier(relay: MailRelayConfig) -> FakeNotifier:
    return FakeNotifier(relay)


@pytest.fixture
def checker(
    store: FeedStore, fetcher: FakeFetcher, notifier: FakeNotifier
) -> FeedChecker:
    """使用假下载器和假通知器的检查器."""
    return FeedChecker(store, fetcher, notifier)  # type: ignore[arg-type]


@pytest.fixture
def add_feed(
    store: FeedStore,
) -> Callable[..., Awaitable[FeedSubscription]]:
    """新增订阅并可选地写入检查点."""

    async def _add_feed(
        name: str = "Test Feed",
        feed_url: str = "https://example.com/feed.xml",
        last_pub_date: datetime | None = None,
    ) -> FeedSubscription:
        feed = await store.create_feed(FeedCreate(name=name, feed_url=feed_url))
        if last_pub_date is not None:
            await store.update_checkpoint(feed.id, last_pub_date)
            refreshed = await store.get_subscription(feed.id)
            assert refreshed is not None
            return refreshed
        return feed

    return _add_feed
