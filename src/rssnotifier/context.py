"""应用上下文：在启动时组装，注入到 API 和后台任务."""

import logging
from collections.abc import AsyncGenerator
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rssnotifier.config import Settings
from rssnotifier.core.checker import FeedChecker
from rssnotifier.core.dispatcher import CheckPool, Dispatcher
from rssnotifier.core.store import FeedStore
from rssnotifier.fetcher.feed import FeedFetcher
from rssnotifier.models.smtp_settings import SmtpSettings
from rssnotifier.notifier.mail import MailRelayConfig, Notifier

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """共享组件."""

    settings: Settings
    session_factory: async_sessionmaker[AsyncSession]
    store: FeedStore
    fetcher: FeedFetcher
    notifier: Notifier
    checker: FeedChecker
    pool: CheckPool
    dispatcher: Dispatcher

    async def close(self) -> None:
        """停止工作池并释放客户端."""
        await self.pool.stop()
        await self.fetcher.close()
        self.notifier.close()


async def load_relay_config(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
) -> MailRelayConfig:
    """读取邮件中继配置，数据库中的配置优先于环境变量."""
    async with session_factory() as session:
        record = await session.get(SmtpSettings, 1)

    if record:
        logger.info("使用数据库中的邮件中继配置")
        return MailRelayConfig.from_record(record, settings)
    return MailRelayConfig.from_settings(settings)


def build_context(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    relay: MailRelayConfig,
) -> AppContext:
    """组装组件（工作池未启动）."""
    store = FeedStore(session_factory)
    fetcher = FeedFetcher(timeout=settings.fetch_timeout_seconds)
    notifier = Notifier(relay)
    checker = FeedChecker(store, fetcher, notifier)
    pool = CheckPool(checker, concurrency=settings.check_concurrency)
    dispatcher = Dispatcher(store, pool)
    return AppContext(
        settings=settings,
        session_factory=session_factory,
        store=store,
        fetcher=fetcher,
        notifier=notifier,
        checker=checker,
        pool=pool,
        dispatcher=dispatcher,
    )


def get_context(request: Request) -> AppContext:
    """获取应用上下文（用于依赖注入）."""
    return request.app.state.context


async def get_session(
    ctx: AppContext = Depends(get_context),
) -> AsyncGenerator[AsyncSession, None]:
    """获取数据库会话（用于依赖注入）."""
    async with ctx.session_factory() as session:
        yield session
