"""单个订阅的检查流程."""

import asyncio
import logging
from collections import defaultdict

from rssnotifier.core.detector import is_changed
from rssnotifier.core.errors import FeedCheckError
from rssnotifier.core.store import FeedStore
from rssnotifier.fetcher.feed import FeedFetcher
from rssnotifier.models.feed import FeedSubscription
from rssnotifier.notifier.mail import Notifier

logger = logging.getLogger(__name__)


class FeedChecker:
    """下载 → 变更检测 → 通知 → 写检查点.

    每次调用是独立的失败隔离单元：所有错误在这里记录日志后丢弃，
    不会影响调度器或其它订阅的检查。
    """

    def __init__(
        self,
        store: FeedStore,
        fetcher: FeedFetcher,
        notifier: Notifier,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.notifier = notifier
        # 同一订阅的检查串行执行
        self._locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def check(self, subscription: FeedSubscription) -> None:
        """检查一个订阅，不抛出异常."""
        async with self._locks[subscription.id]:
            try:
                await self._check_locked(subscription)
            except FeedCheckError as e:
                logger.error(f"[feed {subscription.id}] {type(e).__name__}: {e}")
            except Exception as e:
                logger.exception(f"[feed {subscription.id}] 检查异常: {e}")

    async def _check_locked(self, subscription: FeedSubscription) -> None:
        # 持锁后重新读取，拿到前一次检查写入的检查点
        current = await self.store.get_subscription(subscription.id)
        if current is None:
            logger.info(f"[feed {subscription.id}] 订阅已删除，跳过")
            return

        item = await self.fetcher.fetch_latest(current.feed_url)
        logger.debug(
            f"[feed {current.id}] 最新条目: {item.published_at.isoformat()} {item.link}"
        )

        if not is_changed(current.last_pub_date, item.published_at):
            logger.debug(f"[feed {current.id}] 无变化")
            return

        # 通知失败时直接抛出，检查点不前移，下一轮会重新尝试
        await self.notifier.send(current, item)

        updated = await self.store.update_checkpoint(current.id, item.published_at)
        if updated:
            logger.info(
                f"[feed {current.id}] 检查点更新为 {item.published_at.isoformat()}"
            )
        else:
            logger.warning(f"[feed {current.id}] 写检查点时订阅已不存在")
