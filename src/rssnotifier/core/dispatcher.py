"""订阅分发：有界工作池 + 每轮扇出."""

import asyncio
import logging

from rssnotifier.core.checker import FeedChecker
from rssnotifier.core.store import FeedStore
from rssnotifier.models.feed import FeedSubscription

logger = logging.getLogger(__name__)


class CheckPool:
    """固定数量的 worker 从队列中取订阅执行检查."""

    def __init__(self, checker: FeedChecker, concurrency: int = 16) -> None:
        self.checker = checker
        self.concurrency = max(1, concurrency)
        self._queue: asyncio.Queue[FeedSubscription] = asyncio.Queue()
        self._workers: list[asyncio.Task[None]] = []

    @property
    def is_running(self) -> bool:
        """worker 是否已启动."""
        return bool(self._workers)

    @property
    def pending(self) -> int:
        """队列中等待的检查数量."""
        return self._queue.qsize()

    def start(self) -> None:
        """启动 worker."""
        if self._workers:
            logger.warning("检查工作池已在运行")
            return
        self._workers = [
            asyncio.create_task(self._worker(i), name=f"feed-check-{i}")
            for i in range(self.concurrency)
        ]
        logger.info(f"检查工作池已启动，并发数: {self.concurrency}")

    def submit(self, subscription: FeedSubscription) -> None:
        """提交一次检查，立即返回."""
        self._queue.put_nowait(subscription)

    async def join(self) -> None:
        """等待队列中所有检查完成."""
        await self._queue.join()

    async def stop(self) -> None:
        """取消所有 worker，进行中的检查随之结束."""
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info("检查工作池已停止")

    async def _worker(self, index: int) -> None:
        while True:
            subscription = await self._queue.get()
            try:
                await self.checker.check(subscription)
            finally:
                self._queue.task_done()


class Dispatcher:
    """每轮读取全部订阅并提交到工作池."""

    def __init__(self, store: FeedStore, pool: CheckPool) -> None:
        self.store = store
        self.pool = pool

    async def run_cycle(self) -> int:
        """
        执行一轮分发.

        只负责提交，不等待检查完成。

        Returns:
            本轮提交的订阅数量

        Raises:
            PersistenceError: 无法读取订阅列表
        """
        subscriptions = await self.store.list_subscriptions()
        for subscription in subscriptions:
            logger.debug(f"提交检查: feed {subscription.id}")
            self.pool.submit(subscription)

        logger.info(f"本轮提交 {len(subscriptions)} 个订阅检查")
        return len(subscriptions)
