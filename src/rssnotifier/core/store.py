"""订阅存储."""

import logging
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import select

from rssnotifier.core.errors import PersistenceError
from rssnotifier.models.feed import FeedCreate, FeedSubscription, RssFeed

logger = logging.getLogger(__name__)


class FeedStore:
    """订阅记录的读写入口.

    每个操作使用独立会话，会话工厂背后的连接池可被任意多个并发检查共享。
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_subscriptions(self) -> list[FeedSubscription]:
        """按 id 顺序列出全部订阅."""
        try:
            async with self._session_factory() as session:
                stmt = select(RssFeed).order_by(RssFeed.id)  # type: ignore[arg-type]
                result = await session.execute(stmt)
                records = result.scalars().all()
        except SQLAlchemyError as e:
            msg = f"读取订阅列表失败: {e}"
            raise PersistenceError(msg) from e

        return [FeedSubscription.from_record(record) for record in records]

    async def get_subscription(self, feed_id: int) -> FeedSubscription | None:
        """读取单个订阅，不存在时返回 None."""
        try:
            async with self._session_factory() as session:
                record = await session.get(RssFeed, feed_id)
        except SQLAlchemyError as e:
            msg = f"读取订阅 {feed_id} 失败: {e}"
            raise PersistenceError(msg) from e

        return FeedSubscription.from_record(record) if record else None

    async def update_checkpoint(self, feed_id: int, published_at: datetime) -> bool:
        """写入检查点，返回是否有记录被更新."""
        try:
            async with self._session_factory() as session:
                stmt = (
                    update(RssFeed)
                    .where(RssFeed.id == feed_id)  # type: ignore[arg-type]
                    .values(last_pub_date=published_at)
                )
                result = await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            msg = f"写入订阅 {feed_id} 的检查点失败: {e}"
            raise PersistenceError(msg) from e

        return result.rowcount > 0

    async def create_feed(self, data: FeedCreate) -> FeedSubscription:
        """新增订阅，检查点为空."""
        async with self._session_factory() as session:
            record = RssFeed(name=data.name, feed_url=data.feed_url)
            session.add(record)
            await session.commit()
            await session.refresh(record)

        logger.info(f"新增订阅 {record.id}: {record.name}")
        return FeedSubscription.from_record(record)

    async def modify_feed(
        self, feed_id: int, data: FeedCreate
    ) -> FeedSubscription | None:
        """修改名称和 URL，检查点保持不变."""
        async with self._session_factory() as session:
            record = await session.get(RssFeed, feed_id)
            if record is None:
                return None
            record.name = data.name
            record.feed_url = data.feed_url
            await session.commit()
            await session.refresh(record)

        return FeedSubscription.from_record(record)

    async def delete_feed(self, feed_id: int) -> bool:
        """删除订阅，返回是否存在."""
        async with self._session_factory() as session:
            record = await session.get(RssFeed, feed_id)
            if record is None:
                return False
            await session.delete(record)
            await session.commit()

        logger.info(f"删除订阅 {feed_id}")
        return True
