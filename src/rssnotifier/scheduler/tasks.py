"""定时任务定义."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from rssnotifier.config import Settings
from rssnotifier.core.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

_scheduler: AsyncIOScheduler | None = None


async def poll_task(dispatcher: Dispatcher) -> None:
    """轮询任务：分发一轮订阅检查，失败只记录日志."""
    try:
        await dispatcher.run_cycle()
    except Exception as e:
        logger.exception(f"轮询任务失败: {e}")


def create_scheduler(settings: Settings, dispatcher: Dispatcher) -> AsyncIOScheduler:
    """创建并启动定时任务调度器."""
    global _scheduler

    _scheduler = AsyncIOScheduler()

    _scheduler.add_job(
        poll_task,
        "interval",
        seconds=settings.polling_time_sec,
        args=[dispatcher],
        id="poll_task",
        name="订阅轮询",
        replace_existing=True,
    )

    # 启动时立即执行一次
    _scheduler.add_job(
        poll_task,
        "date",
        args=[dispatcher],
        id="poll_task_initial",
        name="初始轮询",
    )

    _scheduler.start()
    logger.info(f"定时任务调度器已启动，轮询间隔: {settings.polling_time_sec} 秒")

    return _scheduler


def get_scheduler() -> AsyncIOScheduler | None:
    """获取当前调度器."""
    return _scheduler


async def shutdown_scheduler() -> None:
    """关闭定时任务调度器."""
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        logger.info("定时任务调度器已关闭")
        _scheduler = None
