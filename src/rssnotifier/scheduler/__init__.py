"""定时任务."""

from rssnotifier.scheduler.tasks import (
    create_scheduler,
    get_scheduler,
    poll_task,
    shutdown_scheduler,
)

__all__ = [
    "create_scheduler",
    "get_scheduler",
    "poll_task",
    "shutdown_scheduler",
]
