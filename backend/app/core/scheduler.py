"""
后台调度器 (Background Scheduler)

按 cron 表达式（默认每月 1 日 00:00）触发月度清理任务。
调度器实例由应用 lifespan 创建和关闭，不在导入时启动。

Triggers the monthly cleanup on a cron expression (default: 1st of the month at
00:00). The scheduler instance is created and shut down by the application
lifespan, never started at import time.
"""
import logging
from typing import Awaitable, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

logger = logging.getLogger(__name__)

CLEANUP_JOB_ID = "monthly_cleanup"


def create_scheduler(
    job: Callable[[], Awaitable[object]],
    cron: str = "0 0 1 * *",
    timezone: str = "UTC",
) -> AsyncIOScheduler:
    """
    创建调度器并注册清理任务 (Create the scheduler and register the cleanup job)

    max_instances=1 + coalesce 保证同一时间只有一次清理在运行，错过的触发合并为一次。
    max_instances=1 with coalesce keeps one sweep at a time and merges missed runs.
    """
    scheduler = AsyncIOScheduler(timezone=timezone)
    scheduler.add_job(
        job,
        trigger=CronTrigger.from_crontab(cron, timezone=timezone),
        id=CLEANUP_JOB_ID,
        name="Monthly low-rating product cleanup",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    return scheduler


def start_scheduler(scheduler: AsyncIOScheduler) -> None:
    if not scheduler.running:
        scheduler.start()
        job = scheduler.get_job(CLEANUP_JOB_ID)
        logger.info("Background scheduler started, next cleanup at %s", job.next_run_time if job else None)


def stop_scheduler(scheduler: Optional[AsyncIOScheduler]) -> None:
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Background scheduler stopped.")
