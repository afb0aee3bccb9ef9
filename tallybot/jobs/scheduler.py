import logging

import discord
import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from tallybot.config import settings
from tallybot.services.dates import TimezoneLike, thread_day
from tallybot.services.tally_store import TallyStore
from tallybot.utils import fetch_active_threads, fetch_parent_channel, format_total, safe_send

logger = logging.getLogger(__name__)

_scheduler: AsyncIOScheduler | None = None


async def job_daily_report(bot, store: TallyStore, parent_channel_id: int, tz: TimezoneLike = "UTC") -> int:
    """
    Posts each active thread's total into the thread itself.

    The total is the one of the thread's own creation day. If the parent
    channel or its thread list cannot be fetched the firing is dropped; the
    next one runs at the usual time.

    Returns:
        Number of threads the report was posted to
    """
    try:
        parent = await fetch_parent_channel(bot, parent_channel_id)
        threads = await fetch_active_threads(parent)
    except discord.DiscordException as e:
        logger.error(f"Daily report failed: cannot fetch threads of channel {parent_channel_id}: {e}")
        return 0

    posted = 0
    for thread in threads:
        day = store.day_for_thread(thread.id) or thread_day(thread, tz)
        total = store.thread_total(day, thread.id)
        if await safe_send(thread, f"📊 Today's total: {format_total(total)}"):
            posted += 1
    logger.info(f"Daily report posted to {posted}/{len(threads)} thread(s)")
    return posted


async def setup_scheduler(bot, store: TallyStore) -> AsyncIOScheduler:
    global _scheduler
    if _scheduler:
        return _scheduler
    tz = pytz.timezone(settings.timezone)
    _scheduler = AsyncIOScheduler(timezone=tz)
    _scheduler.add_job(
        job_daily_report,
        CronTrigger(hour=settings.report_hour, minute=settings.report_minute, timezone=tz),
        args=[bot, store, settings.parent_channel_id, settings.timezone],
        id="daily_report",
    )
    _scheduler.start()
    logger.info(
        f"Scheduler started: daily report at {settings.report_hour:02d}:{settings.report_minute:02d} "
        f"{settings.timezone}"
    )
    return _scheduler


def shutdown_scheduler() -> None:
    global _scheduler
    if _scheduler is None:
        return
    _scheduler.shutdown(wait=False)
    _scheduler = None
    logger.info("Scheduler stopped")
