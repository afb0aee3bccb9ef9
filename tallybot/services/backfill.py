"""
History backfill.

After a restart the store is empty. The scanner walks each active thread's
history backwards, page by page, and seeds every numeric message it finds.
Seeded entries are marked as acknowledged: they were answered before the
restart, and replaying history must never post.
"""

import logging
from typing import Dict, Iterable

import discord

from tallybot.services.dates import TimezoneLike, thread_day
from tallybot.services.ingestor import parse_value
from tallybot.services.tally_store import TallyStore

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


class BackfillScanner:
    """Seeds a TallyStore from thread history."""

    def __init__(self, store: TallyStore, tz: TimezoneLike = "UTC", page_size: int = DEFAULT_PAGE_SIZE):
        self.store = store
        self.tz = tz
        self.page_size = page_size

    async def scan_thread(self, thread) -> int:
        """
        Seed the store from one thread's full history.

        A Discord error ends the scan of this thread only; whatever was seeded
        before it stays in the store.

        Returns:
            Number of entries seeded
        """
        day = self.store.day_for_thread(thread.id) or thread_day(thread, self.tz)
        self.store.open_thread(day, thread.id)

        seeded = 0
        pages = 0
        before = None
        try:
            while True:
                page = [
                    message
                    async for message in thread.history(limit=self.page_size, before=before)
                ]
                if not page:
                    break
                pages += 1
                for message in page:
                    if getattr(message.author, "bot", False):
                        continue
                    value = parse_value(message.content)
                    if value is None:
                        continue
                    if self.store.seed_entry(day, thread.id, message.id, message.author.id, value):
                        seeded += 1
                # history() is newest first: the last message is the oldest one
                before = page[-1]
                if len(page) < self.page_size:
                    break
        except discord.DiscordException as e:
            logger.error(
                f"Backfill of thread {thread.id} aborted after {pages} page(s), "
                f"{seeded} entries kept: {e}"
            )
            return seeded

        logger.info(f"Backfilled thread {thread.id} ({day}): {seeded} entries from {pages} page(s)")
        return seeded

    async def scan_threads(self, threads: Iterable) -> Dict[int, int]:
        """Scan threads one after another; a failing thread does not stop the rest."""
        results: Dict[int, int] = {}
        for thread in threads:
            results[thread.id] = await self.scan_thread(thread)
        total = sum(results.values())
        logger.info(f"Backfill complete: {len(results)} thread(s), {total} entries")
        return results
