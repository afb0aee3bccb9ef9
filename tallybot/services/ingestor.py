"""
Live message ingestion.

Turns thread message events into store updates. A message counts when its
whole body is a plain decimal number; anything else is ignored without a
reply. The bot answers each message at most once, on the first event that
records it; later edits only change the stored value.
"""

import logging
import math
import re
from typing import Optional

from tallybot.services.dates import TimezoneLike, thread_day
from tallybot.services.tally_store import Entry, TallyStore
from tallybot.utils import format_total, format_value, safe_reply

logger = logging.getLogger(__name__)

# Optional sign, ASCII digits with an optional fraction, optional exponent.
# No thousands separators, no underscores, no nan/inf.
_NUMBER_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

RECORDED_TEMPLATE = "✅ Recorded {value}. Total for this thread on {day}: {total}"
UPDATED_TEMPLATE = "✅ Updated {value}. Total for this thread on {day}: {total}"


def parse_value(text: Optional[str]) -> Optional[float]:
    """
    Parse a message body as a number.

    Returns:
        The number, or None if the body is anything but a single number
    """
    if not text:
        return None
    candidate = text.strip()
    if not _NUMBER_RE.fullmatch(candidate):
        return None
    value = float(candidate)
    if not math.isfinite(value):
        return None
    return value


class MessageIngestor:
    """Applies thread message events to a TallyStore."""

    def __init__(self, store: TallyStore, tz: TimezoneLike = "UTC"):
        self.store = store
        self.tz = tz

    def on_thread_create(self, thread) -> str:
        day = thread_day(thread, self.tz)
        self.store.open_thread(day, thread.id)
        logger.info(f"Thread {thread.id} opened under {day}")
        return day

    async def on_message(self, message) -> Optional[Entry]:
        return await self._ingest(message, RECORDED_TEMPLATE)

    async def on_message_edit(self, message) -> Optional[Entry]:
        return await self._ingest(message, UPDATED_TEMPLATE)

    def on_message_delete(self, thread_id: int, message_id: int) -> Optional[Entry]:
        day = self.store.day_for_thread(thread_id)
        if day is None:
            return None
        removed = self.store.remove_entry(day, thread_id, message_id)
        if removed is not None:
            logger.info(
                f"Removed {format_value(removed.value)} (message {message_id}) "
                f"from thread {thread_id} on {day}"
            )
        return removed

    def record_manual(self, thread, record_id: int, user_id: int, value: float) -> tuple[str, float]:
        """
        Record a number given through a command rather than a message.

        Returns:
            (day key, new thread total)
        """
        day = self._day_of(thread)
        entry = self.store.upsert_entry(day, thread.id, record_id, user_id, value)
        entry.acknowledged = True
        total = self.store.thread_total(day, thread.id)
        logger.info(f"Manual entry {format_value(value)} by {user_id} in thread {thread.id} on {day}")
        return day, total

    async def _ingest(self, message, template: str) -> Optional[Entry]:
        if getattr(message.author, "bot", False):
            return None
        value = parse_value(message.content)
        if value is None:
            return None

        thread = message.channel
        day = self._day_of(thread)
        entry = self.store.upsert_entry(day, thread.id, message.id, message.author.id, value)
        total = self.store.thread_total(day, thread.id)
        logger.debug(
            f"Thread {thread.id} on {day}: message {message.id} = {format_value(value)}, "
            f"total {format_total(total)}"
        )

        # Flag first, then await: an edit arriving during the send must not reply again
        if self.store.mark_acknowledged(day, thread.id, message.id):
            await safe_reply(
                message,
                template.format(value=format_value(value), day=day, total=format_total(total)),
            )
        return entry

    def _day_of(self, thread) -> str:
        # A thread keeps the day it was first seen under
        day = self.store.day_for_thread(thread.id)
        if day is None:
            day = thread_day(thread, self.tz)
        return day
