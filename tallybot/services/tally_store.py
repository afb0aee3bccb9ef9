"""
In-memory tally of numbers posted in daily threads.

Layout: day key -> thread id -> message id -> Entry. A thread lives under the
day it was created on for as long as the process runs; nothing is persisted.
Reads of an unknown day, thread or user give 0.0.

None of the methods await, so a mutation is never interleaved with another
handler running on the same event loop.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class Entry:
    """
    One recorded number.

    Attributes:
        user_id: Discord id of the author
        value: parsed number
        acknowledged: the bot already replied to this message
    """
    user_id: int
    value: float
    acknowledged: bool = False


ThreadBucket = Dict[int, Entry]


class TallyStore:
    """Owns the day -> thread -> message table. One instance per process."""

    def __init__(self):
        self._days: Dict[str, Dict[int, ThreadBucket]] = {}
        self._thread_days: Dict[int, str] = {}

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def open_thread(self, day: str, thread_id: int) -> ThreadBucket:
        """Return the bucket of a thread, creating it empty if needed."""
        threads = self._days.setdefault(day, {})
        bucket = threads.get(thread_id)
        if bucket is None:
            bucket = threads[thread_id] = {}
            known_day = self._thread_days.setdefault(thread_id, day)
            if known_day != day:
                logger.warning(
                    f"Thread {thread_id} already bucketed under {known_day}, "
                    f"opening a second bucket under {day}"
                )
        return bucket

    def upsert_entry(
        self,
        day: str,
        thread_id: int,
        message_id: int,
        user_id: int,
        value: float,
    ) -> Entry:
        """
        Insert an entry or replace the value of an existing one.

        A new entry starts unacknowledged; an existing one keeps its flag.
        """
        bucket = self.open_thread(day, thread_id)
        entry = bucket.get(message_id)
        if entry is None:
            entry = bucket[message_id] = Entry(user_id=user_id, value=value)
        else:
            entry.user_id = user_id
            entry.value = value
        return entry

    def seed_entry(
        self,
        day: str,
        thread_id: int,
        message_id: int,
        user_id: int,
        value: float,
        acknowledged: bool = True,
    ) -> bool:
        """
        Insert an entry recovered from history.

        An entry that already exists came from a live event and is newer than
        anything read from history, so it is left untouched.

        Returns:
            True if the entry was inserted
        """
        bucket = self.open_thread(day, thread_id)
        if message_id in bucket:
            return False
        bucket[message_id] = Entry(user_id=user_id, value=value, acknowledged=acknowledged)
        return True

    def remove_entry(self, day: str, thread_id: int, message_id: int) -> Optional[Entry]:
        bucket = self._days.get(day, {}).get(thread_id)
        if bucket is None:
            return None
        return bucket.pop(message_id, None)

    def mark_acknowledged(self, day: str, thread_id: int, message_id: int) -> bool:
        """Set the reply flag. True only for the call that actually set it."""
        entry = self.get_entry(day, thread_id, message_id)
        if entry is None or entry.acknowledged:
            return False
        entry.acknowledged = True
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_entry(self, day: str, thread_id: int, message_id: int) -> Optional[Entry]:
        return self._days.get(day, {}).get(thread_id, {}).get(message_id)

    def day_for_thread(self, thread_id: int) -> Optional[str]:
        return self._thread_days.get(thread_id)

    def days(self) -> List[str]:
        return sorted(self._days)

    def threads(self, day: str) -> List[int]:
        return list(self._days.get(day, {}))

    def thread_total(self, day: str, thread_id: int) -> float:
        bucket = self._days.get(day, {}).get(thread_id, {})
        return sum((entry.value for entry in bucket.values()), 0.0)

    def day_total(self, day: str) -> float:
        return sum(
            (self.thread_total(day, thread_id) for thread_id in self._days.get(day, {})),
            0.0,
        )

    def user_total(self, day: str, user_id: int) -> float:
        return sum(
            (entry.value for entry in self._entries(day) if entry.user_id == user_id),
            0.0,
        )

    def user_total_over_range(self, start: str, end: str, user_id: int) -> float:
        return sum((self.user_total(day, user_id) for day in self._days_between(start, end)), 0.0)

    def range_total(self, start: str, end: str) -> float:
        return sum((self.day_total(day) for day in self._days_between(start, end)), 0.0)

    def _entries(self, day: str) -> Iterator[Entry]:
        for bucket in self._days.get(day, {}).values():
            yield from bucket.values()

    def _days_between(self, start: str, end: str) -> List[str]:
        # Day keys are zero-padded YYYY-MM-DD: string order is calendar order
        return [day for day in sorted(self._days) if start <= day <= end]
