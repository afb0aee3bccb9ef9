"""Read-only summaries answered by the slash commands."""

from typing import Optional, Tuple

from tallybot.services.dates import TimezoneLike, parse_day, today_key
from tallybot.services.tally_store import TallyStore
from tallybot.utils import format_total

USAGE_HINT = "Dates must look like YYYY-MM-DD, for example 2024-05-01."


class QueryResponder:
    """
    Formats totals read from a TallyStore.

    Every date argument goes through parse_day, so malformed input raises
    InvalidDayKey. Days with no data read as 0.0.
    """

    def __init__(self, store: TallyStore, tz: TimezoneLike = "UTC"):
        self.store = store
        self.tz = tz

    def total(self, date: Optional[str] = None) -> str:
        day = parse_day(date) if date else today_key(self.tz)
        return f"📊 {day} total: {format_total(self.store.day_total(day))}"

    def user_total(self, user_id: int, user_label: str, start: str, end: Optional[str] = None) -> str:
        first, last = self._range(start, end)
        total = format_total(self.store.user_total_over_range(first, last, user_id))
        if first == last:
            return f"📊 {user_label} total on {first}: {total}"
        return f"📊 {user_label} total from {first} to {last}: {total}"

    def range_total(self, start: str, end: Optional[str] = None) -> str:
        first, last = self._range(start, end)
        total = format_total(self.store.range_total(first, last))
        if first == last:
            return f"📊 Total for all users on {first}: {total}"
        return f"📊 Total for all users from {first} to {last}: {total}"

    @staticmethod
    def _range(start: str, end: Optional[str]) -> Tuple[str, str]:
        first = parse_day(start)
        last = parse_day(end) if end else first
        if last < first:
            first, last = last, first
        return first, last
