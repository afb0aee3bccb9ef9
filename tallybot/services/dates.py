"""
Day keys.

Every thread is bucketed under the calendar day it was created on, written
as ``YYYY-MM-DD`` in the configured timezone. The format is zero-padded, so
comparing two keys as strings compares the days.
"""

import re
from datetime import datetime, timezone, tzinfo
from typing import Union

import pytz
from discord.utils import snowflake_time

from tallybot.utils import utc_now

DAY_FORMAT = "%Y-%m-%d"

# Users type dates by hand; older deployments used YYYY.MM.DD
_DAY_INPUT_RE = re.compile(r"^\s*(\d{4})[-./](\d{1,2})[-./](\d{1,2})\s*$")

TimezoneLike = Union[str, tzinfo]


class InvalidDayKey(ValueError):
    """Raised when a user supplied date cannot be read as a calendar day."""


def _resolve_tz(tz: TimezoneLike) -> tzinfo:
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def day_key(moment: datetime, tz: TimezoneLike = "UTC") -> str:
    """Normalise a timestamp to the day key of ``tz``. Naive input is UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(_resolve_tz(tz)).strftime(DAY_FORMAT)


def today_key(tz: TimezoneLike = "UTC") -> str:
    return day_key(utc_now(), tz)


def thread_day(thread, tz: TimezoneLike = "UTC") -> str:
    """
    Day key of a thread's creation.

    Discord leaves ``created_at`` empty for threads created before 2022-01-09;
    the thread id is a snowflake carrying the same timestamp.
    """
    created_at = getattr(thread, "created_at", None)
    if created_at is None:
        created_at = snowflake_time(thread.id)
    return day_key(created_at, tz)


def parse_day(text: str) -> str:
    """
    Validate a date typed by a user and return its canonical day key.

    Raises:
        InvalidDayKey: the text is not a real calendar date
    """
    match = _DAY_INPUT_RE.match(text or "")
    if not match:
        raise InvalidDayKey(f"Not a date: {text!r}")
    year, month, day = (int(part) for part in match.groups())
    try:
        datetime(year, month, day)
    except ValueError as e:
        raise InvalidDayKey(f"Not a date: {text!r} ({e})") from e
    return f"{year:04d}-{month:02d}-{day:02d}"
