"""Tests for utility functions."""

from datetime import datetime, timezone
from types import SimpleNamespace

import discord
import pytest

from tallybot.utils import format_total, format_value, is_thread_channel, safe_reply, safe_send, utc_now
from tests.fakes import FakeThread, FakeUser, http_error


def test_utc_now_has_timezone():
    result = utc_now()
    assert isinstance(result, datetime)
    assert result.tzinfo == timezone.utc


def test_utc_now_is_current():
    before = datetime.now(timezone.utc)
    result = utc_now()
    after = datetime.now(timezone.utc)
    assert before <= result <= after


@pytest.mark.parametrize("value,expected", [(3.0, "3"), (4.5, "4.5"), (-1.0, "-1"), (0.1, "0.1")])
def test_format_value(value, expected):
    assert format_value(value) == expected


@pytest.mark.parametrize("total,expected", [(0.0, "0.0"), (6.5, "6.5"), (1 / 3, "0.3"), (-2.0, "-2.0")])
def test_format_total(total, expected):
    assert format_total(total) == expected


def test_is_thread_channel():
    assert is_thread_channel(FakeThread())
    assert is_thread_channel(SimpleNamespace(type=discord.ChannelType.private_thread))
    assert not is_thread_channel(SimpleNamespace(type=discord.ChannelType.text))
    assert not is_thread_channel(SimpleNamespace())


@pytest.mark.asyncio
async def test_safe_reply_swallows_http_errors():
    thread = FakeThread()
    message = thread.post(FakeUser(1), "1")

    async def broken(text, **kwargs):
        raise http_error()

    message.reply = broken
    assert await safe_reply(message, "hi") is False


@pytest.mark.asyncio
async def test_safe_send():
    healthy = FakeThread()
    broken = FakeThread(send_error=True)

    assert await safe_send(healthy, "hi") is True
    assert await safe_send(broken, "hi") is False
    assert healthy.sent == ["hi"]
