"""Tests for live message ingestion."""

import pytest

from tallybot.services.ingestor import parse_value
from tests.fakes import FakeThread, FakeUser, http_error, utc

DAY = "2024-05-01"


@pytest.mark.parametrize(
    "text,expected",
    [
        ("3", 3.0),
        ("4.5", 4.5),
        ("-1", -1.0),
        ("+2", 2.0),
        (" 7 ", 7.0),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("3.0", 3.0),
    ],
)
def test_parse_value_accepts_numbers(text, expected):
    assert parse_value(text) == expected


@pytest.mark.parametrize(
    "text",
    [
        None, "", "   ", "hello", "12abc", "1,5", "1_000", "nan", "inf", "-inf", "1e999", "3 4",
        "✅ Recorded 3",
        # non-ASCII decimal digits: Arabic-Indic, fullwidth, Devanagari, mathematical
        "٣", "３", "१२", "𝟑", "1٫5",
    ],
)
def test_parse_value_rejects_everything_else(text):
    assert parse_value(text) is None


@pytest.mark.asyncio
async def test_worked_example(ingestor, store, thread, alice, bob):
    """Thread of 2024-05-01: "3", "4.5", "-1" by A, B, A."""
    first = thread.post(alice, "3")
    second = thread.post(bob, "4.5")
    third = thread.post(alice, "-1")
    for message in (first, second, third):
        await ingestor.on_message(message)

    assert store.thread_total(DAY, thread.id) == 6.5
    assert store.user_total(DAY, alice.id) == 2.0
    assert first.replies == ["✅ Recorded 3. Total for this thread on 2024-05-01: 3.0"]
    assert second.replies == ["✅ Recorded 4.5. Total for this thread on 2024-05-01: 7.5"]
    assert third.replies == ["✅ Recorded -1. Total for this thread on 2024-05-01: 6.5"]

    first.content = "3.0"
    await ingestor.on_message_edit(first)

    assert store.thread_total(DAY, thread.id) == 6.5
    assert len(first.replies) == 1


@pytest.mark.asyncio
async def test_edit_updates_value_silently(ingestor, store, thread, alice):
    message = thread.post(alice, "10")
    await ingestor.on_message(message)

    message.content = "12"
    await ingestor.on_message_edit(message)

    assert store.thread_total(DAY, thread.id) == 12.0
    assert len(message.replies) == 1


@pytest.mark.asyncio
async def test_edit_of_unseen_message_replies_once(ingestor, store, thread, alice):
    message = thread.post(alice, "hello")
    await ingestor.on_message(message)
    assert message.replies == []

    message.content = "5"
    await ingestor.on_message_edit(message)
    await ingestor.on_message_edit(message)

    assert message.replies == ["✅ Updated 5. Total for this thread on 2024-05-01: 5.0"]
    assert store.thread_total(DAY, thread.id) == 5.0


@pytest.mark.asyncio
async def test_edit_to_text_keeps_previous_value(ingestor, store, thread, alice):
    message = thread.post(alice, "5")
    await ingestor.on_message(message)

    message.content = "oops"
    await ingestor.on_message_edit(message)

    assert store.thread_total(DAY, thread.id) == 5.0


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["hello", "", "12abc"])
async def test_non_numeric_is_ignored(ingestor, store, thread, alice, body):
    message = thread.post(alice, body)

    assert await ingestor.on_message(message) is None

    assert message.replies == []
    assert store.get_entry(DAY, thread.id, message.id) is None


@pytest.mark.asyncio
async def test_bot_messages_are_ignored(ingestor, store, thread):
    message = thread.post(FakeUser(1, bot=True), "42")

    await ingestor.on_message(message)

    assert store.thread_total(DAY, thread.id) == 0.0
    assert message.replies == []


@pytest.mark.asyncio
async def test_delete_removes_exact_contribution(ingestor, store, thread, alice, bob):
    keep = thread.post(alice, "2")
    drop = thread.post(bob, "3.5")
    await ingestor.on_message(keep)
    await ingestor.on_message(drop)
    before = store.thread_total(DAY, thread.id)

    removed = ingestor.on_message_delete(thread.id, drop.id)

    assert removed.value == 3.5
    assert store.thread_total(DAY, thread.id) == before - 3.5
    assert drop.replies == ["✅ Recorded 3.5. Total for this thread on 2024-05-01: 5.5"]


def test_delete_in_unknown_thread_is_noop(ingestor):
    assert ingestor.on_message_delete(12345, 67890) is None


@pytest.mark.asyncio
async def test_messages_use_thread_day_not_message_time(ingestor, store, alice):
    # Thread opened late on April 30; messages arriving on May 1 stay on April 30
    thread = FakeThread(created_at=utc(2024, 4, 30, 23, 50))
    ingestor.on_thread_create(thread)

    await ingestor.on_message(thread.post(alice, "4"))

    assert store.thread_total("2024-04-30", thread.id) == 4.0
    assert store.day_total("2024-05-01") == 0.0


@pytest.mark.asyncio
async def test_reply_failure_keeps_entry(ingestor, store, thread, alice):
    message = thread.post(alice, "9")

    async def broken_reply(text, **kwargs):
        raise http_error("missing permissions")

    message.reply = broken_reply
    await ingestor.on_message(message)

    entry = store.get_entry(DAY, thread.id, message.id)
    assert entry.value == 9.0
    assert entry.acknowledged is True


def test_record_manual(ingestor, store, thread, alice):
    day, total = ingestor.record_manual(thread, 555, alice.id, 2.5)

    assert day == DAY
    assert total == 2.5
    assert store.get_entry(DAY, thread.id, 555).acknowledged is True


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["٣", "３", "१२", "𝟑"])
async def test_non_ascii_digits_are_ignored(ingestor, store, thread, alice, body):
    message = thread.post(alice, body)

    assert await ingestor.on_message(message) is None

    assert message.replies == []
    assert store.thread_total(DAY, thread.id) == 0.0
