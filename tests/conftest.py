"""Pytest configuration and fixtures."""

import pytest

from tallybot.services.ingestor import MessageIngestor
from tallybot.services.tally_store import TallyStore
from tests.fakes import FakeThread, FakeUser, utc


@pytest.fixture
def store():
    return TallyStore()


@pytest.fixture
def ingestor(store):
    return MessageIngestor(store, "UTC")


@pytest.fixture
def thread():
    """Thread opened on 2024-05-01 (UTC)."""
    return FakeThread(created_at=utc(2024, 5, 1, 9, 30))


@pytest.fixture
def alice():
    return FakeUser(111, name="alice")


@pytest.fixture
def bob():
    return FakeUser(222, name="bob")
