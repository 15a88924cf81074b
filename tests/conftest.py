"""Shared test fixtures."""

from datetime import UTC, datetime

import pytest

from healthyai.chat.store import SessionStore
from healthyai.knowledge.store import KnowledgeStore
from healthyai.storage import MemoryStorage


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
async def sessions(storage: MemoryStorage) -> SessionStore:
    """A loaded SessionStore on empty in-memory storage."""
    store = SessionStore(storage)
    await store.load()
    return store


@pytest.fixture
async def knowledge(storage: MemoryStorage) -> KnowledgeStore:
    """A loaded KnowledgeStore seeded with the starter entries."""
    store = KnowledgeStore(storage)
    await store.load()
    return store


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 6, 15, 12, 0, tzinfo=UTC)
