"""Shared fixtures. Fake port implementations live in fakes.py."""

import pytest
from fakes import FakeArtistRepository, FakeCatalogStore, FakeClock

from cratekeeper.application.cache import CacheRegistry
from cratekeeper.infrastructure.events import InMemoryEventPublisher


@pytest.fixture
def catalog() -> FakeCatalogStore:
    """Empty in-memory catalog."""
    return FakeCatalogStore()


@pytest.fixture
def events() -> InMemoryEventPublisher:
    """Event publisher that keeps every published event."""
    return InMemoryEventPublisher(keep_history=True)


@pytest.fixture
def clock() -> FakeClock:
    """Controllable cache clock."""
    return FakeClock()


@pytest.fixture
def cache_registry(clock: FakeClock) -> CacheRegistry:
    """Cache registry driven by the fake clock."""
    return CacheRegistry(clock=clock)


@pytest.fixture
def artist_repository() -> FakeArtistRepository:
    """Empty in-memory artist repository."""
    return FakeArtistRepository()
