"""Shared fixtures: configuration resolver wiring and a throwaway SQLite database."""

from __future__ import annotations

from datetime import datetime

import pytest

from src.infrastructure.database import close_database, create_tables, get_session_maker, init_database
from src.sla.application.services import ConfigCache, ConfigurationResolver, SLAService
from src.sla.infrastructure.repositories import StaticSeedProvider
from tests.factories import NOISE, ROADS, WATER, FakeClock, FakeConfigStore, utc


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> FakeConfigStore:
    return FakeConfigStore()


@pytest.fixture
def seed() -> StaticSeedProvider:
    return StaticSeedProvider(
        system_config={"SLA_WARNING_WINDOW_HOURS": 24, "APP_NAME": "complaints"},
        complaint_types=[WATER, ROADS, NOISE],
    )


@pytest.fixture
def cache(clock: FakeClock) -> ConfigCache:
    return ConfigCache(ttl_seconds=300, clock=clock)


@pytest.fixture
def resolver(store: FakeConfigStore, seed: StaticSeedProvider, cache: ConfigCache) -> ConfigurationResolver:
    return ConfigurationResolver(store=store, seed=seed, cache=cache)


@pytest.fixture
def now() -> datetime:
    return utc(2024, 1, 10, 12)


@pytest.fixture
def sla_service(resolver: ConfigurationResolver, now: datetime) -> SLAService:
    return SLAService(resolver, default_warning_hours=24, now_provider=lambda: now)


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'complaints.db'}"


@pytest.fixture
async def session_maker(sqlite_url: str):
    """Fresh schema on a file-backed SQLite database per test."""
    init_database(sqlite_url)
    await create_tables()
    yield get_session_maker()
    await close_database()
