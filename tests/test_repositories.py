"""Tests for the SQLAlchemy repositories against a throwaway SQLite database."""

from __future__ import annotations

import json

import pytest
from sqlalchemy.exc import OperationalError

from src.complaints.application.services import ComplaintLifecycleService
from src.complaints.infrastructure.models import SubZoneModel, WardModel
from src.complaints.infrastructure.repositories import SQLAlchemyComplaintRepository
from src.config import ComplaintStatus as S, ConfigSource, LEGACY_TYPE_PREFIX
from src.core import ConfigUnavailableException, ValidationException
from src.reporting.domain import AggregationFilter
from src.reporting.infrastructure.repositories import SQLAlchemyReportRepository
from src.sla.application.services import ConfigCache, ConfigurationResolver
from src.sla.infrastructure.models import ComplaintTypeModel, SystemConfigModel
from src.sla.infrastructure.repositories import SQLAlchemyConfigStore
from tests.factories import closed_complaint, make_complaint, utc


async def _seed_regions(session_maker) -> None:
    async with session_maker() as session:
        session.add_all([
            WardModel(id="W1", name="Alpha"),
            WardModel(id="W2", name="Beta"),
            WardModel(id="W9", name="Retired", is_active=False),
            SubZoneModel(id="Z1", ward_id="W1", name="East"),
        ])
        await session.commit()


# -----------------------------------------------------------------------
# Complaint repository
# -----------------------------------------------------------------------


class TestComplaintRepository:
    """Round trip of complaints and their status logs."""

    async def test_add_and_get_with_history(self, session_maker) -> None:
        await _seed_regions(session_maker)
        async with session_maker() as session:
            repository = SQLAlchemyComplaintRepository(session)
            await repository.add(closed_complaint("C-1", utc(2024, 1, 1), utc(2024, 1, 2)))
            await session.commit()

        async with session_maker() as session:
            complaint = await SQLAlchemyComplaintRepository(session).get("C-1")
        assert complaint.status == S.CLOSED
        assert complaint.closed_on == utc(2024, 1, 2), "timestamps should come back as UTC"
        assert [e.to_status for e in complaint.status_log] == [S.ASSIGNED, S.IN_PROGRESS, S.RESOLVED, S.CLOSED]
        assert all(e.id is not None for e in complaint.status_log), "entries should have ids once stored"

    async def test_get_missing(self, session_maker) -> None:
        async with session_maker() as session:
            assert await SQLAlchemyComplaintRepository(session).get("nope") is None

    async def test_transition_persists(self, session_maker) -> None:
        await _seed_regions(session_maker)
        async with session_maker() as session:
            await SQLAlchemyComplaintRepository(session).add(
                closed_complaint("C-2", utc(2024, 1, 1), utc(2024, 1, 2))
            )
            await session.commit()

        async with session_maker() as session:
            service = ComplaintLifecycleService(SQLAlchemyComplaintRepository(session))
            await service.transition("C-2", S.REOPENED, actor_id="citizen", comment="still broken", at=utc(2024, 1, 3))
            history = await service.history("C-2")
            await session.commit()
        assert history.status_log[-1].to_status == S.REOPENED, "history in the same session should include the new entry"

        async with session_maker() as session:
            complaint = await SQLAlchemyComplaintRepository(session).get("C-2")
        assert complaint.status == S.REOPENED
        assert complaint.closed_on is None and complaint.resolved_on is None, "reopen clears completion"
        assert complaint.last_reopened_at == utc(2024, 1, 3)
        assert complaint.status_log[-1].comment == "still broken"


# -----------------------------------------------------------------------
# Report repository
# -----------------------------------------------------------------------


class TestReportRepository:
    """Bounded read queries."""

    async def _populate(self, session_maker) -> None:
        await _seed_regions(session_maker)
        async with session_maker() as session:
            repository = SQLAlchemyComplaintRepository(session)
            await repository.add(make_complaint("a", ward_id="W1", sub_zone_id="Z1", submitted_on=utc(2024, 1, 5)))
            await repository.add(make_complaint("b", type="Water Supply", ward_id="W2", submitted_on=utc(2024, 1, 6)))
            # submitted before the window, closed inside it
            await repository.add(closed_complaint("c", utc(2023, 12, 20), utc(2024, 1, 3), ward_id="W1"))
            await repository.add(make_complaint("d", ward_id="W1", submitted_on=utc(2023, 11, 1)))
            await session.commit()

    async def test_fetch_by_submission_or_closure(self, session_maker) -> None:
        await self._populate(session_maker)
        window = AggregationFilter(from_date=utc(2024, 1, 1), to_date=utc(2024, 1, 31))
        async with session_maker() as session:
            complaints = await SQLAlchemyReportRepository(session).fetch_complaints(window)
        assert sorted(c.id for c in complaints) == ["a", "b", "c"], "closures inside the window are fetched too"
        closed = next(c for c in complaints if c.id == "c")
        assert len(closed.status_log) == 4, "status logs should be eager-loaded"

    async def test_type_aliases(self, session_maker) -> None:
        await self._populate(session_maker)
        window = AggregationFilter(
            from_date=utc(2024, 1, 1), to_date=utc(2024, 1, 31),
            type_key="WATER_SUPPLY", type_aliases=("WATER_SUPPLY", "water supply"),
        )
        async with session_maker() as session:
            complaints = await SQLAlchemyReportRepository(session).fetch_complaints(window, with_history=False)
        assert sorted(c.id for c in complaints) == ["a", "b", "c"], "aliases match case-insensitively"

    async def test_grouped_counts(self, session_maker) -> None:
        await self._populate(session_maker)
        window = AggregationFilter(from_date=utc(2024, 1, 1), to_date=utc(2024, 1, 31))
        async with session_maker() as session:
            counts = await SQLAlchemyReportRepository(session).grouped_counts(window, ("ward", "type"))
        assert sorted(counts) == [("W1", "WATER_SUPPLY", 1), ("W2", "Water Supply", 1)], (
            "only submissions inside the window are grouped"
        )

    async def test_grouped_counts_rejects_unknown_dimension(self, session_maker) -> None:
        window = AggregationFilter(from_date=utc(2024, 1, 1), to_date=utc(2024, 1, 31))
        async with session_maker() as session:
            with pytest.raises(ValidationException):
                await SQLAlchemyReportRepository(session).grouped_counts(window, ("colour",))

    async def test_regions(self, session_maker) -> None:
        await _seed_regions(session_maker)
        async with session_maker() as session:
            repository = SQLAlchemyReportRepository(session)
            wards = await repository.list_wards()
            zones = await repository.list_sub_zones("W1")
        assert [w.id for w in wards] == ["W1", "W2"], "inactive wards are not listed"
        assert [z.name for z in zones] == ["East"]


# -----------------------------------------------------------------------
# Configuration store
# -----------------------------------------------------------------------


class TestSQLAlchemyConfigStore:
    """Structured catalog, legacy records and plain keys."""

    async def _populate(self, session_maker) -> None:
        async with session_maker() as session:
            session.add_all([
                ComplaintTypeModel(key="WATER_SUPPLY", name="Water Supply", sla_hours=24, priority="HIGH"),
                SystemConfigModel(
                    key=f"{LEGACY_TYPE_PREFIX}DRAINAGE",
                    value=json.dumps({"name": "Drainage", "slaHours": 36}),
                ),
                SystemConfigModel(
                    key=f"{LEGACY_TYPE_PREFIX}WATER_SUPPLY",
                    value=json.dumps({"name": "Old Water", "slaHours": 99}),
                ),
                SystemConfigModel(key="APP_NAME", value=json.dumps("Smart CMS")),
            ])
            await session.commit()

    async def test_catalog_order(self, session_maker) -> None:
        await self._populate(session_maker)
        store = SQLAlchemyConfigStore(session_maker)
        entries = await store.load_type_catalog()
        assert [e.key for e in entries] == ["WATER_SUPPLY", "DRAINAGE", "WATER_SUPPLY"], (
            "structured rows first, legacy rows second"
        )

    async def test_get(self, session_maker) -> None:
        await self._populate(session_maker)
        store = SQLAlchemyConfigStore(session_maker)
        assert await store.get("water supply") == 24, "structured entry shadows the legacy one"
        assert await store.get("DRAINAGE") == 36, "legacy types are readable by key"
        assert await store.get("APP_NAME") == "Smart CMS"
        assert await store.get("MISSING") is None

    async def test_upsert(self, session_maker) -> None:
        await self._populate(session_maker)
        store = SQLAlchemyConfigStore(session_maker)
        await store.upsert("WATER_SUPPLY", 12)
        await store.upsert("DRAINAGE", {"sla_hours": 48})
        await store.upsert("PARKS", {"name": "Parks", "sla_hours": 120, "priority": "low"})
        await store.upsert("COMPLAINT_ID_PREFIX", "KSC", description="id prefix")
        assert await store.get("WATER_SUPPLY") == 12
        assert await store.get("DRAINAGE") == 48, "legacy records are updated in place"
        assert await store.get("Parks") == 120, "a named mapping creates a structured type"
        assert await store.get("COMPLAINT_ID_PREFIX") == "KSC"

    @pytest.mark.parametrize("hours", [0, -4, "soon"])
    async def test_upsert_rejects_bad_hours(self, session_maker, hours) -> None:
        await self._populate(session_maker)
        with pytest.raises(ValidationException):
            await SQLAlchemyConfigStore(session_maker).upsert("WATER_SUPPLY", hours)

    async def test_database_failure_is_unavailable(self) -> None:
        def broken_session():
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        store = SQLAlchemyConfigStore(broken_session)
        with pytest.raises(ConfigUnavailableException):
            await store.get("WATER_SUPPLY")
        with pytest.raises(ConfigUnavailableException):
            await store.upsert("WATER_SUPPLY", 12)

    async def test_resolver_update_through_display_name(self, session_maker, seed, clock) -> None:
        await self._populate(session_maker)
        resolver = ConfigurationResolver(SQLAlchemyConfigStore(session_maker), seed, ConfigCache(clock=clock))
        before = await resolver.resolve("WATER_SUPPLY")
        assert (before.value, before.source) == (24, ConfigSource.STORE)

        await resolver.update("Water Supply", 48)

        after = await resolver.resolve("WATER_SUPPLY")
        assert (after.value, after.source) == (48, ConfigSource.STORE), (
            "the cached canonical key should not outlive a write made through the display name"
        )
