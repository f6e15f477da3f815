"""Builders and in-memory fakes shared by the test modules."""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from src.complaints.domain import Complaint, StatusLogEntry
from src.config import ComplaintStatus, Priority
from src.core import ConfigUnavailableException
from src.reporting.application.services import IReportRepository
from src.reporting.domain import AggregationFilter, Region
from src.sla.application.services import IConfigStore
from src.sla.domain import ComplaintTypeConfig, TypeCatalog, coerce_sla_hours


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def make_complaint(
    complaint_id: str = "C-1",
    type: Optional[str] = "WATER_SUPPLY",
    status: ComplaintStatus = ComplaintStatus.REGISTERED,
    submitted_on: datetime = utc(2024, 1, 1),
    ward_id: Optional[str] = "W1",
    priority: Optional[Priority] = Priority.MEDIUM,
    log: Iterable[Tuple[ComplaintStatus, datetime]] = (),
    **fields: Any,
) -> Complaint:
    """
    Build a complaint; ``log`` is a sequence of (to_status, timestamp) pairs
    chained from REGISTERED.
    """
    entries = []
    previous = ComplaintStatus.REGISTERED
    for to_status, at in log:
        entries.append(StatusLogEntry(
            complaint_id=complaint_id, from_status=previous, to_status=to_status, timestamp=at
        ))
        previous = to_status
    return Complaint(
        id=complaint_id,
        type=type,
        status=status,
        priority=priority,
        ward_id=ward_id,
        submitted_on=submitted_on,
        status_log=entries,
        **fields,
    )


def closed_complaint(
    complaint_id: str,
    submitted_on: datetime,
    closed_on: datetime,
    type: Optional[str] = "WATER_SUPPLY",
    **fields: Any,
) -> Complaint:
    return make_complaint(
        complaint_id,
        type=type,
        status=ComplaintStatus.CLOSED,
        submitted_on=submitted_on,
        resolved_on=closed_on,
        closed_on=closed_on,
        log=[
            (ComplaintStatus.ASSIGNED, submitted_on),
            (ComplaintStatus.IN_PROGRESS, submitted_on),
            (ComplaintStatus.RESOLVED, closed_on),
            (ComplaintStatus.CLOSED, closed_on),
        ],
        **fields,
    )


WATER = ComplaintTypeConfig(key="WATER_SUPPLY", name="Water Supply", sla_hours=24, priority=Priority.HIGH)
ROADS = ComplaintTypeConfig(key="ROAD_REPAIR", name="Road Repair", sla_hours=72, priority=Priority.MEDIUM)
NOISE = ComplaintTypeConfig(key="NOISE", name="Noise Pollution", sla_hours=None)


def catalog(*entries: ComplaintTypeConfig) -> TypeCatalog:
    return TypeCatalog.build(entries or (WATER, ROADS, NOISE))


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeConfigStore(IConfigStore):
    """In-memory configuration store that can be switched off."""

    def __init__(
        self,
        values: Optional[Dict[str, Any]] = None,
        types: Optional[List[ComplaintTypeConfig]] = None,
        available: bool = True,
    ):
        self.values = dict(values or {})
        self.types = list(types or [])
        self.available = available
        self.reads = 0
        self.writes: List[Tuple[str, Any]] = []

    def _check(self) -> None:
        if not self.available:
            raise ConfigUnavailableException()

    async def get(self, key: str) -> Optional[Any]:
        self._check()
        self.reads += 1
        entry = TypeCatalog.build(self.types).lookup(key)
        if entry is not None:
            return coerce_sla_hours(entry.sla_hours)
        return self.values.get(key)

    async def load_type_catalog(self) -> List[ComplaintTypeConfig]:
        self._check()
        self.reads += 1
        return list(self.types)

    async def upsert(self, key: str, value: Any, description: Optional[str] = None) -> None:
        self._check()
        self.writes.append((key, value))
        hours = value.get("sla_hours") if isinstance(value, dict) else value
        target = TypeCatalog.build(self.types).lookup(key)
        for index, entry in enumerate(self.types):
            if entry is target:
                self.types[index] = ComplaintTypeConfig(
                    key=entry.key, name=entry.name, sla_hours=hours, priority=entry.priority, id=entry.id
                )
                return
        if isinstance(value, dict) and value.get("name"):
            self.types.append(ComplaintTypeConfig(key=key, name=value["name"], sla_hours=hours))
            return
        self.values[key] = value


class InMemoryReportRepository(IReportRepository):
    """Report read side over a list of complaints."""

    def __init__(
        self,
        complaints: Sequence[Complaint] = (),
        wards: Sequence[Region] = (),
        sub_zones: Optional[Dict[str, List[Region]]] = None,
    ):
        self.complaints = list(complaints)
        self.wards = sorted(wards, key=lambda r: (r.name, r.id))
        self.sub_zones = sub_zones or {}
        self.fetches: List[AggregationFilter] = []

    @staticmethod
    def _matches(c: Complaint, window: AggregationFilter) -> bool:
        if window.ward_id and c.ward_id != window.ward_id:
            return False
        if window.sub_zone_id and c.sub_zone_id != window.sub_zone_id:
            return False
        if window.type_key:
            aliases = {a.lower() for a in (window.type_aliases or (window.type_key,))}
            if (c.type or "").lower() not in aliases:
                return False
        if window.status and c.status != window.status:
            return False
        if window.priority and c.priority != window.priority:
            return False
        if window.assigned_to_id and c.assigned_to_id != window.assigned_to_id:
            return False
        if window.submitted_by_id and c.submitted_by_id != window.submitted_by_id:
            return False
        return True

    async def fetch_complaints(self, window: AggregationFilter, with_history: bool = True) -> List[Complaint]:
        self.fetches.append(window)
        return [
            c for c in self.complaints
            if self._matches(c, window) and (window.contains(c.submitted_on) or window.contains(c.closed_on))
        ]

    async def grouped_counts(self, window: AggregationFilter, dimensions: Sequence[str]) -> List[Tuple]:
        attributes = {"status": "status", "ward": "ward_id", "sub_zone": "sub_zone_id", "type": "type"}
        counts: Dict[Tuple, int] = {}
        for c in self.complaints:
            if self._matches(c, window) and window.contains(c.submitted_on):
                key = tuple(
                    getattr(c, attributes[d]).value if d == "status" else getattr(c, attributes[d])
                    for d in dimensions
                )
                counts[key] = counts.get(key, 0) + 1
        return [key + (count,) for key, count in counts.items()]

    async def list_wards(self) -> List[Region]:
        return list(self.wards)

    async def list_sub_zones(self, ward_id: str) -> List[Region]:
        return sorted(self.sub_zones.get(ward_id, []), key=lambda r: (r.name, r.id))
