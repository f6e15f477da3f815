"""
SLA Value Objects
==================

Immutable value objects and pure calculations for the SLA domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, Optional, Tuple

from src.complaints.domain import Complaint
from src.config import ComplaintStatus, ConfigSource, Priority, SLAStatus, COMPLETED_STATUSES


def coerce_sla_hours(value: Any) -> Optional[float]:
    """
    Interpret ``value`` as SLA hours.

    Returns the hours only when they are a finite number greater than
    zero, otherwise None.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        hours = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(hours) or hours <= 0:
        return None
    return hours


class SLACalculator:
    """
    Pure functions for SLA calculations.

    Every call site (detail view, reports, heat-map) goes through these two
    functions so deadlines and classifications agree everywhere.
    """

    @staticmethod
    def start_instant(complaint: Complaint) -> datetime:
        """Most recent reopen, or the original submission."""
        return complaint.last_reopened_at or complaint.submitted_on

    @staticmethod
    def compute_deadline(complaint: Complaint, sla_hours: Any) -> Optional[datetime]:
        """
        Calculate the authoritative deadline of a complaint.

        Args:
            complaint: Complaint with its status log loaded
            sla_hours: Resolved SLA hours for the complaint's type, if any

        Returns:
            start + sla_hours when the hours are usable, otherwise the
            complaint's explicit deadline override, otherwise None.
        """
        hours = coerce_sla_hours(sla_hours)
        if hours is not None:
            return SLACalculator.start_instant(complaint) + timedelta(hours=hours)
        return complaint.deadline

    @staticmethod
    def classify(
        complaint: Complaint,
        deadline: Optional[datetime],
        now: datetime,
        warning_window: timedelta = timedelta(hours=24),
    ) -> SLAStatus:
        """
        Classify a complaint against its deadline.

        Rules, in order:
            1. no deadline -> N/A
            2. resolved/closed -> COMPLETED if finished at-or-before the
               deadline, else OVERDUE (independent of ``now``)
            3. active -> OVERDUE past the deadline, WARNING inside the
               warning window, else ON_TIME
        """
        if deadline is None:
            return SLAStatus.NOT_APPLICABLE

        if complaint.status in COMPLETED_STATUSES:
            finished = complaint.completed_at
            if finished is None:
                return SLAStatus.NOT_APPLICABLE
            return SLAStatus.COMPLETED if finished <= deadline else SLAStatus.OVERDUE

        if now > deadline:
            return SLAStatus.OVERDUE
        if deadline - now <= warning_window:
            return SLAStatus.WARNING
        return SLAStatus.ON_TIME

    @staticmethod
    def historical_status(status: SLAStatus) -> SLAStatus:
        """Historical views report a completed-on-time complaint as ON_TIME."""
        if status == SLAStatus.COMPLETED:
            return SLAStatus.ON_TIME
        return status

    @staticmethod
    def closed_within_sla(complaint: Complaint, sla_hours: Any) -> Optional[bool]:
        """
        Compliance verdict for a closed complaint.

        None when the complaint is not SLA-eligible: no usable SLA hours or
        no closure instant.
        """
        if coerce_sla_hours(sla_hours) is None or complaint.closed_on is None:
            return None
        deadline = SLACalculator.compute_deadline(complaint, sla_hours)
        return complaint.closed_on <= deadline


@dataclass(frozen=True)
class ResolvedConfig:
    """A configuration value together with the layer that supplied it."""
    key: str
    value: Any
    source: ConfigSource


@dataclass(frozen=True)
class ConfigCacheEntry:
    """
    Cached resolution of a configuration key.

    Expiry is judged by comparing the current time to ``fetched_at``.
    """
    key: str
    value: Any
    source: ConfigSource
    fetched_at: float

    def is_expired(self, now: float, ttl_seconds: float) -> bool:
        return now - self.fetched_at >= ttl_seconds


@dataclass(frozen=True)
class ComplaintTypeConfig:
    """One entry of the complaint-type catalog."""
    key: str
    name: str
    sla_hours: Optional[float] = None
    priority: Optional[Priority] = None
    id: Optional[str] = None

    @property
    def has_sla(self) -> bool:
        return coerce_sla_hours(self.sla_hours) is not None

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "sla_hours": self.sla_hours,
            "priority": self.priority.value if self.priority else None,
            "id": self.id,
        }


@dataclass(frozen=True)
class TypeCatalog:
    """
    Shared type-key resolution used by every report and detail view.

    Entries are consulted in the order given (structured catalog first,
    legacy keyed config second); the first entry claiming an alias wins.
    Aliases are the key, the id and the display name, matched
    case-insensitively.
    """

    entries: Tuple[ComplaintTypeConfig, ...] = ()
    _index: Dict[str, ComplaintTypeConfig] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def build(cls, entries: Iterable[ComplaintTypeConfig]) -> "TypeCatalog":
        entries = tuple(entries)
        index: Dict[str, ComplaintTypeConfig] = {}
        for entry in entries:
            for alias in (entry.key, entry.id, entry.name):
                if alias is None or alias == "":
                    continue
                index.setdefault(str(alias).casefold(), entry)
        return cls(entries=entries, _index=index)

    def lookup(self, type_key: Optional[str]) -> Optional[ComplaintTypeConfig]:
        if type_key is None or type_key == "":
            return None
        return self._index.get(str(type_key).casefold())

    def sla_hours(self, type_key: Optional[str]) -> Optional[float]:
        entry = self.lookup(type_key)
        return coerce_sla_hours(entry.sla_hours) if entry else None

    def display_name(self, type_key: Optional[str]) -> str:
        entry = self.lookup(type_key)
        if entry and entry.name:
            return entry.name
        return type_key or "Others"

    def default_priority(self, type_key: Optional[str]) -> Optional[Priority]:
        entry = self.lookup(type_key)
        return entry.priority if entry else None

    def canonical_key(self, alias: str) -> str:
        entry = self.lookup(alias)
        return entry.key if entry else alias

    def aliases(self, type_key: str) -> Tuple[str, ...]:
        """Every stored spelling that refers to the same type."""
        entry = self.lookup(type_key)
        if entry is None:
            return (type_key,)
        values = [entry.key, entry.name, entry.id, type_key]
        return tuple(dict.fromkeys(v for v in values if v))

    def effective_entries(self) -> Tuple[ComplaintTypeConfig, ...]:
        """Entries in order, minus those whose key an earlier entry already claims."""
        seen = set()
        result = []
        for entry in self.entries:
            folded = entry.key.casefold()
            if folded in seen:
                continue
            seen.add(folded)
            result.append(entry)
        return tuple(result)

    def __len__(self) -> int:
        return len(self.entries)
