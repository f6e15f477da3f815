"""
Reporting Value Objects
========================

Immutable inputs of the report engine: who is asking (Actor), what they
asked for (AggregationFilter) and the regions a matrix is drawn over.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from src.config import ComplaintStatus, Priority, UserRole


@dataclass(frozen=True)
class Actor:
    """Caller identity as supplied by the authentication collaborator."""
    role: UserRole
    user_id: Optional[str] = None
    ward_id: Optional[str] = None

    @property
    def has_cross_region_visibility(self) -> bool:
        return self.role == UserRole.ADMINISTRATOR


@dataclass(frozen=True)
class Region:
    """A ward or sub-zone row of a distribution matrix."""
    id: str
    name: str


@dataclass(frozen=True)
class AggregationFilter:
    """
    Normalized, immutable report filter.

    The window is inclusive on both ends and always UTC. Role scoping
    produces a new filter through ``replace``; it never mutates one.
    """

    from_date: datetime
    to_date: datetime
    ward_id: Optional[str] = None
    sub_zone_id: Optional[str] = None
    type_key: Optional[str] = None
    # Every stored spelling of ``type_key`` (key, name, id)
    type_aliases: Tuple[str, ...] = ()
    status: Optional[ComplaintStatus] = None
    priority: Optional[Priority] = None
    assigned_to_id: Optional[str] = None
    submitted_by_id: Optional[str] = None
    cross_region: bool = True
    page: int = 1
    limit: Optional[int] = None

    def replace(self, **changes) -> "AggregationFilter":
        return replace(self, **changes)

    @property
    def span(self) -> timedelta:
        return self.to_date - self.from_date

    def contains(self, instant: Optional[datetime]) -> bool:
        return instant is not None and self.from_date <= instant <= self.to_date

    def previous_period(self) -> "AggregationFilter":
        """The equally long window ending just before ``from_date``."""
        prev_to = self.from_date - timedelta(microseconds=1)
        return self.replace(from_date=prev_to - self.span, to_date=prev_to)

    def days(self) -> List[date]:
        """Every UTC calendar day of the window, inclusive."""
        first, last = self.from_date.date(), self.to_date.date()
        return [first + timedelta(days=i) for i in range((last - first).days + 1)]
