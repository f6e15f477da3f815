"""
Complaint Domain Entities
==========================

Pure Python domain entities for complaint tracking.

These entities carry the lifecycle data the SLA engine reads and are free
of infrastructure concerns.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from src.config import ComplaintStatus, Priority, ACTIVE_STATUSES, COMPLETED_STATUSES


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class StatusLogEntry:
    """
    One recorded status change of a complaint.

    Entries are append-only; a complaint's log is ordered by timestamp.
    """

    complaint_id: str
    from_status: Optional[ComplaintStatus]
    to_status: ComplaintStatus
    timestamp: datetime
    actor_id: Optional[str] = None
    comment: Optional[str] = None
    id: Optional[int] = None

    def __post_init__(self):
        self.timestamp = ensure_utc(self.timestamp)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "complaint_id": self.complaint_id,
            "from_status": self.from_status.value if self.from_status else None,
            "to_status": self.to_status.value,
            "actor_id": self.actor_id,
            "comment": self.comment,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class Complaint:
    """
    Citizen-filed service complaint.

    ``resolved_on`` and ``closed_on`` are only ever set by a transition to
    RESOLVED / CLOSED and are cleared when the complaint is reopened.
    """

    # Core attributes
    id: str
    type: Optional[str]
    status: ComplaintStatus
    priority: Optional[Priority]
    ward_id: Optional[str]
    submitted_on: datetime

    # Optional region / ownership
    sub_zone_id: Optional[str] = None
    submitted_by_id: Optional[str] = None
    assigned_to_id: Optional[str] = None

    # Lifecycle timestamps
    resolved_on: Optional[datetime] = None
    closed_on: Optional[datetime] = None

    # Explicit deadline override and citizen feedback
    deadline: Optional[datetime] = None
    rating: Optional[float] = None

    status_log: List[StatusLogEntry] = field(default_factory=list)

    def __post_init__(self):
        self.submitted_on = ensure_utc(self.submitted_on)
        self.resolved_on = ensure_utc(self.resolved_on)
        self.closed_on = ensure_utc(self.closed_on)
        self.deadline = ensure_utc(self.deadline)
        self.status_log.sort(key=lambda entry: entry.timestamp)

    @property
    def is_active(self) -> bool:
        """Still in the resolution pipeline."""
        return self.status in ACTIVE_STATUSES

    @property
    def is_completed(self) -> bool:
        """Resolved or closed."""
        return self.status in COMPLETED_STATUSES

    @property
    def last_reopened_at(self) -> Optional[datetime]:
        """Timestamp of the most recent REOPENED transition, if any."""
        for entry in reversed(self.status_log):
            if entry.to_status == ComplaintStatus.REOPENED:
                return entry.timestamp
        return None

    @property
    def last_logged_at(self) -> Optional[datetime]:
        return self.status_log[-1].timestamp if self.status_log else None

    @property
    def latest_event_at(self) -> datetime:
        """Latest recorded instant: submission, closure fields or log entry."""
        instants = [self.submitted_on, self.resolved_on, self.closed_on, self.last_logged_at]
        return max(instant for instant in instants if instant is not None)

    @property
    def completed_at(self) -> Optional[datetime]:
        """Instant the complaint left the active pipeline, if it has."""
        if self.status == ComplaintStatus.CLOSED:
            return self.closed_on or self.resolved_on
        if self.status == ComplaintStatus.RESOLVED:
            return self.resolved_on or self.closed_on
        return None

    @property
    def resolution_days(self) -> Optional[int]:
        """Whole days from submission to closure, rounded up."""
        if self.closed_on is None or self.submitted_on is None:
            return None
        seconds = (self.closed_on - self.submitted_on).total_seconds()
        days, remainder = divmod(seconds, 86400)
        return int(days) + (1 if remainder > 0 else 0)
