"""
SLA Domain Entities
====================

Result objects produced when a complaint is evaluated against its SLA.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from src.config import ConfigSource, SLAStatus


@dataclass
class SLAEvaluation:
    """
    SLA verdict for one complaint at one instant.

    ``status`` is the live classification; ``historical_status`` folds a
    completed-on-time complaint into ON_TIME for history views.
    """

    complaint_id: str
    status: SLAStatus
    historical_status: SLAStatus
    evaluated_at: datetime
    start: datetime
    deadline: Optional[datetime] = None
    sla_hours: Optional[float] = None
    sla_source: Optional[ConfigSource] = None

    @property
    def remaining_seconds(self) -> Optional[float]:
        """Seconds until the deadline (negative once past it)."""
        if self.deadline is None:
            return None
        return (self.deadline - self.evaluated_at).total_seconds()

    def to_dict(self) -> dict:
        return {
            "complaint_id": self.complaint_id,
            "status": self.status.value,
            "historical_status": self.historical_status.value,
            "evaluated_at": self.evaluated_at.isoformat(),
            "start": self.start.isoformat(),
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "remaining_seconds": self.remaining_seconds,
            "sla_hours": self.sla_hours,
            "sla_source": self.sla_source.value if self.sla_source else None,
        }
