"""
Complaint Lifecycle
====================

The status graph and the state machine that enforces it.

Role permissions are decided by the caller; this module only knows which
statuses can follow which.
"""

from datetime import datetime, timezone
from typing import Dict, FrozenSet, Optional

from src.complaints.domain.entities import Complaint, StatusLogEntry, ensure_utc
from src.config import ComplaintStatus
from src.core import InvalidTransitionException

S = ComplaintStatus

TRANSITIONS: Dict[ComplaintStatus, FrozenSet[ComplaintStatus]] = {
    S.REGISTERED: frozenset({S.ASSIGNED}),
    S.ASSIGNED: frozenset({S.IN_PROGRESS}),
    S.IN_PROGRESS: frozenset({S.RESOLVED}),
    S.RESOLVED: frozenset({S.CLOSED, S.REOPENED}),
    S.CLOSED: frozenset({S.REOPENED}),
    S.REOPENED: frozenset({S.ASSIGNED, S.IN_PROGRESS}),
}


class LifecycleStateMachine:
    """
    Validates and records complaint status transitions.

    Stateless: the complaint passed in carries all state. Reopening has no
    cap; every reopen restarts the SLA clock.
    """

    transitions = TRANSITIONS

    @classmethod
    def allowed_targets(cls, status: ComplaintStatus) -> FrozenSet[ComplaintStatus]:
        return cls.transitions.get(status, frozenset())

    @classmethod
    def can_transition(cls, from_status: ComplaintStatus, to_status: ComplaintStatus) -> bool:
        return to_status in cls.allowed_targets(from_status)

    @classmethod
    def transition(
        cls,
        complaint: Complaint,
        to_status: ComplaintStatus,
        actor_id: Optional[str] = None,
        comment: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> StatusLogEntry:
        """
        Move ``complaint`` to ``to_status`` and append the log entry.

        Raises:
            InvalidTransitionException: target not reachable, ``at``
                precedes the latest recorded instant of the complaint, or a
                reopen would not move the SLA start forward. The complaint
                is left untouched.
        """
        to_status = ComplaintStatus(to_status)
        timestamp = ensure_utc(at) or datetime.now(timezone.utc)
        from_status = complaint.status

        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionException(complaint.id, from_status, to_status)

        latest = complaint.latest_event_at
        if timestamp < latest:
            raise InvalidTransitionException(
                complaint.id, from_status, to_status,
                reason=f"timestamp {timestamp.isoformat()} precedes recorded activity at {latest.isoformat()}"
            )

        # A reopen must move the SLA clock forward
        sla_start = complaint.last_reopened_at or complaint.submitted_on
        if to_status == S.REOPENED and timestamp <= sla_start:
            raise InvalidTransitionException(
                complaint.id, from_status, to_status,
                reason=f"reopen at {timestamp.isoformat()} does not follow SLA start {sla_start.isoformat()}"
            )

        entry = StatusLogEntry(
            complaint_id=complaint.id,
            from_status=from_status,
            to_status=to_status,
            timestamp=timestamp,
            actor_id=actor_id,
            comment=comment,
        )

        complaint.status = to_status
        if to_status == S.RESOLVED:
            complaint.resolved_on = timestamp
        elif to_status == S.CLOSED:
            complaint.closed_on = timestamp
        elif to_status == S.REOPENED:
            complaint.resolved_on = None
            complaint.closed_on = None

        complaint.status_log.append(entry)
        return entry
