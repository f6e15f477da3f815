"""
Complaints Domain Layer
========================

Contains:
- Entities: Complaint, StatusLogEntry
- Lifecycle: the status transition table and state machine

Pure Python, no infrastructure dependencies.
"""

from src.complaints.domain.entities import Complaint, StatusLogEntry, ensure_utc
from src.complaints.domain.lifecycle import LifecycleStateMachine, TRANSITIONS

__all__ = [
    "Complaint",
    "StatusLogEntry",
    "ensure_utc",
    "LifecycleStateMachine",
    "TRANSITIONS",
]
