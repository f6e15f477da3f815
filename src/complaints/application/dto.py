"""
Complaint Application DTOs
===========================

Pydantic request/response models for the complaint lifecycle endpoints.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from src.complaints.domain import Complaint, StatusLogEntry
from src.config import ComplaintStatus


# ========== Type Aliases for Literals ==========
ComplaintStatusStr = Literal["REGISTERED", "ASSIGNED", "IN_PROGRESS", "RESOLVED", "CLOSED", "REOPENED"]


# ========== Request DTOs ==========

class TransitionRequest(BaseModel):
    """Request model for a status transition."""
    to_status: ComplaintStatusStr = Field(..., description="Target status")
    comment: Optional[str] = Field(None, max_length=2000, description="Optional note for the log")
    at: Optional[datetime] = Field(None, description="Transition instant; defaults to now")

    @field_validator("to_status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        """Accept any case and space/dash separators."""
        if isinstance(v, str):
            return v.strip().upper().replace("-", "_").replace(" ", "_")
        return v

    def target(self) -> ComplaintStatus:
        return ComplaintStatus(self.to_status)


# ========== Response DTOs ==========

class StatusLogEntryResponse(BaseModel):
    """One entry of a complaint's status log."""
    id: Optional[int] = None
    complaint_id: str
    from_status: Optional[ComplaintStatusStr] = None
    to_status: ComplaintStatusStr
    actor_id: Optional[str] = None
    comment: Optional[str] = None
    timestamp: datetime

    @classmethod
    def from_domain(cls, entry: StatusLogEntry) -> "StatusLogEntryResponse":
        return cls(**entry.to_dict())


class ComplaintHistoryResponse(BaseModel):
    """Ordered status log of a complaint."""
    complaint_id: str
    status: ComplaintStatusStr
    resolved_on: Optional[datetime] = None
    closed_on: Optional[datetime] = None
    entries: List[StatusLogEntryResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, complaint: Complaint) -> "ComplaintHistoryResponse":
        return cls(
            complaint_id=complaint.id,
            status=complaint.status.value,
            resolved_on=complaint.resolved_on,
            closed_on=complaint.closed_on,
            entries=[StatusLogEntryResponse.from_domain(e) for e in complaint.status_log],
        )
