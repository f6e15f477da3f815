"""
Complaints Application Layer
=============================

Contains:
- Services: ComplaintLifecycleService
- Repository interface: IComplaintRepository
- DTOs: request/response models for the lifecycle endpoints
"""

from src.complaints.application.dto import (
    TransitionRequest,
    StatusLogEntryResponse,
    ComplaintHistoryResponse,
)
from src.complaints.application.services import ComplaintLifecycleService, IComplaintRepository

__all__ = [
    "TransitionRequest",
    "StatusLogEntryResponse",
    "ComplaintHistoryResponse",
    "ComplaintLifecycleService",
    "IComplaintRepository",
]
