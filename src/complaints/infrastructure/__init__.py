"""
Complaints Infrastructure Layer
================================

- Models: wards, sub-zones, complaints, status logs
- Repositories: SQLAlchemy complaint repository and row mapping
"""

from src.complaints.infrastructure.models import (
    WardModel,
    SubZoneModel,
    ComplaintModel,
    StatusLogModel,
)
from src.complaints.infrastructure.repositories import (
    SQLAlchemyComplaintRepository,
    complaint_to_domain,
)

__all__ = [
    "WardModel",
    "SubZoneModel",
    "ComplaintModel",
    "StatusLogModel",
    "SQLAlchemyComplaintRepository",
    "complaint_to_domain",
]
