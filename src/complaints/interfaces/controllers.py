"""
Complaint Controllers (API Routes)
===================================

FastAPI routes for complaint lifecycle transitions and detail views.

Controllers are thin - they delegate to application services.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.complaints.application.dto import (
    ComplaintHistoryResponse,
    StatusLogEntryResponse,
    TransitionRequest,
)
from src.complaints.application.services import ComplaintLifecycleService
from src.complaints.infrastructure.repositories import SQLAlchemyComplaintRepository
from src.infrastructure.database import get_session
from src.shared.infrastructure.logging import get_logger
from src.sla.application.dto import SLAEvaluationResponse
from src.sla.application.services import SLAService
from src.sla.interfaces.controllers import get_sla_service

logger = get_logger(__name__)
router = APIRouter(prefix="/complaints", tags=["Complaints"])


# ========== Example payloads for Swagger ==========

TRANSITION_RESPONSE_EXAMPLE = {
    "id": 42,
    "complaint_id": "KSC-0001",
    "from_status": "RESOLVED",
    "to_status": "REOPENED",
    "actor_id": "user-7",
    "comment": "Leak is back",
    "timestamp": "2024-01-02T12:00:00+00:00"
}

SLA_RESPONSE_EXAMPLE = {
    "complaint_id": "KSC-0001",
    "status": "WARNING",
    "historical_status": "WARNING",
    "evaluated_at": "2024-01-04T00:00:00+00:00",
    "start": "2024-01-02T12:00:00+00:00",
    "deadline": "2024-01-04T12:00:00+00:00",
    "remaining_seconds": 43200.0,
    "sla_hours": 48.0,
    "sla_source": "store"
}


# ========== Dependencies ==========

async def get_lifecycle_service(
    session: AsyncSession = Depends(get_session)
) -> ComplaintLifecycleService:
    """Get lifecycle service instance."""
    return ComplaintLifecycleService(SQLAlchemyComplaintRepository(session))


# ========== Route Handlers ==========

@router.post(
    "/{complaint_id}/transitions",
    response_model=StatusLogEntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Change a complaint's status",
    description="""
    Validate and record a status transition.

    **Status graph**:
    - REGISTERED -> ASSIGNED -> IN_PROGRESS -> RESOLVED -> CLOSED
    - RESOLVED / CLOSED -> REOPENED
    - REOPENED -> ASSIGNED / IN_PROGRESS

    Reopening restarts the SLA clock. Unreachable targets are rejected with
    409 and leave the complaint unchanged.
    """,
    responses={
        201: {"content": {"application/json": {"example": TRANSITION_RESPONSE_EXAMPLE}}},
        404: {"description": "Complaint not found"},
        409: {"description": "Transition not permitted"},
    }
)
async def transition_complaint(
    complaint_id: str,
    request: TransitionRequest,
    actor_id: Optional[str] = Header(None, alias="X-User-Id"),
    service: ComplaintLifecycleService = Depends(get_lifecycle_service)
):
    entry = await service.transition(
        complaint_id,
        request.target(),
        actor_id=actor_id,
        comment=request.comment,
        at=request.at,
    )
    return StatusLogEntryResponse.from_domain(entry)


@router.get(
    "/{complaint_id}/history",
    response_model=ComplaintHistoryResponse,
    summary="Get a complaint's status history",
    responses={404: {"description": "Complaint not found"}}
)
async def get_complaint_history(
    complaint_id: str,
    service: ComplaintLifecycleService = Depends(get_lifecycle_service)
):
    complaint = await service.history(complaint_id)
    return ComplaintHistoryResponse.from_domain(complaint)


@router.get(
    "/{complaint_id}/sla",
    response_model=SLAEvaluationResponse,
    summary="Get a complaint's SLA status",
    description="""
    Deadline and classification of one complaint.

    The deadline starts at the latest reopen (or submission) and adds the
    type's SLA hours; without SLA hours the complaint's own deadline is used,
    and without either the status is `N/A`.
    """,
    responses={
        200: {"content": {"application/json": {"example": SLA_RESPONSE_EXAMPLE}}},
        404: {"description": "Complaint not found"},
    }
)
async def get_complaint_sla(
    complaint_id: str,
    service: ComplaintLifecycleService = Depends(get_lifecycle_service),
    sla_service: SLAService = Depends(get_sla_service)
):
    evaluation = await service.evaluate_sla(complaint_id, sla_service)
    return SLAEvaluationResponse.from_domain(evaluation)


# Export router for inclusion in main app
complaints_router = router
