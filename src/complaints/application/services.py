"""
Complaint Application Services
================================

Orchestrates lifecycle transitions and detail views over the complaint
repository.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.complaints.domain import Complaint, LifecycleStateMachine, StatusLogEntry
from src.config import ComplaintStatus
from src.core import InvalidTransitionException, ResourceNotFoundException
from src.shared.infrastructure.logging import get_logger
from src.sla.application.services import SLAService
from src.sla.domain import SLAEvaluation

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class IComplaintRepository(ABC):
    """Interface for complaint persistence."""

    @abstractmethod
    async def get(self, complaint_id: str, with_history: bool = True) -> Optional[Complaint]:
        """Load one complaint, optionally with its ordered status log."""

    @abstractmethod
    async def add(self, complaint: Complaint) -> Complaint:
        """Persist a new complaint together with any log entries it carries."""

    @abstractmethod
    async def save(self, complaint: Complaint, new_entries: List[StatusLogEntry]) -> None:
        """Persist status/timestamp changes and append ``new_entries``."""


# ========== Services ==========

class ComplaintLifecycleService:
    """
    Applies status transitions to stored complaints.

    The complaint and its new log entry are written in the caller's unit of
    work; a rejected transition writes nothing.
    """

    def __init__(self, repository: IComplaintRepository):
        self._repository = repository

    async def get_complaint(self, complaint_id: str) -> Complaint:
        complaint = await self._repository.get(complaint_id, with_history=True)
        if complaint is None:
            raise ResourceNotFoundException("Complaint", complaint_id)
        return complaint

    async def transition(
        self,
        complaint_id: str,
        to_status: ComplaintStatus,
        actor_id: Optional[str] = None,
        comment: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> StatusLogEntry:
        """
        Move a complaint to ``to_status``.

        Raises:
            ResourceNotFoundException: unknown complaint
            InvalidTransitionException: status not reachable
        """
        complaint = await self.get_complaint(complaint_id)

        try:
            entry = LifecycleStateMachine.transition(
                complaint, to_status, actor_id=actor_id, comment=comment, at=at
            )
        except InvalidTransitionException as e:
            logger.warning(
                "Transition rejected",
                extra={
                    "complaint_id": complaint_id,
                    "from_status": e.from_status,
                    "to_status": e.to_status,
                    "actor_id": actor_id,
                    "reason": e.message,
                }
            )
            raise

        await self._repository.save(complaint, [entry])

        logger.info(
            "Complaint transitioned",
            extra={
                "complaint_id": complaint_id,
                "from_status": entry.from_status.value if entry.from_status else None,
                "to_status": entry.to_status.value,
                "actor_id": actor_id,
            }
        )
        return entry

    async def history(self, complaint_id: str) -> Complaint:
        """Complaint with its status log, oldest entry first."""
        return await self.get_complaint(complaint_id)

    async def evaluate_sla(
        self,
        complaint_id: str,
        sla_service: SLAService,
        now: Optional[datetime] = None,
    ) -> SLAEvaluation:
        complaint = await self.get_complaint(complaint_id)
        return await sla_service.evaluate(complaint, now)
