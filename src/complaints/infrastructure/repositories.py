"""
Complaint Infrastructure Repositories
======================================

SQLAlchemy implementation of the complaint repository and the mapping
between ORM rows and domain entities.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.complaints.application.services import IComplaintRepository
from src.complaints.domain import Complaint, StatusLogEntry
from src.complaints.infrastructure.models import ComplaintModel, StatusLogModel
from src.config import ComplaintStatus, Priority
from src.core import ResourceNotFoundException


# ========== Mapping ==========

def _priority(value: Optional[str]) -> Optional[Priority]:
    try:
        return Priority(value) if value else None
    except ValueError:
        return None


def _status(value: Optional[str]) -> Optional[ComplaintStatus]:
    return ComplaintStatus(value) if value else None


def log_entry_to_domain(model: StatusLogModel) -> StatusLogEntry:
    return StatusLogEntry(
        id=model.id,
        complaint_id=model.complaint_id,
        from_status=_status(model.from_status),
        to_status=ComplaintStatus(model.to_status),
        actor_id=model.actor_id,
        comment=model.comment,
        timestamp=model.timestamp,
    )


def log_entry_to_model(entry: StatusLogEntry) -> StatusLogModel:
    return StatusLogModel(
        complaint_id=entry.complaint_id,
        from_status=entry.from_status.value if entry.from_status else None,
        to_status=entry.to_status.value,
        actor_id=entry.actor_id,
        comment=entry.comment,
        timestamp=entry.timestamp,
    )


def complaint_to_domain(model: ComplaintModel, with_history: bool = True) -> Complaint:
    """
    Convert an ORM row into a Complaint.

    ``with_history`` must only be set when ``status_logs`` was eager-loaded.
    """
    return Complaint(
        id=model.id,
        type=model.type,
        status=ComplaintStatus(model.status),
        priority=_priority(model.priority),
        ward_id=model.ward_id,
        sub_zone_id=model.sub_zone_id,
        submitted_by_id=model.submitted_by_id,
        assigned_to_id=model.assigned_to_id,
        submitted_on=model.submitted_on,
        resolved_on=model.resolved_on,
        closed_on=model.closed_on,
        deadline=model.deadline,
        rating=model.rating,
        status_log=[log_entry_to_domain(m) for m in model.status_logs] if with_history else [],
    )


# ========== Repository ==========

class SQLAlchemyComplaintRepository(IComplaintRepository):
    """
    SQLAlchemy implementation of complaint repository.

    Handles persistence of Complaint entities using async SQLAlchemy. The
    caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _get_model(self, complaint_id: str, with_history: bool) -> Optional[ComplaintModel]:
        stmt = select(ComplaintModel).where(ComplaintModel.id == complaint_id)
        if with_history:
            stmt = stmt.options(selectinload(ComplaintModel.status_logs))
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get(self, complaint_id: str, with_history: bool = True) -> Optional[Complaint]:
        """Get complaint by ID."""
        model = await self._get_model(complaint_id, with_history)
        if model is None:
            return None
        return complaint_to_domain(model, with_history)

    async def add(self, complaint: Complaint) -> Complaint:
        """Create new complaint."""
        model = ComplaintModel(
            id=complaint.id,
            type=complaint.type,
            status=complaint.status.value,
            priority=complaint.priority.value if complaint.priority else None,
            ward_id=complaint.ward_id,
            sub_zone_id=complaint.sub_zone_id,
            submitted_by_id=complaint.submitted_by_id,
            assigned_to_id=complaint.assigned_to_id,
            submitted_on=complaint.submitted_on,
            resolved_on=complaint.resolved_on,
            closed_on=complaint.closed_on,
            deadline=complaint.deadline,
            rating=complaint.rating,
        )
        log_models = [log_entry_to_model(entry) for entry in complaint.status_log]
        model.status_logs = log_models

        self._session.add(model)
        await self._session.flush()

        for entry, log_model in zip(complaint.status_log, log_models):
            entry.id = log_model.id
        return complaint

    async def save(self, complaint: Complaint, new_entries: List[StatusLogEntry]) -> None:
        """Update lifecycle fields and append new log entries."""
        model = await self._get_model(complaint.id, with_history=True)
        if model is None:
            raise ResourceNotFoundException("Complaint", complaint.id)

        model.status = complaint.status.value
        model.resolved_on = complaint.resolved_on
        model.closed_on = complaint.closed_on
        model.assigned_to_id = complaint.assigned_to_id

        log_models = [log_entry_to_model(entry) for entry in new_entries]
        model.status_logs.extend(log_models)
        await self._session.flush()

        for entry, log_model in zip(new_entries, log_models):
            entry.id = log_model.id
