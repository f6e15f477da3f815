"""
Reporting Infrastructure Repositories
======================================

SQLAlchemy read queries behind the report engine.

Each operation issues one bounded statement (plus one batched eager-load
for status logs); nothing is queried per row.
"""

from typing import List, Sequence, Tuple

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.complaints.domain import Complaint
from src.complaints.infrastructure.models import ComplaintModel, SubZoneModel, WardModel
from src.complaints.infrastructure.repositories import complaint_to_domain
from src.core import ValidationException
from src.reporting.application.services import IReportRepository
from src.reporting.domain import AggregationFilter, Region

_DIMENSIONS = {
    "status": ComplaintModel.status,
    "ward": ComplaintModel.ward_id,
    "sub_zone": ComplaintModel.sub_zone_id,
    "type": ComplaintModel.type,
}


def _constraints(window: AggregationFilter) -> list:
    """Non-temporal predicates of a filter."""
    conditions = []
    if window.ward_id:
        conditions.append(ComplaintModel.ward_id == window.ward_id)
    if window.sub_zone_id:
        conditions.append(ComplaintModel.sub_zone_id == window.sub_zone_id)
    if window.type_key:
        aliases = {a.lower() for a in (window.type_aliases or (window.type_key,))}
        conditions.append(func.lower(ComplaintModel.type).in_(sorted(aliases)))
    if window.status:
        conditions.append(ComplaintModel.status == window.status.value)
    if window.priority:
        conditions.append(ComplaintModel.priority == window.priority.value)
    if window.assigned_to_id:
        conditions.append(ComplaintModel.assigned_to_id == window.assigned_to_id)
    if window.submitted_by_id:
        conditions.append(ComplaintModel.submitted_by_id == window.submitted_by_id)
    return conditions


class SQLAlchemyReportRepository(IReportRepository):
    """SQLAlchemy implementation of the report read side."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def fetch_complaints(self, window: AggregationFilter, with_history: bool = True) -> List[Complaint]:
        """Complaints submitted or closed inside the window."""
        stmt = select(ComplaintModel).where(
            and_(
                *_constraints(window),
                or_(
                    ComplaintModel.submitted_on.between(window.from_date, window.to_date),
                    ComplaintModel.closed_on.between(window.from_date, window.to_date),
                ),
            )
        )
        if with_history:
            stmt = stmt.options(selectinload(ComplaintModel.status_logs))

        result = await self._session.execute(stmt)
        return [complaint_to_domain(model, with_history) for model in result.scalars().all()]

    async def grouped_counts(self, window: AggregationFilter, dimensions: Sequence[str]) -> List[Tuple]:
        if not 1 <= len(dimensions) <= 2 or any(d not in _DIMENSIONS for d in dimensions):
            raise ValidationException(
                f"grouped_counts takes one or two of {sorted(_DIMENSIONS)}",
                {"dimensions": list(dimensions)}
            )
        columns = [_DIMENSIONS[d] for d in dimensions]

        stmt = (
            select(*columns, func.count(ComplaintModel.id))
            .where(
                *_constraints(window),
                ComplaintModel.submitted_on.between(window.from_date, window.to_date),
            )
            .group_by(*columns)
        )
        result = await self._session.execute(stmt)
        return [tuple(row) for row in result.all()]

    async def list_wards(self) -> List[Region]:
        stmt = (
            select(WardModel.id, WardModel.name)
            .where(WardModel.is_active.is_(True))
            .order_by(WardModel.name, WardModel.id)
        )
        result = await self._session.execute(stmt)
        return [Region(id=row.id, name=row.name) for row in result.all()]

    async def list_sub_zones(self, ward_id: str) -> List[Region]:
        stmt = (
            select(SubZoneModel.id, SubZoneModel.name)
            .where(SubZoneModel.ward_id == ward_id)
            .order_by(SubZoneModel.name, SubZoneModel.id)
        )
        result = await self._session.execute(stmt)
        return [Region(id=row.id, name=row.name) for row in result.all()]
