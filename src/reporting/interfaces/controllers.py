"""
Reporting Controllers (API Routes)
===================================

FastAPI routes for the analytics report and the heat-map grid.

Controllers are thin - they parse and scope the filter, then delegate to
application services.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import RowDimension, UserRole
from src.core import MalformedFilterException, ValidationException
from src.infrastructure.database import get_session
from src.reporting.application.dto import AggregateReportResponse, DistributionMatrixResponse
from src.reporting.application.filters import FilterNormalizer, apply_role_scope
from src.reporting.application.services import AggregationService, DistributionMatrixService
from src.reporting.domain import Actor, AggregationFilter
from src.reporting.infrastructure.repositories import SQLAlchemyReportRepository
from src.shared.infrastructure.logging import get_logger
from src.sla.application.services import SLAService
from src.sla.interfaces.controllers import get_sla_service

logger = get_logger(__name__)
router = APIRouter(prefix="/reports", tags=["Reports"])


# ========== Dependencies ==========

def get_actor(
    role: str = Header(..., alias="X-User-Role", description="ADMINISTRATOR, WARD_OFFICER, MAINTENANCE_TEAM or CITIZEN"),
    user_id: Optional[str] = Header(None, alias="X-User-Id"),
    ward_id: Optional[str] = Header(None, alias="X-Ward-Id"),
) -> Actor:
    """Caller identity forwarded by the authentication gateway."""
    try:
        user_role = UserRole(role.strip().upper())
    except ValueError:
        raise ValidationException(f"Unknown role '{role}'", {"header": "X-User-Role"})
    return Actor(role=user_role, user_id=user_id, ward_id=ward_id)


async def get_scoped_filter(
    from_: Optional[str] = Query(None, alias="from", description="ISO date/datetime; defaults to 30 days before `to`"),
    to: Optional[str] = Query(None, description="ISO date/datetime; a bare date means the end of that day"),
    ward: Optional[str] = Query(None, description="Ward id or `all`"),
    sub_zone: Optional[str] = Query(None, description="Sub-zone id or `all`"),
    type: Optional[str] = Query(None, description="Complaint type key, name or `all`"),
    complaint_status: Optional[str] = Query(None, alias="status", description="Complaint status or `all`"),
    priority: Optional[str] = Query(None, description="LOW, MEDIUM, HIGH, CRITICAL or `all`"),
    page: Optional[str] = Query(None, description="1-based page of the row listing"),
    limit: Optional[str] = Query(None, description="Rows per page"),
    actor: Actor = Depends(get_actor),
    sla_service: SLAService = Depends(get_sla_service),
) -> AggregationFilter:
    """Parse the query, then apply the caller's role scope on top."""
    normalizer = FilterNormalizer(catalog=await sla_service.catalog())
    parsed = normalizer.parse({
        "from": from_,
        "to": to,
        "ward": ward,
        "sub_zone": sub_zone,
        "type": type,
        "status": complaint_status,
        "priority": priority,
        "page": page,
        "limit": limit,
    })
    return apply_role_scope(parsed, actor)


async def get_report_repository(session: AsyncSession = Depends(get_session)) -> SQLAlchemyReportRepository:
    return SQLAlchemyReportRepository(session)


# ========== Route Handlers ==========

@router.get(
    "/analytics",
    response_model=AggregateReportResponse,
    summary="Get the analytics report",
    description="""
    Totals, SLA compliance, day-by-day trend, breakdowns and a comparison
    against the preceding period of equal length.

    **Role scope** (from `X-User-Role`): ward officers only see their ward
    (`X-Ward-Id`), maintenance teams their assignments and citizens their
    own complaints (`X-User-Id`). Only administrators get the ward
    breakdown.

    **Compliance** counts closures in the window whose closing instant is at
    or before their deadline; types without SLA hours are left out.

    Only `rows` is paginated; every aggregate covers the full filtered set.
    """,
    responses={422: {"description": "Malformed filter"}}
)
async def get_analytics(
    window: AggregationFilter = Depends(get_scoped_filter),
    repository: SQLAlchemyReportRepository = Depends(get_report_repository),
    sla_service: SLAService = Depends(get_sla_service),
):
    report = await AggregationService(repository, sla_service).aggregate(window)
    return AggregateReportResponse.model_validate(report)


@router.get(
    "/heatmap",
    response_model=DistributionMatrixResponse,
    summary="Get the ward x complaint-type heat-map",
    description="""
    Count grid of complaints per region and complaint type.

    Rows are all known wards, or the sub-zones of the ward when the request
    is scoped to a single ward. Columns are the observed complaint types,
    most frequent first, labelled with their display names.
    """,
    responses={422: {"description": "Malformed filter"}}
)
async def get_heatmap(
    rows: Optional[str] = Query(None, description="`region` or `sub_region`; inferred from the scope by default"),
    window: AggregationFilter = Depends(get_scoped_filter),
    repository: SQLAlchemyReportRepository = Depends(get_report_repository),
    sla_service: SLAService = Depends(get_sla_service),
):
    row_dimension = None
    if rows:
        try:
            row_dimension = RowDimension(rows.strip().lower())
        except ValueError:
            raise MalformedFilterException("rows", rows, "expected region or sub_region")

    grid = await DistributionMatrixService(repository, sla_service).build_matrix(window, row_dimension)
    return DistributionMatrixResponse.from_domain(grid)


# Export router for inclusion in main app
reports_router = router
