"""
Reporting Application DTOs
===========================

Pydantic response models for the analytics and heat-map endpoints.

Models read the domain dataclasses directly (``from_attributes``).
"""

from datetime import date as Day, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.reporting.domain import DistributionMatrix


class _FromDomain(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ========== Analytics ==========

class ReportSummaryResponse(_FromDomain):
    total: int
    active: int
    resolved: int
    pending: int = Field(..., description="Active and not overdue")
    overdue: int
    reopened: int
    critical: int
    resolution_rate: float


class ComplianceSummaryResponse(_FromDomain):
    compliance: float = Field(..., description="% of SLA-eligible closures at or before their deadline")
    compliant_count: int
    eligible_closed: int
    total_closed: int
    avg_resolution_days: float
    warning_window_hours: float


class TrendBucketResponse(_FromDomain):
    date: Day
    complaints: int
    registered: int
    assigned: int
    in_progress: int
    reopened: int
    resolved: int
    compliance: float


class WardBreakdownResponse(_FromDomain):
    id: str
    name: str
    complaints: int
    resolved: int
    pending: int
    avg_days: float
    compliance: float


class CategoryBreakdownResponse(_FromDomain):
    key: Optional[str] = None
    name: str
    count: int
    percentage: float
    avg_days: float
    color: str


class CountShareResponse(_FromDomain):
    name: str
    count: int
    percentage: float


class PeriodMetricsResponse(_FromDomain):
    total: int
    resolved: int
    sla_compliance: float
    avg_resolution_days: float


class PeriodComparisonResponse(_FromDomain):
    current: PeriodMetricsResponse
    previous: PeriodMetricsResponse
    deltas: Dict[str, str]


class ComplaintRowResponse(_FromDomain):
    id: str
    type: Optional[str] = None
    type_name: str
    status: str
    priority: Optional[str] = None
    ward_id: Optional[str] = None
    sub_zone_id: Optional[str] = None
    submitted_on: datetime
    resolved_on: Optional[datetime] = None
    closed_on: Optional[datetime] = None
    deadline: Optional[datetime] = None
    sla_status: str


class PaginationResponse(_FromDomain):
    page: int
    page_size: int
    total_records: int
    total_pages: int


class AggregateReportResponse(_FromDomain):
    """Response model for the analytics report."""
    from_date: datetime
    to_date: datetime
    generated_at: datetime
    summary: ReportSummaryResponse
    sla: ComplianceSummaryResponse
    trends: List[TrendBucketResponse]
    wards: Optional[List[WardBreakdownResponse]] = Field(
        None, description="Only present for callers with cross-ward visibility"
    )
    categories: List[CategoryBreakdownResponse]
    priorities: List[CountShareResponse]
    statuses: List[CountShareResponse]
    comparison: PeriodComparisonResponse
    rows: List[ComplaintRowResponse]
    pagination: PaginationResponse


# ========== Heat-map ==========

class MatrixRowResponse(_FromDomain):
    id: str
    name: str


class MatrixColumnResponse(_FromDomain):
    key: Optional[str] = None
    label: str
    total: int


class DistributionMatrixResponse(BaseModel):
    """Response model for the heat-map grid."""
    row_dimension: str
    row_labels: List[str]
    column_labels: List[str]
    rows: List[MatrixRowResponse]
    columns: List[MatrixColumnResponse]
    matrix: List[List[int]]
    total: int

    @classmethod
    def from_domain(cls, grid: DistributionMatrix) -> "DistributionMatrixResponse":
        return cls(
            row_dimension=grid.row_dimension.value,
            row_labels=grid.row_labels,
            column_labels=grid.column_labels,
            rows=[MatrixRowResponse.model_validate(row) for row in grid.rows],
            columns=[MatrixColumnResponse.model_validate(column) for column in grid.columns],
            matrix=grid.matrix,
            total=grid.total,
        )
