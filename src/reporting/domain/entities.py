"""
Reporting Domain Entities
==========================

Result objects produced by the aggregation engine and the distribution
matrix builder. Plain dataclasses; serialization lives in the DTO layer.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional

from src.config import RowDimension
from src.reporting.domain.value_objects import Region


@dataclass
class ComplaintRow:
    """One line of the paginated report listing."""
    id: str
    type: Optional[str]
    type_name: str
    status: str
    priority: Optional[str]
    ward_id: Optional[str]
    sub_zone_id: Optional[str]
    submitted_on: datetime
    resolved_on: Optional[datetime]
    closed_on: Optional[datetime]
    deadline: Optional[datetime]
    sla_status: str


@dataclass
class ReportSummary:
    total: int = 0
    active: int = 0
    resolved: int = 0
    pending: int = 0
    overdue: int = 0
    reopened: int = 0
    critical: int = 0
    resolution_rate: float = 0.0


@dataclass
class ComplianceSummary:
    """Closure-based SLA metrics of a window."""
    compliance: float = 0.0
    compliant_count: int = 0
    eligible_closed: int = 0
    total_closed: int = 0
    avg_resolution_days: float = 0.0
    warning_window_hours: float = 24.0


@dataclass
class TrendBucket:
    """Counts for one UTC calendar day."""
    date: date
    complaints: int = 0
    registered: int = 0
    assigned: int = 0
    in_progress: int = 0
    reopened: int = 0
    resolved: int = 0
    compliance: float = 0.0


@dataclass
class WardBreakdown:
    id: str
    name: str
    complaints: int = 0
    resolved: int = 0
    pending: int = 0
    avg_days: float = 0.0
    compliance: float = 0.0


@dataclass
class CategoryBreakdown:
    key: Optional[str]
    name: str
    count: int
    percentage: float
    avg_days: float
    color: str


@dataclass
class CountShare:
    name: str
    count: int
    percentage: float


@dataclass
class PeriodMetrics:
    total: int = 0
    resolved: int = 0
    sla_compliance: float = 0.0
    avg_resolution_days: float = 0.0


@dataclass
class PeriodComparison:
    """Current window against the equally long window before it."""
    current: PeriodMetrics
    previous: PeriodMetrics
    deltas: Dict[str, str] = field(default_factory=dict)


@dataclass
class Pagination:
    page: int
    page_size: int
    total_records: int
    total_pages: int


@dataclass
class AggregateReport:
    """Everything the analytics dashboard shows for one filter."""
    from_date: datetime
    to_date: datetime
    generated_at: datetime
    summary: ReportSummary
    sla: ComplianceSummary
    trends: List[TrendBucket]
    categories: List[CategoryBreakdown]
    priorities: List[CountShare]
    statuses: List[CountShare]
    comparison: PeriodComparison
    rows: List[ComplaintRow]
    pagination: Pagination
    # Only filled for callers with cross-region visibility
    wards: Optional[List[WardBreakdown]] = None


@dataclass
class MatrixColumn:
    key: Optional[str]
    label: str
    total: int


@dataclass
class DistributionMatrix:
    """
    Region x complaint-type count grid.

    ``matrix[r][c]`` is the number of complaints in ``rows[r]`` of type
    ``columns[c]``.
    """
    row_dimension: RowDimension
    rows: List[Region]
    columns: List[MatrixColumn]
    matrix: List[List[int]]

    @property
    def row_labels(self) -> List[str]:
        return [row.name for row in self.rows]

    @property
    def column_labels(self) -> List[str]:
        return [column.label for column in self.columns]

    @property
    def total(self) -> int:
        return sum(sum(cells) for cells in self.matrix)
