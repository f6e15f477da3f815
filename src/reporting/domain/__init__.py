"""
Reporting Domain Layer
=======================

Contains:
- Value Objects: Actor, Region, AggregationFilter
- Entities: AggregateReport and its sections, DistributionMatrix
- Domain Services: ReportCalculator (pure aggregation)

No infrastructure dependencies.
"""

from src.reporting.domain.calculator import (
    ReportCalculator,
    average_resolution_days,
    category_color,
    percent_change,
    percentage,
)
from src.reporting.domain.entities import (
    AggregateReport,
    CategoryBreakdown,
    ComplaintRow,
    ComplianceSummary,
    CountShare,
    DistributionMatrix,
    MatrixColumn,
    Pagination,
    PeriodComparison,
    PeriodMetrics,
    ReportSummary,
    TrendBucket,
    WardBreakdown,
)
from src.reporting.domain.value_objects import Actor, AggregationFilter, Region

__all__ = [
    # Value Objects
    "Actor",
    "AggregationFilter",
    "Region",
    # Entities
    "AggregateReport",
    "CategoryBreakdown",
    "ComplaintRow",
    "ComplianceSummary",
    "CountShare",
    "DistributionMatrix",
    "MatrixColumn",
    "Pagination",
    "PeriodComparison",
    "PeriodMetrics",
    "ReportSummary",
    "TrendBucket",
    "WardBreakdown",
    # Domain Services
    "ReportCalculator",
    "average_resolution_days",
    "category_color",
    "percent_change",
    "percentage",
]
