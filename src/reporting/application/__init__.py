"""
Reporting Application Layer
============================

Contains:
- Filters: FilterNormalizer, apply_role_scope
- Services: AggregationService, DistributionMatrixService
- Repository interface: IReportRepository
"""

from src.reporting.application.filters import FilterNormalizer, apply_role_scope
from src.reporting.application.services import (
    AggregationService,
    DistributionMatrixService,
    IReportRepository,
)

__all__ = [
    "FilterNormalizer",
    "apply_role_scope",
    "AggregationService",
    "DistributionMatrixService",
    "IReportRepository",
]
