"""
Reporting Application Services
================================

Aggregation Engine and Distribution Matrix Builder.

Both fetch their records with a single bounded query, then compute
everything in memory through the shared ReportCalculator and TypeCatalog.
"""

from abc import ABC, abstractmethod
from collections import Counter, defaultdict
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from src.complaints.domain import Complaint
from src.config import ComplaintStatus, Priority, RowDimension, settings
from src.core import MalformedFilterException
from src.reporting.domain import (
    AggregateReport,
    AggregationFilter,
    DistributionMatrix,
    MatrixColumn,
    Region,
    ReportCalculator,
)
from src.shared.infrastructure.logging import get_logger, log_latency
from src.sla.application.services import SLAService

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class IReportRepository(ABC):
    """Read side of the complaint store used by reports."""

    @abstractmethod
    async def fetch_complaints(self, window: AggregationFilter, with_history: bool = True) -> List[Complaint]:
        """
        Complaints matching ``window``'s constraints that were submitted or
        closed inside its date range.
        """

    @abstractmethod
    async def grouped_counts(self, window: AggregationFilter, dimensions: Sequence[str]) -> List[Tuple]:
        """
        Counts of complaints submitted inside ``window`` grouped by one or
        two of ``status``, ``ward``, ``sub_zone``, ``type``.

        Returns tuples of the dimension values followed by the count.
        """

    @abstractmethod
    async def list_wards(self) -> List[Region]:
        """Active wards ordered by name."""

    @abstractmethod
    async def list_sub_zones(self, ward_id: str) -> List[Region]:
        """Sub-zones of a ward ordered by name."""


# ========== Services ==========

class AggregationService:
    """
    Builds the analytics report for a scoped filter.

    Aggregates always cover the whole filtered set; only ``rows`` is
    paginated.
    """

    def __init__(
        self,
        repository: IReportRepository,
        sla_service: SLAService,
        default_page_size: int = settings.default_page_size,
        now_provider: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._repository = repository
        self._sla = sla_service
        self._default_page_size = default_page_size
        self._now = now_provider

    async def aggregate(self, window: AggregationFilter, now: Optional[datetime] = None) -> AggregateReport:
        now = now or self._now()
        catalog = await self._sla.catalog()
        calculator = ReportCalculator(catalog, now, await self._sla.warning_window())
        previous = window.previous_period()

        with log_latency(logger, "aggregate_report", ward_id=window.ward_id, cross_region=window.cross_region):
            # One fetch spans both periods
            records = await self._repository.fetch_complaints(window.replace(from_date=previous.from_date))
            submitted, closed = self._partition(records, window)
            prev_submitted, prev_closed = self._partition(records, previous)

            wards = None
            if window.cross_region:
                known = await self._repository.list_wards()
                if window.ward_id:
                    known = [ward for ward in known if ward.id == window.ward_id]
                wards = calculator.ward_breakdown(known, submitted, closed)

            rows, pagination = calculator.page(submitted, window.page, window.limit or self._default_page_size)

            report = AggregateReport(
                from_date=window.from_date,
                to_date=window.to_date,
                generated_at=now,
                summary=calculator.summary(submitted),
                sla=calculator.sla_summary(closed),
                trends=calculator.trend(window, submitted, closed),
                wards=wards,
                categories=calculator.categories(submitted, closed),
                priorities=calculator.shares(
                    submitted, "priority",
                    [Priority.CRITICAL, Priority.HIGH, Priority.MEDIUM, Priority.LOW]
                ),
                statuses=calculator.shares(submitted, "status", list(ComplaintStatus)),
                comparison=calculator.comparison(
                    calculator.period_metrics(submitted, closed),
                    calculator.period_metrics(prev_submitted, prev_closed),
                ),
                rows=rows,
                pagination=pagination,
            )

        logger.info(
            "Aggregate report built",
            extra={
                "records_fetched": len(records),
                "submitted": len(submitted),
                "closed": len(closed),
                "trend_days": len(report.trends),
            }
        )
        return report

    @staticmethod
    def _partition(records: Sequence[Complaint], window: AggregationFilter) -> Tuple[List[Complaint], List[Complaint]]:
        """(submitted inside the window, closed inside the window)."""
        submitted = [c for c in records if window.contains(c.submitted_on)]
        closed = [
            c for c in records
            if c.status == ComplaintStatus.CLOSED and window.contains(c.closed_on)
        ]
        return submitted, closed


class DistributionMatrixService:
    """Builds region x complaint-type count grids for the heat-map."""

    def __init__(self, repository: IReportRepository, sla_service: SLAService):
        self._repository = repository
        self._sla = sla_service

    async def build_matrix(
        self,
        window: AggregationFilter,
        row_dimension: Optional[RowDimension] = None,
    ) -> DistributionMatrix:
        """
        Count complaints per (region, type).

        Rows are every known region, including ones without activity: wards,
        or the sub-zones of ``window.ward_id`` when scoped to one ward.
        Columns are the type keys observed in those rows, by descending
        frequency. Complaints outside every row are not counted.

        Raises:
            MalformedFilterException: sub-region rows without a single ward
        """
        if row_dimension is None:
            row_dimension = RowDimension.SUB_REGION if window.ward_id else RowDimension.REGION

        with log_latency(logger, "distribution_matrix", row_dimension=row_dimension.value):
            if row_dimension == RowDimension.SUB_REGION:
                if not window.ward_id:
                    raise MalformedFilterException("ward", None, "sub-region rows need a single ward")
                rows = await self._repository.list_sub_zones(window.ward_id)
                dimension = "sub_zone"
            else:
                rows = await self._repository.list_wards()
                dimension = "ward"

            catalog = await self._sla.catalog()
            counts = await self._repository.grouped_counts(window, (dimension, "type"))

            # Complaints outside the known regions (no sub-zone, inactive or unknown ward) have no row
            known = {row.id for row in rows}
            totals: Counter = Counter()
            cells: Dict[Tuple[Optional[str], Optional[str]], int] = defaultdict(int)
            for row_id, type_key, count in counts:
                if row_id not in known:
                    continue
                key = catalog.canonical_key(type_key) if type_key else None
                totals[key] += count
                cells[(row_id, key)] += count

            ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0] or ""))
            columns = [MatrixColumn(key=key, label=catalog.display_name(key), total=total) for key, total in ordered]
            matrix = [[cells.get((row.id, column.key), 0) for column in columns] for row in rows]

        return DistributionMatrix(row_dimension=row_dimension, rows=rows, columns=columns, matrix=matrix)
