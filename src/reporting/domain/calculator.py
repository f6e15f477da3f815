"""
Report Calculator
==================

Pure, synchronous aggregation over an already-fetched complaint set.

Every metric is a total function: a complaint missing an optional field is
skipped from the metric that needs it, never allowed to abort the report.
"""

import math
from collections import Counter, defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from src.complaints.domain import Complaint
from src.config import ComplaintStatus, Priority, SLAStatus
from src.reporting.domain.entities import (
    CategoryBreakdown,
    ComplaintRow,
    ComplianceSummary,
    CountShare,
    Pagination,
    PeriodComparison,
    PeriodMetrics,
    ReportSummary,
    TrendBucket,
    WardBreakdown,
)
from src.reporting.domain.value_objects import AggregationFilter, Region
from src.sla.domain import SLACalculator, TypeCatalog


def percentage(part: float, whole: float) -> float:
    """part / whole as a percentage rounded to one decimal; 0 when whole is 0."""
    if not whole:
        return 0.0
    return round(part / whole * 100, 1)


def percent_change(current: float, previous: float) -> str:
    """Signed change such as ``+12.5%``; ``+100%`` / ``0%`` when previous is 0."""
    if not previous:
        return "+100%" if current > 0 else "0%"
    change = (current - previous) / previous * 100
    sign = "+" if change >= 0 else "-"
    return f"{sign}{abs(change):.1f}%"


def category_color(index: int) -> str:
    """Golden-angle hue spacing keeps neighbouring categories distinct."""
    return f"hsl({(index * 137.5) % 360:g}, 70%, 50%)"


def average_resolution_days(complaints: Iterable[Complaint]) -> float:
    """Mean of per-complaint whole days to closure, one decimal."""
    samples = [c.resolution_days for c in complaints if c.resolution_days is not None]
    if not samples:
        return 0.0
    return round(sum(samples) / len(samples), 1)


class ReportCalculator:
    """
    Computes report sections for one request.

    Bound to the resolved type catalog, the evaluation instant and the
    warning window so that every section classifies a complaint the same
    way. Classifications are memoized per complaint id.
    """

    def __init__(self, catalog: TypeCatalog, now: datetime, warning_window: timedelta):
        self.catalog = catalog
        self.now = now
        self.warning_window = warning_window
        self._evaluations: Dict[str, Tuple[Optional[datetime], SLAStatus]] = {}

    # ---- per-complaint ----

    def evaluate(self, complaint: Complaint) -> Tuple[Optional[datetime], SLAStatus]:
        cached = self._evaluations.get(complaint.id)
        if cached is None:
            deadline = SLACalculator.compute_deadline(complaint, self.catalog.sla_hours(complaint.type))
            status = SLACalculator.classify(complaint, deadline, self.now, self.warning_window)
            cached = self._evaluations[complaint.id] = (deadline, status)
        return cached

    def is_overdue(self, complaint: Complaint) -> bool:
        return complaint.is_active and self.evaluate(complaint)[1] == SLAStatus.OVERDUE

    def compliance(self, closed: Iterable[Complaint]) -> Tuple[float, int, int]:
        """
        (percentage, compliant, eligible) over closed complaints.

        Complaints whose type has no resolvable SLA hours are left out of
        both counts.
        """
        compliant = eligible = 0
        for complaint in closed:
            verdict = SLACalculator.closed_within_sla(complaint, self.catalog.sla_hours(complaint.type))
            if verdict is None:
                continue
            eligible += 1
            if verdict:
                compliant += 1
        return percentage(compliant, eligible), compliant, eligible

    # ---- sections ----

    def summary(self, submitted: Sequence[Complaint]) -> ReportSummary:
        total = len(submitted)
        active = [c for c in submitted if c.is_active]
        overdue = sum(1 for c in active if self.is_overdue(c))
        resolved = sum(1 for c in submitted if c.is_completed)
        return ReportSummary(
            total=total,
            active=len(active),
            resolved=resolved,
            pending=len(active) - overdue,
            overdue=overdue,
            reopened=sum(1 for c in submitted if c.status == ComplaintStatus.REOPENED),
            critical=sum(1 for c in submitted if c.priority == Priority.CRITICAL),
            resolution_rate=percentage(resolved, total),
        )

    def sla_summary(self, closed: Sequence[Complaint]) -> ComplianceSummary:
        rate, compliant, eligible = self.compliance(closed)
        return ComplianceSummary(
            compliance=rate,
            compliant_count=compliant,
            eligible_closed=eligible,
            total_closed=len(closed),
            avg_resolution_days=average_resolution_days(closed),
            warning_window_hours=self.warning_window.total_seconds() / 3600,
        )

    def trend(
        self,
        window: AggregationFilter,
        submitted: Sequence[Complaint],
        closed: Sequence[Complaint],
    ) -> List[TrendBucket]:
        """One bucket per UTC day of the window, zero-filled."""
        buckets = {day: TrendBucket(date=day) for day in window.days()}
        closures_by_day: Dict[date, List[Complaint]] = defaultdict(list)

        status_fields = {
            ComplaintStatus.REGISTERED: "registered",
            ComplaintStatus.ASSIGNED: "assigned",
            ComplaintStatus.IN_PROGRESS: "in_progress",
            ComplaintStatus.REOPENED: "reopened",
        }

        for complaint in submitted:
            bucket = buckets.get(complaint.submitted_on.date())
            if bucket is None:
                continue
            bucket.complaints += 1
            name = status_fields.get(complaint.status)
            if name:
                setattr(bucket, name, getattr(bucket, name) + 1)

        for complaint in closed:
            day = complaint.closed_on.date()
            if day in buckets:
                buckets[day].resolved += 1
                closures_by_day[day].append(complaint)

        for day, complaints in closures_by_day.items():
            buckets[day].compliance = self.compliance(complaints)[0]

        return [buckets[day] for day in sorted(buckets)]

    def ward_breakdown(
        self,
        wards: Sequence[Region],
        submitted: Sequence[Complaint],
        closed: Sequence[Complaint],
    ) -> List[WardBreakdown]:
        by_ward_submitted: Dict[Optional[str], List[Complaint]] = defaultdict(list)
        by_ward_closed: Dict[Optional[str], List[Complaint]] = defaultdict(list)
        for complaint in submitted:
            by_ward_submitted[complaint.ward_id].append(complaint)
        for complaint in closed:
            by_ward_closed[complaint.ward_id].append(complaint)

        result = []
        for ward in wards:
            ward_submitted = by_ward_submitted.get(ward.id, [])
            ward_closed = by_ward_closed.get(ward.id, [])
            result.append(WardBreakdown(
                id=ward.id,
                name=ward.name,
                complaints=len(ward_submitted),
                resolved=len(ward_closed),
                pending=sum(1 for c in ward_submitted if c.is_active),
                avg_days=average_resolution_days(ward_closed),
                compliance=self.compliance(ward_closed)[0],
            ))
        return result

    def categories(self, submitted: Sequence[Complaint], closed: Sequence[Complaint]) -> List[CategoryBreakdown]:
        counts = Counter(self.catalog.canonical_key(c.type) if c.type else None for c in submitted)
        closed_by_type: Dict[Optional[str], List[Complaint]] = defaultdict(list)
        for complaint in closed:
            closed_by_type[self.catalog.canonical_key(complaint.type) if complaint.type else None].append(complaint)

        ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0] or ""))
        return [
            CategoryBreakdown(
                key=key,
                name=self.catalog.display_name(key),
                count=count,
                percentage=percentage(count, len(submitted)),
                avg_days=average_resolution_days(closed_by_type.get(key, [])),
                color=category_color(index),
            )
            for index, (key, count) in enumerate(ordered)
        ]

    @staticmethod
    def shares(submitted: Sequence[Complaint], attribute: str, values: Iterable) -> List[CountShare]:
        counts = Counter(getattr(c, attribute) for c in submitted)
        return [
            CountShare(name=value.value, count=counts.get(value, 0), percentage=percentage(counts.get(value, 0), len(submitted)))
            for value in values
        ]

    def period_metrics(self, submitted: Sequence[Complaint], closed: Sequence[Complaint]) -> PeriodMetrics:
        return PeriodMetrics(
            total=len(submitted),
            resolved=len(closed),
            sla_compliance=self.compliance(closed)[0],
            avg_resolution_days=average_resolution_days(closed),
        )

    @staticmethod
    def comparison(current: PeriodMetrics, previous: PeriodMetrics) -> PeriodComparison:
        return PeriodComparison(
            current=current,
            previous=previous,
            deltas={
                "total": percent_change(current.total, previous.total),
                "resolved": percent_change(current.resolved, previous.resolved),
                "sla_compliance": percent_change(current.sla_compliance, previous.sla_compliance),
                "avg_resolution_days": percent_change(current.avg_resolution_days, previous.avg_resolution_days),
            },
        )

    # ---- listing ----

    def row(self, complaint: Complaint) -> ComplaintRow:
        deadline, status = self.evaluate(complaint)
        return ComplaintRow(
            id=complaint.id,
            type=complaint.type,
            type_name=self.catalog.display_name(complaint.type),
            status=complaint.status.value,
            priority=complaint.priority.value if complaint.priority else None,
            ward_id=complaint.ward_id,
            sub_zone_id=complaint.sub_zone_id,
            submitted_on=complaint.submitted_on,
            resolved_on=complaint.resolved_on,
            closed_on=complaint.closed_on,
            deadline=deadline,
            sla_status=status.value,
        )

    def page(self, submitted: Sequence[Complaint], page: int, page_size: int) -> Tuple[List[ComplaintRow], Pagination]:
        """Newest first; only the returned slice is paginated."""
        ordered = sorted(submitted, key=lambda c: (c.submitted_on, c.id), reverse=True)
        start = (page - 1) * page_size
        rows = [self.row(c) for c in ordered[start:start + page_size]]
        return rows, Pagination(
            page=page,
            page_size=page_size,
            total_records=len(ordered),
            total_pages=math.ceil(len(ordered) / page_size) if page_size else 0,
        )
