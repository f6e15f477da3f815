"""Tests for deadline computation and SLA classification."""

from __future__ import annotations

from datetime import timedelta

import pytest

from src.complaints.domain import LifecycleStateMachine
from src.config import ComplaintStatus as S, ConfigSource, SLAStatus
from src.sla.application.services import evaluate_complaint
from src.sla.domain import ComplaintTypeConfig, SLACalculator, TypeCatalog, coerce_sla_hours
from tests.factories import make_complaint, utc

DAY = timedelta(hours=24)


# -----------------------------------------------------------------------
# SLA hours
# -----------------------------------------------------------------------


class TestCoerceSlaHours:
    """Only finite positive numbers are usable SLA hours."""

    @pytest.mark.parametrize("value,expected", [
        (24, 24.0),
        ("48", 48.0),
        (0.5, 0.5),
    ])
    def test_usable(self, value, expected) -> None:
        assert coerce_sla_hours(value) == expected, f"{value!r} should coerce to {expected}"

    @pytest.mark.parametrize("value", [None, 0, -5, "abc", float("nan"), float("inf"), True, {}])
    def test_unusable(self, value) -> None:
        assert coerce_sla_hours(value) is None, f"{value!r} should not be usable SLA hours"


# -----------------------------------------------------------------------
# Deadline
# -----------------------------------------------------------------------


class TestComputeDeadline:
    """start + hours, with the latest reopen as start."""

    def test_from_submission(self) -> None:
        complaint = make_complaint(submitted_on=utc(2024, 1, 1))
        assert SLACalculator.compute_deadline(complaint, 48) == utc(2024, 1, 3), (
            "deadline should be submission plus SLA hours"
        )

    def test_from_latest_reopen(self) -> None:
        complaint = make_complaint(
            status=S.REOPENED,
            submitted_on=utc(2024, 1, 1),
            log=[
                (S.ASSIGNED, utc(2024, 1, 1, 1)),
                (S.IN_PROGRESS, utc(2024, 1, 1, 2)),
                (S.RESOLVED, utc(2024, 1, 1, 3)),
                (S.REOPENED, utc(2024, 1, 2)),
                (S.IN_PROGRESS, utc(2024, 1, 2, 1)),
                (S.RESOLVED, utc(2024, 1, 2, 2)),
                (S.REOPENED, utc(2024, 1, 5)),
            ],
        )
        assert SLACalculator.compute_deadline(complaint, 24) == utc(2024, 1, 6), (
            "only the most recent reopen should restart the clock"
        )

    def test_each_reopen_pushes_deadline_later(self) -> None:
        complaint = make_complaint(status=S.RESOLVED, submitted_on=utc(2024, 1, 1), resolved_on=utc(2024, 1, 1, 5))
        deadlines = [SLACalculator.compute_deadline(complaint, 24)]
        for day in (3, 6):
            LifecycleStateMachine.transition(complaint, S.REOPENED, at=utc(2024, 1, day))
            deadlines.append(SLACalculator.compute_deadline(complaint, 24))
            LifecycleStateMachine.transition(complaint, S.IN_PROGRESS, at=utc(2024, 1, day, 1))
            LifecycleStateMachine.transition(complaint, S.RESOLVED, at=utc(2024, 1, day, 2))
        assert deadlines == sorted(set(deadlines)), "every reopen should move the deadline strictly later"

    def test_explicit_deadline_when_no_hours(self) -> None:
        complaint = make_complaint(deadline=utc(2024, 2, 1))
        assert SLACalculator.compute_deadline(complaint, None) == utc(2024, 2, 1), (
            "without SLA hours the complaint's own deadline should be used"
        )

    @pytest.mark.parametrize("hours", [None, 0, -1, float("nan")])
    def test_no_deadline(self, hours) -> None:
        assert SLACalculator.compute_deadline(make_complaint(), hours) is None, (
            "unusable hours and no override should give no deadline"
        )


# -----------------------------------------------------------------------
# Classification
# -----------------------------------------------------------------------


class TestClassify:
    """Rules evaluated in order: N/A, completed, active."""

    def test_no_deadline_is_not_applicable(self) -> None:
        assert SLACalculator.classify(make_complaint(), None, utc(2024, 1, 1)) == SLAStatus.NOT_APPLICABLE

    def test_active_on_time(self) -> None:
        status = SLACalculator.classify(make_complaint(), utc(2024, 1, 5), utc(2024, 1, 1), DAY)
        assert status == SLAStatus.ON_TIME, "far from the deadline should be ON_TIME"

    def test_active_warning_boundary(self) -> None:
        deadline = utc(2024, 1, 5)
        status = SLACalculator.classify(make_complaint(), deadline, deadline - DAY, DAY)
        assert status == SLAStatus.WARNING, "exactly one window before the deadline should be WARNING"
        status = SLACalculator.classify(make_complaint(), deadline, deadline - DAY - timedelta(seconds=1), DAY)
        assert status == SLAStatus.ON_TIME, "just outside the window should be ON_TIME"

    def test_active_at_deadline_is_warning(self) -> None:
        deadline = utc(2024, 1, 5)
        assert SLACalculator.classify(make_complaint(), deadline, deadline, DAY) == SLAStatus.WARNING, (
            "the deadline instant itself is not yet overdue"
        )

    def test_active_overdue(self) -> None:
        deadline = utc(2024, 1, 5)
        status = SLACalculator.classify(make_complaint(), deadline, deadline + timedelta(seconds=1), DAY)
        assert status == SLAStatus.OVERDUE, "past the deadline should be OVERDUE"

    def test_zero_warning_window(self) -> None:
        deadline = utc(2024, 1, 5)
        status = SLACalculator.classify(make_complaint(), deadline, deadline - timedelta(hours=1), timedelta(0))
        assert status == SLAStatus.ON_TIME, "a zero window should never produce WARNING before the deadline"

    def test_completed_ignores_now(self) -> None:
        complaint = make_complaint(status=S.CLOSED, closed_on=utc(2024, 1, 2), resolved_on=utc(2024, 1, 2))
        status = SLACalculator.classify(complaint, utc(2024, 1, 3), utc(2030, 1, 1), DAY)
        assert status == SLAStatus.COMPLETED, "a closure before the deadline stays COMPLETED forever"

    def test_completed_late(self) -> None:
        complaint = make_complaint(status=S.RESOLVED, resolved_on=utc(2024, 1, 4))
        status = SLACalculator.classify(complaint, utc(2024, 1, 3), utc(2024, 1, 4), DAY)
        assert status == SLAStatus.OVERDUE, "a resolution after the deadline is OVERDUE"

    def test_completed_without_timestamp_is_not_applicable(self) -> None:
        complaint = make_complaint(status=S.CLOSED)
        status = SLACalculator.classify(complaint, utc(2024, 1, 3), utc(2024, 1, 4), DAY)
        assert status == SLAStatus.NOT_APPLICABLE, "a completion with no instant cannot be judged"

    def test_historical_status(self) -> None:
        assert SLACalculator.historical_status(SLAStatus.COMPLETED) == SLAStatus.ON_TIME
        assert SLACalculator.historical_status(SLAStatus.OVERDUE) == SLAStatus.OVERDUE
        assert SLACalculator.historical_status(SLAStatus.WARNING) == SLAStatus.WARNING


# -----------------------------------------------------------------------
# End-to-end evaluation
# -----------------------------------------------------------------------


class TestEvaluateComplaint:
    """Documented lifecycle scenarios against a 48 hour type."""

    catalog = TypeCatalog.build([ComplaintTypeConfig(key="ELECTRICITY", name="Electricity", sla_hours=48)])

    def test_resolved_within_sla(self) -> None:
        complaint = make_complaint(
            type="ELECTRICITY",
            status=S.RESOLVED,
            submitted_on=utc(2024, 1, 1),
            resolved_on=utc(2024, 1, 2, 23),
        )
        evaluation = evaluate_complaint(complaint, self.catalog, utc(2024, 2, 1), DAY, ConfigSource.STORE)
        assert evaluation.deadline == utc(2024, 1, 3), "deadline should be submission plus 48 hours"
        assert evaluation.status == SLAStatus.COMPLETED, "resolution before deadline is COMPLETED"
        assert evaluation.historical_status == SLAStatus.ON_TIME, "history shows it as ON_TIME"
        assert evaluation.sla_source == ConfigSource.STORE, "source of the SLA hours should be reported"

    def test_reopened_then_resolved_late(self) -> None:
        complaint = make_complaint(
            type="ELECTRICITY",
            status=S.RESOLVED,
            submitted_on=utc(2024, 1, 1),
            resolved_on=utc(2024, 1, 5),
            log=[
                (S.ASSIGNED, utc(2024, 1, 1, 1)),
                (S.IN_PROGRESS, utc(2024, 1, 1, 2)),
                (S.RESOLVED, utc(2024, 1, 1, 3)),
                (S.REOPENED, utc(2024, 1, 2, 12)),
                (S.IN_PROGRESS, utc(2024, 1, 3)),
                (S.RESOLVED, utc(2024, 1, 5)),
            ],
        )
        evaluation = evaluate_complaint(complaint, self.catalog, utc(2024, 2, 1), DAY)
        assert evaluation.start == utc(2024, 1, 2, 12), "SLA clock should restart at the reopen"
        assert evaluation.deadline == utc(2024, 1, 4, 12), "deadline should be reopen plus 48 hours"
        assert evaluation.status == SLAStatus.OVERDUE, "resolution after the new deadline is OVERDUE"

    def test_unknown_type_is_not_applicable(self) -> None:
        complaint = make_complaint(type="UNLISTED")
        evaluation = evaluate_complaint(complaint, self.catalog, utc(2024, 1, 2), DAY, ConfigSource.STORE)
        assert evaluation.status == SLAStatus.NOT_APPLICABLE, "no hours and no override means N/A"
        assert evaluation.sla_source is None, "no source without SLA hours"
        assert evaluation.remaining_seconds is None, "no remaining time without a deadline"

    def test_remaining_seconds_negative_when_overdue(self) -> None:
        complaint = make_complaint(type="ELECTRICITY", submitted_on=utc(2024, 1, 1))
        evaluation = evaluate_complaint(complaint, self.catalog, utc(2024, 1, 3, 1), DAY)
        assert evaluation.remaining_seconds == -3600, "one hour past the deadline"
