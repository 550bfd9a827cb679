"""Tests for urgency, waiting time and analytics aggregation."""

from datetime import datetime, timedelta, timezone

import pytest

from kitchzero.models.enums import UrgencyLevel
from kitchzero.services.approval.analytics import (
    ApprovalSnapshot,
    average_response_hours,
    build_report,
    calculate_urgency_level,
    days_waiting,
    is_overdue,
    monthly_trend,
)

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def _ago(hours: float) -> datetime:
    return NOW - timedelta(hours=hours)


@pytest.mark.parametrize(
    "priority,hours,expected",
    [
        ("CRITICAL", 0, UrgencyLevel.CRITICAL),
        ("HIGH", 5, UrgencyLevel.HIGH),
        ("HIGH", 3, UrgencyLevel.LOW),
        ("MEDIUM", 30, UrgencyLevel.HIGH),
        ("LOW", 10, UrgencyLevel.MEDIUM),
        ("LOW", 8, UrgencyLevel.LOW),
    ],
)
def test_urgency_level(priority, hours, expected):
    assert calculate_urgency_level(priority, _ago(hours), NOW) == expected


def test_urgency_accepts_naive_timestamps():
    """SQLite hands back naive datetimes; they are read as UTC."""
    naive = _ago(30).replace(tzinfo=None)
    assert calculate_urgency_level("MEDIUM", naive, NOW) == UrgencyLevel.HIGH


def test_days_waiting_rounds_up():
    assert days_waiting(_ago(1), NOW) == 1
    assert days_waiting(_ago(24), NOW) == 1
    assert days_waiting(_ago(25), NOW) == 2


def test_is_overdue():
    assert is_overdue(None, NOW) is False
    assert is_overdue(_ago(1), NOW) is True
    assert is_overdue(NOW + timedelta(hours=1), NOW) is False


def test_average_response_ignores_unanswered():
    snapshots = [
        ApprovalSnapshot("WASTE_ENTRY", "LOW", "APPROVED", _ago(10), _ago(6)),
        ApprovalSnapshot("WASTE_ENTRY", "LOW", "REJECTED", _ago(10), _ago(8)),
        ApprovalSnapshot("WASTE_ENTRY", "LOW", "PENDING", _ago(10)),
    ]
    assert average_response_hours(snapshots) == pytest.approx(3.0)
    assert average_response_hours([]) == 0.0


def test_report_counts_by_status():
    snapshots = [
        ApprovalSnapshot("INVENTORY_ADJUSTMENT", "HIGH", "APPROVED", _ago(5), _ago(1), "Downtown"),
        ApprovalSnapshot("WASTE_ENTRY", "MEDIUM", "REJECTED", _ago(5), _ago(3), "Downtown"),
        ApprovalSnapshot("WASTE_ENTRY", "MEDIUM", "PENDING", _ago(5)),
    ]
    report = build_report(snapshots)

    assert report.total_requests == 3
    assert report.approved_count == 1
    assert report.rejected_count == 1
    assert report.pending_count == 1
    assert report.average_response_time == pytest.approx(3.0)

    assert report.by_type["WASTE_ENTRY"].total == 2
    assert report.by_type["WASTE_ENTRY"].rejected == 1
    assert report.by_type["WASTE_ENTRY"].pending == 1
    assert report.by_priority["HIGH"].approved == 1
    assert report.by_branch["Downtown"].total == 2
    assert report.by_branch["Unknown"].pending == 1


def test_empty_report():
    report = build_report([])
    assert report.total_requests == 0
    assert report.average_response_time == 0.0
    assert report.by_type == {}
    assert report.monthly_trend == []


def test_monthly_trend_sorted_by_month():
    snapshots = [
        ApprovalSnapshot("WASTE_ENTRY", "LOW", "PENDING", datetime(2024, 3, 2, tzinfo=timezone.utc)),
        ApprovalSnapshot("WASTE_ENTRY", "LOW", "APPROVED", datetime(2023, 12, 30, tzinfo=timezone.utc)),
        ApprovalSnapshot("WASTE_ENTRY", "LOW", "REJECTED", datetime(2024, 1, 15, tzinfo=timezone.utc)),
        ApprovalSnapshot("WASTE_ENTRY", "LOW", "APPROVED", datetime(2024, 1, 20, tzinfo=timezone.utc)),
    ]
    trend = monthly_trend(snapshots)
    assert [t.month for t in trend] == ["2023-12", "2024-01", "2024-03"]
    january = trend[1]
    assert (january.total, january.approved, january.rejected, january.pending) == (2, 1, 1, 0)
