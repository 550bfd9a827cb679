"""Derived approval views: urgency, waiting time and analytics aggregates.

Everything here is a pure function of its arguments. Aggregations run over a
list of immutable ApprovalSnapshot records so they can be tested without a
database and recomputed on every read.
"""

import math
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime

from kitchzero.db.base import as_utc
from kitchzero.models.approval import ApprovalAnalytics, GroupCounts, MonthlyTrendEntry
from kitchzero.models.enums import ApprovalStatus, Priority, UrgencyLevel

UNKNOWN_BRANCH = "Unknown"


@dataclass(frozen=True)
class ApprovalSnapshot:
    """The fields of an approval request that analytics read."""

    type: str
    priority: str
    status: str
    requested_at: datetime
    responded_at: datetime | None = None
    branch_name: str | None = None


def hours_between(start: datetime, end: datetime) -> float:
    return (as_utc(end) - as_utc(start)).total_seconds() / 3600


def calculate_urgency_level(priority: str, requested_at: datetime, now: datetime) -> UrgencyLevel:
    """Classify how urgently a pending request needs a decision.

    Branches are evaluated in order and the first match wins.
    """
    hours_waiting = hours_between(requested_at, now)

    if priority == Priority.CRITICAL:
        return UrgencyLevel.CRITICAL
    if priority == Priority.HIGH and hours_waiting > 4:
        return UrgencyLevel.HIGH
    if hours_waiting > 24:
        return UrgencyLevel.HIGH
    if hours_waiting > 8:
        return UrgencyLevel.MEDIUM
    return UrgencyLevel.LOW


def days_waiting(requested_at: datetime, now: datetime) -> int:
    return math.ceil(hours_between(requested_at, now) / 24)


def is_overdue(due_date: datetime | None, now: datetime) -> bool:
    return due_date is not None and as_utc(due_date) < as_utc(now)


def average_response_hours(snapshots: Iterable[ApprovalSnapshot]) -> float:
    """Mean hours from request to response over answered requests; 0 if none."""
    durations = [
        hours_between(s.requested_at, s.responded_at)
        for s in snapshots
        if s.responded_at is not None
    ]
    if not durations:
        return 0.0
    return sum(durations) / len(durations)


def group_counts(
    snapshots: Iterable[ApprovalSnapshot],
    key: Callable[[ApprovalSnapshot], str],
) -> dict[str, GroupCounts]:
    """Count members of each group, split by each member's own status."""
    snapshots = list(snapshots)
    totals = Counter(key(s) for s in snapshots)
    by_status = Counter((key(s), str(s.status)) for s in snapshots)
    return {
        group: GroupCounts(
            total=total,
            approved=by_status[(group, ApprovalStatus.APPROVED.value)],
            rejected=by_status[(group, ApprovalStatus.REJECTED.value)],
            pending=by_status[(group, ApprovalStatus.PENDING.value)],
        )
        for group, total in totals.items()
    }


def month_key(snapshot: ApprovalSnapshot) -> str:
    return as_utc(snapshot.requested_at).strftime("%Y-%m")


def branch_key(snapshot: ApprovalSnapshot) -> str:
    return snapshot.branch_name or UNKNOWN_BRANCH


def monthly_trend(snapshots: Iterable[ApprovalSnapshot]) -> list[MonthlyTrendEntry]:
    """Per-month counts keyed YYYY-MM, oldest month first."""
    groups = group_counts(snapshots, month_key)
    return [
        MonthlyTrendEntry(month=month, **counts.model_dump())
        for month, counts in sorted(groups.items())
    ]


def build_report(snapshots: Iterable[ApprovalSnapshot]) -> ApprovalAnalytics:
    snapshots = tuple(snapshots)
    statuses = Counter(str(s.status) for s in snapshots)
    return ApprovalAnalytics(
        total_requests=len(snapshots),
        approved_count=statuses[ApprovalStatus.APPROVED.value],
        rejected_count=statuses[ApprovalStatus.REJECTED.value],
        pending_count=statuses[ApprovalStatus.PENDING.value],
        average_response_time=average_response_hours(snapshots),
        by_type=group_counts(snapshots, lambda s: str(s.type)),
        by_priority=group_counts(snapshots, lambda s: str(s.priority)),
        by_branch=group_counts(snapshots, branch_key),
        monthly_trend=monthly_trend(snapshots),
    )
