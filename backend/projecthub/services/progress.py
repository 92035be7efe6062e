"""Progress computation — derived values, never stored.

completed_tasks and total_tasks are counted from the task collection on
every read, so there is no counter that can drift from the real task set.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from projecthub.models.task import Task


class ProjectProgress(BaseModel):
    completed_tasks: int = 0
    total_tasks: int = 0
    percentage: float = 0.0


class DashboardStats(BaseModel):
    """Aggregate figures for a user's project list."""

    total_projects: int = 0
    total_budget: float = 0.0
    team_members: int = 0
    average_progress: int = 0


def completion_percentage(completed: int, total: int) -> float:
    """completed / total × 100, 0 when there are no tasks; always in [0, 100]."""
    if total <= 0:
        return 0.0
    ratio = max(0.0, min(1.0, completed / total))
    return round(ratio * 100, 1)


def project_progress(tasks: Iterable[Task]) -> ProjectProgress:
    total = 0
    completed = 0
    for task in tasks:
        total += 1
        if task.status == "completed":
            completed += 1
    return ProjectProgress(
        completed_tasks=completed,
        total_tasks=total,
        percentage=completion_percentage(completed, total),
    )


def days_remaining(end_date: date | None, today: date | None = None) -> int | None:
    """Whole days until end_date; negative once overdue, None without an end date."""
    if end_date is None:
        return None
    return (end_date - (today or date.today())).days


def dashboard_stats(
    prices: Sequence[Decimal],
    member_counts: Sequence[int],
    percentages: Sequence[float],
) -> DashboardStats:
    """Totals shown above the project list.

    Args:
        prices: One price per project.
        member_counts: Size of each project's membership set.
        percentages: Completion percentage of each project.
    """
    average = round(sum(percentages) / len(percentages)) if percentages else 0
    return DashboardStats(
        total_projects=len(prices),
        total_budget=float(sum(prices, Decimal("0"))),
        team_members=sum(member_counts),
        average_progress=average,
    )
