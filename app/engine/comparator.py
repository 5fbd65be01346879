"""
Schedule comparison engine.

Compares two immutable schedule snapshots (old, new) and produces a
ComparisonResult:
- task and resource verdicts (added / removed / modified / unchanged)
- time-overlap conflicts in the new schedule
- per-resource utilization and task-type statistics

The comparator is a pure function of its inputs and options: it never
mutates either schedule and keeps no state between calls, so one instance
can be shared freely.
"""

import logging
from typing import List, Optional

from app.engine.conflicts import detect_conflicts
from app.engine.diff import compare_resources, compare_tasks
from app.graph.conflict_graph import build_conflict_graph
from app.models.comparison import (
    ChangeStatus,
    ComparisonOptions,
    ComparisonResult,
    ComparisonSummary,
    ResourceComparison,
    TaskComparison,
    TimeConflict,
)
from app.models.entities import Schedule
from app.utils.export import export_comparison
from app.utils.statistics import generate_statistics

logger = logging.getLogger(__name__)


def _count(comparisons, status: ChangeStatus) -> int:
    return sum(1 for c in comparisons if c.status == status)


def generate_summary(
    task_comparisons: List[TaskComparison],
    resource_comparisons: List[ResourceComparison],
    conflicts: List[TimeConflict],
) -> ComparisonSummary:
    return ComparisonSummary(
        total_tasks_old=sum(1 for t in task_comparisons if t.old_task is not None),
        total_tasks_new=sum(1 for t in task_comparisons if t.new_task is not None),
        tasks_added=_count(task_comparisons, ChangeStatus.ADDED),
        tasks_removed=_count(task_comparisons, ChangeStatus.REMOVED),
        tasks_modified=_count(task_comparisons, ChangeStatus.MODIFIED),
        tasks_unchanged=_count(task_comparisons, ChangeStatus.UNCHANGED),
        resources_added=_count(resource_comparisons, ChangeStatus.ADDED),
        resources_removed=_count(resource_comparisons, ChangeStatus.REMOVED),
        resources_modified=_count(resource_comparisons, ChangeStatus.MODIFIED),
        conflicts_found=len(conflicts),
    )


class ScheduleComparator:
    def __init__(self, options: Optional[ComparisonOptions] = None):
        self.options = options or ComparisonOptions()

    def compare_schedules(self, old: Schedule, new: Schedule) -> ComparisonResult:
        """
        Compare two schedules.

        Conflicts are only looked for in the new schedule; statistics cover each
        schedule's full task set regardless of options.date_range.
        """
        task_comparisons = compare_tasks(old.tasks, new.tasks, self.options)
        resource_comparisons = compare_resources(old.resources, new.resources)
        conflicts = detect_conflicts(new) if self.options.detect_conflicts else []
        statistics = generate_statistics(old, new) if self.options.include_statistics else None

        summary = generate_summary(task_comparisons, resource_comparisons, conflicts)
        logger.debug(
            f"Compared {old.id} v{old.version} -> {new.id} v{new.version}: "
            f"+{summary.tasks_added} -{summary.tasks_removed} ~{summary.tasks_modified} tasks, "
            f"{summary.conflicts_found} conflicts"
        )

        return ComparisonResult(
            summary=summary,
            tasks=task_comparisons,
            resources=resource_comparisons,
            conflicts=conflicts,
            statistics=statistics,
        )

    def export_comparison(self, result: ComparisonResult, fmt: str) -> str:
        return export_comparison(result, fmt)

    @staticmethod
    def conflicted_task_ids(result: ComparisonResult) -> List[str]:
        """Ids of every task involved in at least one conflict, sorted."""
        return sorted(build_conflict_graph(result.conflicts))


def compare(old: Schedule, new: Schedule, options: Optional[ComparisonOptions] = None) -> ComparisonResult:
    return ScheduleComparator(options).compare_schedules(old, new)


def quick_compare(old: Schedule, new: Schedule) -> ComparisonResult:
    """Compare with default options."""
    return ScheduleComparator().compare_schedules(old, new)


def find_rescheduled_tasks(result: ComparisonResult) -> List[TaskComparison]:
    """Modified tasks whose start or end moved."""
    return [
        c
        for c in result.tasks
        if c.status == ChangeStatus.MODIFIED and any(ch.field in ("start", "end") for ch in c.changes or [])
    ]
