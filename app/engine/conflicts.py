"""
Time-overlap conflict detection within a single schedule.

Tasks are grouped by owning resource, sorted by start and checked pairwise,
so k mutually overlapping tasks on one resource yield C(k, 2) conflicts.

Complexity: O(n^2) in the number of tasks per resource.
"""

from typing import Dict, List

from app.models.comparison import ConflictType, TimeConflict
from app.models.entities import DateRange, Schedule, Task


def do_tasks_overlap(a: Task, b: Task) -> bool:
    """
    Half-open interval overlap: tasks that only touch at an endpoint do not overlap.

    Complexity: O(1)
    """
    return a.start < b.end and b.start < a.end


def group_tasks_by_resource(tasks) -> Dict[str, List[Task]]:
    grouped: Dict[str, List[Task]] = {}
    for task in tasks:
        if task.group not in grouped:
            grouped[task.group] = []
        grouped[task.group].append(task)
    return grouped


def detect_conflicts(schedule: Schedule) -> List[TimeConflict]:
    """
    Find every overlapping pair of tasks assigned to the same resource.

    Tasks whose resource is not part of the schedule are skipped, since the
    conflict could not name the resource.
    """
    conflicts: List[TimeConflict] = []

    for resource_id, tasks in group_tasks_by_resource(schedule.tasks).items():
        resource = schedule.resource_by_id(resource_id)
        if resource is None:
            continue

        ordered = sorted(tasks, key=lambda t: t.start)
        for i, first in enumerate(ordered):
            for second in ordered[i + 1 :]:
                if not do_tasks_overlap(first, second):
                    continue
                conflicts.append(
                    TimeConflict(
                        type=ConflictType.OVERLAP,
                        resource_id=resource_id,
                        resource_name=resource.name,
                        conflicting_tasks=(first, second),
                        time_range=DateRange(
                            start=max(first.start, second.start),
                            end=min(first.end, second.end),
                        ),
                    )
                )

    return conflicts
