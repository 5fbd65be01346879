from typing import Dict, Sequence

from app.models.comparison import ScheduleStatistics, UtilizationChange
from app.models.entities import Schedule, Task, TaskType


def resource_utilization(tasks: Sequence[Task], resource_id: str) -> float:
    """Total scheduled hours of the tasks owned by resource_id."""
    return sum(t.duration_hours for t in tasks if t.group == resource_id)


def calculate_utilization_changes(old: Schedule, new: Schedule) -> Dict[str, UtilizationChange]:
    # old order first, then ids only the new schedule knows
    resource_ids = dict.fromkeys(r.id for r in list(old.resources) + list(new.resources))

    changes: Dict[str, UtilizationChange] = {}
    for resource_id in resource_ids:
        old_hours = resource_utilization(old.tasks, resource_id)
        new_hours = resource_utilization(new.tasks, resource_id)
        changes[resource_id] = UtilizationChange(
            old_utilization=old_hours,
            new_utilization=new_hours,
            change=new_hours - old_hours,
        )
    return changes


def task_type_distribution(tasks: Sequence[Task]) -> Dict[str, int]:
    distribution: Dict[str, int] = {}
    for task in tasks:
        key = TaskType(task.task_type).value
        distribution[key] = distribution.get(key, 0) + 1
    return distribution


def generate_statistics(old: Schedule, new: Schedule) -> ScheduleStatistics:
    return ScheduleStatistics(
        utilization_changes_by_resource=calculate_utilization_changes(old, new),
        task_type_distribution={
            "old": task_type_distribution(old.tasks),
            "new": task_type_distribution(new.tasks),
        },
    )
