"""
Task and resource diffing between two schedule snapshots.

Both diffs share one shape:
1. Index the new side by id (a duplicate id overwrites the earlier entry)
2. Walk the old side in order: missing on the new side -> removed,
   otherwise modified/unchanged depending on the field rules
3. Walk the new side in order and report every id not seen in step 2 as added

Old-side verdicts therefore always precede added verdicts.
"""

from typing import Dict, List, Optional, Sequence, Set

from app.engine.field_rules import resource_rules, task_rules
from app.models.comparison import (
    ChangeStatus,
    ComparisonOptions,
    ResourceComparison,
    TaskComparison,
)
from app.models.entities import Resource, Task


def _in_range(task: Task, options: ComparisonOptions) -> bool:
    return options.date_range is None or options.date_range.contains(task)


def compare_tasks(
    old_tasks: Sequence[Task],
    new_tasks: Sequence[Task],
    options: Optional[ComparisonOptions] = None,
) -> List[TaskComparison]:
    """
    Diff two task sets.

    Tasks outside options.date_range (when set) are left out entirely.
    start/end differences up to options.time_tolerance_minutes are ignored,
    as are fields listed in options.ignore_fields.
    """
    options = options or ComparisonOptions()
    rules = task_rules(options.time_tolerance_minutes)
    new_by_id: Dict[str, Task] = {t.id: t for t in new_tasks}
    processed: Set[str] = set()
    comparisons: List[TaskComparison] = []

    for old_task in old_tasks:
        if not _in_range(old_task, options):
            continue
        new_task = new_by_id.get(old_task.id)
        if new_task is None:
            comparisons.append(TaskComparison(task_id=old_task.id, status=ChangeStatus.REMOVED, old_task=old_task))
            continue
        changes = rules.detect_changes(old_task, new_task, options.ignore_fields)
        comparisons.append(
            TaskComparison(
                task_id=old_task.id,
                status=ChangeStatus.MODIFIED if changes else ChangeStatus.UNCHANGED,
                old_task=old_task,
                new_task=new_task,
                changes=changes or None,
            )
        )
        processed.add(new_task.id)

    for new_task in new_tasks:
        if new_task.id in processed or not _in_range(new_task, options):
            continue
        comparisons.append(TaskComparison(task_id=new_task.id, status=ChangeStatus.ADDED, new_task=new_task))

    return comparisons


def compare_resources(old_resources: Sequence[Resource], new_resources: Sequence[Resource]) -> List[ResourceComparison]:
    """Diff two resource sets. No date filtering, tolerance or ignored fields apply."""
    rules = resource_rules()
    new_by_id: Dict[str, Resource] = {r.id: r for r in new_resources}
    processed: Set[str] = set()
    comparisons: List[ResourceComparison] = []

    for old_resource in old_resources:
        new_resource = new_by_id.get(old_resource.id)
        if new_resource is None:
            comparisons.append(
                ResourceComparison(resource_id=old_resource.id, status=ChangeStatus.REMOVED, old_resource=old_resource)
            )
            continue
        changes = rules.detect_changes(old_resource, new_resource)
        comparisons.append(
            ResourceComparison(
                resource_id=old_resource.id,
                status=ChangeStatus.MODIFIED if changes else ChangeStatus.UNCHANGED,
                old_resource=old_resource,
                new_resource=new_resource,
                changes=changes or None,
            )
        )
        processed.add(new_resource.id)

    for new_resource in new_resources:
        if new_resource.id not in processed:
            comparisons.append(
                ResourceComparison(resource_id=new_resource.id, status=ChangeStatus.ADDED, new_resource=new_resource)
            )

    return comparisons
