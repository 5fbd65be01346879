from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from app.models.entities import DateRange, Resource, Task


class ChangeStatus(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"


class ConflictType(str, Enum):
    OVERLAP = "overlap"
    DOUBLE_BOOKING = "double_booking"


@dataclass(frozen=True)
class ComparisonOptions:
    ignore_fields: Tuple[str, ...] = ()
    time_tolerance_minutes: float = 0
    detect_conflicts: bool = True
    include_statistics: bool = True
    date_range: Optional[DateRange] = None  # restricts which tasks are diffed


@dataclass(frozen=True)
class FieldChange:
    field: str
    old_value: Any
    new_value: Any


@dataclass(frozen=True)
class TaskComparison:
    task_id: str
    status: ChangeStatus
    old_task: Optional[Task] = None
    new_task: Optional[Task] = None
    changes: Optional[List[FieldChange]] = None


@dataclass(frozen=True)
class ResourceComparison:
    resource_id: str
    status: ChangeStatus
    old_resource: Optional[Resource] = None
    new_resource: Optional[Resource] = None
    changes: Optional[List[FieldChange]] = None


@dataclass(frozen=True)
class TimeConflict:
    type: ConflictType
    resource_id: str
    resource_name: str
    conflicting_tasks: Tuple[Task, Task]
    time_range: DateRange


@dataclass(frozen=True)
class ComparisonSummary:
    total_tasks_old: int
    total_tasks_new: int
    tasks_added: int
    tasks_removed: int
    tasks_modified: int
    tasks_unchanged: int
    resources_added: int
    resources_removed: int
    resources_modified: int
    conflicts_found: int


@dataclass(frozen=True)
class UtilizationChange:
    old_utilization: float
    new_utilization: float
    change: float


@dataclass
class ScheduleStatistics:
    utilization_changes_by_resource: Dict[str, UtilizationChange] = field(default_factory=dict)
    task_type_distribution: Dict[str, Dict[str, int]] = field(default_factory=dict)  # "old"/"new" -> type -> count


@dataclass
class ComparisonResult:
    summary: ComparisonSummary
    tasks: List[TaskComparison]
    resources: List[ResourceComparison]
    conflicts: List[TimeConflict]
    statistics: Optional[ScheduleStatistics] = None
