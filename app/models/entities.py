from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


class ResourceType(str, Enum):
    INSTRUCTOR = "instructor"
    CLASSROOM = "classroom"
    LABORATORY = "laboratory"


class TaskType(str, Enum):
    THEORY = "theory"
    PRACTICE = "practice"
    LAB = "lab"


@dataclass(frozen=True)
class Resource:
    id: str
    name: str
    type: ResourceType


@dataclass(frozen=True)
class Task:
    id: str
    content: str
    start: datetime
    end: datetime
    group: str  # owning resource id
    task_type: TaskType
    class_name: Optional[str] = None
    title: Optional[str] = None
    course_id: Optional[str] = None
    course_name: Optional[str] = None
    priority: Optional[int] = None

    @property
    def duration_hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime

    def contains(self, task: Task) -> bool:
        return self.start <= task.start and task.end <= self.end


@dataclass(frozen=True)
class ScheduleMetadata:
    semester: Optional[str] = None
    academic_year: Optional[str] = None
    department: Optional[str] = None


@dataclass(frozen=True)
class Schedule:
    id: str
    name: str
    version: str
    created_at: datetime
    resources: Tuple[Resource, ...] = ()
    tasks: Tuple[Task, ...] = ()
    metadata: Optional[ScheduleMetadata] = None

    def resource_by_id(self, resource_id: str) -> Optional[Resource]:
        for resource in self.resources:
            if resource.id == resource_id:
                return resource
        return None
