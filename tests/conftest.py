from datetime import datetime

import pytest
from app.models.entities import Resource, ResourceType, Schedule, Task, TaskType


def at(hour: int, minute: int = 0, day: int = 15) -> datetime:
    """Timestamp on a fixed January 2024 day."""
    return datetime(2024, 1, day, hour, minute)


def make_task(task_id: str, start: datetime, end: datetime, group: str = "R1", **kwargs) -> Task:
    fields = {"content": f"Task {task_id}", "task_type": TaskType.THEORY}
    fields.update(kwargs)
    return Task(id=task_id, start=start, end=end, group=group, **fields)


def make_schedule(tasks=(), resources=None, schedule_id: str = "s", version: str = "1") -> Schedule:
    if resources is None:
        resources = (
            Resource(id="R1", name="Dr. Smith", type=ResourceType.INSTRUCTOR),
            Resource(id="R2", name="Room A101", type=ResourceType.CLASSROOM),
        )
    return Schedule(
        id=schedule_id,
        name=f"Schedule {schedule_id}",
        version=version,
        created_at=datetime(2024, 9, 1),
        resources=tuple(resources),
        tasks=tuple(tasks),
    )


@pytest.fixture
def resources():
    """Instructor, classroom and lab."""
    return (
        Resource(id="R1", name="Dr. Smith", type=ResourceType.INSTRUCTOR),
        Resource(id="R2", name="Room A101", type=ResourceType.CLASSROOM),
        Resource(id="R3", name="Computer Lab 1", type=ResourceType.LABORATORY),
    )


@pytest.fixture
def old_schedule(resources):
    """Version 1: three tasks on three resources, no conflicts."""
    tasks = (
        make_task("1", at(10), at(12), group="R1", content="Database Systems", course_name="CS Database Systems"),
        make_task("2", at(9, day=16), at(11, day=16), group="R3", content="Programming Lab", task_type=TaskType.LAB),
        make_task("3", at(14, day=17), at(16, day=17), group="R2", content="Algorithms"),
    )
    return make_schedule(tasks, resources, schedule_id="schedule-1", version="1.0")


@pytest.fixture
def new_schedule(resources):
    """Version 2: task 1 shifted an hour, task 3 removed, task 4 added, task 5 clashes with task 2."""
    tasks = (
        make_task("1", at(11), at(13), group="R1", content="Database Systems", course_name="CS Database Systems"),
        make_task("2", at(9, day=16), at(11, day=16), group="R3", content="Programming Lab", task_type=TaskType.LAB),
        make_task("4", at(10, day=18), at(12, day=18), group="R2", content="Software Engineering",
                  task_type=TaskType.PRACTICE),
        make_task("5", at(10, day=16), at(12, day=16), group="R3", content="Networks Lab", task_type=TaskType.LAB),
    )
    return make_schedule(tasks, resources, schedule_id="schedule-2", version="2.0")
