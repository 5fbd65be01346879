"""
Example: comparing two versions of a course timetable

Version 2 moves "Database Systems" by an hour, drops "Algorithms",
adds "Software Engineering" in a new room and double-books the lab.
"""

from datetime import datetime

from app.engine.comparator import ScheduleComparator, find_rescheduled_tasks
from app.models.comparison import ComparisonOptions
from app.models.entities import Resource, ResourceType, Schedule, ScheduleMetadata, Task, TaskType
from app.utils.export import utilization_summary


RESOURCES = (
    Resource(id="1", name="Dr. Smith", type=ResourceType.INSTRUCTOR),
    Resource(id="2", name="Prof. Johnson", type=ResourceType.INSTRUCTOR),
    Resource(id="4", name="Room A101", type=ResourceType.CLASSROOM),
    Resource(id="7", name="Computer Lab 1", type=ResourceType.LABORATORY),
)
METADATA = ScheduleMetadata(semester="Fall", academic_year="2024", department="Computer Science")

database = Task(
    id="1",
    content="Database Systems",
    start=datetime(2024, 1, 15, 10, 0),
    end=datetime(2024, 1, 15, 12, 0),
    group="1",
    task_type=TaskType.THEORY,
    course_name="CS Database Systems",
)
programming_lab = Task(
    id="2",
    content="Programming Lab",
    start=datetime(2024, 1, 16, 9, 0),
    end=datetime(2024, 1, 16, 11, 0),
    group="7",
    task_type=TaskType.LAB,
    course_name="CS Programming",
)
algorithms = Task(
    id="3",
    content="Algorithms",
    start=datetime(2024, 1, 17, 14, 0),
    end=datetime(2024, 1, 17, 16, 0),
    group="2",
    task_type=TaskType.THEORY,
    course_name="CS Algorithms",
)

old_schedule = Schedule(
    id="schedule-1",
    name="Fall 2024 - Version 1",
    version="1.0",
    created_at=datetime(2024, 9, 1),
    resources=RESOURCES,
    tasks=(database, programming_lab, algorithms),
    metadata=METADATA,
)

new_schedule = Schedule(
    id="schedule-2",
    name="Fall 2024 - Version 2",
    version="2.0",
    created_at=datetime(2024, 9, 15),
    resources=RESOURCES + (Resource(id="8", name="Room B205", type=ResourceType.CLASSROOM),),
    tasks=(
        Task(**{**vars(database), "start": datetime(2024, 1, 15, 11, 0), "end": datetime(2024, 1, 15, 13, 0)}),
        programming_lab,
        Task(
            id="4",
            content="Software Engineering",
            start=datetime(2024, 1, 18, 10, 0),
            end=datetime(2024, 1, 18, 12, 0),
            group="8",
            task_type=TaskType.PRACTICE,
        ),
        Task(
            id="5",
            content="Networks Lab",
            start=datetime(2024, 1, 16, 10, 0),
            end=datetime(2024, 1, 16, 12, 0),
            group="7",
            task_type=TaskType.LAB,
        ),
    ),
    metadata=METADATA,
)


if __name__ == "__main__":
    comparator = ScheduleComparator(ComparisonOptions(time_tolerance_minutes=15))
    result = comparator.compare_schedules(old_schedule, new_schedule)

    print(comparator.export_comparison(result, "summary"))
    print()
    print(utilization_summary(result))
    print("Rescheduled:", [c.task_id for c in find_rescheduled_tasks(result)])
    print()
    print(comparator.export_comparison(result, "csv"))
