from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.engine.comparator import compare
from app.models.comparison import ChangeStatus, ComparisonOptions
from app.models.entities import Resource, ResourceType, Schedule, ScheduleMetadata, TaskType
from app.storage.database import Base
from app.storage.repositories import ScheduleRepository

from conftest import at, make_schedule, make_task


class TestEdgeCases:
    """Test edge cases and boundary conditions."""

    def test_both_schedules_empty(self):
        """Nothing to compare yields an all-zero summary."""
        empty = make_schedule([], resources=[])
        result = compare(empty, empty)

        assert result.tasks == []
        assert result.resources == []
        assert result.conflicts == []
        assert result.summary.total_tasks_old == 0
        assert result.statistics.utilization_changes_by_resource == {}
        assert result.statistics.task_type_distribution == {"old": {}, "new": {}}

    def test_everything_removed(self, old_schedule):
        """An empty new schedule removes every task and resource."""
        result = compare(old_schedule, make_schedule([], resources=[]))

        assert result.summary.tasks_removed == len(old_schedule.tasks)
        assert result.summary.resources_removed == len(old_schedule.resources)
        assert result.summary.total_tasks_new == 0

    def test_task_on_unknown_resource(self):
        """A dangling group is diffed and counted in utilization only for known resources."""
        old = make_schedule([])
        new = make_schedule([make_task("1", at(10), at(12), group="ghost")])

        result = compare(old, new)

        assert result.summary.tasks_added == 1
        assert "ghost" not in result.statistics.utilization_changes_by_resource
        assert result.conflicts == []

    def test_duplicate_old_ids_each_get_a_verdict(self):
        """Duplicated old ids are not deduplicated; both compare against the same new task."""
        old = make_schedule([make_task("1", at(10), at(12)), make_task("1", at(8), at(9))])
        new = make_schedule([make_task("1", at(10), at(12))])

        result = compare(old, new)

        assert [c.status for c in result.tasks] == [ChangeStatus.UNCHANGED, ChangeStatus.MODIFIED]
        assert result.summary.tasks_added == 0

    def test_group_move_is_a_change(self):
        """Reassigning a task to another resource is a modification."""
        old = make_schedule([make_task("1", at(10), at(12), group="R1")])
        new = make_schedule([make_task("1", at(10), at(12), group="R2")])

        change = compare(old, new).tasks[0].changes[0]
        assert (change.field, change.old_value, change.new_value) == ("group", "R1", "R2")

    def test_large_tolerance_still_sees_other_fields(self):
        """Even a week of tolerance does not hide a task-type change."""
        old = make_schedule([make_task("1", at(10), at(12), task_type=TaskType.THEORY)])
        new = make_schedule([make_task("1", at(10, day=20), at(12, day=20), task_type=TaskType.LAB)])

        result = compare(old, new, ComparisonOptions(time_tolerance_minutes=7 * 24 * 60))

        assert [c.field for c in result.tasks[0].changes] == ["task_type"]

    def test_many_tasks_one_resource(self):
        """Ten back-to-back tasks plus one spanning all of them: ten conflicts."""
        tasks = [make_task(f"t{i}", at(8 + i), at(9 + i)) for i in range(10)]
        tasks.append(make_task("all-day", at(8), at(18)))

        result = compare(make_schedule([]), make_schedule(tasks))

        assert result.summary.conflicts_found == 10
        assert all("all-day" in {t.id for t in c.conflicting_tasks} for c in result.conflicts)


class TestScheduleRepository:
    """Snapshot store round trips."""

    @pytest.fixture
    def repo(self):
        engine = create_engine("sqlite://")
        Base.metadata.create_all(bind=engine)
        session = sessionmaker(bind=engine)()
        yield ScheduleRepository(session)
        session.close()

    def test_round_trip_preserves_schedule(self, repo, old_schedule):
        schedule = Schedule(
            id=old_schedule.id,
            name=old_schedule.name,
            version=old_schedule.version,
            created_at=old_schedule.created_at,
            resources=old_schedule.resources,
            tasks=old_schedule.tasks + (make_task("9", at(8), at(9), course_id="CS9", priority=2),),
            metadata=ScheduleMetadata(semester="Spring", department="Computer Science"),
        )

        repo.save(schedule)

        assert repo.get_by_id(schedule.id) == schedule

    def test_round_trip_compares_unchanged(self, repo, old_schedule):
        repo.save(old_schedule)
        result = compare(old_schedule, repo.get_by_id(old_schedule.id))
        assert result.summary.tasks_unchanged == len(old_schedule.tasks)

    def test_missing_returns_none(self, repo):
        assert repo.get_by_id("missing") is None
        assert repo.delete("missing") is False

    def test_list_all_orders_by_snapshot_time(self, repo):
        later = Schedule(id="b", name="B", version="2", created_at=datetime(2024, 10, 1),
                         resources=(Resource(id="R1", name="X", type=ResourceType.CLASSROOM),))
        earlier = Schedule(id="a", name="A", version="1", created_at=datetime(2024, 9, 1))

        repo.save(later)
        repo.save(earlier)

        assert [s.id for s in repo.list_all()] == ["a", "b"]


class TestLoggingSetup:
    """Console logging configuration."""

    def test_repeated_setup_keeps_one_stdout_handler(self):
        import logging
        import sys

        from app.utils.logging_config import setup_logging

        root = setup_logging()
        setup_logging()

        stdout_handlers = [
            h for h in root.handlers if isinstance(h, logging.StreamHandler) and h.stream is sys.stdout
        ]
        try:
            assert len(stdout_handlers) == 1
        finally:
            for h in stdout_handlers:
                root.removeHandler(h)
