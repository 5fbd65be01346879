from dataclasses import asdict
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.models.entities import Resource, ResourceType, Schedule, ScheduleMetadata, Task, TaskType
from app.storage.database import ScheduleSnapshotModel


def _task_to_record(task: Task) -> Dict:
    record = asdict(task)
    record["start"] = task.start.isoformat()
    record["end"] = task.end.isoformat()
    record["task_type"] = TaskType(task.task_type).value
    return record


def _record_to_task(record: Dict) -> Task:
    return Task(
        **{
            **record,
            "start": datetime.fromisoformat(record["start"]),
            "end": datetime.fromisoformat(record["end"]),
            "task_type": TaskType(record["task_type"]),
        }
    )


class ScheduleRepository:
    """Stores schedule snapshots. Snapshots are replaced wholesale on save, never patched."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, schedule_id: str) -> Optional[Schedule]:
        model = self.db.query(ScheduleSnapshotModel).filter(ScheduleSnapshotModel.id == schedule_id).first()
        if not model:
            return None
        return self._model_to_schedule(model)

    def list_all(self) -> List[Schedule]:
        models = self.db.query(ScheduleSnapshotModel).order_by(ScheduleSnapshotModel.snapshot_created_at).all()
        return [self._model_to_schedule(m) for m in models]

    def save(self, schedule: Schedule) -> None:
        resources = [{"id": r.id, "name": r.name, "type": ResourceType(r.type).value} for r in schedule.resources]
        tasks = [_task_to_record(t) for t in schedule.tasks]
        metadata = asdict(schedule.metadata) if schedule.metadata else None

        existing = self.db.query(ScheduleSnapshotModel).filter(ScheduleSnapshotModel.id == schedule.id).first()
        if existing:
            existing.name = schedule.name
            existing.version = schedule.version
            existing.snapshot_created_at = schedule.created_at
            existing.resources = resources
            existing.tasks = tasks
            existing.schedule_metadata = metadata
        else:
            model = ScheduleSnapshotModel(
                id=schedule.id,
                name=schedule.name,
                version=schedule.version,
                snapshot_created_at=schedule.created_at,
                resources=resources,
                tasks=tasks,
                schedule_metadata=metadata,
            )
            self.db.add(model)
        self.db.commit()

    def delete(self, schedule_id: str) -> bool:
        deleted = self.db.query(ScheduleSnapshotModel).filter(ScheduleSnapshotModel.id == schedule_id).delete()
        self.db.commit()
        return deleted > 0

    @staticmethod
    def _model_to_schedule(model: ScheduleSnapshotModel) -> Schedule:
        return Schedule(
            id=model.id,
            name=model.name,
            version=model.version,
            created_at=model.snapshot_created_at,
            resources=tuple(
                Resource(id=r["id"], name=r["name"], type=ResourceType(r["type"])) for r in model.resources
            ),
            tasks=tuple(_record_to_task(t) for t in model.tasks),
            metadata=ScheduleMetadata(**model.schedule_metadata) if model.schedule_metadata else None,
        )
