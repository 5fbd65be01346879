from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi.responses import Response
from pydantic import BaseModel, Field, field_validator, ValidationInfo
from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.engine.comparator import ScheduleComparator
from app.models.comparison import ComparisonOptions, ComparisonResult
from app.models.entities import DateRange, Resource, ResourceType, Schedule, ScheduleMetadata, Task, TaskType
from app.storage.database import get_db
from app.storage.repositories import ScheduleRepository
from app.utils.export import UnsupportedFormatError, export_comparison, result_to_dict

router = APIRouter()
settings = get_settings()
logger = logging.getLogger(__name__)


def to_naive_utc(v: datetime) -> datetime:
    """Aware timestamps are converted to UTC and stored naive; naive ones are taken as UTC already."""
    if v.tzinfo is not None:
        return v.astimezone(timezone.utc).replace(tzinfo=None)
    return v


class ResourceDTO(BaseModel):
    id: str
    name: str
    type: ResourceType

    def to_domain(self) -> Resource:
        return Resource(id=self.id, name=self.name, type=self.type)

    @classmethod
    def from_domain(cls, r: Resource) -> "ResourceDTO":
        return cls(id=r.id, name=r.name, type=r.type)


class TaskDTO(BaseModel):
    id: str
    content: str
    start: datetime
    end: datetime
    group: str
    task_type: TaskType
    class_name: Optional[str] = None
    title: Optional[str] = None
    course_id: Optional[str] = None
    course_name: Optional[str] = None
    priority: Optional[int] = None

    @field_validator("start", "end")
    @classmethod
    def normalize_timezone(cls, v: datetime):
        return to_naive_utc(v)

    @field_validator("end")
    @classmethod
    def validate_window(cls, v: datetime, info: ValidationInfo):
        """A task must end after it starts."""
        start = info.data.get("start")
        if start is not None and v <= start:
            raise ValueError("task end must be after start")
        return v

    def to_domain(self) -> Task:
        return Task(**self.model_dump())

    @classmethod
    def from_domain(cls, t: Task) -> "TaskDTO":
        return cls(
            id=t.id,
            content=t.content,
            start=t.start,
            end=t.end,
            group=t.group,
            task_type=t.task_type,
            class_name=t.class_name,
            title=t.title,
            course_id=t.course_id,
            course_name=t.course_name,
            priority=t.priority,
        )


class MetadataDTO(BaseModel):
    semester: Optional[str] = None
    academic_year: Optional[str] = None
    department: Optional[str] = None


class ScheduleDTO(BaseModel):
    id: str
    name: str
    version: str
    created_at: datetime
    resources: List[ResourceDTO] = []
    tasks: List[TaskDTO] = []
    metadata: Optional[MetadataDTO] = None

    @field_validator("created_at")
    @classmethod
    def normalize_timezone(cls, v: datetime):
        return to_naive_utc(v)

    def to_domain(self) -> Schedule:
        return Schedule(
            id=self.id,
            name=self.name,
            version=self.version,
            created_at=self.created_at,
            resources=tuple(r.to_domain() for r in self.resources),
            tasks=tuple(t.to_domain() for t in self.tasks),
            metadata=ScheduleMetadata(**self.metadata.model_dump()) if self.metadata else None,
        )

    @classmethod
    def from_domain(cls, s: Schedule) -> "ScheduleDTO":
        return cls(
            id=s.id,
            name=s.name,
            version=s.version,
            created_at=s.created_at,
            resources=[ResourceDTO.from_domain(r) for r in s.resources],
            tasks=[TaskDTO.from_domain(t) for t in s.tasks],
            metadata=MetadataDTO(**vars(s.metadata)) if s.metadata else None,
        )


class DateRangeDTO(BaseModel):
    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def normalize_timezone(cls, v: datetime):
        return to_naive_utc(v)

    @field_validator("end")
    @classmethod
    def validate_range(cls, v: datetime, info: ValidationInfo):
        start = info.data.get("start")
        if start is not None and v < start:
            raise ValueError("date range end must not precede its start")
        return v


class ComparisonOptionsDTO(BaseModel):
    ignore_fields: List[str] = []
    time_tolerance_minutes: Optional[float] = Field(None, ge=0)
    detect_conflicts: Optional[bool] = None
    include_statistics: Optional[bool] = None
    date_range: Optional[DateRangeDTO] = None

    def to_domain(self) -> ComparisonOptions:
        """Unset options fall back to the configured defaults."""
        return ComparisonOptions(
            ignore_fields=tuple(self.ignore_fields),
            time_tolerance_minutes=(
                settings.default_time_tolerance_minutes
                if self.time_tolerance_minutes is None
                else self.time_tolerance_minutes
            ),
            detect_conflicts=(
                settings.default_detect_conflicts if self.detect_conflicts is None else self.detect_conflicts
            ),
            include_statistics=(
                settings.default_include_statistics if self.include_statistics is None else self.include_statistics
            ),
            date_range=DateRange(start=self.date_range.start, end=self.date_range.end) if self.date_range else None,
        )


class CompareRequest(BaseModel):
    old_schedule: ScheduleDTO
    new_schedule: ScheduleDTO
    options: Optional[ComparisonOptionsDTO] = None


class ScheduleInfo(BaseModel):
    id: str
    name: str
    version: str
    created_at: datetime
    num_resources: int
    num_tasks: int


MEDIA_TYPES = {"json": "application/json", "csv": "text/csv", "summary": "text/plain"}


def _run_comparison(old: Schedule, new: Schedule, options: Optional[ComparisonOptionsDTO]) -> ComparisonResult:
    domain_options = (options or ComparisonOptionsDTO()).to_domain()
    logger.info(
        f"Compare request: {old.id} ({len(old.tasks)} tasks) -> {new.id} ({len(new.tasks)} tasks), "
        f"tolerance={domain_options.time_tolerance_minutes}min"
    )
    return ScheduleComparator(domain_options).compare_schedules(old, new)


def _result_payload(result: ComparisonResult) -> Dict[str, Any]:
    payload = result_to_dict(result)
    payload["conflicted_task_ids"] = ScheduleComparator.conflicted_task_ids(result)
    return payload


@router.post("/compare", summary="Compare two schedule versions")
def compare(req: CompareRequest):
    """
    Diff two schedule snapshots.

    **Returns:**
    - `summary`: added/removed/modified/unchanged counts and conflicts found
    - `tasks`, `resources`: per-entity verdicts with field-level changes
    - `conflicts`: overlapping tasks on the same resource in the new schedule
    - `statistics`: utilization change per resource and task-type distribution
    - `conflicted_task_ids`: every task involved in a conflict
    """
    result = _run_comparison(req.old_schedule.to_domain(), req.new_schedule.to_domain(), req.options)
    logger.info(f"Comparison complete: {result.summary.conflicts_found} conflicts")
    return _result_payload(result)


@router.post("/compare/export", summary="Compare and export as json, csv or summary text")
def compare_export(req: CompareRequest, format: str = Query("json", description="json, csv or summary")):
    """
    Same comparison as `/compare`, rendered by the exporter.

    **Error Handling:**
    - 400: Unsupported export format
    """
    result = _run_comparison(req.old_schedule.to_domain(), req.new_schedule.to_domain(), req.options)
    try:
        content = export_comparison(result, format)
    except UnsupportedFormatError as e:
        logger.warning(str(e))
        raise HTTPException(status_code=400, detail=str(e))
    return Response(content=content, media_type=MEDIA_TYPES[format])


@router.post("/schedules", response_model=ScheduleInfo, summary="Store a schedule snapshot")
def store_schedule(req: ScheduleDTO, db: Session = Depends(get_db)):
    schedule = req.to_domain()
    ScheduleRepository(db).save(schedule)
    logger.info(f"Stored schedule {schedule.id} v{schedule.version}")
    return _schedule_info(schedule)


@router.get("/schedules", response_model=List[ScheduleInfo], summary="List stored schedule snapshots")
def list_schedules(db: Session = Depends(get_db)):
    return [_schedule_info(s) for s in ScheduleRepository(db).list_all()]


@router.get("/schedules/{schedule_id}", response_model=ScheduleDTO, summary="Fetch a stored schedule snapshot")
def get_schedule(schedule_id: str, db: Session = Depends(get_db)):
    return ScheduleDTO.from_domain(_load_schedule(ScheduleRepository(db), schedule_id))


@router.delete("/schedules/{schedule_id}", summary="Delete a stored schedule snapshot")
def delete_schedule(schedule_id: str, db: Session = Depends(get_db)):
    if not ScheduleRepository(db).delete(schedule_id):
        logger.warning(f"Delete of unknown schedule {schedule_id}")
        raise HTTPException(status_code=404, detail=f"Schedule {schedule_id} not found")
    return {"deleted": schedule_id}


@router.post("/schedules/{old_id}/compare/{new_id}", summary="Compare two stored schedule snapshots")
def compare_stored(
    old_id: str,
    new_id: str,
    options: Optional[ComparisonOptionsDTO] = None,
    db: Session = Depends(get_db),
):
    """
    Compare two snapshots from the store.

    **Error Handling:**
    - 404: Either snapshot is not stored
    """
    repo = ScheduleRepository(db)
    old = _load_schedule(repo, old_id)
    new = _load_schedule(repo, new_id)
    return _result_payload(_run_comparison(old, new, options))


def _load_schedule(repo: ScheduleRepository, schedule_id: str) -> Schedule:
    schedule = repo.get_by_id(schedule_id)
    if schedule is None:
        logger.warning(f"Schedule {schedule_id} not found")
        raise HTTPException(status_code=404, detail=f"Schedule {schedule_id} not found")
    return schedule


def _schedule_info(s: Schedule) -> ScheduleInfo:
    return ScheduleInfo(
        id=s.id,
        name=s.name,
        version=s.version,
        created_at=s.created_at,
        num_resources=len(s.resources),
        num_tasks=len(s.tasks),
    )
