from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from app.models.comparison import FieldChange


class FieldRule(ABC):
    """
    Decides whether a single field differs between two versions of an entity.
    Extend this to give a field its own notion of "changed".
    """

    @abstractmethod
    def differs(self, old_value: Any, new_value: Any) -> bool:
        pass


class EqualityRule(FieldRule):
    """Structural equality. None on one side and a value on the other is a change."""

    def differs(self, old_value: Any, new_value: Any) -> bool:
        return old_value != new_value


class TimeToleranceRule(FieldRule):
    """
    Timestamps only count as changed when they move by more than the tolerance.
    A shift exactly equal to the tolerance is not a change.
    """

    def __init__(self, tolerance_minutes: float = 0):
        if tolerance_minutes < 0:
            raise ValueError(f"time tolerance must not be negative, got {tolerance_minutes}")
        self.tolerance_seconds = tolerance_minutes * 60

    def differs(self, old_value: Optional[datetime], new_value: Optional[datetime]) -> bool:
        if old_value is None or new_value is None:
            return old_value is not new_value
        return abs((old_value - new_value).total_seconds()) > self.tolerance_seconds


class FieldRuleRegistry:
    """
    Ordered table of field name -> rule for one entity type.
    The diff engine walks this table; adding a field never touches its control flow.
    """

    def __init__(self):
        self.rules: Dict[str, FieldRule] = {}

    def register(self, field_name: str, rule: FieldRule):
        self.rules[field_name] = rule

    def detect_changes(self, old: Any, new: Any, ignore_fields: Iterable[str] = ()) -> List[FieldChange]:
        """Return one FieldChange per registered field whose rule reports a difference."""
        ignored = set(ignore_fields)
        changes: List[FieldChange] = []
        for field_name, rule in self.rules.items():
            if field_name in ignored:
                continue
            old_value = getattr(old, field_name, None)
            new_value = getattr(new, field_name, None)
            if rule.differs(old_value, new_value):
                changes.append(FieldChange(field=field_name, old_value=old_value, new_value=new_value))
        return changes


TASK_FIELDS = (
    "content",
    "start",
    "end",
    "group",
    "task_type",
    "class_name",
    "title",
    "course_id",
    "course_name",
    "priority",
)

RESOURCE_FIELDS = ("name", "type")


def task_rules(tolerance_minutes: float = 0) -> FieldRuleRegistry:
    registry = FieldRuleRegistry()
    equality = EqualityRule()
    time_rule = TimeToleranceRule(tolerance_minutes)
    for name in TASK_FIELDS:
        registry.register(name, time_rule if name in ("start", "end") else equality)
    return registry


def resource_rules() -> FieldRuleRegistry:
    registry = FieldRuleRegistry()
    for name in RESOURCE_FIELDS:
        registry.register(name, EqualityRule())
    return registry
