import csv
import io
import json
from dataclasses import asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict

from app.models.comparison import ComparisonResult

SUPPORTED_FORMATS = ("json", "csv", "summary")
CSV_HEADERS = ["Task ID", "Status", "Field Changed", "Old Value", "New Value"]
TIME_FORMAT = "%Y-%m-%d %H:%M"


class UnsupportedFormatError(ValueError):
    """Raised when a comparison is exported to a format we don't render."""

    def __init__(self, fmt: str):
        super().__init__(f"Unsupported export format: {fmt}")
        self.format = fmt


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def result_to_dict(result: ComparisonResult) -> Dict[str, Any]:
    """Plain-dict view of a result; datetimes and enums are left for the JSON encoder."""
    return asdict(result)


def _encode(value: Any) -> str:
    return json.dumps(value, default=_json_default)


def export_json(result: ComparisonResult) -> str:
    return json.dumps(result_to_dict(result), indent=2, default=_json_default)


def export_csv(result: ComparisonResult) -> str:
    """
    One row per changed field of a modified task, one bare row for every other task.
    Old/new values are JSON-encoded so timestamps and enums stay unambiguous.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)

    for comparison in result.tasks:
        status = comparison.status.value
        if comparison.changes:
            for change in comparison.changes:
                writer.writerow(
                    [comparison.task_id, status, change.field, _encode(change.old_value), _encode(change.new_value)]
                )
        else:
            writer.writerow([comparison.task_id, status, "", "", ""])

    return buffer.getvalue().rstrip("\n")


def export_summary(result: ComparisonResult) -> str:
    summary = result.summary
    lines = [
        "Schedule Comparison Summary",
        "==========================",
        "",
        "Tasks:",
        f"- Total tasks (old): {summary.total_tasks_old}",
        f"- Total tasks (new): {summary.total_tasks_new}",
        f"- Tasks added: {summary.tasks_added}",
        f"- Tasks removed: {summary.tasks_removed}",
        f"- Tasks modified: {summary.tasks_modified}",
        f"- Tasks unchanged: {summary.tasks_unchanged}",
        "",
        "Resources:",
        f"- Resources added: {summary.resources_added}",
        f"- Resources removed: {summary.resources_removed}",
        f"- Resources modified: {summary.resources_modified}",
        "",
        "Conflicts:",
        f"- Total conflicts found: {summary.conflicts_found}",
    ]

    if result.conflicts:
        lines += ["", "Conflict Details:"]
        for index, conflict in enumerate(result.conflicts, start=1):
            start = conflict.time_range.start.strftime(TIME_FORMAT)
            end = conflict.time_range.end.strftime(TIME_FORMAT)
            task_names = ", ".join(t.content for t in conflict.conflicting_tasks)
            lines += [
                f"{index}. {conflict.type.value} for {conflict.resource_name}",
                f"   Time: {start} - {end}",
                f"   Conflicting tasks: {task_names}",
            ]

    return "\n".join(lines)


def export_comparison(result: ComparisonResult, fmt: str) -> str:
    """Render a comparison result as json, csv or summary text."""
    if fmt == "json":
        return export_json(result)
    if fmt == "csv":
        return export_csv(result)
    if fmt == "summary":
        return export_summary(result)
    raise UnsupportedFormatError(fmt)


def utilization_summary(result: ComparisonResult) -> str:
    """Per-resource hours before and after, e.g. `- Resource 1: 2.0h → 3.0h (+1.0h)`."""
    if result.statistics is None:
        raise ValueError("Comparison was computed without statistics")

    lines = ["Resource Utilization Changes:"]
    for resource_id, data in result.statistics.utilization_changes_by_resource.items():
        change_text = f"+{data.change:.1f}" if data.change > 0 else f"{data.change:.1f}"
        lines.append(
            f"- Resource {resource_id}: {data.old_utilization:.1f}h → {data.new_utilization:.1f}h ({change_text}h)"
        )
    return "\n".join(lines) + "\n"
