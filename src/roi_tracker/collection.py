"""Task collection operations: build, validate, filter and sort."""

import math
import uuid
from collections.abc import Iterable
from dataclasses import replace
from datetime import UTC, datetime

from roi_tracker.metrics import compute_roi, parse_number
from roi_tracker.models import PRIORITY_WEIGHT, Task, TaskFilters, TaskFormData


def generate_id() -> str:
    """Generate a unique task ID."""
    return f"task_{uuid.uuid4().hex}"


def utc_timestamp(now: datetime | None = None) -> str:
    """Return a sortable UTC ISO-8601 timestamp with millisecond precision."""
    moment = (now or datetime.now(UTC)).astimezone(UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def coerce_number(value: float | int | str | None) -> float:
    """Convert form input to a finite float, using 0 for anything invalid."""
    number = parse_number(value)
    return number if math.isfinite(number) else 0.0


def _coerce_revenue(value: float | int | str | None) -> float:
    return max(coerce_number(value), 0.0)


def validate_form(form: TaskFormData) -> dict[str, str]:
    """Validate user-entered form data.

    Args:
        form: Draft task data

    Returns:
        Mapping of field name to error message; empty when the form is valid
    """
    errors: dict[str, str] = {}

    if not form.title.strip():
        errors["title"] = "Title is required"

    revenue = parse_number(form.revenue)
    if not math.isfinite(revenue) or revenue < 0:
        errors["revenue"] = "Revenue must be a non-negative number"

    time_taken = parse_number(form.time_taken)
    if not math.isfinite(time_taken) or time_taken <= 0:
        errors["time_taken"] = "Time taken must be greater than 0"

    return errors


def create_task(form: TaskFormData) -> Task:
    """Build a new task from form data.

    Text fields are trimmed, numeric fields coerced (invalid text becomes 0)
    and ROI computed. The task gets a fresh ID and identical timestamps.
    """
    revenue = _coerce_revenue(form.revenue)
    time_taken = coerce_number(form.time_taken)
    now = utc_timestamp()

    return Task(
        id=generate_id(),
        title=form.title.strip(),
        description=form.description.strip(),
        revenue=revenue,
        time_taken=time_taken,
        roi=compute_roi(revenue, time_taken),
        priority=form.priority,
        status=form.status,
        notes=form.notes.strip(),
        created_at=now,
        updated_at=now,
    )


def update_task(existing: Task, form: TaskFormData) -> Task:
    """Apply form data to an existing task.

    Keeps ``id`` and ``created_at``, recomputes ROI and refreshes
    ``updated_at``. Returns a new Task; ``existing`` is left untouched.
    """
    revenue = _coerce_revenue(form.revenue)
    time_taken = coerce_number(form.time_taken)

    return replace(
        existing,
        title=form.title.strip(),
        description=form.description.strip(),
        revenue=revenue,
        time_taken=time_taken,
        roi=compute_roi(revenue, time_taken),
        priority=form.priority,
        status=form.status,
        notes=form.notes.strip(),
        # Imported tasks may carry a created_at from the future
        updated_at=max(utc_timestamp(), existing.created_at),
    )


def _sort_key(task: Task) -> tuple[float, int, str, str]:
    return (-task.roi, -PRIORITY_WEIGHT[task.priority], task.title.casefold(), task.title)


def sort_tasks(tasks: Iterable[Task]) -> list[Task]:
    """Sort tasks by ROI (desc), then priority (desc), then title (asc).

    Stable and non-mutating: tasks equal on every key keep their input order.
    """
    return sorted(tasks, key=_sort_key)


def filter_tasks(tasks: Iterable[Task], filters: TaskFilters) -> list[Task]:
    """Return the tasks matching all filters, in their original order.

    Args:
        tasks: Tasks to filter
        filters: Search text (title/description/notes, case-insensitive),
            status and priority ("all" disables a filter)

    Returns:
        Matching tasks
    """
    search = filters.search.casefold()

    def matches(task: Task) -> bool:
        if search and not any(
            search in text.casefold() for text in (task.title, task.description, task.notes)
        ):
            return False
        if filters.status != "all" and task.status != filters.status:
            return False
        if filters.priority != "all" and task.priority != filters.priority:
            return False
        return True

    return [task for task in tasks if matches(task)]
