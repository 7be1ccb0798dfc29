"""Tests for task collection operations."""

import re

from roi_tracker.collection import (
    create_task,
    filter_tasks,
    sort_tasks,
    update_task,
    utc_timestamp,
    validate_form,
)
from roi_tracker.models import Priority, Status, TaskFilters, TaskFormData

TIMESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


def test_create_task_trims_and_coerces() -> None:
    """Test text is trimmed, numeric text coerced and ROI computed."""
    form = TaskFormData(
        title="  Enterprise Deal  ",
        description="  proposal ",
        revenue="1500",
        time_taken="3",
        priority=Priority.HIGH,
        status=Status.IN_PROGRESS,
        notes=" call back ",
    )

    task = create_task(form)

    assert task.title == "Enterprise Deal"
    assert task.description == "proposal"
    assert task.notes == "call back"
    assert task.revenue == 1500.0
    assert task.time_taken == 3.0
    assert task.roi == 500.0
    assert task.priority == Priority.HIGH
    assert task.status == Status.IN_PROGRESS
    assert task.id.startswith("task_")
    assert task.created_at == task.updated_at
    assert TIMESTAMP_RE.match(task.created_at)


def test_create_task_invalid_numbers_become_zero() -> None:
    """Test invalid numeric text becomes 0 and ROI stays 0."""
    task = create_task(TaskFormData(title="x", revenue="abc", time_taken=""))

    assert task.revenue == 0
    assert task.time_taken == 0
    assert task.roi == 0


def test_create_task_generates_unique_ids() -> None:
    """Test every created task gets its own ID."""
    ids = {create_task(TaskFormData(title="t", revenue=1, time_taken=1)).id for _ in range(200)}
    assert len(ids) == 200


def test_update_task_preserves_identity(make_task) -> None:
    """Test update keeps id/created_at, recomputes ROI and refreshes updated_at."""
    existing = make_task(title="Old", revenue=100.0, time_taken=1.0)

    updated = update_task(existing, TaskFormData(title=" New ", revenue=300, time_taken="2"))

    assert updated.id == existing.id
    assert updated.created_at == existing.created_at
    assert updated.title == "New"
    assert updated.roi == 150.0
    assert updated.updated_at > existing.updated_at
    # Original is untouched
    assert existing.title == "Old"
    assert existing.roi == 100.0


def test_update_task_never_predates_creation(make_task) -> None:
    """Test updated_at >= created_at even when created_at is in the future."""
    existing = make_task(
        created_at="2999-01-01T00:00:00.000Z", updated_at="2999-01-01T00:00:00.000Z"
    )

    updated = update_task(existing, TaskFormData(title="t", revenue=1, time_taken=1))

    assert updated.updated_at >= updated.created_at


def test_utc_timestamp_format() -> None:
    """Test timestamps are UTC ISO-8601 with milliseconds."""
    assert TIMESTAMP_RE.match(utc_timestamp())


def test_validate_form_reports_each_field() -> None:
    """Test validation messages are keyed by field."""
    errors = validate_form(TaskFormData(title="   ", revenue="-1", time_taken="0"))

    assert set(errors) == {"title", "revenue", "time_taken"}


def test_validate_form_rejects_non_numeric() -> None:
    """Test non-numeric amounts are rejected."""
    errors = validate_form(TaskFormData(title="ok", revenue="lots", time_taken="soon"))

    assert set(errors) == {"revenue", "time_taken"}


def test_validate_form_accepts_valid_data() -> None:
    """Test valid form has no errors (zero revenue is allowed)."""
    assert validate_form(TaskFormData(title="ok", revenue="0", time_taken=0.5)) == {}


def test_sort_by_roi_descending(make_task) -> None:
    """Test the higher-ROI task sorts first."""
    proposal = make_task(title="Proposal", revenue=50000.0, time_taken=10.0)
    call = make_task(title="Call", revenue=15000.0, time_taken=2.0)

    result = sort_tasks([proposal, call])

    assert proposal.roi == 5000.0
    assert call.roi == 7500.0
    assert result == [call, proposal]


def test_sort_ties_by_priority_then_title(make_task) -> None:
    """Test equal ROI falls back to priority (desc), then title (asc, case-insensitive)."""
    low = make_task(title="Aardvark", priority=Priority.LOW)
    beta = make_task(title="beta", priority=Priority.HIGH)
    alpha = make_task(title="Alpha", priority=Priority.HIGH)
    medium = make_task(title="Zulu", priority=Priority.MEDIUM)

    result = sort_tasks([low, beta, medium, alpha])

    assert [t.title for t in result] == ["Alpha", "beta", "Zulu", "Aardvark"]


def test_sort_is_stable_for_equal_keys(make_task) -> None:
    """Test tasks equal on every key keep their input order."""
    first = make_task(title="Same")
    second = make_task(title="Same")

    assert [t.id for t in sort_tasks([first, second])] == [first.id, second.id]
    assert [t.id for t in sort_tasks([second, first])] == [second.id, first.id]


def test_sort_is_idempotent_and_non_mutating(make_task) -> None:
    """Test sorting twice changes nothing and the input list is untouched."""
    tasks = [
        make_task(revenue=10.0, priority=Priority.LOW),
        make_task(revenue=30.0),
        make_task(revenue=20.0, priority=Priority.HIGH),
        make_task(revenue=0.0, time_taken=0.0),
    ]
    original = list(tasks)

    once = sort_tasks(tasks)

    assert sort_tasks(once) == once
    assert tasks == original
    assert [t.revenue for t in once] == [30.0, 20.0, 10.0, 0.0]


def test_filter_search_is_case_insensitive_across_fields(make_task) -> None:
    """Test search matches title, description or notes."""
    by_title = make_task(title="ACME renewal")
    by_description = make_task(description="call acme")
    by_notes = make_task(notes="Acme contact")
    other = make_task(title="Globex")

    result = filter_tasks([by_title, other, by_description, by_notes], TaskFilters(search="acme"))

    assert result == [by_title, by_description, by_notes]


def test_filter_by_status_and_priority(make_task) -> None:
    """Test status and priority filters combine."""
    match = make_task(status=Status.COMPLETED, priority=Priority.HIGH)
    wrong_priority = make_task(status=Status.COMPLETED, priority=Priority.LOW)
    wrong_status = make_task(status=Status.PENDING, priority=Priority.HIGH)
    tasks = [match, wrong_priority, wrong_status]

    assert filter_tasks(tasks, TaskFilters(status="completed", priority="high")) == [match]
    assert filter_tasks(tasks, TaskFilters(status="completed")) == [match, wrong_priority]
    assert filter_tasks(tasks, TaskFilters(priority="high")) == [match, wrong_status]


def test_filter_all_keeps_everything_in_order(make_task) -> None:
    """Test default filters keep every task without reordering."""
    tasks = [make_task(revenue=1.0), make_task(revenue=99.0), make_task(revenue=50.0)]

    assert filter_tasks(tasks, TaskFilters()) == tasks
