"""Domain models for ROI Tracker."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field


class Priority(StrEnum):
    """Task priority."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Status(StrEnum):
    """Task lifecycle status."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


# Higher weight sorts first
PRIORITY_WEIGHT: dict[Priority, int] = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


@dataclass
class Task:
    """A tracked sales/work item."""

    id: str  # task_<hex>, never reused
    title: str
    description: str
    revenue: float
    time_taken: float  # hours
    roi: float  # derived from revenue / time_taken
    priority: Priority
    status: Status
    notes: str
    created_at: str  # UTC ISO-8601, e.g. 2024-01-15T10:00:00.000Z
    updated_at: str


class TaskFormData(BaseModel):
    """User-entered draft of a task.

    Numeric fields may arrive as text and are coerced when the task is built.
    """

    title: str = ""
    description: str = ""
    revenue: float | str = ""
    time_taken: float | str = ""
    priority: Priority = Priority.MEDIUM
    status: Status = Status.PENDING
    notes: str = ""


class TaskFilters(BaseModel):
    """View-state filters for the task list."""

    search: str = ""
    status: Status | Literal["all"] = "all"
    priority: Priority | Literal["all"] = "all"


class TaskSummary(BaseModel):
    """Aggregate metrics derived from the whole collection."""

    total_tasks: int = Field(default=0, ge=0)
    completed_tasks: int = Field(default=0, ge=0)
    total_revenue: float = 0
    average_roi: float = 0
    efficiency: float = 0  # percent of tasks completed
    performance_grade: str = "D"
