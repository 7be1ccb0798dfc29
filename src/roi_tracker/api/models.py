"""API models for ROI Tracker."""

from pydantic import BaseModel

from roi_tracker.models import Priority, Status


class TaskResponse(BaseModel):
    """API response model for tasks."""

    id: str
    title: str
    description: str
    revenue: float
    revenue_display: str  # "$50,000"
    time_taken: float
    roi: float
    roi_display: str  # "5000.00", or a placeholder for invalid ROI
    priority: Priority
    status: Status
    notes: str
    created_at: str
    updated_at: str


class SummaryResponse(BaseModel):
    """API response model for collection metrics."""

    total_tasks: int
    completed_tasks: int
    total_revenue: float
    total_revenue_display: str
    average_roi: float
    efficiency: float
    performance_grade: str


class PendingDeletionResponse(BaseModel):
    """Undo notice for the most recent deletion."""

    task_id: str
    title: str


class StateResponse(BaseModel):
    """Service lifecycle state."""

    phase: str
    task_count: int
    pending_deletion: PendingDeletionResponse | None


class RoiPreviewResponse(BaseModel):
    """ROI computed for unsaved form values."""

    roi: float
    roi_display: str


class ImportResponse(BaseModel):
    """Result of a CSV import."""

    imported: int
    tasks: list[TaskResponse]
