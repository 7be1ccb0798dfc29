"""Task API endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import ValidationError

from roi_tracker.api.models import (
    ImportResponse,
    PendingDeletionResponse,
    RoiPreviewResponse,
    StateResponse,
    SummaryResponse,
    TaskResponse,
)
from roi_tracker.csv_codec import export_filename
from roi_tracker.errors import CsvFormatError, TaskNotFoundError, TaskValidationError
from roi_tracker.factory import get_task_service
from roi_tracker.metrics import compute_roi, format_currency, format_roi
from roi_tracker.models import Task, TaskFilters, TaskFormData
from roi_tracker.service import TaskService

logger = logging.getLogger(__name__)

router = APIRouter()


def _ready_service() -> TaskService:
    """Return the task service, or 503 while it is still loading."""
    service = get_task_service()
    if not service.is_ready:
        raise HTTPException(status_code=503, detail="Tasks are still loading")
    return service


@router.get("/state", response_model=StateResponse)
async def get_state() -> StateResponse:
    """Report whether tasks are loaded and whether an undo notice is showing."""
    service = get_task_service()
    pending = service.pending_deletion
    return StateResponse(
        phase=service.phase,
        task_count=len(service.tasks),
        pending_deletion=(
            PendingDeletionResponse(task_id=pending.id, title=pending.title) if pending else None
        ),
    )


@router.get("/tasks", response_model=list[TaskResponse])
async def list_tasks(
    search: str = "",
    status: str = "all",
    priority: str = "all",
) -> list[TaskResponse]:
    """List tasks, filtered and sorted by ROI, priority and title.

    Args:
        search: Case-insensitive text matched against title, description and notes
        status: Status to keep, or "all"
        priority: Priority to keep, or "all"

    Returns:
        Matching tasks in display order
    """
    service = _ready_service()
    try:
        filters = TaskFilters(search=search, status=status, priority=priority)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail="Invalid status or priority filter") from e
    return [_task_to_response(task) for task in service.visible_tasks(filters)]


@router.get("/tasks/export")
async def export_tasks() -> Response:
    """Download all tasks as a dated CSV file."""
    service = _ready_service()
    if not service.tasks:
        raise HTTPException(status_code=400, detail="No tasks to export")

    filename = export_filename()
    logger.info(f"Exporting {len(service.tasks)} tasks as {filename}")
    return Response(
        content=service.export_csv(),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/tasks/import", response_model=ImportResponse)
async def import_tasks(request: Request) -> ImportResponse:
    """Import tasks from a CSV document sent as the request body.

    Returns:
        Number of imported tasks and the tasks themselves

    Raises:
        HTTPException: 400 if the body is not UTF-8 text, 422 if it cannot be parsed
    """
    service = _ready_service()
    body = await request.body()
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning(f"Import body is not UTF-8: {e}")
        raise HTTPException(status_code=400, detail="Failed to read file") from e

    try:
        added = service.import_csv(text)
    except CsvFormatError as e:
        logger.warning(f"Import rejected: {e}")
        raise HTTPException(status_code=422, detail="Failed to parse CSV file") from e

    return ImportResponse(imported=len(added), tasks=[_task_to_response(t) for t in added])


@router.post("/tasks/undo", response_model=TaskResponse)
async def undo_delete() -> TaskResponse:
    """Restore the most recently deleted task.

    Raises:
        HTTPException: 404 if the undo window has closed
    """
    service = _ready_service()
    restored = service.undo_delete()
    if restored is None:
        raise HTTPException(status_code=404, detail="Nothing to undo")
    return _task_to_response(restored)


@router.post("/tasks/undo/dismiss")
async def dismiss_undo() -> dict[str, str]:
    """Close the undo window without restoring."""
    _ready_service().dismiss_undo()
    return {"status": "success"}


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str) -> TaskResponse:
    """Get a single task by ID."""
    task = _ready_service().get_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
    return _task_to_response(task)


@router.post("/tasks", response_model=TaskResponse, status_code=201)
async def create_task(form: TaskFormData) -> TaskResponse:
    """Create a task from form data.

    Raises:
        HTTPException: 422 with per-field messages if the form is invalid
    """
    service = _ready_service()
    try:
        task = service.add_task(form)
    except TaskValidationError as e:
        raise HTTPException(status_code=422, detail={"errors": e.errors}) from e
    return _task_to_response(task)


@router.put("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(task_id: str, form: TaskFormData) -> TaskResponse:
    """Replace a task's editable fields.

    Raises:
        HTTPException: 404 if task not found, 422 if the form is invalid
    """
    service = _ready_service()
    try:
        task = service.edit_task(task_id, form)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except TaskValidationError as e:
        raise HTTPException(status_code=422, detail={"errors": e.errors}) from e
    return _task_to_response(task)


@router.delete("/tasks/{task_id}")
async def delete_task(task_id: str) -> dict[str, str]:
    """Delete a task; it stays restorable via /tasks/undo until the window closes.

    Raises:
        HTTPException: 404 if task not found
    """
    deleted = _ready_service().delete_task(task_id)
    if deleted is None:
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
    return {"status": "success", "task_id": task_id}


@router.get("/summary", response_model=SummaryResponse)
async def get_summary() -> SummaryResponse:
    """Summary metrics over all tasks (filters do not apply)."""
    summary = _ready_service().summary()
    return SummaryResponse(
        **summary.model_dump(),
        total_revenue_display=format_currency(summary.total_revenue),
    )


@router.get("/roi/preview", response_model=RoiPreviewResponse)
async def preview_roi(revenue: str = "", time_taken: str = "") -> RoiPreviewResponse:
    """Compute ROI for unsaved form values."""
    roi = compute_roi(revenue, time_taken)
    return RoiPreviewResponse(roi=roi, roi_display=format_roi(roi))


def _task_to_response(task: Task) -> TaskResponse:
    """Convert Task to TaskResponse."""
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        revenue=task.revenue,
        revenue_display=format_currency(task.revenue),
        time_taken=task.time_taken,
        roi=task.roi,
        roi_display=format_roi(task.roi),
        priority=task.priority,
        status=task.status,
        notes=task.notes,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )
