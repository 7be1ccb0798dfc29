"""Task service: owns the task collection, its persistence and the undo window."""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from enum import StrEnum
from pathlib import Path
from typing import Any

from roi_tracker.collection import (
    create_task,
    filter_tasks,
    generate_id,
    sort_tasks,
    update_task,
    validate_form,
)
from roi_tracker.csv_codec import encode, parse_document, read_csv_file, write_csv_file
from roi_tracker.errors import ServiceNotReadyError, TaskNotFoundError, TaskValidationError
from roi_tracker.metrics import compute_summary
from roi_tracker.models import Task, TaskFilters, TaskFormData, TaskSummary
from roi_tracker.samples import sample_tasks
from roi_tracker.storage.store import TaskStore

logger = logging.getLogger(__name__)

DEFAULT_UNDO_TIMEOUT = 5.0

EventListener = Callable[[dict[str, Any]], None]


class Phase(StrEnum):
    """Service lifecycle phase."""

    LOADING = "loading"
    READY = "ready"


@dataclass
class PendingDeletion:
    """The single most recent deletion that can still be undone."""

    task: Task
    timer: asyncio.TimerHandle | None = field(default=None, repr=False)


class TaskService:
    """Holds the authoritative task list.

    Mutations replace the whole list, then schedule a fire-and-forget write of
    the full collection to the store. Must be driven from a running event loop.
    """

    def __init__(
        self,
        store: TaskStore,
        undo_timeout: float = DEFAULT_UNDO_TIMEOUT,
        listener: EventListener | None = None,
    ) -> None:
        """Initialize service.

        Args:
            store: Backing task store
            undo_timeout: Seconds a deletion stays undoable
            listener: Optional callback receiving change/undo events
        """
        self._store = store
        self._undo_timeout = undo_timeout
        self._listener = listener
        self._tasks: list[Task] = []
        self._phase = Phase.LOADING
        self._load_task: asyncio.Task[None] | None = None
        self._pending: PendingDeletion | None = None
        self._persist_lock = asyncio.Lock()
        self._background_tasks: set[asyncio.Task[None]] = set()

    def set_listener(self, listener: EventListener | None) -> None:
        """Replace the event listener."""
        self._listener = listener

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def is_ready(self) -> bool:
        return self._phase is Phase.READY

    @property
    def tasks(self) -> list[Task]:
        """Copy of the collection in stored order."""
        return list(self._tasks)

    @property
    def pending_deletion(self) -> Task | None:
        """Task that can currently be restored with undo_delete, if any."""
        return self._pending.task if self._pending else None

    # -------------------- loading --------------------

    async def ensure_loaded(self) -> None:
        """Load the collection from the store, once per service.

        Concurrent and repeated callers all await the same load.
        """
        if self._load_task is None:
            self._load_task = asyncio.create_task(self._load())
        await asyncio.shield(self._load_task)

    async def _load(self) -> None:
        seeded = False
        try:
            stored = await asyncio.to_thread(self._store.load)
        except Exception as e:
            logger.error(f"[TaskService] Failed to load tasks, using samples: {e}", exc_info=True)
            tasks = sample_tasks()
        else:
            if stored is None:
                logger.info("[TaskService] No stored tasks, seeding samples")
                tasks = sample_tasks()
                seeded = True
            else:
                tasks = stored

        self._tasks = _with_unique_ids(tasks, taken=set())
        self._phase = Phase.READY
        logger.info(f"[TaskService] Loaded {len(self._tasks)} tasks")

        if seeded:
            self._schedule_persist()
        self._emit({"type": "tasks_changed", "count": len(self._tasks)})

    def _require_ready(self) -> None:
        if not self.is_ready:
            raise ServiceNotReadyError("Tasks are still loading")

    # -------------------- queries --------------------

    def get_task(self, task_id: str) -> Task | None:
        """Return task by ID, or None."""
        return next((t for t in self._tasks if t.id == task_id), None)

    def visible_tasks(self, filters: TaskFilters | None = None) -> list[Task]:
        """Filtered, sorted view of the collection."""
        return sort_tasks(filter_tasks(self._tasks, filters or TaskFilters()))

    def summary(self) -> TaskSummary:
        """Summary metrics over the full collection."""
        return compute_summary(self._tasks)

    def export_csv(self) -> str:
        """Encode the collection as CSV."""
        return encode(self._tasks)

    async def export_file(self, directory: Path) -> Path:
        """Write the collection to a dated CSV file in directory."""
        return await write_csv_file(self.tasks, directory)

    # -------------------- mutations --------------------

    def add_task(self, form: TaskFormData) -> Task:
        """Validate form data and append a new task.

        Raises:
            ServiceNotReadyError: If the collection is still loading
            TaskValidationError: If the form has invalid fields
        """
        self._require_ready()
        _raise_if_invalid(form)

        task = create_task(form)
        self._replace_tasks([*self._tasks, task])
        logger.info(f"[TaskService] Added task {task.id}")
        return task

    def edit_task(self, task_id: str, form: TaskFormData) -> Task:
        """Validate form data and update an existing task in place.

        Raises:
            ServiceNotReadyError: If the collection is still loading
            TaskNotFoundError: If no task has task_id
            TaskValidationError: If the form has invalid fields
        """
        self._require_ready()
        existing = self.get_task(task_id)
        if existing is None:
            raise TaskNotFoundError(task_id)
        _raise_if_invalid(form)

        updated = update_task(existing, form)
        self._replace_tasks([updated if t.id == task_id else t for t in self._tasks])
        logger.info(f"[TaskService] Updated task {task_id}")
        return updated

    def delete_task(self, task_id: str) -> Task | None:
        """Remove a task and open the undo window for it.

        A deletion that is still pending is replaced, not stacked.

        Returns:
            The removed task, or None if no task has task_id
        """
        self._require_ready()
        task = self.get_task(task_id)
        if task is None:
            return None

        self._replace_tasks([t for t in self._tasks if t.id != task_id])

        if self._pending is not None:
            self._clear_pending("replaced")

        pending = PendingDeletion(task=task)
        pending.timer = asyncio.get_running_loop().call_later(
            self._undo_timeout, self._expire_pending, pending
        )
        self._pending = pending
        logger.info(f"[TaskService] Deleted task {task_id} (undo for {self._undo_timeout}s)")
        self._emit({"type": "undo_armed", "task_id": task.id, "title": task.title})
        return task

    def undo_delete(self) -> Task | None:
        """Restore the pending deletion to the end of the collection.

        Returns:
            The restored task, or None if nothing is pending
        """
        pending = self._pending
        if pending is None:
            return None

        self._clear_pending("undo")
        self._replace_tasks([*self._tasks, pending.task])
        logger.info(f"[TaskService] Restored task {pending.task.id}")
        return pending.task

    def dismiss_undo(self) -> None:
        """Close the undo window without restoring."""
        if self._pending is not None:
            self._clear_pending("dismiss")

    def import_tasks(self, new_tasks: Iterable[Task]) -> list[Task]:
        """Append tasks to the collection.

        IDs that collide with existing tasks are replaced.

        Returns:
            The tasks as added
        """
        self._require_ready()
        taken = {t.id for t in self._tasks}
        if self._pending is not None:
            taken.add(self._pending.task.id)
        added = _with_unique_ids(new_tasks, taken)
        if added:
            self._replace_tasks([*self._tasks, *added])
        logger.info(f"[TaskService] Imported {len(added)} tasks")
        return added

    def import_csv(self, text: str) -> list[Task]:
        """Decode CSV text and append the tasks.

        Raises:
            CsvFormatError: If the document is empty or malformed
        """
        self._require_ready()
        return self.import_tasks(parse_document(text))

    async def import_file(self, path: Path) -> list[Task]:
        """Read a CSV file to completion and append its tasks.

        Raises:
            FileUnreadableError: If the file cannot be read
            CsvFormatError: If the document is empty or malformed
        """
        self._require_ready()
        tasks = await read_csv_file(path)
        return self.import_tasks(tasks)

    # -------------------- internals --------------------

    def _replace_tasks(self, tasks: list[Task]) -> None:
        self._tasks = tasks
        self._schedule_persist()
        self._emit({"type": "tasks_changed", "count": len(tasks)})

    def _expire_pending(self, pending: PendingDeletion) -> None:
        # Ignore callbacks for a record that is no longer current
        if self._pending is pending:
            self._clear_pending("timeout")

    def _clear_pending(self, reason: str) -> None:
        pending = self._pending
        if pending is None:
            return
        if pending.timer is not None:
            pending.timer.cancel()
        self._pending = None
        logger.debug(f"[TaskService] Undo window closed ({reason}) for {pending.task.id}")
        self._emit({"type": "undo_cleared", "reason": reason, "task_id": pending.task.id})

    def _schedule_persist(self) -> None:
        snapshot = list(self._tasks)
        task = asyncio.get_running_loop().create_task(self._persist(snapshot))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _persist(self, snapshot: list[Task]) -> None:
        # Lock is FIFO, so writes land in mutation order
        async with self._persist_lock:
            try:
                await asyncio.to_thread(self._store.save, snapshot)
                logger.debug(f"[TaskService] Persisted {len(snapshot)} tasks")
            except Exception as e:
                logger.error(f"[TaskService] Failed to persist tasks: {e}", exc_info=True)

    def _emit(self, event: dict[str, Any]) -> None:
        if self._listener is None:
            return
        try:
            self._listener(event)
        except Exception as e:
            logger.error(f"[TaskService] Event listener error: {e}", exc_info=True)

    async def flush(self) -> None:
        """Wait for all scheduled writes to finish."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Close any open undo window and flush pending writes."""
        if self._pending is not None and self._pending.timer is not None:
            self._pending.timer.cancel()
        self._pending = None
        await self.flush()


def _raise_if_invalid(form: TaskFormData) -> None:
    errors = validate_form(form)
    if errors:
        raise TaskValidationError(errors)


def _with_unique_ids(tasks: Iterable[Task], taken: set[str]) -> list[Task]:
    """Copy tasks, giving a fresh ID to any task whose ID is already taken."""
    result: list[Task] = []
    seen = set(taken)
    for task in tasks:
        if task.id in seen:
            task = replace(task, id=generate_id())
        seen.add(task.id)
        result.append(task)
    return result
