"""Error types for ROI Tracker."""


class RoiTrackerError(Exception):
    """Base exception for ROI Tracker."""

    pass


class TaskValidationError(RoiTrackerError, ValueError):
    """Form data failed validation.

    Attributes:
        errors: Mapping of field name to a human readable message
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Invalid task data: {fields}")


class TaskNotFoundError(RoiTrackerError, KeyError):
    """No task with the requested id."""

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")

    def __str__(self) -> str:
        return str(self.args[0])


class ServiceNotReadyError(RoiTrackerError):
    """The task collection has not finished loading."""

    pass


class TaskImportError(RoiTrackerError):
    """Base class for CSV import failures."""

    pass


class CsvFormatError(TaskImportError):
    """The document is empty or cannot be parsed as CSV."""

    pass


class FileUnreadableError(TaskImportError):
    """The import file could not be read or decoded."""

    pass
