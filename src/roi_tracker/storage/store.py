"""Key-value persistence for the task collection."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pydantic import TypeAdapter

from roi_tracker.models import Task

logger = logging.getLogger(__name__)

_TASK_LIST = TypeAdapter(list[Task])


class KeyValueStore(Protocol):
    """Protocol for a string key-value store."""

    def get(self, key: str) -> str | None:
        """Return the value stored under key, or None if absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...


class TaskStore(Protocol):
    """Protocol for loading and saving the whole task collection."""

    def load(self) -> list[Task] | None:
        """Load the stored collection, or None if nothing is stored."""
        ...

    def save(self, tasks: list[Task]) -> None:
        """Persist the full collection."""
        ...


class InMemoryKeyValueStore:
    """Dictionary-backed key-value store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        """Initialize with optional pre-populated values."""
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        """Return the value stored under key, or None if absent."""
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        """Store value under key."""
        self.data[key] = value


class JsonFileKeyValueStore:
    """Key-value store persisted as a single JSON object file."""

    def __init__(self, path: str | Path) -> None:
        """Initialize store backed by the given file (created on first write)."""
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """File holding the JSON object."""
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        data = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Store file {self._path} does not hold a JSON object")
        return data

    def get(self, key: str) -> str | None:
        """Return the value stored under key, or None if absent.

        Raises:
            ValueError: If the store file is not valid JSON
        """
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        """Store value under key.

        The file is rewritten through a temporary file and atomically
        replaced, so readers never see a partial write.
        """
        try:
            data = self._read_all()
        except ValueError:
            logger.warning(f"[JsonFileKeyValueStore] Overwriting unreadable store {self._path}")
            data = {}
        data[key] = value

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".store-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class KeyValueTaskStore:
    """Task store keeping the JSON-serialized collection under one key."""

    def __init__(self, kv: KeyValueStore, key: str) -> None:
        """Initialize with backing key-value store and storage key."""
        self._kv = kv
        self._key = key

    def load(self) -> list[Task] | None:
        """Load the stored collection.

        Returns:
            Stored tasks, or None when the key is absent

        Raises:
            ValueError: If the stored value is malformed (pydantic's
                ValidationError is a ValueError)
        """
        raw = self._kv.get(self._key)
        if raw is None:
            return None
        return _TASK_LIST.validate_json(raw)

    def save(self, tasks: list[Task]) -> None:
        """Serialize and store the full collection."""
        self._kv.set(self._key, _TASK_LIST.dump_json(tasks).decode("utf-8"))
