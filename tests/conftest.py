"""Test fixtures for ROI Tracker."""

import itertools
from collections.abc import Callable
from typing import Any

import pytest

from roi_tracker.metrics import compute_roi
from roi_tracker.models import Priority, Status, Task
from roi_tracker.storage.store import InMemoryKeyValueStore, KeyValueTaskStore

STORAGE_KEY = "test-tasks"


@pytest.fixture
def make_task() -> Callable[..., Task]:
    """Factory for tasks with sensible defaults; ROI follows revenue/time unless given."""
    counter = itertools.count(1)

    def factory(**overrides: Any) -> Task:
        n = next(counter)
        fields: dict[str, Any] = {
            "id": f"task_{n}",
            "title": f"Task {n}",
            "description": "",
            "revenue": 100.0,
            "time_taken": 1.0,
            "priority": Priority.MEDIUM,
            "status": Status.PENDING,
            "notes": "",
            "created_at": "2024-01-01T00:00:00.000Z",
            "updated_at": "2024-01-01T00:00:00.000Z",
        }
        fields.update(overrides)
        fields.setdefault("roi", compute_roi(fields["revenue"], fields["time_taken"]))
        return Task(**fields)

    return factory


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    """Empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def task_store(kv: InMemoryKeyValueStore) -> KeyValueTaskStore:
    """Task store on top of the in-memory key-value store."""
    return KeyValueTaskStore(kv, STORAGE_KEY)
