"""Dependency injection factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from roi_tracker import __version__
from roi_tracker.config import Config
from roi_tracker.service import TaskService
from roi_tracker.storage.store import JsonFileKeyValueStore, KeyValueTaskStore, TaskStore
from roi_tracker.websocket.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)

# Global config instance for dependency injection
_config: Config | None = None

# Global singletons, created on first use
_connection_manager: ConnectionManager | None = None
_task_service: TaskService | None = None


def get_config() -> Config:
    """Get or create Config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_task_store() -> TaskStore:
    """Create the task store backed by the configured data file."""
    config = get_config()
    return KeyValueTaskStore(JsonFileKeyValueStore(config.data_file), config.storage_key)


def get_connection_manager() -> ConnectionManager:
    """Get or create ConnectionManager singleton."""
    global _connection_manager
    if _connection_manager is None:
        _connection_manager = ConnectionManager()
    return _connection_manager


def get_task_service() -> TaskService:
    """Get or create TaskService singleton, wired to broadcast its events."""
    global _task_service
    if _task_service is None:
        config = get_config()
        _task_service = TaskService(
            get_task_store(),
            undo_timeout=config.undo_timeout_seconds,
            listener=get_connection_manager().publish,
        )
    return _task_service


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle - load tasks on startup, flush on shutdown."""
    service = get_task_service()
    logger.info("[Lifespan] Loading tasks...")
    await service.ensure_loaded()
    try:
        yield
    finally:
        logger.info("[Lifespan] Flushing pending writes...")
        await service.shutdown()


def create_app() -> FastAPI:
    """Create FastAPI application (composition root)."""
    from roi_tracker.api.tasks import router as tasks_router
    from roi_tracker.api.websocket import router as ws_router
    from roi_tracker.api.websocket import set_connection_manager

    set_connection_manager(get_connection_manager())

    app = FastAPI(
        title="ROI Tracker",
        description="Track tasks and the revenue they return per hour",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(tasks_router, prefix="/api")
    app.include_router(ws_router)  # WebSocket at /ws

    return app
