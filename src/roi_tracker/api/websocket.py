"""WebSocket API endpoint for task change and undo notices."""

import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from roi_tracker.factory import get_task_service

if TYPE_CHECKING:
    from roi_tracker.websocket.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)

router = APIRouter()

# Global connection manager (injected via set_connection_manager)
_connection_manager: "ConnectionManager | None" = None


def set_connection_manager(manager: "ConnectionManager") -> None:
    """Set global connection manager.

    Args:
        manager: ConnectionManager instance
    """
    global _connection_manager
    _connection_manager = manager


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """WebSocket endpoint: a state snapshot on connect, then task and undo events.

    Args:
        websocket: WebSocket connection
    """
    if not _connection_manager:
        logger.error("[WebSocket] Connection manager not initialized")
        await websocket.close(code=1011, reason="Server not ready")
        return

    await _connection_manager.connect(websocket)
    try:
        # Late joiners start from the current state, then follow events
        await websocket.send_json(_state_snapshot())

        while True:
            data = await websocket.receive_text()
            logger.debug(f"[WebSocket] Received from client: {data}")

            if data == "ping":
                await websocket.send_text("pong")

    except WebSocketDisconnect:
        logger.info("[WebSocket] Client disconnected normally")
        _connection_manager.disconnect(websocket)
    except Exception as e:
        logger.error(f"[WebSocket] Error: {e}", exc_info=True)
        _connection_manager.disconnect(websocket)


def _state_snapshot() -> dict[str, Any]:
    """Build the state message sent to a client when it connects."""
    service = get_task_service()
    pending = service.pending_deletion
    return {
        "type": "state",
        "phase": service.phase.value,
        "task_count": len(service.tasks),
        "pending_deletion": (
            {"task_id": pending.id, "title": pending.title} if pending else None
        ),
    }
