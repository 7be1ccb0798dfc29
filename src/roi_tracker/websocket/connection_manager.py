"""WebSocket connection management."""

import asyncio
import json
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages active WebSocket connections and broadcasts task events."""

    def __init__(self) -> None:
        """Initialize connection manager with empty connection list."""
        self.active_connections: list[WebSocket] = []
        self._pending_sends: set[asyncio.Task[None]] = set()

    async def connect(self, websocket: WebSocket) -> None:
        """Accept and register a new WebSocket connection.

        Args:
            websocket: WebSocket connection to register
        """
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"[ConnectionManager] Client connected (total: {len(self.active_connections)})")

    def disconnect(self, websocket: WebSocket) -> None:
        """Remove a WebSocket connection from active list.

        Args:
            websocket: WebSocket connection to remove
        """
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
            logger.info(
                f"[ConnectionManager] Client disconnected (total: {len(self.active_connections)})"
            )

    async def broadcast(self, message: dict[str, Any]) -> None:
        """Broadcast message to all connected clients.

        Args:
            message: Dictionary to send as JSON to all clients
        """
        if not self.active_connections:
            logger.debug("[ConnectionManager] No active connections to broadcast to")
            return

        message_json = json.dumps(message)
        num_clients = len(self.active_connections)
        logger.debug(f"[ConnectionManager] Broadcasting to {num_clients} clients: {message_json}")

        # Send to all connections, remove dead ones
        dead_connections = []
        for connection in list(self.active_connections):
            try:
                await connection.send_text(message_json)
            except Exception as e:
                logger.warning(f"[ConnectionManager] Failed to send to client: {e}")
                dead_connections.append(connection)

        for connection in dead_connections:
            self.disconnect(connection)

    def publish(self, message: dict[str, Any]) -> None:
        """Schedule a broadcast from synchronous code on the event loop.

        Used as the TaskService event listener.

        Args:
            message: Dictionary to send as JSON to all clients
        """
        if not self.active_connections:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("[ConnectionManager] No running loop, dropping event")
            return

        task = loop.create_task(self.broadcast(message))
        self._pending_sends.add(task)
        task.add_done_callback(self._pending_sends.discard)
