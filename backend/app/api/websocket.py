"""WebSocket connection manager for real-time updates."""

import asyncio
import json
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages WebSocket connections for broadcasting updates."""

    def __init__(self) -> None:
        self.active_connections: list[WebSocket] = []
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> None:
        """Accept a new WebSocket connection."""
        await websocket.accept()
        async with self._lock:
            self.active_connections.append(websocket)
        logger.info(f"Client connected. Total connections: {len(self.active_connections)}")

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a WebSocket connection."""
        async with self._lock:
            if websocket in self.active_connections:
                self.active_connections.remove(websocket)
        logger.info(f"Client disconnected. Total connections: {len(self.active_connections)}")

    async def broadcast(self, message: dict[str, Any]) -> None:
        """Broadcast a message to all connected clients."""
        if not self.active_connections:
            return

        json_message = json.dumps(message, default=str)
        disconnected = []

        async with self._lock:
            for connection in self.active_connections:
                try:
                    await connection.send_text(json_message)
                except Exception as e:
                    logger.warning(f"Failed to send message: {e}")
                    disconnected.append(connection)

            # Clean up disconnected clients
            for conn in disconnected:
                self.active_connections.remove(conn)

    async def broadcast_invalidation(
        self,
        resource: str,
        entry_id: int | None = None,
        action: str | None = None,
    ) -> None:
        """Tell caches that a resource (or one entry of it) is stale."""
        data: dict = {"type": "invalidate", "resource": resource}
        if entry_id is not None:
            data["id"] = entry_id
        if action is not None:
            data["action"] = action
        await self.broadcast(data)

    async def broadcast_scan_event(self, event: str, **details: Any) -> None:
        """Broadcast a scan lifecycle event ("started", "completed", "failed")."""
        await self.broadcast({"type": "scan_event", "event": event, **details})


# Singleton instance
manager = ConnectionManager()
