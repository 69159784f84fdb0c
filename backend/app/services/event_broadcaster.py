"""Domain-specific event broadcasting layer.

Mutations in the pipeline announce themselves here as invalidation events
keyed by resource type and id. Delivery is best effort: a failing
broadcast is logged and never propagates into the mutation that caused it.
"""

import logging
from typing import Any

from app.api.websocket import ConnectionManager

logger = logging.getLogger(__name__)


class EventBroadcaster:
    """Domain-specific WebSocket event broadcasting."""

    def __init__(self, ws_manager: ConnectionManager):
        self._ws = ws_manager

    async def _invalidate(self, resource: str, entry_id: int | None, action: str) -> None:
        try:
            await self._ws.broadcast_invalidation(resource, entry_id, action)
        except Exception as e:
            logger.warning(f"Invalidation for {resource}:{entry_id} ({action}) not delivered: {e}")

    async def _scan_event(self, event: str, **details: Any) -> None:
        try:
            await self._ws.broadcast_scan_event(event, **details)
        except Exception as e:
            logger.warning(f"Scan event '{event}' not delivered: {e}")

    # --- Catalog Events ---

    async def broadcast_catalog_upserted(self, resource: str, entry_id: int, created: bool):
        """Broadcast a catalog create or file-field refresh."""
        await self._invalidate(resource, entry_id, "created" if created else "updated")

    async def broadcast_status_changed(self, resource: str, entry_id: int | None):
        """Broadcast a transcode status change on one entry, or many when no id is given."""
        await self._invalidate(resource, entry_id, "status")

    # --- Conflict Events ---

    async def broadcast_conflict_recorded(self, conflict_id: int):
        await self._invalidate("conflicts", conflict_id, "recorded")

    async def broadcast_conflict_resolved(self, conflict_id: int):
        await self._invalidate("conflicts", conflict_id, "resolved")

    async def broadcast_conflicts_deleted(self, conflict_id: int | None = None):
        """Broadcast removal of one conflict, or of many when no id is given."""
        await self._invalidate("conflicts", conflict_id, "deleted")

    # --- Folder Events ---

    async def broadcast_folder_changed(self, folder_id: int, action: str):
        await self._invalidate("folders", folder_id, action)

    # --- Scan Events ---

    async def broadcast_scan_started(self, paths: list[str]):
        await self._scan_event("started", paths=paths)

    async def broadcast_scan_completed(self, summary: dict):
        await self._scan_event("completed", summary=summary)

    async def broadcast_scan_failed(self, error: str):
        await self._scan_event("failed", error=error)
