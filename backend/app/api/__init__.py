"""API module."""

from app.api.websocket import ConnectionManager, manager

__all__ = ["ConnectionManager", "manager"]
