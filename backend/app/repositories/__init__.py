"""Persistence boundary: each repository wraps an async session factory."""

from app.repositories.catalog import CatalogRepository
from app.repositories.conflicts import ConflictRepository
from app.repositories.folders import FolderRepository

__all__ = ["CatalogRepository", "ConflictRepository", "FolderRepository"]
