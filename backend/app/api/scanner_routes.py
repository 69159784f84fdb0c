"""REST API routes for scanning, media folders and scanning conflicts."""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import IntegrityError

from app.api.dependencies import get_pipeline
from app.core.errors import (
    ConfigurationError,
    ConflictNotFoundError,
    ConflictResolutionError,
    MetadataError,
    ScanInProgressError,
)
from app.matcher.models import Candidate
from app.models import FolderType, MediaFolder, MediaType, ScanningConflict
from app.services.config_service import get_config
from app.services.pipeline import Pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/scanner", tags=["scanner"])


# Request/Response Models
class FolderCreate(BaseModel):
    """Request model for registering a media folder."""

    path: str = Field(min_length=1)
    type: FolderType


class FolderUpdate(BaseModel):
    active: bool


class FolderResponse(BaseModel):
    """Response model for a media folder."""

    id: int
    path: str
    type: FolderType
    active: bool
    created_at: datetime
    updated_at: datetime


class ConflictResponse(BaseModel):
    """Response model for a scanning conflict with its candidate matches."""

    id: int
    file_name: str
    file_path: str
    media_type: MediaType
    possible_matches: list[Candidate]
    resolved: bool
    selected_id: int | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_conflict(cls, conflict: ScanningConflict) -> "ConflictResponse":
        return cls(
            id=conflict.id,
            file_name=conflict.file_name,
            file_path=conflict.file_path,
            media_type=conflict.media_type,
            possible_matches=conflict.possible_matches,
            resolved=conflict.resolved,
            selected_id=conflict.selected_id,
            created_at=conflict.created_at,
            updated_at=conflict.updated_at,
        )


class ResolveRequest(BaseModel):
    """Request model for resolving a conflict; accepts ``selectedId`` or ``selected_id``."""

    model_config = ConfigDict(populate_by_name=True)

    selected_id: int = Field(alias="selectedId")


# Scanning
@router.post("/scan")
async def start_scan(pipeline: Pipeline = Depends(get_pipeline)) -> dict:
    """Scan all active folders in the background."""
    config = await get_config()
    if not config.tmdb_api_key.strip():
        raise HTTPException(status_code=400, detail="TMDB API key not configured")

    try:
        await pipeline.scanner.start_background_scan()
    except ScanInProgressError:
        raise HTTPException(status_code=409, detail="Scan already in progress") from None

    return {"message": "Scan started successfully"}


@router.get("/status")
async def scan_status(pipeline: Pipeline = Depends(get_pipeline)) -> dict:
    """Whether a scan is running, plus the running and last scan summaries."""
    return pipeline.scanner.status()


# Media folders
@router.get("/folders", response_model=list[FolderResponse])
async def list_folders(pipeline: Pipeline = Depends(get_pipeline)) -> list[MediaFolder]:
    return await pipeline.folders.list()


@router.post("/folders", response_model=FolderResponse, status_code=201)
async def create_folder(
    folder: FolderCreate, pipeline: Pipeline = Depends(get_pipeline)
) -> MediaFolder:
    """Register a root directory to scan."""
    path = folder.path.strip()
    if await pipeline.folders.get_by_path(path):
        raise HTTPException(status_code=409, detail=f"Folder already registered: {path}")

    try:
        created = await pipeline.folders.create(path, folder.type)
    except IntegrityError:
        raise HTTPException(status_code=409, detail=f"Folder already registered: {path}") from None

    await pipeline.events.broadcast_folder_changed(created.id, "created")
    return created


@router.patch("/folders/{folder_id}", response_model=FolderResponse)
async def update_folder(
    folder_id: int, update: FolderUpdate, pipeline: Pipeline = Depends(get_pipeline)
) -> MediaFolder:
    """Enable or disable a folder for future scans."""
    folder = await pipeline.folders.set_active(folder_id, update.active)
    if not folder:
        raise HTTPException(status_code=404, detail="Folder not found")

    await pipeline.events.broadcast_folder_changed(folder_id, "updated")
    return folder


@router.delete("/folders/{folder_id}")
async def delete_folder(folder_id: int, pipeline: Pipeline = Depends(get_pipeline)) -> dict:
    if not await pipeline.folders.delete(folder_id):
        raise HTTPException(status_code=404, detail="Folder not found")

    await pipeline.events.broadcast_folder_changed(folder_id, "deleted")
    return {"status": "deleted", "folder_id": folder_id}


# Conflicts
@router.get("/conflicts", response_model=list[ConflictResponse])
async def list_conflicts(pipeline: Pipeline = Depends(get_pipeline)) -> list[ConflictResponse]:
    """List unresolved conflicts."""
    conflicts = await pipeline.conflicts.list_unresolved()
    return [ConflictResponse.from_conflict(c) for c in conflicts]


@router.post("/conflicts/{conflict_id}/resolve", response_model=ConflictResponse)
async def resolve_conflict(
    conflict_id: int, request: ResolveRequest, pipeline: Pipeline = Depends(get_pipeline)
) -> ConflictResponse:
    """Resolve a conflict with the chosen TMDB id and add the file to the catalog."""
    try:
        conflict, _ = await pipeline.conflicts.resolve(conflict_id, request.selected_id)
    except ConflictNotFoundError:
        raise HTTPException(status_code=404, detail="Conflict not found") from None
    except ConflictResolutionError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    except MetadataError as e:
        raise HTTPException(status_code=502, detail=str(e)) from None

    return ConflictResponse.from_conflict(conflict)


@router.delete("/conflicts/{conflict_id}")
async def delete_conflict(conflict_id: int, pipeline: Pipeline = Depends(get_pipeline)) -> dict:
    try:
        await pipeline.conflicts.delete(conflict_id)
    except ConflictNotFoundError:
        raise HTTPException(status_code=404, detail="Conflict not found") from None
    return {"status": "deleted", "conflict_id": conflict_id}


@router.delete("/conflicts")
async def clear_conflicts(
    resolved_only: bool = False, pipeline: Pipeline = Depends(get_pipeline)
) -> dict:
    """Delete every conflict, or only the resolved ones."""
    count = await pipeline.conflicts.delete_all(resolved_only=resolved_only)
    return {"status": "cleared", "deleted_count": count}
