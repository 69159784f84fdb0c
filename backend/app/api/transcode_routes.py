"""REST API routes for the transcode status of catalog entries."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.api.dependencies import get_pipeline
from app.core.errors import CascadeTargetMissingError, CatalogEntryNotFoundError
from app.models import Episode, Movie, TranscodeStatus
from app.services.pipeline import Pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/transcode", tags=["transcode"])


class StatusUpdate(BaseModel):
    """Request model for a status change."""

    status: TranscodeStatus


class ItemsByStatus(BaseModel):
    movies: list[Movie]
    episodes: list[Episode]


@router.put("/movie/{movie_id}", response_model=Movie)
async def set_movie_status(
    movie_id: int, update: StatusUpdate, pipeline: Pipeline = Depends(get_pipeline)
) -> Movie:
    try:
        return await pipeline.transcode.set_movie_status(movie_id, update.status)
    except CatalogEntryNotFoundError:
        raise HTTPException(status_code=404, detail="Movie not found") from None


@router.put("/episode/{episode_id}", response_model=Episode)
async def set_episode_status(
    episode_id: int, update: StatusUpdate, pipeline: Pipeline = Depends(get_pipeline)
) -> Episode:
    try:
        return await pipeline.transcode.set_episode_status(episode_id, update.status)
    except CatalogEntryNotFoundError:
        raise HTTPException(status_code=404, detail="Episode not found") from None


@router.put("/series/{series_id}")
async def set_series_status(
    series_id: int,
    update: StatusUpdate,
    cascade: bool = True,
    pipeline: Pipeline = Depends(get_pipeline),
) -> dict:
    """Set the status of a series and all of its episodes in one transaction.

    With ?cascade=false only the series row changes.
    """
    if not cascade:
        try:
            await pipeline.transcode.set_series_status(series_id, update.status)
        except CatalogEntryNotFoundError:
            raise HTTPException(status_code=404, detail="Series not found") from None
        return {"series_id": series_id, "status": update.status.value, "episodes_updated": 0}

    try:
        count = await pipeline.transcode.cascade_series_status(series_id, update.status)
    except CascadeTargetMissingError as e:
        status_code = 404 if e.series_missing else 409
        raise HTTPException(status_code=status_code, detail=str(e)) from None

    return {
        "series_id": series_id,
        "status": update.status.value,
        "episodes_updated": count,
    }


@router.get("/status/{status}", response_model=ItemsByStatus)
async def get_items_by_status(
    status: TranscodeStatus, pipeline: Pipeline = Depends(get_pipeline)
) -> dict:
    """Movies and episodes currently in ``status``."""
    return await pipeline.transcode.get_items_by_status(status)


@router.get("/movies/status/{status}", response_model=list[Movie])
async def get_movies_by_status(
    status: TranscodeStatus, pipeline: Pipeline = Depends(get_pipeline)
) -> list[Movie]:
    return await pipeline.transcode.get_movies_by_status(status)


@router.get("/episodes/status/{status}", response_model=list[Episode])
async def get_episodes_by_status(
    status: TranscodeStatus, pipeline: Pipeline = Depends(get_pipeline)
) -> list[Episode]:
    return await pipeline.transcode.get_episodes_by_status(status)

