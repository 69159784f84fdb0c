"""REST API routes for Reelvault configuration."""

import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from app.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["config"])


class ConfigResponse(BaseModel):
    """Response model for configuration."""

    tmdb_api_key: str
    tmdb_language: str
    tmdb_rate_limit: int
    scan_file_extensions: str
    scan_interval_minutes: int


class ConfigUpdate(BaseModel):
    """Request model for updating configuration."""

    tmdb_api_key: str | None = None
    tmdb_language: str | None = None
    tmdb_rate_limit: int | None = None
    scan_file_extensions: str | None = None
    scan_interval_minutes: int | None = None


@router.get("/config", response_model=ConfigResponse)
async def get_config() -> ConfigResponse:
    """Get current configuration from database.

    Sensitive fields (API keys) are redacted for security.
    """
    from app.services.config_service import get_config as get_db_config

    config = await get_db_config()
    return ConfigResponse(
        tmdb_api_key="***" if config.tmdb_api_key else "",  # Redacted
        tmdb_language=config.tmdb_language,
        tmdb_rate_limit=config.tmdb_rate_limit,
        scan_file_extensions=config.scan_file_extensions,
        scan_interval_minutes=config.scan_interval_minutes,
    )


@router.put("/config")
async def update_config(config: ConfigUpdate) -> dict:
    """Update configuration and persist to database.

    Language and rate limit are read when the pipeline is built and apply
    after a restart; the API key and scan settings apply immediately.
    """
    from app.services.config_service import update_config as update_db_config

    # Build kwargs from non-None fields
    update_data = {k: v for k, v in config.model_dump().items() if v is not None}

    if update_data:
        try:
            await update_db_config(**update_data)
        except ConfigurationError as e:
            raise HTTPException(status_code=422, detail=str(e)) from None

    return {"status": "updated", "persisted": True}
