"""FastAPI application entry point for Reelvault."""

import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.api import manager as ws_manager
from app.api.routes import router as config_router
from app.api.scanner_routes import router as scanner_router
from app.api.transcode_routes import router as transcode_router
from app.config import settings
from app.core.logging import setup_logging
from app.database import async_session, init_db
from app.services.config_service import get_config
from app.services.pipeline import build_pipeline


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown."""
    # Startup
    setup_logging()
    logger.info("Starting Reelvault Backend...")

    await init_db()
    logger.info("Database initialized")

    config = await get_config()
    if not config.tmdb_api_key:
        logger.warning("TMDB API key not configured; scans are disabled until it is set")

    pipeline = build_pipeline(
        async_session,
        ws_manager,
        language=config.tmdb_language,
        rate_limit=config.tmdb_rate_limit,
    )
    app.state.pipeline = pipeline

    if settings.scheduler_enabled:
        pipeline.scheduler.start()

    yield

    # Shutdown
    logger.info("Shutting down Reelvault Backend...")
    await pipeline.scheduler.stop()
    await pipeline.scanner.stop()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Reelvault API",
    description="Media library ingestion, TMDB matching and transcode status tracking",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware for frontend communication
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],  # Vite dev server
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(config_router)
app.include_router(scanner_router)
app.include_router(transcode_router)


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint for invalidation and scan events."""
    await ws_manager.connect(websocket)
    try:
        while True:
            # Keep connection alive, handle any incoming messages
            data = await websocket.receive_text()
            logger.debug(f"Received WebSocket message: {data}")
    except WebSocketDisconnect:
        await ws_manager.disconnect(websocket)
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
        await ws_manager.disconnect(websocket)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
async def root():
    """Root endpoint - API status."""
    return {
        "name": "Reelvault",
        "version": "0.1.0",
        "status": "running",
    }


if __name__ == "__main__":
    import uvicorn

    try:
        uvicorn.run(
            app,
            host=settings.host,
            port=settings.port,
            # reload is incompatible with passing app object directly
            reload=False,
        )
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)
