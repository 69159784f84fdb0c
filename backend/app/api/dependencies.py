"""FastAPI dependencies shared by the routers."""

from fastapi import Request

from app.services.pipeline import Pipeline


def get_pipeline(request: Request) -> Pipeline:
    """The pipeline built at startup (see app.main.lifespan)."""
    return request.app.state.pipeline
