"""FastAPI application factory."""

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from autotube import __version__
from autotube.api.dependencies import get_media_store, get_orchestrator
from autotube.api.middleware import autotube_error_handler, request_validation_handler
from autotube.api.routes import pipeline
from autotube.config import get_settings
from autotube.models.errors import AutotubeError
from autotube.pipeline.orchestrator import PipelineOrchestrator
from autotube.storage.media_store import MEDIA_ROUTE, MediaStore


def create_app(media: MediaStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title="Autotube",
        description="Script-to-video production pipeline",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Error handlers
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AutotubeError, autotube_error_handler)

    app.include_router(pipeline.router)

    @app.get("/health")
    async def health(orchestrator: PipelineOrchestrator = Depends(get_orchestrator)):
        return {
            "status": "ok",
            "version": __version__,
            "mode": orchestrator.providers.describe(),
        }

    # Files written by local adapters (subtitles, narration, rendered video)
    media = media or get_media_store()
    app.mount(MEDIA_ROUTE, StaticFiles(directory=media.base_dir), name="media")

    return app


app = create_app()
