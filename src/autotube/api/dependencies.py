"""Dependency injection providers for FastAPI."""

from functools import lru_cache

from autotube.config import get_settings
from autotube.pipeline.orchestrator import PipelineOrchestrator
from autotube.storage.media_store import MediaStore


@lru_cache
def get_media_store() -> MediaStore:
    return MediaStore(get_settings())


@lru_cache
def get_orchestrator() -> PipelineOrchestrator:
    return PipelineOrchestrator(settings=get_settings(), media=get_media_store())
