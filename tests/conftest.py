"""Shared test fixtures and fake stage providers."""

import time

import pytest

from autotube.config import Settings
from autotube.models.errors import ProviderError
from autotube.models.pipeline import StageKey
from autotube.models.request import PipelineRequest
from autotube.pipeline.orchestrator import PipelineOrchestrator
from autotube.providers.base import StageContext, StageProvider
from autotube.providers.registry import build_demo_providers
from autotube.storage.media_store import MediaStore

SAMPLE_SCRIPT = (
    "Welcome to the automation pipeline. In two minutes you will see how a script "
    "becomes a finished video, complete with voiceover, visuals, music and subtitles. "
    "Automation saves hours of editing!"
)


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment, media under tmp_path."""
    return Settings(
        _env_file=None,
        openai_api_key="",
        elevenlabs_api_key="",
        pexels_api_key="",
        youtube_client_id="",
        youtube_client_secret="",
        youtube_refresh_token="",
        ffmpeg_enabled=False,
        media_dir=tmp_path / "media",
        public_base_url="http://testserver",
        demo_asset_base_url="https://demo.example/assets",
        stage_timeout_seconds=5.0,
        stage_timeout_overrides={},
    )


@pytest.fixture
def media_store(settings):
    return MediaStore(settings)


@pytest.fixture
def demo_providers(settings):
    return build_demo_providers(settings)


@pytest.fixture
def orchestrator(settings, demo_providers, media_store):
    return PipelineOrchestrator(providers=demo_providers, settings=settings, media=media_store)


@pytest.fixture
def sample_request():
    return PipelineRequest(script=SAMPLE_SCRIPT, project_name="Demo Project")


@pytest.fixture
def make_context(media_store):
    """Build a StageContext with chosen prior outputs."""

    def _make(request: PipelineRequest, outputs: dict | None = None, run_id: str = "run123"):
        return StageContext(
            run_id=run_id, request=request, media=media_store, outputs=dict(outputs or {})
        )

    return _make


class FailingProvider(StageProvider):
    """Raises a ProviderError for the given stage."""

    name = "failing"

    def __init__(self, stage: StageKey, message: str = "quota exceeded", reason: str = "quota"):
        self.stage = stage
        self.message = message
        self.reason = reason
        self.calls = 0

    def invoke(self, context: StageContext):
        self.calls += 1
        raise self.error(self.message, reason=self.reason)


class CrashingProvider(StageProvider):
    """Raises a plain exception, i.e. a bug rather than a provider failure."""

    name = "crashing"

    def __init__(self, stage: StageKey, exc: Exception | None = None):
        self.stage = stage
        self.exc = exc or RuntimeError("unexpected crash")

    def invoke(self, context: StageContext):
        raise self.exc


class SlowProvider(StageProvider):
    name = "slow"

    def __init__(self, stage: StageKey, delay: float):
        self.stage = stage
        self.delay = delay

    def invoke(self, context: StageContext):
        time.sleep(self.delay)
        raise ProviderError("should have timed out")


class RecordingProvider(StageProvider):
    """Delegates to another provider and counts calls."""

    def __init__(self, inner: StageProvider):
        self.inner = inner
        self.stage = inner.stage
        self.name = inner.name
        self.calls = 0

    def invoke(self, context: StageContext):
        self.calls += 1
        return self.inner.invoke(context)
