"""Pipeline orchestrator: runs the fixed stage sequence for one request."""

import logging
import uuid
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any

from autotube.config import Settings, get_settings
from autotube.models.artifacts import (
    AssemblyResult,
    MusicTrack,
    ScriptAnalysis,
    SubtitleTrack,
    ThumbnailResult,
    VisualPlan,
    VoiceoverResult,
)
from autotube.models.errors import OrchestrationError, ProviderError
from autotube.models.pipeline import (
    STAGE_ORDER,
    Assets,
    PipelineResponse,
    PipelineStage,
    PublishedUpload,
    QueuedUpload,
    ScheduledUpload,
    SeoMetadata,
    StageKey,
    StageStatus,
    build_idle_stages,
)
from autotube.models.request import PipelineRequest
from autotube.providers.base import StageContext
from autotube.providers.registry import ProviderSet, build_providers
from autotube.storage.media_store import MediaStore

logger = logging.getLogger(__name__)

StageListener = Callable[[PipelineStage], None]

UploadOutcome = QueuedUpload | PublishedUpload | ScheduledUpload

EXPECTED_OUTPUTS: dict[StageKey, type | tuple[type, ...]] = {
    StageKey.SCRIPT_ANALYSIS: ScriptAnalysis,
    StageKey.VOICEOVER: VoiceoverResult,
    StageKey.VISUALS: VisualPlan,
    StageKey.MUSIC: MusicTrack,
    StageKey.SUBTITLE_GENERATION: SubtitleTrack,
    StageKey.THUMBNAIL: ThumbnailResult,
    StageKey.SEO: SeoMetadata,
    StageKey.ASSEMBLY: AssemblyResult,
    StageKey.UPLOAD: (QueuedUpload, PublishedUpload, ScheduledUpload),
}


def _summarize_upload(result: UploadOutcome) -> str:
    if isinstance(result, PublishedUpload):
        return f"Published to {result.url}."
    if isinstance(result, ScheduledUpload):
        return f"Scheduled to go live at {result.scheduled_for}."
    return "Auto upload disabled; artifacts finalized and queued for manual publishing."


SUMMARIES: dict[StageKey, Callable[[Any], str]] = {
    StageKey.SCRIPT_ANALYSIS: lambda a: (
        f"Tone: {a.tone}. Topics: {', '.join(a.topics) or 'general'}. "
        f"{a.word_count} words, about {a.estimated_duration_seconds:.0f}s of narration."
    ),
    StageKey.VOICEOVER: lambda v: (
        f"Narrated {v.duration_seconds:.0f}s with voice {v.voice_id or 'default'}."
    ),
    StageKey.VISUALS: lambda p: (
        f"Matched {len(p.clips)} clips for: {', '.join(dict.fromkeys(c.query for c in p.clips))}."
    ),
    StageKey.MUSIC: lambda m: f"Selected '{m.title}' ({m.mood}, {m.bpm} BPM).",
    StageKey.SUBTITLE_GENERATION: lambda s: f"Generated {s.cue_count} caption cues ({s.language}).",
    StageKey.THUMBNAIL: lambda t: "Rendered a 16:9 thumbnail.",
    StageKey.SEO: lambda s: f"Title: {s.title} ({len(s.tags)} tags).",
    StageKey.ASSEMBLY: lambda r: f"Assembled a {r.duration_seconds:.0f}s video.",
    StageKey.UPLOAD: _summarize_upload,
}


class RunState:
    """Mutable state of one run; only the orchestrator touches it."""

    def __init__(self, run_id: str):
        self.run_id = run_id
        self.stages: dict[StageKey, PipelineStage] = {s.key: s for s in build_idle_stages()}
        self.assets = Assets()
        self.seo = SeoMetadata()
        self.upload: UploadOutcome | None = None

    def transition(
        self,
        key: StageKey,
        status: StageStatus,
        summary: str | None = None,
        error: str | None = None,
    ) -> PipelineStage:
        stage = self.stages[key]
        if not stage.can_transition_to(status):
            raise OrchestrationError(
                f"Illegal stage transition for '{key}': {stage.status} -> {status}"
            )
        updated = stage.model_copy(update={"status": status, "summary": summary, "error": error})
        self.stages[key] = updated
        return updated

    def set_asset(self, field: str, url: str) -> None:
        if getattr(self.assets, field) is not None:
            raise OrchestrationError(f"Asset '{field}' is already set for run {self.run_id}")
        self.assets = self.assets.model_copy(update={field: url})

    def snapshot(self) -> PipelineResponse:
        return PipelineResponse(
            stages=[self.stages[key].model_copy() for key in STAGE_ORDER],
            assets=self.assets.model_copy(),
            seo=self.seo.model_copy(deep=True),
            upload=self.upload.model_copy() if self.upload else None,
        )


class PipelineOrchestrator:
    """Runs every stage once, in canonical order, stopping at the first failure."""

    def __init__(
        self,
        providers: ProviderSet | None = None,
        settings: Settings | None = None,
        media: MediaStore | None = None,
    ):
        self.settings = settings or get_settings()
        self.providers = providers or build_providers(self.settings)
        self.media = media or MediaStore(self.settings)

    def run(
        self, request: PipelineRequest, listener: StageListener | None = None
    ) -> PipelineResponse:
        """Execute the pipeline for one request and return a snapshot of the result."""
        self.media.cleanup_expired()
        run_id = uuid.uuid4().hex
        state = RunState(run_id)
        context = StageContext(run_id=run_id, request=request, media=self.media)
        logger.info("Run %s started for project %r", run_id, request.project_name)

        for key in STAGE_ORDER:
            self._notify(listener, state.transition(key, StageStatus.RUNNING))
            try:
                output = self._execute(key, context)
            except ProviderError as e:
                logger.warning("Run %s: stage %s failed (%s): %s", run_id, key, e.reason, e.message)
                self._notify(
                    listener,
                    state.transition(key, StageStatus.FAILED, error=e.message or "Stage failed"),
                )
                break
            except Exception as e:
                logger.exception("Run %s: stage %s crashed", run_id, key)
                self._notify(
                    listener,
                    state.transition(key, StageStatus.FAILED, error=str(e) or type(e).__name__),
                )
                # no response will reference this run's files
                self.media.cleanup_run(run_id)
                raise OrchestrationError(
                    f"Stage '{key}' failed unexpectedly: {e}", details={"run_id": run_id}
                ) from e

            context.outputs[key] = output
            self._apply(state, key, output)
            self._notify(
                listener, state.transition(key, StageStatus.COMPLETED, summary=SUMMARIES[key](output))
            )
            logger.info("Run %s: stage %s completed", run_id, key)

        return state.snapshot()

    def _execute(self, key: StageKey, context: StageContext) -> Any:
        if key == StageKey.UPLOAD and not context.request.wants_upload:
            return QueuedUpload()

        provider = self.providers[key]
        timeout = self.settings.timeout_for(key.value)
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"stage-{key.value}")
        try:
            future = executor.submit(provider.invoke, context)
            output = future.result(timeout=timeout)
        except FutureTimeout as e:
            if future.done():
                # the adapter raised TimeoutError itself
                raise provider.translate(e) from e
            raise ProviderError(
                f"{provider.name}: no response within {timeout:g}s",
                stage=key.value,
                provider=provider.name,
                reason="timeout",
            ) from e
        finally:
            # a timed-out call keeps running in the background; do not wait for it
            executor.shutdown(wait=False, cancel_futures=True)

        if not isinstance(output, EXPECTED_OUTPUTS[key]):
            raise ProviderError(
                f"{provider.name}: returned {type(output).__name__} for stage '{key}'",
                stage=key.value,
                provider=provider.name,
                reason="bad_response",
            )
        return output

    def _apply(self, state: RunState, key: StageKey, output: Any) -> None:
        """Copy a stage output into the response fields it populates."""
        if key == StageKey.VOICEOVER:
            state.set_asset("voiceover_url", output.url)
        elif key == StageKey.SUBTITLE_GENERATION:
            state.set_asset("subtitles_url", output.url)
        elif key == StageKey.THUMBNAIL:
            state.set_asset("thumbnail_url", output.url)
        elif key == StageKey.ASSEMBLY:
            state.set_asset("video_url", output.url)
        elif key == StageKey.SEO:
            state.seo = output
        elif key == StageKey.UPLOAD:
            state.upload = output

    @staticmethod
    def _notify(listener: StageListener | None, stage: PipelineStage) -> None:
        if listener is not None:
            listener(stage)
