"""Data models for Autotube."""

from autotube.models.artifacts import (
    AssemblyResult,
    MusicTrack,
    ScriptAnalysis,
    SubtitleTrack,
    ThumbnailResult,
    VisualClip,
    VisualPlan,
    VoiceoverResult,
)
from autotube.models.errors import (
    AutotubeError,
    InvalidRequestResponse,
    OrchestrationError,
    PipelineFailedResponse,
    ProviderError,
    ValidationError,
)
from autotube.models.pipeline import (
    STAGE_CATALOGUE,
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
    UploadResult,
    build_idle_stages,
)
from autotube.models.request import PipelineRequest

__all__ = [
    "STAGE_CATALOGUE",
    "STAGE_ORDER",
    "AssemblyResult",
    "Assets",
    "AutotubeError",
    "InvalidRequestResponse",
    "MusicTrack",
    "OrchestrationError",
    "PipelineFailedResponse",
    "PipelineRequest",
    "PipelineResponse",
    "PipelineStage",
    "ProviderError",
    "PublishedUpload",
    "QueuedUpload",
    "ScheduledUpload",
    "ScriptAnalysis",
    "SeoMetadata",
    "StageKey",
    "StageStatus",
    "SubtitleTrack",
    "ThumbnailResult",
    "UploadResult",
    "ValidationError",
    "VisualClip",
    "VisualPlan",
    "VoiceoverResult",
    "build_idle_stages",
]
