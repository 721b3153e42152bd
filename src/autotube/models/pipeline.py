"""Pipeline stage, asset and response models."""

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for models exchanged over HTTP (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StageKey(StrEnum):
    """Stages of the production pipeline, in execution order."""

    SCRIPT_ANALYSIS = "script_analysis"
    VOICEOVER = "voiceover"
    VISUALS = "visuals"
    MUSIC = "music"
    SUBTITLE_GENERATION = "subtitle_generation"
    THUMBNAIL = "thumbnail"
    SEO = "seo"
    ASSEMBLY = "assembly"
    UPLOAD = "upload"


STAGE_ORDER: tuple[StageKey, ...] = tuple(StageKey)


class StageStatus(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


ALLOWED_TRANSITIONS: dict[StageStatus, frozenset[StageStatus]] = {
    StageStatus.IDLE: frozenset({StageStatus.RUNNING}),
    StageStatus.RUNNING: frozenset({StageStatus.COMPLETED, StageStatus.FAILED}),
    StageStatus.COMPLETED: frozenset(),
    StageStatus.FAILED: frozenset(),
}

# (title, description) per stage
STAGE_CATALOGUE: dict[StageKey, tuple[str, str]] = {
    StageKey.SCRIPT_ANALYSIS: (
        "Analyze script context",
        "Understand tone, topics, and hook to map the rest of the workflow.",
    ),
    StageKey.VOICEOVER: (
        "Synthesize AI voiceover",
        "Select a neural narrator and convert the script to studio audio.",
    ),
    StageKey.VISUALS: (
        "Plan visual storyboard",
        "Match each beat with stock footage, b-roll, and motion graphics.",
    ),
    StageKey.MUSIC: (
        "Select background music",
        "Generate or source a soundtrack aligned to pacing and mood.",
    ),
    StageKey.SUBTITLE_GENERATION: (
        "Generate subtitles",
        "Auto-caption the voiceover with multilingual support.",
    ),
    StageKey.THUMBNAIL: (
        "Craft thumbnail",
        "Design a high-CTR thumbnail prompt and render.",
    ),
    StageKey.SEO: (
        "Optimize SEO metadata",
        "Create a title, description, and tags ready for upload.",
    ),
    StageKey.ASSEMBLY: (
        "Assemble final video",
        "Timeline voiceover, visuals, captions, and audio bed.",
    ),
    StageKey.UPLOAD: (
        "Upload to YouTube",
        "Publish immediately or schedule via the YouTube Data API.",
    ),
}


class PipelineStage(WireModel):
    """Status of a single stage within a run."""

    key: StageKey
    title: str
    status: StageStatus = StageStatus.IDLE
    summary: str | None = None
    error: str | None = None

    def can_transition_to(self, status: StageStatus) -> bool:
        return status in ALLOWED_TRANSITIONS[self.status]


def build_idle_stages(with_descriptions: bool = False) -> list[PipelineStage]:
    """Return one idle stage per key in canonical order."""
    return [
        PipelineStage(
            key=key,
            title=STAGE_CATALOGUE[key][0],
            summary=STAGE_CATALOGUE[key][1] if with_descriptions else None,
        )
        for key in STAGE_ORDER
    ]


class Assets(WireModel):
    """URLs of the generated artifacts."""

    video_url: str | None = None
    voiceover_url: str | None = None
    subtitles_url: str | None = None
    thumbnail_url: str | None = None


class SeoMetadata(WireModel):
    """Title, description and tags ready for upload."""

    title: str = ""
    description: str = ""
    tags: list[str] = Field(default_factory=list)


class QueuedUpload(WireModel):
    model_config = ConfigDict(extra="forbid")

    status: Literal["queued"] = "queued"


class PublishedUpload(WireModel):
    model_config = ConfigDict(extra="forbid")

    status: Literal["uploaded"] = "uploaded"
    url: str = Field(..., min_length=1)


class ScheduledUpload(WireModel):
    model_config = ConfigDict(extra="forbid")

    status: Literal["scheduled"] = "scheduled"
    scheduled_for: str = Field(..., min_length=1)


UploadResult = Annotated[
    QueuedUpload | PublishedUpload | ScheduledUpload,
    Field(discriminator="status"),
]


class PipelineResponse(WireModel):
    """Snapshot of a finished (or aborted) pipeline run."""

    stages: list[PipelineStage]
    assets: Assets = Field(default_factory=Assets)
    seo: SeoMetadata = Field(default_factory=SeoMetadata)
    upload: UploadResult | None = None

    @field_validator("stages")
    @classmethod
    def stages_in_canonical_order(cls, v: list[PipelineStage]) -> list[PipelineStage]:
        keys = tuple(stage.key for stage in v)
        if keys != STAGE_ORDER:
            raise ValueError(
                f"stages must list every stage once in canonical order, got {list(keys)}"
            )
        return v
