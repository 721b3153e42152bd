"""Typed outputs produced by the individual stage adapters."""

from pydantic import BaseModel, Field


class ScriptAnalysis(BaseModel):
    """Tone, topics and pacing extracted from the script."""

    tone: str = Field(default="informative")
    topics: list[str] = Field(default_factory=list)
    hook: str = Field(default="")
    keywords: list[str] = Field(default_factory=list)
    word_count: int = Field(..., ge=0)
    estimated_duration_seconds: float = Field(..., ge=0)
    language: str = Field(default="en-US")


class VoiceoverResult(BaseModel):
    url: str = Field(..., min_length=1)
    local_path: str | None = None
    duration_seconds: float = Field(..., ge=0)
    voice_id: str = Field(default="")


class VisualClip(BaseModel):
    query: str
    url: str = Field(..., min_length=1)
    preview_url: str | None = None
    duration_seconds: float = Field(default=5.0, gt=0)
    provider: str = Field(default="demo")


class VisualPlan(BaseModel):
    clips: list[VisualClip] = Field(default_factory=list)

    @property
    def total_duration(self) -> float:
        return sum(clip.duration_seconds for clip in self.clips)


class MusicTrack(BaseModel):
    title: str
    mood: str
    url: str = Field(..., min_length=1)
    bpm: int = Field(default=100, gt=0)


class SubtitleTrack(BaseModel):
    url: str = Field(..., min_length=1)
    local_path: str | None = None
    cue_count: int = Field(..., ge=0)
    language: str = Field(default="en-US")


class ThumbnailResult(BaseModel):
    url: str = Field(..., min_length=1)
    prompt: str = Field(default="")


class AssemblyResult(BaseModel):
    url: str = Field(..., min_length=1)
    local_path: str | None = None
    duration_seconds: float = Field(default=0.0, ge=0)
