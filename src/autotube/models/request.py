"""Inbound pipeline request model."""

from pydantic import Field, StrictBool, field_validator

from autotube.models.pipeline import WireModel


class PipelineRequest(WireModel):
    """A script plus the options that steer the production run."""

    script: str = Field(..., min_length=20, description="Narration script")
    project_name: str = Field(..., min_length=3, max_length=80)
    voice_profile: str | None = Field(default=None, description="Voice id for speech synthesis")
    target_language: str | None = Field(default=None, description="BCP-47 tag, e.g. en-US")
    auto_upload_enabled: StrictBool | None = None
    schedule_at: str | None = Field(
        default=None, description="Publish time; only used when auto upload is enabled"
    )

    @field_validator("schedule_at")
    @classmethod
    def blank_schedule_is_absent(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def wants_upload(self) -> bool:
        return bool(self.auto_upload_enabled)

    @property
    def publish_at(self) -> str | None:
        """Scheduled publish time, honoured only when auto upload is on."""
        return self.schedule_at if self.wants_upload else None
