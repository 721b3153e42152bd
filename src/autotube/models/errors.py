"""Error hierarchy and error response models."""

from typing import Literal

from pydantic import BaseModel, Field

ProviderErrorReason = Literal["timeout", "auth", "quota", "bad_response", "unavailable"]


class AutotubeError(Exception):
    """Base error for all Autotube errors."""

    def __init__(self, message: str, component: str = "", details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.component = component
        self.details = details or {}


class ValidationError(AutotubeError):
    """Malformed or undersized request input."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="validation", details=details)


class ProviderError(AutotubeError):
    """Failure reported by a stage adapter (timeout, auth, quota, bad response)."""

    def __init__(
        self,
        message: str,
        stage: str = "",
        provider: str = "",
        reason: ProviderErrorReason = "unavailable",
        details: dict | None = None,
    ):
        super().__init__(message, component=provider or "provider", details=details)
        self.stage = stage
        self.provider = provider
        self.reason = reason


class OrchestrationError(AutotubeError):
    """Unexpected internal failure not attributable to a single stage."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="orchestrator", details=details)


class InvalidRequestResponse(BaseModel):
    """Body returned for a request that fails schema validation."""

    error: str = "Invalid request"
    details: dict[str, list[str]] = Field(default_factory=dict)


class PipelineFailedResponse(BaseModel):
    """Body returned when the orchestrator raises."""

    error: str = "Pipeline failed"
    message: str = Field(..., description="Human-readable error message")

    @classmethod
    def from_exception(cls, exc: Exception) -> "PipelineFailedResponse":
        message = exc.message if isinstance(exc, AutotubeError) else str(exc)
        return cls(message=message or "Unknown error")
