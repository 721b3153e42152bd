"""Base stage provider contract and provider error translation."""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, TypeVar

import httpx
import openai
import pydantic
from pydantic import BaseModel

from autotube.models.errors import OrchestrationError, ProviderError, ProviderErrorReason
from autotube.models.pipeline import StageKey
from autotube.models.request import PipelineRequest
from autotube.storage.media_store import MediaStore

T = TypeVar("T", bound=BaseModel)


@dataclass
class StageContext:
    """Everything a stage may read: the request plus outputs of earlier stages."""

    run_id: str
    request: PipelineRequest
    media: MediaStore
    outputs: dict[StageKey, Any] = field(default_factory=dict)

    def output(self, key: StageKey, expected: type[T]) -> T:
        """Return the output of an earlier stage, checking its type."""
        value = self.outputs.get(key)
        if not isinstance(value, expected):
            raise OrchestrationError(
                f"Stage '{key}' has not produced a {expected.__name__} yet",
                details={"available": [str(k) for k in self.outputs]},
            )
        return value

    def optional_output(self, key: StageKey, expected: type[T]) -> T | None:
        value = self.outputs.get(key)
        return value if isinstance(value, expected) else None


class StageProvider(ABC):
    """One external capability behind a uniform single-call contract."""

    stage: ClassVar[StageKey]
    name: ClassVar[str] = "demo"
    live: ClassVar[bool] = False

    @abstractmethod
    def invoke(self, context: StageContext) -> Any:
        """Run the stage and return its typed output, or raise ProviderError."""
        ...

    def error(
        self,
        message: str,
        reason: ProviderErrorReason = "bad_response",
        details: dict | None = None,
    ) -> ProviderError:
        return ProviderError(
            message, stage=self.stage.value, provider=self.name, reason=reason, details=details
        )

    def translate(self, exc: Exception) -> ProviderError:
        """Map an SDK or transport exception onto a ProviderError."""
        reason, message = _classify(exc)
        return self.error(f"{self.name}: {message}", reason=reason)


def _classify(exc: Exception) -> tuple[ProviderErrorReason, str]:
    if isinstance(exc, ProviderError):
        return exc.reason, exc.message
    if isinstance(exc, (httpx.TimeoutException, openai.APITimeoutError, TimeoutError)):
        return "timeout", "request timed out"
    if isinstance(exc, httpx.HTTPStatusError):
        return reason_for_status(exc.response.status_code), (
            f"HTTP {exc.response.status_code} from {exc.request.url.host}"
        )
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return "auth", "authentication rejected"
    if isinstance(exc, openai.RateLimitError):
        return "quota", "rate limit or quota exceeded"
    if isinstance(exc, openai.APIStatusError):
        return reason_for_status(exc.status_code), f"API error {exc.status_code}"
    if isinstance(exc, (httpx.TransportError, openai.APIConnectionError)):
        return "unavailable", f"connection failed: {exc}"
    if isinstance(exc, (pydantic.ValidationError, json.JSONDecodeError, KeyError, ValueError)):
        return "bad_response", f"malformed response: {exc}"
    return "unavailable", str(exc)


def reason_for_status(status_code: int) -> ProviderErrorReason:
    if status_code in (401, 403):
        return "auth"
    if status_code in (402, 429):
        return "quota"
    if status_code >= 500:
        return "unavailable"
    return "bad_response"


class ScriptAnalyzer(StageProvider):
    stage = StageKey.SCRIPT_ANALYSIS


class SpeechSynthesizer(StageProvider):
    stage = StageKey.VOICEOVER


class VisualSearch(StageProvider):
    stage = StageKey.VISUALS


class MusicSelector(StageProvider):
    stage = StageKey.MUSIC


class Captioner(StageProvider):
    stage = StageKey.SUBTITLE_GENERATION


class ThumbnailRenderer(StageProvider):
    stage = StageKey.THUMBNAIL


class MetadataWriter(StageProvider):
    stage = StageKey.SEO


class Assembler(StageProvider):
    stage = StageKey.ASSEMBLY


class Publisher(StageProvider):
    """Publishes the assembled video; only invoked when auto upload is on."""

    stage = StageKey.UPLOAD
