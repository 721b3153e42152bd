"""Speech synthesis adapters."""

import logging

import httpx

from autotube.models.artifacts import ScriptAnalysis, VoiceoverResult
from autotube.models.pipeline import StageKey
from autotube.providers.base import SpeechSynthesizer, StageContext

logger = logging.getLogger(__name__)

ELEVENLABS_TTS_URL = "https://api.elevenlabs.io/v1/text-to-speech/{voice_id}"


class ElevenLabsSpeech(SpeechSynthesizer):
    """Neural narration through the ElevenLabs text-to-speech API."""

    name = "elevenlabs"
    live = True

    def __init__(
        self,
        api_key: str,
        model_id: str,
        default_voice_id: str,
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ):
        self.api_key = api_key
        self.model_id = model_id
        self.default_voice_id = default_voice_id
        self.timeout = timeout
        self.client = client or httpx.Client(timeout=timeout)

    def invoke(self, context: StageContext) -> VoiceoverResult:
        analysis = context.output(StageKey.SCRIPT_ANALYSIS, ScriptAnalysis)
        voice_id = context.request.voice_profile or self.default_voice_id
        try:
            response = self.client.post(
                ELEVENLABS_TTS_URL.format(voice_id=voice_id),
                headers={"xi-api-key": self.api_key, "Accept": "audio/mpeg"},
                json={"text": context.request.script, "model_id": self.model_id},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise self.translate(e) from e

        if not response.content:
            raise self.error("elevenlabs: empty audio payload")

        path = context.media.write_bytes(context.run_id, "voiceover.mp3", response.content)
        logger.info("Synthesized voiceover with voice %s (%d bytes)", voice_id, len(response.content))
        return VoiceoverResult(
            url=context.media.public_url(path),
            local_path=str(path),
            duration_seconds=analysis.estimated_duration_seconds,
            voice_id=voice_id,
        )


class DemoSpeech(SpeechSynthesizer):
    """Placeholder narration used when no speech credentials are configured."""

    def __init__(self, asset_base_url: str, default_voice_id: str = "demo"):
        self.asset_base_url = asset_base_url.rstrip("/")
        self.default_voice_id = default_voice_id

    def invoke(self, context: StageContext) -> VoiceoverResult:
        analysis = context.output(StageKey.SCRIPT_ANALYSIS, ScriptAnalysis)
        return VoiceoverResult(
            url=f"{self.asset_base_url}/voiceover.mp3",
            duration_seconds=analysis.estimated_duration_seconds,
            voice_id=context.request.voice_profile or self.default_voice_id,
        )
