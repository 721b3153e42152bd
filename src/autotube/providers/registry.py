"""Adapter selection: live providers where credentials exist, demo otherwise."""

import logging
from collections.abc import Iterator, Mapping

import httpx
from openai import OpenAI

from autotube.config import Settings
from autotube.models.pipeline import STAGE_ORDER, StageKey
from autotube.providers.analysis import HeuristicScriptAnalyzer, OpenAIScriptAnalyzer
from autotube.providers.assembly import DemoAssembler, FFmpegAssembler
from autotube.providers.base import StageProvider
from autotube.providers.captions import WebVttCaptioner
from autotube.providers.metadata import HeuristicSeoWriter, OpenAISeoWriter
from autotube.providers.music import LibraryMusicSelector
from autotube.providers.publish import DemoPublisher, YouTubePublisher
from autotube.providers.speech import DemoSpeech, ElevenLabsSpeech
from autotube.providers.thumbnail import DemoThumbnail, OpenAIThumbnail
from autotube.providers.visuals import DemoVisualSearch, PexelsVisualSearch
from autotube.rendering.ffmpeg_builder import FFmpegAssemblyBuilder

logger = logging.getLogger(__name__)


class ProviderSet(Mapping[StageKey, StageProvider]):
    """Exactly one adapter per stage key."""

    def __init__(self, providers: Mapping[StageKey, StageProvider]):
        missing = [key.value for key in STAGE_ORDER if key not in providers]
        if missing:
            raise ValueError(f"No provider configured for stages: {missing}")
        for key, provider in providers.items():
            if provider.stage != key:
                raise ValueError(
                    f"Provider {type(provider).__name__} handles '{provider.stage}', not '{key}'"
                )
        self._providers = {key: providers[key] for key in STAGE_ORDER}

    def __getitem__(self, key: StageKey) -> StageProvider:
        return self._providers[key]

    def __iter__(self) -> Iterator[StageKey]:
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    def replace(self, *providers: StageProvider) -> "ProviderSet":
        """Return a copy with the given adapters swapped in by stage."""
        updated = dict(self._providers)
        for provider in providers:
            updated[provider.stage] = provider
        return ProviderSet(updated)

    def describe(self) -> dict[str, str]:
        """Stage -> provider name, e.g. for the health endpoint."""
        return {key.value: provider.name for key, provider in self._providers.items()}


def build_demo_providers(settings: Settings) -> ProviderSet:
    """Adapters that need no credentials and make no network calls."""
    base = settings.demo_asset_base_url
    return ProviderSet(
        {
            StageKey.SCRIPT_ANALYSIS: HeuristicScriptAnalyzer(settings.words_per_minute),
            StageKey.VOICEOVER: DemoSpeech(base, settings.default_voice_id),
            StageKey.VISUALS: DemoVisualSearch(base, settings.max_visual_queries),
            StageKey.MUSIC: LibraryMusicSelector(base),
            StageKey.SUBTITLE_GENERATION: WebVttCaptioner(),
            StageKey.THUMBNAIL: DemoThumbnail(base),
            StageKey.SEO: HeuristicSeoWriter(),
            StageKey.ASSEMBLY: DemoAssembler(base),
            StageKey.UPLOAD: DemoPublisher(),
        }
    )


def build_providers(
    settings: Settings,
    openai_client: OpenAI | None = None,
    http_client: httpx.Client | None = None,
) -> ProviderSet:
    """Select live adapters for every capability whose credentials are configured."""
    providers = build_demo_providers(settings)
    live: list[StageProvider] = []
    timeout = settings.stage_timeout_seconds

    if settings.openai_api_key or openai_client is not None:
        client = openai_client or OpenAI(api_key=settings.openai_api_key, timeout=timeout)
        live.append(OpenAIScriptAnalyzer(client, settings.openai_model, settings.words_per_minute))
        live.append(OpenAIThumbnail(client, settings.openai_image_model))
        live.append(OpenAISeoWriter(client, settings.openai_model))

    if settings.elevenlabs_api_key:
        live.append(
            ElevenLabsSpeech(
                api_key=settings.elevenlabs_api_key,
                model_id=settings.elevenlabs_model_id,
                default_voice_id=settings.default_voice_id,
                timeout=timeout,
                client=http_client,
            )
        )

    if settings.pexels_api_key:
        live.append(
            PexelsVisualSearch(
                api_key=settings.pexels_api_key,
                per_query=settings.visuals_per_keyword,
                max_queries=settings.max_visual_queries,
                max_width=settings.output_width,
                timeout=timeout,
                client=http_client,
            )
        )

    if settings.ffmpeg_enabled:
        builder = FFmpegAssemblyBuilder(
            binary=settings.ffmpeg_binary,
            width=settings.output_width,
            height=settings.output_height,
            fps=settings.output_fps,
            video_codec=settings.output_video_codec,
            audio_codec=settings.output_audio_codec,
            crf=settings.output_crf,
            preset=settings.output_preset,
            music_volume=settings.music_volume,
        )
        live.append(FFmpegAssembler(builder, timeout=settings.timeout_for("assembly")))

    if settings.youtube_configured:
        live.append(
            YouTubePublisher(
                client_id=settings.youtube_client_id,
                client_secret=settings.youtube_client_secret,
                refresh_token=settings.youtube_refresh_token,
                privacy_status=settings.youtube_privacy_status,
                category_id=settings.youtube_category_id,
            )
        )

    providers = providers.replace(*live)
    logger.info("Stage providers: %s", providers.describe())
    return providers
