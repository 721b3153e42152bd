"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Autotube configuration loaded from environment variables."""

    model_config = {"env_prefix": "AUTOTUBE_", "env_file": ".env", "extra": "ignore"}

    # Text generation / images
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_image_model: str = "dall-e-3"

    # Speech synthesis
    elevenlabs_api_key: str = ""
    elevenlabs_model_id: str = "eleven_multilingual_v2"
    default_voice_id: str = "21m00Tcm4TlvDq8ikWAM"

    # Stock media
    pexels_api_key: str = ""
    visuals_per_keyword: int = 1
    max_visual_queries: int = 5

    # YouTube publishing
    youtube_client_id: str = ""
    youtube_client_secret: str = ""
    youtube_refresh_token: str = ""
    youtube_privacy_status: str = "private"
    youtube_category_id: str = "22"

    # Assembly
    ffmpeg_enabled: bool = False
    ffmpeg_binary: str = "ffmpeg"
    output_width: int = 1920
    output_height: int = 1080
    output_fps: int = 30
    output_video_codec: str = "libx264"
    output_audio_codec: str = "aac"
    output_crf: int = 23
    output_preset: str = "medium"
    music_volume: float = 0.15

    # Media storage
    media_dir: Path = Path("/tmp/autotube/media")
    media_ttl_seconds: int = 86400
    public_base_url: str = "http://localhost:8000"
    demo_asset_base_url: str = "https://cdn.autotube.dev/demo"

    # Orchestration
    stage_timeout_seconds: float = 60.0
    # per-stage overrides of stage_timeout_seconds
    stage_timeout_overrides: dict[str, float] = {"assembly": 600.0, "upload": 900.0}
    words_per_minute: int = 150

    # Celery
    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/1"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "info"
    cors_origins: list[str] = ["*"]

    def timeout_for(self, stage: str) -> float:
        """Per-stage timeout in seconds."""
        return self.stage_timeout_overrides.get(stage, self.stage_timeout_seconds)

    @property
    def youtube_configured(self) -> bool:
        return bool(
            self.youtube_client_id and self.youtube_client_secret and self.youtube_refresh_token
        )


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, read once."""
    return Settings()
