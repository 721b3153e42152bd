"""Video assembly adapters."""

import logging
import subprocess

from autotube.models.artifacts import (
    AssemblyResult,
    MusicTrack,
    SubtitleTrack,
    VisualPlan,
    VoiceoverResult,
)
from autotube.models.pipeline import StageKey
from autotube.providers.base import Assembler, StageContext
from autotube.providers.visuals import slugify
from autotube.rendering.ffmpeg_builder import FFmpegAssemblyBuilder

logger = logging.getLogger(__name__)


class FFmpegAssembler(Assembler):
    """Renders the final mp4 locally with ffmpeg."""

    name = "ffmpeg"
    live = True

    def __init__(self, builder: FFmpegAssemblyBuilder, timeout: float = 600.0):
        self.builder = builder
        self.timeout = timeout

    def invoke(self, context: StageContext) -> AssemblyResult:
        voiceover = context.output(StageKey.VOICEOVER, VoiceoverResult)
        visuals = context.output(StageKey.VISUALS, VisualPlan)
        subtitles = context.optional_output(StageKey.SUBTITLE_GENERATION, SubtitleTrack)
        music = context.optional_output(StageKey.MUSIC, MusicTrack)

        if not visuals.clips:
            raise self.error("ffmpeg: no visual clips to assemble")
        duration = voiceover.duration_seconds or visuals.total_duration
        output_path = context.media.path_for(context.run_id, "video.mp4")

        try:
            cmd = self.builder.build_command(
                clip_sources=[clip.url for clip in visuals.clips],
                voiceover_source=voiceover.local_path or voiceover.url,
                output_path=str(output_path),
                duration=duration,
                music_source=music.url if music else None,
                subtitles_path=subtitles.local_path if subtitles else None,
            )
        except ValueError as e:
            raise self.translate(e) from e

        logger.info("Assembling %d clips into %s", len(visuals.clips), output_path)
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except FileNotFoundError as e:
            raise self.error(
                f"ffmpeg: binary '{self.builder.binary}' not found", reason="unavailable"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise self.error(
                f"ffmpeg: assembly exceeded {self.timeout:.0f}s", reason="timeout"
            ) from e

        if result.returncode != 0:
            stderr_tail = "\n".join(result.stderr.splitlines()[-20:])
            logger.error("FFmpeg failed (code %d): %s", result.returncode, stderr_tail)
            raise self.error(
                f"ffmpeg: exited with code {result.returncode}",
                details={"stderr": stderr_tail},
            )
        if not output_path.exists():
            raise self.error("ffmpeg: output file was not created")

        return AssemblyResult(
            url=context.media.public_url(output_path),
            local_path=str(output_path),
            duration_seconds=round(duration, 3),
        )


class DemoAssembler(Assembler):
    def __init__(self, asset_base_url: str):
        self.asset_base_url = asset_base_url.rstrip("/")

    def invoke(self, context: StageContext) -> AssemblyResult:
        voiceover = context.output(StageKey.VOICEOVER, VoiceoverResult)
        slug = slugify(context.request.project_name)
        return AssemblyResult(
            url=f"{self.asset_base_url}/videos/{slug}.mp4",
            duration_seconds=voiceover.duration_seconds,
        )
