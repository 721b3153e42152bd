"""FFmpeg command construction for final video assembly."""


def escape_filter_path(path: str) -> str:
    """Escape a file path for use inside an ffmpeg filter argument."""
    return path.replace("\\", "/").replace(":", "\\:").replace("'", "\\'")


class FFmpegAssemblyBuilder:
    """Builds the ffmpeg invocation that lays voiceover, b-roll, captions and music."""

    def __init__(
        self,
        binary: str = "ffmpeg",
        width: int = 1920,
        height: int = 1080,
        fps: int = 30,
        video_codec: str = "libx264",
        audio_codec: str = "aac",
        crf: int = 23,
        preset: str = "medium",
        music_volume: float = 0.15,
    ):
        self.binary = binary
        self.width = width
        self.height = height
        self.fps = fps
        self.video_codec = video_codec
        self.audio_codec = audio_codec
        self.crf = crf
        self.preset = preset
        self.music_volume = music_volume

    def build_video_filter(
        self, clip_count: int, segment_duration: float, subtitles_path: str | None = None
    ) -> str:
        """Trim+scale+pad every clip to a fixed segment, concat, optionally burn captions.

        Inputs 0..clip_count-1 are the clips; output label is [outv].
        """
        if clip_count <= 0:
            return ""

        filter_parts = []
        concat_inputs = []
        for i in range(clip_count):
            filter_parts.append(
                f"[{i}:v]trim=duration={segment_duration:.3f},"
                f"setpts=PTS-STARTPTS,"
                f"scale={self.width}:{self.height}:force_original_aspect_ratio=decrease,"
                f"pad={self.width}:{self.height}:(ow-iw)/2:(oh-ih)/2,"
                f"fps={self.fps},setsar=1"
                f"[v{i}]"
            )
            concat_inputs.append(f"[v{i}]")

        concat_label = "[outv]" if not subtitles_path else "[cat]"
        filter_parts.append(
            "".join(concat_inputs) + f"concat=n={clip_count}:v=1:a=0{concat_label}"
        )
        if subtitles_path:
            filter_parts.append(f"[cat]subtitles='{escape_filter_path(subtitles_path)}'[outv]")
        return ";\n".join(filter_parts)

    def build_audio_filter(self, voice_index: int, music_index: int | None = None) -> str:
        """Voiceover at full level, music bed ducked underneath; output label is [outa]."""
        if music_index is None:
            return f"[{voice_index}:a]anull[outa]"
        return (
            f"[{voice_index}:a]volume=1.0[voice];\n"
            f"[{music_index}:a]volume={self.music_volume:.2f}[bed];\n"
            f"[voice][bed]amix=inputs=2:duration=first:dropout_transition=2[outa]"
        )

    def build_command(
        self,
        clip_sources: list[str],
        voiceover_source: str,
        output_path: str,
        duration: float,
        music_source: str | None = None,
        subtitles_path: str | None = None,
    ) -> list[str]:
        """Build the complete ffmpeg command."""
        if not clip_sources:
            raise ValueError("At least one visual clip is required")
        if duration <= 0:
            raise ValueError("Duration must be positive")

        segment = duration / len(clip_sources)

        cmd = [self.binary, "-y"]
        # loop every clip so short footage still fills its segment
        for source in clip_sources:
            cmd.extend(["-stream_loop", "-1", "-i", source])
        voice_index = len(clip_sources)
        cmd.extend(["-i", voiceover_source])
        music_index = None
        if music_source:
            music_index = voice_index + 1
            cmd.extend(["-stream_loop", "-1", "-i", music_source])

        video_filter = self.build_video_filter(len(clip_sources), segment, subtitles_path)
        audio_filter = self.build_audio_filter(voice_index, music_index)
        cmd.extend(["-filter_complex", f"{video_filter};\n{audio_filter}"])
        cmd.extend(["-map", "[outv]", "-map", "[outa]"])
        cmd.extend(
            [
                "-t",
                f"{duration:.3f}",
                "-c:v",
                self.video_codec,
                "-crf",
                str(self.crf),
                "-preset",
                self.preset,
                "-c:a",
                self.audio_codec,
                "-movflags",
                "+faststart",
                output_path,
            ]
        )
        return cmd
