"""WebVTT caption generation timed against the voiceover."""

from pydantic import BaseModel, Field

from autotube.models.artifacts import SubtitleTrack, VoiceoverResult
from autotube.models.pipeline import StageKey
from autotube.providers.analysis import split_sentences
from autotube.providers.base import Captioner, StageContext


class Cue(BaseModel):
    start: float = Field(..., ge=0)
    end: float = Field(..., ge=0)
    text: str


def format_timestamp(seconds: float) -> str:
    """Render seconds as a WebVTT HH:MM:SS.mmm timestamp."""
    millis = int(round(seconds * 1000))
    hours, millis = divmod(millis, 3_600_000)
    minutes, millis = divmod(millis, 60_000)
    secs, millis = divmod(millis, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"


def chunk_sentence(sentence: str, max_words: int) -> list[str]:
    words = sentence.split()
    return [" ".join(words[i : i + max_words]) for i in range(0, len(words), max_words)]


def build_cues(script: str, duration: float, max_words: int = 12) -> list[Cue]:
    """Split the script into cues whose length is proportional to their word count."""
    chunks = [c for s in split_sentences(script) for c in chunk_sentence(s, max_words)]
    total_words = sum(len(c.split()) for c in chunks)
    if not chunks or total_words == 0 or duration <= 0:
        return []

    cues = []
    position = 0.0
    for chunk in chunks:
        length = duration * len(chunk.split()) / total_words
        cues.append(Cue(start=round(position, 3), end=round(position + length, 3), text=chunk))
        position += length
    # absorb rounding drift into the last cue
    cues[-1] = cues[-1].model_copy(update={"end": round(duration, 3)})
    return cues


def render_webvtt(cues: list[Cue]) -> str:
    lines = ["WEBVTT", ""]
    for i, cue in enumerate(cues, start=1):
        lines.append(str(i))
        lines.append(f"{format_timestamp(cue.start)} --> {format_timestamp(cue.end)}")
        lines.append(cue.text)
        lines.append("")
    return "\n".join(lines)


class WebVttCaptioner(Captioner):
    """Writes a .vtt file next to the other run media."""

    name = "webvtt"

    def __init__(self, max_words_per_cue: int = 12):
        self.max_words_per_cue = max_words_per_cue

    def invoke(self, context: StageContext) -> SubtitleTrack:
        voiceover = context.output(StageKey.VOICEOVER, VoiceoverResult)
        cues = build_cues(
            context.request.script, voiceover.duration_seconds, self.max_words_per_cue
        )
        if not cues:
            raise self.error("webvtt: script produced no caption cues")

        path = context.media.write_text(context.run_id, "subtitles.vtt", render_webvtt(cues))
        return SubtitleTrack(
            url=context.media.public_url(path),
            local_path=str(path),
            cue_count=len(cues),
            language=context.request.target_language or "en-US",
        )
