"""Background music selection from a built-in royalty-free catalogue."""

import zlib

from autotube.models.artifacts import MusicTrack, ScriptAnalysis
from autotube.models.pipeline import StageKey
from autotube.providers.base import MusicSelector, StageContext

# mood -> (title, file, bpm)
MUSIC_CATALOGUE: dict[str, list[tuple[str, str, int]]] = {
    "upbeat": [
        ("Bright Horizons", "bright-horizons.mp3", 124),
        ("Sunny Loop", "sunny-loop.mp3", 118),
    ],
    "dramatic": [
        ("Rising Tension", "rising-tension.mp3", 92),
        ("Cinematic Pulse", "cinematic-pulse.mp3", 100),
    ],
    "calm": [
        ("Soft Focus", "soft-focus.mp3", 72),
        ("Morning Drift", "morning-drift.mp3", 80),
    ],
    "informative": [
        ("Clean Explainer", "clean-explainer.mp3", 105),
        ("Steady Progress", "steady-progress.mp3", 110),
        ("Light Corporate", "light-corporate.mp3", 112),
    ],
}

DEFAULT_MOOD = "informative"


class LibraryMusicSelector(MusicSelector):
    """Picks a track whose mood matches the script tone."""

    name = "library"

    def __init__(self, asset_base_url: str):
        self.asset_base_url = asset_base_url.rstrip("/")

    def invoke(self, context: StageContext) -> MusicTrack:
        analysis = context.output(StageKey.SCRIPT_ANALYSIS, ScriptAnalysis)
        mood = analysis.tone.lower() if analysis.tone.lower() in MUSIC_CATALOGUE else DEFAULT_MOOD
        tracks = MUSIC_CATALOGUE[mood]
        # stable per project so reruns keep the same soundtrack
        index = zlib.crc32(context.request.project_name.encode("utf-8")) % len(tracks)
        title, filename, bpm = tracks[index]
        return MusicTrack(
            title=title,
            mood=mood,
            url=f"{self.asset_base_url}/music/{filename}",
            bpm=bpm,
        )
