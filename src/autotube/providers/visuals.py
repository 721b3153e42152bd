"""Stock footage search adapters."""

import logging
import re

import httpx

from autotube.models.artifacts import ScriptAnalysis, VisualClip, VisualPlan
from autotube.models.pipeline import StageKey
from autotube.providers.base import StageContext, VisualSearch

logger = logging.getLogger(__name__)

PEXELS_VIDEO_SEARCH_URL = "https://api.pexels.com/videos/search"


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-") or "clip"


def search_queries(analysis: ScriptAnalysis, limit: int) -> list[str]:
    """Search terms for the storyboard, falling back to the topics."""
    queries = analysis.keywords or analysis.topics
    return queries[:limit] or ["abstract background"]


def _pick_video_file(video_files: list[dict], max_width: int) -> str | None:
    """Widest mp4 rendition within the output width, else the narrowest one above it."""
    fitting: list[tuple[int, str]] = []
    oversized: list[tuple[int, str]] = []
    for vf in video_files:
        if not isinstance(vf, dict):
            continue
        link = vf.get("link")
        width = int(vf.get("width") or 0)
        if not isinstance(link, str) or not link.startswith("http"):
            continue
        if vf.get("file_type", "video/mp4") != "video/mp4":
            continue
        (fitting if width <= max_width else oversized).append((width, link))
    if fitting:
        return max(fitting, key=lambda item: item[0])[1]
    if oversized:
        return min(oversized, key=lambda item: item[0])[1]
    return None


def extract_pexels_clips(payload: dict, query: str, max_width: int, limit: int) -> list[VisualClip]:
    """Turn a Pexels video search payload into storyboard clips."""
    videos = payload.get("videos")
    if not isinstance(videos, list):
        return []

    clips: list[VisualClip] = []
    for video in videos:
        if not isinstance(video, dict):
            continue
        link = _pick_video_file(video.get("video_files") or [], max_width)
        if not link:
            continue
        clips.append(
            VisualClip(
                query=query,
                url=link,
                preview_url=video.get("image") if isinstance(video.get("image"), str) else None,
                duration_seconds=max(float(video.get("duration") or 5.0), 1.0),
                provider="pexels",
            )
        )
        if len(clips) >= limit:
            break
    return clips


class PexelsVisualSearch(VisualSearch):
    """B-roll from the Pexels video search API, one query per keyword."""

    name = "pexels"
    live = True

    def __init__(
        self,
        api_key: str,
        per_query: int = 1,
        max_queries: int = 5,
        max_width: int = 1920,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        self.api_key = api_key
        self.per_query = per_query
        self.max_queries = max_queries
        self.max_width = max_width
        self.timeout = timeout
        self.client = client or httpx.Client(timeout=timeout)

    def invoke(self, context: StageContext) -> VisualPlan:
        analysis = context.output(StageKey.SCRIPT_ANALYSIS, ScriptAnalysis)
        clips: list[VisualClip] = []
        for query in search_queries(analysis, self.max_queries):
            try:
                response = self.client.get(
                    PEXELS_VIDEO_SEARCH_URL,
                    params={
                        "query": query,
                        "per_page": self.per_query,
                        "orientation": "landscape",
                    },
                    headers={"Authorization": self.api_key},
                    timeout=self.timeout,
                )
                response.raise_for_status()
                payload = response.json()
            except (httpx.HTTPError, ValueError) as e:
                raise self.translate(e) from e

            found = extract_pexels_clips(
                payload if isinstance(payload, dict) else {}, query, self.max_width, self.per_query
            )
            logger.debug("Pexels query %r returned %d clips", query, len(found))
            clips.extend(found)

        if not clips:
            raise self.error("pexels: no footage matched the script keywords")
        return VisualPlan(clips=clips)


class DemoVisualSearch(VisualSearch):
    """Placeholder storyboard spreading the narration over one clip per keyword."""

    def __init__(self, asset_base_url: str, max_queries: int = 5):
        self.asset_base_url = asset_base_url.rstrip("/")
        self.max_queries = max_queries

    def invoke(self, context: StageContext) -> VisualPlan:
        analysis = context.output(StageKey.SCRIPT_ANALYSIS, ScriptAnalysis)
        queries = search_queries(analysis, self.max_queries)
        per_clip = max(analysis.estimated_duration_seconds / len(queries), 1.0)
        return VisualPlan(
            clips=[
                VisualClip(
                    query=query,
                    url=f"{self.asset_base_url}/visuals/{slugify(query)}.mp4",
                    preview_url=f"{self.asset_base_url}/visuals/{slugify(query)}.jpg",
                    duration_seconds=round(per_clip, 2),
                )
                for query in queries
            ]
        )
