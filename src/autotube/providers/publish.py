"""Video platform publishing adapters."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaFileUpload

from autotube.models.artifacts import AssemblyResult
from autotube.models.pipeline import PublishedUpload, ScheduledUpload, SeoMetadata, StageKey
from autotube.providers.base import Publisher, StageContext, reason_for_status

logger = logging.getLogger(__name__)

YOUTUBE_UPLOAD_SCOPE = "https://www.googleapis.com/auth/youtube.upload"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
UPLOAD_CHUNK_SIZE = 8 * 1024 * 1024


def to_rfc3339(timestamp: str) -> str:
    """Normalise a user supplied timestamp to the UTC form YouTube expects.

    Naive values such as ``2025-01-01T10:00`` are taken as UTC.
    """
    parsed = datetime.fromisoformat(timestamp.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


class YouTubePublisher(Publisher):
    """Resumable upload through the YouTube Data API v3."""

    name = "youtube"
    live = True

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        privacy_status: str = "private",
        category_id: str = "22",
        service_factory: Callable[[], Any] | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.privacy_status = privacy_status
        self.category_id = category_id
        self._service_factory = service_factory or self._build_service

    def _build_service(self):
        creds = Credentials(
            token=None,
            refresh_token=self.refresh_token,
            client_id=self.client_id,
            client_secret=self.client_secret,
            token_uri=GOOGLE_TOKEN_URI,
            scopes=[YOUTUBE_UPLOAD_SCOPE],
        )
        return build("youtube", "v3", credentials=creds, cache_discovery=False)

    def build_body(self, seo: SeoMetadata, publish_at: str | None) -> dict:
        status: dict[str, Any] = {
            "privacyStatus": self.privacy_status,
            "selfDeclaredMadeForKids": False,
        }
        if publish_at:
            # scheduled videos must stay private until publishAt
            status["privacyStatus"] = "private"
            status["publishAt"] = to_rfc3339(publish_at)
        return {
            "snippet": {
                "title": seo.title,
                "description": seo.description,
                "tags": seo.tags,
                "categoryId": self.category_id,
            },
            "status": status,
        }

    def invoke(self, context: StageContext) -> PublishedUpload | ScheduledUpload:
        assembly = context.output(StageKey.ASSEMBLY, AssemblyResult)
        seo = context.output(StageKey.SEO, SeoMetadata)
        publish_at = context.request.publish_at

        if not assembly.local_path or not Path(assembly.local_path).is_file():
            raise self.error(
                "youtube: assembled video is not available locally", reason="unavailable"
            )
        try:
            body = self.build_body(seo, publish_at)
        except ValueError as e:
            raise self.error(f"youtube: invalid schedule time '{publish_at}'") from e

        logger.info("Uploading %s to YouTube", assembly.local_path)
        try:
            service = self._service_factory()
            media = MediaFileUpload(
                assembly.local_path,
                mimetype="video/mp4",
                resumable=True,
                chunksize=UPLOAD_CHUNK_SIZE,
            )
            request = service.videos().insert(part="snippet,status", body=body, media_body=media)
            response = None
            while response is None:
                status, response = request.next_chunk()
                if status:
                    logger.debug("YouTube upload progress: %d%%", int(status.progress() * 100))
        except HttpError as e:
            raise self.error(
                f"youtube: API error {e.resp.status}", reason=reason_for_status(int(e.resp.status))
            ) from e
        except Exception as e:
            raise self.translate(e) from e

        video_id = (response or {}).get("id")
        if not video_id:
            raise self.error("youtube: upload response carried no video id")
        logger.info("YouTube upload complete: %s", video_id)

        if publish_at:
            return ScheduledUpload(scheduled_for=publish_at)
        return PublishedUpload(url=watch_url(video_id))


class DemoPublisher(Publisher):
    """Pretends to publish; returns a synthetic watch URL."""

    def invoke(self, context: StageContext) -> PublishedUpload | ScheduledUpload:
        context.output(StageKey.ASSEMBLY, AssemblyResult)
        publish_at = context.request.publish_at
        if publish_at:
            return ScheduledUpload(scheduled_for=publish_at)
        return PublishedUpload(url=watch_url(f"demo-{context.run_id[:11]}"))
