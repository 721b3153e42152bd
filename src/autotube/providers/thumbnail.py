"""Thumbnail rendering adapters."""

import logging

from openai import OpenAI

from autotube.models.artifacts import ScriptAnalysis, ThumbnailResult
from autotube.models.pipeline import StageKey
from autotube.providers.base import StageContext, ThumbnailRenderer
from autotube.providers.prompts import build_thumbnail_prompt

logger = logging.getLogger(__name__)


def thumbnail_prompt(context: StageContext) -> str:
    analysis = context.output(StageKey.SCRIPT_ANALYSIS, ScriptAnalysis)
    return build_thumbnail_prompt(
        context.request.project_name, analysis.hook, analysis.tone, analysis.topics
    )


class OpenAIThumbnail(ThumbnailRenderer):
    """Landscape thumbnail from the OpenAI image API."""

    name = "openai-images"
    live = True

    def __init__(self, client: OpenAI, model: str, size: str = "1792x1024"):
        self.client = client
        self.model = model
        self.size = size

    def invoke(self, context: StageContext) -> ThumbnailResult:
        prompt = thumbnail_prompt(context)
        try:
            response = self.client.images.generate(
                model=self.model, prompt=prompt, size=self.size, n=1
            )
        except Exception as e:
            logger.warning("Thumbnail generation failed: %s", e)
            raise self.translate(e) from e

        if not response.data or not response.data[0].url:
            raise self.error("openai-images: response contained no image URL")
        return ThumbnailResult(url=response.data[0].url, prompt=prompt)


class DemoThumbnail(ThumbnailRenderer):
    def __init__(self, asset_base_url: str):
        self.asset_base_url = asset_base_url.rstrip("/")

    def invoke(self, context: StageContext) -> ThumbnailResult:
        return ThumbnailResult(
            url=f"{self.asset_base_url}/thumbnail.jpg", prompt=thumbnail_prompt(context)
        )
