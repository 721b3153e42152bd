"""SEO metadata adapters."""

import logging

from openai import OpenAI

from autotube.models.artifacts import ScriptAnalysis
from autotube.models.pipeline import SeoMetadata, StageKey
from autotube.providers.base import MetadataWriter, StageContext
from autotube.providers.parser import (
    MAX_DESCRIPTION_LENGTH,
    MAX_TITLE_LENGTH,
    normalize_tags,
    parse_llm_response,
    validate_seo,
)
from autotube.providers.prompts import SEO_SYSTEM_PROMPT, build_seo_prompt

logger = logging.getLogger(__name__)


class HeuristicSeoWriter(MetadataWriter):
    """Title from the project name, description from the script, tags from keywords."""

    name = "heuristic"

    def invoke(self, context: StageContext) -> SeoMetadata:
        request = context.request
        analysis = context.output(StageKey.SCRIPT_ANALYSIS, ScriptAnalysis)

        title = request.project_name.strip()
        if analysis.topics:
            title = f"{title} | {analysis.topics[0].title()}"

        paragraphs = [analysis.hook] if analysis.hook else []
        body = " ".join(request.script.split())
        if body and body != analysis.hook:
            paragraphs.append(body)
        if analysis.keywords:
            paragraphs.append(" ".join(f"#{k.replace(' ', '')}" for k in analysis.keywords[:5]))

        return SeoMetadata(
            title=title[:MAX_TITLE_LENGTH],
            description="\n\n".join(paragraphs)[:MAX_DESCRIPTION_LENGTH],
            tags=normalize_tags([request.project_name, *analysis.topics, *analysis.keywords]),
        )


class OpenAISeoWriter(MetadataWriter):
    name = "openai"
    live = True

    def __init__(self, client: OpenAI, model: str):
        self.client = client
        self.model = model

    def invoke(self, context: StageContext) -> SeoMetadata:
        request = context.request
        analysis = context.optional_output(StageKey.SCRIPT_ANALYSIS, ScriptAnalysis)
        prompt = build_seo_prompt(
            project_name=request.project_name,
            script=request.script,
            analysis=analysis.model_dump() if analysis else None,
            target_language=request.target_language,
        )
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SEO_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                response_format={"type": "json_object"},
                temperature=0.7,
            )
            return validate_seo(parse_llm_response(response.choices[0].message.content))
        except Exception as e:
            logger.warning("SEO generation via %s failed: %s", self.model, e)
            raise self.translate(e) from e
