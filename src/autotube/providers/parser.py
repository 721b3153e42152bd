"""Parsing of LLM responses into stage outputs."""

import json
import re

from autotube.models.errors import ProviderError
from autotube.models.pipeline import SeoMetadata

MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 5000
MAX_TAGS = 15


def parse_llm_response(response_text: str | None) -> dict:
    """Parse LLM response, handling markdown-wrapped JSON."""
    text = (response_text or "").strip()

    # Try to extract JSON from markdown code blocks
    json_match = re.search(r"```(?:json)?\s*\n?(.*?)\n?```", text, re.DOTALL)
    if json_match:
        text = json_match.group(1).strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        brace_match = re.search(r"\{.*\}", text, re.DOTALL)
        if brace_match:
            try:
                data = json.loads(brace_match.group())
            except json.JSONDecodeError:
                data = None
        else:
            data = None
        if data is None:
            raise ProviderError(
                f"Failed to parse LLM response as JSON: {e}",
                reason="bad_response",
                details={"response_preview": text[:200]},
            )

    if not isinstance(data, dict):
        raise ProviderError("LLM response is not a JSON object", reason="bad_response")
    return data


def normalize_tags(tags: list[str], limit: int = MAX_TAGS) -> list[str]:
    """Strip, drop empties and case-insensitive duplicates, keep order."""
    result: list[str] = []
    seen: set[str] = set()
    for tag in tags:
        cleaned = " ".join(str(tag).replace("#", " ").split())
        if not cleaned or cleaned.lower() in seen:
            continue
        seen.add(cleaned.lower())
        result.append(cleaned)
        if len(result) >= limit:
            break
    return result


def validate_seo(data: dict) -> SeoMetadata:
    """Validate and clamp SEO metadata to YouTube limits."""
    title = str(data.get("title", "")).strip()
    description = str(data.get("description", "")).strip()
    raw_tags = data.get("tags", [])
    if isinstance(raw_tags, str):
        raw_tags = raw_tags.split(",")
    if not title:
        raise ProviderError("SEO response has no title", reason="bad_response")

    return SeoMetadata(
        title=title[:MAX_TITLE_LENGTH],
        description=description[:MAX_DESCRIPTION_LENGTH],
        tags=normalize_tags(raw_tags if isinstance(raw_tags, list) else []),
    )
