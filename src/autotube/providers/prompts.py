"""Prompt templates for the text-generation stages."""

import json

ANALYSIS_SYSTEM_PROMPT = """You are a YouTube script editor. Read the narration script and describe it \
so the rest of a video production pipeline can plan voiceover, visuals and music.

Respond with a single JSON object:
{
  "tone": "one or two words, e.g. upbeat, calm, dramatic, informative",
  "topics": ["up to 5 short topic phrases"],
  "hook": "the single sentence that best grabs attention",
  "keywords": ["up to 8 concrete nouns usable as stock footage search terms"],
  "language": "BCP-47 language tag of the script"
}
Output ONLY the JSON object."""

SEO_SYSTEM_PROMPT = """You are a YouTube SEO specialist. Write upload metadata for a video.

Rules:
- title: at most 100 characters, compelling, no clickbait lies
- description: 2-4 short paragraphs, at most 5000 characters, first line summarises the video
- tags: 5 to 15 lowercase search phrases ordered by relevance

Respond with a single JSON object: {"title": "...", "description": "...", "tags": ["..."]}
Output ONLY the JSON object."""


def build_analysis_prompt(script: str, target_language: str | None = None) -> str:
    """Build the user prompt for script analysis."""
    parts = [f"## Script\n{script.strip()}"]
    if target_language:
        parts.append(f"## Target language\n{target_language}")
    return "\n\n".join(parts)


def build_seo_prompt(
    project_name: str,
    script: str,
    analysis: dict | None = None,
    target_language: str | None = None,
) -> str:
    """Build the user prompt for SEO metadata generation."""
    parts = [f"## Project\n{project_name}", f"## Script\n{script.strip()}"]
    if analysis:
        parts.append(f"## Script analysis\n```json\n{json.dumps(analysis, indent=2)}\n```")
    if target_language:
        parts.append(f"## Write the metadata in\n{target_language}")
    return "\n\n".join(parts)


def build_thumbnail_prompt(project_name: str, hook: str, tone: str, topics: list[str]) -> str:
    """Describe a 16:9 thumbnail for image generation."""
    subject = ", ".join(topics[:3]) or project_name
    return (
        f"High-contrast YouTube thumbnail, 16:9, {tone} mood, about {subject}. "
        f"Bold focal subject, clean background, space for the short headline "
        f"\"{project_name}\". Scene inspired by: {hook or project_name}. No watermark."
    )
