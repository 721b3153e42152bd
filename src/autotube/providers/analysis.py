"""Script analysis adapters."""

import logging
import re
from collections import Counter

from openai import OpenAI

from autotube.models.artifacts import ScriptAnalysis
from autotube.providers.base import ScriptAnalyzer, StageContext
from autotube.providers.parser import normalize_tags, parse_llm_response
from autotube.providers.prompts import ANALYSIS_SYSTEM_PROMPT, build_analysis_prompt

logger = logging.getLogger(__name__)

STOPWORDS = frozenset(
    """
    a about above after again all also am an and any are as at be because been before being
    below between both but by can could did do does doing down during each few for from further
    had has have having he her here hers him his how i if in into is it its itself just let me
    more most my no nor not now of off on once only or other our ours out over own same she
    should so some such than that the their theirs them then there these they this those through
    to too under until up very was we were what when where which while who whom why will with
    would you your yours
    """.split()
)

_WORD_RE = re.compile(r"[A-Za-z][A-Za-z'-]+")
_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")

_TONE_MARKERS = {
    "upbeat": {"amazing", "awesome", "exciting", "incredible", "love", "fun", "!"},
    "dramatic": {"never", "secret", "shocking", "danger", "truth", "finally"},
    "calm": {"relax", "gentle", "slow", "breathe", "peaceful", "quiet"},
}


def count_words(script: str) -> int:
    return len(script.split())


def estimate_duration(word_count: int, words_per_minute: int) -> float:
    """Narration length in seconds at the given speaking rate."""
    if words_per_minute <= 0:
        return 0.0
    return round(word_count / words_per_minute * 60.0, 2)


def split_sentences(script: str) -> list[str]:
    text = " ".join(script.split())
    return [s.strip() for s in _SENTENCE_RE.split(text) if s.strip()]


def extract_keywords(script: str, limit: int = 8) -> list[str]:
    """Most frequent non-stopword terms, first occurrence breaking ties."""
    words = [w.lower().strip("'-") for w in _WORD_RE.findall(script)]
    candidates = [w for w in words if len(w) > 2 and w not in STOPWORDS]
    counts = Counter(candidates)
    first_seen = {w: i for i, w in reversed(list(enumerate(candidates)))}
    ranked = sorted(counts, key=lambda w: (-counts[w], first_seen[w]))
    return ranked[:limit]


def guess_tone(script: str) -> str:
    lowered = script.lower()
    words = set(_WORD_RE.findall(lowered))
    scores = {
        tone: sum(1 for m in markers if m in words or (m == "!" and "!" in lowered))
        for tone, markers in _TONE_MARKERS.items()
    }
    tone, score = max(scores.items(), key=lambda item: item[1])
    return tone if score > 0 else "informative"


class HeuristicScriptAnalyzer(ScriptAnalyzer):
    """Offline analysis from word statistics."""

    name = "heuristic"

    def __init__(self, words_per_minute: int = 150):
        self.words_per_minute = words_per_minute

    def invoke(self, context: StageContext) -> ScriptAnalysis:
        script = context.request.script
        sentences = split_sentences(script)
        keywords = extract_keywords(script)
        word_count = count_words(script)
        return ScriptAnalysis(
            tone=guess_tone(script),
            topics=keywords[:3],
            hook=sentences[0] if sentences else script.strip(),
            keywords=keywords,
            word_count=word_count,
            estimated_duration_seconds=estimate_duration(word_count, self.words_per_minute),
            language=context.request.target_language or "en-US",
        )


class OpenAIScriptAnalyzer(ScriptAnalyzer):
    """Chat-completion analysis; word count and duration stay local."""

    name = "openai"
    live = True

    def __init__(self, client: OpenAI, model: str, words_per_minute: int = 150):
        self.client = client
        self.model = model
        self.words_per_minute = words_per_minute

    def invoke(self, context: StageContext) -> ScriptAnalysis:
        request = context.request
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": build_analysis_prompt(request.script, request.target_language),
                    },
                ],
                response_format={"type": "json_object"},
                temperature=0.3,
            )
            data = parse_llm_response(response.choices[0].message.content)
            word_count = count_words(request.script)
            return ScriptAnalysis(
                tone=str(data.get("tone") or "informative"),
                topics=normalize_tags(data.get("topics") or [], limit=5),
                hook=str(data.get("hook") or ""),
                keywords=normalize_tags(data.get("keywords") or [], limit=8)
                or extract_keywords(request.script),
                word_count=word_count,
                estimated_duration_seconds=estimate_duration(word_count, self.words_per_minute),
                language=request.target_language or str(data.get("language") or "en-US"),
            )
        except Exception as e:
            logger.warning("Script analysis via %s failed: %s", self.model, e)
            raise self.translate(e) from e
