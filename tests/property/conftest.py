"""Hypothesis strategies for property-based testing."""

from hypothesis import strategies as st

from autotube.models.pipeline import (
    STAGE_ORDER,
    Assets,
    PipelineResponse,
    PipelineStage,
    PublishedUpload,
    QueuedUpload,
    ScheduledUpload,
    SeoMetadata,
    StageStatus,
)

_text = st.text(alphabet=st.characters(blacklist_categories=("Cs",)), max_size=40)
_url = st.builds(lambda slug: f"https://cdn.example/{slug}", st.from_regex(r"[a-z0-9]{1,12}", fullmatch=True))


@st.composite
def generate_script(draw, min_words=4, max_words=120):
    """Sentences of lowercase words, always at least 20 characters long."""
    words = draw(
        st.lists(
            st.from_regex(r"[a-z]{3,10}", fullmatch=True), min_size=min_words, max_size=max_words
        )
    )
    text = " ".join(words)
    if len(text) < 20:
        text = text + " padding words here"
    return text.capitalize() + "."


@st.composite
def generate_stage_statuses(draw):
    """A fail-fast shaped status list: completed prefix, optional failure, idle rest."""
    completed = draw(st.integers(min_value=0, max_value=len(STAGE_ORDER)))
    failed = completed < len(STAGE_ORDER) and draw(st.booleans())
    statuses = [StageStatus.COMPLETED] * completed
    if failed:
        statuses.append(StageStatus.FAILED)
    statuses += [StageStatus.IDLE] * (len(STAGE_ORDER) - len(statuses))
    return statuses


@st.composite
def generate_pipeline_response(draw):
    """Generate a random valid PipelineResponse."""
    statuses = draw(generate_stage_statuses())
    stages = [
        PipelineStage(
            key=key,
            title=draw(_text.filter(bool)),
            status=status,
            summary=draw(_text) if status == StageStatus.COMPLETED else None,
            error=draw(_text.filter(bool)) if status == StageStatus.FAILED else None,
        )
        for key, status in zip(STAGE_ORDER, statuses)
    ]
    upload = draw(
        st.one_of(
            st.none(),
            st.just(QueuedUpload()),
            _url.map(lambda u: PublishedUpload(url=u)),
            _text.filter(bool).map(lambda s: ScheduledUpload(scheduled_for=s)),
        )
    )
    return PipelineResponse(
        stages=stages,
        assets=Assets(
            video_url=draw(st.none() | _url),
            voiceover_url=draw(st.none() | _url),
            thumbnail_url=draw(st.none() | _url),
            subtitles_url=draw(st.none() | _url),
        ),
        seo=SeoMetadata(
            title=draw(_text),
            description=draw(_text),
            tags=draw(st.lists(_text.filter(bool), max_size=5)),
        ),
        upload=upload,
    )
