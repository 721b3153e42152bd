"""Tests for the stage provider adapters."""

import json
from unittest.mock import MagicMock

import httpx
import pytest

from autotube.models.artifacts import (
    AssemblyResult,
    ScriptAnalysis,
    SubtitleTrack,
    VisualClip,
    VisualPlan,
    VoiceoverResult,
)
from autotube.models.errors import OrchestrationError, ProviderError
from autotube.models.pipeline import (
    PublishedUpload,
    ScheduledUpload,
    SeoMetadata,
    StageKey,
)
from autotube.models.request import PipelineRequest
from autotube.providers.analysis import (
    HeuristicScriptAnalyzer,
    OpenAIScriptAnalyzer,
    estimate_duration,
    extract_keywords,
    guess_tone,
)
from autotube.providers.metadata import HeuristicSeoWriter, OpenAISeoWriter
from autotube.providers.music import MUSIC_CATALOGUE, LibraryMusicSelector
from autotube.providers.publish import DemoPublisher, YouTubePublisher, to_rfc3339
from autotube.providers.speech import DemoSpeech, ElevenLabsSpeech
from autotube.providers.thumbnail import DemoThumbnail, OpenAIThumbnail
from autotube.providers.visuals import (
    DemoVisualSearch,
    PexelsVisualSearch,
    extract_pexels_clips,
)
from tests.conftest import SAMPLE_SCRIPT


@pytest.fixture
def request_model():
    return PipelineRequest(script=SAMPLE_SCRIPT, project_name="Demo Project")


@pytest.fixture
def analysis():
    return ScriptAnalysis(
        tone="upbeat",
        topics=["automation", "video"],
        hook="Welcome to the automation pipeline.",
        keywords=["automation", "video", "script"],
        word_count=30,
        estimated_duration_seconds=12.0,
    )


def _chat_response(content: str):
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


class TestScriptAnalysis:
    def test_estimate_duration(self):
        assert estimate_duration(150, 150) == 60.0
        assert estimate_duration(75, 150) == 30.0
        assert estimate_duration(10, 0) == 0.0

    def test_keywords_skip_stopwords(self):
        keywords = extract_keywords("The cat and the cat saw a dog. The dog ran.")
        assert keywords[:2] == ["cat", "dog"]
        assert "the" not in keywords

    def test_guess_tone(self):
        assert guess_tone("This is an amazing and exciting launch!") == "upbeat"
        assert guess_tone("Quarterly numbers were reported today.") == "informative"

    def test_heuristic_analyzer(self, make_context, request_model):
        result = HeuristicScriptAnalyzer(words_per_minute=150).invoke(make_context(request_model))
        assert result.word_count == len(SAMPLE_SCRIPT.split())
        assert result.estimated_duration_seconds > 0
        assert result.hook == "Welcome to the automation pipeline."
        assert "automation" in result.keywords
        assert result.language == "en-US"

    def test_openai_analyzer(self, make_context, request_model):
        client = MagicMock()
        client.chat.completions.create.return_value = _chat_response(
            json.dumps(
                {
                    "tone": "upbeat",
                    "topics": ["automation"],
                    "hook": "Welcome!",
                    "keywords": ["robot", "Robot", "studio"],
                    "language": "en-GB",
                }
            )
        )
        result = OpenAIScriptAnalyzer(client, "gpt-test").invoke(make_context(request_model))
        assert result.tone == "upbeat"
        assert result.keywords == ["robot", "studio"]
        assert result.language == "en-GB"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["response_format"] == {"type": "json_object"}

    def test_openai_analyzer_bad_json(self, make_context, request_model):
        client = MagicMock()
        client.chat.completions.create.return_value = _chat_response("not json at all")
        with pytest.raises(ProviderError) as exc_info:
            OpenAIScriptAnalyzer(client, "gpt-test").invoke(make_context(request_model))
        assert exc_info.value.reason == "bad_response"
        assert exc_info.value.stage == "script_analysis"


class TestSpeech:
    def test_demo_speech(self, make_context, request_model, analysis):
        ctx = make_context(request_model, {StageKey.SCRIPT_ANALYSIS: analysis})
        result = DemoSpeech("https://demo/", "voice-x").invoke(ctx)
        assert result.url == "https://demo/voiceover.mp3"
        assert result.duration_seconds == 12.0
        assert result.voice_id == "voice-x"

    def test_demo_speech_requires_analysis(self, make_context, request_model):
        with pytest.raises(OrchestrationError):
            DemoSpeech("https://demo").invoke(make_context(request_model))

    def test_elevenlabs_writes_audio(self, make_context, request_model, analysis):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["key"] = request.headers["xi-api-key"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, content=b"ID3fake-mp3")

        speech = ElevenLabsSpeech(
            api_key="secret",
            model_id="model-1",
            default_voice_id="voice-default",
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        ctx = make_context(request_model, {StageKey.SCRIPT_ANALYSIS: analysis})
        result = speech.invoke(ctx)

        assert seen["url"].endswith("/v1/text-to-speech/voice-default")
        assert seen["key"] == "secret"
        assert seen["body"]["model_id"] == "model-1"
        assert result.url.endswith("/media/run123/voiceover.mp3")
        with open(result.local_path, "rb") as f:
            assert f.read() == b"ID3fake-mp3"

    @pytest.mark.parametrize("status,reason", [(401, "auth"), (429, "quota"), (503, "unavailable")])
    def test_elevenlabs_http_errors(self, make_context, request_model, analysis, status, reason):
        speech = ElevenLabsSpeech(
            api_key="k",
            model_id="m",
            default_voice_id="v",
            client=httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(status))),
        )
        ctx = make_context(request_model, {StageKey.SCRIPT_ANALYSIS: analysis})
        with pytest.raises(ProviderError) as exc_info:
            speech.invoke(ctx)
        assert exc_info.value.reason == reason

    def test_elevenlabs_timeout(self, make_context, request_model, analysis):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        speech = ElevenLabsSpeech(
            api_key="k",
            model_id="m",
            default_voice_id="v",
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        ctx = make_context(request_model, {StageKey.SCRIPT_ANALYSIS: analysis})
        with pytest.raises(ProviderError) as exc_info:
            speech.invoke(ctx)
        assert exc_info.value.reason == "timeout"


PEXELS_PAYLOAD = {
    "videos": [
        {
            "duration": 8,
            "image": "https://images.pexels.com/1.jpg",
            "video_files": [
                {"link": "https://v.pexels.com/4k.mp4", "width": 3840, "file_type": "video/mp4"},
                {"link": "https://v.pexels.com/hd.mp4", "width": 1920, "file_type": "video/mp4"},
                {"link": "https://v.pexels.com/sd.mp4", "width": 640, "file_type": "video/mp4"},
            ],
        },
        {"duration": 5, "video_files": []},
    ]
}


class TestVisuals:
    def test_extract_prefers_widest_fitting_file(self):
        clips = extract_pexels_clips(PEXELS_PAYLOAD, "city", max_width=1920, limit=5)
        assert len(clips) == 1
        assert clips[0].url == "https://v.pexels.com/hd.mp4"
        assert clips[0].duration_seconds == 8.0
        assert clips[0].provider == "pexels"

    def test_extract_handles_garbage(self):
        assert extract_pexels_clips({"videos": "nope"}, "q", 1920, 5) == []

    def test_pexels_search(self, make_context, request_model, analysis):
        queries = []

        def handler(request: httpx.Request) -> httpx.Response:
            queries.append(request.url.params["query"])
            assert request.headers["Authorization"] == "pexels-key"
            return httpx.Response(200, json=PEXELS_PAYLOAD)

        search = PexelsVisualSearch(
            api_key="pexels-key",
            max_queries=2,
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        plan = search.invoke(make_context(request_model, {StageKey.SCRIPT_ANALYSIS: analysis}))
        assert queries == ["automation", "video"]
        assert len(plan.clips) == 2

    def test_pexels_no_results(self, make_context, request_model, analysis):
        search = PexelsVisualSearch(
            api_key="k",
            client=httpx.Client(
                transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"videos": []}))
            ),
        )
        with pytest.raises(ProviderError, match="no footage"):
            search.invoke(make_context(request_model, {StageKey.SCRIPT_ANALYSIS: analysis}))

    def test_demo_visuals(self, make_context, request_model, analysis):
        plan = DemoVisualSearch("https://demo").invoke(
            make_context(request_model, {StageKey.SCRIPT_ANALYSIS: analysis})
        )
        assert [c.query for c in plan.clips] == analysis.keywords
        assert plan.clips[0].url == "https://demo/visuals/automation.mp4"
        assert plan.total_duration == pytest.approx(12.0)


class TestMusic:
    def test_matches_tone(self, make_context, request_model, analysis):
        track = LibraryMusicSelector("https://demo").invoke(
            make_context(request_model, {StageKey.SCRIPT_ANALYSIS: analysis})
        )
        assert track.mood == "upbeat"
        assert track.title in [t[0] for t in MUSIC_CATALOGUE["upbeat"]]
        assert track.url.startswith("https://demo/music/")

    def test_unknown_tone_falls_back(self, make_context, request_model, analysis):
        odd = analysis.model_copy(update={"tone": "melancholic"})
        track = LibraryMusicSelector("https://demo").invoke(
            make_context(request_model, {StageKey.SCRIPT_ANALYSIS: odd})
        )
        assert track.mood == "informative"

    def test_stable_per_project(self, make_context, request_model, analysis):
        selector = LibraryMusicSelector("https://demo")
        ctx = make_context(request_model, {StageKey.SCRIPT_ANALYSIS: analysis})
        assert selector.invoke(ctx) == selector.invoke(ctx)


class TestThumbnail:
    def test_demo_thumbnail(self, make_context, request_model, analysis):
        result = DemoThumbnail("https://demo").invoke(
            make_context(request_model, {StageKey.SCRIPT_ANALYSIS: analysis})
        )
        assert result.url == "https://demo/thumbnail.jpg"
        assert "Demo Project" in result.prompt

    def test_openai_thumbnail(self, make_context, request_model, analysis):
        client = MagicMock()
        image = MagicMock()
        image.url = "https://images.openai/thumb.png"
        client.images.generate.return_value = MagicMock(data=[image])
        result = OpenAIThumbnail(client, "dall-e-3").invoke(
            make_context(request_model, {StageKey.SCRIPT_ANALYSIS: analysis})
        )
        assert result.url == "https://images.openai/thumb.png"
        assert client.images.generate.call_args.kwargs["size"] == "1792x1024"

    def test_openai_thumbnail_empty(self, make_context, request_model, analysis):
        client = MagicMock()
        client.images.generate.return_value = MagicMock(data=[])
        with pytest.raises(ProviderError):
            OpenAIThumbnail(client, "dall-e-3").invoke(
                make_context(request_model, {StageKey.SCRIPT_ANALYSIS: analysis})
            )


class TestSeo:
    def test_heuristic_seo(self, make_context, request_model, analysis):
        seo = HeuristicSeoWriter().invoke(
            make_context(request_model, {StageKey.SCRIPT_ANALYSIS: analysis})
        )
        assert seo.title == "Demo Project | Automation"
        assert seo.description.startswith(analysis.hook)
        assert seo.tags[0] == "Demo Project"
        assert len({t.lower() for t in seo.tags}) == len(seo.tags)

    def test_openai_seo(self, make_context, request_model, analysis):
        client = MagicMock()
        client.chat.completions.create.return_value = _chat_response(
            "```json\n"
            + json.dumps({"title": "T" * 150, "description": "Desc", "tags": "a, b, a"})
            + "\n```"
        )
        seo = OpenAISeoWriter(client, "gpt-test").invoke(
            make_context(request_model, {StageKey.SCRIPT_ANALYSIS: analysis})
        )
        assert len(seo.title) == 100
        assert seo.tags == ["a", "b"]

    def test_openai_seo_missing_title(self, make_context, request_model):
        client = MagicMock()
        client.chat.completions.create.return_value = _chat_response('{"description": "x"}')
        with pytest.raises(ProviderError) as exc_info:
            OpenAISeoWriter(client, "gpt-test").invoke(make_context(request_model))
        assert exc_info.value.reason == "bad_response"


class TestPublish:
    def test_rfc3339(self):
        assert to_rfc3339("2025-01-01T10:00") == "2025-01-01T10:00:00Z"
        assert to_rfc3339("2025-01-01T12:00:00+02:00") == "2025-01-01T10:00:00Z"
        assert to_rfc3339("2025-01-01T10:00:00Z") == "2025-01-01T10:00:00Z"

    def test_demo_publisher_upload(self, make_context):
        req = PipelineRequest(script=SAMPLE_SCRIPT, project_name="Demo", auto_upload_enabled=True)
        ctx = make_context(req, {StageKey.ASSEMBLY: AssemblyResult(url="https://v/video.mp4")})
        result = DemoPublisher().invoke(ctx)
        assert isinstance(result, PublishedUpload)
        assert result.url

    def test_demo_publisher_schedule(self, make_context):
        req = PipelineRequest(
            script=SAMPLE_SCRIPT,
            project_name="Demo",
            auto_upload_enabled=True,
            schedule_at="2025-01-01T10:00",
        )
        ctx = make_context(req, {StageKey.ASSEMBLY: AssemblyResult(url="https://v/video.mp4")})
        assert DemoPublisher().invoke(ctx) == ScheduledUpload(scheduled_for="2025-01-01T10:00")

    def _youtube_context(self, make_context, tmp_path, schedule_at=None):
        video = tmp_path / "video.mp4"
        video.write_bytes(b"\x00" * 16)
        req = PipelineRequest(
            script=SAMPLE_SCRIPT,
            project_name="Demo",
            auto_upload_enabled=True,
            schedule_at=schedule_at,
        )
        return make_context(
            req,
            {
                StageKey.ASSEMBLY: AssemblyResult(url="https://v", local_path=str(video)),
                StageKey.SEO: SeoMetadata(title="Title", description="Desc", tags=["x"]),
            },
        )

    def _fake_service(self, video_id="abc123"):
        service = MagicMock()
        insert_request = MagicMock()
        insert_request.next_chunk.return_value = (None, {"id": video_id})
        service.videos.return_value.insert.return_value = insert_request
        return service

    def test_youtube_upload(self, make_context, tmp_path):
        service = self._fake_service()
        publisher = YouTubePublisher("id", "secret", "refresh", service_factory=lambda: service)
        result = publisher.invoke(self._youtube_context(make_context, tmp_path))
        assert result == PublishedUpload(url="https://www.youtube.com/watch?v=abc123")
        body = service.videos.return_value.insert.call_args.kwargs["body"]
        assert body["snippet"]["title"] == "Title"
        assert "publishAt" not in body["status"]

    def test_youtube_schedule(self, make_context, tmp_path):
        service = self._fake_service()
        publisher = YouTubePublisher(
            "id", "secret", "refresh", privacy_status="public", service_factory=lambda: service
        )
        result = publisher.invoke(
            self._youtube_context(make_context, tmp_path, schedule_at="2025-01-01T10:00")
        )
        assert result == ScheduledUpload(scheduled_for="2025-01-01T10:00")
        body = service.videos.return_value.insert.call_args.kwargs["body"]
        assert body["status"]["publishAt"] == "2025-01-01T10:00:00Z"
        assert body["status"]["privacyStatus"] == "private"

    def test_youtube_invalid_schedule(self, make_context, tmp_path):
        publisher = YouTubePublisher("id", "s", "r", service_factory=self._fake_service)
        with pytest.raises(ProviderError, match="invalid schedule"):
            publisher.invoke(self._youtube_context(make_context, tmp_path, schedule_at="soon"))

    def test_youtube_needs_local_video(self, make_context):
        req = PipelineRequest(script=SAMPLE_SCRIPT, project_name="Demo", auto_upload_enabled=True)
        ctx = make_context(
            req,
            {
                StageKey.ASSEMBLY: AssemblyResult(url="https://remote/video.mp4"),
                StageKey.SEO: SeoMetadata(title="T"),
            },
        )
        publisher = YouTubePublisher("id", "s", "r", service_factory=self._fake_service)
        with pytest.raises(ProviderError) as exc_info:
            publisher.invoke(ctx)
        assert exc_info.value.reason == "unavailable"


class TestContextOutputs:
    def test_wrong_type_rejected(self, make_context, request_model):
        ctx = make_context(
            request_model,
            {StageKey.VOICEOVER: VisualPlan(clips=[VisualClip(query="q", url="https://x")])},
        )
        with pytest.raises(OrchestrationError):
            ctx.output(StageKey.VOICEOVER, VoiceoverResult)
        assert ctx.optional_output(StageKey.VOICEOVER, VoiceoverResult) is None
        assert ctx.optional_output(StageKey.SUBTITLE_GENERATION, SubtitleTrack) is None
