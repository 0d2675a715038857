"""Tests for the image, video, speech, search and task tools."""
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from conftest import make_client, make_part, make_response

from multitool.tools import (
    GroundedSearch,
    ImageTools,
    Location,
    MediaInput,
    SpeechTools,
    TaskSolver,
    ToolError,
    VideoTools,
)
from multitool.tools.reasoning import THINKING_BUDGET, THINKING_MODEL
from multitool.tools.search import parse_sources
from multitool.tools.video import LOADING_MESSAGES, MAX_ANALYZE_BYTES

PNG = MediaInput(data=b"\x89PNG fake", mime_type="image/png", name="cat.png")
MP4 = MediaInput(data=b"fake mp4", mime_type="video/mp4", name="clip.mp4")


class TestMediaInput:
    """Tests for reading uploads from disk."""

    def test_from_path_guesses_mime_type(self, tmp_path):
        """Test that the mime type is guessed from the file extension."""
        path = tmp_path / "cat.png"
        path.write_bytes(b"data")

        media = MediaInput.from_path(path)

        assert media.mime_type == "image/png"
        assert media.name == "cat.png"
        assert media.size == 4
        assert media.is_image and not media.is_video

    def test_unknown_extension(self, tmp_path):
        """Test that an unguessable extension is rejected."""
        path = tmp_path / "blob.unknownext"
        path.write_bytes(b"data")
        with pytest.raises(ValueError):
            MediaInput.from_path(path)

    def test_explicit_mime_type(self, tmp_path):
        """Test that an explicit mime type overrides the guess."""
        path = tmp_path / "clip.bin"
        path.write_bytes(b"data")
        assert MediaInput.from_path(path, mime_type="video/mp4").is_video


class TestImageTools:
    """Tests for image generation, editing and analysis."""

    @pytest.mark.asyncio
    async def test_generate(self):
        """Test that generation passes the aspect ratio and returns PNG bytes."""
        response = SimpleNamespace(generated_images=[SimpleNamespace(image=SimpleNamespace(image_bytes=b"png"))])
        generate = AsyncMock(return_value=response)
        tools = ImageTools(make_client(generate_images=generate))

        images = await tools.generate("a red fox", aspect_ratio="16:9")

        assert [image.data for image in images] == [b"png"]
        config = generate.await_args.kwargs["config"]
        assert config.aspect_ratio == "16:9"
        assert config.number_of_images == 1
        assert config.output_mime_type == "image/png"

    @pytest.mark.asyncio
    async def test_generate_validates_input(self):
        """Test that blank prompts and unsupported ratios are rejected."""
        tools = ImageTools(make_client())
        with pytest.raises(ValueError, match="cannot be empty"):
            await tools.generate("  ")
        with pytest.raises(ValueError, match="Unsupported aspect ratio"):
            await tools.generate("fox", aspect_ratio="2:1")

    @pytest.mark.asyncio
    async def test_generate_without_images_fails(self):
        """Test that an empty image list is reported as a failure."""
        generate = AsyncMock(return_value=SimpleNamespace(generated_images=[]))
        tools = ImageTools(make_client(generate_images=generate))
        with pytest.raises(ToolError, match="Failed to generate images"):
            await tools.generate("fox")

    @pytest.mark.asyncio
    async def test_generate_wraps_sdk_errors(self, debug_log):
        """Test that SDK errors become a user-facing ToolError and are logged."""
        tools = ImageTools(make_client(generate_images=AsyncMock(side_effect=RuntimeError("quota"))))
        tools.set_debug_callback(debug_log)

        with pytest.raises(ToolError) as excinfo:
            await tools.generate("fox")

        assert "quota" not in str(excinfo.value)
        assert debug_log.entries[-1][:2] == ("error", "Image")

    @pytest.mark.asyncio
    async def test_edit_returns_first_inline_image(self):
        """Test that edit returns the first inline image part."""
        response = make_response(parts=[make_part(text="here"), make_part(data=b"edited", mime_type="image/jpeg")])
        tools = ImageTools(make_client(generate_content=AsyncMock(return_value=response)))

        edited = await tools.edit(PNG, "add a hat")

        assert edited.data == b"edited"
        assert edited.mime_type == "image/jpeg"
        assert edited.extension in (".jpg", ".jpeg", ".jpe")

    @pytest.mark.asyncio
    async def test_edit_without_image_part_fails(self):
        """Test that a text-only edit response is a failure."""
        tools = ImageTools(make_client(generate_content=AsyncMock(return_value=make_response(text="no"))))
        with pytest.raises(ToolError, match="Failed to edit image"):
            await tools.edit(PNG, "add a hat")

    @pytest.mark.asyncio
    async def test_edit_rejects_non_image(self):
        """Test that edit only accepts images."""
        with pytest.raises(ValueError):
            await ImageTools(make_client()).edit(MP4, "x")

    @pytest.mark.asyncio
    async def test_analyze(self):
        """Test that image analysis returns the model description."""
        generate = AsyncMock(return_value=make_response(text="A cat."))
        tools = ImageTools(make_client(generate_content=generate))

        assert await tools.analyze(PNG) == "A cat."
        assert generate.await_args.kwargs["model"] == "gemini-2.5-flash"


def _operation(done, video=None, error=None):
    response = SimpleNamespace(generated_videos=[SimpleNamespace(video=video)] if video else [])
    return SimpleNamespace(name="operations/1", done=done, error=error, response=response)


class TestVideoTools:
    """Tests for long-running video generation and video analysis."""

    def _tools(self, **models):
        sleep = AsyncMock()
        return VideoTools(make_client(**models), poll_interval=10, message_interval=5, sleep=sleep), sleep

    @pytest.mark.asyncio
    async def test_generate_polls_until_done(self):
        """Test that generation polls the operation and cycles progress messages."""
        video = SimpleNamespace(video_bytes=None, uri="https://files/v.mp4", mime_type="video/mp4")
        get = AsyncMock(side_effect=[_operation(False), _operation(True, video)])
        download = AsyncMock(return_value=b"mp4 bytes")
        tools, sleep = self._tools(
            generate_videos=AsyncMock(return_value=_operation(False)),
            operations_get=get,
            files_download=download,
        )
        messages = []

        result = await tools.generate("a sunrise", progress=messages.append)

        assert result.data == b"mp4 bytes"
        assert result.uri == "https://files/v.mp4"
        assert get.await_count == 2
        assert sleep.await_count == 4
        assert messages == list(LOADING_MESSAGES[:5])
        download.assert_awaited_once_with(file=video)

    @pytest.mark.asyncio
    async def test_generate_uses_inline_bytes(self):
        """Test that inline video bytes skip the download."""
        video = SimpleNamespace(video_bytes=b"inline", uri=None, mime_type=None)
        tools, sleep = self._tools(generate_videos=AsyncMock(return_value=_operation(True, video)))

        result = await tools.generate("waves")

        assert result.data == b"inline"
        assert result.mime_type == "video/mp4"
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_generate_from_image_only(self):
        """Test that an image alone can seed generation."""
        video = SimpleNamespace(video_bytes=b"v", uri=None, mime_type="video/mp4")
        generate = AsyncMock(return_value=_operation(True, video))
        tools, _ = self._tools(generate_videos=generate)

        await tools.generate(image=PNG, aspect_ratio="9:16")

        kwargs = generate.await_args.kwargs
        assert kwargs["image"].image_bytes == PNG.data
        assert kwargs["config"].aspect_ratio == "9:16"
        assert kwargs["config"].resolution == "720p"

    @pytest.mark.asyncio
    async def test_generate_needs_prompt_or_image(self):
        """Test that generation needs a prompt or an image."""
        tools, _ = self._tools()
        with pytest.raises(ValueError, match="prompt or an image"):
            await tools.generate("  ")

    @pytest.mark.asyncio
    async def test_generate_rejects_square(self):
        """Test that square video is not offered."""
        tools, _ = self._tools()
        with pytest.raises(ValueError):
            await tools.generate("x", aspect_ratio="1:1")

    @pytest.mark.asyncio
    async def test_operation_error(self, debug_log):
        """Test that an operation error is logged and reported as no download link."""
        tools, _ = self._tools(generate_videos=AsyncMock(return_value=_operation(True, error={"code": 3})))
        tools.set_debug_callback(debug_log)
        with pytest.raises(ToolError, match="no download link"):
            await tools.generate("x")
        assert any("code" in message for _, _, message in debug_log.entries)

    @pytest.mark.asyncio
    async def test_missing_video(self):
        """Test that a finished operation without videos is a failure."""
        tools, _ = self._tools(generate_videos=AsyncMock(return_value=_operation(True)))
        with pytest.raises(ToolError, match="no download link"):
            await tools.generate("x")

    @pytest.mark.asyncio
    async def test_missing_uri(self):
        """Test that a video without bytes or URI is a failure."""
        video = SimpleNamespace(video_bytes=None, uri=None, mime_type=None)
        tools, _ = self._tools(generate_videos=AsyncMock(return_value=_operation(True, video)))
        with pytest.raises(ToolError, match="no download link"):
            await tools.generate("x")

    @pytest.mark.asyncio
    async def test_invalid_key_message(self):
        """Test that a not-found error is reported as an invalid API key."""
        error = RuntimeError("404 Requested entity was not found.")
        tools, _ = self._tools(generate_videos=AsyncMock(side_effect=error))
        with pytest.raises(ToolError, match="API key is invalid"):
            await tools.generate("x")

    @pytest.mark.asyncio
    async def test_generic_failure_message(self):
        """Test that other errors get the generic video failure message."""
        tools, _ = self._tools(generate_videos=AsyncMock(side_effect=RuntimeError("boom")))
        with pytest.raises(ToolError, match="Failed to generate video"):
            await tools.generate("x")

    @pytest.mark.asyncio
    async def test_analyze(self):
        """Test that video analysis uses the pro model."""
        generate = AsyncMock(return_value=make_response(text="A dog runs."))
        tools, _ = self._tools(generate_content=generate)

        assert await tools.analyze(MP4) == "A dog runs."
        assert generate.await_args.kwargs["model"] == "gemini-2.5-pro"

    @pytest.mark.asyncio
    async def test_analyze_size_limit(self):
        """Test that videos over the inline limit are rejected."""
        big = MediaInput(data=b"0" * (MAX_ANALYZE_BYTES + 1), mime_type="video/mp4")
        tools, _ = self._tools()
        with pytest.raises(ValueError, match="under 20MB"):
            await tools.analyze(big)

    @pytest.mark.asyncio
    async def test_analyze_failure_message(self):
        """Test that analysis failures mention the experimental model."""
        tools, _ = self._tools(generate_content=AsyncMock(side_effect=RuntimeError("400")))
        with pytest.raises(ToolError, match="experimental"):
            await tools.analyze(MP4)


class TestSpeechTools:
    """Tests for text-to-speech."""

    @pytest.mark.asyncio
    async def test_synthesize(self):
        """Test that speech synthesis returns PCM with the voice and rate."""
        pcm = b"\x00\x00\x10\x00"
        response = make_response(parts=[make_part(data=pcm, mime_type="audio/L16;rate=24000")])
        generate = AsyncMock(return_value=response)
        tools = SpeechTools(make_client(generate_content=generate))

        result = await tools.synthesize("Hello", voice="Puck")

        assert result.pcm == pcm
        assert result.sample_rate == 24000
        assert result.voice == "Puck"
        assert result.duration == pytest.approx(2 / 24000)
        config = generate.await_args.kwargs["config"]
        assert config.speech_config.voice_config.prebuilt_voice_config.voice_name == "Puck"

    @pytest.mark.asyncio
    async def test_validation(self):
        """Test that blank text and unknown voices are rejected."""
        tools = SpeechTools(make_client())
        with pytest.raises(ValueError, match="Text cannot be empty"):
            await tools.synthesize("")
        with pytest.raises(ValueError, match="Unknown voice"):
            await tools.synthesize("hi", voice="Nobody")

    @pytest.mark.asyncio
    async def test_no_audio(self):
        """Test that a response without audio is a failure."""
        tools = SpeechTools(make_client(generate_content=AsyncMock(return_value=make_response(text="sorry"))))
        with pytest.raises(ToolError, match="No audio data"):
            await tools.synthesize("hi")

    @pytest.mark.asyncio
    async def test_sdk_failure(self):
        """Test that SDK failures are reported as a ToolError."""
        tools = SpeechTools(make_client(generate_content=AsyncMock(side_effect=RuntimeError("x"))))
        with pytest.raises(ToolError, match="Failed to generate audio"):
            await tools.synthesize("hi")

    def test_save_wav(self, tmp_path):
        """Test that a speech result can be saved as WAV."""
        from multitool.tools import SpeechResult

        path = SpeechResult(pcm=b"\x00\x00" * 10).save_wav(tmp_path / "a.wav")
        assert path.exists()


def _web(uri, title):
    return SimpleNamespace(web=SimpleNamespace(uri=uri, title=title), maps=None)


def _place(uri, title, snippets=()):
    answer_sources = SimpleNamespace(review_snippets=[
        SimpleNamespace(google_maps_uri=u, title=t, text=s) for u, t, s in snippets
    ])
    return SimpleNamespace(
        web=None,
        maps=SimpleNamespace(uri=uri, title=title, place_answer_sources=answer_sources),
    )


class TestGroundedSearch:
    """Tests for web and Maps grounding."""

    @pytest.mark.asyncio
    async def test_web_search(self):
        """Test that web search returns text and sources titled by URI when untitled."""
        response = make_response(text="Answer", grounding_chunks=[_web("https://a", "A"), _web("https://b", None)])
        generate = AsyncMock(return_value=response)
        search = GroundedSearch(make_client(generate_content=generate))

        result = await search.search("who won?")

        assert result.text == "Answer"
        assert result.mode == "web"
        assert [(s.uri, s.display_title) for s in result.sources] == [("https://a", "A"), ("https://b", "https://b")]
        assert generate.await_args.kwargs["config"].tools[0].google_search is not None

    @pytest.mark.asyncio
    async def test_maps_search_uses_location(self):
        """Test that Maps search sends the location and parses review snippets."""
        response = make_response(
            text="Try Luigi's",
            grounding_chunks=[_place("https://maps/1", "Luigi's", [("https://maps/r1", "Great", "Best pizza")])],
        )
        generate = AsyncMock(return_value=response)
        search = GroundedSearch(make_client(generate_content=generate), location=Location(latitude=40.7, longitude=-74.0))

        result = await search.search("pizza nearby", mode="maps")

        source = result.sources[0]
        assert source.kind == "maps"
        assert source.review_snippets[0].snippet == "Best pizza"
        lat_lng = generate.await_args.kwargs["config"].tool_config.retrieval_config.lat_lng
        assert (lat_lng.latitude, lat_lng.longitude) == (40.7, -74.0)

    def test_maps_without_location(self):
        """Test that Maps search needs a location."""
        with pytest.raises(ToolError, match="Could not get location"):
            GroundedSearch(make_client()).build_config("maps")

    def test_explicit_location_overrides(self):
        """Test that a per-call location wins over the default."""
        search = GroundedSearch(make_client(), location=Location(latitude=1, longitude=1))
        config = search.build_config("maps", Location(latitude=2, longitude=3))
        assert config.tool_config.retrieval_config.lat_lng.latitude == 2

    def test_unknown_mode(self):
        """Test that unknown search modes are rejected."""
        with pytest.raises(ValueError):
            GroundedSearch(make_client()).build_config("images")

    @pytest.mark.asyncio
    async def test_empty_query(self):
        """Test that blank queries are rejected."""
        with pytest.raises(ValueError, match="Query cannot be empty"):
            await GroundedSearch(make_client()).search(" ")

    @pytest.mark.asyncio
    async def test_sdk_failure(self):
        """Test that search failures get a user-facing message."""
        search = GroundedSearch(make_client(generate_content=AsyncMock(side_effect=RuntimeError("x"))))
        with pytest.raises(ToolError, match="Failed to perform search"):
            await search.search("q")

    def test_parse_sources_without_metadata(self):
        """Test that responses without grounding metadata have no sources."""
        assert parse_sources(make_response(text="x")) == []
        assert parse_sources(SimpleNamespace(candidates=[])) == []


class TestTaskSolver:
    """Tests for model selection and thinking mode."""

    @pytest.mark.asyncio
    async def test_solve_with_selected_model(self):
        """Test that the selected model answers without a thinking config."""
        generate = AsyncMock(return_value=make_response(text="42", usage=(10, 2, 12)))
        solver = TaskSolver(make_client(generate_content=generate))

        result = await solver.solve("meaning of life?", model="gemini-flash-lite-latest")

        assert result.text == "42"
        assert result.model == "gemini-flash-lite-latest"
        assert result.usage["total_tokens"] == 12
        assert generate.await_args.kwargs["config"] is None

    @pytest.mark.asyncio
    async def test_thinking_forces_pro_model(self):
        """Test that thinking mode switches to the pro model with a budget."""
        generate = AsyncMock(return_value=make_response(text="proof"))
        solver = TaskSolver(make_client(generate_content=generate))

        result = await solver.solve("prove it", model="gemini-2.5-flash", thinking=True)

        kwargs = generate.await_args.kwargs
        assert kwargs["model"] == THINKING_MODEL
        assert kwargs["config"].thinking_config.thinking_budget == THINKING_BUDGET
        assert result.thinking is True
        assert result.model == THINKING_MODEL

    @pytest.mark.asyncio
    async def test_unknown_model(self):
        """Test that models outside the list are rejected."""
        with pytest.raises(ValueError, match="Unknown model"):
            await TaskSolver(make_client()).solve("x", model="gpt-4")

    @pytest.mark.asyncio
    async def test_failure_message(self):
        """Test that solver failures get a generic message."""
        solver = TaskSolver(make_client(generate_content=AsyncMock(side_effect=RuntimeError("x"))))
        with pytest.raises(ToolError, match="An error occurred"):
            await solver.solve("x")
