"""Tests for the Typer CLI with a fake GenAI client."""
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from conftest import make_client, make_part, make_response
from typer.testing import CliRunner

from multitool.cli import app as cli

runner = CliRunner()

ENV_KEYS = (
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "API_KEY",
    "MULTITOOL_LATITUDE",
    "MULTITOOL_LONGITUDE",
    "MULTITOOL_HISTORY_BACKEND",
)


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Clean environment with an API key and a temporary output directory."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.setenv("MULTITOOL_OUTPUT_DIR", str(tmp_path / "out"))
    return tmp_path


@pytest.fixture
def fake_client(monkeypatch):
    """Replace client creation; returns a setter for the fake client."""
    holder = {"client": make_client()}
    monkeypatch.setattr(cli, "get_client", lambda settings, console=None: holder["client"])

    def _set(**models):
        holder["client"] = make_client(**models)
        return holder["client"]

    return _set


class TestConfiguration:
    """Tests for startup errors."""

    def test_missing_api_key(self, monkeypatch):
        """Test that a missing API key exits with an error."""
        for key in ENV_KEYS:
            monkeypatch.delenv(key, raising=False)

        result = runner.invoke(cli.app, ["solve", "2+2"])

        assert result.exit_code == 1
        assert "GEMINI_API_KEY not set" in result.output

    def test_invalid_coordinate(self, env, monkeypatch):
        """Test that a malformed coordinate in the environment is reported."""
        monkeypatch.setenv("MULTITOOL_LATITUDE", "north")

        result = runner.invoke(cli.app, ["solve", "2+2"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestCommands:
    """Tests for the one-shot commands."""

    def test_solve(self, env, fake_client):
        """Test that solve prints the answer and the model used."""
        fake_client(generate_content=AsyncMock(return_value=make_response(text="Four", usage=(3, 1, 4))))

        result = runner.invoke(cli.app, ["solve", "2+2"])

        assert result.exit_code == 0, result.output
        assert "Four" in result.output
        assert "gemini-2.5-flash" in result.output

    def test_solve_unknown_model(self, env, fake_client):
        """Test that solve rejects models outside the allowed list."""
        result = runner.invoke(cli.app, ["solve", "2+2", "--model", "gpt-4"])
        assert result.exit_code == 1
        assert "Unknown model" in result.output

    def test_image_generate_saves_file(self, env, fake_client):
        """Test that image generate writes the image to the output directory."""
        images = SimpleNamespace(generated_images=[SimpleNamespace(image=SimpleNamespace(image_bytes=b"png"))])
        fake_client(generate_images=AsyncMock(return_value=images))

        result = runner.invoke(cli.app, ["image", "generate", "a fox"])

        assert result.exit_code == 0, result.output
        saved = list((env / "out").glob("image-*.png"))
        assert len(saved) == 1
        assert saved[0].read_bytes() == b"png"

    def test_image_generate_bad_ratio(self, env, fake_client):
        """Test that an unsupported aspect ratio is rejected."""
        result = runner.invoke(cli.app, ["image", "generate", "a fox", "--aspect-ratio", "2:1"])
        assert result.exit_code == 1
        assert "Unsupported aspect ratio" in result.output

    def test_image_analyze(self, env, fake_client):
        """Test that image analyze prints the description."""
        fake_client(generate_content=AsyncMock(return_value=make_response(text="A small fox")))
        picture = env / "fox.png"
        picture.write_bytes(b"png")

        result = runner.invoke(cli.app, ["image", "analyze", str(picture)])

        assert result.exit_code == 0, result.output
        assert "A small fox" in result.output

    def test_speak_without_playback(self, env, fake_client):
        """Test that speak writes a WAV file when playback is off."""
        response = make_response(parts=[make_part(data=b"\x00\x00" * 240, mime_type="audio/pcm")])
        fake_client(generate_content=AsyncMock(return_value=response))

        result = runner.invoke(cli.app, ["speak", "Hello", "--no-play"])

        assert result.exit_code == 0, result.output
        assert len(list((env / "out").glob("speech-*.wav"))) == 1

    def test_search_prints_sources(self, env, fake_client):
        """Test that web search lists the grounding sources."""
        chunk = SimpleNamespace(web=SimpleNamespace(uri="https://example.com", title="Example"), maps=None)
        fake_client(generate_content=AsyncMock(return_value=make_response(text="Answer", grounding_chunks=[chunk])))

        result = runner.invoke(cli.app, ["search", "question"])

        assert result.exit_code == 0, result.output
        assert "Sources" in result.output
        assert "Example" in result.output

    def test_maps_search_without_location(self, env, fake_client):
        """Test that maps search fails without a location."""
        result = runner.invoke(cli.app, ["search", "pizza", "--maps"])
        assert result.exit_code == 1
        assert "Could not get location" in result.output

    def test_maps_search_with_flags(self, env, fake_client):
        """Test that --lat and --lng reach the retrieval config."""
        generate = AsyncMock(return_value=make_response(text="Luigi's"))
        fake_client(generate_content=generate)

        result = runner.invoke(cli.app, ["search", "pizza", "--maps", "--lat", "40.7", "--lng", "-74"])

        assert result.exit_code == 0, result.output
        lat_lng = generate.await_args.kwargs["config"].tool_config.retrieval_config.lat_lng
        assert lat_lng.latitude == 40.7

    def test_video_generate_needs_input(self, env, fake_client):
        """Test that video generate needs a prompt or an image."""
        result = runner.invoke(cli.app, ["video", "generate"])
        assert result.exit_code == 1
        assert "prompt or an image" in result.output
