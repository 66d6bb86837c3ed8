"""Tests for FFmpeg audio extraction."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from persona_studio.domain.errors import AudioExtractionError
from persona_studio.utils.audio_extraction import build_ffmpeg_command, extract_audio


def fake_ffmpeg(output: bytes):
    """subprocess.run stand-in that writes ``output`` to the target path."""
    seen: dict[str, Path] = {}

    def run(cmd, **kwargs):
        seen["input"] = Path(cmd[cmd.index("-i") + 1])
        seen["output"] = Path(cmd[-1])
        assert seen["input"].read_bytes() == b"video-bytes"
        seen["output"].write_bytes(output)
        return subprocess.CompletedProcess(cmd, 0, b"", b"")

    return run, seen


def test_command_flags() -> None:
    cmd = build_ffmpeg_command("ffmpeg", Path("in.mp4"), Path("out.mp3"))

    assert cmd[:3] == ["ffmpeg", "-i", "in.mp4"]
    assert "-vn" in cmd
    assert cmd[cmd.index("-acodec") + 1] == "libmp3lame"
    assert cmd[cmd.index("-ab") + 1] == "128k"
    assert cmd[cmd.index("-ac") + 1] == "1"
    assert cmd[cmd.index("-ar") + 1] == "44100"
    assert cmd[-2:] == ["-y", "out.mp3"]


def test_extracts_audio_and_cleans_up() -> None:
    run, seen = fake_ffmpeg(b"mp3-bytes")

    target = "persona_studio.utils.audio_extraction.subprocess.run"
    with patch(target, side_effect=run) as mock_run:
        audio = extract_audio(b"video-bytes", ffmpeg_path="/opt/ffmpeg", timeout=30)

    assert audio == b"mp3-bytes"
    assert mock_run.call_args.args[0][0] == "/opt/ffmpeg"
    assert mock_run.call_args.kwargs["timeout"] == 30
    assert not seen["input"].parent.exists()


def test_empty_input() -> None:
    with pytest.raises(AudioExtractionError):
        extract_audio(b"")


def test_missing_binary() -> None:
    with patch(
        "persona_studio.utils.audio_extraction.subprocess.run",
        side_effect=FileNotFoundError("ffmpeg"),
    ):
        with pytest.raises(AudioExtractionError, match="not found"):
            extract_audio(b"video-bytes", ffmpeg_path="/missing/ffmpeg")


def test_ffmpeg_failure_includes_stderr() -> None:
    error = subprocess.CalledProcessError(1, ["ffmpeg"], stderr=b"Invalid data found")

    with patch("persona_studio.utils.audio_extraction.subprocess.run", side_effect=error):
        with pytest.raises(AudioExtractionError, match="Invalid data found"):
            extract_audio(b"video-bytes")


def test_timeout() -> None:
    error = subprocess.TimeoutExpired(["ffmpeg"], 5)

    with patch("persona_studio.utils.audio_extraction.subprocess.run", side_effect=error):
        with pytest.raises(AudioExtractionError, match="timed out"):
            extract_audio(b"video-bytes", timeout=5)


def test_empty_output() -> None:
    run, _ = fake_ffmpeg(b"")

    with patch("persona_studio.utils.audio_extraction.subprocess.run", side_effect=run):
        with pytest.raises(AudioExtractionError, match="empty"):
            extract_audio(b"video-bytes")
