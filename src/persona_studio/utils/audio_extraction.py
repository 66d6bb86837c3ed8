"""Extract a voice-ready audio track from an uploaded video."""

import subprocess
import tempfile
from pathlib import Path

from persona_studio.config import settings
from persona_studio.domain.errors import AudioExtractionError
from persona_studio.logging import get_logger

logger = get_logger(__name__)

# Mono 44.1 kHz MP3 at 128 kbps is what the voice cloning API expects
AUDIO_CODEC = "libmp3lame"
AUDIO_BITRATE = "128k"
AUDIO_CHANNELS = "1"
AUDIO_SAMPLE_RATE = "44100"


def build_ffmpeg_command(ffmpeg: str, input_path: Path, output_path: Path) -> list[str]:
    return [
        ffmpeg,
        "-i",
        str(input_path),
        "-vn",  # Drop the video stream
        "-acodec",
        AUDIO_CODEC,
        "-ab",
        AUDIO_BITRATE,
        "-ac",
        AUDIO_CHANNELS,
        "-ar",
        AUDIO_SAMPLE_RATE,
        "-y",  # Overwrite output
        str(output_path),
    ]


def extract_audio(
    video_bytes: bytes,
    ffmpeg_path: str | None = None,
    timeout: int | None = None,
) -> bytes:
    """Extract the audio track of a video as MP3 bytes.

    Input and output live in a private temporary directory that is removed
    on every exit path.

    Args:
        video_bytes: Raw bytes of the uploaded video.
        ffmpeg_path: FFmpeg binary; defaults to the configured one or ``ffmpeg``.
        timeout: Seconds before the conversion is aborted.

    Returns:
        Non-empty MP3 audio bytes.

    Raises:
        AudioExtractionError: If FFmpeg is missing, fails, times out or
            produces no audio.
    """
    if not video_bytes:
        raise AudioExtractionError("No video data provided")

    ffmpeg = ffmpeg_path or settings.ffmpeg_path or "ffmpeg"
    timeout = timeout or settings.ffmpeg_timeout

    with tempfile.TemporaryDirectory(prefix="persona_audio_") as tmp:
        input_path = Path(tmp) / "input.mp4"
        output_path = Path(tmp) / "output.mp3"
        input_path.write_bytes(video_bytes)

        try:
            subprocess.run(
                build_ffmpeg_command(ffmpeg, input_path, output_path),
                capture_output=True,
                check=True,
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise AudioExtractionError(f"FFmpeg not found at '{ffmpeg}'") from e
        except subprocess.TimeoutExpired as e:
            raise AudioExtractionError(f"FFmpeg timed out after {timeout}s") from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode(errors="replace")[-500:]
            logger.error("audio_extraction_failed", returncode=e.returncode, stderr=stderr)
            raise AudioExtractionError(
                f"FFmpeg failed with code {e.returncode}: {stderr}"
            ) from e

        audio = output_path.read_bytes() if output_path.exists() else b""

    if not audio:
        raise AudioExtractionError("FFmpeg produced empty audio output")

    logger.info("audio_extracted", input_size=len(video_bytes), audio_size=len(audio))
    return audio
