"""Speech-to-text intake.

Browsers transcribe locally with their own speech engine, so by default the
relay answers uploads with a fixed placeholder. When an OpenAI key is
configured the upload is transcribed for real; the response shape is the same.
"""

from __future__ import annotations

import io
import logging
from typing import Final

import soundfile as sf

from ..config import RelayConfig
from ..errors import TranscriptionError
from ._client import get_openai_client

LOGGER = logging.getLogger(__name__)

PLACEHOLDER_TRANSCRIPT: Final[str] = (
    "Mock STT response. Connect Whisper or use Frontend Web Speech API."
)
ALLOWED_MIME_TYPES: Final[dict[str, str]] = {
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/webm": "webm",
    "audio/ogg": "ogg",
    "audio/mpeg": "mp3",
}
MAX_AUDIO_DURATION_SECONDS: Final[int] = 120
TRANSCRIBE_MODEL: Final[str] = "gpt-4o-transcribe"


def transcribe(audio: bytes, mimetype: str, language: str | None, *, config: RelayConfig) -> str:
    """Return a transcript for *audio*, or the placeholder without a transcription key."""

    if not config.openai_api_key:
        LOGGER.info("No transcription upstream configured; returning placeholder transcript")
        return PLACEHOLDER_TRANSCRIPT

    extension = ALLOWED_MIME_TYPES.get(mimetype)
    if extension is None:
        raise TranscriptionError(f"Unsupported audio mimetype: {mimetype}")
    if not audio:
        raise TranscriptionError("Uploaded audio file is empty")
    if extension == "wav" and duration_seconds(audio) > MAX_AUDIO_DURATION_SECONDS:
        raise TranscriptionError("Audio duration exceeds the 2 minute limit")

    LOGGER.info("Transcribing audio blob (mimetype=%s, language=%s)", mimetype, language)
    buffer = io.BytesIO(audio)
    buffer.name = f"audio.{extension}"  # type: ignore[attr-defined]

    client = get_openai_client(config.openai_api_key)
    kwargs: dict[str, object] = {"model": TRANSCRIBE_MODEL, "file": buffer}
    # Whisper-style upstreams only know ISO-639-1 codes; Pidgin is left to auto-detect.
    if language in {"en", "yo"}:
        kwargs["language"] = language

    response = client.audio.transcriptions.create(**kwargs)
    LOGGER.debug("Received transcription response")
    return (response.text or "").strip()


def duration_seconds(audio: bytes) -> float:
    try:
        with sf.SoundFile(io.BytesIO(audio)) as data:
            frames = len(data)
            samplerate = data.samplerate or 1
    except RuntimeError as exc:
        raise TranscriptionError(f"Could not decode WAV upload: {exc}") from exc
    return frames / samplerate


__all__ = [
    "ALLOWED_MIME_TYPES",
    "MAX_AUDIO_DURATION_SECONDS",
    "PLACEHOLDER_TRANSCRIPT",
    "duration_seconds",
    "transcribe",
]
