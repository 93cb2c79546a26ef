"""Error taxonomy shared by the relay services."""

from __future__ import annotations


class RelayError(RuntimeError):
    """Base class for failures surfaced by the relay services."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail)
        self.detail = detail


class MissingCredential(RelayError):
    """Raised when a required upstream credential is not configured."""


class UpstreamResponseError(RelayError):
    """Raised by upstream clients when a call fails or returns an unexpected shape."""


class UpstreamTranslationError(RelayError):
    """Raised when the translation upstream call fails."""


class SynthesisError(RelayError):
    """Raised when every text-to-speech path has been exhausted."""


class MalformedRequest(RelayError):
    """Raised when a caller omits a required field."""


class TranscriptionError(RelayError):
    """Raised when a transcription request fails validation."""


__all__ = [
    "RelayError",
    "MissingCredential",
    "UpstreamResponseError",
    "UpstreamTranslationError",
    "SynthesisError",
    "MalformedRequest",
    "TranscriptionError",
]
