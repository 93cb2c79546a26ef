"""State machine for a continuous speech capture session.

The recognizer itself (the browser's speech engine, a microphone pipeline)
lives outside this module and feeds events in: ``receive`` for each interim
transcript, ``fail`` for recognition errors. Consumers see one text channel
and one end-of-session signal.
"""

from __future__ import annotations

import enum
import logging
from typing import Callable

LOGGER = logging.getLogger(__name__)

RECOGNITION_LOCALES = {
    "en": "en-US",
    "yo": "yo-NG",
    "pcm": "en-NG",
}
DEFAULT_LOCALE = "en-US"


class CaptureState(enum.Enum):
    IDLE = "idle"
    LISTENING = "listening"
    STOPPED = "stopped"
    ERRORED = "errored"


class CaptureStateError(RuntimeError):
    """Raised when an event arrives in a state that cannot accept it."""


def recognition_locale(code: str) -> str:
    return RECOGNITION_LOCALES.get(code, DEFAULT_LOCALE)


class CaptureSession:
    def __init__(
        self,
        on_text: Callable[[str], None] | None = None,
        on_end: Callable[[CaptureState, str], None] | None = None,
    ) -> None:
        self.on_text = on_text
        self.on_end = on_end
        self.state = CaptureState.IDLE
        self.transcript = ""
        self.error: str | None = None

    @property
    def is_listening(self) -> bool:
        return self.state is CaptureState.LISTENING

    def start(self) -> None:
        """Begin a new session; finished sessions pass back through idle."""

        if self.state is CaptureState.LISTENING:
            raise CaptureStateError("Capture session is already listening")
        self.transcript = ""
        self.error = None
        self.state = CaptureState.LISTENING
        LOGGER.debug("Capture session started")

    def receive(self, transcript: str) -> None:
        """Replace the buffer with the cumulative transcript since ``start``."""

        if self.state is not CaptureState.LISTENING:
            raise CaptureStateError(f"Cannot receive text while {self.state.value}")
        if not transcript:
            return
        self.transcript = transcript
        if self.on_text is not None:
            self.on_text(transcript)

    def stop(self) -> str:
        self._finish(CaptureState.STOPPED)
        return self.transcript

    def fail(self, detail: str) -> str:
        LOGGER.warning("Speech recognition error: %s", detail)
        self.error = detail
        self._finish(CaptureState.ERRORED)
        return self.transcript

    def _finish(self, state: CaptureState) -> None:
        if self.state is not CaptureState.LISTENING:
            raise CaptureStateError(f"Cannot end a session that is {self.state.value}")
        self.state = state
        LOGGER.debug("Capture session ended (%s)", state.value)
        if self.on_end is not None:
            self.on_end(state, self.transcript)


__all__ = [
    "CaptureSession",
    "CaptureState",
    "CaptureStateError",
    "recognition_locale",
]
