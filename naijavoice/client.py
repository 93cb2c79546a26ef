"""HTTP client for the relay and the translate/speak flow built on it."""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Any, Callable

import requests

from naijavoice_core.config import DEFAULT_RELAY_URL, Settings
from naijavoice_core.history import HistoryStore, TranslationRecord

from .ui_common import AUDIO_ERROR_MESSAGE, CONNECTION_ERROR_MESSAGE, TRANSLATION_ERROR_MESSAGE

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 90.0


class RelayClientError(RuntimeError):
    """Base class for relay client failures."""


class RelayUnavailable(RelayClientError):
    """Raised when the relay cannot be reached at all."""


class RelayRequestFailed(RelayClientError):
    """Raised when the relay answers with a non-success status."""

    def __init__(self, status: int, error: str, details: str | None = None) -> None:
        super().__init__(f"{status}: {error}" + (f" ({details})" if details else ""))
        self.status = status
        self.error = error
        self.details = details


class RelayClient:
    def __init__(
        self,
        base_url: str = DEFAULT_RELAY_URL,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def health(self) -> bool:
        """Return whether the relay answered its liveness check."""
        try:
            response = self.session.get(f"{self.base_url}/health", timeout=self.timeout)
        except requests.RequestException as exc:
            LOGGER.debug("Health check failed: %s", exc)
            return False
        return response.ok

    def translate(self, text: str, source: str, target: str) -> dict[str, Any]:
        response = self._post("/api/translate", json={"text": text, "source": source, "target": target})
        try:
            payload = response.json()
        except ValueError as exc:
            raise RelayRequestFailed(response.status_code, "Invalid JSON from relay") from exc
        if not isinstance(payload, dict) or "translatedText" not in payload:
            raise RelayRequestFailed(response.status_code, "Unexpected translation payload")
        return payload

    def synthesize(self, text: str, lang: str) -> bytes:
        response = self._post("/api/tts", json={"text": text, "lang": lang})
        return response.content

    def transcribe(self, audio: bytes, filename: str = "audio.webm", mimetype: str = "audio/webm") -> str:
        response = self._post("/api/stt", files={"audio": (filename, audio, mimetype)})
        return str(response.json().get("text", ""))

    def _post(self, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.post(url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise RelayUnavailable(str(exc)) from exc
        if not response.ok:
            error, details = _error_payload(response)
            raise RelayRequestFailed(response.status_code, error, details)
        return response


class RequestTokens:
    """Issues increasing tokens; only the latest one is current."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()

    def issue(self) -> int:
        with self._lock:
            self._latest = next(self._counter)
            return self._latest

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._latest


class TranslatorSession:
    """Client-side translate and speak flow.

    Each call is tagged with a token so a slow response never overwrites the
    result of a request issued after it.
    """

    def __init__(
        self,
        client: RelayClient,
        history: HistoryStore,
        source_lang: str = "en",
        target_lang: str = "yo",
        alert: Callable[[str], None] | None = None,
    ) -> None:
        self.client = client
        self.history = history
        self.source_lang = source_lang
        self.target_lang = target_lang
        self.alert = alert
        self.translated_text = ""
        self.confidence_score: float | None = None
        self.error: str | None = None
        self._translate_tokens = RequestTokens()
        self._audio_tokens = RequestTokens()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        history: HistoryStore,
        alert: Callable[[str], None] | None = None,
        session: requests.Session | None = None,
    ) -> "TranslatorSession":
        """Build a session against the stored relay URL and language pair."""
        client = RelayClient(settings.relay_url, session=session)
        return cls(client, history, settings.source_lang, settings.target_lang, alert=alert)

    def remember_languages(self, settings: Settings) -> Settings:
        """Copy the current language pair into *settings* for the next start."""
        settings.source_lang = self.source_lang
        settings.target_lang = self.target_lang
        return settings

    def translate(self, text: str) -> TranslationRecord | None:
        if not text.strip():
            return None

        token = self._translate_tokens.issue()
        source, target = self.source_lang, self.target_lang
        self.translated_text = ""
        self.confidence_score = None
        self.error = None

        try:
            payload = self.client.translate(text, source, target)
        except RelayUnavailable as exc:
            LOGGER.error("Translation failed: %s", exc)
            return self._fail(token, CONNECTION_ERROR_MESSAGE)
        except RelayRequestFailed as exc:
            LOGGER.error("Translation failed: %s", exc)
            return self._fail(token, TRANSLATION_ERROR_MESSAGE)

        if not self._translate_tokens.is_current(token):
            LOGGER.debug("Discarding stale translation response (token %d)", token)
            return None

        score = payload.get("confidenceScore")
        record = TranslationRecord(
            source_text=text,
            translated_text=str(payload["translatedText"]),
            source_lang=source,
            target_lang=target,
            confidence_score=None if score is None else float(score),
        )
        self.translated_text = record.translated_text
        self.confidence_score = record.confidence_score
        self.history.append(record)
        return record

    def speak(self, text: str, lang: str | None = None) -> bytes | None:
        """Return WAV audio for *text*, alerting the user when synthesis fails."""

        if not text:
            return None
        token = self._audio_tokens.issue()
        try:
            audio = self.client.synthesize(text, lang or self.target_lang)
        except RelayClientError as exc:
            LOGGER.error("Audio error: %s", exc)
            if self._audio_tokens.is_current(token) and self.alert is not None:
                self.alert(AUDIO_ERROR_MESSAGE)
            return None
        if not self._audio_tokens.is_current(token):
            LOGGER.debug("Discarding stale audio response (token %d)", token)
            return None
        return audio

    def clear(self) -> None:
        self.translated_text = ""
        self.confidence_score = None
        self.error = None

    def _fail(self, token: int, message: str) -> None:
        if self._translate_tokens.is_current(token):
            self.translated_text = message
            self.error = message
        return None


def _error_payload(response: requests.Response) -> tuple[str, str | None]:
    try:
        payload = response.json()
    except ValueError:
        return response.reason or "Request failed", None
    if not isinstance(payload, dict):
        return response.reason or "Request failed", None
    details = payload.get("details")
    return str(payload.get("error") or response.reason or "Request failed"), None if details is None else str(details)


__all__ = [
    "RelayClient",
    "RelayClientError",
    "RelayRequestFailed",
    "RelayUnavailable",
    "RequestTokens",
    "TranslatorSession",
]
