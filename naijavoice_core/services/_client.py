"""Shared helpers for talking to upstream providers."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Final

import requests
from openai import OpenAI

from ..errors import MissingCredential, UpstreamResponseError

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS: Final[float] = 60.0
GEMINI_BASE_URL: Final[str] = "https://generativelanguage.googleapis.com/v1beta/models"
GEMINI_TEXT_MODEL: Final[str] = "gemini-2.5-flash-preview-09-2025"
GEMINI_TTS_MODEL: Final[str] = "gemini-2.5-flash-preview-tts"
YARNGPT_TTS_URL: Final[str] = "https://yarngpt.ai/api/v1/tts"


class GeminiClient:
    """Minimal client for the Gemini ``generateContent`` REST endpoint."""

    def __init__(
        self,
        api_key: str,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        base_url: str = GEMINI_BASE_URL,
    ) -> None:
        if not api_key:
            raise MissingCredential("GEMINI_API_KEY is not configured")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")

    def generate_text(self, prompt: str, model: str = GEMINI_TEXT_MODEL) -> str:
        """Return the text of the first candidate for *prompt*."""

        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        data = self._generate(model, payload)
        part = _first_part(data)
        text = part.get("text")
        if not isinstance(text, str):
            raise UpstreamResponseError("Gemini response is missing candidate text")
        return text

    def generate_speech(self, text: str, voice: str, model: str = GEMINI_TTS_MODEL) -> str:
        """Return the base64 encoded PCM audio Gemini produced for *text*."""

        payload = {
            "contents": [{"parts": [{"text": text}]}],
            "generationConfig": {
                "responseModalities": ["AUDIO"],
                "speechConfig": {
                    "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice}},
                },
            },
        }
        data = self._generate(model, payload)
        part = _first_part(data)
        inline = part.get("inlineData")
        audio = inline.get("data") if isinstance(inline, dict) else None
        if not isinstance(audio, str) or not audio:
            raise UpstreamResponseError("Gemini response is missing inline audio data")
        return audio

    def _generate(self, model: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}/{model}:generateContent"
        LOGGER.debug("POST %s", url)
        try:
            response = self.session.post(
                url,
                json=payload,
                headers={"x-goog-api-key": self.api_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise UpstreamResponseError(_describe_http_error(exc)) from exc
        except requests.RequestException as exc:
            raise UpstreamResponseError(str(exc)) from exc
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamResponseError("Gemini returned a non-JSON body") from exc
        if not isinstance(data, dict):
            raise UpstreamResponseError("Gemini returned an unexpected body")
        return data


class YarnGPTClient:
    """Client for the YarnGPT Nigerian-accent TTS endpoint."""

    def __init__(
        self,
        api_key: str,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        url: str = YARNGPT_TTS_URL,
    ) -> None:
        if not api_key:
            raise MissingCredential("LOCAL_TTS_API_KEY is not configured")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.url = url

    def synthesize(self, text: str, voice: str) -> bytes:
        """Return the encoded audio YarnGPT produced for *text*."""

        try:
            response = self.session.post(
                self.url,
                json={"text": text, "voice": voice},
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise UpstreamResponseError(_describe_http_error(exc)) from exc
        except requests.RequestException as exc:
            raise UpstreamResponseError(str(exc)) from exc
        audio = response.content
        if not audio:
            raise UpstreamResponseError("YarnGPT returned an empty body")
        return audio


@lru_cache(maxsize=4)
def get_gemini_client(api_key: str | None) -> GeminiClient:
    """Return a cached Gemini client, raising :class:`MissingCredential` without a key."""

    if not api_key:
        raise MissingCredential("GEMINI_API_KEY is not configured")
    return GeminiClient(api_key)


@lru_cache(maxsize=4)
def get_yarngpt_client(api_key: str | None) -> YarnGPTClient:
    if not api_key:
        raise MissingCredential("LOCAL_TTS_API_KEY is not configured")
    return YarnGPTClient(api_key)


@lru_cache(maxsize=4)
def get_openai_client(api_key: str) -> OpenAI:
    """Return a cached OpenAI client for *api_key*."""

    if not api_key:
        raise MissingCredential("OPENAI_API_KEY is not configured")
    LOGGER.debug("Initialising OpenAI client")
    return OpenAI(api_key=api_key)


def _first_part(data: dict[str, Any]) -> dict[str, Any]:
    try:
        part = data["candidates"][0]["content"]["parts"][0]
    except (KeyError, IndexError, TypeError) as exc:
        raise UpstreamResponseError(f"Unexpected Gemini response shape: {exc!r}") from exc
    if not isinstance(part, dict):
        raise UpstreamResponseError("Unexpected Gemini response shape")
    return part


def _describe_http_error(exc: requests.HTTPError) -> str:
    response = exc.response
    if response is None:
        return str(exc)
    body = (response.text or "").strip()
    if len(body) > 500:
        body = body[:500] + "..."
    return f"HTTP {response.status_code}: {body}" if body else f"HTTP {response.status_code}"


__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "GeminiClient",
    "YarnGPTClient",
    "get_gemini_client",
    "get_yarngpt_client",
    "get_openai_client",
]
