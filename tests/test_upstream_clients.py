from __future__ import annotations

import json

import pytest
import requests

from naijavoice_core.errors import MissingCredential, UpstreamResponseError
from naijavoice_core.services._client import GeminiClient, YarnGPTClient, get_gemini_client, get_yarngpt_client


def make_response(status: int = 200, body: object = b"") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    if isinstance(body, (dict, list)):
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = body  # type: ignore[assignment]
    response.url = "https://upstream.test"
    return response


class FakeSession:
    def __init__(self, response: requests.Response | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict[str, object]] = []

    def post(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        if self.error:
            raise self.error
        return self.response


def candidate(part: dict[str, object]) -> dict[str, object]:
    return {"candidates": [{"content": {"parts": [part]}}]}


def test_gemini_generate_text_returns_first_candidate():
    session = FakeSession(make_response(body=candidate({"text": " E kaaro "})))
    client = GeminiClient("key", session=session)

    assert client.generate_text("prompt") == " E kaaro "
    call = session.calls[0]
    assert call["url"].endswith(":generateContent")
    assert call["headers"] == {"x-goog-api-key": "key"}
    assert call["json"] == {"contents": [{"parts": [{"text": "prompt"}]}]}


def test_gemini_generate_speech_requests_audio_modality():
    session = FakeSession(make_response(body=candidate({"inlineData": {"mimeType": "audio/L16", "data": "AAAA"}})))
    client = GeminiClient("key", session=session)

    assert client.generate_speech("hello", "Kore") == "AAAA"
    config = session.calls[0]["json"]["generationConfig"]
    assert config["responseModalities"] == ["AUDIO"]
    assert config["speechConfig"]["voiceConfig"]["prebuiltVoiceConfig"]["voiceName"] == "Kore"


def test_gemini_missing_inline_audio_is_an_error():
    session = FakeSession(make_response(body=candidate({"text": "I cannot speak"})))
    with pytest.raises(UpstreamResponseError):
        GeminiClient("key", session=session).generate_speech("hello", "Kore")


def test_gemini_malformed_shape_is_an_error():
    session = FakeSession(make_response(body={"promptFeedback": {"blockReason": "SAFETY"}}))
    with pytest.raises(UpstreamResponseError):
        GeminiClient("key", session=session).generate_text("prompt")


def test_gemini_http_error_carries_body():
    session = FakeSession(make_response(status=400, body=b'{"error": "API key not valid"}'))
    with pytest.raises(UpstreamResponseError) as excinfo:
        GeminiClient("key", session=session).generate_text("prompt")
    assert "HTTP 400" in excinfo.value.detail
    assert "API key not valid" in excinfo.value.detail


def test_gemini_transport_error_is_wrapped():
    session = FakeSession(error=requests.ConnectionError("no route to host"))
    with pytest.raises(UpstreamResponseError) as excinfo:
        GeminiClient("key", session=session).generate_text("prompt")
    assert "no route to host" in excinfo.value.detail


def test_yarngpt_sends_bearer_token_and_returns_bytes():
    session = FakeSession(make_response(body=b"RIFF....WAVE"))
    client = YarnGPTClient("secret", session=session)

    assert client.synthesize("How far", "Idera") == b"RIFF....WAVE"
    call = session.calls[0]
    assert call["headers"] == {"Authorization": "Bearer secret"}
    assert call["json"] == {"text": "How far", "voice": "Idera"}


def test_yarngpt_http_error_is_wrapped():
    session = FakeSession(make_response(status=401, body=b"unauthorized"))
    with pytest.raises(UpstreamResponseError):
        YarnGPTClient("secret", session=session).synthesize("How far", "Idera")


def test_missing_keys_raise_missing_credential():
    with pytest.raises(MissingCredential):
        get_gemini_client(None)
    with pytest.raises(MissingCredential):
        YarnGPTClient("")


def test_client_getters_reuse_one_session_per_key():
    gemini = get_gemini_client("cached-key")
    assert get_gemini_client("cached-key") is gemini
    assert get_gemini_client("other-key") is not gemini

    yarngpt = get_yarngpt_client("cached-key")
    assert get_yarngpt_client("cached-key") is yarngpt
    assert yarngpt.session is get_yarngpt_client("cached-key").session
