"""Flask relay between the naijavoice front ends and the upstream providers."""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, Flask, Response, current_app, jsonify, request

from naijavoice_core import RelayConfig, load_relay_config
from naijavoice_core.errors import (
    MalformedRequest,
    MissingCredential,
    SynthesisError,
    TranscriptionError,
    UpstreamTranslationError,
)
from naijavoice_core.services import AUDIO_MIMETYPE, synthesize_speech, transcribe, translate

LOGGER = logging.getLogger(__name__)

ROOT = Blueprint("root", __name__)
API = Blueprint("api", __name__, url_prefix="/api")


def create_app(config: dict[str, Any] | None = None, relay_config: RelayConfig | None = None) -> Flask:
    app = Flask(__name__)
    app.config.update(
        MAX_CONTENT_LENGTH=20 * 1024 * 1024,  # generous safety limit (~20 MB)
        NAIJAVOICE_CORS_ORIGIN="*",
    )
    if config:
        app.config.update(config)

    relay_config = relay_config or load_relay_config()
    app.config["NAIJAVOICE_RELAY_CONFIG"] = relay_config
    app.config.setdefault("NAIJAVOICE_ENABLE_CORS", relay_config.enable_cors)

    app.register_blueprint(ROOT)
    app.register_blueprint(API)

    @app.after_request
    def apply_cors_headers(response: Response) -> Response:
        if app.config.get("NAIJAVOICE_ENABLE_CORS"):
            response.headers.setdefault("Access-Control-Allow-Origin", app.config["NAIJAVOICE_CORS_ORIGIN"])
            response.headers.setdefault("Access-Control-Allow-Headers", "Content-Type")
            response.headers.setdefault("Access-Control-Allow-Methods", "GET,POST,OPTIONS")
        return response

    LOGGER.info(
        "Relay ready (translation=%s, localized_tts=%s, transcription=%s)",
        bool(relay_config.gemini_api_key),
        bool(relay_config.local_tts_api_key),
        bool(relay_config.openai_api_key),
    )
    return app


@ROOT.get("/health")
def health() -> Response:
    return jsonify({"status": "OK"})


@API.post("/translate")
def api_translate() -> Response:
    payload = request.get_json(silent=True) or {}
    try:
        text = _require_text(payload, "text")
        source = _require_text(payload, "source")
        target = _require_text(payload, "target")
    except MalformedRequest as exc:
        return json_error("Malformed request", 400, exc.detail)

    try:
        result = translate(text, source, target, config=relay_config())
    except (MissingCredential, UpstreamTranslationError) as exc:
        LOGGER.error("Translation failed: %s", exc.detail)
        return json_error("Translation failed", 500, exc.detail)
    except Exception as exc:  # pragma: no cover - unexpected upstream failure
        LOGGER.exception("Translation call failed")
        return json_error("Translation failed", 500, str(exc))

    return jsonify(result.to_mapping())


@API.post("/tts")
def api_tts() -> Response:
    payload = request.get_json(silent=True) or {}
    try:
        text = _require_text(payload, "text")
        lang = _require_text(payload, "lang")
    except MalformedRequest as exc:
        return json_error("Malformed request", 400, exc.detail)

    try:
        audio = synthesize_speech(text, lang, config=relay_config())
    except (MissingCredential, SynthesisError) as exc:
        LOGGER.error("TTS Error: %s", exc.detail)
        return json_error("Text-to-Speech generation failed", 500)
    except Exception:  # pragma: no cover - unexpected upstream failure
        LOGGER.exception("TTS call failed")
        return json_error("Text-to-Speech generation failed", 500)

    response = Response(audio, mimetype=AUDIO_MIMETYPE)
    response.headers["Content-Length"] = str(len(audio))
    return response


@API.post("/stt")
def api_stt() -> Response:
    audio_file = request.files.get("audio")
    if audio_file is None:
        return json_error("Malformed request", 400, "Missing audio upload")

    mimetype = _normalize_mime_type(audio_file.mimetype)
    language = request.form.get("language") or None
    try:
        text = transcribe(audio_file.read(), mimetype, language, config=relay_config())
    except TranscriptionError as exc:
        return json_error("Transcription failed", 400, exc.detail)
    except Exception as exc:  # pragma: no cover - transcription upstream failure
        LOGGER.exception("Transcription call failed")
        return json_error("Transcription failed", 502, str(exc))

    return jsonify({"text": text})


def relay_config() -> RelayConfig:
    return current_app.config["NAIJAVOICE_RELAY_CONFIG"]


def json_error(message: str, status: int, details: str | None = None) -> tuple[Response, int]:
    payload: dict[str, Any] = {"error": message}
    if details is not None:
        payload["details"] = details
    return jsonify(payload), status


def _require_text(payload: Any, field: str) -> str:
    value = payload.get(field) if isinstance(payload, dict) else None
    if not isinstance(value, str) or not value.strip():
        raise MalformedRequest(f"Missing required field: {field}")
    return value


def _normalize_mime_type(value: Any) -> str:
    mimetype = str(value or "").strip().lower()
    if ";" in mimetype:
        mimetype = mimetype.split(";", 1)[0].strip()
    return mimetype
