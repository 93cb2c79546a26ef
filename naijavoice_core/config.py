"""Configuration helpers for the relay and its clients."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
import json
import logging
import os
from typing import Any, Mapping

from dotenv import load_dotenv

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path(os.environ.get("NAIJAVOICE_HOME", Path.home() / ".naijavoice"))
SETTINGS_PATH = CONFIG_DIR / "settings.json"

DEFAULT_PORT = 5000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_RELAY_URL = f"http://localhost:{DEFAULT_PORT}"


@dataclass(frozen=True, slots=True)
class RelayConfig:
    """Credentials and listen address for the relay.

    Built once at startup and handed to every service call, so services never
    read the process environment themselves.
    """

    gemini_api_key: str | None = None
    local_tts_api_key: str | None = None
    openai_api_key: str | None = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    enable_cors: bool = True

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "RelayConfig":
        """Create :class:`RelayConfig` from an environment-like mapping."""
        return cls(
            gemini_api_key=_coerce_secret(payload.get("GEMINI_API_KEY")),
            local_tts_api_key=_coerce_secret(payload.get("LOCAL_TTS_API_KEY")),
            openai_api_key=_coerce_secret(payload.get("OPENAI_API_KEY")),
            host=str(payload.get("HOST") or DEFAULT_HOST),
            port=_coerce_port(payload.get("PORT")),
            enable_cors=_coerce_bool(payload.get("RELAY_ENABLE_CORS"), default=True),
        )


def load_relay_config(environ: Mapping[str, str] | None = None) -> RelayConfig:
    """Load relay configuration from ``.env`` and the process environment."""

    if environ is None:
        load_dotenv()
        environ = os.environ
    config = RelayConfig.from_mapping(environ)
    LOGGER.debug(
        "Relay config loaded (gemini=%s, local_tts=%s, openai=%s, port=%d)",
        bool(config.gemini_api_key),
        bool(config.local_tts_api_key),
        bool(config.openai_api_key),
        config.port,
    )
    return config


@dataclass(slots=True)
class Settings:
    """Client preferences shared by every front end."""

    relay_url: str = DEFAULT_RELAY_URL
    source_lang: str = "en"
    target_lang: str = "yo"

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "Settings":
        """Create :class:`Settings` from any mapping."""
        return cls(
            relay_url=str(payload.get("relay_url", payload.get("relayUrl", DEFAULT_RELAY_URL))) or DEFAULT_RELAY_URL,
            source_lang=str(payload.get("source_lang", payload.get("sourceLang", "en"))) or "en",
            target_lang=str(payload.get("target_lang", payload.get("targetLang", "yo"))) or "yo",
        )

    def to_mapping(self) -> dict[str, Any]:
        """Serialize to a mapping suitable for JSON dumps."""
        return asdict(self)


def load_settings(path: Path | None = None) -> Settings:
    """Load client settings from disk, falling back to defaults."""

    settings_path = path or SETTINGS_PATH
    try:
        raw = settings_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        LOGGER.debug("No settings.json found at %s; using defaults", settings_path)
        return Settings()
    except OSError as exc:  # pragma: no cover - filesystem failure
        LOGGER.warning("Failed reading settings at %s: %s", settings_path, exc)
        return Settings()

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        LOGGER.warning("Invalid JSON in %s: %s", settings_path, exc)
        return Settings()
    if not isinstance(payload, dict):
        LOGGER.warning("Ignoring non-object settings in %s", settings_path)
        return Settings()

    return Settings.from_mapping(payload)


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Write *settings* as JSON, replacing the previous file in one step."""

    settings_path = path or SETTINGS_PATH
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(settings.to_mapping(), indent=2, sort_keys=True)
    staging = settings_path.with_name(settings_path.name + ".tmp")
    staging.write_text(payload, encoding="utf-8")
    os.replace(staging, settings_path)
    LOGGER.debug("Saved settings to %s", settings_path)


def _coerce_secret(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_port(value: Any) -> int:
    if value in (None, ""):
        return DEFAULT_PORT
    try:
        return int(value)
    except (TypeError, ValueError):
        LOGGER.warning("Invalid PORT value %r; using %d", value, DEFAULT_PORT)
        return DEFAULT_PORT


def _coerce_bool(value: Any, *, default: bool) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).lower() in {"1", "true", "yes", "on"}


__all__ = [
    "RelayConfig",
    "Settings",
    "load_relay_config",
    "load_settings",
    "save_settings",
    "CONFIG_DIR",
    "SETTINGS_PATH",
    "DEFAULT_PORT",
]
