"""Text-to-speech helpers.

Synthesis tries the YarnGPT voice first when a key is configured and the
language is one it speaks, and otherwise (or when that call fails) falls back
to Gemini TTS, whose raw PCM output is wrapped in a WAV container here.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Final, Union

from ..config import RelayConfig
from ..errors import MissingCredential, SynthesisError, UpstreamResponseError
from ._client import get_gemini_client, get_yarngpt_client
from .audio import wrap_pcm

LOGGER = logging.getLogger(__name__)

PRIMARY_LANGUAGES: Final[frozenset[str]] = frozenset({"en", "yo", "pcm"})
PRIMARY_VOICE: Final[str] = "Idera"
SECONDARY_VOICE: Final[str] = "Kore"
AUDIO_MIMETYPE: Final[str] = "audio/wav"


@dataclass(frozen=True, slots=True)
class TtsPlan:
    try_primary: bool


@dataclass(frozen=True, slots=True)
class SynthesisOk:
    audio: bytes
    provider: str


@dataclass(frozen=True, slots=True)
class PrimaryFailed:
    detail: str


@dataclass(frozen=True, slots=True)
class SecondaryFailed:
    detail: str


SynthesisOutcome = Union[SynthesisOk, PrimaryFailed, SecondaryFailed]


def choose_tts_path(lang_supported: bool, primary_credential_present: bool) -> TtsPlan:
    return TtsPlan(try_primary=lang_supported and primary_credential_present)


def synthesize_speech(text: str, lang: str, *, config: RelayConfig) -> bytes:
    """Return WAV audio for *text* spoken in *lang*."""

    if not text.strip():
        raise ValueError("Cannot generate speech for empty text")

    plan = choose_tts_path(lang in PRIMARY_LANGUAGES, bool(config.local_tts_api_key))
    if plan.try_primary:
        LOGGER.info("Attempting localized TTS for %s", lang)
        outcome = _synthesize_primary(text, config)
        if isinstance(outcome, SynthesisOk):
            return outcome.audio
        LOGGER.warning("Localized TTS failed, falling back to Gemini: %s", outcome.detail)

    LOGGER.info("Generating speech with Gemini voice %s", SECONDARY_VOICE)
    outcome = _synthesize_secondary(text, config)
    if isinstance(outcome, SecondaryFailed):
        raise SynthesisError(outcome.detail)
    return outcome.audio


def _synthesize_primary(text: str, config: RelayConfig) -> SynthesisOutcome:
    try:
        client = get_yarngpt_client(config.local_tts_api_key)
        audio = client.synthesize(text, PRIMARY_VOICE)
    except Exception as exc:  # any primary failure degrades to the secondary path
        return PrimaryFailed(str(exc) or type(exc).__name__)
    return SynthesisOk(audio=audio, provider="yarngpt")


def _synthesize_secondary(text: str, config: RelayConfig) -> SynthesisOutcome:
    if not config.gemini_api_key:
        raise MissingCredential("GEMINI_API_KEY is not configured")
    client = get_gemini_client(config.gemini_api_key)
    try:
        encoded = client.generate_speech(text, SECONDARY_VOICE)
    except UpstreamResponseError as exc:
        LOGGER.error("Gemini TTS failed: %s", exc.detail)
        return SecondaryFailed(exc.detail)
    try:
        pcm = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        return SecondaryFailed(f"Gemini returned undecodable audio: {exc}")
    if not pcm:
        return SecondaryFailed("Gemini returned empty audio")
    LOGGER.debug("Decoded %d bytes of PCM from Gemini", len(pcm))
    return SynthesisOk(audio=wrap_pcm(pcm), provider="gemini")


__all__ = [
    "AUDIO_MIMETYPE",
    "PRIMARY_LANGUAGES",
    "PRIMARY_VOICE",
    "SECONDARY_VOICE",
    "TtsPlan",
    "SynthesisOk",
    "PrimaryFailed",
    "SecondaryFailed",
    "choose_tts_path",
    "synthesize_speech",
]
