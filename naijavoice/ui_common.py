"""Shared UI constants for all front-ends."""

from __future__ import annotations

from typing import Sequence

LANGUAGES: Sequence[dict[str, str]] = [
    {"code": "en", "name": "English"},
    {"code": "yo", "name": "Yorùbá (Yoruba)"},
    {"code": "pcm", "name": "Naijá (Nigerian Pidgin)"},
]

LANGUAGE_NAME = {item["code"]: item["name"] for item in LANGUAGES}

CONNECTION_ERROR_MESSAGE = (
    "Error: Could not connect to translation server. "
    "Make sure the relay is running (python -m naijavoice) on port 5000."
)
TRANSLATION_ERROR_MESSAGE = "Error: Translation failed. Please try again."
AUDIO_ERROR_MESSAGE = "Failed to generate audio. Please check server."

__all__ = [
    "LANGUAGES",
    "LANGUAGE_NAME",
    "CONNECTION_ERROR_MESSAGE",
    "TRANSLATION_ERROR_MESSAGE",
    "AUDIO_ERROR_MESSAGE",
]
