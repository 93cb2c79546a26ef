"""Translation helper functions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Final

from ..config import RelayConfig
from ..errors import MissingCredential, UpstreamResponseError, UpstreamTranslationError
from ._client import get_gemini_client

LOGGER = logging.getLogger(__name__)

# The upstream reports no quality metric; every successful translation gets this score.
FIXED_CONFIDENCE_SCORE: Final[float] = 0.95

LANGUAGE_DISPLAY_NAMES: Final[dict[str, str]] = {
    "en": "English",
    "yo": "Yoruba",
    "pcm": "Nigerian Pidgin",
    "pidgin": "Nigerian Pidgin",
}
PROMPT_TEMPLATE: Final[str] = (
    "Translate the following text strictly from {source} to {target}. "
    "Return only the translated text. Do not add explanations, notes or commentary.\n\n"
    'Text: "{text}"'
)


@dataclass(frozen=True, slots=True)
class TranslationResult:
    original_text: str
    translated_text: str
    target_lang: str
    confidence_score: float = FIXED_CONFIDENCE_SCORE

    def to_mapping(self) -> dict[str, Any]:
        """Wire form returned by ``/api/translate``."""
        return {
            "originalText": self.original_text,
            "translatedText": self.translated_text,
            "confidenceScore": self.confidence_score,
            "targetLang": self.target_lang,
        }


def language_name(code: str) -> str:
    """Human readable name for *code*; unknown codes are returned verbatim."""

    return LANGUAGE_DISPLAY_NAMES.get(code, code)


def build_prompt(text: str, source: str, target: str) -> str:
    return PROMPT_TEMPLATE.format(
        source=language_name(source),
        target=language_name(target),
        text=text,
    )


def translate(text: str, source: str, target: str, *, config: RelayConfig) -> TranslationResult:
    """Translate *text* from *source* to *target* with the Gemini text model."""

    if not config.gemini_api_key:
        raise MissingCredential("GEMINI_API_KEY is not configured")

    LOGGER.info("Translating text from %s to %s", source, target)
    client = translate.get_gemini_client(config.gemini_api_key)  # type: ignore[attr-defined]
    prompt = build_prompt(text, source, target)
    try:
        content = client.generate_text(prompt)
    except UpstreamResponseError as exc:
        LOGGER.error("Gemini translation failed: %s", exc.detail)
        raise UpstreamTranslationError(exc.detail) from exc

    translated = content.strip()
    LOGGER.debug("Received translation (%d chars)", len(translated))
    return TranslationResult(
        original_text=text,
        translated_text=translated,
        target_lang=target,
    )


translate.get_gemini_client = get_gemini_client  # type: ignore[attr-defined]


__all__ = [
    "FIXED_CONFIDENCE_SCORE",
    "LANGUAGE_DISPLAY_NAMES",
    "TranslationResult",
    "build_prompt",
    "language_name",
    "translate",
]
