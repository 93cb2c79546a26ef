"""Service layer abstractions shared by the relay and its front ends."""

from .audio import AudioContainerParams, build_wav_header, wrap_pcm
from .stt import ALLOWED_MIME_TYPES, PLACEHOLDER_TRANSCRIPT, transcribe
from .translate import FIXED_CONFIDENCE_SCORE, TranslationResult, translate
from .tts import AUDIO_MIMETYPE, choose_tts_path, synthesize_speech

__all__ = [
    "ALLOWED_MIME_TYPES",
    "AUDIO_MIMETYPE",
    "FIXED_CONFIDENCE_SCORE",
    "PLACEHOLDER_TRANSCRIPT",
    "AudioContainerParams",
    "TranslationResult",
    "build_wav_header",
    "choose_tts_path",
    "synthesize_speech",
    "transcribe",
    "translate",
    "wrap_pcm",
]
