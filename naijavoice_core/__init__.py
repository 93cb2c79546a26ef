"""Core services, configuration and client state for naijavoice."""

from .config import RelayConfig, Settings, load_relay_config, load_settings, save_settings
from .history import HistoryStore, TranslationRecord
from .services.stt import transcribe
from .services.translate import translate
from .services.tts import synthesize_speech

__all__ = [
    "HistoryStore",
    "RelayConfig",
    "Settings",
    "TranslationRecord",
    "load_relay_config",
    "load_settings",
    "save_settings",
    "transcribe",
    "translate",
    "synthesize_speech",
]
