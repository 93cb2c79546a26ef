import base64
import io

import numpy as np
import pytest
import soundfile as sf

from naijavoice.ui_web.app import create_app
from naijavoice_core import RelayConfig
from naijavoice_core.history import HistoryStore, MemoryStorage


@pytest.fixture()
def pcm_bytes() -> bytes:
    duration = 0.1
    samplerate = 24000
    t = np.linspace(0, duration, int(duration * samplerate), endpoint=False)
    tone = (0.2 * np.sin(2 * np.pi * 440 * t) * 32767).astype("<i2")
    return tone.tobytes()


@pytest.fixture()
def pcm_base64(pcm_bytes) -> str:
    return base64.b64encode(pcm_bytes).decode("ascii")


@pytest.fixture()
def wav_bytes() -> bytes:
    duration = 0.25
    samplerate = 16000
    t = np.linspace(0, duration, int(duration * samplerate), endpoint=False)
    tone = 0.1 * np.sin(2 * np.pi * 440 * t)
    buffer = io.BytesIO()
    sf.write(buffer, tone, samplerate, format="WAV")
    return buffer.getvalue()


@pytest.fixture()
def relay_config() -> RelayConfig:
    return RelayConfig(gemini_api_key="gemini-test-key")


@pytest.fixture()
def history() -> HistoryStore:
    return HistoryStore(MemoryStorage())


@pytest.fixture()
def flask_app(monkeypatch, tmp_path, relay_config):
    monkeypatch.setenv("NAIJAVOICE_HOME", str(tmp_path / "cfg"))
    app = create_app({"TESTING": True}, relay_config=relay_config)
    yield app


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()
