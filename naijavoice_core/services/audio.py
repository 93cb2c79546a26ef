"""WAV container assembly for raw PCM audio."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Final

WAV_HEADER_SIZE: Final[int] = 44
PCM_FORMAT_TAG: Final[int] = 1
FMT_CHUNK_SIZE: Final[int] = 16

# Gemini TTS emits 24 kHz mono 16-bit little-endian PCM.
GEMINI_SAMPLE_RATE: Final[int] = 24000
GEMINI_CHANNELS: Final[int] = 1
GEMINI_BITS_PER_SAMPLE: Final[int] = 16

_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


@dataclass(frozen=True, slots=True)
class AudioContainerParams:
    """Format description for a linear PCM payload."""

    sample_rate: int
    channel_count: int
    bits_per_sample: int
    payload_byte_length: int

    @property
    def byte_rate(self) -> int:
        return self.sample_rate * self.channel_count * self.bits_per_sample // 8

    @property
    def block_align(self) -> int:
        return self.channel_count * self.bits_per_sample // 8


def build_wav_header(params: AudioContainerParams) -> bytes:
    """Return the 44-byte RIFF/WAVE header that precedes the PCM payload."""

    return _HEADER.pack(
        b"RIFF",
        36 + params.payload_byte_length,
        b"WAVE",
        b"fmt ",
        FMT_CHUNK_SIZE,
        PCM_FORMAT_TAG,
        params.channel_count,
        params.sample_rate,
        params.byte_rate,
        params.block_align,
        params.bits_per_sample,
        b"data",
        params.payload_byte_length,
    )


def wrap_pcm(
    pcm: bytes,
    sample_rate: int = GEMINI_SAMPLE_RATE,
    channel_count: int = GEMINI_CHANNELS,
    bits_per_sample: int = GEMINI_BITS_PER_SAMPLE,
) -> bytes:
    """Prefix *pcm* with a WAV header describing it."""

    params = AudioContainerParams(
        sample_rate=sample_rate,
        channel_count=channel_count,
        bits_per_sample=bits_per_sample,
        payload_byte_length=len(pcm),
    )
    return build_wav_header(params) + pcm


__all__ = [
    "WAV_HEADER_SIZE",
    "AudioContainerParams",
    "build_wav_header",
    "wrap_pcm",
]
