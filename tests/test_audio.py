from __future__ import annotations

import dataclasses
import io
import struct

import numpy as np
import pytest
import soundfile as sf

from naijavoice_core.services.audio import WAV_HEADER_SIZE, AudioContainerParams, build_wav_header, wrap_pcm


@pytest.mark.parametrize(
    "sample_rate, channels, bits, length",
    [
        (24000, 1, 16, 0),
        (24000, 1, 16, 4800),
        (44100, 2, 16, 176400),
        (8000, 1, 8, 17),
        (48000, 6, 24, 2**20),
    ],
)
def test_header_fields_match_params(sample_rate, channels, bits, length):
    params = AudioContainerParams(sample_rate, channels, bits, length)
    header = build_wav_header(params)

    assert len(header) == WAV_HEADER_SIZE == 44
    fields = struct.unpack("<4sI4s4sIHHIIHH4sI", header)
    assert fields[0] == b"RIFF"
    assert fields[1] == 36 + length
    assert fields[2] == b"WAVE"
    assert fields[3] == b"fmt "
    assert fields[4] == 16
    assert fields[5] == 1
    assert fields[6] == channels
    assert fields[7] == sample_rate
    assert fields[8] == sample_rate * channels * bits // 8
    assert fields[9] == channels * bits // 8
    assert fields[10] == bits
    assert fields[11] == b"data"
    assert fields[12] == length


def test_derived_rates_are_not_stored():
    params = AudioContainerParams(24000, 1, 16, 10)
    assert params.byte_rate == 48000
    assert params.block_align == 2
    assert {f.name for f in dataclasses.fields(params)} == {
        "sample_rate",
        "channel_count",
        "bits_per_sample",
        "payload_byte_length",
    }


def test_wrap_pcm_is_readable_by_soundfile(pcm_bytes):
    wav = wrap_pcm(pcm_bytes)

    assert wav[:44] == build_wav_header(AudioContainerParams(24000, 1, 16, len(pcm_bytes)))
    assert wav[44:] == pcm_bytes
    data, samplerate = sf.read(io.BytesIO(wav), dtype="int16")
    assert samplerate == 24000
    assert data.shape == (len(pcm_bytes) // 2,)
    np.testing.assert_array_equal(data, np.frombuffer(pcm_bytes, dtype="<i2"))
