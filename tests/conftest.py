"""Shared pytest fixtures for the audiospectrogram test suite."""

import struct
import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from audiospectrogram.model import AudioInfo  # noqa: E402


def build_wav(
    payload: bytes,
    *,
    channels: int = 1,
    sample_rate: int = 8000,
    bits: int = 16,
    byte_order: str = "little",
    audio_format: int = 1,
    block_align=None,
    extra: bytes = None,
    fact=None,
    fmt_id: bytes = b"fmt ",
    chunk_id: bytes = None,
) -> bytes:
    """Assemble a WAVE container around ``payload``."""
    prefix = "<" if byte_order == "little" else ">"
    if chunk_id is None:
        chunk_id = b"RIFF" if byte_order == "little" else b"RIFX"
    if block_align is None:
        block_align = channels * bits // 8
    byte_rate = sample_rate * block_align

    fmt_body = struct.pack(prefix + "HHIIHH", audio_format, channels, sample_rate, byte_rate, block_align, bits)
    if extra is not None:
        fmt_body += struct.pack(prefix + "H", len(extra)) + extra

    body = b"WAVE"
    body += fmt_id + struct.pack(prefix + "I", len(fmt_body)) + fmt_body
    if fact is not None:
        body += b"fact" + struct.pack(prefix + "II", 4, fact)
    body += b"data" + struct.pack(prefix + "I", len(payload)) + payload
    return chunk_id + struct.pack(prefix + "I", len(body)) + body


class ArraySource:
    """In-memory audio source for engine tests."""

    def __init__(self, frames, sample_rate=8000, bits_per_sample=16):
        self._frames = np.asarray(frames, dtype=np.float64)
        if self._frames.ndim == 1:
            self._frames = self._frames[:, np.newaxis]
        self._info = AudioInfo(
            channels=self._frames.shape[1],
            sample_rate=sample_rate,
            bits_per_sample=bits_per_sample,
        )

    @property
    def info(self):
        return self._info

    @property
    def frames(self):
        return self._frames


@pytest.fixture
def make_wav():
    return build_wav


@pytest.fixture
def array_source():
    return ArraySource


@pytest.fixture
def sine_wav(tmp_path, make_wav):
    """One second of a 1 kHz, half-scale, 16-bit mono tone at 8 kHz."""
    t = np.arange(8000) / 8000
    samples = np.round(0.5 * 32767 * np.sin(2 * np.pi * 1000 * t)).astype("<i2")
    path = tmp_path / "tone.wav"
    path.write_bytes(make_wav(samples.tobytes()))
    return path
