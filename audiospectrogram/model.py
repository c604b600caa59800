"""Uniform frame model shared by every audio decoder."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import numpy as np


@dataclass(frozen=True)
class AudioInfo:
    channels: int
    sample_rate: int
    bits_per_sample: int


class AudioSource(Protocol):
    """Anything that can hand over decoded audio.

    ``frames`` is a ``(frame_count, channels)`` float array with values in
    roughly [-1, 1], one row per sample instant in chronological order.
    """

    @property
    def info(self) -> AudioInfo: ...

    @property
    def frames(self) -> np.ndarray: ...


def duration(source: AudioSource) -> float:
    """Length of the decoded audio in seconds."""
    return len(source.frames) / source.info.sample_rate
