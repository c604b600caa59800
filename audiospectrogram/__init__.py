"""Convert audio waveforms into color-mapped spectrogram images."""
from __future__ import annotations

from .errors import (
    FormatError,
    InvalidChannel,
    InvalidConfig,
    InvalidRange,
    MutuallyExclusive,
    SpectrogramError,
    UnsupportedEncoding,
)
from .model import AudioInfo, AudioSource
from .render import RenderOptions, RenderResult, render
from .sources import read_audio
from .spectrogram import Spectrogram, SpectrogramOptions, generate_spectrogram

__all__ = [
    "AudioInfo",
    "AudioSource",
    "FormatError",
    "InvalidChannel",
    "InvalidConfig",
    "InvalidRange",
    "MutuallyExclusive",
    "RenderOptions",
    "RenderResult",
    "Spectrogram",
    "SpectrogramError",
    "SpectrogramOptions",
    "UnsupportedEncoding",
    "generate_spectrogram",
    "read_audio",
    "render",
]
