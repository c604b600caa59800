"""Audio sources that feed the spectrogram engine.

WAVE containers go through the in-house decoder in :mod:`.wave`; every other
container is handed to librosa (libsndfile underneath), which already yields
normalized floats.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import librosa
import numpy as np
import soundfile as sf

from .errors import FormatError, UnsupportedEncoding
from .model import AudioInfo, AudioSource
from .wave import RIFF_CHUNK_ID, RIFX_CHUNK_ID, Wave, read_wave_file

SUBTYPE_BITS = {
    "PCM_S8": 8,
    "PCM_U8": 8,
    "PCM_16": 16,
    "PCM_24": 24,
    "PCM_32": 32,
    "FLOAT": 32,
    "DOUBLE": 64,
}
DEFAULT_CODEC_BITS = 16


class WaveSource:
    def __init__(self, wave: Wave) -> None:
        if wave.frames is None:
            raise FormatError("WAVE header was read without sample data")
        self.wave = wave
        self._info = AudioInfo(
            channels=wave.fmt.channels,
            sample_rate=wave.fmt.sample_rate,
            bits_per_sample=wave.fmt.bits_per_sample,
        )

    @classmethod
    def from_file(cls, path: Path | str) -> "WaveSource":
        return cls(read_wave_file(path))

    @property
    def info(self) -> AudioInfo:
        return self._info

    @property
    def frames(self) -> np.ndarray:
        return self.wave.frames


class CodecSource:
    """Audio decoded by an external codec (FLAC, Ogg Vorbis, MP3, AIFF...)."""

    def __init__(self, info: AudioInfo, frames: np.ndarray) -> None:
        if frames.ndim != 2 or frames.shape[1] != info.channels:
            raise FormatError(
                f"decoded frames shaped {frames.shape} do not match {info.channels} channel(s)"
            )
        frames.setflags(write=False)
        self._info = info
        self._frames = frames

    @classmethod
    def from_file(cls, path: Path | str) -> "CodecSource":
        try:
            meta = sf.info(str(path))
        except RuntimeError as exc:
            raise FormatError(f"cannot decode {path}: {exc}") from exc

        try:
            y, sr = librosa.load(path, sr=None, mono=False)
        except Exception as exc:
            # libsndfile and the audioread fallback each raise their own types.
            raise FormatError(f"cannot decode {path}: {exc}") from exc
        # librosa returns (samples,) for mono and (channels, samples) otherwise.
        frames = np.atleast_2d(y).T.astype(np.float64)
        info = AudioInfo(
            channels=frames.shape[1],
            sample_rate=int(sr),
            bits_per_sample=SUBTYPE_BITS.get(meta.subtype, DEFAULT_CODEC_BITS),
        )
        return cls(info, frames)

    @property
    def info(self) -> AudioInfo:
        return self._info

    @property
    def frames(self) -> np.ndarray:
        return self._frames


def detect_container(path: Path | str) -> Optional[str]:
    """Guess the container from its leading magic bytes."""
    with open(path, "rb") as f:
        head = f.read(12)
    if head[:4] in (RIFF_CHUNK_ID, RIFX_CHUNK_ID):
        return "wav"
    if head[:4] == b"fLaC":
        return "flac"
    if head[:4] == b"OggS":
        return "ogg"
    if head[:4] == b"FORM" and head[8:12] in (b"AIFF", b"AIFC"):
        return "aiff"
    if head[:3] == b"ID3" or (len(head) >= 2 and head[0] == 0xFF and head[1] & 0xE0 == 0xE0):
        return "mp3"
    return None


def read_audio(path: Path | str) -> AudioSource:
    """Decode ``path`` into an audio source, picking the decoder by content."""
    container = detect_container(path)
    if container == "wav":
        return WaveSource.from_file(path)
    if container is not None:
        return CodecSource.from_file(path)
    raise UnsupportedEncoding(f"unrecognized audio container: {path}")
