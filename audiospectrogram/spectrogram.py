"""Short-time Fourier transform of one audio channel into a dB matrix."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .config import DEFAULT_CHANNEL, DEFAULT_FFT_SAMPLES, MAGNITUDE_FLOOR
from .errors import InvalidChannel, InvalidConfig, MutuallyExclusive
from .model import AudioSource
from .windows import WindowFunction, apply_window

# Columns transformed per rfft call; bounds the temporary windowed copy.
BATCH_COLUMNS = 512


@dataclass(frozen=True)
class SpectrogramOptions:
    window_function: Optional[WindowFunction]
    channel: int = DEFAULT_CHANNEL
    fft_samples: int = DEFAULT_FFT_SAMPLES
    overlap: Optional[int] = None
    segments: Optional[int] = None


@dataclass(frozen=True, eq=False)
class Spectrogram:
    sample_rate: int
    channels: int
    fft_samples: int
    # (columns, fft_samples // 2) decibel values, columns in time order.
    data: np.ndarray

    @property
    def bin_count(self) -> int:
        return self.fft_samples // 2

    @property
    def column_count(self) -> int:
        return len(self.data)

    @property
    def nyquist(self) -> float:
        return self.sample_rate / 2

    def frequencies(self) -> np.ndarray:
        """Frequency in Hz at the lower edge of each bin."""
        return np.arange(self.bin_count) * (self.nyquist / self.bin_count)


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def validate_options(options: SpectrogramOptions, channels: int) -> None:
    if options.channel < 0 or options.channel >= channels:
        raise InvalidChannel(
            f"invalid channel number {options.channel}: audio has {channels} channel(s)"
        )
    if not is_power_of_two(options.fft_samples):
        raise InvalidConfig(f"fft samples must be a power of 2, got {options.fft_samples}")
    if options.fft_samples < 2:
        raise InvalidConfig("fft samples must be at least 2 to yield a frequency bin")
    if options.overlap is not None and options.segments is not None:
        raise MutuallyExclusive("cannot specify both segments and overlap")
    if options.overlap is not None and not 0 <= options.overlap < options.fft_samples:
        raise InvalidConfig(
            f"overlap must be in [0, {options.fft_samples}), got {options.overlap}"
        )
    if options.segments is not None and options.segments <= 1:
        raise InvalidConfig(f"segments must be greater than 1, got {options.segments}")
    if options.window_function is None:
        raise InvalidConfig("no window function given")


def resolve_hop(options: SpectrogramOptions, frame_count: int) -> tuple[int, int]:
    """Return ``(hop, overlap)`` for already validated options."""
    fft_samples = options.fft_samples
    if options.overlap is not None:
        hop = fft_samples - options.overlap
    elif options.segments is not None:
        hop = (frame_count - fft_samples) // (options.segments - 1)
        hop = min(max(hop, 1), fft_samples)
    else:
        hop = fft_samples
    return hop, fft_samples - hop


def to_decibels(magnitude: np.ndarray) -> np.ndarray:
    return 20 * np.log10(np.maximum(magnitude, MAGNITUDE_FLOOR))


def generate_spectrogram(source: AudioSource, options: SpectrogramOptions) -> Spectrogram:
    """Compute the dB spectrogram of ``options.channel``.

    Windows of ``fft_samples`` frames start at 0 and advance by the hop until
    the next one would run past the last frame; a signal shorter than one
    window gives an empty matrix. Each column holds the first half of the
    real FFT, scaled by ``2 / fft_samples`` and converted to dB.
    """
    info = source.info
    validate_options(options, info.channels)

    frames = np.asarray(source.frames, dtype=np.float64)
    frame_count = len(frames)
    fft_samples = options.fft_samples
    bins = fft_samples // 2
    hop, _ = resolve_hop(options, frame_count)

    if frame_count < fft_samples:
        data = np.empty((0, bins))
    else:
        samples = np.ascontiguousarray(frames[:, options.channel])
        windows = sliding_window_view(samples, fft_samples)[::hop]
        data = np.empty((len(windows), bins))
        scale = 2 / fft_samples
        for start in range(0, len(windows), BATCH_COLUMNS):
            batch = apply_window(windows[start : start + BATCH_COLUMNS], options.window_function)
            spectrum = np.fft.rfft(batch, axis=-1)[:, :bins]
            data[start : start + len(batch)] = to_decibels(np.abs(spectrum) * scale)

    data.setflags(write=False)
    return Spectrogram(
        sample_rate=info.sample_rate,
        channels=info.channels,
        fft_samples=fft_samples,
        data=data,
    )
