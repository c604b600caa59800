"""Map a window of a spectrogram onto a color palette."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
from PIL import Image

from .errors import InvalidConfig, InvalidRange, MutuallyExclusive
from .spectrogram import Spectrogram


@dataclass(frozen=True)
class AbsoluteBound:
    """Frequency in Hz."""

    value: float


@dataclass(frozen=True)
class RelativeBound:
    """Fraction of the Nyquist frequency."""

    ratio: float


FrequencyBound = Union[AbsoluteBound, RelativeBound, None]


@dataclass(frozen=True, eq=False)
class RenderOptions:
    color_map: np.ndarray
    min_frequency: Optional[float] = None
    max_frequency: Optional[float] = None
    relative_min_frequency: Optional[float] = None
    relative_max_frequency: Optional[float] = None
    # Offsets from the median dB value of the selected band.
    relative_min_db: Optional[float] = None
    relative_max_db: Optional[float] = None


@dataclass(frozen=True, eq=False)
class RenderResult:
    min_frequency: float
    max_frequency: float
    min_db: float
    max_db: float
    # (height, width, 3) uint8; row 0 is the highest selected frequency.
    pixels: np.ndarray

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    def to_image(self) -> Image.Image:
        if self.pixels.size == 0:
            return Image.new("RGB", (self.width, self.height))
        return Image.fromarray(self.pixels)


def frequency_bound(absolute: Optional[float], relative: Optional[float], name: str) -> FrequencyBound:
    if absolute is not None and relative is not None:
        raise MutuallyExclusive(f"cannot specify both {name} frequency and relative {name} frequency")
    if absolute is not None:
        return AbsoluteBound(absolute)
    if relative is not None:
        return RelativeBound(relative)
    return None


def resolve_frequency(bound: FrequencyBound, nyquist: float, default: float, name: str) -> float:
    if isinstance(bound, AbsoluteBound):
        if not 0 <= bound.value <= nyquist:
            raise InvalidRange(f"invalid {name} frequency {bound.value}: must be within [0, {nyquist}]")
        return float(bound.value)
    if isinstance(bound, RelativeBound):
        if not 0 <= bound.ratio <= 1:
            raise InvalidRange(f"invalid relative {name} frequency {bound.ratio}: must be within [0, 1]")
        return bound.ratio * nyquist
    return default


def bin_range(spectrogram: Spectrogram, min_freq: float, max_freq: float) -> tuple[int, int]:
    """Inclusive ``(first, last)`` bin indices covering ``[min_freq, max_freq]``."""
    bins = spectrogram.bin_count
    nyquist = spectrogram.nyquist
    min_index = math.floor(min_freq / nyquist * bins)
    max_index = min(math.ceil(max_freq / nyquist * bins), bins - 1)
    return min_index, max_index


def decibel_bounds(band: np.ndarray, options: RenderOptions) -> tuple[float, float]:
    """Resolve the dB window: data extrema unless a median offset is given."""
    population = band.ravel()
    if population.size == 0:
        return math.nan, math.nan

    median = None
    if options.relative_min_db is not None or options.relative_max_db is not None:
        median = float(np.median(population))

    if options.relative_min_db is not None:
        min_db = median + options.relative_min_db
    else:
        min_db = float(population.min())
    if options.relative_max_db is not None:
        max_db = median + options.relative_max_db
    else:
        max_db = float(population.max())

    if min_db > max_db:
        raise InvalidRange(f"min dB {min_db:.2f} is above max dB {max_db:.2f}")
    return min_db, max_db


def colorize(band: np.ndarray, min_db: float, max_db: float, palette: np.ndarray) -> np.ndarray:
    """Palette colors for a ``(columns, bins)`` band, as a ``(bins, columns, 3)`` image."""
    clamped = np.clip(band, min_db, max_db)
    db_range = max_db - min_db
    # A collapsed range maps everything to the first color.
    if db_range > 0:
        normalized = (clamped - min_db) / db_range
    else:
        normalized = np.zeros_like(clamped)
    # Round half away from zero; normalized is never negative.
    index = np.floor(normalized * (len(palette) - 1) + 0.5).astype(np.intp)
    index = np.clip(index, 0, len(palette) - 1)
    return np.ascontiguousarray(palette[index].transpose(1, 0, 2)[::-1])


def render(spectrogram: Spectrogram, options: RenderOptions) -> RenderResult:
    """Render ``spectrogram`` with time on x and frequency rising up y."""
    nyquist = spectrogram.nyquist
    min_freq = resolve_frequency(
        frequency_bound(options.min_frequency, options.relative_min_frequency, "min"),
        nyquist,
        0.0,
        "min",
    )
    max_freq = resolve_frequency(
        frequency_bound(options.max_frequency, options.relative_max_frequency, "max"),
        nyquist,
        nyquist,
        "max",
    )
    if min_freq >= max_freq:
        raise InvalidRange(f"min frequency {min_freq} must be less than max frequency {max_freq}")

    palette = np.asarray(options.color_map, dtype=np.uint8)
    if palette.ndim != 2 or palette.shape[1] != 3 or len(palette) == 0:
        raise InvalidConfig("color map must be a non-empty sequence of RGB colors")

    min_index, max_index = bin_range(spectrogram, min_freq, max_freq)
    band = spectrogram.data[:, min_index : max_index + 1]
    min_db, max_db = decibel_bounds(band, options)

    if band.size == 0:
        pixels = np.zeros((max_index - min_index + 1, 0, 3), dtype=np.uint8)
    else:
        pixels = colorize(band, min_db, max_db, palette)

    return RenderResult(
        min_frequency=min_freq,
        max_frequency=max_freq,
        min_db=min_db,
        max_db=max_db,
        pixels=pixels,
    )
