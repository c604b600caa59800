"""Exception types raised by the decoding, transform and rendering stages."""
from __future__ import annotations


class SpectrogramError(Exception):
    """Base class for every failure the pipeline reports."""


class FormatError(SpectrogramError):
    """Malformed or unsupported audio container."""


class InvalidConfig(SpectrogramError):
    """A caller-supplied option violates a precondition."""


class InvalidChannel(InvalidConfig):
    """Requested channel index is not present in the audio."""


class MutuallyExclusive(InvalidConfig):
    """Two options that exclude each other were both set."""


class InvalidRange(SpectrogramError):
    """A resolved numeric range is empty or out of bounds."""


class UnsupportedEncoding(SpectrogramError):
    """Unknown window function, color map, audio container or image format."""
