"""Named window functions for STFT framing."""
from __future__ import annotations

from typing import Callable, Optional

import librosa
import numpy as np

WindowFunction = Callable[[int], np.ndarray]

# CLI name -> scipy window name understood by librosa.filters.get_window.
WINDOW_FUNCTIONS = {
    "hann": "hann",
    "hamming": "hamming",
    "bartlett": "bartlett",
    "blackman": "blackman",
    "flatTop": "flattop",
    "rectangular": "boxcar",
}


def _symmetric(window: str) -> WindowFunction:
    def coefficients(n: int) -> np.ndarray:
        return librosa.filters.get_window(window, n, fftbins=False)

    coefficients.__name__ = window
    return coefficients


def get_window_function(name: str) -> Optional[WindowFunction]:
    """Return a coefficient generator for ``name``, or None if unknown."""
    window = WINDOW_FUNCTIONS.get(name)
    if window is None:
        return None
    return _symmetric(window)


def apply_window(buffer: np.ndarray, window_function: WindowFunction) -> np.ndarray:
    """Weight the last axis of ``buffer`` by the window coefficients."""
    return buffer * window_function(buffer.shape[-1])
