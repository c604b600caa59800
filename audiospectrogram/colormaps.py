"""Named color palettes, sampled from matplotlib colormaps."""
from __future__ import annotations

from typing import Optional

import matplotlib
import numpy as np

from .config import PALETTE_SIZE

COLOR_MAPS = ("inferno", "magma", "plasma", "viridis", "gray")


def get_color_map(name: str, size: int = PALETTE_SIZE) -> Optional[np.ndarray]:
    """Return a ``(size, 3)`` uint8 RGB palette, darkest first, or None if unknown."""
    if name not in COLOR_MAPS:
        return None
    cmap = matplotlib.colormaps[name]
    rgba = cmap(np.linspace(0.0, 1.0, size))
    return np.round(rgba[:, :3] * 255).astype(np.uint8)
