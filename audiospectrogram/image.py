"""Write rendered spectrograms to PNG or JPEG."""
from __future__ import annotations

from pathlib import Path

from .config import IMAGE_FORMATS
from .errors import InvalidRange, UnsupportedEncoding
from .render import RenderResult


def image_format(path: Path) -> str:
    fmt = IMAGE_FORMATS.get(path.suffix.lower())
    if fmt is None:
        supported = ", ".join(sorted(IMAGE_FORMATS))
        raise UnsupportedEncoding(f"unsupported image extension {path.suffix!r} (use {supported})")
    return fmt


def save_image(result: RenderResult, path: Path | str) -> Path:
    path = Path(path)
    fmt = image_format(path)
    if result.width == 0 or result.height == 0:
        raise InvalidRange("nothing to draw: the audio is shorter than one FFT window")
    path.parent.mkdir(parents=True, exist_ok=True)
    result.to_image().save(path, format=fmt)
    return path
