"""Default settings shared by the CLI and the batch script."""
from __future__ import annotations

DEFAULT_CHANNEL = 0
DEFAULT_FFT_SAMPLES = 1024
# Applied only when neither --overlap nor --segments is given; 768 at 1024 samples.
DEFAULT_OVERLAP_RATIO = 0.75
DEFAULT_WINDOW = "hann"
DEFAULT_COLOR_MAP = "inferno"
DEFAULT_EXTS = {".wav", ".flac", ".ogg", ".mp3", ".aiff", ".aif"}

PALETTE_SIZE = 256
# Floor for STFT magnitudes before taking the log; 20*log10(1e-12) = -240 dB.
MAGNITUDE_FLOOR = 1e-12

IMAGE_FORMATS = {".png": "PNG", ".jpg": "JPEG", ".jpeg": "JPEG"}
