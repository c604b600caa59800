"""
Render an audio file as a spectrogram image.

    audiospectrogram input.wav output.png --fft-samples 2048 --color-map magma

- Input: WAVE (RIFF/RIFX) through the built-in decoder; FLAC, Ogg, MP3 and
  AIFF through librosa.
- Output: PNG or JPEG, chosen by the output file extension. Time runs left to
  right, low frequencies at the bottom, one pixel per STFT column and bin.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from .build_info import BUILD_INFO
from .colormaps import COLOR_MAPS, get_color_map
from .config import (
    DEFAULT_CHANNEL,
    DEFAULT_COLOR_MAP,
    DEFAULT_FFT_SAMPLES,
    DEFAULT_OVERLAP_RATIO,
    DEFAULT_WINDOW,
)
from .errors import SpectrogramError, UnsupportedEncoding
from .image import image_format, save_image
from .render import RenderOptions, RenderResult, render
from .sources import read_audio
from .spectrogram import SpectrogramOptions, generate_spectrogram
from .windows import WINDOW_FUNCTIONS, get_window_function


def add_spectrogram_arguments(parser: argparse.ArgumentParser) -> None:
    """Flags shared by the single-file CLI and the batch script."""
    stft = parser.add_argument_group("spectrogram")
    stft.add_argument("--channel", type=int, default=DEFAULT_CHANNEL, help="Channel index (default: %(default)s).")
    stft.add_argument(
        "--fft-samples", type=int, default=DEFAULT_FFT_SAMPLES, help="FFT size, a power of 2 (default: %(default)s)."
    )
    stft.add_argument(
        "--overlap",
        type=int,
        default=None,
        help="Samples shared by consecutive windows (default: 3/4 of --fft-samples).",
    )
    stft.add_argument("--segments", type=int, default=None, help="Spread this many windows evenly over the audio.")
    stft.add_argument(
        "--window-func",
        default=DEFAULT_WINDOW,
        help=f"Window function: {', '.join(WINDOW_FUNCTIONS)} (default: %(default)s).",
    )

    image = parser.add_argument_group("rendering")
    image.add_argument("--min-freq", type=float, default=None, help="Lowest frequency shown, in Hz.")
    image.add_argument("--max-freq", type=float, default=None, help="Highest frequency shown, in Hz.")
    image.add_argument("--relative-min-freq", type=float, default=None, help="Lowest frequency as a fraction of Nyquist.")
    image.add_argument("--relative-max-freq", type=float, default=None, help="Highest frequency as a fraction of Nyquist.")
    image.add_argument("--relative-min-db", type=float, default=None, help="Floor of the dB range, relative to the median.")
    image.add_argument("--relative-max-db", type=float, default=None, help="Ceiling of the dB range, relative to the median.")
    image.add_argument(
        "--color-map",
        default=DEFAULT_COLOR_MAP,
        help=f"Color map: {', '.join(COLOR_MAPS)} (default: %(default)s).",
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render an audio file as a spectrogram image.")
    parser.add_argument("input", type=Path, help="Input audio file.")
    parser.add_argument("output", type=Path, help="Output image (.png, .jpg or .jpeg).")
    add_spectrogram_arguments(parser)
    parser.add_argument("--version", action="version", version=f"%(prog)s {BUILD_INFO.describe()}")
    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> tuple[SpectrogramOptions, RenderOptions]:
    """Turn parsed flags into engine options, rejecting unknown names up front."""
    window_function = get_window_function(args.window_func)
    if window_function is None:
        raise UnsupportedEncoding(f"unknown window function: {args.window_func}")
    color_map = get_color_map(args.color_map)
    if color_map is None:
        raise UnsupportedEncoding(f"unknown color map: {args.color_map}")

    overlap = args.overlap
    if overlap is None and args.segments is None:
        overlap = int(args.fft_samples * DEFAULT_OVERLAP_RATIO)

    spectrogram_options = SpectrogramOptions(
        window_function=window_function,
        channel=args.channel,
        fft_samples=args.fft_samples,
        overlap=overlap,
        segments=args.segments,
    )
    render_options = RenderOptions(
        color_map=color_map,
        min_frequency=args.min_freq,
        max_frequency=args.max_freq,
        relative_min_frequency=args.relative_min_freq,
        relative_max_frequency=args.relative_max_freq,
        relative_min_db=args.relative_min_db,
        relative_max_db=args.relative_max_db,
    )
    return spectrogram_options, render_options


def convert(
    input_path: Path,
    output_path: Path,
    spectrogram_options: SpectrogramOptions,
    render_options: RenderOptions,
) -> RenderResult:
    image_format(output_path)

    print(f"[load] {input_path}")
    source = read_audio(input_path)
    info = source.info
    print(
        f"[load] {len(source.frames)} frames, {info.channels} ch, "
        f"{info.sample_rate} Hz, {info.bits_per_sample}-bit"
    )

    spec = generate_spectrogram(source, spectrogram_options)
    print(f"[spectrogram] {spec.column_count} columns x {spec.bin_count} bins")

    result = render(spec, render_options)
    print(
        f"[render] {result.min_frequency:.0f}-{result.max_frequency:.0f} Hz, "
        f"{result.min_db:.1f} to {result.max_db:.1f} dB"
    )

    print(f"[save] -> {output_path}")
    save_image(result, output_path)
    return result


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        spectrogram_options, render_options = build_options(args)
        convert(args.input, args.output, spectrogram_options, render_options)
    except (SpectrogramError, OSError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
