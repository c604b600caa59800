#!/usr/bin/env python3
"""
Generate spectrogram PNGs for every audio file under a directory.

- Outputs are written next to the source audio as <name>.spectrogram.png.
- Existing PNGs are skipped unless --force is set.
- Accepts the same spectrogram and rendering flags as the audiospectrogram CLI.

Dependencies: the audiospectrogram package (numpy, librosa, soundfile,
matplotlib, pillow)
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from audiospectrogram.cli import add_spectrogram_arguments, build_options, convert
from audiospectrogram.config import DEFAULT_EXTS
from audiospectrogram.errors import SpectrogramError
from audiospectrogram.render import RenderOptions
from audiospectrogram.spectrogram import SpectrogramOptions


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate spectrogram PNGs.")
    parser.add_argument("-r", "--root", default=".", help="Root directory to scan (default: current directory).")
    parser.add_argument("-f", "--force", action="store_true", help="Regenerate even if PNGs already exist.")
    parser.add_argument(
        "--ext",
        nargs="+",
        default=sorted(DEFAULT_EXTS),
        help="Audio extensions to include (default: %(default)s).",
    )
    add_spectrogram_arguments(parser)
    return parser.parse_args()


def replace_with_suffix(path: Path, suffix: str) -> Path:
    return path.with_name(path.stem + suffix)


def list_audio_files(root: Path, exts: set[str]) -> list[Path]:
    return sorted([p for p in root.rglob("*") if p.suffix.lower() in exts])


def process_file(
    path: Path,
    force: bool,
    spectrogram_options: SpectrogramOptions,
    render_options: RenderOptions,
) -> None:
    spec_out = replace_with_suffix(path, ".spectrogram.png")
    if not force and spec_out.exists():
        print(f"[skip] spectrogram exists: {spec_out}")
        return
    convert(path, spec_out, spectrogram_options, render_options)


def main() -> int:
    args = parse_args()
    root = Path(args.root).resolve()
    exts = {e if e.startswith(".") else f".{e}" for e in args.ext}

    if not root.exists():
        print(f"[error] Root not found: {root}", file=sys.stderr)
        return 1

    try:
        spectrogram_options, render_options = build_options(args)
    except SpectrogramError as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1

    files = list_audio_files(root, exts)
    if not files:
        print(f"[info] No audio files found under {root}")
        return 0

    failures = 0
    for audio_path in files:
        try:
            process_file(audio_path, args.force, spectrogram_options, render_options)
        except Exception as exc:
            failures += 1
            print(f"[error] Failed on {audio_path}: {exc}", file=sys.stderr)
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
