"""RIFF/RIFX WAVE container decoder.

Produces the uniform frame model: a ``(frame_count, channels)`` float64 array
of normalized amplitudes plus the parsed ``fmt `` and ``fact`` sub-chunks.

Every sample is treated as an integer regardless of the declared format code:

- 8-bit samples are unsigned, ``(value - 128) / 255``.
- Wider samples are signed two's complement over the declared width,
  divided by ``2 ** (bits - 1) - 1``. Widths that are not 1, 2, 4 or 8 bytes
  are sign-extended to the next of those before interpretation. The most
  negative code is clamped to -1.0.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import BinaryIO, Callable, Optional

import numpy as np

from .errors import FormatError

FORMAT_PCM = 0x0001
FORMAT_IEEE_FLOAT = 0x0003
FORMAT_ALAW = 0x0006
FORMAT_MULAW = 0x0007
FORMAT_EXTENSIBLE = 0xFFFE
SUPPORTED_FORMATS = {FORMAT_PCM, FORMAT_IEEE_FLOAT, FORMAT_ALAW, FORMAT_MULAW, FORMAT_EXTENSIBLE}

RIFF_CHUNK_ID = b"RIFF"
RIFX_CHUNK_ID = b"RIFX"
WAVE_FORMAT_ID = b"WAVE"
FMT_CHUNK_ID = b"fmt "
FACT_CHUNK_ID = b"fact"
DATA_CHUNK_ID = b"data"

MAX_CHUNK_SIZE = 0x7FFFFFFF


@dataclass(frozen=True)
class WaveFmt:
    audio_format: int
    channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    extra_param_size: int = 0
    extra_params: bytes = b""


@dataclass(frozen=True)
class WaveFact:
    sample_length: int


@dataclass(frozen=True, eq=False)
class Wave:
    fmt: WaveFmt
    byte_order: str
    fact: Optional[WaveFact] = None
    # None when only the header was requested.
    frames: Optional[np.ndarray] = None


def _describe(chunk_id: bytes) -> str:
    return chunk_id.decode("latin-1")


def _read_full(read: Callable[[int], Optional[bytes]], size: int) -> bytes:
    """Call ``read`` until ``size`` bytes arrive or the stream is exhausted.

    Raw streams and pipes may return fewer bytes than requested.
    """
    chunks = []
    while size > 0:
        chunk = read(size)
        if not chunk:
            break
        chunks.append(chunk)
        size -= len(chunk)
    return b"".join(chunks)


class _BoundedReader:
    """Reads through ``read_raw`` without going past ``limit`` bytes."""

    def __init__(self, read_raw: Callable[[int], bytes], limit: int, byte_order: str) -> None:
        self._read_raw = read_raw
        self.remaining = limit
        self.byte_order = byte_order
        self._prefix = "<" if byte_order == "little" else ">"

    def read(self, size: int, what: str) -> bytes:
        if size > self.remaining:
            raise FormatError(f"unexpected end of {what}: need {size} bytes, {self.remaining} left")
        data = self._read_raw(size)
        self.remaining -= len(data)
        if len(data) != size:
            raise FormatError(f"unexpected end of {what}: need {size} bytes, read {len(data)}")
        return data

    def read_upto(self, size: int) -> bytes:
        data = self._read_raw(min(size, self.remaining))
        self.remaining -= len(data)
        return data

    def read_u16(self, what: str) -> int:
        return struct.unpack(self._prefix + "H", self.read(2, what))[0]

    def read_u32(self, what: str) -> int:
        return struct.unpack(self._prefix + "I", self.read(4, what))[0]

    def sub_reader(self, limit: int) -> "_BoundedReader":
        return _BoundedReader(self.read_upto, min(limit, self.remaining), self.byte_order)

    def skip_rest(self) -> None:
        while self.remaining > 0:
            if not self.read_upto(self.remaining):
                break

    def read_chunk_header(self) -> tuple[bytes, int]:
        chunk_id = self.read(4, "sub-chunk header")
        size = self.read_u32("sub-chunk header")
        if size > MAX_CHUNK_SIZE:
            raise FormatError(f"{_describe(chunk_id)} sub-chunk size too big")
        return chunk_id, size


def read_wave_file(path: Path | str, header_only: bool = False) -> Wave:
    with open(path, "rb") as f:
        return read_wave(f, header_only=header_only)


def read_wave(stream: BinaryIO, header_only: bool = False) -> Wave:
    """Decode a WAVE container from a binary stream.

    With ``header_only`` set, parsing stops after the ``fmt `` sub-chunk and
    the returned ``Wave`` has no frames and no format validation applied.
    """
    chunk_id = _read_full(stream.read, 4)
    if len(chunk_id) != 4:
        raise FormatError("unexpected end of container header")
    if chunk_id == RIFF_CHUNK_ID:
        byte_order = "little"
    elif chunk_id == RIFX_CHUNK_ID:
        byte_order = "big"
    else:
        raise FormatError(f"unknown chunk ID: {_describe(chunk_id)}")

    size_bytes = _read_full(stream.read, 4)
    if len(size_bytes) != 4:
        raise FormatError("unexpected end of container header")
    chunk_size = int.from_bytes(size_bytes, byte_order)
    if chunk_size > MAX_CHUNK_SIZE:
        raise FormatError(f"{_describe(chunk_id)} chunk size too big")

    reader = _BoundedReader(partial(_read_full, stream.read), chunk_size, byte_order)
    format_id = reader.read(4, "container header")
    if format_id != WAVE_FORMAT_ID:
        raise FormatError(f"unknown format ID: {_describe(format_id)}")

    sub_chunk_id, sub_chunk_size = reader.read_chunk_header()
    if sub_chunk_id != FMT_CHUNK_ID:
        raise FormatError(
            f"expected sub-chunk {_describe(FMT_CHUNK_ID)}, found sub-chunk {_describe(sub_chunk_id)}"
        )
    fmt = _read_fmt(reader.sub_reader(sub_chunk_size))

    if header_only:
        return Wave(fmt=fmt, byte_order=byte_order)

    _validate_fmt(fmt)

    fact = None
    sub_chunk_id, sub_chunk_size = reader.read_chunk_header()
    if sub_chunk_id == FACT_CHUNK_ID:
        fact = _read_fact(reader.sub_reader(sub_chunk_size))
        sub_chunk_id, sub_chunk_size = reader.read_chunk_header()

    if sub_chunk_id != DATA_CHUNK_ID:
        raise FormatError(
            f"expected sub-chunk {_describe(DATA_CHUNK_ID)}, found sub-chunk {_describe(sub_chunk_id)}"
        )
    payload = reader.sub_reader(sub_chunk_size).read_upto(sub_chunk_size)
    frames = decode_payload(payload, fmt, byte_order)
    return Wave(fmt=fmt, byte_order=byte_order, fact=fact, frames=frames)


def _read_fmt(body: _BoundedReader) -> WaveFmt:
    audio_format = body.read_u16("fmt sub-chunk")
    channels = body.read_u16("fmt sub-chunk")
    sample_rate = body.read_u32("fmt sub-chunk")
    byte_rate = body.read_u32("fmt sub-chunk")
    block_align = body.read_u16("fmt sub-chunk")
    bits_per_sample = body.read_u16("fmt sub-chunk")

    # The declared sub-chunk size alone decides whether extra parameters follow.
    extra_param_size = 0
    extra_params = b""
    if body.remaining > 0:
        extra_param_size = body.read_u16("fmt sub-chunk")
        if extra_param_size > 0:
            extra_params = body.read(extra_param_size, "fmt extra parameters")
    body.skip_rest()

    return WaveFmt(
        audio_format=audio_format,
        channels=channels,
        sample_rate=sample_rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits_per_sample,
        extra_param_size=extra_param_size,
        extra_params=extra_params,
    )


def _read_fact(body: _BoundedReader) -> WaveFact:
    sample_length = body.read_u32("fact sub-chunk")
    body.skip_rest()
    return WaveFact(sample_length=sample_length)


def _validate_fmt(fmt: WaveFmt) -> None:
    if fmt.audio_format not in SUPPORTED_FORMATS:
        raise FormatError(f"unsupported audio format: 0x{fmt.audio_format:04x}")
    bits = fmt.bits_per_sample
    if bits < 8 or bits > 64 or bits % 8 != 0:
        raise FormatError(f"unsupported bits per sample: {bits}")
    if fmt.channels < 1:
        raise FormatError("fmt sub-chunk declares no channels")
    if fmt.sample_rate < 1:
        raise FormatError("fmt sub-chunk declares no sample rate")
    if fmt.block_align < fmt.channels * (bits // 8):
        raise FormatError(
            f"block align {fmt.block_align} too small for {fmt.channels} x {bits}-bit samples"
        )


def _padded_width(width: int) -> int:
    if 2 < width < 4:
        return 4
    if 4 < width < 8:
        return 8
    return width


def decode_sample(chunk: bytes, byte_order: str) -> float:
    """Normalize one sample's raw bytes to a float amplitude.

    A 1-byte chunk is unsigned 8-bit audio; anything wider is signed over
    its full width.
    """
    if len(chunk) == 1:
        return (chunk[0] - 128) / 255
    value = int.from_bytes(chunk, byte_order, signed=True)
    return max(value / (2 ** (len(chunk) * 8 - 1) - 1), -1.0)


def decode_payload(payload: bytes, fmt: WaveFmt, byte_order: str) -> np.ndarray:
    """Decode a ``data`` payload into a read-only ``(frames, channels)`` array.

    A trailing group shorter than ``block_align`` is dropped.
    """
    width = fmt.bits_per_sample // 8
    group_count = len(payload) // fmt.block_align
    if group_count == 0:
        frames = np.empty((0, fmt.channels))
        frames.setflags(write=False)
        return frames
    raw = np.frombuffer(payload, dtype=np.uint8, count=group_count * fmt.block_align)
    raw = raw.reshape(group_count, fmt.block_align)[:, : fmt.channels * width]
    raw = raw.reshape(group_count, fmt.channels, width)

    if width == 1:
        frames = (raw[..., 0].astype(np.float64) - 128) / 255
    else:
        big = byte_order == "big"
        padded = _padded_width(width)
        if padded != width:
            msb = raw[..., 0] if big else raw[..., -1]
            fill = np.where(msb & 0x80, 0xFF, 0x00).astype(np.uint8)
            padding = np.repeat(fill[..., np.newaxis], padded - width, axis=-1)
            raw = np.concatenate([padding, raw] if big else [raw, padding], axis=-1)
        dtype = np.dtype(f"{'>' if big else '<'}i{padded}")
        values = np.ascontiguousarray(raw).view(dtype)[..., 0]
        frames = values.astype(np.float64) / (2.0 ** (fmt.bits_per_sample - 1) - 1)
        np.maximum(frames, -1.0, out=frames)

    frames.setflags(write=False)
    return frames
