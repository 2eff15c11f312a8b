"""Reading and writing Radiance RGBE (.hdr) images.

Pixels are handled as numpy arrays: float pixels have shape ``(n, 3)``
(red, green, blue) and raw pixels have shape ``(n, 4)`` of ``uint8``
(red, green, blue mantissas and a shared exponent).
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from os import PathLike
from typing import BinaryIO, Iterable

import numpy as np

__all__ = [
    "RGBEError",
    "HeaderInfo",
    "float_to_rgbe",
    "rgbe_to_float",
    "write_header",
    "read_header",
    "write_pixels",
    "read_pixels",
    "read_pixels_raw",
    "write_pixels_rle",
    "read_pixels_rle",
    "read_pixels_raw_rle",
    "read_hdr",
]

_FORMAT_LINE = b"FORMAT=32-bit_rle_rgbe\n"
_LINE_LIMIT = 127
_PROGRAMTYPE_LIMIT = 15
_MIN_RUN_LENGTH = 4
_MIN_RLE_WIDTH = 8
_MAX_RLE_WIDTH = 0x7FFF

_FLOAT = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?|[-+]?(?:inf(?:inity)?|nan)"
_GAMMA_RE = re.compile(rb"GAMMA=\s*(" + _FLOAT.encode() + rb")", re.IGNORECASE)
_EXPOSURE_RE = re.compile(rb"EXPOSURE=\s*(" + _FLOAT.encode() + rb")", re.IGNORECASE)
_SIZE_RE = re.compile(rb"-Y\s*([-+]?\d+)\s*\+X\s*([-+]?\d+)")


class RGBEError(Exception):
    """Raised when an RGBE stream cannot be read or is malformed."""


@dataclass
class HeaderInfo:
    """Optional header fields; ``None`` means the field is absent."""

    programtype: str | None = None
    gamma: float | None = None
    exposure: float | None = None


def _read_error() -> RGBEError:
    return RGBEError("RGBE read error")


def _format_error(message: str) -> RGBEError:
    return RGBEError(f"RGBE bad file format: {message}")


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if data is None or len(data) < size:
        raise _read_error()
    return data


def _as_pixels(data: Iterable[float] | np.ndarray) -> np.ndarray:
    return np.asarray(data, dtype=np.float64).reshape(-1, 3)


def _encode(pixels: np.ndarray) -> np.ndarray:
    """Convert float pixels of shape (n, 3) into RGBE bytes of shape (n, 4)."""
    pixels = _as_pixels(pixels)
    out = np.zeros((len(pixels), 4), dtype=np.uint8)
    if len(pixels) == 0:
        return out
    brightest = pixels.max(axis=1)
    mask = brightest >= 1e-32
    if np.any(mask):
        mantissa, exponent = np.frexp(brightest[mask])
        scale = mantissa * 256.0 / brightest[mask]
        components = np.trunc(pixels[mask] * scale[:, None])
        out[mask, :3] = np.clip(components, 0, 255).astype(np.uint8)
        out[mask, 3] = ((exponent + 128) % 256).astype(np.uint8)
    return out


def _decode(raw: np.ndarray) -> np.ndarray:
    """Convert RGBE bytes of shape (n, 4) into float pixels of shape (n, 3)."""
    raw = np.asarray(raw, dtype=np.uint8).reshape(-1, 4)
    exponent = raw[:, 3].astype(np.int64)
    factor = np.where(exponent != 0, np.ldexp(1.0, exponent - 136), 0.0)
    return (raw[:, :3].astype(np.float64) * factor[:, None]).astype(np.float32)


def float_to_rgbe(red: float, green: float, blue: float) -> bytes:
    """Encode one float pixel as four RGBE bytes."""
    brightest = max(red, green, blue)
    if not brightest >= 1e-32:
        return bytes(4)
    mantissa, exponent = math.frexp(brightest)
    scale = mantissa * 256.0 / brightest
    channels = (min(255, max(0, int(c * scale))) for c in (red, green, blue))
    return bytes([*channels, (exponent + 128) % 256])


def rgbe_to_float(rgbe: bytes | Iterable[int]) -> tuple[float, float, float]:
    """Decode four RGBE bytes into a (red, green, blue) float triple."""
    red, green, blue, exponent = bytes(rgbe)
    if not exponent:
        return (0.0, 0.0, 0.0)
    factor = math.ldexp(1.0, exponent - 136)
    return (red * factor, green * factor, blue * factor)


def write_header(
    stream: BinaryIO, width: int, height: int, info: HeaderInfo | None = None
) -> None:
    """Write a minimal RGBE header for an image of the given size."""
    programtype = "RGBE"
    if info is not None and info.programtype is not None:
        programtype = info.programtype
    lines = [f"#?{programtype}\n"]
    if info is not None and info.gamma is not None:
        lines.append("GAMMA=%g\n" % info.gamma)
    if info is not None and info.exposure is not None:
        lines.append("EXPOSURE=%g\n" % info.exposure)
    lines.append(_FORMAT_LINE.decode("ascii") + "\n")
    lines.append(f"-Y {height} +X {width}\n")
    stream.write("".join(lines).encode("latin-1"))


def _readline(stream: BinaryIO) -> bytes:
    line = stream.readline(_LINE_LIMIT)
    if not line:
        raise _read_error()
    return line


def _programtype(line: bytes) -> str:
    chars = bytearray()
    for byte in line[2 : 2 + _PROGRAMTYPE_LIMIT]:
        if byte == 0 or bytes([byte]).isspace():
            break
        chars.append(byte)
    return chars.decode("latin-1")


def read_header(stream: BinaryIO) -> tuple[int, int, HeaderInfo]:
    """Read an RGBE header and return ``(width, height, info)``."""
    info = HeaderInfo()
    line = _readline(stream)
    if line.startswith(b"#?"):
        info.programtype = _programtype(line)
        line = _readline(stream)

    while True:
        if line[:1] in (b"", b"\0", b"\n"):
            raise _format_error("no FORMAT specifier found")
        if line == _FORMAT_LINE:
            break
        if match := _GAMMA_RE.match(line):
            info.gamma = float(match.group(1))
        elif match := _EXPOSURE_RE.match(line):
            info.exposure = float(match.group(1))
        line = _readline(stream)

    while True:
        line = _readline(stream)
        if match := _SIZE_RE.match(line):
            height, width = int(match.group(1)), int(match.group(2))
            return width, height, info


def write_pixels(stream: BinaryIO, data: Iterable[float] | np.ndarray) -> None:
    """Write float pixels without run-length encoding."""
    stream.write(_encode(_as_pixels(data)).tobytes())


def read_pixels(stream: BinaryIO, count: int) -> np.ndarray:
    """Read ``count`` flat (not run-length encoded) pixels as floats."""
    return _decode(read_pixels_raw(stream, count))


def read_pixels_raw(stream: BinaryIO, count: int) -> np.ndarray:
    """Read ``count`` flat pixels as raw RGBE bytes of shape (count, 4)."""
    data = _read_exact(stream, 4 * count)
    return np.frombuffer(data, dtype=np.uint8).reshape(count, 4).copy()


def _rle_bytes(data: bytes) -> bytes:
    """Run-length encode one channel of a scanline."""
    out = bytearray()
    size = len(data)
    cur = 0
    while cur < size:
        beg_run = cur
        run_count = old_run_count = 0
        while run_count < _MIN_RUN_LENGTH and beg_run < size:
            beg_run += run_count
            old_run_count = run_count
            run_count = 1
            while (
                beg_run + run_count < size
                and run_count < 127
                and data[beg_run] == data[beg_run + run_count]
            ):
                run_count += 1
        if old_run_count > 1 and old_run_count == beg_run - cur:
            out += bytes([128 + old_run_count, data[cur]])
            cur = beg_run
        while cur < beg_run:
            nonrun_count = min(beg_run - cur, 128)
            out.append(nonrun_count)
            out += data[cur : cur + nonrun_count]
            cur += nonrun_count
        if run_count >= _MIN_RUN_LENGTH:
            out += bytes([128 + run_count, data[beg_run]])
            cur += run_count
    return bytes(out)


def _rle_allowed(scanline_width: int) -> bool:
    return _MIN_RLE_WIDTH <= scanline_width <= _MAX_RLE_WIDTH


def write_pixels_rle(
    stream: BinaryIO,
    data: Iterable[float] | np.ndarray,
    scanline_width: int,
    num_scanlines: int,
) -> None:
    """Write whole scanlines, run-length encoded where the width allows it."""
    pixels = _as_pixels(data)
    total = scanline_width * num_scanlines
    if len(pixels) < total:
        raise ValueError(f"expected {total} pixels, got {len(pixels)}")
    pixels = pixels[:total]
    if not _rle_allowed(scanline_width):
        write_pixels(stream, pixels)
        return
    header = bytes([2, 2, scanline_width >> 8, scanline_width & 0xFF])
    for row in pixels.reshape(num_scanlines, scanline_width, 3):
        encoded = _encode(row)
        chunks = [header]
        chunks.extend(_rle_bytes(encoded[:, channel].tobytes()) for channel in range(4))
        stream.write(b"".join(chunks))


def _read_rle_channel(stream: BinaryIO, width: int) -> bytes:
    out = bytearray()
    while len(out) < width:
        marker, value = _read_exact(stream, 2)
        remaining = width - len(out)
        if marker > 128:
            count = marker - 128
            if count > remaining:
                raise _format_error("bad scanline data")
            out += bytes([value]) * count
        else:
            count = marker
            if count == 0 or count > remaining:
                raise _format_error("bad scanline data")
            out.append(value)
            if count > 1:
                out += _read_exact(stream, count - 1)
    return bytes(out)


def read_pixels_raw_rle(
    stream: BinaryIO, scanline_width: int, num_scanlines: int
) -> np.ndarray:
    """Read whole scanlines as raw RGBE bytes of shape (width * lines, 4).

    Flat data is accepted too: a scanline that does not start with a
    run-length marker makes the rest of the image be read flat.
    """
    if not _rle_allowed(scanline_width):
        return read_pixels_raw(stream, scanline_width * num_scanlines)
    parts: list[np.ndarray] = []
    remaining = num_scanlines
    while remaining > 0:
        head = _read_exact(stream, 4)
        if head[0] != 2 or head[1] != 2 or head[2] & 0x80:
            parts.append(np.frombuffer(head, dtype=np.uint8).reshape(1, 4))
            parts.append(read_pixels_raw(stream, scanline_width * remaining - 1))
            break
        if (head[2] << 8 | head[3]) != scanline_width:
            raise _format_error("wrong scanline width")
        channels = [_read_rle_channel(stream, scanline_width) for _ in range(4)]
        planes = np.frombuffer(b"".join(channels), dtype=np.uint8)
        parts.append(planes.reshape(4, scanline_width).T.copy())
        remaining -= 1
    if not parts:
        return np.zeros((0, 4), dtype=np.uint8)
    return np.concatenate(parts)


def read_pixels_rle(
    stream: BinaryIO, scanline_width: int, num_scanlines: int
) -> np.ndarray:
    """Read whole scanlines as float pixels of shape (width * lines, 3)."""
    return _decode(read_pixels_raw_rle(stream, scanline_width, num_scanlines))


def read_hdr(path: str | PathLike[str]) -> tuple[np.ndarray, HeaderInfo]:
    """Load an RGBE file; pixels come back with shape (height, width, 3)."""
    with open(path, "rb") as stream:
        width, height, info = read_header(stream)
        pixels = read_pixels_rle(stream, width, height)
    return pixels.reshape(height, width, 3), info