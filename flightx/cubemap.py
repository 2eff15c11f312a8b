"""Cutting a vertical-cross HDR image into the six faces of a cube map.

The cross is three faces wide and four faces tall::

          +X
    -Y    +Z    +Y
          -X
          -Z

The faces come back in the order +Y, -Y, +X, -X, +Z, -Z. The -Z face sits
upside down in the cross, so it is turned around on both axes.
"""

from __future__ import annotations

from dataclasses import dataclass
from os import PathLike

import numpy as np

from .rgbe import read_hdr

__all__ = [
    "FACE_NAMES",
    "CubeFace",
    "extract_faces",
    "flip_horizontal",
    "flip_vertical",
    "load_cross_cubemap",
]

FACE_NAMES = ("POS_Y", "NEG_Y", "POS_X", "NEG_X", "POS_Z", "NEG_Z")

# (column, row) of each face within the cross, in FACE_NAMES order.
_LAYOUT = ((2, 1), (0, 1), (1, 0), (1, 2), (1, 1), (1, 3))


@dataclass
class CubeFace:
    """One face of a cube map: float pixels of shape (height, width, 3)."""

    data: np.ndarray

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])


def flip_horizontal(face: CubeFace) -> CubeFace:
    """Return a copy of the face with its rows in reverse order."""
    return CubeFace(face.data[::-1].copy())


def flip_vertical(face: CubeFace) -> CubeFace:
    """Return a copy of the face with the pixels of each row in reverse order."""
    return CubeFace(face.data[:, ::-1].copy())


def extract_faces(data: np.ndarray, width: int, height: int) -> list[CubeFace]:
    """Split a cross image of the given size into its six faces."""
    pixels = np.asarray(data)
    if pixels.size != width * height * 3:
        raise ValueError(
            f"expected {width * height * 3} values for a {width}x{height} image, "
            f"got {pixels.size}"
        )
    face_width, face_height = width // 3, height // 4
    if face_width == 0 or face_height == 0:
        raise ValueError(f"a {width}x{height} image is too small for a cube cross")
    pixels = pixels.reshape(height, width, 3)

    def block(column: int, row: int) -> CubeFace:
        rows = slice(row * face_height, (row + 1) * face_height)
        columns = slice(column * face_width, (column + 1) * face_width)
        return CubeFace(pixels[rows, columns].copy())

    faces = [block(column, row) for column, row in _LAYOUT]
    faces[5] = flip_vertical(flip_horizontal(faces[5]))
    return faces


def load_cross_cubemap(path: str | PathLike[str]) -> list[CubeFace]:
    """Read an RGBE cross image from disk and split it into six faces."""
    pixels, _ = read_hdr(path)
    height, width = pixels.shape[:2]
    return extract_faces(pixels, width, height)