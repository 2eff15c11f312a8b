"""Ocean surface mesh driven by the FFT wave model.

The ocean owns a :class:`~flightx.wave.Wave` and the triangle indices of its
grid. Each call to :meth:`Ocean.advance` moves the simulation clock forward,
rebuilds the displaced surface and tracks the lowest and highest crest seen.
"""

from __future__ import annotations

import enum

import numpy as np

from .wave import Wave

__all__ = [
    "MESH_RESOLUTION",
    "GRID_LENGTH",
    "AMPLITUDE",
    "WIND_SPEED",
    "WIND_DIRECTION",
    "MODEL_OFFSET",
    "TextureFormat",
    "Ocean",
    "grid_indices",
    "format_from_channels",
]

MESH_RESOLUTION = 320
GRID_LENGTH = 1024.0
AMPLITUDE = 3e-7
WIND_SPEED = 10.0
WIND_DIRECTION = (0.01, 0.0)
MODEL_OFFSET = (0.0, -200.0, 0.0)


class TextureFormat(enum.Enum):
    """Pixel formats a texture may be stored or uploaded in."""

    RED = "RED"
    RG = "RG"
    RGB = "RGB"
    RGBA = "RGBA"
    R16F = "R16F"
    R32F = "R32F"
    RG16F = "RG16F"
    RG32F = "RG32F"
    RGB16F = "RGB16F"
    RGB32F = "RGB32F"
    RGBA16F = "RGBA16F"
    RGBA32F = "RGBA32F"


_PLAIN = {
    1: TextureFormat.RED,
    2: TextureFormat.RG,
    3: TextureFormat.RGB,
    4: TextureFormat.RGBA,
}

_FLOAT = {
    1: (TextureFormat.R16F, TextureFormat.R32F),
    2: (TextureFormat.RG16F, TextureFormat.RG32F),
    3: (TextureFormat.RGB16F, TextureFormat.RGB32F),
    4: (TextureFormat.RGBA16F, TextureFormat.RGBA32F),
}


def format_from_channels(
    channels: int, is_float: bool, half_precision: bool = False
) -> tuple[TextureFormat, TextureFormat]:
    """Return ``(internal_format, pixel_format)`` for a channel count."""
    if channels not in _PLAIN:
        raise ValueError(f"unsupported channel count: {channels}")
    pixel_format = _PLAIN[channels]
    if not is_float:
        return pixel_format, pixel_format
    half, full = _FLOAT[channels]
    return (half if half_precision else full), pixel_format


def grid_indices(n: int, m: int) -> np.ndarray:
    """Return triangle indices covering an ``n`` by ``m`` vertex grid.

    Two triangles are produced per grid cell, six indices in all, with rows
    ``n`` vertices apart.
    """
    if n < 1 or m < 1:
        raise ValueError("grid size must be positive")
    rows, cols = np.meshgrid(np.arange(n - 1), np.arange(m - 1), indexing="ij")
    i = cols.reshape(-1)
    j = rows.reshape(-1)
    here = i + j * n
    right = (i + 1) + j * n
    below = i + (j + 1) * n
    diagonal = (i + 1) + (j + 1) * n
    triangles = np.stack([here, right, below, right, diagonal, below], axis=1)
    return triangles.reshape(-1).astype(np.uint32)


class Ocean:
    """An animated ocean surface of ``resolution`` by ``resolution`` vertices."""

    def __init__(
        self,
        width: int,
        height: int,
        resolution: int = MESH_RESOLUTION,
        seed: int | None = None,
    ) -> None:
        self.width = width
        self.height = height
        self.resolution = resolution
        self.length_x = GRID_LENGTH
        self.length_z = GRID_LENGTH
        self.amplitude = AMPLITUDE
        self.wind_speed = WIND_SPEED
        self.wind_direction = WIND_DIRECTION

        self.height_max = 0.0
        self.height_min = 0.0
        self.last_time = 0.0

        self.wave = Wave(
            resolution,
            resolution,
            self.length_x,
            self.length_z,
            self.wind_direction,
            self.wind_speed,
            self.amplitude,
            1.0,
            seed,
        )
        self.indices = grid_indices(resolution, resolution)

    @property
    def index_count(self) -> int:
        """Number of indices drawn per frame."""
        return len(self.indices)

    @property
    def vertex_data(self) -> np.ndarray:
        """Positions followed by normals, as one float32 array."""
        return np.concatenate(
            [self.wave.height_field.reshape(-1), self.wave.normal_field.reshape(-1)]
        ).astype(np.float32)

    def advance(self, delta_time: float) -> tuple[np.ndarray, np.ndarray]:
        """Move the clock by ``delta_time`` and rebuild the surface.

        Returns the vertex positions and normals, each of shape
        ``(resolution * resolution, 3)``.
        """
        current_time = self.last_time + delta_time
        positions, normals = self.wave.build_field(current_time)
        heights = positions[:, 1]
        if heights.size:
            self.height_max = max(self.height_max, float(heights.max()))
            self.height_min = min(self.height_min, float(heights.min()))
        self.last_time = current_time
        return positions, normals