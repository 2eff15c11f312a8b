"""A registry of named shader sources and volume textures.

Resources are loaded once under a name and handed back from the cache on
later requests for that name.
"""

from __future__ import annotations

from dataclasses import dataclass
from os import PathLike
from pathlib import Path

import numpy as np

__all__ = [
    "SHADER_PREFIX",
    "TEXTURE_PREFIX",
    "MODEL_PREFIX",
    "ShaderSources",
    "Volume",
    "ResourceManager",
    "read_shader_sources",
    "load_ex5",
]

SHADER_PREFIX = "../shaders"
TEXTURE_PREFIX = "../textures"
MODEL_PREFIX = "../models"

PathArg = "str | PathLike[str] | None"


@dataclass(frozen=True)
class ShaderSources:
    """Source text of a shader program; absent stages are ``None``."""

    vertex: str
    fragment: str | None = None
    geometry: str | None = None


@dataclass
class Volume:
    """An RGBA volume texture with ``data`` of shape (depth, height, width, 4)."""

    width: int
    height: int
    depth: int
    data: np.ndarray


def _read_optional(path: str | PathLike[str] | None) -> str | None:
    if path is None or str(path) == "":
        return None
    return Path(path).read_text()


def read_shader_sources(
    vertex_path: str | PathLike[str],
    fragment_path: str | PathLike[str] | None = None,
    geometry_path: str | PathLike[str] | None = None,
) -> ShaderSources:
    """Read the source of each shader stage; empty or missing paths are skipped."""
    return ShaderSources(
        vertex=Path(vertex_path).read_text(),
        fragment=_read_optional(fragment_path),
        geometry=_read_optional(geometry_path),
    )


def load_ex5(path: str | PathLike[str]) -> Volume:
    """Load a .ex5 volume: a width, height and depth, then one integer per voxel.

    Each voxel integer packs four bytes, most significant first. Reading
    stops at the first token that is not an integer; voxels not given are
    left zero.
    """
    tokens = Path(path).read_text().split()
    try:
        width, height, depth = (int(token) for token in tokens[:3])
    except ValueError as exc:
        raise ValueError(f"{path}: malformed .ex5 header") from exc
    if len(tokens) < 3 or min(width, height, depth) < 0:
        raise ValueError(f"{path}: malformed .ex5 header")

    voxels: list[int] = []
    for token in tokens[3:]:
        try:
            voxels.append(int(token) & 0xFFFFFFFF)
        except ValueError:
            break

    total = width * height * depth
    if len(voxels) > total:
        raise ValueError(f"{path}: {len(voxels)} voxels given for a volume of {total}")
    packed = np.zeros(total, dtype=">u4")
    packed[: len(voxels)] = voxels
    data = packed.view(np.uint8).reshape(depth, height, width, 4).copy()
    return Volume(width, height, depth, data)


class ResourceManager:
    """Caches shader sources and volumes under names."""

    def __init__(self) -> None:
        self.shaders: dict[str, ShaderSources] = {}
        self.volumes: dict[str, Volume] = {}

    def load_shader(
        self,
        name: str,
        vertex_path: str | PathLike[str],
        fragment_path: str | PathLike[str] | None = None,
        geometry_path: str | PathLike[str] | None = None,
    ) -> ShaderSources:
        """Load a shader under ``name``, or return the one already stored."""
        if name not in self.shaders:
            self.shaders[name] = read_shader_sources(
                vertex_path, fragment_path, geometry_path
            )
        return self.shaders[name]

    def get_shader(self, name: str) -> ShaderSources:
        """Return a stored shader; raises KeyError if none has that name."""
        return self.shaders[name]

    def load_volume(self, path: str | PathLike[str], name: str) -> Volume:
        """Load a .ex5 volume under ``name``, or return the one already stored."""
        if name not in self.volumes:
            self.volumes[name] = load_ex5(path)
        return self.volumes[name]

    def get_volume(self, name: str) -> Volume:
        """Return a stored volume; raises KeyError if none has that name."""
        return self.volumes[name]

    def clear(self) -> None:
        """Drop every stored resource."""
        self.shaders.clear()
        self.volumes.clear()