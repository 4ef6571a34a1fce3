"""Triangle mesh holding vertices, normals, colors and triangle indices."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Callable, TypeVar

import numpy as np

from .voxels import Color

INVALID_BLOCK_SIZE = -1.0

_T = TypeVar("_T")


def _resize_list(items: list[_T], size: int, factory: Callable[[], _T]) -> None:
    del items[size:]
    items.extend(factory() for _ in range(size - len(items)))


@dataclass(eq=False)
class Mesh:
    """Vertices, normals, colors and triangle indices of one mesh block.

    Vertices and normals are 3-element float arrays; every three consecutive
    entries of ``indices`` form one triangle.
    """

    block_size: float = INVALID_BLOCK_SIZE
    origin: np.ndarray = field(default_factory=lambda: np.zeros(3))
    vertices: list[np.ndarray] = field(default_factory=list)
    indices: list[int] = field(default_factory=list)
    normals: list[np.ndarray] = field(default_factory=list)
    colors: list[Color] = field(default_factory=list)
    updated: bool = False

    def __post_init__(self) -> None:
        self.origin = np.array(self.origin, dtype=float).reshape(3)
        if self.block_size != INVALID_BLOCK_SIZE and not self.block_size > 0.0:
            raise ValueError(f"block size must be positive, not {self.block_size}")

    def __len__(self) -> int:
        return len(self.vertices)

    def has_vertices(self) -> bool:
        return bool(self.vertices)

    def has_normals(self) -> bool:
        return bool(self.normals)

    def has_colors(self) -> bool:
        return bool(self.colors)

    def has_triangles(self) -> bool:
        return bool(self.indices)

    def clear(self) -> None:
        """Drop all vertices, normals, colors and indices."""
        self.vertices.clear()
        self.normals.clear()
        self.colors.clear()
        self.indices.clear()

    def clear_triangles(self) -> None:
        self.indices.clear()

    def clear_normals(self) -> None:
        self.normals.clear()

    def clear_colors(self) -> None:
        self.colors.clear()

    def resize(
        self,
        size: int,
        has_normals: bool = True,
        has_colors: bool = True,
        has_indices: bool = True,
    ) -> None:
        """Truncate or pad the vertex data to ``size`` entries."""
        if size < 0:
            raise ValueError(f"size must not be negative, not {size}")
        _resize_list(self.vertices, size, lambda: np.zeros(3))
        if has_normals:
            _resize_list(self.normals, size, lambda: np.zeros(3))
        if has_colors:
            _resize_list(self.colors, size, Color)
        if has_indices:
            _resize_list(self.indices, size, int)

    def colorize(self, color: Color) -> None:
        """Give every vertex a copy of ``color``."""
        self.colors = [dataclasses.replace(color) for _ in self.vertices]

    def concatenate(self, other: "Mesh") -> None:
        """Append another mesh, shifting its indices past this mesh's vertices."""
        for what, mine, theirs in (
            ("colors", self.has_colors(), other.has_colors()),
            ("normals", self.has_normals(), other.has_normals()),
            ("triangles", self.has_triangles(), other.has_triangles()),
        ):
            if mine != theirs:
                raise ValueError(f"meshes disagree on whether they have {what}")

        offset = len(self.vertices)
        self.vertices.extend(np.array(v, dtype=float) for v in other.vertices)
        self.colors.extend(dataclasses.replace(c) for c in other.colors)
        self.normals.extend(np.array(n, dtype=float) for n in other.normals)
        self.indices.extend(index + offset for index in other.indices)