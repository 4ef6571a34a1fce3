"""A layer of mesh blocks keyed by integer block index."""

from __future__ import annotations

import dataclasses
import math
from typing import Iterator, Sequence

import numpy as np

from .mesh import Mesh
from .mesh_utils import create_connected_mesh

BlockIndex = tuple[int, int, int]


def _block_index(index: Sequence[int]) -> BlockIndex:
    x, y, z = index
    return (int(x), int(y), int(z))


class MeshLayer:
    """Holds one :class:`Mesh` per allocated block of a regular block grid."""

    def __init__(self, block_size: float) -> None:
        if not block_size > 0.0:
            raise ValueError(f"block size must be positive, not {block_size}")
        self.block_size = float(block_size)
        self.block_size_inv = 1.0 / self.block_size
        self._meshes: dict[BlockIndex, Mesh] = {}

    def __len__(self) -> int:
        return len(self._meshes)

    def __contains__(self, index) -> bool:
        return _block_index(index) in self._meshes

    def __iter__(self) -> Iterator[tuple[BlockIndex, Mesh]]:
        return iter(list(self._meshes.items()))

    def get_mesh(self, index) -> Mesh:
        """The mesh at ``index``; raises KeyError if it is not allocated."""
        key = _block_index(index)
        try:
            return self._meshes[key]
        except KeyError:
            raise KeyError(f"accessed unallocated mesh at {key}") from None

    def find_mesh(self, index) -> Mesh | None:
        """The mesh at ``index``, or None if it is not allocated."""
        return self._meshes.get(_block_index(index))

    def allocate_mesh(self, index) -> Mesh:
        """The mesh at ``index``, allocating a new one if needed."""
        existing = self.find_mesh(index)
        if existing is not None:
            return existing
        return self.allocate_new_block(index)

    def get_mesh_by_coordinates(self, coords) -> Mesh | None:
        """The mesh of the block containing ``coords``, or None."""
        return self.find_mesh(self.block_index_from_coordinates(coords))

    def allocate_mesh_by_coordinates(self, coords) -> Mesh:
        """The mesh of the block containing ``coords``, allocating it if needed."""
        return self.allocate_mesh(self.block_index_from_coordinates(coords))

    def block_index_from_coordinates(self, coords) -> BlockIndex:
        """Index of the block that contains the point ``coords``."""
        x, y, z = (float(c) for c in coords)
        return (
            math.floor(x * self.block_size_inv),
            math.floor(y * self.block_size_inv),
            math.floor(z * self.block_size_inv),
        )

    def allocate_new_block(self, index) -> Mesh:
        """Create a mesh at ``index``; raises ValueError if one exists."""
        key = _block_index(index)
        if key in self._meshes:
            raise ValueError(f"mesh already exists when allocating at {key}")
        mesh = Mesh(
            block_size=self.block_size,
            origin=np.array(key, dtype=float) * self.block_size,
        )
        self._meshes[key] = mesh
        return mesh

    def allocate_new_block_by_coordinates(self, coords) -> Mesh:
        return self.allocate_new_block(self.block_index_from_coordinates(coords))

    def remove_mesh(self, index) -> None:
        """Drop the mesh at ``index`` if there is one."""
        self._meshes.pop(_block_index(index), None)

    def remove_mesh_by_coordinates(self, coords) -> None:
        self.remove_mesh(self.block_index_from_coordinates(coords))

    def clear_distant_mesh(self, center, max_distance: float) -> None:
        """Empty meshes whose origin lies farther than ``max_distance`` from ``center``.

        The meshes stay allocated and are marked updated so that the emptied
        state can be passed on.
        """
        center = np.asarray(center, dtype=float)
        limit = max_distance * max_distance
        for mesh in self._meshes.values():
            offset = mesh.origin - center
            if float(offset @ offset) > limit:
                mesh.clear()
                mesh.updated = True

    def allocated_indices(self) -> list[BlockIndex]:
        return list(self._meshes)

    def updated_indices(self) -> list[BlockIndex]:
        return [index for index, mesh in self._meshes.items() if mesh.updated]

    def combined_mesh(self) -> Mesh:
        """All meshes joined into one; vertices stay distinct per triangle."""
        meshes = list(self._meshes.values())
        first = next((m for m in meshes if m.vertices), None)
        has_colors = first.has_colors() if first else False
        has_normals = first.has_normals() if first else False
        has_indices = first.has_triangles() if first else False

        combined = Mesh()
        for mesh in meshes:
            if not mesh.vertices:
                continue
            if (
                mesh.has_colors() != has_colors
                or mesh.has_normals() != has_normals
                or mesh.has_triangles() != has_indices
            ):
                raise ValueError("meshes disagree on colors, normals or triangles")
            if len(mesh.vertices) % 3:
                raise ValueError("vertex count must be a multiple of three")
            start = len(combined.vertices)
            combined.vertices.extend(np.array(v, dtype=float) for v in mesh.vertices)
            if has_colors:
                combined.colors.extend(
                    dataclasses.replace(c) for c in mesh.colors[: len(mesh.vertices)]
                )
            if has_normals:
                combined.normals.extend(
                    np.array(n, dtype=float) for n in mesh.normals[: len(mesh.vertices)]
                )
            if has_indices:
                combined.indices.extend(range(start, start + len(mesh.vertices)))

        if combined.has_colors() and len(combined.colors) != len(combined.vertices):
            raise ValueError("combined mesh has a color count unlike its vertex count")
        if combined.has_normals() and len(combined.normals) != len(combined.vertices):
            raise ValueError("combined mesh has a normal count unlike its vertex count")
        if len(combined.indices) != len(combined.vertices):
            raise ValueError("combined mesh needs triangle indices for every vertex")
        return combined

    def connected_mesh(self, approximate_vertex_proximity_threshold: float = 1e-10) -> Mesh:
        """All meshes joined with close vertices merged and degenerate triangles dropped."""
        return create_connected_mesh(
            list(self._meshes.values()), approximate_vertex_proximity_threshold
        )

    def clear(self) -> None:
        """Delete every mesh."""
        self._meshes.clear()