"""Merging mesh blocks into one connected mesh."""

from __future__ import annotations

import dataclasses
import math
from typing import Iterable

import numpy as np

from .mesh import Mesh

_EPSILON = 1e-6


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _normalized_or_up(normal: np.ndarray) -> np.ndarray:
    length = float(np.linalg.norm(normal))
    if length > _EPSILON:
        return normal / length
    return np.array([0.0, 0.0, 1.0])


def create_connected_mesh(
    meshes: Mesh | Iterable[Mesh],
    approximate_vertex_proximity_threshold: float = 1e-10,
) -> Mesh:
    """Combine meshes into one mesh with shared vertices.

    Vertices that fall in the same cell of a grid with the given spacing are
    merged, their normals averaged, and triangles that lose a vertex to
    merging are dropped.
    """
    if isinstance(meshes, Mesh):
        meshes = [meshes]
    if not approximate_vertex_proximity_threshold > 0.0:
        raise ValueError("the vertex proximity threshold must be positive")
    threshold_inv = 1.0 / approximate_vertex_proximity_threshold

    connected = Mesh()
    uniques: dict[tuple[int, int, int], int] = {}

    for mesh in meshes:
        if not mesh.vertices:
            continue
        num_vertices = len(mesh.vertices)
        if len(mesh.indices) != num_vertices:
            raise ValueError("every vertex must belong to exactly one triangle")
        if num_vertices % 3:
            raise ValueError("vertex count must be a multiple of three")

        old_to_new: list[int] = []
        for old_index, vertex in enumerate(mesh.vertices):
            vertex = np.array(vertex, dtype=float)
            key = tuple(_round_half_away(c * threshold_inv) for c in vertex)
            new_index = uniques.get(key)
            if new_index is None:
                new_index = len(connected.vertices)
                uniques[key] = new_index
                connected.vertices.append(vertex)
                if mesh.has_colors():
                    connected.colors.append(dataclasses.replace(mesh.colors[old_index]))
                if mesh.has_normals():
                    connected.normals.append(np.array(mesh.normals[old_index], dtype=float))
            elif mesh.has_normals():
                connected.normals[new_index] = connected.normals[new_index] + np.asarray(
                    mesh.normals[old_index], dtype=float
                )
            old_to_new.append(new_index)

        connected.normals = [_normalized_or_up(n) for n in connected.normals]

        triangles = zip(*[iter(mesh.indices)] * 3)
        for triangle in triangles:
            if any(not 0 <= index < num_vertices for index in triangle):
                raise ValueError(f"triangle {triangle} refers to a missing vertex")
            remapped = [old_to_new[index] for index in triangle]
            if len(set(remapped)) == 3:
                connected.indices.extend(remapped)

    return connected