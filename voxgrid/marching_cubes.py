"""Marching cubes on a single cube of eight signed-distance samples.

Corners are given as an (8, 3) array of coordinates, one row per corner,
with signed distances in the same order.
"""

from __future__ import annotations

import numpy as np

from .cube_tables import NUM_EDGES, edge_corners, triangle_edges
from .mesh import Mesh

_MIN_SDF_DIFFERENCE = 1e-6


def _corner_coords(vertex_coords) -> np.ndarray:
    coords = np.asarray(vertex_coords, dtype=float)
    if coords.shape != (8, 3):
        raise ValueError(f"expected 8 corner coordinates of shape (8, 3), got {coords.shape}")
    return coords


def _corner_sdf(vertex_sdf) -> np.ndarray:
    sdf = np.asarray(vertex_sdf, dtype=float)
    if sdf.shape != (8,):
        raise ValueError(f"expected 8 signed distances, got shape {sdf.shape}")
    return sdf


def calculate_vertex_configuration(vertex_sdf) -> int:
    """Bit mask with bit ``i`` set for each corner with negative distance."""
    sdf = _corner_sdf(vertex_sdf)
    return sum(1 << corner for corner, value in enumerate(sdf) if value < 0)


def interpolate_vertex(vertex1, vertex2, sdf1: float, sdf2: float) -> np.ndarray:
    """Approximate zero crossing between two corners by linear interpolation."""
    v1 = np.asarray(vertex1, dtype=float)
    v2 = np.asarray(vertex2, dtype=float)
    sdf_diff = sdf1 - sdf2
    if abs(sdf_diff) >= _MIN_SDF_DIFFERENCE:
        t = sdf1 / sdf_diff
        return v1 + t * (v2 - v1)
    return 0.5 * (v1 + v2)


def interpolate_edge_vertices(vertex_coords, vertex_sdf) -> np.ndarray:
    """Zero crossings on the 12 cube edges; rows of edges without one are NaN."""
    coords = _corner_coords(vertex_coords)
    sdf = _corner_sdf(vertex_sdf)
    edge_coords = np.full((NUM_EDGES, 3), np.nan)
    for edge in range(NUM_EDGES):
        a, b = edge_corners(edge)
        if (sdf[a] < 0) != (sdf[b] < 0):
            edge_coords[edge] = interpolate_vertex(coords[a], coords[b], sdf[a], sdf[b])
    return edge_coords


def mesh_cube_triangles(vertex_coords, vertex_sdf) -> list[np.ndarray]:
    """Triangles of the cube, each a (3, 3) array with one vertex per row."""
    configuration = calculate_vertex_configuration(vertex_sdf)
    edge_coords = interpolate_edge_vertices(vertex_coords, vertex_sdf)
    return [edge_coords[list(edges)] for edges in triangle_edges(configuration)]


def _normalized(vector: np.ndarray) -> np.ndarray:
    length = float(np.linalg.norm(vector))
    return vector / length if length > 0.0 else vector


def mesh_cube(vertex_coords, vertex_sdf, next_index: int, mesh: Mesh) -> int:
    """Append the cube's triangles to ``mesh``; return the next free vertex index.

    Each triangle gets three fresh vertices, in reverse table order, sharing
    one face normal.
    """
    configuration = calculate_vertex_configuration(vertex_sdf)
    if configuration == 0:
        return next_index

    edge_coords = interpolate_edge_vertices(vertex_coords, vertex_sdf)
    for e0, e1, e2 in triangle_edges(configuration):
        p0, p1, p2 = (edge_coords[e].copy() for e in (e2, e1, e0))
        mesh.vertices.extend((p0, p1, p2))
        mesh.indices.extend((next_index, next_index + 1, next_index + 2))
        normal = _normalized(np.cross(p1 - p0, p2 - p0))
        mesh.normals.extend(normal.copy() for _ in range(3))
        next_index += 3
    return next_index