"""Neighbourhood offsets and distances on a 3D voxel grid."""

from __future__ import annotations

import math
from typing import Sequence

_SQRT_2 = math.sqrt(2.0)
_SQRT_3 = math.sqrt(3.0)

OFFSETS: tuple[tuple[int, int, int], ...] = (
    # Faces.
    (-1, 0, 0), (1, 0, 0), (0, -1, 0), (0, 1, 0), (0, 0, -1), (0, 0, 1),
    # Edges.
    (-1, -1, 0), (-1, 1, 0), (1, -1, 0), (1, 1, 0),
    (0, -1, -1), (0, -1, 1), (0, 1, -1), (0, 1, 1),
    (-1, 0, -1), (1, 0, -1), (-1, 0, 1), (1, 0, 1),
    # Corners.
    (-1, -1, -1), (-1, -1, 1), (-1, 1, -1), (-1, 1, 1),
    (1, -1, -1), (1, -1, 1), (1, 1, -1), (1, 1, 1),
)

DISTANCES: tuple[float, ...] = (1.0,) * 6 + (_SQRT_2,) * 12 + (_SQRT_3,) * 8

_CONNECTIVITIES = (6, 18, 26)


def neighbors(index: Sequence[int], connectivity: int = 26) -> list[tuple[tuple[int, int, int], float]]:
    """Neighbouring indices of ``index`` and their distances, faces first."""
    if connectivity not in _CONNECTIVITIES:
        raise ValueError(f"connectivity must be one of {_CONNECTIVITIES}, not {connectivity}")
    x, y, z = index
    return [
        ((x + dx, y + dy, z + dz), distance)
        for (dx, dy, dz), distance in zip(OFFSETS[:connectivity], DISTANCES[:connectivity])
    ]