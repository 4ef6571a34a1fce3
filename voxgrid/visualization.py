"""Per-voxel visualization predicates and point collection for layer display.

Each predicate takes a voxel and its center coordinate and returns what is
to be shown for it. Color predicates return a :class:`Color` and intensity
predicates a float, or None when the voxel is not shown. Occupancy
predicates return a bool.
"""

from __future__ import annotations

import dataclasses
import math
from typing import Callable, Iterable

import numpy as np

from .voxels import Color, EsdfVoxel, IntensityVoxel, OccupancyVoxel, TsdfVoxel

FLOAT_EPSILON = 1e-6
_MIN_DISPLAY_WEIGHT = 1e-3
_OCCUPANCY_PROBABILITY_THRESHOLD = 0.7


def _plane_index(free_plane_index: int) -> int:
    if isinstance(free_plane_index, bool) or not isinstance(free_plane_index, int):
        raise TypeError("free plane index must be an integer")
    if not 0 <= free_plane_index < 3:
        raise ValueError(f"free plane index must be 0, 1 or 2, not {free_plane_index}")
    return free_plane_index


def _in_slice(coord, free_plane_index: int, free_plane_val: float, voxel_size: float) -> bool:
    value = float(np.asarray(coord, dtype=float)[_plane_index(free_plane_index)])
    return abs(value - free_plane_val) <= voxel_size / 2.0 + FLOAT_EPSILON


def log_odds_from_probability(probability: float) -> float:
    """Log odds ``log(p / (1 - p))`` of a probability strictly between 0 and 1."""
    if not 0.0 < probability < 1.0:
        raise ValueError(f"probability must lie strictly between 0 and 1, not {probability}")
    return math.log(probability / (1.0 - probability))


def tsdf_near_surface_color(voxel: TsdfVoxel, coord, surface_distance: float) -> Color | None:
    """Color of an observed TSDF voxel closer to the surface than ``surface_distance``."""
    if voxel.weight > 0.0 and abs(voxel.distance) < surface_distance:
        return dataclasses.replace(voxel.color)
    return None


def tsdf_color(voxel: TsdfVoxel, coord) -> Color | None:
    """Color of any observed TSDF voxel."""
    if voxel.weight > 0.0:
        return dataclasses.replace(voxel.color)
    return None


def tsdf_distance_intensity(voxel: TsdfVoxel, coord) -> float | None:
    """Distance of a TSDF voxel with a meaningful weight."""
    if voxel.weight > _MIN_DISPLAY_WEIGHT:
        return float(voxel.distance)
    return None


def tsdf_near_surface_intensity(voxel: TsdfVoxel, coord, surface_distance: float) -> float | None:
    """Distance of a weighted TSDF voxel closer to the surface than ``surface_distance``."""
    if voxel.weight > _MIN_DISPLAY_WEIGHT and abs(voxel.distance) < surface_distance:
        return float(voxel.distance)
    return None


def tsdf_slice_intensity(
    voxel: TsdfVoxel, coord, free_plane_index: int, free_plane_val: float, voxel_size: float
) -> float | None:
    """Distance of a weighted TSDF voxel lying in the given axis-aligned slice."""
    if _in_slice(coord, free_plane_index, free_plane_val, voxel_size):
        if voxel.weight > _MIN_DISPLAY_WEIGHT:
            return float(voxel.distance)
    return None


def esdf_distance_intensity(voxel: EsdfVoxel, coord) -> float | None:
    """Distance of an observed ESDF voxel."""
    if voxel.observed:
        return float(voxel.distance)
    return None


def esdf_slice_intensity(
    voxel: EsdfVoxel, coord, free_plane_index: int, free_plane_val: float, voxel_size: float
) -> float | None:
    """Distance of an observed ESDF voxel lying in the given axis-aligned slice."""
    if _in_slice(coord, free_plane_index, free_plane_val, voxel_size):
        if voxel.observed:
            return float(voxel.distance)
    return None


def esdf_free_intensity(voxel: EsdfVoxel, coord, min_distance: float) -> float | None:
    """Distance of an observed ESDF voxel at least ``min_distance`` from obstacles."""
    if voxel.observed and voxel.distance >= min_distance:
        return float(voxel.distance)
    return None


def intensity_voxel_intensity(voxel: IntensityVoxel, coord) -> float | None:
    """Intensity of an intensity voxel with a meaningful weight."""
    if voxel.weight > _MIN_DISPLAY_WEIGHT:
        return float(voxel.intensity)
    return None


def tsdf_occupied(voxel: TsdfVoxel, coord, min_distance: float = 0.0) -> bool:
    """Whether a weighted TSDF voxel is at or inside ``min_distance`` of the surface."""
    return voxel.weight > _MIN_DISPLAY_WEIGHT and voxel.distance <= min_distance


def occupancy_occupied(voxel: OccupancyVoxel, coord) -> bool:
    """Whether an occupancy voxel's probability exceeds the occupied threshold."""
    return voxel.probability_log > log_odds_from_probability(_OCCUPANCY_PROBABILITY_THRESHOLD)


def adjust_slice_level(free_plane_val: float, voxel_size: float) -> float:
    """Push a slice level off a voxel boundary so that it falls inside one slice."""
    if not voxel_size > 0.0:
        raise ValueError(f"voxel size must be positive, not {voxel_size}")
    if math.remainder(free_plane_val, voxel_size) < FLOAT_EPSILON:
        return free_plane_val + voxel_size / 2.0
    return free_plane_val


def collect_points(
    samples: Iterable[tuple[object, object]],
    visualize: Callable[[object, np.ndarray], object],
) -> list[tuple[np.ndarray, object]]:
    """Apply ``visualize`` to ``(voxel, coord)`` pairs and keep the shown ones.

    Returns ``(coord, value)`` pairs for every voxel whose result is neither
    None nor False.
    """
    points = []
    for voxel, coord in samples:
        coord = np.asarray(coord, dtype=float).reshape(3)
        result = visualize(voxel, coord)
        if result is None or result is False:
            continue
        points.append((coord, result))
    return points