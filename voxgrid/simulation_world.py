"""A simulated world of objects that can be ray cast into point clouds."""

from __future__ import annotations

import abc
import logging
import math

import numpy as np

from .geometry import Rotation, Transformation
from .voxels import Color

logger = logging.getLogger(__name__)


class SimulationObject(abc.ABC):
    """A shape in the simulated world with a color."""

    def __init__(self, center, color: Color | None = None) -> None:
        self.center = np.asarray(center, dtype=float).reshape(3)
        self.color = Color() if color is None else color

    @abc.abstractmethod
    def distance_to_point(self, point) -> float:
        """Signed distance from ``point`` to the surface."""

    @abc.abstractmethod
    def ray_intersection(self, ray_origin, ray_direction, max_dist: float):
        """``(intersection_point, distance)`` of the first hit within ``max_dist``, or None."""


def _resolution(camera_res) -> tuple[int, int]:
    width, height = (int(r) for r in camera_res)
    if width <= 0 or height <= 0:
        raise ValueError(f"camera resolution must be positive, not {camera_res}")
    return width, height


class SimulationWorld:
    """A collection of objects with bounds and a seeded noise generator."""

    def __init__(self) -> None:
        self.objects: list[SimulationObject] = []
        self.min_bound = np.array([-5.0, -5.0, -1.0])
        self.max_bound = np.array([5.0, 5.0, 9.0])
        self._rng = np.random.default_rng(0)

    def set_bounds(self, min_bound, max_bound) -> None:
        self.min_bound = np.asarray(min_bound, dtype=float).reshape(3)
        self.max_bound = np.asarray(max_bound, dtype=float).reshape(3)

    def add_object(self, obj: SimulationObject) -> None:
        self.objects.append(obj)

    def clear(self) -> None:
        self.objects.clear()

    def distance_to_point(self, coords, max_dist: float) -> float:
        """Smallest object distance to ``coords``, capped at ``max_dist``."""
        return min(
            (obj.distance_to_point(coords) for obj in self.objects),
            default=max_dist,
            key=float,
        ) if self.objects and min(o.distance_to_point(coords) for o in self.objects) < max_dist else max_dist

    def _cast_rays(self, view_origin, view_direction, camera_res, fov_h_rad, max_dist):
        """Yield ``(direction, distance, intersection, color)`` of every valid hit."""
        width, height = _resolution(camera_res)
        origin = np.asarray(view_origin, dtype=float).reshape(3)
        focal_length = width / (2.0 * math.tan(fov_h_rad / 2.0))
        ray_rotation = Rotation.from_two_vectors([1.0, 0.0, 0.0], view_direction)

        for u in range(-(width // 2), width // 2):
            for v in range(-(height // 2), height // 2):
                camera_dir = np.array([1.0, u / focal_length, v / focal_length])
                direction = ray_rotation.rotate(camera_dir / np.linalg.norm(camera_dir))
                best = None
                for obj in self.objects:
                    hit = obj.ray_intersection(origin, direction, max_dist)
                    if hit is None:
                        continue
                    point, dist = hit
                    if best is None or dist < best[0]:
                        best = (dist, np.asarray(point, dtype=float), obj.color)
                if best is None:
                    continue
                dist, point, color = best
                if np.isnan(point).any():
                    logger.error("Simulation ray intersect is NaN!")
                    continue
                yield direction, dist, point, color

    @staticmethod
    def _as_cloud(points: list[np.ndarray]) -> np.ndarray:
        return np.array(points, dtype=float).reshape(-1, 3)

    def pointcloud_from_transform(self, pose: Transformation, camera_res, fov_h_rad, max_dist):
        """Point cloud seen from a pose whose +x axis is the view direction."""
        view_direction = pose.rotation.rotate([1.0, 0.0, 0.0])
        return self.pointcloud_from_viewpoint(
            pose.position, view_direction, camera_res, fov_h_rad, max_dist
        )

    def pointcloud_from_viewpoint(
        self, view_origin, view_direction, camera_res, fov_h_rad, max_dist
    ) -> tuple[np.ndarray, list[Color]]:
        """Ray cast one ray per pixel; return an (N, 3) point array and the hit colors."""
        points: list[np.ndarray] = []
        colors: list[Color] = []
        for _, _, point, color in self._cast_rays(
            view_origin, view_direction, camera_res, fov_h_rad, max_dist
        ):
            points.append(point)
            colors.append(color)
        return self._as_cloud(points), colors

    def noisy_pointcloud_from_transform(
        self, pose: Transformation, camera_res, fov_h_rad, max_dist, noise_sigma
    ):
        """Noisy point cloud seen from a pose whose +z axis is the view direction."""
        view_direction = pose.rotation.rotate([0.0, 0.0, 1.0])
        return self.noisy_pointcloud_from_viewpoint(
            pose.position, view_direction, camera_res, fov_h_rad, max_dist, noise_sigma
        )

    def noisy_pointcloud_from_viewpoint(
        self, view_origin, view_direction, camera_res, fov_h_rad, max_dist, noise_sigma
    ) -> tuple[np.ndarray, list[Color]]:
        """Like :meth:`pointcloud_from_viewpoint` with Gaussian noise along each ray."""
        origin = np.asarray(view_origin, dtype=float).reshape(3)
        points: list[np.ndarray] = []
        colors: list[Color] = []
        for direction, dist, _, color in self._cast_rays(
            origin, view_direction, camera_res, fov_h_rad, max_dist
        ):
            dist = max(dist + self.noise(noise_sigma), 0.0)
            points.append(origin + dist * direction)
            colors.append(color)
        return self._as_cloud(points), colors

    def noise(self, noise_sigma: float) -> float:
        """One sample of zero-mean Gaussian noise."""
        if noise_sigma < 0.0:
            raise ValueError(f"noise sigma must not be negative, not {noise_sigma}")
        return float(self._rng.normal(0.0, noise_sigma))