"""A frustum camera model for checking whether points are in view."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np

from .geometry import Transformation

logger = logging.getLogger(__name__)


@dataclass
class Plane:
    """A plane ``normal . x = distance``; the inside is where ``normal . x >= distance``."""

    normal: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 1.0]))
    distance: float = 0.0

    def __post_init__(self) -> None:
        self.normal = np.asarray(self.normal, dtype=float).reshape(3)
        self.distance = float(self.distance)

    @classmethod
    def from_points(cls, p1, p2, p3) -> "Plane":
        """Plane through three points, its normal along (p2 - p1) x (p3 - p1)."""
        p1 = np.asarray(p1, dtype=float)
        cross = np.cross(np.asarray(p2, dtype=float) - p1, np.asarray(p3, dtype=float) - p1)
        length = float(np.linalg.norm(cross))
        if not length > 0.0:
            raise ValueError("points are collinear and do not define a plane")
        normal = cross / length
        return cls(normal, float(normal @ p1))

    def is_point_inside(self, point) -> bool:
        point = np.asarray(point, dtype=float)
        logger.debug("plane normal %s distance %s point %s", self.normal, self.distance, point)
        return float(point @ self.normal) >= self.distance


class CameraModel:
    """Camera frustum looking along +x in its own frame."""

    def __init__(self) -> None:
        self._corners_c: list[np.ndarray] = []
        self._initialized = False
        self._t_c_b = Transformation()
        self._t_g_c = Transformation()
        self._bounding_planes: list[Plane] = []
        self._aabb_min = np.zeros(3)
        self._aabb_max = np.zeros(3)

    def set_intrinsics_from_focal_length(
        self, resolution, focal_length: float, min_distance: float, max_distance: float
    ) -> None:
        """Set the frustum from an image resolution ``(width, height)`` and focal length."""
        width, height = (float(r) for r in resolution)
        horizontal_fov = 2.0 * math.atan(width / (2.0 * focal_length))
        vertical_fov = 2.0 * math.atan(height / (2.0 * focal_length))
        self.set_intrinsics_from_fov(horizontal_fov, vertical_fov, min_distance, max_distance)

    def set_intrinsics_from_fov(
        self, horizontal_fov: float, vertical_fov: float, min_distance: float, max_distance: float
    ) -> None:
        """Set the frustum from fields of view in radians and near/far distances."""
        tan_h = math.tan(horizontal_fov / 2.0)
        tan_v = math.tan(vertical_fov / 2.0)
        corners = []
        for d in (min_distance, max_distance):
            corners.extend(
                np.array([d, sh * d * tan_h, sv * d * tan_v])
                for sh, sv in ((1, 1), (1, -1), (-1, -1), (-1, 1))
            )
        self._corners_c = corners
        self._initialized = True

    def set_extrinsics(self, T_C_B: Transformation) -> None:
        """Set the transformation from body frame to camera frame."""
        self._t_c_b = T_C_B

    def camera_pose(self) -> Transformation:
        return self._t_g_c

    def body_pose(self) -> Transformation:
        return self._t_g_c * self._t_c_b

    def set_camera_pose(self, cam_pose: Transformation) -> None:
        self._t_g_c = cam_pose
        self._update_bounding_planes()

    def set_body_pose(self, body_pose: Transformation) -> None:
        self.set_camera_pose(body_pose * self._t_c_b.inverse())

    def _corners_global(self) -> list[np.ndarray]:
        return [self._t_g_c.transform(c) for c in self._corners_c]

    def _update_bounding_planes(self) -> None:
        if not self._initialized:
            return
        g = self._corners_global()
        self._bounding_planes = [
            Plane.from_points(g[0], g[2], g[1]),  # near
            Plane.from_points(g[4], g[5], g[6]),  # far
            Plane.from_points(g[3], g[6], g[2]),  # left
            Plane.from_points(g[0], g[5], g[4]),  # right
            Plane.from_points(g[3], g[4], g[7]),  # top
            Plane.from_points(g[2], g[6], g[5]),  # bottom
        ]
        stacked = np.vstack(g)
        self._aabb_min = stacked.min(axis=0)
        self._aabb_max = stacked.max(axis=0)
        logger.debug("AABB min %s max %s", self._aabb_min, self._aabb_max)

    def aabb(self) -> tuple[np.ndarray, np.ndarray]:
        """Axis-aligned bounding box ``(min, max)`` of the frustum at the current pose."""
        return self._aabb_min.copy(), self._aabb_max.copy()

    def is_point_in_view(self, point) -> bool:
        """Whether a point lies inside all bounding planes of the frustum."""
        return all(plane.is_point_inside(point) for plane in self._bounding_planes)

    def _require_intrinsics(self) -> None:
        if not self._initialized:
            raise RuntimeError("camera intrinsics have not been set")

    def bounding_lines(self) -> list[np.ndarray]:
        """The 12 frustum edges as 24 points, two per line."""
        self._require_intrinsics()
        g = self._corners_global()
        pairs = (
            (0, 1), (1, 2), (2, 3), (3, 0),
            (4, 5), (5, 6), (6, 7), (7, 4),
            (0, 4), (1, 5), (3, 7), (2, 6),
        )
        return [g[i].copy() for pair in pairs for i in pair]

    def far_plane_points(self) -> list[np.ndarray]:
        """Three corners of the far plane in the global frame."""
        self._require_intrinsics()
        return [self._t_g_c.transform(self._corners_c[i]) for i in (4, 5, 6)]