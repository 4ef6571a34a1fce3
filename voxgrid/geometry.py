"""Rigid-body rotations and transformations in 3D."""

from __future__ import annotations

import math

import numpy as np

_ANTIPARALLEL_EPSILON = 1e-6


def _vector(value) -> np.ndarray:
    vec = np.asarray(value, dtype=float).reshape(-1)
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-vector, got shape {vec.shape}")
    return vec


def _any_perpendicular(vec: np.ndarray) -> np.ndarray:
    axis = np.cross(vec, np.array([1.0, 0.0, 0.0]))
    if np.linalg.norm(axis) < 1e-6:
        axis = np.cross(vec, np.array([0.0, 1.0, 0.0]))
    return axis / np.linalg.norm(axis)


class Rotation:
    """A 3D rotation stored as a unit quaternion ``(w, x, y, z)``."""

    def __init__(self, w: float = 1.0, x: float = 0.0, y: float = 0.0, z: float = 0.0) -> None:
        quat = np.array([w, x, y, z], dtype=float)
        norm = float(np.linalg.norm(quat))
        if not norm > 0.0:
            raise ValueError("a rotation quaternion must not be zero")
        self.quaternion = quat / norm

    def __repr__(self) -> str:
        w, x, y, z = self.quaternion
        return f"Rotation(w={w:.6g}, x={x:.6g}, y={y:.6g}, z={z:.6g})"

    @classmethod
    def from_axis_angle(cls, axis, angle: float) -> "Rotation":
        """Rotation by ``angle`` radians about ``axis``."""
        axis = _vector(axis)
        norm = float(np.linalg.norm(axis))
        if not norm > 0.0:
            raise ValueError("rotation axis must not be zero")
        axis = axis / norm
        half = angle / 2.0
        return cls(math.cos(half), *(axis * math.sin(half)))

    @classmethod
    def from_two_vectors(cls, source, target) -> "Rotation":
        """The shortest rotation that turns the direction of ``source`` into that of ``target``."""
        v0 = _vector(source)
        v1 = _vector(target)
        n0 = float(np.linalg.norm(v0))
        n1 = float(np.linalg.norm(v1))
        if not (n0 > 0.0 and n1 > 0.0):
            raise ValueError("cannot rotate between zero vectors")
        v0 = v0 / n0
        v1 = v1 / n1
        c = float(np.dot(v1, v0))
        if c < -1.0 + _ANTIPARALLEL_EPSILON:
            c = max(c, -1.0)
            axis = _any_perpendicular(v0)
            w2 = (1.0 + c) * 0.5
            return cls(math.sqrt(w2), *(axis * math.sqrt(1.0 - w2)))
        axis = np.cross(v0, v1)
        s = math.sqrt((1.0 + c) * 2.0)
        return cls(s * 0.5, *(axis / s))

    def matrix(self) -> np.ndarray:
        """The 3x3 rotation matrix."""
        w, x, y, z = self.quaternion
        return np.array(
            [
                [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
                [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
                [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
            ]
        )

    def rotate(self, vector) -> np.ndarray:
        """Apply the rotation to a 3-vector."""
        return self.matrix() @ _vector(vector)

    def inverse(self) -> "Rotation":
        w, x, y, z = self.quaternion
        return Rotation(w, -x, -y, -z)

    def __mul__(self, other: "Rotation") -> "Rotation":
        if not isinstance(other, Rotation):
            return NotImplemented
        w1, x1, y1, z1 = self.quaternion
        w2, x2, y2, z2 = other.quaternion
        return Rotation(
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
        )


class Transformation:
    """A rotation followed by a translation."""

    def __init__(self, rotation: Rotation | None = None, position=None) -> None:
        self.rotation = Rotation() if rotation is None else rotation
        self.position = np.zeros(3) if position is None else _vector(position).copy()

    def __repr__(self) -> str:
        return f"Transformation({self.rotation!r}, position={self.position.tolist()})"

    def transform(self, point) -> np.ndarray:
        """Map a point from the source frame into the target frame."""
        return self.rotation.rotate(point) + self.position

    def compose(self, other: "Transformation") -> "Transformation":
        """The transformation that applies ``other`` first, then this one."""
        return Transformation(
            self.rotation * other.rotation,
            self.rotation.rotate(other.position) + self.position,
        )

    def inverse(self) -> "Transformation":
        inv_rotation = self.rotation.inverse()
        return Transformation(inv_rotation, -inv_rotation.rotate(self.position))

    def __mul__(self, other):
        if isinstance(other, Transformation):
            return self.compose(other)
        return NotImplemented