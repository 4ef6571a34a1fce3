import math

import numpy as np
import pytest

from voxgrid.camera_model import CameraModel, Plane
from voxgrid.geometry import Rotation, Transformation


def _camera(pose=None):
    cam = CameraModel()
    cam.set_intrinsics_from_fov(math.pi / 2, math.pi / 2, 1.0, 10.0)
    cam.set_camera_pose(pose or Transformation())
    return cam


def test_plane_from_points_contains_points():
    pts = [np.array([1.0, 0, 0]), np.array([0, 1.0, 0]), np.array([0, 0, 1.0])]
    plane = Plane.from_points(*pts)
    for p in pts:
        assert math.isclose(float(plane.normal @ p), plane.distance)
    assert math.isclose(np.linalg.norm(plane.normal), 1.0)


def test_plane_inside_side():
    plane = Plane([0, 0, 1], 2.0)
    assert plane.is_point_inside([0, 0, 3])
    assert plane.is_point_inside([5, 5, 2])
    assert not plane.is_point_inside([0, 0, 1])


def test_plane_from_collinear_points_rejected():
    with pytest.raises(ValueError):
        Plane.from_points([0, 0, 0], [1, 1, 1], [2, 2, 2])


def test_points_in_and_out_of_view():
    cam = _camera()
    assert cam.is_point_in_view([5.0, 0.0, 0.0])
    assert cam.is_point_in_view([5.0, 4.0, -4.0])
    assert not cam.is_point_in_view([0.5, 0.0, 0.0])
    assert not cam.is_point_in_view([11.0, 0.0, 0.0])
    assert not cam.is_point_in_view([5.0, 6.0, 0.0])
    assert not cam.is_point_in_view([-5.0, 0.0, 0.0])


def test_view_follows_pose():
    pose = Transformation(Rotation.from_two_vectors([1, 0, 0], [0, 1, 0]), [0, 0, 3])
    cam = _camera(pose)
    assert cam.is_point_in_view([0.0, 5.0, 3.0])
    assert not cam.is_point_in_view([5.0, 0.0, 3.0])


def test_aabb_encloses_bounding_lines():
    pose = Transformation(Rotation.from_axis_angle([0, 0, 1], 0.6), [1, -2, 0.5])
    cam = _camera(pose)
    lo, hi = cam.aabb()
    lines = cam.bounding_lines()
    assert len(lines) == 24
    for p in lines:
        assert np.all(p >= lo - 1e-9) and np.all(p <= hi + 1e-9)
    stacked = np.vstack(lines)
    assert np.allclose(stacked.min(axis=0), lo)
    assert np.allclose(stacked.max(axis=0), hi)


def test_far_plane_points_lie_at_max_distance():
    cam = _camera()
    pts = cam.far_plane_points()
    assert len(pts) == 3
    assert all(math.isclose(p[0], 10.0) for p in pts)


def test_focal_length_matches_equivalent_fov():
    by_focal = CameraModel()
    by_focal.set_intrinsics_from_focal_length([2.0, 2.0], 1.0, 1.0, 10.0)
    by_focal.set_camera_pose(Transformation())
    by_fov = _camera()
    for a, b in zip(by_focal.far_plane_points(), by_fov.far_plane_points()):
        assert np.allclose(a, b)


def test_body_pose_round_trip_with_extrinsics():
    cam = CameraModel()
    cam.set_intrinsics_from_fov(1.0, 0.8, 0.5, 5.0)
    extrinsics = Transformation(Rotation.from_axis_angle([0, 1, 0], 0.3), [0.1, 0, 0.2])
    cam.set_extrinsics(extrinsics)
    body = Transformation(Rotation.from_axis_angle([1, 0, 1], 0.9), [3, 1, -1])
    cam.set_body_pose(body)
    p = np.array([0.4, -0.7, 2.0])
    assert np.allclose(cam.body_pose().transform(p), body.transform(p))
    expected_cam = body * extrinsics.inverse()
    assert np.allclose(cam.camera_pose().transform(p), expected_cam.transform(p))


def test_lines_require_intrinsics():
    with pytest.raises(RuntimeError):
        CameraModel().bounding_lines()