import math

import numpy as np
import pytest

from voxgrid.geometry import Rotation, Transformation
from voxgrid.simulation_world import SimulationObject, SimulationWorld
from voxgrid.voxels import Color


class _Ball(SimulationObject):
    def __init__(self, center, radius, color=None):
        super().__init__(center, color)
        self.radius = radius

    def distance_to_point(self, point):
        return float(np.linalg.norm(np.asarray(point, float) - self.center)) - self.radius

    def ray_intersection(self, ray_origin, ray_direction, max_dist):
        o = np.asarray(ray_origin, float)
        d = np.asarray(ray_direction, float)
        oc = o - self.center
        b = float(oc @ d)
        c = float(oc @ oc) - self.radius**2
        disc = b * b - c
        if disc < 0:
            return None
        root = math.sqrt(disc)
        t = -b - root
        if t < 0:
            t = -b + root
        if t < 0 or t > max_dist:
            return None
        return o + t * d, t


RED = Color(255, 0, 0, 255)
BLUE = Color(0, 0, 255, 255)


def _world():
    world = SimulationWorld()
    world.add_object(_Ball([5, 0, 0], 1.0, RED))
    return world


def test_empty_world_distance_is_max():
    assert SimulationWorld().distance_to_point([0, 0, 0], 7.5) == 7.5


def test_distance_is_nearest_object():
    world = _world()
    world.add_object(_Ball([0, 3, 0], 0.5, BLUE))
    assert math.isclose(world.distance_to_point([0, 0, 0], 10.0), 2.5)
    assert world.distance_to_point([0, 0, 0], 1.0) == 1.0


def test_clear_removes_objects():
    world = _world()
    world.clear()
    points, colors = world.pointcloud_from_viewpoint([0, 0, 0], [1, 0, 0], (8, 8), 1.0, 20.0)
    assert points.shape == (0, 3)
    assert colors == []


def test_points_lie_on_sphere_surface():
    world = _world()
    points, colors = world.pointcloud_from_viewpoint([0, 0, 0], [1, 0, 0], (8, 6), 0.5, 20.0)
    assert len(points) == len(colors) > 0
    dists = np.linalg.norm(points - np.array([5.0, 0, 0]), axis=1)
    assert np.allclose(dists, 1.0)
    assert all(c == RED for c in colors)


def test_looking_away_sees_nothing():
    points, _ = _world().pointcloud_from_viewpoint([0, 0, 0], [-1, 0, 0], (8, 8), 0.5, 20.0)
    assert len(points) == 0


def test_max_distance_limits_hits():
    points, _ = _world().pointcloud_from_viewpoint([0, 0, 0], [1, 0, 0], (8, 8), 0.5, 3.0)
    assert len(points) == 0


def test_nearest_object_wins():
    world = _world()
    world.add_object(_Ball([2.5, 0, 0], 0.5, BLUE))
    _, colors = world.pointcloud_from_viewpoint([0, 0, 0], [1, 0, 0], (2, 2), 0.05, 20.0)
    assert colors and all(c == BLUE for c in colors)


def test_transform_matches_viewpoint():
    world = _world()
    pose = Transformation(Rotation(), [0, 0, 0])
    a, _ = world.pointcloud_from_transform(pose, (6, 6), 0.5, 20.0)
    b, _ = world.pointcloud_from_viewpoint([0, 0, 0], [1, 0, 0], (6, 6), 0.5, 20.0)
    assert np.allclose(a, b)


def test_noisy_transform_looks_along_z():
    world = SimulationWorld()
    world.add_object(_Ball([0, 0, 5], 1.0, RED))
    points, _ = world.noisy_pointcloud_from_transform(Transformation(), (6, 6), 0.5, 20.0, 0.0)
    assert len(points) > 0
    assert np.allclose(np.linalg.norm(points - np.array([0, 0, 5.0]), axis=1), 1.0)


def test_zero_noise_matches_noiseless_cloud():
    world = _world()
    clean, _ = world.pointcloud_from_viewpoint([0, 0, 0], [1, 0, 0], (6, 6), 0.5, 20.0)
    noisy, _ = world.noisy_pointcloud_from_viewpoint([0, 0, 0], [1, 0, 0], (6, 6), 0.5, 20.0, 0.0)
    assert np.allclose(clean, noisy)


def test_noise_is_deterministic_per_world():
    a = [SimulationWorld().noise(0.1) for _ in range(1)]
    w1, w2 = SimulationWorld(), SimulationWorld()
    seq1 = [w1.noise(0.1) for _ in range(5)]
    seq2 = [w2.noise(0.1) for _ in range(5)]
    assert seq1 == seq2
    assert seq1[0] == a[0]
    assert len(set(seq1)) == 5


def test_noisy_points_stay_on_rays():
    world = _world()
    noisy, _ = world.noisy_pointcloud_from_viewpoint([0, 0, 0], [1, 0, 0], (6, 6), 0.5, 20.0, 0.05)
    clean, _ = world.pointcloud_from_viewpoint([0, 0, 0], [1, 0, 0], (6, 6), 0.5, 20.0)
    assert noisy.shape == clean.shape
    nd = noisy / np.linalg.norm(noisy, axis=1, keepdims=True)
    cd = clean / np.linalg.norm(clean, axis=1, keepdims=True)
    assert np.allclose(nd, cd)


def test_invalid_resolution_rejected():
    with pytest.raises(ValueError):
        _world().pointcloud_from_viewpoint([0, 0, 0], [1, 0, 0], (0, 4), 0.5, 20.0)


def test_negative_noise_sigma_rejected():
    with pytest.raises(ValueError):
        SimulationWorld().noise(-1.0)