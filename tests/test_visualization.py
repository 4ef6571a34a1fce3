import functools

import numpy as np
import pytest

from voxgrid.visualization import (
    adjust_slice_level,
    collect_points,
    esdf_distance_intensity,
    esdf_free_intensity,
    esdf_slice_intensity,
    intensity_voxel_intensity,
    log_odds_from_probability,
    occupancy_occupied,
    tsdf_color,
    tsdf_distance_intensity,
    tsdf_near_surface_color,
    tsdf_near_surface_intensity,
    tsdf_occupied,
    tsdf_slice_intensity,
)
from voxgrid.voxels import Color, EsdfVoxel, IntensityVoxel, OccupancyVoxel, TsdfVoxel

ORIGIN = np.zeros(3)


def test_tsdf_color_requires_weight():
    color = Color(10, 20, 30, 255)
    assert tsdf_color(TsdfVoxel(distance=0.2, weight=1.0, color=color), ORIGIN) == color
    assert tsdf_color(TsdfVoxel(distance=0.2, weight=0.0, color=color), ORIGIN) is None


def test_tsdf_near_surface_color_checks_distance():
    color = Color(1, 2, 3, 4)
    near = TsdfVoxel(distance=-0.05, weight=1.0, color=color)
    far = TsdfVoxel(distance=0.5, weight=1.0, color=color)
    assert tsdf_near_surface_color(near, ORIGIN, 0.1) == color
    assert tsdf_near_surface_color(far, ORIGIN, 0.1) is None


def test_tsdf_distance_intensity_weight_threshold():
    assert tsdf_distance_intensity(TsdfVoxel(distance=0.3, weight=1.0), ORIGIN) == pytest.approx(0.3)
    assert tsdf_distance_intensity(TsdfVoxel(distance=0.3, weight=1e-4), ORIGIN) is None


def test_tsdf_near_surface_intensity():
    assert tsdf_near_surface_intensity(TsdfVoxel(0.05, 1.0), ORIGIN, 0.1) == pytest.approx(0.05)
    assert tsdf_near_surface_intensity(TsdfVoxel(0.2, 1.0), ORIGIN, 0.1) is None


def test_tsdf_slice_intensity_inside_and_outside():
    voxel = TsdfVoxel(distance=0.4, weight=1.0)
    assert tsdf_slice_intensity(voxel, [0.0, 0.0, 1.0], 2, 1.02, 0.1) == pytest.approx(0.4)
    assert tsdf_slice_intensity(voxel, [0.0, 0.0, 1.2], 2, 1.02, 0.1) is None


def test_slice_rejects_bad_axis():
    with pytest.raises(ValueError):
        tsdf_slice_intensity(TsdfVoxel(0.1, 1.0), ORIGIN, 3, 0.0, 0.1)


def test_esdf_intensities():
    observed = EsdfVoxel(distance=2.0, observed=True)
    unobserved = EsdfVoxel(distance=2.0, observed=False)
    assert esdf_distance_intensity(observed, ORIGIN) == pytest.approx(2.0)
    assert esdf_distance_intensity(unobserved, ORIGIN) is None
    assert esdf_free_intensity(observed, ORIGIN, 1.0) == pytest.approx(2.0)
    assert esdf_free_intensity(observed, ORIGIN, 3.0) is None
    assert esdf_slice_intensity(observed, [0.5, 0.0, 0.0], 0, 0.5, 0.2) == pytest.approx(2.0)
    assert esdf_slice_intensity(unobserved, [0.5, 0.0, 0.0], 0, 0.5, 0.2) is None


def test_intensity_voxel():
    assert intensity_voxel_intensity(IntensityVoxel(25.0, 1.0), ORIGIN) == pytest.approx(25.0)
    assert intensity_voxel_intensity(IntensityVoxel(25.0, 0.0), ORIGIN) is None


def test_tsdf_occupied():
    assert tsdf_occupied(TsdfVoxel(-0.1, 1.0), ORIGIN) is True
    assert tsdf_occupied(TsdfVoxel(0.1, 1.0), ORIGIN) is False
    assert tsdf_occupied(TsdfVoxel(0.1, 1.0), ORIGIN, 0.2) is True
    assert tsdf_occupied(TsdfVoxel(-0.1, 0.0), ORIGIN) is False


def test_occupancy_occupied_threshold():
    assert occupancy_occupied(OccupancyVoxel(log_odds_from_probability(0.8), True), ORIGIN)
    assert not occupancy_occupied(OccupancyVoxel(log_odds_from_probability(0.6), True), ORIGIN)


def test_log_odds_symmetry_and_errors():
    assert log_odds_from_probability(0.5) == pytest.approx(0.0)
    assert log_odds_from_probability(0.3) == pytest.approx(-log_odds_from_probability(0.7))
    with pytest.raises(ValueError):
        log_odds_from_probability(1.0)


def test_adjust_slice_level():
    assert adjust_slice_level(0.0, 0.1) == pytest.approx(0.05)
    assert adjust_slice_level(0.03, 0.1) == pytest.approx(0.03)
    with pytest.raises(ValueError):
        adjust_slice_level(0.0, 0.0)


def test_collect_points_keeps_zero_intensity_and_drops_none():
    samples = [
        (EsdfVoxel(distance=0.0, observed=True), (1.0, 2.0, 3.0)),
        (EsdfVoxel(distance=5.0, observed=False), (4.0, 5.0, 6.0)),
        (EsdfVoxel(distance=1.5, observed=True), (7.0, 8.0, 9.0)),
    ]
    points = collect_points(samples, esdf_distance_intensity)
    assert [value for _, value in points] == [0.0, 1.5]
    assert np.allclose(points[0][0], [1.0, 2.0, 3.0])


def test_collect_points_with_bound_predicate():
    samples = [
        (TsdfVoxel(-0.1, 1.0), (0.0, 0.0, 0.0)),
        (TsdfVoxel(0.5, 1.0), (1.0, 0.0, 0.0)),
    ]
    points = collect_points(samples, functools.partial(tsdf_occupied, min_distance=0.0))
    assert len(points) == 1
    assert np.allclose(points[0][0], [0.0, 0.0, 0.0])