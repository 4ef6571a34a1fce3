import numpy as np
import pytest

from voxgrid.cube_tables import triangle_edges
from voxgrid.marching_cubes import (
    calculate_vertex_configuration,
    interpolate_edge_vertices,
    interpolate_vertex,
    mesh_cube,
    mesh_cube_triangles,
)
from voxgrid.mesh import Mesh

CUBE = np.array(
    [
        [0, 0, 0],
        [1, 0, 0],
        [1, 1, 0],
        [0, 1, 0],
        [0, 0, 1],
        [1, 0, 1],
        [1, 1, 1],
        [0, 1, 1],
    ],
    dtype=float,
)

LEVEL = 1.5
PLANE_SDF = CUBE.sum(axis=1) - LEVEL


def test_configuration_pinned_values():
    assert calculate_vertex_configuration(np.ones(8)) == 0
    assert calculate_vertex_configuration(-np.ones(8)) == 255
    sdf = np.ones(8)
    sdf[0] = -1.0
    assert calculate_vertex_configuration(sdf) == 1


def test_configuration_zero_counts_as_outside():
    assert calculate_vertex_configuration(np.zeros(8)) == 0


def test_configuration_rejects_wrong_length():
    with pytest.raises(ValueError):
        calculate_vertex_configuration(np.ones(7))


def test_interpolate_vertex_finds_crossing():
    point = interpolate_vertex((0, 0, 0), (2, 0, 0), -1.0, 1.0)
    assert np.allclose(point, [1.0, 0.0, 0.0])


def test_interpolate_vertex_equal_sdf_uses_midpoint():
    a = np.array([0.0, 2.0, 4.0])
    b = np.array([2.0, 4.0, 6.0])
    assert np.allclose(interpolate_vertex(a, b, 0.3, 0.3), (a + b) / 2)


def test_edge_vertices_lie_on_surface():
    edges = interpolate_edge_vertices(CUBE, PLANE_SDF)
    assert edges.shape == (12, 3)
    crossing = ~np.isnan(edges).any(axis=1)
    assert crossing.any()
    assert np.allclose(edges[crossing].sum(axis=1), LEVEL)


def test_edge_vertices_nan_without_crossing():
    edges = interpolate_edge_vertices(CUBE, np.ones(8))
    assert np.isnan(edges).all()


def test_edge_vertices_reject_bad_coords():
    with pytest.raises(ValueError):
        interpolate_edge_vertices(CUBE.T, PLANE_SDF)


def test_triangles_match_table_and_surface():
    triangles = mesh_cube_triangles(CUBE, PLANE_SDF)
    configuration = calculate_vertex_configuration(PLANE_SDF)
    assert len(triangles) == len(triangle_edges(configuration))
    for triangle in triangles:
        assert triangle.shape == (3, 3)
        assert np.allclose(triangle.sum(axis=1), LEVEL)


def test_mesh_cube_appends_triangles():
    mesh = Mesh()
    next_index = mesh_cube(CUBE, PLANE_SDF, 0, mesh)
    assert next_index == len(mesh.vertices)
    assert mesh.indices == list(range(next_index))
    assert len(mesh.normals) == len(mesh.vertices)
    assert np.allclose([v.sum() for v in mesh.vertices], LEVEL)
    diagonal = np.ones(3) / np.sqrt(3.0)
    for normal in mesh.normals:
        assert np.isclose(np.linalg.norm(normal), 1.0)
        assert np.isclose(abs(normal @ diagonal), 1.0)


def test_mesh_cube_reverses_triangle_order():
    mesh = Mesh()
    mesh_cube(CUBE, PLANE_SDF, 0, mesh)
    triangles = mesh_cube_triangles(CUBE, PLANE_SDF)
    for k, triangle in enumerate(triangles):
        stored = np.array(mesh.vertices[3 * k : 3 * k + 3])
        assert np.allclose(stored, triangle[::-1])


def test_mesh_cube_continues_from_next_index():
    mesh = Mesh()
    first = mesh_cube(CUBE, PLANE_SDF, 0, mesh)
    second = mesh_cube(CUBE + 1.0, PLANE_SDF, first, mesh)
    assert second == 2 * first
    assert mesh.indices == list(range(second))


def test_mesh_cube_without_surface_adds_nothing():
    mesh = Mesh()
    assert mesh_cube(CUBE, np.ones(8), 7, mesh) == 7
    assert not mesh.has_vertices()
    assert mesh_cube(CUBE, -np.ones(8), 7, mesh) == 7
    assert not mesh.has_vertices()