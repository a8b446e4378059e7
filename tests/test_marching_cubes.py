import numpy as np
import pytest

from voxmap.marching_cubes import (
    interpolate_edge_vertices,
    interpolate_vertex,
    mesh_cube,
    mesh_cube_triangles,
    vertex_configuration,
)
from voxmap.marching_cubes_tables import EDGE_INDEX_PAIRS, triangle_edges
from voxmap.mesh import Mesh

CUBE = np.array(
    [
        (0, 0, 0),
        (1, 0, 0),
        (1, 1, 0),
        (0, 1, 0),
        (0, 0, 1),
        (1, 0, 1),
        (1, 1, 1),
        (0, 1, 1),
    ],
    dtype=float,
)


def _sdf_for(configuration):
    return [-1.0 if configuration & (1 << i) else 1.0 for i in range(8)]


def test_configuration_all_outside_is_zero():
    assert vertex_configuration([1.0] * 8) == 0


def test_configuration_all_inside_sets_every_bit():
    assert vertex_configuration([-1.0] * 8) == 255


def test_configuration_single_corner():
    assert vertex_configuration(_sdf_for(1)) == 1


@pytest.mark.parametrize("configuration", [0, 5, 77, 128, 200])
def test_configuration_round_trip(configuration):
    assert vertex_configuration(_sdf_for(configuration)) == configuration


def test_configuration_rejects_wrong_length():
    with pytest.raises(ValueError):
        vertex_configuration([1.0] * 7)


def test_interpolate_symmetric_matches_midpoint_fallback():
    v1, v2 = (0.0, 0.0, 0.0), (2.0, 4.0, -2.0)
    crossing = interpolate_vertex(v1, v2, -1.0, 1.0)
    fallback = interpolate_vertex(v1, v2, 0.3, 0.3)
    assert np.allclose(crossing, fallback)


def test_interpolate_vertex_lies_at_zero_crossing():
    v1, v2 = np.array([1.0, 2.0, 3.0]), np.array([3.0, 2.0, 3.0])
    sdf1, sdf2 = -0.2, 0.6
    point = interpolate_vertex(v1, v2, sdf1, sdf2)
    t = np.linalg.norm(point - v1) / np.linalg.norm(v2 - v1)
    assert sdf1 + t * (sdf2 - sdf1) == pytest.approx(0.0, abs=1e-12)
    assert np.allclose(np.cross(point - v1, v2 - v1), 0.0)


def test_edge_vertices_nan_without_crossing():
    sdf = _sdf_for(1)
    edges = interpolate_edge_vertices(CUBE, sdf)
    for edge, (a, b) in enumerate(EDGE_INDEX_PAIRS):
        crosses = (sdf[a] < 0) != (sdf[b] < 0)
        assert np.isfinite(edges[edge]).all() == crosses


def test_edge_vertices_reject_bad_coordinates():
    with pytest.raises(ValueError):
        interpolate_edge_vertices(CUBE[:4], [1.0] * 8)


def test_single_corner_triangle_is_around_that_corner():
    triangles = mesh_cube_triangles(CUBE, _sdf_for(1))
    assert len(triangles) == 1
    for vertex in triangles[0]:
        assert np.linalg.norm(vertex - CUBE[0]) == pytest.approx(0.5)


@pytest.mark.parametrize("configuration", range(256))
def test_every_configuration_yields_finite_triangles(configuration):
    triangles = mesh_cube_triangles(CUBE, _sdf_for(configuration))
    assert len(triangles) == len(triangle_edges(configuration))
    for triangle in triangles:
        assert triangle.shape == (3, 3)
        assert np.isfinite(triangle).all()


def test_mesh_cube_empty_configuration_adds_nothing():
    mesh = Mesh()
    assert mesh_cube(CUBE, [1.0] * 8, mesh) == 0
    assert len(mesh) == 0
    assert not mesh.has_triangles()


def test_mesh_cube_reverses_winding_and_indexes():
    mesh = Mesh()
    added = mesh_cube(CUBE, _sdf_for(1), mesh)
    triangle = mesh_cube_triangles(CUBE, _sdf_for(1))[0]
    assert added == 1
    assert mesh.indices == [0, 1, 2]
    for got, expected in zip(mesh.vertices, triangle[::-1]):
        assert np.allclose(got, expected)


def test_mesh_cube_normals_are_unit_and_point_outward():
    mesh = Mesh()
    mesh_cube(CUBE, _sdf_for(1), mesh)
    p0, p1, p2 = mesh.vertices
    centroid = (p0 + p1 + p2) / 3.0
    for normal in mesh.normals:
        assert np.linalg.norm(normal) == pytest.approx(1.0)
        assert abs(np.dot(normal, p1 - p0)) < 1e-9
        assert np.dot(normal, centroid - CUBE[0]) > 0.0


def test_mesh_cube_appends_with_continuing_indices():
    mesh = Mesh()
    first = mesh_cube(CUBE, _sdf_for(1), mesh)
    second = mesh_cube(CUBE + 1.0, _sdf_for(3), mesh)
    total = 3 * (first + second)
    assert len(mesh.vertices) == total
    assert len(mesh.normals) == total
    assert mesh.indices == list(range(total))