import numpy as np
import pytest

from voxmap.mesh import Mesh
from voxmap.mesh_utils import create_connected_mesh
from voxmap.voxel import Color

A = (0.0, 0.0, 0.0)
B = (1.0, 0.0, 0.0)
C = (0.0, 1.0, 0.0)
D = (1.0, 1.0, 0.0)


def _mesh(points, normal=(0.0, 0.0, 1.0), color=None):
    mesh = Mesh()
    mesh.vertices = [np.array(p) for p in points]
    mesh.indices = list(range(len(points)))
    mesh.normals = [np.array(normal, dtype=float) for _ in points]
    if color is not None:
        mesh.colorize(color)
    return mesh


def test_shared_edge_vertices_are_merged():
    result = create_connected_mesh([_mesh([A, B, C]), _mesh([B, D, C])])
    assert len(result.vertices) == 4
    assert result.indices == [0, 1, 2, 1, 3, 2]
    assert np.allclose(result.vertices[3], D)


def test_merged_normals_are_unit_length():
    first = _mesh([A, B, C], normal=(0.0, 0.0, 1.0))
    second = _mesh([B, D, C], normal=(0.0, 1.0, 0.0))
    result = create_connected_mesh([first, second])
    for normal in result.normals:
        assert np.linalg.norm(normal) == pytest.approx(1.0)
    assert np.allclose(result.normals[1], np.array([0.0, 1.0, 1.0]) / np.sqrt(2.0))


def test_zero_normal_becomes_up():
    result = create_connected_mesh(_mesh([A, B, C], normal=(0.0, 0.0, 0.0)))
    assert all(np.allclose(n, [0.0, 0.0, 1.0]) for n in result.normals)


def test_single_mesh_accepted_and_colors_kept():
    color = Color(10, 20, 30, 255)
    result = create_connected_mesh(_mesh([A, B, C], color=color))
    assert result.colors == [color] * 3
    assert len(result.vertices) == len(result.colors)


def test_collapsed_triangle_is_dropped():
    small = _mesh([(0.0, 0.0, 0.0), (0.1, 0.0, 0.0), (0.0, 0.1, 0.0)])
    result = create_connected_mesh([small], approximate_vertex_proximity_threshold=2.0)
    assert len(result.vertices) == 1
    assert result.indices == []


def test_empty_meshes_are_skipped():
    result = create_connected_mesh([Mesh(), _mesh([A, B, C]), Mesh()])
    assert len(result.vertices) == 3
    assert result.indices == [0, 1, 2]


def test_mismatched_index_count_raises():
    mesh = _mesh([A, B, C])
    mesh.indices = [0, 1]
    with pytest.raises(ValueError):
        create_connected_mesh(mesh)


def test_vertex_count_not_multiple_of_three_raises():
    mesh = _mesh([A, B, C, D])
    with pytest.raises(ValueError):
        create_connected_mesh(mesh)