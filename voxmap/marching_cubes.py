"""Marching cubes on a single cube of eight SDF samples."""

from __future__ import annotations

import numpy as np

from voxmap.marching_cubes_tables import EDGE_INDEX_PAIRS, triangle_edges
from voxmap.mesh import Mesh

MIN_SDF_DIFFERENCE = 1e-6
NUM_CORNERS = 8


def _corner_coords(vertex_coords) -> np.ndarray:
    coords = np.asarray(vertex_coords, dtype=float)
    if coords.shape != (NUM_CORNERS, 3):
        raise ValueError(f"expected 8 corner points of shape (8, 3), got {coords.shape}")
    return coords


def _corner_sdf(vertex_sdf) -> np.ndarray:
    sdf = np.asarray(vertex_sdf, dtype=float)
    if sdf.shape != (NUM_CORNERS,):
        raise ValueError(f"expected 8 corner distances, got shape {sdf.shape}")
    return sdf


def _normalized(vector: np.ndarray) -> np.ndarray:
    length = float(np.linalg.norm(vector))
    return vector / length if length > 0.0 else vector.copy()


def vertex_configuration(vertex_sdf) -> int:
    """8-bit mask with bit i set when corner i has a negative distance."""
    sdf = _corner_sdf(vertex_sdf)
    return sum(1 << corner for corner, value in enumerate(sdf) if value < 0)


def interpolate_vertex(vertex1, vertex2, sdf1: float, sdf2: float) -> np.ndarray:
    """Approximate zero crossing between two cube corners.

    Falls back to the midpoint when the distances are too close to divide by.
    """
    v1 = np.asarray(vertex1, dtype=float).reshape(3)
    v2 = np.asarray(vertex2, dtype=float).reshape(3)
    sdf_diff = sdf1 - sdf2
    if abs(sdf_diff) >= MIN_SDF_DIFFERENCE:
        t = sdf1 / sdf_diff
        return v1 + t * (v2 - v1)
    return 0.5 * (v1 + v2)


def interpolate_edge_vertices(vertex_coords, vertex_sdf) -> np.ndarray:
    """Zero crossings on the 12 cube edges as a (12, 3) array.

    Rows of edges without a sign change are NaN.
    """
    coords = _corner_coords(vertex_coords)
    sdf = _corner_sdf(vertex_sdf)
    edges = np.full((len(EDGE_INDEX_PAIRS), 3), np.nan)
    for edge, (a, b) in enumerate(EDGE_INDEX_PAIRS):
        if (sdf[a] < 0) != (sdf[b] < 0):
            edges[edge] = interpolate_vertex(coords[a], coords[b], sdf[a], sdf[b])
    return edges


def mesh_cube_triangles(vertex_coords, vertex_sdf) -> list[np.ndarray]:
    """Triangles of one cube, each a (3, 3) array of vertices in table order."""
    sdf = _corner_sdf(vertex_sdf)
    edges = interpolate_edge_vertices(vertex_coords, sdf)
    return [edges[list(tri)] for tri in triangle_edges(vertex_configuration(sdf))]


def mesh_cube(vertex_coords, vertex_sdf, mesh: Mesh) -> int:
    """Append the cube's triangles to mesh with indices and flat normals.

    Returns the number of triangles added.
    """
    sdf = _corner_sdf(vertex_sdf)
    configuration = vertex_configuration(sdf)
    if configuration == 0:
        return 0

    edges = interpolate_edge_vertices(vertex_coords, sdf)
    triangles = triangle_edges(configuration)
    for e0, e1, e2 in triangles:
        p0, p1, p2 = edges[e2].copy(), edges[e1].copy(), edges[e0].copy()
        next_index = len(mesh.vertices)
        mesh.vertices.extend((p0, p1, p2))
        mesh.indices.extend(range(next_index, next_index + 3))
        normal = _normalized(np.cross(p1 - p0, p2 - p0))
        mesh.normals.extend(normal.copy() for _ in range(3))
    return len(triangles)