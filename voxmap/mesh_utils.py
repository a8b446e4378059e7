"""Merging mesh blocks into one mesh with shared vertices."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import replace

import numpy as np

from voxmap.mesh import Mesh

_EPSILON = 1e-6
_UP = (0.0, 0.0, 1.0)


def _round_half_away(value: float) -> int:
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def create_connected_mesh(
    meshes: Mesh | Iterable[Mesh],
    approximate_vertex_proximity_threshold: float = 1e-10,
) -> Mesh:
    """Combine meshes, merging vertices closer than the threshold.

    Triangles whose vertices collapse onto fewer than three distinct vertices
    are dropped; normals of merged vertices are averaged.
    """
    if isinstance(meshes, Mesh):
        meshes = [meshes]

    connected = Mesh()
    uniques: dict[tuple[int, int, int], int] = {}
    threshold_inv = 1.0 / float(approximate_vertex_proximity_threshold)

    for mesh in meshes:
        if not mesh.vertices:
            continue
        if len(mesh.vertices) != len(mesh.indices):
            raise ValueError("mesh must have one index per vertex")
        if len(mesh.vertices) % 3:
            raise ValueError("mesh vertex count must be a multiple of three")

        old_to_new: list[int] = []
        for old_index, vertex in enumerate(mesh.vertices):
            scaled = np.asarray(vertex, dtype=float) * threshold_inv
            key = tuple(_round_half_away(float(c)) for c in scaled)
            new_index = uniques.get(key)
            if new_index is None:
                new_index = len(connected.vertices)
                connected.vertices.append(np.array(vertex, dtype=float))
                if mesh.has_colors():
                    connected.colors.append(replace(mesh.colors[old_index]))
                if mesh.has_normals():
                    connected.normals.append(np.array(mesh.normals[old_index], dtype=float))
                uniques[key] = new_index
            elif mesh.has_normals() and new_index < len(connected.normals):
                connected.normals[new_index] = (
                    connected.normals[new_index] + mesh.normals[old_index]
                )
            old_to_new.append(new_index)

        for i, normal in enumerate(connected.normals):
            length = float(np.linalg.norm(normal))
            connected.normals[i] = normal / length if length > _EPSILON else np.array(_UP)

        for start in range(0, len(mesh.indices), 3):
            v0, v1, v2 = (old_to_new[i] for i in mesh.indices[start : start + 3])
            if v0 != v1 and v1 != v2 and v0 != v2:
                connected.indices.extend((v0, v1, v2))

    if connected.has_colors() and len(connected.colors) != len(connected.vertices):
        raise ValueError("meshes disagree on whether they have colors")
    if connected.has_normals() and len(connected.normals) != len(connected.vertices):
        raise ValueError("meshes disagree on whether they have normals")
    return connected