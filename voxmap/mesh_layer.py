"""A sparse grid of mesh blocks keyed by block index."""

from __future__ import annotations

import math
from dataclasses import replace

import numpy as np

from voxmap.mesh import Mesh
from voxmap.mesh_utils import create_connected_mesh

_COORDINATE_EPSILON = 1e-6

BlockIndex = tuple[int, int, int]


def _index(index) -> BlockIndex:
    x, y, z = index
    return int(x), int(y), int(z)


class MeshLayer:
    """Holds one mesh per block index, all blocks sharing a block size."""

    def __init__(self, block_size: float) -> None:
        if block_size <= 0.0:
            raise ValueError(f"block size must be positive, got {block_size}")
        self._block_size = float(block_size)
        self._block_size_inv = 1.0 / self._block_size
        self._meshes: dict[BlockIndex, Mesh] = {}

    @property
    def block_size(self) -> float:
        return self._block_size

    @property
    def block_size_inv(self) -> float:
        return self._block_size_inv

    def block_index_from_coordinates(self, coords) -> BlockIndex:
        """Index of the block containing a point."""
        scaled = np.asarray(coords, dtype=float).reshape(3) * self._block_size_inv
        return tuple(math.floor(c + _COORDINATE_EPSILON) for c in scaled)

    def get_mesh(self, index) -> Mesh | None:
        """Mesh at a block index, or None if none is allocated."""
        return self._meshes.get(_index(index))

    def __getitem__(self, index) -> Mesh:
        try:
            return self._meshes[_index(index)]
        except KeyError:
            raise KeyError(f"no mesh allocated at {tuple(index)}") from None

    def __contains__(self, index) -> bool:
        return _index(index) in self._meshes

    def get_mesh_by_coordinates(self, coords) -> Mesh | None:
        return self.get_mesh(self.block_index_from_coordinates(coords))

    def allocate_mesh(self, index) -> Mesh:
        """Mesh at a block index, created if it does not exist yet."""
        key = _index(index)
        mesh = self._meshes.get(key)
        if mesh is None:
            mesh = Mesh(self._block_size, np.array(key, dtype=float) * self._block_size)
            self._meshes[key] = mesh
        return mesh

    def allocate_mesh_by_coordinates(self, coords) -> Mesh:
        return self.allocate_mesh(self.block_index_from_coordinates(coords))

    def remove_mesh(self, index) -> None:
        self._meshes.pop(_index(index), None)

    def remove_mesh_by_coordinates(self, coords) -> None:
        self.remove_mesh(self.block_index_from_coordinates(coords))

    def clear_distant_mesh(self, center, max_distance: float) -> None:
        """Empty meshes whose origin is farther than max_distance from center.

        The emptied meshes stay allocated and are flagged updated so that
        consumers learn they are now empty.
        """
        center = np.asarray(center, dtype=float).reshape(3)
        limit = max_distance * max_distance
        for mesh in self._meshes.values():
            offset = mesh.origin - center
            if float(offset @ offset) > limit:
                mesh.clear()
                mesh.updated = True

    def allocated_indices(self) -> list[BlockIndex]:
        return list(self._meshes)

    def updated_indices(self) -> list[BlockIndex]:
        return [index for index, mesh in self._meshes.items() if mesh.updated]

    def combined_mesh(self) -> Mesh:
        """All blocks in one mesh; triangles keep their own, unshared vertices."""
        meshes = list(self._meshes.values())
        first = next((m for m in meshes if m.vertices), None)
        layout = (
            (first.has_colors(), first.has_normals(), first.has_triangles())
            if first is not None
            else (False, False, False)
        )
        has_colors, has_normals, _ = layout

        combined = Mesh()
        for mesh in meshes:
            if not mesh.vertices:
                continue
            if (mesh.has_colors(), mesh.has_normals(), mesh.has_triangles()) != layout:
                raise ValueError("mesh blocks disagree on colors, normals or triangles")
            count = len(mesh.vertices)
            if count % 3:
                raise ValueError("mesh block vertex count must be a multiple of three")
            if has_colors and len(mesh.colors) < count:
                raise ValueError("mesh block has fewer colors than vertices")
            if has_normals and len(mesh.normals) < count:
                raise ValueError("mesh block has fewer normals than vertices")

            base = len(combined.vertices)
            combined.vertices.extend(v.copy() for v in mesh.vertices)
            if has_colors:
                combined.colors.extend(replace(c) for c in mesh.colors[:count])
            if has_normals:
                combined.normals.extend(n.copy() for n in mesh.normals[:count])
            if layout[2]:
                combined.indices.extend(range(base, base + count))

        if len(combined.indices) != len(combined.vertices):
            raise ValueError("combined mesh needs a triangle index for every vertex")
        return combined

    def connected_mesh(self, approximate_vertex_proximity_threshold: float = 1e-10) -> Mesh:
        """All blocks in one mesh with nearby vertices merged."""
        return create_connected_mesh(
            list(self._meshes.values()), approximate_vertex_proximity_threshold
        )

    def __len__(self) -> int:
        return len(self._meshes)

    def clear(self) -> None:
        """Remove every mesh block."""
        self._meshes.clear()