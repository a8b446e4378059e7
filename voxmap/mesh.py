"""Triangle mesh storage: vertices, normals, colors and triangle indices."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

import numpy as np

from voxmap.voxel import Color

INVALID_BLOCK_SIZE = -1.0


def _point(value) -> np.ndarray:
    return np.array(value, dtype=float).reshape(3)


def _fit(items: list, size: int, factory) -> list:
    """Truncate or pad a list to size, padding with factory()."""
    kept = items[:size]
    kept.extend(factory() for _ in range(size - len(kept)))
    return kept


@dataclass(eq=False)
class Mesh:
    """Vertices, normals, colors and triangle indices of one mesh block."""

    block_size: float = INVALID_BLOCK_SIZE
    origin: np.ndarray = field(default_factory=lambda: np.zeros(3))
    vertices: list[np.ndarray] = field(default_factory=list)
    indices: list[int] = field(default_factory=list)
    normals: list[np.ndarray] = field(default_factory=list)
    colors: list[Color] = field(default_factory=list)
    updated: bool = False

    def __post_init__(self) -> None:
        self.origin = _point(self.origin)
        if self.block_size != INVALID_BLOCK_SIZE and self.block_size <= 0.0:
            raise ValueError(f"block size must be positive, got {self.block_size}")

    def has_vertices(self) -> bool:
        return bool(self.vertices)

    def has_normals(self) -> bool:
        return bool(self.normals)

    def has_colors(self) -> bool:
        return bool(self.colors)

    def has_triangles(self) -> bool:
        return bool(self.indices)

    def __len__(self) -> int:
        return len(self.vertices)

    def clear(self) -> None:
        """Drop all vertices, normals, colors and indices."""
        self.vertices.clear()
        self.normals.clear()
        self.colors.clear()
        self.indices.clear()

    def clear_triangles(self) -> None:
        self.indices.clear()

    def clear_normals(self) -> None:
        self.normals.clear()

    def clear_colors(self) -> None:
        self.colors.clear()

    def resize(
        self,
        size: int,
        has_normals: bool = True,
        has_colors: bool = True,
        has_indices: bool = True,
    ) -> None:
        """Truncate or pad the vertex list (and optionally the others) to size."""
        if size < 0:
            raise ValueError("size must be non-negative")
        self.vertices = _fit(self.vertices, size, lambda: np.zeros(3))
        if has_normals:
            self.normals = _fit(self.normals, size, lambda: np.zeros(3))
        if has_colors:
            self.colors = _fit(self.colors, size, Color)
        if has_indices:
            self.indices = _fit(self.indices, size, int)

    def colorize(self, color: Color) -> None:
        """Give every vertex the same color."""
        self.colors = [replace(color) for _ in self.vertices]

    def concatenate(self, other: "Mesh") -> None:
        """Append another mesh, shifting its triangle indices past ours."""
        for name, ours, theirs in (
            ("colors", self.has_colors(), other.has_colors()),
            ("normals", self.has_normals(), other.has_normals()),
            ("triangles", self.has_triangles(), other.has_triangles()),
        ):
            if ours != theirs:
                raise ValueError(f"meshes disagree on whether they have {name}")

        num_vertices_before = len(self.vertices)
        self.vertices.extend(v.copy() for v in other.vertices)
        self.colors.extend(replace(c) for c in other.colors)
        self.normals.extend(n.copy() for n in other.normals)
        self.indices.extend(i + num_vertices_before for i in other.indices)