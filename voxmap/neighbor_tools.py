"""Lookup tables for the 6/18/26-connected neighbourhood of a voxel."""

from __future__ import annotations

import math
from collections.abc import Iterator

_X = (-1, 1, 0, 0, 0, 0, -1, -1, 1, 1, 0, 0, 0, 0, -1, 1, -1, 1, -1, -1, -1, -1, 1, 1, 1, 1)
_Y = (0, 0, -1, 1, 0, 0, -1, 1, -1, 1, -1, -1, 1, 1, 0, 0, 0, 0, -1, -1, 1, 1, -1, -1, 1, 1)
_Z = (0, 0, 0, 0, -1, 1, 0, 0, 0, 0, -1, 1, -1, 1, -1, -1, 1, 1, -1, 1, -1, 1, -1, 1, -1, 1)

OFFSETS: tuple[tuple[int, int, int], ...] = tuple(zip(_X, _Y, _Z))
DISTANCES: tuple[float, ...] = (1.0,) * 6 + (math.sqrt(2),) * 12 + (math.sqrt(3),) * 8

_CONNECTIVITIES = (6, 18, 26)


def neighbors(
    index: tuple[int, int, int], connectivity: int = 26
) -> Iterator[tuple[tuple[int, int, int], float]]:
    """Yield (neighbour index, distance in voxels) pairs around an index."""
    if connectivity not in _CONNECTIVITIES:
        raise ValueError(f"connectivity must be one of {_CONNECTIVITIES}, got {connectivity}")
    x, y, z = index
    for (dx, dy, dz), distance in zip(OFFSETS[:connectivity], DISTANCES):
        yield (x + dx, y + dy, z + dz), distance