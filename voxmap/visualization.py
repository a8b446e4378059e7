"""Per-voxel visibility rules for turning voxels into point clouds.

Each rule takes a voxel and its world coordinate and returns what to draw
(a color, an intensity or a flag), or None when the voxel is not drawn.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

import numpy as np

from voxmap.voxel import Color, EsdfVoxel, IntensityVoxel, OccupancyVoxel, TsdfVoxel

FLOAT_EPSILON = 1e-6
_COLOR_MIN_WEIGHT = 0.0
_INTENSITY_MIN_WEIGHT = 1e-3
_OCCUPIED_PROBABILITY = 0.7

T = TypeVar("T")


def _log_odds(probability: float) -> float:
    return math.log(probability / (1.0 - probability))


OCCUPANCY_LOG_ODDS_THRESHOLD = _log_odds(_OCCUPIED_PROBABILITY)


def _in_slice(coord, free_plane_index: int, free_plane_val: float, voxel_size: float) -> bool:
    if not 0 <= free_plane_index < 3:
        raise ValueError(f"free plane index must be 0, 1 or 2, got {free_plane_index}")
    value = float(np.asarray(coord, dtype=float).reshape(3)[free_plane_index])
    return abs(value - free_plane_val) <= voxel_size / 2.0 + FLOAT_EPSILON


def near_surface_tsdf_color(voxel: TsdfVoxel, coord, surface_distance: float) -> Color | None:
    """Color of an observed TSDF voxel closer to the surface than surface_distance."""
    if voxel.weight > _COLOR_MIN_WEIGHT and abs(voxel.distance) < surface_distance:
        return voxel.color
    return None


def tsdf_color(voxel: TsdfVoxel, coord) -> Color | None:
    """Color of any observed TSDF voxel."""
    if voxel.weight > _COLOR_MIN_WEIGHT:
        return voxel.color
    return None


def tsdf_distance_intensity(voxel: TsdfVoxel, coord) -> float | None:
    """Distance of a TSDF voxel with enough weight."""
    if voxel.weight > _INTENSITY_MIN_WEIGHT:
        return voxel.distance
    return None


def tsdf_distance_intensity_near_surface(
    voxel: TsdfVoxel, coord, surface_distance: float
) -> float | None:
    """Distance of a weighted TSDF voxel closer to the surface than surface_distance."""
    if voxel.weight > _INTENSITY_MIN_WEIGHT and abs(voxel.distance) < surface_distance:
        return voxel.distance
    return None


def tsdf_distance_intensity_slice(
    voxel: TsdfVoxel,
    coord,
    free_plane_index: int,
    free_plane_val: float,
    voxel_size: float,
) -> float | None:
    """Distance of a weighted TSDF voxel lying in the given axis-aligned slice."""
    if _in_slice(coord, free_plane_index, free_plane_val, voxel_size):
        if voxel.weight > _INTENSITY_MIN_WEIGHT:
            return voxel.distance
    return None


def esdf_distance_intensity(voxel: EsdfVoxel, coord) -> float | None:
    """Distance of an observed ESDF voxel."""
    if voxel.observed:
        return voxel.distance
    return None


def esdf_distance_intensity_slice(
    voxel: EsdfVoxel,
    coord,
    free_plane_index: int,
    free_plane_val: float,
    voxel_size: float,
) -> float | None:
    """Distance of an observed ESDF voxel lying in the given axis-aligned slice."""
    if _in_slice(coord, free_plane_index, free_plane_val, voxel_size):
        if voxel.observed:
            return voxel.distance
    return None


def intensity_voxel_intensity(voxel: IntensityVoxel, coord) -> float | None:
    """Intensity of a weighted intensity voxel."""
    if voxel.weight > _INTENSITY_MIN_WEIGHT:
        return voxel.intensity
    return None


def is_occupied_tsdf_voxel(voxel: TsdfVoxel, coord, min_distance: float = 0.0) -> bool:
    """Whether a weighted TSDF voxel lies at or behind min_distance from the surface."""
    return voxel.weight > _INTENSITY_MIN_WEIGHT and voxel.distance <= min_distance


def free_esdf_intensity(voxel: EsdfVoxel, coord, min_distance: float) -> float | None:
    """Distance of an observed ESDF voxel at least min_distance from obstacles."""
    if voxel.observed and voxel.distance >= min_distance:
        return voxel.distance
    return None


def is_occupied_occupancy_voxel(voxel: OccupancyVoxel, coord) -> bool:
    """Whether an occupancy voxel is more likely than 0.7 to be occupied."""
    return voxel.probability_log > OCCUPANCY_LOG_ODDS_THRESHOLD


def adjust_slice_level(free_plane_val: float, voxel_size: float) -> float:
    """Shift a slice level by half a voxel so it does not fall between two slices."""
    if math.remainder(free_plane_val, voxel_size) < FLOAT_EPSILON:
        return free_plane_val + voxel_size / 2.0
    return free_plane_val


def build_pointcloud(
    voxels: Iterable[tuple[Any, Any]],
    vis_function: Callable[[Any, np.ndarray], T | None],
) -> list[tuple[np.ndarray, T]]:
    """Apply a rule to (voxel, coordinate) pairs and keep the drawn ones.

    Boolean rules keep the voxels for which they return True.
    """
    cloud: list[tuple[np.ndarray, T]] = []
    for voxel, coord in voxels:
        point = np.asarray(coord, dtype=float).reshape(3)
        value = vis_function(voxel, point)
        if value is None or value is False:
            continue
        cloud.append((point, value))
    return cloud