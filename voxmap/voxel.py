"""Voxel types and per-voxel operations: merging, comparison and evaluation."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from functools import singledispatch

_SAME_VOXEL_TOLERANCE = 1e-10
_TSDF_OBSERVED_WEIGHT = 1e-6


@dataclass
class Color:
    """An 8-bit RGBA color."""

    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 0


@dataclass
class TsdfVoxel:
    """Truncated signed distance voxel."""

    distance: float = 0.0
    weight: float = 0.0
    color: Color = field(default_factory=Color)


@dataclass
class EsdfVoxel:
    """Euclidean signed distance voxel."""

    distance: float = 0.0
    observed: bool = False
    hallucinated: bool = False
    in_queue: bool = False
    fixed: bool = False
    parent: tuple[int, int, int] = (0, 0, 0)


@dataclass
class OccupancyVoxel:
    """Occupancy voxel storing log-odds of being occupied."""

    probability_log: float = 0.0
    observed: bool = False


@dataclass
class IntensityVoxel:
    """Voxel holding a fused intensity measurement."""

    intensity: float = 0.0
    weight: float = 0.0


class VoxelEvaluationMode(Enum):
    """Which voxels count towards an error evaluation."""

    EVALUATE_ALL_VOXELS = "evaluate_all_voxels"
    IGNORE_ERROR_BEHIND_TEST_SURFACE = "ignore_error_behind_test_surface"
    IGNORE_ERROR_BEHIND_GT_SURFACE = "ignore_error_behind_gt_surface"
    IGNORE_ERROR_BEHIND_ALL_SURFACES = "ignore_error_behind_all_surfaces"


class VoxelEvaluationResult(Enum):
    """Outcome of comparing one voxel against ground truth."""

    EVALUATED = "evaluated"
    IGNORED = "ignored"
    NO_OVERLAP = "no_overlap"


def _round_half_away(value: float) -> int:
    return int(math.floor(value + 0.5)) if value >= 0 else -int(math.floor(-value + 0.5))


def blend_colors(color_a: Color, weight_a: float, color_b: Color, weight_b: float) -> Color:
    """Blend two colors by their (non-normalised) weights."""
    total = weight_a + weight_b
    wa = weight_a / total
    wb = weight_b / total
    return Color(
        *(
            _round_half_away(getattr(color_a, ch) * wa + getattr(color_b, ch) * wb)
            for ch in ("r", "g", "b", "a")
        )
    )


def _check_same_type(voxel_a, voxel_b) -> None:
    if type(voxel_a) is not type(voxel_b):
        raise TypeError(
            f"cannot combine {type(voxel_a).__name__} with {type(voxel_b).__name__}"
        )


@singledispatch
def merge_voxel_into(voxel_a, voxel_b) -> None:
    """Merge voxel_a into voxel_b in place."""
    raise TypeError(f"cannot merge voxels of type {type(voxel_a).__name__}")


@merge_voxel_into.register
def _(voxel_a: TsdfVoxel, voxel_b) -> None:
    _check_same_type(voxel_a, voxel_b)
    combined_weight = voxel_a.weight + voxel_b.weight
    if combined_weight > 0:
        voxel_b.distance = (
            voxel_a.distance * voxel_a.weight + voxel_b.distance * voxel_b.weight
        ) / combined_weight
        voxel_b.color = blend_colors(
            voxel_a.color, voxel_a.weight, voxel_b.color, voxel_b.weight
        )
        voxel_b.weight = combined_weight


@merge_voxel_into.register
def _(voxel_a: EsdfVoxel, voxel_b) -> None:
    _check_same_type(voxel_a, voxel_b)
    if voxel_a.observed and voxel_b.observed:
        voxel_b.distance = (voxel_a.distance + voxel_b.distance) / 2.0
    elif voxel_a.observed:
        voxel_b.distance = voxel_a.distance
    voxel_b.observed = voxel_b.observed or voxel_a.observed


@merge_voxel_into.register
def _(voxel_a: OccupancyVoxel, voxel_b) -> None:
    _check_same_type(voxel_a, voxel_b)
    voxel_b.probability_log += voxel_a.probability_log
    voxel_b.observed = voxel_b.observed or voxel_a.observed


@singledispatch
def is_same_voxel(voxel_a, voxel_b) -> bool:
    """Return True when two voxels hold the same data."""
    raise TypeError(f"cannot compare voxels of type {type(voxel_a).__name__}")


@is_same_voxel.register
def _(voxel_a: TsdfVoxel, voxel_b) -> bool:
    _check_same_type(voxel_a, voxel_b)
    return (
        abs(voxel_a.distance - voxel_b.distance) < _SAME_VOXEL_TOLERANCE
        and abs(voxel_a.weight - voxel_b.weight) < _SAME_VOXEL_TOLERANCE
        and voxel_a.color == voxel_b.color
    )


@is_same_voxel.register
def _(voxel_a: EsdfVoxel, voxel_b) -> bool:
    _check_same_type(voxel_a, voxel_b)
    return (
        abs(voxel_a.distance - voxel_b.distance) < _SAME_VOXEL_TOLERANCE
        and voxel_a.observed == voxel_b.observed
        and voxel_a.in_queue == voxel_b.in_queue
        and voxel_a.fixed == voxel_b.fixed
        and tuple(voxel_a.parent) == tuple(voxel_b.parent)
    )


@is_same_voxel.register
def _(voxel_a: OccupancyVoxel, voxel_b) -> bool:
    _check_same_type(voxel_a, voxel_b)
    return (
        abs(voxel_a.probability_log - voxel_b.probability_log) < _SAME_VOXEL_TOLERANCE
        and voxel_a.observed == voxel_b.observed
    )


def is_observed_voxel(voxel) -> bool:
    """Return whether a voxel carries an observation.

    TSDF voxels count as observed above a tiny weight, ESDF voxels by their
    flag; any other voxel type never counts as observed.
    """
    if isinstance(voxel, TsdfVoxel):
        return voxel.weight > _TSDF_OBSERVED_WEIGHT
    if isinstance(voxel, EsdfVoxel):
        return bool(voxel.observed)
    return False


def _require_sdf_voxel(voxel) -> None:
    if not isinstance(voxel, (TsdfVoxel, EsdfVoxel)):
        raise TypeError(f"{type(voxel).__name__} holds no signed distance")


def compute_voxel_error(
    voxel_gt, voxel_test, evaluation_mode: VoxelEvaluationMode
) -> tuple[VoxelEvaluationResult, float]:
    """Compare a test voxel with ground truth; return (result, error)."""
    _require_sdf_voxel(voxel_gt)
    _check_same_type(voxel_gt, voxel_test)

    if not is_observed_voxel(voxel_gt) or not is_observed_voxel(voxel_test):
        return VoxelEvaluationResult.NO_OVERLAP, 0.0

    ignore_behind_test = evaluation_mode in (
        VoxelEvaluationMode.IGNORE_ERROR_BEHIND_TEST_SURFACE,
        VoxelEvaluationMode.IGNORE_ERROR_BEHIND_ALL_SURFACES,
    )
    ignore_behind_gt = evaluation_mode in (
        VoxelEvaluationMode.IGNORE_ERROR_BEHIND_GT_SURFACE,
        VoxelEvaluationMode.IGNORE_ERROR_BEHIND_ALL_SURFACES,
    )
    if (ignore_behind_test and voxel_test.distance < 0.0) or (
        ignore_behind_gt and voxel_gt.distance < 0.0
    ):
        return VoxelEvaluationResult.IGNORED, 0.0

    return VoxelEvaluationResult.EVALUATED, voxel_test.distance - voxel_gt.distance


def get_voxel_sdf(voxel) -> float:
    """Signed distance stored in a TSDF or ESDF voxel."""
    _require_sdf_voxel(voxel)
    return voxel.distance


def set_voxel_sdf(voxel, sdf: float) -> None:
    """Store a signed distance in a TSDF or ESDF voxel."""
    _require_sdf_voxel(voxel)
    voxel.distance = sdf


def set_voxel_weight(voxel, weight: float) -> None:
    """Set a TSDF voxel's weight, or mark an ESDF voxel observed if weight > 0."""
    _require_sdf_voxel(voxel)
    if isinstance(voxel, TsdfVoxel):
        voxel.weight = weight
    else:
        voxel.observed = weight > 0.0