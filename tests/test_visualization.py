import functools

import numpy as np
import pytest

from voxmap.visualization import (
    adjust_slice_level,
    build_pointcloud,
    esdf_distance_intensity,
    esdf_distance_intensity_slice,
    free_esdf_intensity,
    intensity_voxel_intensity,
    is_occupied_occupancy_voxel,
    is_occupied_tsdf_voxel,
    near_surface_tsdf_color,
    tsdf_color,
    tsdf_distance_intensity,
    tsdf_distance_intensity_near_surface,
    tsdf_distance_intensity_slice,
)
from voxmap.voxel import Color, EsdfVoxel, IntensityVoxel, OccupancyVoxel, TsdfVoxel

ORIGIN = (0.0, 0.0, 0.0)


def test_tsdf_color_requires_weight():
    color = Color(10, 20, 30, 255)
    assert tsdf_color(TsdfVoxel(0.2, 1.0, color), ORIGIN) == color
    assert tsdf_color(TsdfVoxel(0.2, 0.0, color), ORIGIN) is None


def test_near_surface_tsdf_color():
    color = Color(1, 2, 3, 4)
    assert near_surface_tsdf_color(TsdfVoxel(0.05, 1.0, color), ORIGIN, 0.1) == color
    assert near_surface_tsdf_color(TsdfVoxel(-0.2, 1.0, color), ORIGIN, 0.1) is None
    assert near_surface_tsdf_color(TsdfVoxel(0.05, 0.0, color), ORIGIN, 0.1) is None


def test_tsdf_distance_intensity():
    assert tsdf_distance_intensity(TsdfVoxel(0.3, 1.0), ORIGIN) == pytest.approx(0.3)
    assert tsdf_distance_intensity(TsdfVoxel(0.3, 1e-4), ORIGIN) is None


def test_tsdf_distance_intensity_near_surface():
    assert tsdf_distance_intensity_near_surface(
        TsdfVoxel(-0.05, 1.0), ORIGIN, 0.1
    ) == pytest.approx(-0.05)
    assert tsdf_distance_intensity_near_surface(TsdfVoxel(0.5, 1.0), ORIGIN, 0.1) is None


def test_tsdf_slice_selects_by_axis():
    voxel = TsdfVoxel(0.4, 1.0)
    assert tsdf_distance_intensity_slice(voxel, (0.0, 0.0, 1.0), 2, 1.0, 0.1) == pytest.approx(0.4)
    assert tsdf_distance_intensity_slice(voxel, (0.0, 0.0, 1.5), 2, 1.0, 0.1) is None
    assert tsdf_distance_intensity_slice(voxel, (1.0, 0.0, 9.0), 0, 1.0, 0.1) == pytest.approx(0.4)
    assert tsdf_distance_intensity_slice(TsdfVoxel(0.4, 0.0), (0.0, 0.0, 1.0), 2, 1.0, 0.1) is None


def test_slice_rejects_bad_axis():
    with pytest.raises(ValueError):
        tsdf_distance_intensity_slice(TsdfVoxel(0.4, 1.0), ORIGIN, 3, 0.0, 0.1)


def test_esdf_intensities():
    observed = EsdfVoxel(distance=1.5, observed=True)
    unobserved = EsdfVoxel(distance=1.5, observed=False)
    assert esdf_distance_intensity(observed, ORIGIN) == pytest.approx(1.5)
    assert esdf_distance_intensity(unobserved, ORIGIN) is None
    assert esdf_distance_intensity_slice(observed, (0.0, 2.0, 0.0), 1, 2.0, 0.2) == pytest.approx(1.5)
    assert esdf_distance_intensity_slice(observed, (0.0, 3.0, 0.0), 1, 2.0, 0.2) is None
    assert esdf_distance_intensity_slice(unobserved, (0.0, 2.0, 0.0), 1, 2.0, 0.2) is None


def test_intensity_voxel():
    assert intensity_voxel_intensity(IntensityVoxel(25.0, 1.0), ORIGIN) == pytest.approx(25.0)
    assert intensity_voxel_intensity(IntensityVoxel(25.0, 0.0), ORIGIN) is None


def test_occupied_tsdf_voxel():
    assert is_occupied_tsdf_voxel(TsdfVoxel(-0.1, 1.0), ORIGIN) is True
    assert is_occupied_tsdf_voxel(TsdfVoxel(0.1, 1.0), ORIGIN) is False
    assert is_occupied_tsdf_voxel(TsdfVoxel(0.1, 1.0), ORIGIN, 0.2) is True
    assert is_occupied_tsdf_voxel(TsdfVoxel(-0.1, 0.0), ORIGIN) is False


def test_free_esdf_intensity():
    assert free_esdf_intensity(EsdfVoxel(distance=2.0, observed=True), ORIGIN, 1.0) == pytest.approx(2.0)
    assert free_esdf_intensity(EsdfVoxel(distance=0.5, observed=True), ORIGIN, 1.0) is None
    assert free_esdf_intensity(EsdfVoxel(distance=2.0, observed=False), ORIGIN, 1.0) is None


def test_occupancy_threshold():
    assert is_occupied_occupancy_voxel(OccupancyVoxel(2.0, True), ORIGIN) is True
    assert is_occupied_occupancy_voxel(OccupancyVoxel(0.5, True), ORIGIN) is False
    assert is_occupied_occupancy_voxel(OccupancyVoxel(-2.0, True), ORIGIN) is False


def test_adjust_slice_level_on_boundary_is_pushed_up():
    voxel_size = 0.1
    assert adjust_slice_level(0.0, voxel_size) == pytest.approx(voxel_size / 2)
    assert adjust_slice_level(1.0, voxel_size) == pytest.approx(1.0 + voxel_size / 2)


def test_adjust_slice_level_with_positive_remainder_is_kept():
    assert adjust_slice_level(0.12, 0.1) == 0.12


def test_build_pointcloud_keeps_drawn_voxels_in_order():
    voxels = [
        (TsdfVoxel(0.1, 1.0), (0.0, 0.0, 0.0)),
        (TsdfVoxel(0.2, 0.0), (1.0, 0.0, 0.0)),
        (TsdfVoxel(0.3, 1.0), (2.0, 0.0, 0.0)),
    ]
    cloud = build_pointcloud(voxels, tsdf_distance_intensity)
    assert len(cloud) == 2
    np.testing.assert_allclose(cloud[0][0], [0.0, 0.0, 0.0])
    np.testing.assert_allclose(cloud[1][0], [2.0, 0.0, 0.0])
    assert [value for _, value in cloud] == pytest.approx([0.1, 0.3])


def test_build_pointcloud_with_boolean_rule():
    voxels = [
        (OccupancyVoxel(2.0, True), (0.0, 1.0, 0.0)),
        (OccupancyVoxel(-1.0, True), (0.0, 2.0, 0.0)),
    ]
    cloud = build_pointcloud(voxels, is_occupied_occupancy_voxel)
    assert len(cloud) == 1
    np.testing.assert_allclose(cloud[0][0], [0.0, 1.0, 0.0])
    assert cloud[0][1] is True


def test_build_pointcloud_with_bound_parameters():
    voxels = [
        (EsdfVoxel(distance=3.0, observed=True), (0.0, 0.0, 0.0)),
        (EsdfVoxel(distance=0.5, observed=True), (1.0, 1.0, 1.0)),
    ]
    rule = functools.partial(free_esdf_intensity, min_distance=1.0)
    cloud = build_pointcloud(voxels, rule)
    assert [value for _, value in cloud] == pytest.approx([3.0])


def test_build_pointcloud_empty():
    assert build_pointcloud([], tsdf_color) == []