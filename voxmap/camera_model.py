"""Rigid poses, planes and a frustum camera model for view culling."""

from __future__ import annotations

import math

import numpy as np


def _point(value) -> np.ndarray:
    return np.array(value, dtype=float).reshape(3)


class Pose:
    """A rigid transformation: rotation matrix followed by translation."""

    __slots__ = ("rotation", "position")

    def __init__(self, rotation=None, position=None) -> None:
        self.rotation = np.eye(3) if rotation is None else np.array(rotation, dtype=float).reshape(3, 3)
        self.position = np.zeros(3) if position is None else _point(position)

    def apply(self, point) -> np.ndarray:
        """Transform a point."""
        return self.rotation @ _point(point) + self.position

    def inverse(self) -> "Pose":
        rotation_t = self.rotation.T
        return Pose(rotation_t, -(rotation_t @ self.position))

    def __mul__(self, other):
        """Compose with another pose, or transform a point."""
        if isinstance(other, Pose):
            return Pose(self.rotation @ other.rotation, self.rotation @ other.position + self.position)
        return self.apply(other)

    def __repr__(self) -> str:
        return f"Pose(rotation={self.rotation.tolist()}, position={self.position.tolist()})"


class Plane:
    """A plane n·x = d; points with n·x >= d are inside."""

    __slots__ = ("normal", "distance")

    def __init__(self, normal=(0.0, 0.0, 1.0), distance: float = 0.0) -> None:
        self.normal = _point(normal)
        self.distance = float(distance)

    @classmethod
    def from_points(cls, p1, p2, p3) -> "Plane":
        """Plane through three points, normal along (p2-p1) x (p3-p1)."""
        p1, p2, p3 = _point(p1), _point(p2), _point(p3)
        cross = np.cross(p2 - p1, p3 - p1)
        normal = cross / np.linalg.norm(cross)
        return cls(normal, float(normal @ p1))

    def contains(self, point) -> bool:
        return float(_point(point) @ self.normal) >= self.distance


_LINE_CORNERS = (
    (0, 1), (1, 2), (2, 3), (3, 0),
    (4, 5), (5, 6), (6, 7), (7, 4),
    (0, 4), (1, 5), (3, 7), (2, 6),
)

# Near, far, left, right, top, bottom.
_PLANE_CORNERS = ((0, 2, 1), (4, 5, 6), (3, 6, 2), (0, 5, 4), (3, 4, 7), (2, 6, 5))


class CameraModel:
    """Frustum of a camera looking along its +x axis."""

    def __init__(self) -> None:
        self._initialized = False
        self._corners_c: list[np.ndarray] = []
        self._t_c_b = Pose()
        self._t_g_c = Pose()
        self._planes: list[Plane] = []
        self._aabb: tuple[np.ndarray, np.ndarray] | None = None

    def set_intrinsics_from_focal_length(
        self, resolution, focal_length: float, min_distance: float, max_distance: float
    ) -> None:
        """Set the frustum from image (width, height) and focal length in pixels."""
        width, height = resolution
        horizontal_fov = 2.0 * math.atan(width / (2.0 * focal_length))
        vertical_fov = 2.0 * math.atan(height / (2.0 * focal_length))
        self.set_intrinsics_from_fov(horizontal_fov, vertical_fov, min_distance, max_distance)

    def set_intrinsics_from_fov(
        self, horizontal_fov: float, vertical_fov: float, min_distance: float, max_distance: float
    ) -> None:
        """Set the frustum from fields of view in radians and a depth range."""
        tan_h = math.tan(horizontal_fov / 2.0)
        tan_v = math.tan(vertical_fov / 2.0)
        self._corners_c = [
            _point((d, sy * d * tan_h, sz * d * tan_v))
            for d in (min_distance, max_distance)
            for sy, sz in ((1, 1), (1, -1), (-1, -1), (-1, 1))
        ]
        self._initialized = True

    def set_extrinsics(self, t_c_b: Pose) -> None:
        """Set the transform from body frame to camera frame."""
        self._t_c_b = t_c_b

    def camera_pose(self) -> Pose:
        return self._t_g_c

    def body_pose(self) -> Pose:
        return self._t_g_c * self._t_c_b

    def set_camera_pose(self, cam_pose: Pose) -> None:
        self._t_g_c = cam_pose
        self._calculate_bounding_planes()

    def set_body_pose(self, body_pose: Pose) -> None:
        self.set_camera_pose(body_pose * self._t_c_b.inverse())

    def _corners_g(self) -> list[np.ndarray]:
        if not self._initialized:
            raise RuntimeError("camera intrinsics have not been set")
        return [self._t_g_c.apply(c) for c in self._corners_c]

    def _calculate_bounding_planes(self) -> None:
        if not self._initialized:
            return
        corners = self._corners_g()
        self._planes = [
            Plane.from_points(corners[a], corners[b], corners[c]) for a, b, c in _PLANE_CORNERS
        ]
        stacked = np.stack(corners)
        self._aabb = (stacked.min(axis=0), stacked.max(axis=0))

    def aabb(self) -> tuple[np.ndarray, np.ndarray]:
        """Axis-aligned bounding box (min, max) of the frustum in world frame."""
        if self._aabb is None:
            raise RuntimeError("camera pose has not been set")
        low, high = self._aabb
        return low.copy(), high.copy()

    def is_point_in_view(self, point) -> bool:
        return all(plane.contains(point) for plane in self._planes)

    def bounding_lines(self) -> list[np.ndarray]:
        """Frustum edges as 12 consecutive start/end point pairs."""
        corners = self._corners_g()
        return [corners[i].copy() for pair in _LINE_CORNERS for i in pair]

    def far_plane_points(self) -> list[np.ndarray]:
        """Three corners of the far plane in world frame."""
        corners = self._corners_g()
        return [corners[4], corners[5], corners[6]]