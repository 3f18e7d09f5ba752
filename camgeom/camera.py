"""Pinhole camera models that map pixel positions to bearings and back."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Optional, Protocol

import numpy as np

from camgeom.essential import RelativePose


def _vector2(value) -> np.ndarray:
    vector = np.asarray(value, dtype=float)
    if vector.shape != (2,):
        raise ValueError(f"expected a 2D value, got shape {vector.shape}")
    return vector


def _vector3(value) -> np.ndarray:
    vector = np.asarray(value, dtype=float)
    if vector.shape != (3,):
        raise ValueError(f"expected a 3D value, got shape {vector.shape}")
    return vector


def _sign_positive(value: float) -> bool:
    """True for positive numbers and +0.0, false for negatives and -0.0."""
    return math.copysign(1.0, value) > 0.0


def _bearing(xy: np.ndarray) -> np.ndarray:
    homogeneous = np.array([xy[0], xy[1], 1.0])
    return homogeneous / np.linalg.norm(homogeneous)


@dataclass(frozen=True, eq=False)
class CameraIntrinsics:
    """Intrinsic parameters: focal lengths, principal point and skew, in pixels."""

    focals: np.ndarray = field(default_factory=lambda: np.ones(2))
    principal_point: np.ndarray = field(default_factory=lambda: np.zeros(2))
    skew: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "focals", _vector2(self.focals))
        object.__setattr__(self, "principal_point", _vector2(self.principal_point))
        object.__setattr__(self, "skew", float(self.skew))

    @classmethod
    def identity(cls) -> CameraIntrinsics:
        """Intrinsics whose matrix is the identity."""
        return cls(np.ones(2), np.zeros(2), 0.0)

    def with_focals(self, focals) -> CameraIntrinsics:
        return replace(self, focals=focals)

    def with_focal(self, focal: float) -> CameraIntrinsics:
        return replace(self, focals=np.array([focal, focal], dtype=float))

    def with_principal_point(self, principal_point) -> CameraIntrinsics:
        return replace(self, principal_point=principal_point)

    def with_skew(self, skew: float) -> CameraIntrinsics:
        return replace(self, skew=skew)

    def matrix(self) -> np.ndarray:
        """The 3x3 intrinsic (calibration) matrix."""
        fx, fy = self.focals
        cx, cy = self.principal_point
        return np.array([[fx, self.skew, cx], [0.0, fy, cy], [0.0, 0.0, 1.0]])

    def _normalize(self, point) -> tuple[float, float]:
        centered = _vector2(point) - self.principal_point
        y = centered[1] / self.focals[1]
        x = (centered[0] - self.skew * y) / self.focals[0]
        return x, y

    def _denormalize(self, x: float, y: float) -> np.ndarray:
        px = x * self.focals[0] + self.skew * y
        py = y * self.focals[1]
        return np.array([px, py]) + self.principal_point

    def calibrate(self, point) -> np.ndarray:
        """Convert a pixel position into a unit bearing."""
        return _bearing(np.array(self._normalize(point)))

    def uncalibrate(self, projection) -> Optional[np.ndarray]:
        """Convert a bearing back into a pixel position, or None if it points backwards."""
        projection = _vector3(projection)
        if not _sign_positive(projection[2]):
            return None
        x, y = projection[:2] / projection[2]
        return self._denormalize(x, y)


@dataclass(frozen=True, eq=False)
class CameraIntrinsicsK1Distortion:
    """Intrinsics with a single radial distortion coefficient ``k1``."""

    simple_intrinsics: CameraIntrinsics
    k1: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "k1", float(self.k1))

    def calibrate(self, point) -> np.ndarray:
        """Convert a pixel position into an undistorted unit bearing."""
        distorted = np.array(self.simple_intrinsics._normalize(point))
        r2 = distorted @ distorted
        return _bearing(distorted / (1.0 + self.k1 * r2))

    def uncalibrate(self, projection) -> Optional[np.ndarray]:
        """Convert a bearing back into a distorted pixel position.

        Returns None if the bearing points backwards or no real distortion radius exists.
        """
        projection = _vector3(projection)
        if not _sign_positive(projection[2]):
            return None
        undistorted = projection[:2] / projection[2]
        u2 = undistorted @ undistorted
        denominator = 2.0 * self.k1 * u2
        if denominator == 0.0:
            r2_mul_k1 = 0.0
        else:
            discriminant = 1.0 - 4.0 * self.k1 * u2
            if discriminant < 0.0:
                return None
            r2_mul_k1 = -(denominator + math.sqrt(discriminant) - 1.0) / denominator
        distorted = undistorted * (1.0 + r2_mul_k1)
        return self.simple_intrinsics._denormalize(distorted[0], distorted[1])


@dataclass(frozen=True, eq=False)
class CameraSpecification:
    """Fixed sensor properties: pixel counts and physical pixel size in meters."""

    pixels: tuple[int, int]
    pixel_dimensions: np.ndarray

    def __post_init__(self) -> None:
        width, height = (int(p) for p in self.pixels)
        object.__setattr__(self, "pixels", (width, height))
        object.__setattr__(self, "pixel_dimensions", _vector2(self.pixel_dimensions))

    @classmethod
    def from_sensor(cls, pixels, sensor_dimensions) -> CameraSpecification:
        """Build from pixel counts and the physical sensor size."""
        width, height = (int(p) for p in pixels)
        sensor = _vector2(sensor_dimensions)
        return cls((width, height), np.array([sensor[0] / width, sensor[1] / height]))

    @classmethod
    def from_sensor_square(cls, pixels, sensor_width: float) -> CameraSpecification:
        """Build from pixel counts and sensor width, assuming square pixels."""
        width, height = (int(p) for p in pixels)
        pixel_width = float(sensor_width) / width
        return cls((width, height), np.array([pixel_width, pixel_width]))

    def intrinsics_centered(self, focal: float) -> CameraIntrinsics:
        """Intrinsics with square pixels and a centered principal point."""
        return (
            CameraIntrinsics.identity()
            .with_focal(focal)
            .with_principal_point(self.pixel_dimensions / 2.0 - 0.5)
        )


class RelativeTriangulator(Protocol):
    def triangulate_relative(self, pose: RelativePose, a, b) -> Optional[np.ndarray]:
        """Return the 3D point in camera A's space, or None."""


def _reproject(point: np.ndarray) -> Optional[np.ndarray]:
    bearing = point / np.linalg.norm(point)
    if not _sign_positive(bearing[2]):
        return None
    return bearing[:2] / bearing[2]


def pose_reprojection_error(
    pose: RelativePose, a, b, triangulator: RelativeTriangulator
) -> Optional[tuple[np.ndarray, np.ndarray]]:
    """Reprojection errors, in focal lengths, of a match ``a`` -> ``b`` under ``pose``.

    The triangulator gives the point in camera A's space; ``pose`` carries it into
    camera B. Returns None if triangulation fails or the point is behind a camera.
    """
    a = _vector3(a)
    b = _vector3(b)
    a_norm = a[:2] / a[2]
    b_norm = b[:2] / b[2]
    point_a = triangulator.triangulate_relative(pose, a, b)
    if point_a is None:
        return None
    point_a = _vector3(point_a)
    reproject_a = _reproject(point_a)
    if reproject_a is None:
        return None
    reproject_b = _reproject(pose.transform(point_a))
    if reproject_b is None:
        return None
    return a_norm - reproject_a, b_norm - reproject_b


def average_pose_reprojection_error(
    pose: RelativePose, a, b, triangulator: RelativeTriangulator
) -> Optional[float]:
    """Mean norm of the two reprojection errors, or None."""
    errors = pose_reprojection_error(pose, a, b, triangulator)
    if errors is None:
        return None
    return float(sum(np.linalg.norm(error) for error in errors) * 0.5)