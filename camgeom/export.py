"""Export of point clouds and camera frusta as ASCII PLY."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, TextIO

import numpy as np

CAMERA_COLOR = (255, 0, 255)
_COMMENT = "camgeom point cloud"
_CORNERS = ((1, 1), (1, -1), (-1, -1), (-1, 1))


@dataclass
class ExportCamera:
    """A camera drawn as a small pyramid pointing along its forward direction."""

    optical_center: np.ndarray
    up_direction: np.ndarray
    forward_direction: np.ndarray
    focal_length: float


def _vector3(value) -> np.ndarray:
    vector = np.asarray(value, dtype=float)
    if vector.shape != (3,):
        raise ValueError(f"expected a 3D point, got shape {vector.shape}")
    return vector


def _color(value) -> tuple[int, int, int]:
    channels = tuple(int(c) for c in value)
    if len(channels) != 3 or any(not 0 <= c <= 255 for c in channels):
        raise ValueError(f"color must be three values in 0..255, got {value!r}")
    return channels


def _format_double(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return np.format_float_positional(value, trim="-")


def _header(vertex_count: int, face_count: int | None) -> str:
    lines = [
        "ply",
        "format ascii 1.0",
        f"comment {_COMMENT}",
        f"element vertex {vertex_count}",
        "property double x",
        "property double y",
        "property double z",
        "property uchar red",
        "property uchar green",
        "property uchar blue",
    ]
    if face_count is not None:
        lines += [f"element face {face_count}", "property list uchar int vertex_index"]
    lines.append("end_header")
    return "\n".join(lines) + "\n"


def export(
    stream: TextIO,
    points_and_colors: Iterable,
    cameras: Iterable[ExportCamera],
    camera_faces: bool,
) -> None:
    """Write cameras and colored points to a text stream as ASCII PLY.

    Camera vertices come first, five per camera, followed by the points.
    Faces are emitted only when ``camera_faces`` is true.
    """
    vertices: list[tuple[np.ndarray, tuple[int, int, int]]] = []
    faces: list[tuple[int, int, int]] = []

    def add_vertex(point, color) -> int:
        vertices.append((_vector3(point), _color(color)))
        return len(vertices) - 1

    for camera in cameras:
        center = _vector3(camera.optical_center)
        up = _vector3(camera.up_direction)
        forward = _vector3(camera.forward_direction)
        focal = float(camera.focal_length)
        right = np.cross(forward, up)
        center_index = add_vertex(center, CAMERA_COLOR)
        up_right, up_left, down_left, down_right = (
            add_vertex(
                center + forward * focal + up_sign * up * focal + right_sign * right * focal,
                CAMERA_COLOR,
            )
            for up_sign, right_sign in _CORNERS
        )
        if camera_faces:
            faces.extend(
                [
                    (center_index, down_right, up_right),
                    (center_index, up_right, up_left),
                    (center_index, up_left, down_left),
                    (center_index, down_left, down_right),
                ]
            )

    for point, color in points_and_colors:
        add_vertex(point, color)

    stream.write(_header(len(vertices), len(faces) if camera_faces else None))
    for point, color in vertices:
        fields = [_format_double(float(c)) for c in point] + [str(c) for c in color]
        stream.write(" ".join(fields) + "\n")
    if camera_faces:
        for face in faces:
            stream.write(" ".join(str(n) for n in (len(face), *face)) + "\n")