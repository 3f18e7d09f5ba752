"""Bicubic sampling of images stored as numpy arrays."""

from __future__ import annotations

import numpy as np


def _blend_cubic(p0, p1, p2, p3, x):
    return p1 + 0.5 * x * (
        p2 - p0 + x * (2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3 + x * (3.0 * (p1 - p2) + p3 - p0))
    )


def _clamp(values, dtype):
    """Convert to the pixel type, saturating integer channels."""
    if np.issubdtype(dtype, np.integer):
        info = np.iinfo(dtype)
        return np.clip(values, info.min, info.max).astype(dtype)
    return np.asarray(values).astype(dtype)


def interpolate_bicubic(image, x, y, default):
    """Sample ``image`` at ``(x, y)`` with bicubic interpolation.

    ``image`` has shape ``(height, width)`` or ``(height, width, channels)``.
    ``default`` is returned when the 4x4 neighbourhood does not fit in the image.
    """
    pixels = np.asarray(image)
    if pixels.ndim not in (2, 3):
        raise ValueError("image must have shape (height, width) or (height, width, channels)")
    x = np.float32(x)
    y = np.float32(y)
    left = np.floor(x) - np.float32(1.0)
    right = left + np.float32(4.0)
    top = np.floor(y) - np.float32(1.0)
    bottom = top + np.float32(4.0)
    x_weight = x - (left + np.float32(1.0))
    y_weight = y - (top + np.float32(1.0))

    height, width = pixels.shape[:2]
    if left < 0 or right >= width or top < 0 or bottom >= height:
        return default

    col, row = int(left), int(top)
    window = pixels[row : row + 4, col : col + 4].astype(np.float32)
    rows = _clamp(_blend_cubic(*np.moveaxis(window, 1, 0), x_weight), pixels.dtype)
    result = _clamp(_blend_cubic(*rows.astype(np.float32), y_weight), pixels.dtype)
    return result[()] if result.ndim == 0 else result