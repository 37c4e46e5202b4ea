"""Scalar image statistics: brightness, texture and keypoint count.

Each statistic is computed per raster, then two statistics are turned into a
0-100 similarity by a metric-specific difference formula.
"""

from __future__ import annotations

import numpy as np

from .raster import Raster, intensity

_MAX_LEVEL = 255.0
_MIN_TEXTURE_SIZE = 3  # Smallest size with an interior pixel
_MIN_KEYPOINT_SIZE = 5  # Smallest size with a pixel 2 away from every edge

# Offsets of the 8-connected neighbourhood
_NEIGHBOURS = [(dy, dx) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dy, dx) != (0, 0)]


def brightness(raster: Raster) -> float:
    """Mean over all pixels of the average of R, G and B."""
    return float(intensity(raster).mean())


def texture(raster: Raster) -> float:
    """Local-variance texture proxy.

    For every interior pixel (1-pixel border excluded) sums the absolute
    intensity differences to its 8 neighbours, then averages over the
    interior. Rasters without an interior (width or height below 3) give 0.
    """
    gray = intensity(raster)
    h, w = gray.shape
    if h < _MIN_TEXTURE_SIZE or w < _MIN_TEXTURE_SIZE:
        return 0.0

    center = gray[1:-1, 1:-1]
    total = np.zeros_like(center)
    for dy, dx in _NEIGHBOURS:
        neighbour = gray[1 + dy:h - 1 + dy, 1 + dx:w - 1 + dx]
        total += np.abs(center - neighbour)

    return float(total.mean())


def keypoints(raster: Raster, threshold: float = 50.0) -> int:
    """Corner proxy: count pixels with a strong central-difference gradient.

    Only pixels at least 2 pixels away from every edge are considered.

    Args:
        raster: Source raster.
        threshold: Gradient magnitude a pixel must exceed to count.

    Returns:
        Number of pixels above the threshold.
    """
    gray = intensity(raster)
    h, w = gray.shape
    if h < _MIN_KEYPOINT_SIZE or w < _MIN_KEYPOINT_SIZE:
        return 0

    grad_x = gray[2:h - 2, 3:w - 1] - gray[2:h - 2, 1:w - 3]
    grad_y = gray[3:h - 1, 2:w - 2] - gray[1:h - 3, 2:w - 2]
    magnitude = np.sqrt(grad_x * grad_x + grad_y * grad_y)

    return int(np.count_nonzero(magnitude > threshold))


def compare_brightness(b1: float, b2: float) -> float:
    return 100.0 * max(0.0, 1.0 - abs(b1 - b2) / _MAX_LEVEL)


def compare_texture(t1: float, t2: float, norm: float = 100.0) -> float:
    """Texture similarity; `norm` is empirical, so very different textures floor at 0."""
    return 100.0 * max(0.0, 1.0 - abs(t1 - t2) / norm)


def compare_keypoints(k1: int, k2: int) -> float:
    return 100.0 * max(0.0, 1.0 - abs(k1 - k2) / max(k1, k2, 1))
