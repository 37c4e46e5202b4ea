#!/usr/bin/env python3
"""Global structural similarity (SSIM-lite)."""

from __future__ import annotations

from .raster import Raster, intensity, resize

_DATA_RANGE = 255.0


def global_ssim(
    raster1: Raster,
    raster2: Raster,
    size: int = 256,
    k1: float = 0.01,
    k2: float = 0.03,
) -> float:
    """Single-window SSIM between two rasters.

    Both rasters are resampled to size x size and reduced to mean-RGB
    intensity. One global mean, variance and covariance then feed the SSIM
    formula. This is an approximation of SSIM, not the sliding-window form
    used by skimage's structural_similarity.

    Args:
        raster1: First raster.
        raster2: Second raster.
        size: Common side length both rasters are resampled to.
        k1: Luminance stabilisation constant factor.
        k2: Contrast stabilisation constant factor.

    Returns:
        SSIM clamped to [0, 1].
    """
    x = intensity(resize(raster1, size, size))
    y = intensity(resize(raster2, size, size))

    mean_x = x.mean()
    mean_y = y.mean()
    var_x = x.var()
    var_y = y.var()
    covar = ((x - mean_x) * (y - mean_y)).mean()

    c1 = (k1 * _DATA_RANGE) ** 2
    c2 = (k2 * _DATA_RANGE) ** 2

    ssim = ((2 * mean_x * mean_y + c1) * (2 * covar + c2)) / (
        (mean_x * mean_x + mean_y * mean_y + c1) * (var_x + var_y + c2)
    )
    return float(min(1.0, max(0.0, ssim)))
