"""Luminance histogram extraction and comparison."""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from .config import HistogramMethod
from .raster import Raster, luma, round_half_up

HISTOGRAM_BINS = 256


def luminance_histogram(raster: Raster) -> npt.NDArray[np.int64]:
    """Count pixels per rounded BT.601 luma value.

    Args:
        raster: Source raster.

    Returns:
        256-bin histogram of raw counts.
    """
    levels = np.clip(round_half_up(luma(raster.pixels)), 0, HISTOGRAM_BINS - 1)
    return np.bincount(levels.reshape(-1), minlength=HISTOGRAM_BINS)


def normalize_histogram(hist: npt.NDArray[np.number]) -> npt.NDArray[np.float64]:
    """Scale a histogram so its bins sum to 1.0 (all-zero input stays zero)."""
    total = float(hist.sum())
    if total <= 0:
        return np.zeros(len(hist), dtype=np.float64)
    return hist.astype(np.float64) / total


def compare_histograms(
    hist1: npt.NDArray[np.number],
    hist2: npt.NDArray[np.number],
    method: HistogramMethod = "intersection",
) -> float:
    """Compare two histograms as probability distributions.

    Args:
        hist1: First histogram (counts or probabilities).
        hist2: Second histogram, same bin count.
        method: "intersection" sums min(p, q); "bhattacharyya" sums sqrt(p*q).

    Returns:
        Similarity in [0, 100].

    Raises:
        ValueError: If the bin counts differ or the method is unknown.
    """
    if len(hist1) != len(hist2):
        msg = f"Histogram bin counts differ: {len(hist1)} vs {len(hist2)}"
        raise ValueError(msg)

    p = normalize_histogram(hist1)
    q = normalize_histogram(hist2)

    if method == "intersection":
        score = float(np.minimum(p, q).sum())
    elif method == "bhattacharyya":
        score = float(np.sqrt(p * q).sum())
    else:
        msg = f"Unknown histogram method: {method}"
        raise ValueError(msg)

    return min(100.0, max(0.0, score * 100.0))
