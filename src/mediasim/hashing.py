"""Perceptual hashes over a grayscale grid and Hamming comparison."""

from __future__ import annotations

from typing import TypedDict

import numpy as np

from .errors import HashLengthMismatchError
from .raster import GrayscaleGrid, Raster, to_grayscale_grid


class PerceptualHashes(TypedDict):
    """The three hash kinds computed from one grid.

    aHash and pHash have N*N bits, dHash has N*(N-1).
    """
    a_hash: str
    d_hash: str
    p_hash: str


def _bits(mask: np.ndarray) -> str:
    return "".join("1" if bit else "0" for bit in mask.reshape(-1))


def average_hash(grid: GrayscaleGrid) -> str:
    """Average hash: one bit per cell, '1' when the cell is strictly above the mean.

    A uniform grid has no cell above its mean and hashes to all zeros.
    """
    mean = grid.values.sum() / grid.values.size
    return _bits(grid.values > mean)


def difference_hash(grid: GrayscaleGrid) -> str:
    """Difference hash: per row, '1' where a cell is greater than its right neighbour."""
    rows = grid.rows()
    return _bits(rows[:, :-1] > rows[:, 1:])


def perceptual_hash(grid: GrayscaleGrid) -> str:
    """Simplified perceptual hash.

    This is the average hash, not a DCT-based pHash. It is kept as a separate
    name so the pHash similarity can be reported alongside aHash and dHash.
    """
    return average_hash(grid)


def compute_hashes(raster: Raster, size: int = 8) -> PerceptualHashes:
    """Compute aHash, dHash and pHash for a raster.

    Args:
        raster: Source raster.
        size: Grid size N used for the grayscale reduction.

    Returns:
        Dictionary with 'a_hash', 'd_hash' and 'p_hash' bit-strings.
    """
    grid = to_grayscale_grid(raster, size)
    return {
        "a_hash": average_hash(grid),
        "d_hash": difference_hash(grid),
        "p_hash": perceptual_hash(grid),
    }


def hamming_similarity(hash1: str, hash2: str) -> float:
    """Percentage of matching positions between two equal-length bit-strings.

    Args:
        hash1: First bit-string.
        hash2: Second bit-string.

    Returns:
        100 * (1 - differing / length), in [0, 100]. Two empty strings give 100.

    Raises:
        HashLengthMismatchError: If the strings differ in length.
    """
    if len(hash1) != len(hash2):
        msg = f"Cannot compare hashes of length {len(hash1)} and {len(hash2)}"
        raise HashLengthMismatchError(msg)
    if not hash1:
        return 100.0

    differing = sum(1 for a, b in zip(hash1, hash2) if a != b)
    return 100.0 * (1.0 - differing / len(hash1))


def compare_hashes(hashes1: PerceptualHashes, hashes2: PerceptualHashes) -> dict[str, float]:
    """Compare two hash sets.

    Returns:
        Per-kind similarities plus 'perceptual_hash', the mean of the three.
    """
    a_sim = hamming_similarity(hashes1["a_hash"], hashes2["a_hash"])
    d_sim = hamming_similarity(hashes1["d_hash"], hashes2["d_hash"])
    p_sim = hamming_similarity(hashes1["p_hash"], hashes2["p_hash"])
    return {
        "perceptual_hash": (a_sim + d_sim + p_sim) / 3,
        "a_hash": a_sim,
        "d_hash": d_sim,
        "p_hash": p_sim,
    }
