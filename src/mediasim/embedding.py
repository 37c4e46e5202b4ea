"""Small handcrafted embedding: colour moments plus edge density."""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from .raster import Raster, intensity

FEATURE_DIMS = 7


def feature_vector(
    raster: Raster, edge_threshold: float = 30.0, edge_scale: float = 1000.0
) -> npt.NDArray[np.float64]:
    """Extract [meanR, meanG, meanB, varR, varG, varB, edgeDensity].

    Variances are population variances. A pixel counts as an edge when it has
    both a left and a top neighbour and its intensity differs from either by
    more than `edge_threshold`. The count is divided by the total pixel count
    and multiplied by `edge_scale` so it lands in a range comparable to the
    colour moments.

    Args:
        raster: Source raster.
        edge_threshold: Intensity step that marks an edge.
        edge_scale: Multiplier applied to the edge density.

    Returns:
        Feature vector of length 7.
    """
    rgb = raster.pixels[..., :3].reshape(-1, 3).astype(np.float64)
    means = rgb.mean(axis=0)
    variances = rgb.var(axis=0)

    gray = intensity(raster)
    center = gray[1:, 1:]
    left_step = np.abs(center - gray[1:, :-1])
    top_step = np.abs(center - gray[:-1, 1:])
    edges = np.count_nonzero((left_step > edge_threshold) | (top_step > edge_threshold))
    edge_density = edges / raster.pixel_count * edge_scale

    return np.concatenate([means, variances, [edge_density]])


def cosine_similarity(vec1: npt.NDArray[np.float64], vec2: npt.NDArray[np.float64]) -> float:
    """Cosine similarity scaled to [0, 100].

    Args:
        vec1: First feature vector.
        vec2: Second feature vector.

    Returns:
        100 * cos(angle), or 0 when either vector has zero norm.

    Raises:
        ValueError: If the vectors differ in length.
    """
    if len(vec1) != len(vec2):
        msg = f"Feature vectors differ in length: {len(vec1)} vs {len(vec2)}"
        raise ValueError(msg)

    norm1 = float(np.linalg.norm(vec1))
    norm2 = float(np.linalg.norm(vec2))
    if norm1 == 0 or norm2 == 0:
        return 0.0

    similarity = float(np.dot(vec1, vec2)) / (norm1 * norm2) * 100.0
    return min(100.0, max(0.0, similarity))
