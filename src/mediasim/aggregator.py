"""Weighted fusion of individual metrics into one overall score."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import numpy as np

from .config import ProfileName

_WEIGHT_TOLERANCE = 1e-9

# Metrics with no algorithm behind them yet. They are filled with seeded
# random values so the video weight profile stays complete.
PLACEHOLDER_METRICS = frozenset({"repeated_frames", "temporal_similarity"})


@dataclass(frozen=True)
class WeightProfile:
    """Named set of metric weights summing to 1.0."""

    name: ProfileName
    weights: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        total = math.fsum(self.weights.values())
        if abs(total - 1.0) > _WEIGHT_TOLERANCE:
            msg = f"Weights of profile '{self.name}' must sum to 1.0, got {total}"
            raise ValueError(msg)
        if any(w < 0 for w in self.weights.values()):
            msg = f"Weights of profile '{self.name}' must be non-negative"
            raise ValueError(msg)
        object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))

    @property
    def metric_names(self) -> tuple[str, ...]:
        return tuple(self.weights)

    @property
    def placeholder_metrics(self) -> tuple[str, ...]:
        return tuple(name for name in self.weights if name in PLACEHOLDER_METRICS)


IMAGE_PROFILE = WeightProfile(
    name="image",
    weights={
        "perceptual_hash": 0.25,
        "color_histogram": 0.20,
        "brightness": 0.15,
        "texture": 0.15,
        "keypoints": 0.10,
        "embedding": 0.15,
    },
)

VIDEO_PROFILE = WeightProfile(
    name="video",
    weights={
        "perceptual_hash": 0.20,
        "ssim": 0.25,
        "brightness": 0.10,
        "color_histogram": 0.20,
        "repeated_frames": 0.15,
        "temporal_similarity": 0.10,
    },
)

PROFILES: Mapping[str, WeightProfile] = MappingProxyType(
    {IMAGE_PROFILE.name: IMAGE_PROFILE, VIDEO_PROFILE.name: VIDEO_PROFILE}
)


def get_profile(name: str) -> WeightProfile:
    """Look up a weight profile by name.

    Raises:
        ValueError: If no profile has that name.
    """
    try:
        return PROFILES[name]
    except KeyError:
        msg = f"Unknown profile: {name!r} (expected one of {sorted(PROFILES)})"
        raise ValueError(msg) from None


def clamp_score(value: float) -> float:
    """Clamp a metric into [0, 100]."""
    return min(100.0, max(0.0, float(value)))


def placeholder_scores(profile: WeightProfile, seed: int | None = None) -> dict[str, float]:
    """Values for the profile's placeholder metrics, drawn uniformly from [0, 100).

    The same seed always yields the same values.
    """
    rng = np.random.default_rng(seed)
    return {name: float(rng.uniform(0.0, 100.0)) for name in profile.placeholder_metrics}


def aggregate(metrics: Mapping[str, float], profile: WeightProfile) -> float:
    """Weighted sum of the profile's metrics, rounded to 2 decimals.

    Args:
        metrics: Metric name to score in [0, 100]. Extra names are ignored.
        profile: Weight profile to apply.

    Returns:
        Overall similarity in [0, 100].

    Raises:
        KeyError: If a weighted metric is missing.
    """
    missing = [name for name in profile.weights if name not in metrics]
    if missing:
        msg = f"Profile '{profile.name}' needs metrics that were not computed: {missing}"
        raise KeyError(msg)

    total = math.fsum(weight * clamp_score(metrics[name]) for name, weight in profile.weights.items())
    return round(clamp_score(total), 2)
