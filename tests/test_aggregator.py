"""
Unit tests for weight profiles, score fusion and engine configuration.
"""

import dataclasses

import pytest

from mediasim import (
    IMAGE_PROFILE,
    PLACEHOLDER_METRICS,
    VIDEO_PROFILE,
    EngineConfig,
    WeightProfile,
    aggregate,
    get_profile,
)
from mediasim.aggregator import placeholder_scores


class TestWeightProfiles:
    """Test the built-in profiles and their validation."""

    @pytest.mark.parametrize("profile", [IMAGE_PROFILE, VIDEO_PROFILE])
    def test_weights_sum_to_one(self, profile):
        """Every profile is a convex combination."""
        assert abs(sum(profile.weights.values()) - 1.0) <= 1e-9

    def test_image_profile_metrics(self):
        """Image profile uses the six-metric weighting."""
        assert dict(IMAGE_PROFILE.weights) == {
            "perceptual_hash": 0.25,
            "color_histogram": 0.20,
            "brightness": 0.15,
            "texture": 0.15,
            "keypoints": 0.10,
            "embedding": 0.15,
        }
        assert IMAGE_PROFILE.placeholder_metrics == ()

    def test_video_profile_has_temporal_terms(self):
        """Video profile adds the repeated-frame and temporal terms."""
        assert set(VIDEO_PROFILE.placeholder_metrics) == PLACEHOLDER_METRICS
        assert VIDEO_PROFILE.weights["ssim"] == 0.25

    def test_bad_weight_sum_rejected(self):
        """Profiles whose weights do not sum to 1 cannot be built."""
        with pytest.raises(ValueError):
            WeightProfile(name="image", weights={"brightness": 0.5, "texture": 0.4})

    def test_weights_are_read_only(self):
        """Profile weights cannot be changed after construction."""
        with pytest.raises(TypeError):
            IMAGE_PROFILE.weights["brightness"] = 1.0  # type: ignore[index]

    def test_get_profile(self):
        """Profiles are looked up by name."""
        assert get_profile("image") is IMAGE_PROFILE
        assert get_profile("video") is VIDEO_PROFILE
        with pytest.raises(ValueError):
            get_profile("audio")


class TestAggregate:
    """Test weighted fusion."""

    def test_all_perfect(self):
        """All metrics at 100 give 100."""
        metrics = dict.fromkeys(IMAGE_PROFILE.weights, 100.0)

        assert aggregate(metrics, IMAGE_PROFILE) == 100.0

    def test_weighted_sum_rounded(self):
        """Overall score is the weighted sum rounded to 2 decimals."""
        metrics = {
            "perceptual_hash": 80.0,
            "color_histogram": 60.0,
            "brightness": 90.0,
            "texture": 70.0,
            "keypoints": 50.0,
            "embedding": 33.333,
        }
        expected = 0.25 * 80 + 0.20 * 60 + 0.15 * 90 + 0.15 * 70 + 0.10 * 50 + 0.15 * 33.333

        assert aggregate(metrics, IMAGE_PROFILE) == round(expected, 2)

    def test_extra_metrics_ignored(self):
        """Metrics the profile does not weight do not change the result."""
        metrics = dict.fromkeys(IMAGE_PROFILE.weights, 50.0)
        metrics["ssim"] = 0.0

        assert aggregate(metrics, IMAGE_PROFILE) == 50.0

    def test_out_of_range_metrics_clamped(self):
        """Each metric is clamped to [0, 100] before weighting."""
        metrics = dict.fromkeys(IMAGE_PROFILE.weights, 150.0)

        assert aggregate(metrics, IMAGE_PROFILE) == 100.0

    def test_missing_metric(self):
        """A weighted metric that was not computed is an error."""
        metrics = dict.fromkeys(IMAGE_PROFILE.weights, 100.0)
        del metrics["keypoints"]

        with pytest.raises(KeyError):
            aggregate(metrics, IMAGE_PROFILE)


class TestPlaceholderMetrics:
    """Test the seeded stand-ins for the temporal video metrics."""

    def test_seeded_values_reproducible(self):
        """Same seed, same values."""
        assert placeholder_scores(VIDEO_PROFILE, seed=42) == placeholder_scores(VIDEO_PROFILE, seed=42)

    def test_values_in_range(self):
        """Placeholders stay inside the metric range."""
        scores = placeholder_scores(VIDEO_PROFILE, seed=1)

        assert set(scores) == PLACEHOLDER_METRICS
        assert all(0.0 <= v <= 100.0 for v in scores.values())

    def test_image_profile_has_none(self):
        """The image profile has no placeholder metrics."""
        assert placeholder_scores(IMAGE_PROFILE, seed=1) == {}


class TestEngineConfig:
    """Test configuration defaults and validation."""

    def test_defaults_valid(self):
        """Default configuration passes validation."""
        cfg = EngineConfig()
        cfg.validate()

        assert cfg.grid_size == 8
        assert cfg.ssim_size == 256
        assert cfg.keypoint_threshold == 50.0
        assert cfg.video_seek_seconds == 1.0

    def test_frozen(self):
        """Configuration is immutable."""
        cfg = EngineConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.grid_size = 16  # type: ignore[misc]

    @pytest.mark.parametrize(
        "overrides",
        [
            {"grid_size": 1},
            {"ssim_size": 0},
            {"texture_norm": 0.0},
            {"keypoint_threshold": -1.0},
            {"histogram_method": "chi-square"},
            {"decode_timeout": 0.0},
            {"video_seek_seconds": -0.5},
            {"max_workers": 0},
        ],
    )
    def test_invalid_values(self, overrides):
        """Out-of-range values are rejected with ValueError."""
        with pytest.raises(ValueError):
            EngineConfig(**overrides).validate()
