"""
Unit tests for histogram, scalar, SSIM-lite and embedding metrics.
"""

import numpy as np
import pytest

from mediasim import Raster
from mediasim.embedding import cosine_similarity, feature_vector
from mediasim.histogram import compare_histograms, luminance_histogram, normalize_histogram
from mediasim.scalar import (
    brightness,
    compare_brightness,
    compare_keypoints,
    compare_texture,
    keypoints,
    texture,
)
from mediasim.ssim import global_ssim


def solid_raster(width: int, height: int, rgb: tuple[int, int, int]) -> Raster:
    """Create a raster filled with one RGB colour."""
    img = np.zeros((height, width, 3), dtype=np.uint8)
    img[:] = rgb
    return Raster.from_array(img)


def noise_raster(width: int, height: int, seed: int) -> Raster:
    """Create a reproducible random RGB raster."""
    rng = np.random.default_rng(seed)
    return Raster.from_array(rng.integers(0, 256, (height, width, 3), dtype=np.uint8))


def vertical_edge_raster(size: int = 20) -> Raster:
    """Black left half, white right half."""
    img = np.zeros((size, size), dtype=np.uint8)
    img[:, size // 2:] = 255
    return Raster.from_array(img)


def square_raster(top: int, left: int, size: int = 100, square: int = 10) -> Raster:
    """Black canvas with one white square."""
    img = np.zeros((size, size), dtype=np.uint8)
    img[top:top + square, left:left + square] = 255
    return Raster.from_array(img)


class TestHistogramAnalyzer:
    """Test luminance histograms and their comparison."""

    def test_uniform_raster_single_bin(self):
        """A uniform gray raster fills exactly one bin."""
        hist = luminance_histogram(solid_raster(10, 10, (128, 128, 128)))

        assert hist.shape == (256,)
        assert hist[128] == 100
        assert hist.sum() == 100

    def test_normalized_sums_to_one(self):
        """Normalized histogram is a probability distribution."""
        hist = luminance_histogram(noise_raster(40, 30, seed=1))

        assert normalize_histogram(hist).sum() == pytest.approx(1.0)

    def test_self_comparison_is_100(self):
        """sum(min(p, p)) = sum(p) = 1."""
        hist = luminance_histogram(noise_raster(50, 50, seed=2))

        assert compare_histograms(hist, hist) == pytest.approx(100.0)

    def test_disjoint_histograms(self):
        """Black and white share no bins."""
        black = luminance_histogram(solid_raster(10, 10, (0, 0, 0)))
        white = luminance_histogram(solid_raster(10, 10, (255, 255, 255)))

        assert compare_histograms(black, white) == 0.0

    def test_intersection_partial_overlap(self):
        """Half the mass shared gives 50."""
        h1 = np.zeros(256)
        h2 = np.zeros(256)
        h1[[10, 20]] = 1
        h2[[20, 30]] = 1

        assert compare_histograms(h1, h2) == pytest.approx(50.0)

    def test_bhattacharyya_method(self):
        """Bhattacharyya coefficient is also 100 on identical input and bounded."""
        h1 = luminance_histogram(noise_raster(30, 30, seed=3))
        h2 = luminance_histogram(noise_raster(30, 30, seed=4))

        assert compare_histograms(h1, h1, "bhattacharyya") == pytest.approx(100.0)
        assert 0.0 <= compare_histograms(h1, h2, "bhattacharyya") <= 100.0

    def test_unknown_method(self):
        """Unknown comparison methods are rejected."""
        hist = np.ones(256)
        with pytest.raises(ValueError):
            compare_histograms(hist, hist, "chi-square")  # type: ignore[arg-type]


class TestScalarMetrics:
    """Test brightness, texture and keypoint statistics."""

    def test_brightness_is_mean_rgb(self):
        """Brightness averages R, G and B equally."""
        assert brightness(solid_raster(5, 5, (30, 60, 90))) == pytest.approx(60.0)

    def test_compare_brightness(self):
        """Brightness similarity scales the difference by 255."""
        assert compare_brightness(100.0, 100.0) == 100.0
        assert compare_brightness(0.0, 255.0) == 0.0
        assert compare_brightness(0.0, 51.0) == pytest.approx(80.0)

    def test_texture_uniform_is_zero(self):
        """A flat raster has no local variation."""
        assert texture(solid_raster(20, 20, (90, 90, 90))) == 0.0

    def test_texture_checkerboard(self):
        """Each interior pixel of a 0/255 checkerboard differs from 4 orthogonal neighbours."""
        img = (np.indices((10, 10)).sum(axis=0) % 2 * 255).astype(np.uint8)

        assert texture(Raster.from_array(img)) == pytest.approx(4 * 255.0)

    def test_texture_needs_interior(self):
        """Rasters thinner than 3 pixels have no interior."""
        assert texture(solid_raster(2, 10, (255, 0, 0))) == 0.0

    def test_compare_texture_floors_at_zero(self):
        """Differences beyond the normalization constant floor at 0."""
        assert compare_texture(0.0, 1020.0) == 0.0
        assert compare_texture(10.0, 10.0) == 100.0
        assert compare_texture(10.0, 35.0) == pytest.approx(75.0)

    def test_keypoints_uniform_is_zero(self):
        """No gradient, no keypoints."""
        assert keypoints(solid_raster(20, 20, (200, 10, 10))) == 0

    def test_keypoints_vertical_edge(self):
        """Two columns straddle the edge in each of the 16 rows inside the margin."""
        assert keypoints(vertical_edge_raster(20)) == 32

    def test_keypoints_threshold(self):
        """A gradient below the threshold is not counted."""
        img = np.zeros((20, 20), dtype=np.uint8)
        img[:, 10:] = 40

        assert keypoints(Raster.from_array(img)) == 0
        assert keypoints(Raster.from_array(img), threshold=30.0) == 32

    def test_compare_keypoints(self):
        """Keypoint similarity is relative to the larger count."""
        assert compare_keypoints(0, 0) == 100.0
        assert compare_keypoints(10, 5) == pytest.approx(50.0)
        assert compare_keypoints(5, 10) == pytest.approx(50.0)
        assert compare_keypoints(0, 7) == 0.0

    def test_shifted_square_changes_structure_metrics(self):
        """Moving a square into the corner lowers texture and keypoint similarity."""
        centred = square_raster(45, 45)
        cornered = square_raster(0, 0)

        texture_self = compare_texture(texture(centred), texture(centred))
        texture_shifted = compare_texture(texture(centred), texture(cornered))
        keypoints_self = compare_keypoints(keypoints(centred), keypoints(centred))
        keypoints_shifted = compare_keypoints(keypoints(centred), keypoints(cornered))

        assert texture_self == 100.0
        assert keypoints_self == 100.0
        assert texture_shifted < texture_self
        assert keypoints_shifted < keypoints_self
        # Same pixel population, so brightness cannot tell them apart
        assert compare_brightness(brightness(centred), brightness(cornered)) == 100.0


class TestStructuralSimilarity:
    """Test the global SSIM approximation."""

    def test_identical_rasters(self):
        """SSIM of a raster with itself is 1."""
        raster = noise_raster(64, 48, seed=5)

        assert global_ssim(raster, raster) == pytest.approx(1.0)

    def test_black_vs_white_near_zero(self):
        """Opposite constant rasters only keep the stabilisation term."""
        black = solid_raster(32, 32, (0, 0, 0))
        white = solid_raster(32, 32, (255, 255, 255))

        assert global_ssim(black, white) < 0.01

    def test_inverted_noise_clamped(self):
        """Negative correlation is clamped to 0."""
        rng = np.random.default_rng(6)
        img = rng.integers(0, 256, (64, 64, 3), dtype=np.uint8)
        raster = Raster.from_array(img)
        inverted = Raster.from_array(255 - img)

        value = global_ssim(raster, inverted)

        assert 0.0 <= value <= 1.0
        assert value < 0.5

    def test_different_sizes_are_resampled(self):
        """Rasters of different sizes can be compared."""
        small = solid_raster(16, 16, (100, 100, 100))
        large = solid_raster(300, 200, (100, 100, 100))

        assert global_ssim(small, large, size=32) == pytest.approx(1.0)


class TestEmbeddingVectorizer:
    """Test the 7-dim feature vector and cosine similarity."""

    def test_uniform_vector(self):
        """Uniform colour has zero variance and no edges."""
        vec = feature_vector(solid_raster(10, 10, (10, 20, 30)))

        assert vec.shape == (7,)
        assert vec == pytest.approx([10.0, 20.0, 30.0, 0.0, 0.0, 0.0, 0.0])

    def test_edge_density(self):
        """One edge column of 19 pixels (row 0 has no top neighbour) in 400 pixels."""
        vec = feature_vector(vertical_edge_raster(20))

        assert vec[6] == pytest.approx(19 / 400 * 1000)

    def test_channel_variance(self):
        """Variances are population variances per channel."""
        img = np.zeros((2, 2, 3), dtype=np.uint8)
        img[0, :, 0] = 100  # R: two pixels at 100, two at 0
        vec = feature_vector(Raster.from_array(img))

        assert vec[0] == pytest.approx(50.0)
        assert vec[3] == pytest.approx(2500.0)

    def test_cosine_self_and_symmetry(self):
        """Cosine similarity is 100 on itself, symmetric and bounded."""
        v1 = feature_vector(noise_raster(30, 30, seed=7))
        v2 = feature_vector(noise_raster(30, 30, seed=8))

        assert cosine_similarity(v1, v1) == pytest.approx(100.0)
        assert cosine_similarity(v1, v2) == pytest.approx(cosine_similarity(v2, v1))
        assert 0.0 <= cosine_similarity(v1, v2) <= 100.0

    def test_zero_norm_is_zero(self):
        """An all-black raster has a zero vector, defined as 0 similarity."""
        black = feature_vector(solid_raster(10, 10, (0, 0, 0)))

        assert cosine_similarity(black, black) == 0.0

    def test_length_mismatch(self):
        """Vectors of different length cannot be compared."""
        with pytest.raises(ValueError):
            cosine_similarity(np.ones(7), np.ones(6))
