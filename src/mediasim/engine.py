"""Media similarity engine: decode, measure, fuse."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial

from .aggregator import (
    PLACEHOLDER_METRICS,
    WeightProfile,
    aggregate,
    clamp_score,
    get_profile,
    placeholder_scores,
)
from .config import EngineConfig, ProfileName
from .decode import OpenCVRasterSource, RasterSource, decode_with_timeout
from .embedding import cosine_similarity, feature_vector
from .errors import MediaSimError, UnsupportedMediaPairError
from .hashing import compare_hashes, compute_hashes
from .histogram import compare_histograms, luminance_histogram
from .media import MediaFile, common_media_kind, is_binary_identical
from .models import FileDescriptor, MetricSet, SimilarityResult
from .raster import Raster
from .scalar import (
    brightness,
    compare_brightness,
    compare_keypoints,
    compare_texture,
    keypoints,
    texture,
)
from .ssim import global_ssim

logger = logging.getLogger(__name__)

MetricTask = Callable[[Raster, Raster, EngineConfig], dict[str, float]]


def _hash_scores(r1: Raster, r2: Raster, cfg: EngineConfig) -> dict[str, float]:
    return compare_hashes(compute_hashes(r1, cfg.grid_size), compute_hashes(r2, cfg.grid_size))


def _histogram_score(r1: Raster, r2: Raster, cfg: EngineConfig) -> dict[str, float]:
    hist1 = luminance_histogram(r1)
    hist2 = luminance_histogram(r2)
    return {"color_histogram": compare_histograms(hist1, hist2, cfg.histogram_method)}


def _brightness_score(r1: Raster, r2: Raster, _cfg: EngineConfig) -> dict[str, float]:
    return {"brightness": compare_brightness(brightness(r1), brightness(r2))}


def _texture_score(r1: Raster, r2: Raster, cfg: EngineConfig) -> dict[str, float]:
    return {"texture": compare_texture(texture(r1), texture(r2), cfg.texture_norm)}


def _keypoint_score(r1: Raster, r2: Raster, cfg: EngineConfig) -> dict[str, float]:
    k1 = keypoints(r1, cfg.keypoint_threshold)
    k2 = keypoints(r2, cfg.keypoint_threshold)
    return {"keypoints": compare_keypoints(k1, k2)}


def _embedding_score(r1: Raster, r2: Raster, cfg: EngineConfig) -> dict[str, float]:
    v1 = feature_vector(r1, cfg.edge_threshold, cfg.edge_scale)
    v2 = feature_vector(r2, cfg.edge_threshold, cfg.edge_scale)
    return {"embedding": cosine_similarity(v1, v2)}


def _ssim_score(r1: Raster, r2: Raster, cfg: EngineConfig) -> dict[str, float]:
    value = global_ssim(r1, r2, cfg.ssim_size, cfg.ssim_k1, cfg.ssim_k2)
    return {"ssim": value * 100.0}


# Every task is a pure function of the two rasters, so order does not matter
METRIC_TASKS: dict[str, MetricTask] = {
    "hashes": _hash_scores,
    "histogram": _histogram_score,
    "brightness": _brightness_score,
    "texture": _texture_score,
    "keypoints": _keypoint_score,
    "embedding": _embedding_score,
    "ssim": _ssim_score,
}


def _round_metrics(scores: dict[str, float]) -> dict[str, float]:
    return {name: round(clamp_score(value), 2) for name, value in scores.items()}


def _raster_descriptor(raster: Raster, name: str) -> FileDescriptor:
    return FileDescriptor(name=name, size=raster.pixels.nbytes, mime_type="image/x-raw-rgba")


class SimilarityEngine:
    """Compares two images, or two videos, and scores their visual similarity.

    A comparison first checks for byte-identical input. Otherwise both files
    are decoded to one raster each, every metric runs on a thread pool, and the
    scores are fused with the weights of the active profile.
    """

    def __init__(self, config: EngineConfig | None = None, source: RasterSource | None = None):
        """Initialize the engine.

        Args:
            config: Engine constants. Defaults to EngineConfig().
            source: Decoder used for both files. Defaults to OpenCV.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config if config is not None else EngineConfig()
        self.config.validate()
        self.source = source if source is not None else OpenCVRasterSource(self.config.video_seek_seconds)
        # Newest first
        self.results: list[SimilarityResult] = []

    def compare(
        self, file1: MediaFile, file2: MediaFile, profile: ProfileName | None = None
    ) -> SimilarityResult:
        """Compare two media files.

        Args:
            file1: First file.
            file2: Second file.
            profile: "image" or "video". Inferred from the media kind when None.

        Returns:
            SimilarityResult, also prepended to `results`.

        Raises:
            UnsupportedMediaPairError: If the files are not both images or both videos.
            DecodeError: If a file cannot be decoded in time.
            ValueError: If the profile name is unknown.
        """
        start = time.perf_counter()
        try:
            if is_binary_identical(file1.data, file2.data):
                weights = get_profile(self._identical_profile_name(file1, file2, profile))
                logger.info(f"{file1.name or 'file1'} and {file2.name or 'file2'} are byte-identical")
                scores = {
                    name: 100.0
                    for name in MetricSet.model_fields
                    if name not in PLACEHOLDER_METRICS or name in weights.weights
                }
                overall = 100.0
                is_identical = True
            else:
                kind = common_media_kind(file1, file2)
                weights = get_profile(profile or kind)
                logger.info(
                    f"Comparing {file1.name or 'file1'} and {file2.name or 'file2'} "
                    f"({kind}, profile={weights.name})"
                )
                raster1, raster2 = self._decode_pair(file1, file2)
                raw = self.compute_scores(raster1, raster2, weights)
                overall = aggregate(raw, weights)
                scores = _round_metrics(raw)
                is_identical = False
        except MediaSimError as e:
            logger.warning(f"Comparison failed: {e}")
            raise

        elapsed_ms = round((time.perf_counter() - start) * 1000)
        result = SimilarityResult(
            overall_similarity=overall,
            metrics=MetricSet(**scores),
            is_identical=is_identical,
            processing_time_ms=elapsed_ms,
            profile=weights.name,
            file1=file1.describe(),
            file2=file2.describe(),
        )
        logger.info(f"Overall similarity {result.overall_similarity:.2f}% in {elapsed_ms} ms")

        self.results.insert(0, result)
        return result

    def compute_scores(self, raster1: Raster, raster2: Raster, profile: WeightProfile) -> dict[str, float]:
        """Run every metric on two rasters in parallel.

        Args:
            raster1: First raster.
            raster2: Second raster.
            profile: Profile whose placeholder metrics should be filled in.

        Returns:
            Unrounded metric name to score mapping, each clamped to [0, 100].
        """
        scores: dict[str, float] = {}
        with ThreadPoolExecutor(max_workers=self.config.max_workers, thread_name_prefix="mediasim-metric") as executor:
            futures: dict[str, Future[dict[str, float]]] = {
                name: executor.submit(partial(task, raster1, raster2, self.config))
                for name, task in METRIC_TASKS.items()
            }
            try:
                for name, future in futures.items():
                    partial_scores = future.result()
                    logger.debug(f"{name}: {partial_scores}")
                    scores.update(partial_scores)
            except Exception:
                for future in futures.values():
                    future.cancel()
                raise

        scores.update(placeholder_scores(profile, self.config.seed))
        return {name: clamp_score(value) for name, value in scores.items()}

    def compare_rasters(self, raster1: Raster, raster2: Raster, profile: ProfileName = "image") -> SimilarityResult:
        """Score two already decoded rasters, skipping decode and the identity check."""
        start = time.perf_counter()
        weights = get_profile(profile)
        raw = self.compute_scores(raster1, raster2, weights)
        overall = aggregate(raw, weights)
        elapsed_ms = round((time.perf_counter() - start) * 1000)
        return SimilarityResult(
            overall_similarity=overall,
            metrics=MetricSet(**_round_metrics(raw)),
            is_identical=False,
            processing_time_ms=elapsed_ms,
            profile=weights.name,
            file1=_raster_descriptor(raster1, "raster1"),
            file2=_raster_descriptor(raster2, "raster2"),
        )

    def clear_results(self) -> None:
        """Forget all previous results."""
        self.results.clear()

    def _decode_pair(self, file1: MediaFile, file2: MediaFile) -> tuple[Raster, Raster]:
        timeout = self.config.decode_timeout
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="mediasim-io") as executor:
            future1 = executor.submit(decode_with_timeout, self.source, file1, timeout)
            future2 = executor.submit(decode_with_timeout, self.source, file2, timeout)
            return future1.result(), future2.result()

    @staticmethod
    def _identical_profile_name(
        file1: MediaFile, file2: MediaFile, profile: ProfileName | None
    ) -> str:
        if profile is not None:
            return profile
        kind = file1.kind or file2.kind
        if kind is None:
            msg = f"Unsupported media type: {file1.mime_type!r} (expected image/* or video/*)"
            raise UnsupportedMediaPairError(msg)
        return kind
