"""mediasim - Perceptual fingerprinting and similarity scoring for images and videos."""

from .aggregator import IMAGE_PROFILE, PLACEHOLDER_METRICS, VIDEO_PROFILE, WeightProfile, aggregate, get_profile
from .config import EngineConfig, HistogramMethod, MediaKind, ProfileName
from .decode import OpenCVRasterSource, RasterSource, decode_with_timeout
from .engine import SimilarityEngine
from .errors import (
    DecodeError,
    HashLengthMismatchError,
    InvalidRasterError,
    MediaSimError,
    UnsupportedMediaPairError,
)
from .media import MediaFile, is_binary_identical
from .models import FileDescriptor, MetricSet, SimilarityResult
from .raster import GrayscaleGrid, Raster, to_grayscale_grid

__version__ = "0.1.0"

__all__ = [
    "IMAGE_PROFILE",
    "PLACEHOLDER_METRICS",
    "VIDEO_PROFILE",
    "DecodeError",
    "EngineConfig",
    "FileDescriptor",
    "GrayscaleGrid",
    "HashLengthMismatchError",
    "HistogramMethod",
    "InvalidRasterError",
    "MediaFile",
    "MediaKind",
    "MediaSimError",
    "MetricSet",
    "OpenCVRasterSource",
    "ProfileName",
    "Raster",
    "RasterSource",
    "SimilarityEngine",
    "SimilarityResult",
    "UnsupportedMediaPairError",
    "WeightProfile",
    "aggregate",
    "decode_with_timeout",
    "get_profile",
    "is_binary_identical",
    "to_grayscale_grid",
]
