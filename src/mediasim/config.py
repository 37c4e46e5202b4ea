#!/usr/bin/env python3
"""Configuration dataclasses for mediasim package."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

# Type aliases
ProfileName = Literal["image", "video"]
HistogramMethod = Literal["intersection", "bhattacharyya"]
MediaKind = Literal["image", "video"]

_MIN_GRID_SIZE = 2


@dataclass(frozen=True)
class EngineConfig:
    """Tunable constants for the similarity engine.

    Defaults reproduce the reference behaviour of the in-browser engine.
    """

    # Hashing
    grid_size: int = 8

    # SSIM-lite
    ssim_size: int = 256
    ssim_k1: float = 0.01
    ssim_k2: float = 0.03

    # Scalar metrics
    texture_norm: float = 100.0  # Empirical, texture values can exceed it
    keypoint_threshold: float = 50.0

    # Embedding
    edge_threshold: float = 30.0
    edge_scale: float = 1000.0

    # Histogram comparison
    histogram_method: HistogramMethod = "intersection"

    # Decoding
    video_seek_seconds: float = 1.0
    decode_timeout: float = 10.0

    # Execution
    max_workers: int | None = None  # None = ThreadPoolExecutor default
    seed: int | None = None  # Seeds the placeholder video metrics

    def validate(self) -> None:
        """Validate configuration parameters.

        Raises:
            ValueError: If any parameter is invalid.
        """
        if self.grid_size < _MIN_GRID_SIZE:
            msg = f"grid_size must be >= {_MIN_GRID_SIZE}, got {self.grid_size}"
            raise ValueError(msg)
        if self.ssim_size <= 0:
            msg = f"ssim_size must be positive, got {self.ssim_size}"
            raise ValueError(msg)
        if self.ssim_k1 <= 0 or self.ssim_k2 <= 0:
            msg = f"ssim constants must be positive, got k1={self.ssim_k1}, k2={self.ssim_k2}"
            raise ValueError(msg)
        if self.texture_norm <= 0:
            msg = f"texture_norm must be positive, got {self.texture_norm}"
            raise ValueError(msg)
        if self.keypoint_threshold < 0:
            msg = f"keypoint_threshold must be >= 0, got {self.keypoint_threshold}"
            raise ValueError(msg)
        if self.edge_threshold < 0:
            msg = f"edge_threshold must be >= 0, got {self.edge_threshold}"
            raise ValueError(msg)
        if self.histogram_method not in ("intersection", "bhattacharyya"):
            msg = f"Unknown histogram method: {self.histogram_method}"
            raise ValueError(msg)
        if self.video_seek_seconds < 0:
            msg = f"video_seek_seconds must be >= 0, got {self.video_seek_seconds}"
            raise ValueError(msg)
        if self.decode_timeout <= 0:
            msg = f"decode_timeout must be positive, got {self.decode_timeout}"
            raise ValueError(msg)
        if self.max_workers is not None and self.max_workers < 1:
            msg = f"max_workers must be >= 1, got {self.max_workers}"
            raise ValueError(msg)
