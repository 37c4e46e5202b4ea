"""Raster container and pixel-level helpers shared by all metrics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import cv2
import numpy as np
import numpy.typing as npt

from .errors import InvalidRasterError

_GRAY_NDIM = 2
_RGB_CHANNELS = 3
_RGBA_CHANNELS = 4
_MIN_GRID_SIZE = 2

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


@dataclass(frozen=True)
class Raster:
    """Decoded RGBA frame.

    Attributes:
        width: Frame width in pixels.
        height: Frame height in pixels.
        pixels: Read-only (height, width, 4) uint8 array in RGBA order.
    """

    width: int
    height: int
    pixels: npt.NDArray[np.uint8]

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            msg = f"Raster must have non-zero area, got {self.width}x{self.height}"
            raise InvalidRasterError(msg)
        expected = (self.height, self.width, _RGBA_CHANNELS)
        if self.pixels.shape != expected:
            msg = f"Pixel buffer shape {self.pixels.shape} does not match {expected}"
            raise InvalidRasterError(msg)
        if self.pixels.dtype != np.uint8:
            msg = f"Pixel buffer must be uint8, got {self.pixels.dtype}"
            raise InvalidRasterError(msg)

    @classmethod
    def from_array(cls, arr: npt.NDArray[Any]) -> Raster:
        """Build a raster from an RGBA, RGB or single-channel array.

        The array is copied and frozen, so the caller's buffer is never aliased.

        Args:
            arr: Array shaped (H, W), (H, W, 3) or (H, W, 4).

        Returns:
            Raster holding a read-only RGBA copy.
        """
        if arr.ndim < _GRAY_NDIM or arr.shape[0] == 0 or arr.shape[1] == 0:
            msg = f"Cannot build raster from array of shape {arr.shape}"
            raise InvalidRasterError(msg)

        data = np.ascontiguousarray(arr, dtype=np.uint8)
        if data.ndim == _GRAY_NDIM:
            rgba = cv2.cvtColor(data, cv2.COLOR_GRAY2RGBA)
        elif data.shape[2] == _RGB_CHANNELS:
            rgba = cv2.cvtColor(data, cv2.COLOR_RGB2RGBA)
        elif data.shape[2] == _RGBA_CHANNELS:
            rgba = data.copy()
        else:
            msg = f"Unsupported channel count: {data.shape[2]}"
            raise InvalidRasterError(msg)

        rgba.setflags(write=False)
        return cls(width=rgba.shape[1], height=rgba.shape[0], pixels=rgba)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class GrayscaleGrid:
    """NxN grid of integer luminance samples in [0, 255]."""

    size: int
    values: npt.NDArray[np.int64]

    def __post_init__(self) -> None:
        if self.values.shape != (self.size * self.size,):
            msg = f"Grid of size {self.size} needs {self.size * self.size} values, got {self.values.shape}"
            raise ValueError(msg)

    def rows(self) -> npt.NDArray[np.int64]:
        """Return the values reshaped to (size, size)."""
        return self.values.reshape(self.size, self.size)


def round_half_up(values: npt.NDArray[np.float64]) -> npt.NDArray[np.int64]:
    """Round to nearest integer with halves going up (np.rint rounds to even)."""
    return np.floor(values + 0.5).astype(np.int64)


def luma(rgba: npt.NDArray[np.uint8]) -> npt.NDArray[np.float64]:
    """BT.601 luma of an RGBA array, as float64 (alpha ignored)."""
    rgb = rgba[..., :3].astype(np.float64)
    r_w, g_w, b_w = LUMA_WEIGHTS
    return r_w * rgb[..., 0] + g_w * rgb[..., 1] + b_w * rgb[..., 2]


def intensity(raster: Raster) -> npt.NDArray[np.float64]:
    """Per-pixel mean of R, G and B as a (height, width) float64 array.

    Brightness, texture, keypoints, SSIM and the embedding edge density all
    work on this unweighted intensity rather than on BT.601 luma.
    """
    return raster.pixels[..., :3].astype(np.float64).mean(axis=2)


def resize(raster: Raster, width: int, height: int) -> Raster:
    """Bilinear resample to a new size, returning a new raster."""
    if (raster.width, raster.height) == (width, height):
        return raster
    resized = cv2.resize(raster.pixels, (width, height), interpolation=cv2.INTER_LINEAR)
    resized.setflags(write=False)
    return Raster(width=width, height=height, pixels=resized)


def to_grayscale_grid(raster: Raster, size: int = 8) -> GrayscaleGrid:
    """Downsample a raster to an NxN grayscale grid by nearest-neighbour sampling.

    Cell (x, y) takes the source pixel at (floor(x*width/N), floor(y*height/N))
    and converts it with BT.601 luma, rounded to the nearest integer.

    Args:
        raster: Source raster.
        size: Grid size N (must be >= 2).

    Returns:
        GrayscaleGrid with N*N values.

    Raises:
        ValueError: If size is below 2.
    """
    if size < _MIN_GRID_SIZE:
        msg = f"Grid size must be >= {_MIN_GRID_SIZE}, got {size}"
        raise ValueError(msg)

    cells = np.arange(size)
    src_x = (cells * raster.width) // size
    src_y = (cells * raster.height) // size
    sampled = raster.pixels[np.ix_(src_y, src_x)]

    values = round_half_up(luma(sampled)).reshape(-1)
    return GrayscaleGrid(size=size, values=values)
