"""Decoding of image bytes and sampled video frames into rasters."""

from __future__ import annotations

import logging
import mimetypes
import tempfile
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Any, Protocol

import cv2
import numpy as np
import numpy.typing as npt

from .errors import DecodeError, InvalidRasterError, UnsupportedMediaPairError
from .media import MediaFile
from .raster import Raster

logger = logging.getLogger(__name__)

_GRAY_NDIM = 2
_BGR_CHANNELS = 3
_BGRA_CHANNELS = 4


class RasterSource(Protocol):
    """Anything that turns a media file into one RGBA raster."""

    def decode(self, media: MediaFile) -> Raster:
        """Decode an image, or one frame of a video.

        Raises:
            DecodeError: If the content cannot be decoded.
        """
        ...


def _to_rgba(img: npt.NDArray[Any]) -> npt.NDArray[np.uint8]:
    """Convert an OpenCV image (gray, BGR or BGRA, 8 or 16 bit) to RGBA uint8."""
    if img.dtype == np.uint16:
        img = (img >> 8).astype(np.uint8)
    elif img.dtype != np.uint8:
        msg = f"Unsupported pixel depth: {img.dtype}"
        raise DecodeError(msg)

    if img.ndim == _GRAY_NDIM:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    if img.shape[2] == _BGR_CHANNELS:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    if img.shape[2] == _BGRA_CHANNELS:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    msg = f"Unsupported channel count: {img.shape[2]}"
    raise DecodeError(msg)


class OpenCVRasterSource:
    """OpenCV-backed decoder.

    Images are decoded in memory with cv2.imdecode. Videos are written to a
    temporary file (cv2.VideoCapture needs a path) and a single frame is read
    at a fixed time offset, clamped to the last frame for short clips.
    """

    def __init__(self, video_seek_seconds: float = 1.0):
        """Initialize decoder.

        Args:
            video_seek_seconds: Offset of the sampled video frame.
        """
        self.video_seek_seconds = video_seek_seconds

    def decode(self, media: MediaFile) -> Raster:
        kind = media.kind
        if kind is None:
            msg = f"Unsupported media type: {media.mime_type!r}"
            raise UnsupportedMediaPairError(msg)
        try:
            if kind == "image":
                return self.decode_image(media)
            return self.decode_video_frame(media)
        except cv2.error as e:
            msg = f"OpenCV failed to decode {media.name or media.mime_type}: {e}"
            raise DecodeError(msg) from e

    def decode_image(self, media: MediaFile) -> Raster:
        """Decode image bytes into a raster.

        Raises:
            DecodeError: If OpenCV cannot decode the bytes.
        """
        buf = np.frombuffer(media.data, dtype=np.uint8)
        img = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED) if buf.size else None
        if img is None:
            msg = f"Could not decode image: {media.name or media.mime_type}"
            raise DecodeError(msg)
        return self._to_raster(img, media)

    def decode_video_frame(self, media: MediaFile) -> Raster:
        """Read the frame at `video_seek_seconds` from video bytes.

        Raises:
            DecodeError: If the video cannot be opened or no frame can be read.
        """
        suffix = mimetypes.guess_extension(media.mime_type) or Path(media.name).suffix or ".bin"
        with tempfile.TemporaryDirectory(prefix="mediasim-") as tmpdir:
            video_path = Path(tmpdir) / f"input{suffix}"
            video_path.write_bytes(media.data)

            cap = cv2.VideoCapture(str(video_path))
            try:
                if not cap.isOpened():
                    msg = f"Could not open video: {media.name or media.mime_type}"
                    raise DecodeError(msg)
                frame = self._read_frame_at(cap, self.video_seek_seconds)
            finally:
                cap.release()

        if frame is None:
            msg = f"Could not read a frame from video: {media.name or media.mime_type}"
            raise DecodeError(msg)
        return self._to_raster(frame, media)

    @staticmethod
    def _read_frame_at(cap: cv2.VideoCapture, seconds: float) -> npt.NDArray[Any] | None:
        """Seek to a time offset and read one frame, falling back to the first frame."""
        fps = cap.get(cv2.CAP_PROP_FPS)
        total_frames = int(cap.get(cv2.CAP_PROP_FRAME_COUNT))

        target = int(seconds * fps) if fps > 0 else 0
        if total_frames > 0:
            target = min(target, total_frames - 1)

        if target > 0:
            cap.set(cv2.CAP_PROP_POS_FRAMES, target)
            ok, frame = cap.read()
            if ok and frame is not None:
                return frame
            logger.debug(f"Seek to frame {target} failed, reading first frame instead")
            cap.set(cv2.CAP_PROP_POS_FRAMES, 0)

        ok, frame = cap.read()
        return frame if ok else None

    @staticmethod
    def _to_raster(img: npt.NDArray[Any], media: MediaFile) -> Raster:
        try:
            return Raster.from_array(_to_rgba(img))
        except InvalidRasterError as e:
            msg = f"Decoded content of {media.name or media.mime_type} is not a valid raster: {e}"
            raise DecodeError(msg) from e


def decode_with_timeout(source: RasterSource, media: MediaFile, timeout: float) -> Raster:
    """Run `source.decode` with an upper bound on wall time.

    The decode runs on a helper thread. On timeout the thread is abandoned
    (OpenCV calls cannot be interrupted) and DecodeError is raised.

    Args:
        source: Decoder to use.
        media: File to decode.
        timeout: Seconds to wait.

    Returns:
        Decoded raster.

    Raises:
        DecodeError: On timeout or decode failure.
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mediasim-decode")
    try:
        future = executor.submit(source.decode, media)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as e:
            future.cancel()
            msg = f"Decoding {media.name or media.mime_type} timed out after {timeout}s"
            raise DecodeError(msg) from e
    finally:
        executor.shutdown(wait=False)
