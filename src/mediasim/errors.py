"""Exception types raised by the similarity engine."""


class MediaSimError(Exception):
    """Base class for all engine errors."""


class InvalidRasterError(MediaSimError, ValueError):
    """Raster has zero area or a pixel buffer that does not match its size."""


class DecodeError(MediaSimError):
    """A file could not be decoded into a raster (or decoding timed out)."""


class HashLengthMismatchError(MediaSimError, ValueError):
    """Two hashes of different length were compared."""


class UnsupportedMediaPairError(MediaSimError, ValueError):
    """Files are not of the same media kind, or not images/videos at all."""
