"""Raw media input and the byte-identity fast path."""

from __future__ import annotations

from dataclasses import dataclass

from .config import MediaKind
from .errors import UnsupportedMediaPairError
from .models import FileDescriptor


@dataclass(frozen=True)
class MediaFile:
    """Raw file content plus its declared MIME type."""

    data: bytes
    mime_type: str
    name: str = ""

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def kind(self) -> MediaKind | None:
        """'image' or 'video' from the MIME type, None for anything else."""
        mime = self.mime_type.lower()
        if mime.startswith("image/"):
            return "image"
        if mime.startswith("video/"):
            return "video"
        return None

    def describe(self) -> FileDescriptor:
        return FileDescriptor(name=self.name, size=self.size, mime_type=self.mime_type)


def is_binary_identical(data1: bytes, data2: bytes) -> bool:
    """Byte-for-byte equality, rejecting different lengths without reading content."""
    if len(data1) != len(data2):
        return False
    return data1 == data2


def common_media_kind(file1: MediaFile, file2: MediaFile) -> MediaKind:
    """Media kind shared by both files.

    Raises:
        UnsupportedMediaPairError: If either file is neither image nor video,
            or the kinds differ.
    """
    kind1, kind2 = file1.kind, file2.kind
    if kind1 is None or kind2 is None:
        unsupported = file1.mime_type if kind1 is None else file2.mime_type
        msg = f"Unsupported media type: {unsupported!r} (expected image/* or video/*)"
        raise UnsupportedMediaPairError(msg)
    if kind1 != kind2:
        msg = f"Files must be of the same media type, got {kind1} and {kind2}"
        raise UnsupportedMediaPairError(msg)
    return kind1
