"""Pydantic models for type-safe data structures."""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .config import ProfileName

Score = Annotated[float, Field(ge=0.0, le=100.0)]


class FileDescriptor(BaseModel):
    """Identity of one compared file.

    Attributes:
        name: Original file name.
        size: Size in bytes.
        mime_type: Declared MIME type, e.g. "image/png".
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str
    size: int = Field(ge=0)
    mime_type: str


class MetricSet(BaseModel):
    """Per-metric similarity scores, each between 0 and 100.

    `repeated_frames` and `temporal_similarity` only exist for the video
    profile and hold placeholder values.
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    perceptual_hash: Score
    a_hash: Score
    d_hash: Score
    p_hash: Score
    color_histogram: Score
    brightness: Score
    texture: Score
    keypoints: Score
    embedding: Score
    ssim: Score
    repeated_frames: Score | None = None
    temporal_similarity: Score | None = None

    def as_dict(self) -> dict[str, float]:
        """Metric name to score, without the metrics this profile does not have."""
        return self.model_dump(exclude_none=True)


class SimilarityResult(BaseModel):
    """Outcome of one comparison.

    Attributes:
        overall_similarity: Weighted score between 0 and 100.
        metrics: Individual metric scores.
        is_identical: True when the files were byte-for-byte equal.
        processing_time_ms: Wall time spent on the comparison.
        profile: Weight profile used.
        timestamp: When the comparison finished (UTC).
        file1: First file.
        file2: Second file.
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    overall_similarity: Score
    metrics: MetricSet
    is_identical: bool
    processing_time_ms: int = Field(ge=0)
    profile: ProfileName
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    file1: FileDescriptor
    file2: FileDescriptor
