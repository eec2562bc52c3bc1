"""Records exchanged between sampling, storage and clustering."""

from dataclasses import dataclass
from typing import Tuple

from PIL import Image

from .hash import compute_hashes


@dataclass(frozen=True)
class FrameSample:
    """A decoded frame waiting to be hashed. Never stored."""
    video_id: str
    timestamp_ms: int
    image: Image.Image


@dataclass(frozen=True)
class FingerprintRecord:
    """Both hashes of one sampled frame of one video."""
    video_id: str
    timestamp_ms: int
    ahash: int
    dhash: int


@dataclass(frozen=True)
class DuplicateGroup:
    """An anchor video and the videos that look like it, in discovery order."""
    anchor: str
    candidates: Tuple[str, ...]


def fingerprint_frame(sample: FrameSample) -> FingerprintRecord:
    """
    Hash a sampled frame into a storable record.

    Raises:
        InvalidImage: If the frame has zero width or height
    """
    hashes = compute_hashes(sample.image)
    return FingerprintRecord(
        video_id=sample.video_id,
        timestamp_ms=sample.timestamp_ms,
        ahash=hashes.ahash,
        dhash=hashes.dhash,
    )
