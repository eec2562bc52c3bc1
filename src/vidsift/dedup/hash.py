"""Perceptual hash computation for sampled video frames."""

from dataclasses import dataclass

import imagehash
import numpy as np

from .reduce import ImageLike, reduce_for_average_hash, reduce_for_difference_hash
from ..logging import get_logger

logger = get_logger(__name__)

HASH_BITS = 64


@dataclass(frozen=True)
class FrameHashes:
    """Both perceptual hashes of a single frame, as unsigned 64-bit ints."""
    ahash: int
    dhash: int


def difference_hash(image: ImageLike) -> int:
    """
    Compute the 64-bit difference hash of an image.

    Each of the 8 rows of the 9x8 grid contributes 8 bits: a bit is set when a
    pixel is strictly darker than its right-hand neighbour. Cells are visited
    row-major from the top-left, the first cell landing in bit 63 and the last
    in bit 0.
    """
    grid = reduce_for_difference_hash(image).astype(np.int16)
    bits = grid[:, :-1] < grid[:, 1:]
    return _pack_bits(bits)


def average_hash(image: ImageLike) -> int:
    """
    Compute the 64-bit average hash of an image.

    The mean of the 8x8 grid is truncated to an integer intensity and a bit is
    set for every cell strictly brighter than it, in the same bit order as
    ``difference_hash``.
    """
    grid = reduce_for_average_hash(image).astype(np.int32)
    # Gray pixels carry R == G == B, so comparing intensities orders them
    # exactly as comparing packed 0xRRGGBB colours would.
    mean = int(grid.sum()) // grid.size
    bits = mean < grid
    return _pack_bits(bits)


def compute_hashes(image: ImageLike) -> FrameHashes:
    """
    Compute both perceptual hashes for one frame.

    Raises:
        InvalidImage: If the image has zero width or height
    """
    hashes = FrameHashes(ahash=average_hash(image), dhash=difference_hash(image))
    logger.debug(f"Computed hashes: ahash={format_hash(hashes.ahash)}, dhash={format_hash(hashes.dhash)}")
    return hashes


def to_image_hash(value: int) -> imagehash.ImageHash:
    """Wrap a 64-bit hash value as an 8x8 ``imagehash.ImageHash``."""
    return imagehash.hex_to_hash(format_hash(value))


def format_hash(value: int) -> str:
    """Render a hash as 16 lowercase hex digits."""
    return f"{value & ((1 << HASH_BITS) - 1):016x}"


def _pack_bits(bits: np.ndarray) -> int:
    # ImageHash renders its flattened bit array most significant bit first.
    return int(str(imagehash.ImageHash(bits)), 16)
