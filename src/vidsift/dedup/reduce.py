"""Reduce frames to the small monochrome grids the hashes are built from."""

from typing import Tuple, Union

import numpy as np
from PIL import Image

ImageLike = Union[Image.Image, np.ndarray]

DHASH_GRID_SIZE: Tuple[int, int] = (9, 8)  # (columns, rows)
AHASH_GRID_SIZE: Tuple[int, int] = (8, 8)


class InvalidImage(ValueError):
    """Raised when an image has no pixels to reduce."""


def reduce_for_difference_hash(image: ImageLike) -> np.ndarray:
    """
    Reduce an image to the dHash input grid.

    Args:
        image: PIL image or RGB(A)/grayscale array of any size

    Returns:
        uint8 array of shape (8, 9): 8 rows of 9 gray intensities

    Raises:
        InvalidImage: If the image has zero width or height
    """
    return _reduce(image, DHASH_GRID_SIZE)


def reduce_for_average_hash(image: ImageLike) -> np.ndarray:
    """
    Reduce an image to the aHash input grid.

    Returns:
        uint8 array of shape (8, 8)

    Raises:
        InvalidImage: If the image has zero width or height
    """
    return _reduce(image, AHASH_GRID_SIZE)


def _reduce(image: ImageLike, size: Tuple[int, int]) -> np.ndarray:
    img = _as_pil_image(image)
    if img.width == 0 or img.height == 0:
        raise InvalidImage(f"Cannot reduce an image of size {img.width}x{img.height}")
    if img.mode != "RGB":
        img = img.convert("RGB")

    # Resample in colour, then desaturate.
    scaled = img.resize(size, Image.Resampling.BILINEAR)
    gray = scaled.convert("L")
    return np.asarray(gray, dtype=np.uint8)


def _as_pil_image(image: ImageLike) -> Image.Image:
    if isinstance(image, np.ndarray):
        if image.ndim < 2 or image.shape[0] == 0 or image.shape[1] == 0:
            raise InvalidImage(f"Cannot reduce an array of shape {image.shape}")
        return Image.fromarray(np.ascontiguousarray(image, dtype=np.uint8))
    return image
