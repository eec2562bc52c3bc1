"""Similarity metrics for 64-bit perceptual hashes."""

from .hash import HASH_BITS

_MASK = (1 << HASH_BITS) - 1


def hamming_distance(a: int, b: int) -> int:
    """
    Count the bits that differ between two hashes.

    Args:
        a: First hash
        b: Second hash

    Returns:
        Hamming distance in [0, 64]
    """
    return bin((a ^ b) & _MASK).count("1")


def compare(a: int, b: int) -> float:
    """
    Score how similar two same-kind hashes are.

    Returns:
        1.0 for identical hashes, 0.0 when all 64 bits differ
    """
    return (HASH_BITS - hamming_distance(a, b)) / float(HASH_BITS)


def is_match(a: int, b: int, threshold: float) -> bool:
    """Return True when the similarity is strictly above ``threshold``."""
    return compare(a, b) > threshold
