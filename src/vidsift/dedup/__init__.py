"""Perceptual fingerprinting and duplicate clustering for video frames."""

from .reduce import InvalidImage, reduce_for_average_hash, reduce_for_difference_hash
from .hash import FrameHashes, average_hash, compute_hashes, difference_hash
from .distance import compare, hamming_distance, is_match
from .model import DuplicateGroup, FingerprintRecord, FrameSample, fingerprint_frame
from .cluster import cluster_duplicates, iter_duplicate_groups

__all__ = [
    "InvalidImage",
    "reduce_for_average_hash",
    "reduce_for_difference_hash",
    "FrameHashes",
    "average_hash",
    "compute_hashes",
    "difference_hash",
    "compare",
    "hamming_distance",
    "is_match",
    "DuplicateGroup",
    "FingerprintRecord",
    "FrameSample",
    "fingerprint_frame",
    "cluster_duplicates",
    "iter_duplicate_groups",
]
