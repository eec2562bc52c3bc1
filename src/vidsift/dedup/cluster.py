"""Greedy clustering of fingerprint records into duplicate groups."""

from typing import Iterable, Iterator, List, Optional

from .distance import compare
from .model import DuplicateGroup, FingerprintRecord
from ..cancellation import CancellationToken
from ..logging import get_logger

logger = get_logger(__name__)

DEFAULT_THRESHOLD = 0.95


def iter_duplicate_groups(
    records: Iterable[FingerprintRecord],
    threshold: float = DEFAULT_THRESHOLD,
    cancel: Optional[CancellationToken] = None,
) -> Iterator[DuplicateGroup]:
    """
    Yield duplicate groups found by a self-pruning greedy pass.

    Each round takes the first remaining record as the anchor, compares it
    against every remaining record of another video by aHash and by dHash,
    and yields a group if anything scored strictly above ``threshold``. All
    records of the anchor's video are then dropped, so a video anchors at most
    one group. Matched videos keep their records and may anchor later rounds.

    The result depends on the order of ``records``: the first record of the
    earliest video becomes the anchor. Pass records in a stable order (the
    stores return insertion order) to get reproducible groups.

    Comparisons are O(R^2) in the record count R; each round only shrinks the
    working list by the anchor's own records. This is fine for hundreds to a
    few thousand videos and is the practical scaling limit.

    Args:
        records: Fingerprint records, in anchor priority order
        threshold: Similarity a hash pair must exceed to count as a match
        cancel: Checked between rounds; raises ``OperationCancelled``

    Raises:
        ValueError: If the threshold is outside [0, 1] or a record lacks a hash
        OperationCancelled: If ``cancel`` is triggered; groups already yielded
            remain valid
    """
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"threshold must be within [0, 1], got {threshold}")

    working: List[FingerprintRecord] = list(records)
    for record in working:
        _check_record(record)

    rounds = 0
    while working:
        if cancel is not None:
            cancel.raise_if_cancelled()

        current = working.pop(0)
        others = [r for r in working if r.video_id != current.video_id]

        by_ahash = [r for r in others if compare(r.ahash, current.ahash) > threshold]
        by_dhash = [r for r in others if compare(r.dhash, current.dhash) > threshold]

        candidates = list(dict.fromkeys(r.video_id for r in by_ahash + by_dhash))
        if candidates:
            logger.debug(f"Anchor {current.video_id} matched {len(candidates)} videos")
            yield DuplicateGroup(anchor=current.video_id, candidates=tuple(candidates))

        working = others
        rounds += 1

    logger.info(f"Clustering finished after {rounds} rounds")


def cluster_duplicates(
    records: Iterable[FingerprintRecord],
    threshold: float = DEFAULT_THRESHOLD,
    cancel: Optional[CancellationToken] = None,
) -> List[DuplicateGroup]:
    """
    Group videos whose frames look alike.

    Args:
        records: Fingerprint records, in anchor priority order
        threshold: Similarity a hash pair must exceed to count as a match
        cancel: Optional cancellation token

    Returns:
        List of DuplicateGroup objects in discovery order
    """
    return list(iter_duplicate_groups(records, threshold=threshold, cancel=cancel))


def _check_record(record: FingerprintRecord) -> None:
    if not isinstance(record.ahash, int) or not isinstance(record.dhash, int):
        raise ValueError(f"Record for {record.video_id} at {record.timestamp_ms}ms is missing a hash")
