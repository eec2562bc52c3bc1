"""Contract every fingerprint store fulfils."""

from typing import List, Protocol, Set

from ..dedup.model import FingerprintRecord


class FingerprintStore(Protocol):
    """
    Durable home for fingerprint records.

    Each call is atomic on its own; callers never need a transaction spanning
    several records. ``list_all`` returns records in insertion order.
    """

    def insert(self, record: FingerprintRecord) -> None: ...

    def delete_all_for_video(self, video_id: str) -> None: ...

    def delete_all(self) -> None: ...

    def list_all(self) -> List[FingerprintRecord]: ...

    def analyzed_video_ids(self) -> Set[str]: ...

    def count_distinct_analyzed_videos(self) -> int: ...

    def close(self) -> None: ...
