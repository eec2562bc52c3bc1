"""In-process fingerprint store."""

import threading
from typing import List, Set

from ..dedup.model import FingerprintRecord


class MemoryFingerprintStore:
    """
    Append-only list of records shared by sampling workers.

    The lock is held for a single list operation only, never while a caller
    decodes or hashes.
    """

    def __init__(self) -> None:
        self._records: List[FingerprintRecord] = []
        self._lock = threading.Lock()

    def insert(self, record: FingerprintRecord) -> None:
        with self._lock:
            self._records.append(record)

    def delete_all_for_video(self, video_id: str) -> None:
        with self._lock:
            self._records = [r for r in self._records if r.video_id != video_id]

    def delete_all(self) -> None:
        with self._lock:
            self._records = []

    def list_all(self) -> List[FingerprintRecord]:
        with self._lock:
            return list(self._records)

    def analyzed_video_ids(self) -> Set[str]:
        with self._lock:
            return {r.video_id for r in self._records}

    def count_distinct_analyzed_videos(self) -> int:
        return len(self.analyzed_video_ids())

    def close(self) -> None:
        pass

    def __enter__(self) -> "MemoryFingerprintStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
