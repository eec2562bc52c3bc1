from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import List, Set

from ..dedup.model import FingerprintRecord
from ..logging import get_logger

logger = get_logger(__name__)

_U64 = 1 << 64
_I64_MAX = (1 << 63) - 1


class StoreOpenError(Exception):
    """Raised when the fingerprint database cannot be opened."""


class SqliteFingerprintStore:
    """
    SQLite-backed fingerprint store.

    One connection is shared by every sampling worker; a lock serialises
    statements so the connection is only ever used by one thread at a time.
    """

    def __init__(self, path: Path | str = "vidsift.db") -> None:
        self._path = str(path)
        self._lock = threading.Lock()
        self._conn = self._open_database(self._path)

    @property
    def path(self) -> str:
        return self._path

    def insert(self, record: FingerprintRecord) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO video_frame_hash (video_id, frame_ms, a_hash, d_hash) "
                "VALUES (?, ?, ?, ?)",
                (record.video_id, record.timestamp_ms, _to_signed(record.ahash), _to_signed(record.dhash)),
            )
            self._conn.commit()

    def delete_all_for_video(self, video_id: str) -> None:
        with self._lock:
            cursor = self._conn.execute("DELETE FROM video_frame_hash WHERE video_id = ?", (video_id,))
            self._conn.commit()
        logger.debug(f"Deleted {cursor.rowcount} records for {video_id}")

    def delete_all(self) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM video_frame_hash")
            self._conn.commit()

    def list_all(self) -> List[FingerprintRecord]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT video_id, frame_ms, a_hash, d_hash FROM video_frame_hash ORDER BY id"
            ).fetchall()
        return [
            FingerprintRecord(
                video_id=video_id,
                timestamp_ms=frame_ms,
                ahash=_to_unsigned(a_hash),
                dhash=_to_unsigned(d_hash),
            )
            for video_id, frame_ms, a_hash, d_hash in rows
        ]

    def analyzed_video_ids(self) -> Set[str]:
        with self._lock:
            rows = self._conn.execute("SELECT DISTINCT video_id FROM video_frame_hash").fetchall()
        return {row[0] for row in rows}

    def count_distinct_analyzed_videos(self) -> int:
        with self._lock:
            (count,) = self._conn.execute(
                "SELECT COUNT(DISTINCT video_id) FROM video_frame_hash"
            ).fetchone()
        return count

    def count_records(self) -> int:
        with self._lock:
            (count,) = self._conn.execute("SELECT COUNT(*) FROM video_frame_hash").fetchone()
        return count

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> SqliteFingerprintStore:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _open_database(self, path: str) -> sqlite3.Connection:
        conn = None
        try:
            if path != ":memory:":
                Path(path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(path, check_same_thread=False)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS video_frame_hash (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    video_id TEXT NOT NULL,
                    frame_ms INTEGER NOT NULL,
                    a_hash INTEGER NOT NULL,
                    d_hash INTEGER NOT NULL,
                    UNIQUE(video_id, frame_ms)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_video_frame_hash_video ON video_frame_hash(video_id)
            """)
            conn.commit()
        except (OSError, sqlite3.Error) as exc:
            if conn is not None:
                conn.close()
            raise StoreOpenError(f"Failed to open fingerprint database: {path}") from exc

        return conn


def _to_signed(value: int) -> int:
    # SQLite integers are signed 64-bit.
    return value - _U64 if value > _I64_MAX else value


def _to_unsigned(value: int) -> int:
    return value + _U64 if value < 0 else value
