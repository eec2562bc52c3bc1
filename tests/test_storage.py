"""Tests for fingerprint stores."""

import sqlite3
import threading

import pytest

from vidsift.dedup.model import FingerprintRecord
from vidsift.storage import MemoryFingerprintStore, SqliteFingerprintStore, StoreOpenError

MAX_U64 = (1 << 64) - 1


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        s = MemoryFingerprintStore()
    else:
        s = SqliteFingerprintStore(tmp_path / "db" / "fingerprints.db")
    yield s
    s.close()


def rec(video_id, ts, ahash=1, dhash=2):
    return FingerprintRecord(video_id=video_id, timestamp_ms=ts, ahash=ahash, dhash=dhash)


class TestStoreContract:
    def test_empty_store(self, store):
        assert store.list_all() == []
        assert store.count_distinct_analyzed_videos() == 0
        assert store.analyzed_video_ids() == set()

    def test_insert_preserves_order(self, store):
        records = [rec("b", 0), rec("a", 0), rec("b", 1000)]
        for r in records:
            store.insert(r)

        assert store.list_all() == records

    def test_count_distinct_videos(self, store):
        for r in [rec("a", 0), rec("a", 1000), rec("b", 0)]:
            store.insert(r)

        assert store.count_distinct_analyzed_videos() == 2
        assert store.analyzed_video_ids() == {"a", "b"}

    def test_delete_all_for_video(self, store):
        for r in [rec("a", 0), rec("b", 0), rec("a", 1000)]:
            store.insert(r)

        store.delete_all_for_video("a")

        assert store.list_all() == [rec("b", 0)]

    def test_delete_unknown_video_is_noop(self, store):
        store.insert(rec("a", 0))
        store.delete_all_for_video("missing")
        assert store.list_all() == [rec("a", 0)]

    def test_delete_all(self, store):
        store.insert(rec("a", 0))
        store.insert(rec("b", 0))

        store.delete_all()

        assert store.list_all() == []

    def test_full_range_hashes_round_trip(self, store):
        """Test that hashes with the top bit set survive storage."""
        r = rec("a", 0, ahash=MAX_U64, dhash=1 << 63)
        store.insert(r)

        assert store.list_all() == [r]

    def test_concurrent_inserts(self, store):
        def worker(video_id):
            for ts in range(0, 20_000, 1000):
                store.insert(rec(video_id, ts))

        threads = [threading.Thread(target=worker, args=(f"v{i}",)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store.list_all()) == 8 * 20
        assert store.count_distinct_analyzed_videos() == 8


class TestSqliteStore:
    def test_persists_across_connections(self, tmp_path):
        path = tmp_path / "fp.db"
        with SqliteFingerprintStore(path) as s:
            s.insert(rec("a", 0, ahash=MAX_U64))

        with SqliteFingerprintStore(path) as s:
            assert s.list_all() == [rec("a", 0, ahash=MAX_U64)]
            assert s.count_records() == 1

    def test_in_memory_database(self):
        with SqliteFingerprintStore(":memory:") as s:
            s.insert(rec("a", 0))
            assert s.count_distinct_analyzed_videos() == 1

    def test_same_frame_is_replaced(self, tmp_path):
        with SqliteFingerprintStore(tmp_path / "fp.db") as s:
            s.insert(rec("a", 0, ahash=1))
            s.insert(rec("a", 0, ahash=5))

            assert s.list_all() == [rec("a", 0, ahash=5)]

    def test_close_is_idempotent(self, tmp_path):
        s = SqliteFingerprintStore(tmp_path / "fp.db")
        s.close()
        s.close()

    def test_unopenable_path(self, tmp_path):
        directory = tmp_path / "is_a_dir"
        directory.mkdir()

        with pytest.raises(StoreOpenError):
            SqliteFingerprintStore(directory)

    def test_parent_is_a_file(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(StoreOpenError):
            SqliteFingerprintStore(blocker / "fp.db")

    def test_connection_closed_when_schema_fails(self, tmp_path, monkeypatch):
        """A connection that opened but could not create the schema is released."""

        class BrokenConnection:
            closed = False

            def execute(self, *args):
                raise sqlite3.OperationalError("disk I/O error")

            def close(self):
                self.closed = True

        conn = BrokenConnection()
        monkeypatch.setattr(sqlite3, "connect", lambda *args, **kwargs: conn)

        with pytest.raises(StoreOpenError):
            SqliteFingerprintStore(tmp_path / "fp.db")
        assert conn.closed
