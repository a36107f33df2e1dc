"""Tests for InMemoryResultStore."""

from pathlib import Path

import pytest

from videocompress.results import InMemoryResultStore, ResultRecord
from videocompress.results.store import delete_result_file


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def record(record_id: str, path: Path | None = None) -> ResultRecord:
    return ResultRecord(
        id=record_id,
        file_path=path or Path(f"/nonexistent/{record_id}.mp4"),
        mode="balanced",
        mode_decider="manual",
        input_bytes=1000,
        output_bytes=500,
        resolution="original",
        video_codec="h264",
        audio_codec="aac",
        hardware="none",
        elapsed_ms=10,
        throughput_mb_s=0.1,
    )


@pytest.fixture
def evicted() -> list[str]:
    return []


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock, evicted) -> InMemoryResultStore:
    return InMemoryResultStore(
        max_entries=3,
        ttl_seconds=60.0,
        on_evict=lambda r: evicted.append(r.id),
        clock=clock,
    )


class TestPutGet:
    """Tests for basic storage."""

    def test_get_returns_stored_record(self, store):
        store.put(record("a"))
        assert store.get("a").id == "a"

    def test_get_unknown_returns_none(self, store):
        assert store.get("missing") is None

    def test_len(self, store):
        store.put(record("a"))
        store.put(record("b"))
        assert len(store) == 2


class TestExpiry:
    """Tests for TTL expiry."""

    def test_record_expires(self, store, clock, evicted):
        store.put(record("a"))
        clock.now += 60.0

        assert store.get("a") is None
        assert evicted == ["a"]

    def test_record_alive_before_ttl(self, store, clock):
        store.put(record("a"))
        clock.now += 59.0
        assert store.get("a") is not None

    def test_put_collects_expired(self, store, clock, evicted):
        store.put(record("a"))
        clock.now += 61.0
        store.put(record("b"))

        assert evicted == ["a"]
        assert len(store) == 1

    def test_purge_expired(self, store, clock):
        store.put(record("a"))
        store.put(record("b"))
        clock.now += 120.0
        assert store.purge_expired() == 2

    def test_zero_ttl_never_expires(self, clock):
        store = InMemoryResultStore(ttl_seconds=0, on_evict=None, clock=clock)
        store.put(record("a"))
        clock.now += 10**9
        assert store.get("a") is not None


class TestCapacity:
    """Tests for the size bound."""

    def test_oldest_evicted_first(self, store, evicted):
        for rid in ("a", "b", "c", "d"):
            store.put(record(rid))

        assert evicted == ["a"]
        assert store.get("a") is None
        assert store.get("d") is not None

    def test_negative_bounds_rejected(self):
        with pytest.raises(ValueError):
            InMemoryResultStore(max_entries=-1)
        with pytest.raises(ValueError):
            InMemoryResultStore(ttl_seconds=-1)


class TestDeleteAndClear:
    """Tests for explicit removal."""

    def test_delete(self, store, evicted):
        store.put(record("a"))
        assert store.delete("a") is True
        assert store.delete("a") is False
        assert evicted == ["a"]

    def test_clear_evicts_everything(self, store, evicted):
        store.put(record("a"))
        store.put(record("b"))
        store.clear()

        assert len(store) == 0
        assert sorted(evicted) == ["a", "b"]


class TestDeleteResultFile:
    """Tests for the default eviction hook."""

    def test_removes_file(self, tmp_path: Path):
        output = tmp_path / "out.mp4"
        output.write_bytes(b"data")
        delete_result_file(record("a", output))
        assert not output.exists()

    def test_missing_file_is_ignored(self, tmp_path: Path):
        delete_result_file(record("a", tmp_path / "gone.mp4"))
