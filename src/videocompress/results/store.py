"""Result record storage.

ResultStore is the interface the HTTP layer depends on. The in-memory
implementation bounds growth two ways: entries expire after ttl_seconds and
the oldest entries are evicted once max_entries is exceeded. Evicted records
are passed to on_evict, which by default deletes the output file.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Protocol

from videocompress.results.models import ResultRecord

logger = logging.getLogger(__name__)

EvictCallback = Callable[[ResultRecord], None]


class ResultStore(Protocol):
    """Keyed storage for finished transcode results."""

    def put(self, record: ResultRecord) -> None: ...

    def get(self, record_id: str) -> ResultRecord | None: ...

    def delete(self, record_id: str) -> bool: ...

    def purge_expired(self) -> int: ...

    def clear(self) -> None: ...


def delete_result_file(record: ResultRecord) -> None:
    """Default eviction hook: remove the record's output file."""
    try:
        record.file_path.unlink(missing_ok=True)
        logger.debug("Removed evicted result file: %s", record.file_path)
    except OSError as e:
        logger.warning("Could not remove result file %s: %s", record.file_path, e)


class InMemoryResultStore:
    """Thread-safe, bounded in-memory ResultStore.

    Args:
        max_entries: Maximum records kept; oldest are evicted first.
            0 disables the size bound.
        ttl_seconds: Seconds a record stays retrievable. 0 disables expiry.
        on_evict: Called for every record that leaves the store.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        max_entries: int = 256,
        ttl_seconds: float = 3600.0,
        on_evict: EvictCallback | None = delete_result_file,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 0:
            raise ValueError(f"max_entries must be non-negative, got {max_entries}")
        if ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must be non-negative, got {ttl_seconds}")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._on_evict = on_evict
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: OrderedDict[str, tuple[float, ResultRecord]] = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _is_expired(self, stored_at: float, now: float) -> bool:
        return self.ttl_seconds > 0 and now - stored_at >= self.ttl_seconds

    def _collect_expired(self, now: float) -> list[ResultRecord]:
        # Insertion order is age order, so stop at the first live entry
        expired: list[ResultRecord] = []
        while self._entries:
            record_id, (stored_at, record) = next(iter(self._entries.items()))
            if not self._is_expired(stored_at, now):
                break
            del self._entries[record_id]
            expired.append(record)
        return expired

    def _evict(self, records: list[ResultRecord], reason: str) -> None:
        for record in records:
            logger.debug("Evicting result %s (%s)", record.id, reason)
            if self._on_evict is not None:
                self._on_evict(record)

    def put(self, record: ResultRecord) -> None:
        """Store a record, evicting expired and overflow entries."""
        with self._lock:
            now = self._clock()
            expired = self._collect_expired(now)
            replaced = self._entries.pop(record.id, None)
            self._entries[record.id] = (now, record)
            overflow: list[ResultRecord] = []
            while self.max_entries and len(self._entries) > self.max_entries:
                _, (_, oldest) = self._entries.popitem(last=False)
                overflow.append(oldest)

        # Callbacks run outside the lock; they may touch the filesystem
        self._evict(expired, "expired")
        self._evict(overflow, "capacity")
        if replaced is not None and replaced[1].file_path != record.file_path:
            self._evict([replaced[1]], "replaced")

    def get(self, record_id: str) -> ResultRecord | None:
        """Return a live record, or None if unknown or expired."""
        with self._lock:
            entry = self._entries.get(record_id)
            if entry is None:
                return None
            stored_at, record = entry
            if not self._is_expired(stored_at, self._clock()):
                return record
            del self._entries[record_id]
        self._evict([record], "expired")
        return None

    def delete(self, record_id: str) -> bool:
        """Remove a record. Returns True if it existed."""
        with self._lock:
            entry = self._entries.pop(record_id, None)
        if entry is None:
            return False
        self._evict([entry[1]], "deleted")
        return True

    def purge_expired(self) -> int:
        """Evict all expired records. Returns the number removed."""
        with self._lock:
            expired = self._collect_expired(self._clock())
        self._evict(expired, "expired")
        return len(expired)

    def clear(self) -> None:
        """Evict every record (used at shutdown)."""
        with self._lock:
            records = [record for _, record in self._entries.values()]
            self._entries.clear()
        self._evict(records, "shutdown")
