"""Transcode result records and their store."""

from videocompress.results.models import (
    ResultRecord,
    compute_throughput,
    new_result_id,
)
from videocompress.results.store import (
    InMemoryResultStore,
    ResultStore,
    delete_result_file,
)

__all__ = [
    "InMemoryResultStore",
    "ResultRecord",
    "ResultStore",
    "compute_throughput",
    "delete_result_file",
    "new_result_id",
]
