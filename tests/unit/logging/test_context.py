"""Tests for request context propagation into log records."""

import asyncio
import logging

from videocompress.logging.context import (
    RequestContextFilter,
    get_request_id,
    request_context,
)


def make_record() -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, "message", (), None)


class TestRequestContext:
    """Tests for the request_context manager."""

    def test_binds_and_resets(self):
        assert get_request_id() is None
        with request_context("abc123") as rid:
            assert rid == "abc123"
            assert get_request_id() == "abc123"
        assert get_request_id() is None

    def test_generates_id_when_missing(self):
        with request_context() as rid:
            assert rid
            assert len(rid) == 8

    def test_nested_contexts_restore_outer(self):
        with request_context("outer"):
            with request_context("inner"):
                assert get_request_id() == "inner"
            assert get_request_id() == "outer"

    async def test_isolated_between_tasks(self):
        seen: dict[str, str | None] = {}

        async def worker(name: str) -> None:
            with request_context(name):
                await asyncio.sleep(0.01)
                seen[name] = get_request_id()

        await asyncio.gather(worker("one"), worker("two"))
        assert seen == {"one": "one", "two": "two"}


class TestRequestContextFilter:
    """Tests for RequestContextFilter."""

    def test_adds_request_fields(self):
        record = make_record()
        with request_context("feedface"):
            assert RequestContextFilter().filter(record) is True

        assert record.request_id == "feedface"
        assert record.request_tag == "[feedface] "

    def test_empty_tag_outside_request(self):
        record = make_record()
        RequestContextFilter().filter(record)

        assert record.request_id is None
        assert record.request_tag == ""
