"""Request context for structured logging.

A contextvar carries the current request id so that every record logged
while a request is being handled (including from the policy engine and the
executor) can be correlated without passing the id around.
"""

from __future__ import annotations

import contextvars
import logging
import secrets
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def new_request_id() -> str:
    """Generate a short random request id."""
    return secrets.token_hex(4)


def get_request_id() -> str | None:
    """Return the request id bound to the current context, if any."""
    return _request_id.get()


@contextmanager
def request_context(request_id: str | None = None) -> Generator[str, None, None]:
    """Bind a request id for the duration of the block.

    Args:
        request_id: Id to bind; a new one is generated if omitted.

    Yields:
        The bound request id.
    """
    rid = request_id or new_request_id()
    token = _request_id.set(rid)
    try:
        yield rid
    finally:
        _request_id.reset(token)


class RequestContextFilter(logging.Filter):
    """Logging filter that injects the request id into log records.

    Sets ``request_id`` (raw, for JSON output) and ``request_tag``
    ("[1a2b3c4d] " or "", for the text format).
    """

    def filter(self, record: logging.LogRecord) -> bool:
        request_id = get_request_id()
        record.request_id = request_id
        record.request_tag = f"[{request_id}] " if request_id else ""
        return True
