"""Server lifecycle state.

Tracks uptime and graceful shutdown so handlers can refuse new work once a
shutdown signal has arrived. The drain itself is bounded by the runner's
shutdown_timeout (see cli/serve.py).
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime


@dataclass
class ShutdownState:
    """Tracks shutdown progress."""

    initiated: datetime | None = None
    """UTC timestamp when shutdown was initiated."""

    @property
    def is_shutting_down(self) -> bool:
        return self.initiated is not None


@dataclass
class ServerLifecycle:
    """Startup time and shutdown coordination for `videocompress serve`."""

    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    shutdown_state: ShutdownState = field(default_factory=ShutdownState)

    @property
    def uptime_seconds(self) -> float:
        return (datetime.now(UTC) - self.start_time).total_seconds()

    @property
    def is_shutting_down(self) -> bool:
        return self.shutdown_state.is_shutting_down

    def initiate_shutdown(self) -> None:
        """Begin graceful shutdown. Idempotent."""
        if self.shutdown_state.initiated is not None:
            return
        self.shutdown_state.initiated = datetime.now(UTC)
