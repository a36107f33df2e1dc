"""Tests for server lifecycle state."""

from datetime import UTC, datetime, timedelta

from videocompress.server.lifecycle import ServerLifecycle, ShutdownState


class TestShutdownState:
    """Tests for ShutdownState."""

    def test_initial_state(self):
        assert not ShutdownState().is_shutting_down

    def test_shutting_down_once_initiated(self):
        assert ShutdownState(initiated=datetime.now(UTC)).is_shutting_down


class TestServerLifecycle:
    """Tests for ServerLifecycle."""

    def test_uptime_increases(self):
        lifecycle = ServerLifecycle(
            start_time=datetime.now(UTC) - timedelta(seconds=30)
        )
        assert lifecycle.uptime_seconds >= 30

    def test_initiate_shutdown(self):
        lifecycle = ServerLifecycle()
        lifecycle.initiate_shutdown()

        assert lifecycle.is_shutting_down
        assert lifecycle.shutdown_state.initiated is not None

    def test_initiate_shutdown_is_idempotent(self):
        lifecycle = ServerLifecycle()
        lifecycle.initiate_shutdown()
        first = lifecycle.shutdown_state.initiated
        lifecycle.initiate_shutdown()
        assert lifecycle.shutdown_state.initiated == first
