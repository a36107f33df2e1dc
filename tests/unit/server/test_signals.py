"""Tests for shutdown signal handler registration."""

import asyncio
import signal
from unittest.mock import MagicMock

from videocompress.server.lifecycle import ServerLifecycle
from videocompress.server.signals import (
    SHUTDOWN_SIGNALS,
    remove_signal_handlers,
    setup_signal_handlers,
)


class TestSetupSignalHandlers:
    """Tests for setup_signal_handlers."""

    def test_registers_sigterm_and_sigint(self):
        loop = MagicMock()
        setup_signal_handlers(loop, ServerLifecycle(), asyncio.Event())

        registered = [c.args[0] for c in loop.add_signal_handler.call_args_list]
        assert registered == [signal.SIGTERM, signal.SIGINT]

    def test_handler_initiates_shutdown(self):
        loop = MagicMock()
        lifecycle = ServerLifecycle()
        event = asyncio.Event()
        setup_signal_handlers(loop, lifecycle, event)

        handler, sig = loop.add_signal_handler.call_args_list[0].args[1:]
        handler(sig)

        assert lifecycle.is_shutting_down
        assert event.is_set()

    def test_registration_failure_is_logged(self, caplog):
        loop = MagicMock()
        loop.add_signal_handler.side_effect = NotImplementedError
        setup_signal_handlers(loop, ServerLifecycle(), asyncio.Event())

        assert "Failed to register handler for SIGTERM" in caplog.text


class TestRemoveSignalHandlers:
    """Tests for remove_signal_handlers."""

    def test_removes_all(self):
        loop = MagicMock()
        remove_signal_handlers(loop)
        removed = [c.args[0] for c in loop.remove_signal_handler.call_args_list]
        assert removed == list(SHUTDOWN_SIGNALS)

    def test_tolerates_missing_handlers(self):
        loop = MagicMock()
        loop.remove_signal_handler.side_effect = RuntimeError
        remove_signal_handlers(loop)
