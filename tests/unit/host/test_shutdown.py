"""
Tests for host/shutdown.py.

Tests shutdown manager functionality including:
- Signal handler registration and restore
- Signal handling firing the stop signal
- Duplicate signal handling
- Return code mapping
"""

import signal
from unittest.mock import patch

import pytest

from cmdsvc.core.token import StopSignal
from cmdsvc.host import ShutdownManager


@pytest.mark.unit
class TestShutdownManagerInit:
    """Test ShutdownManager initialization."""

    def test_basic_initialization(self):
        """Test basic initialization."""
        stop = StopSignal()
        manager = ShutdownManager(stop)

        assert manager.stop is stop
        assert manager.is_shutting_down() is False
        assert manager.get_signal_return_code() == 130  # Default
        assert manager._original_handlers == {}


@pytest.mark.unit
class TestSignalRegistration:
    """Test signal handler registration."""

    def test_register_signal_handlers(self):
        """Test register_signal_handlers registers SIGTERM and SIGINT."""
        manager = ShutdownManager(StopSignal())

        with patch("signal.signal") as mock_signal:
            mock_signal.return_value = signal.SIG_DFL
            manager.register_signal_handlers()

        registered = [call.args[0] for call in mock_signal.call_args_list]
        assert signal.SIGTERM in registered
        assert signal.SIGINT in registered

    def test_context_manager_restores_handlers(self):
        """Test leaving the context reinstalls the previous handlers."""
        original = signal.getsignal(signal.SIGTERM)

        with ShutdownManager(StopSignal()) as manager:
            assert signal.getsignal(signal.SIGTERM) == manager._handle_signal

        assert signal.getsignal(signal.SIGTERM) == original
        assert manager._original_handlers == {}


@pytest.mark.unit
class TestSignalHandling:
    """Test the signal handler."""

    def test_sigterm_fires_stop(self):
        """Test SIGTERM fires the stop signal with return code 143."""
        stop = StopSignal()
        manager = ShutdownManager(stop)

        manager._handle_signal(signal.SIGTERM, None)

        assert stop.fired is True
        assert stop.reason == "SIGTERM"
        assert manager.is_shutting_down() is True
        assert manager.get_signal_return_code() == 143

    def test_sigint_fires_stop(self):
        """Test SIGINT fires the stop signal with return code 130."""
        stop = StopSignal()
        manager = ShutdownManager(stop)

        manager._handle_signal(signal.SIGINT, None)

        assert stop.reason == "SIGINT"
        assert manager.get_signal_return_code() == 130

    def test_duplicate_signals_ignored(self):
        """Test a second signal does not change the return code or reason."""
        stop = StopSignal()
        manager = ShutdownManager(stop)

        manager._handle_signal(signal.SIGTERM, None)
        manager._handle_signal(signal.SIGINT, None)

        assert stop.reason == "SIGTERM"
        assert manager.get_signal_return_code() == 143

    def test_handler_logs(self, root_lg, log_records):
        """Test the shutdown request is logged with the signal name."""
        manager = ShutdownManager(StopSignal(), root_lg)

        manager._handle_signal(signal.SIGINT, None)

        assert log_records.records[0].getMessage() == "shutdown requested"
        assert log_records.records[0].signal == "SIGINT"

    @pytest.mark.posix
    def test_real_signal(self):
        """Test a real SIGTERM delivered to the process fires the stop signal."""
        import os

        stop = StopSignal()
        with ShutdownManager(stop):
            os.kill(os.getpid(), signal.SIGTERM)
            assert stop.wait(2) is True
