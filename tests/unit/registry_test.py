# pylint: disable=redefined-outer-name

import signal
import sys
from unittest.mock import MagicMock

import pytest

from devnet_sdk import devnet as devnet_module
from devnet_sdk.devnet import TERMINATION_SIGNALS, ProcessRegistry


@pytest.fixture
def hooks(monkeypatch) -> dict:
    """
    Captures the cleanup hooks instead of installing them in the test process.
    """
    installed = {"atexit": [], "signals": {}, "previous": {}}
    monkeypatch.setattr(ProcessRegistry, "_cleanup_registered", False)
    monkeypatch.setattr(ProcessRegistry, "_original_excepthook", None)
    monkeypatch.setattr(ProcessRegistry, "_original_signal_handlers", {})

    def fake_signal(sig, handler):
        installed["signals"][sig] = handler
        return installed["previous"].get(sig, signal.SIG_DFL)

    monkeypatch.setattr(
        devnet_module.atexit, "register", lambda fn: installed["atexit"].append(fn)
    )
    monkeypatch.setattr(devnet_module.signal, "signal", fake_signal)
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    return installed


def mock_devnet(running: bool = True) -> MagicMock:
    devnet = MagicMock()
    devnet.url = "http://127.0.0.1:6050"
    devnet.is_running.return_value = running
    return devnet


def test_hooks_installed_once(hooks):
    ProcessRegistry.register(mock_devnet())
    ProcessRegistry.register(mock_devnet())

    assert hooks["atexit"] == [ProcessRegistry.cleanup]
    assert set(hooks["signals"]) == set(TERMINATION_SIGNALS)
    assert sys.excepthook == ProcessRegistry._handle_uncaught_exception
    assert len(ProcessRegistry.instances) == 2


def test_cleanup_kills_running_instances_only(hooks):
    running, exited = mock_devnet(), mock_devnet(running=False)
    ProcessRegistry.register(running)
    ProcessRegistry.register(exited)

    ProcessRegistry.cleanup()

    running.kill.assert_called_once_with()
    exited.kill.assert_not_called()


def test_cleanup_is_idempotent(hooks):
    devnet = mock_devnet()
    devnet.kill.side_effect = lambda: devnet.is_running.configure_mock(return_value=False)
    ProcessRegistry.register(devnet)

    ProcessRegistry.cleanup()
    ProcessRegistry.cleanup()

    devnet.kill.assert_called_once_with()


def test_termination_signal_cleans_up_and_exits(hooks):
    devnet = mock_devnet()
    ProcessRegistry.register(devnet)

    handler = hooks["signals"][signal.SIGINT]
    with pytest.raises(SystemExit) as excinfo:
        handler(signal.SIGINT, None)

    assert excinfo.value.code == 1
    devnet.kill.assert_called_once_with()


def test_uncaught_exception_cleans_up_and_delegates(hooks, monkeypatch):
    original_hook = MagicMock()
    monkeypatch.setattr(sys, "excepthook", original_hook)
    devnet = mock_devnet()
    ProcessRegistry.register(devnet)

    error = RuntimeError("boom")
    sys.excepthook(RuntimeError, error, None)

    devnet.kill.assert_called_once_with()
    original_hook.assert_called_once_with(RuntimeError, error, None)


def test_termination_signal_chains_to_previous_handler(hooks):
    previous_handler = MagicMock()
    hooks["previous"][signal.SIGTERM] = previous_handler
    devnet = mock_devnet()
    ProcessRegistry.register(devnet)

    with pytest.raises(SystemExit) as excinfo:
        hooks["signals"][signal.SIGTERM](signal.SIGTERM, None)

    assert excinfo.value.code == 1
    devnet.kill.assert_called_once_with()
    previous_handler.assert_called_once_with(signal.SIGTERM, None)


def test_sigint_keeps_raising_keyboard_interrupt(hooks):
    hooks["previous"][signal.SIGINT] = signal.default_int_handler
    devnet = mock_devnet()
    ProcessRegistry.register(devnet)

    with pytest.raises(KeyboardInterrupt):
        hooks["signals"][signal.SIGINT](signal.SIGINT, None)

    devnet.kill.assert_called_once_with()


def test_register_drops_exited_instances(hooks):
    exited = mock_devnet(running=False)
    ProcessRegistry.register(exited)
    running = mock_devnet()

    ProcessRegistry.register(running)

    assert ProcessRegistry.instances == [running]
