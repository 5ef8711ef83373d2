from unittest.mock import AsyncMock, MagicMock

from click.testing import CliRunner

from devnet_sdk import cli as cli_module
from devnet_sdk.cli import cli_entrypoint
from devnet_sdk.constants import LATEST_COMPATIBLE_DEVNET_VERSION
from devnet_sdk.version_handler import VersionHandler

from tests.constants import FAKE_DEVNET_PATH, PYTHON

EXECUTABLE_PATH = "/tmp/devnet-versions/v0.1.2/starknet-devnet"


def test_fetch(monkeypatch):
    get_executable = AsyncMock(return_value=EXECUTABLE_PATH)
    monkeypatch.setattr(VersionHandler, "get_executable", get_executable)

    result = CliRunner().invoke(cli_entrypoint, ["fetch", "v0.1.1"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == EXECUTABLE_PATH
    get_executable.assert_awaited_once_with("v0.1.1")


def test_fetch_latest(monkeypatch):
    get_executable = AsyncMock(return_value=EXECUTABLE_PATH)
    monkeypatch.setattr(VersionHandler, "get_executable", get_executable)

    result = CliRunner().invoke(cli_entrypoint, ["fetch", "latest"])

    assert result.exit_code == 0, result.output
    get_executable.assert_awaited_once_with(LATEST_COMPATIBLE_DEVNET_VERSION)


def test_invalid_log_level():
    result = CliRunner().invoke(cli_entrypoint, ["--log-level", "LOUD", "fetch", "latest"])

    assert result.exit_code == 2
    assert "Invalid value for '--log-level'" in result.output


def test_spawn_passes_args_through(monkeypatch):
    devnet = MagicMock()
    devnet.is_running.return_value = False
    devnet.process.returncode = 0
    spawn_command = AsyncMock(return_value=devnet)
    monkeypatch.setattr(cli_module.Devnet, "spawn_command", spawn_command)

    result = CliRunner().invoke(
        cli_entrypoint,
        ["spawn", "-c", PYTHON, "-t", "3", str(FAKE_DEVNET_PATH), "--accounts", "2"],
    )

    assert result.exit_code == 0, result.output
    command, config = spawn_command.await_args.args
    assert command == PYTHON
    assert tuple(config.args) == (str(FAKE_DEVNET_PATH), "--accounts", "2")
    assert config.max_startup_seconds == 3
    devnet.kill.assert_called_once_with()


def test_spawn_installed_by_default(monkeypatch):
    devnet = MagicMock()
    devnet.is_running.return_value = False
    spawn_installed = AsyncMock(return_value=devnet)
    monkeypatch.setattr(cli_module.Devnet, "spawn_installed", spawn_installed)

    result = CliRunner().invoke(cli_entrypoint, ["spawn", "--seed", "1"])

    assert result.exit_code == 0, result.output
    (config,) = spawn_installed.await_args.args
    assert tuple(config.args) == ("--seed", "1")
