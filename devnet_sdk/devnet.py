import asyncio
import atexit
import os
import signal
import subprocess
import sys
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

from devnet_sdk.constants import (
    ALIVE_CHECK_INTERVAL,
    DEFAULT_DEVNET_COMMAND,
    DEFAULT_DEVNET_HOST,
    DEFAULT_DEVNET_PORT,
    FREE_PORT_STEP,
    LATEST_COMPATIBLE_DEVNET_VERSION,
    MAX_PORT,
)
from devnet_sdk.devnet_provider import DevnetProvider
from devnet_sdk.exceptions import DevnetError
from devnet_sdk.logging import get_devnet_logger
from devnet_sdk.types import DevnetConfig, DevnetOutput, DevnetState
from devnet_sdk.utils import is_free_port
from devnet_sdk.version_handler import VersionHandler

logger = get_devnet_logger()

IS_WINDOWS = sys.platform == "win32"

# Signals after which the spawned instances are killed and the program exits.
TERMINATION_SIGNALS = tuple(
    getattr(signal, name)
    for name in ("SIGINT", "SIGTERM", "SIGQUIT")
    if hasattr(signal, name)
)

# Ports handed out by get_free_port and not yet released
_reserved_ports: Set[int] = set()
_reserved_ports_lock = threading.Lock()


async def get_free_port() -> str:
    """
    Look for a port nothing is listening on, starting above the default Devnet port.
    The returned port stays reserved until `release_port` is called:
    concurrent calls never return the same port.

    :return: the free port as a decimal string
    """
    for port in range(DEFAULT_DEVNET_PORT + FREE_PORT_STEP, MAX_PORT + 1, FREE_PORT_STEP):
        if not _reserve_port(port):
            continue
        try:
            if await is_free_port(port):
                return str(port)
        except BaseException:
            release_port(port)
            raise
        release_port(port)

    raise DevnetError("Could not find a free port! Try rerunning your command.")


def _reserve_port(port: int) -> bool:
    with _reserved_ports_lock:
        if port in _reserved_ports:
            return False
        _reserved_ports.add(port)
        return True


def release_port(port: int) -> None:
    with _reserved_ports_lock:
        _reserved_ports.discard(port)


async def ensure_url(args: List[str]) -> str:
    """
    Extract the URL from the provided Devnet CLI args. If host or port are not present,
    the default host and a free port are appended to `args`. A port present in `args`
    must not be in use.

    :param args: CLI args to Devnet; extended in place
    :return: the URL enabling communication with the Devnet instance
    :raises DevnetError: if the provided port is already in use
    """
    if "--host" in args:
        host = args[args.index("--host") + 1]
    else:
        host = DEFAULT_DEVNET_HOST
        args.extend(["--host", host])

    if "--port" in args:
        port = args[args.index("--port") + 1]
        await _ensure_port_available(host, port)
    else:
        port = await get_free_port()
        args.extend(["--port", port])

    return f"http://{host}:{port}"


async def _ensure_port_available(host: str, port: str) -> None:
    # an unparsable port is left for Devnet to reject
    if not port.isdigit():
        return
    if int(port) in _reserved_ports or not await is_free_port(int(port), host):
        raise DevnetError(
            f"Port {port} is already in use! Pick another one or let the port be chosen "
            "by omitting --port."
        )


def _to_popen_output(output: DevnetOutput):
    if output == "inherit":
        return None
    if output == "ignore":
        return subprocess.DEVNULL
    return output


class ProcessRegistry:
    """
    Keeps track of the Devnet instances that need to be killed when the program exits.
    Cleanup hooks are installed on demand, at most once per interpreter.
    """

    instances: List["Devnet"] = []
    _cleanup_registered: bool = False
    _original_excepthook: Optional[Callable] = None
    _original_signal_handlers: Dict[int, Any] = {}

    @classmethod
    def register(cls, devnet: "Devnet") -> None:
        # drop handles whose process is gone
        cls.instances[:] = [
            instance for instance in cls.instances if instance.is_running()
        ]
        cls.instances.append(devnet)
        cls.install_cleanup_hooks()

    @classmethod
    def cleanup(cls) -> None:
        """
        Kill every registered instance that is still running. Safe to call repeatedly.
        """
        for devnet in cls.instances:
            if devnet.is_running():
                logger.debug(f"Killing Devnet at {devnet.url}")
                devnet.kill()

    @classmethod
    def install_cleanup_hooks(cls) -> None:
        if cls._cleanup_registered:
            return

        atexit.register(cls.cleanup)

        if threading.current_thread() is threading.main_thread():
            for sig in TERMINATION_SIGNALS:
                cls._original_signal_handlers[sig] = signal.signal(
                    sig, cls._handle_termination_signal
                )
        else:
            logger.warning(
                "Devnet spawned outside of the main thread: "
                "instances will only be killed on normal program exit"
            )

        cls._original_excepthook = sys.excepthook
        sys.excepthook = cls._handle_uncaught_exception

        cls._cleanup_registered = True

    @classmethod
    def _handle_termination_signal(cls, signum: int, frame) -> None:
        logger.debug(f"Received {signal.Signals(signum).name}, killing spawned Devnets")
        cls.cleanup()

        # SIG_DFL and SIG_IGN are not callable.
        # The default SIGINT handler raises KeyboardInterrupt.
        original_handler = cls._original_signal_handlers.get(signum)
        if callable(original_handler):
            original_handler(signum, frame)
        sys.exit(1)

    @classmethod
    def _handle_uncaught_exception(cls, exc_type, exc_value, exc_traceback) -> None:
        cls.cleanup()
        hook = cls._original_excepthook or sys.__excepthook__
        hook(exc_type, exc_value, exc_traceback)


class Devnet:
    """
    A Devnet instance running as a subprocess. Spawn it using one of
    `spawn_installed`, `spawn_command` or `spawn_version`; communicate with it
    via `provider`.

    Unless spawned with `keep_alive=True`, the process is killed on program exit.
    """

    process: subprocess.Popen
    provider: DevnetProvider
    args: Tuple[str, ...]
    state: DevnetState

    def __init__(
        self,
        process: subprocess.Popen,
        provider: DevnetProvider,
        args: Sequence[str] = (),
        reserved_port: Optional[int] = None,
    ):
        self.process = process
        self.provider = provider
        self.args = tuple(args)
        self.state = DevnetState.SPAWNING
        # port obtained from get_free_port, released once the process is gone
        self._reserved_port = reserved_port

    @property
    def url(self) -> str:
        return self.provider.url

    @property
    def pid(self) -> int:
        return self.process.pid

    def is_running(self) -> bool:
        if self.process.poll() is None:
            return True
        self._release_port()
        return False

    def _release_port(self) -> None:
        if self._reserved_port is not None:
            release_port(self._reserved_port)
            self._reserved_port = None

    @classmethod
    async def spawn_installed(cls, config: Optional[DevnetConfig] = None) -> "Devnet":
        """
        Assumes `starknet-devnet` is installed and present in the environment PATH
        and executes it, using the args provided in `config`.

        :param config: configuration of the spawned Devnet
        :return: a newly spawned Devnet instance
        """
        return await cls.spawn_command(DEFAULT_DEVNET_COMMAND, config)

    @classmethod
    async def spawn_version(
        cls, version: str, config: Optional[DevnetConfig] = None
    ) -> "Devnet":
        """
        Spawns a Devnet of the provided `version`. If not present locally,
        a precompiled version is fetched, extracted and executed.

        :param version: "latest" for the latest Devnet version compatible with this library;
            otherwise a semver string with a prepended "v" (e.g. "v1.2.3")
        :param config: configuration of the spawned Devnet
        :return: a newly spawned Devnet instance
        """
        if version == "latest":
            version = LATEST_COMPATIBLE_DEVNET_VERSION

        command = await VersionHandler.get_executable(version)
        return await cls.spawn_command(command, config)

    @classmethod
    async def spawn_command(
        cls, command: str, config: Optional[DevnetConfig] = None
    ) -> "Devnet":
        """
        Spawns a new Devnet using the provided command and the args in `config`.

        :param command: the command used for starting Devnet; can be a path or
            a command in the environment PATH
        :param config: configuration of the spawned Devnet
        :return: a newly spawned Devnet instance
        :raises OSError: if the command cannot be executed (e.g. FileNotFoundError)
        :raises DevnetError: if Devnet exits or does not respond in time
        """
        config = config or DevnetConfig()
        args = list(config.args)
        port_allocated = "--port" not in args
        url = await ensure_url(args)
        reserved_port = int(args[args.index("--port") + 1]) if port_allocated else None

        try:
            process = subprocess.Popen(
                [command, *args],
                stdout=_to_popen_output(config.stdout),
                stderr=_to_popen_output(config.stderr),
                **_detached_kwargs(),
            )
        except BaseException:
            if reserved_port is not None:
                release_port(reserved_port)
            raise
        logger.debug(f"Spawned Devnet pid={process.pid} at {url}")

        devnet = cls(process, DevnetProvider(url=url), args, reserved_port)

        if not config.keep_alive:
            # registered before startup completes so that a failed startup is cleaned up too
            ProcessRegistry.register(devnet)

        await devnet._wait_for_startup(config.max_startup_seconds)
        return devnet

    async def _wait_for_startup(self, max_startup_seconds: float) -> None:
        alive_task = asyncio.create_task(self._ensure_alive(max_startup_seconds))
        exit_task = asyncio.create_task(self._wait_for_exit())
        try:
            done, _ = await asyncio.wait(
                {alive_task, exit_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (alive_task, exit_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(alive_task, exit_task, return_exceptions=True)

        if alive_task in done and alive_task.exception() is None:
            self.state = DevnetState.ALIVE
            return

        if exit_task in done or not self.is_running():
            self.state = DevnetState.EXITED
            self._release_port()
            raise DevnetError(
                f"Devnet exited with code {self.process.returncode}. "
                "Check Devnet's logged output for more info. "
                "The output location is configurable via the config object "
                "passed to the Devnet spawning method."
            )

        # startup timed out
        alive_task.result()

    async def _ensure_alive(self, max_startup_seconds: float) -> None:
        async def poll() -> None:
            while self.is_running():
                if await self.provider.is_alive():
                    return
                await asyncio.sleep(ALIVE_CHECK_INTERVAL)

        try:
            await asyncio.wait_for(poll(), timeout=max_startup_seconds)
        except asyncio.TimeoutError as e:
            raise DevnetError(
                "Could not spawn Devnet! Ensure that you can spawn using the chosen method. "
                "Alternatively, increase the startup time defined in the config object "
                "provided on spawning."
            ) from e

        if not self.is_running():
            raise DevnetError(f"Devnet exited with code {self.process.returncode}.")

    async def _wait_for_exit(self) -> int:
        while (returncode := self.process.poll()) is None:
            await asyncio.sleep(ALIVE_CHECK_INTERVAL)
        return returncode

    def kill(self, sig: signal.Signals = signal.SIGTERM) -> bool:
        """
        Sends the provided signal to the underlying Devnet process. Keep in mind
        that the process is killed automatically on program exit.

        :param sig: the signal to be sent; defaults to SIGTERM
        :return: True if the signal was delivered; False otherwise
        """
        if not self.is_running():
            return False

        try:
            self.process.send_signal(sig)
        except ProcessLookupError:
            return False
        except OSError as e:
            logger.warning(f"Could not send {sig} to Devnet pid={self.pid}: {e}")
            return False

        self.state = DevnetState.KILLED
        self._release_port()
        return True

    async def __aenter__(self) -> "Devnet":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        self.kill()


def _detached_kwargs() -> dict:
    if IS_WINDOWS:
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    return {"start_new_session": True}
