import asyncio
import inspect
from functools import wraps
from typing import Any, Callable, TypeVar, Union

from asgiref.sync import async_to_sync

from devnet_sdk.constants import DEFAULT_DEVNET_HOST
from devnet_sdk.logging import get_devnet_logger

logger = get_devnet_logger()

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])

BigNumberish = Union[str, int]


def numeric_to_hex(numeric: BigNumberish) -> str:
    """
    Convert a number (or a decimal/hex string) to a 0x prefixed hex string.
    e.g numeric_to_hex(255) -> "0xff"
    """
    return hex(parse_int(numeric))


def parse_int(value: BigNumberish) -> int:
    """
    Parse an int from an int, a decimal string or a 0x prefixed hex string.
    """
    if isinstance(value, int):
        return value
    return int(value, 0) if value.lower().startswith("0x") else int(value)


async def is_free_port(port: int, host: str = DEFAULT_DEVNET_HOST) -> bool:
    """
    Check if nothing is listening on the provided port.

    :param port: TCP port to probe
    :param host: Host to probe
    :return: True if the connection was refused, False if something accepted it.
        Any other connection error is raised.
    """
    try:
        _, writer = await asyncio.open_connection(host, port)
    except ConnectionRefusedError:
        return True

    writer.close()
    await writer.wait_closed()
    return False


def make_sync(fn: F) -> Callable[..., Any]:
    sync_fun = async_to_sync(fn)

    @wraps(fn)
    def impl(*args: Any, **kwargs: Any) -> Any:
        return sync_fun(*args, **kwargs)

    return impl


def add_sync_methods(original_class: T) -> T:
    """
    Decorator adding a synchronous twin to every coroutine method of a class.
    :param original_class: Input class
    :return: Input class with a `<name>_sync` method for each `async def <name>`
    """
    properties = {**original_class.__dict__}
    for name, value in properties.items():
        sync_name = name + "_sync"

        # Handwritten implementation exists
        if sync_name in properties:
            continue

        if inspect.iscoroutinefunction(value):
            setattr(original_class, sync_name, make_sync(value))
            _set_sync_method_docstring(original_class, sync_name)
        elif isinstance(value, staticmethod) and inspect.iscoroutinefunction(
            value.__func__
        ):
            setattr(original_class, sync_name, staticmethod(make_sync(value.__func__)))
            _set_sync_method_docstring(original_class, sync_name)
        elif isinstance(value, classmethod) and inspect.iscoroutinefunction(
            value.__func__
        ):
            setattr(original_class, sync_name, classmethod(make_sync(value.__func__)))

    return original_class


def _set_sync_method_docstring(original_class: Any, sync_name: str) -> None:
    sync_method = getattr(original_class, sync_name)
    sync_method.__doc__ = "Synchronous version of the method."
