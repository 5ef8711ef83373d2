import asyncio
import json
from typing import Any, Mapping, Optional, Union

import aiohttp

from devnet_sdk.constants import (
    DEFAULT_HTTP_TIMEOUT,
    JSON_RPC_REQUEST_ID,
    JSON_RPC_VERSION,
)
from devnet_sdk.exceptions import (
    DevnetProviderError,
    MalformedRpcResponseError,
    RpcError,
)
from devnet_sdk.logging import get_devnet_logger

logger = get_devnet_logger()

RpcParams = Union[Mapping[str, Any], str]


class RpcProvider:
    """
    Sends JSON-RPC 2.0 requests to a Devnet instance.

    :param url: The URL the requests are POSTed to
    :param timeout: Total timeout of a single request, in seconds
    """

    def __init__(self, url: str, timeout: float = DEFAULT_HTTP_TIMEOUT):
        self.url = url
        self.timeout = timeout

    async def send_request(self, method: str, params: Optional[RpcParams] = None) -> Any:
        """
        Send a JSON-RPC request and return its ``result``.

        :param method: Name of the RPC method
        :param params: Request params. A string is inserted in the request body as is,
            which preserves big integers that were serialized by the caller.
        :return: The ``result`` field of the response
        :raises RpcError: If the response contains an ``error`` field
        :raises MalformedRpcResponseError: If the response has neither ``result`` nor ``error``
        :raises DevnetProviderError: If the request timed out
        """
        body = build_rpc_body(method, {} if params is None else params)
        logger.debug(f"Sending {method} to {self.url}")

        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                async with session.post(
                    self.url,
                    data=body,
                    headers={"Content-Type": "application/json"},
                ) as response_raw:
                    response = await response_raw.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise DevnetProviderError.from_timeout(self.timeout) from e

        return parse_rpc_response(response)


def build_rpc_body(method: str, params: RpcParams) -> str:
    params_serialized = params if isinstance(params, str) else json.dumps(dict(params))
    return (
        "{"
        f'"jsonrpc": "{JSON_RPC_VERSION}", '
        f'"id": "{JSON_RPC_REQUEST_ID}", '
        f"\"method\": {json.dumps(method)}, "
        f'"params": {params_serialized}'
        "}"
    )


def parse_rpc_response(response: Any) -> Any:
    if isinstance(response, dict):
        if "result" in response:
            return response["result"]
        if "error" in response:
            raise RpcError.from_response(response["error"])
    raise MalformedRpcResponseError(response)
