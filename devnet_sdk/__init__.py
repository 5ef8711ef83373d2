from devnet_sdk.cheats import Cheats
from devnet_sdk.constants import (
    DEFAULT_DEVNET_URL,
    DEFAULT_HTTP_TIMEOUT,
    LATEST_COMPATIBLE_DEVNET_VERSION,
)
from devnet_sdk.devnet import Devnet, ProcessRegistry
from devnet_sdk.devnet_provider import DevnetProvider
from devnet_sdk.exceptions import (
    BaseDevnetException,
    DevnetError,
    DevnetProviderError,
    GithubError,
    MalformedRpcResponseError,
    RpcError,
)
from devnet_sdk.postman import Postman
from devnet_sdk.rpc_provider import RpcProvider
from devnet_sdk.types import (
    BalanceUnit,
    BlockId,
    DevnetConfig,
    DevnetState,
    MintResponse,
    PredeployedAccount,
)
from devnet_sdk.version_handler import VersionHandler

__all__ = [
    "BalanceUnit",
    "BaseDevnetException",
    "BlockId",
    "Cheats",
    "DEFAULT_DEVNET_URL",
    "DEFAULT_HTTP_TIMEOUT",
    "Devnet",
    "DevnetConfig",
    "DevnetError",
    "DevnetProvider",
    "DevnetProviderError",
    "DevnetState",
    "GithubError",
    "LATEST_COMPATIBLE_DEVNET_VERSION",
    "MalformedRpcResponseError",
    "MintResponse",
    "Postman",
    "PredeployedAccount",
    "ProcessRegistry",
    "RpcError",
    "RpcProvider",
    "VersionHandler",
]
