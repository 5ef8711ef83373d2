import asyncio
from typing import Any, Dict, List, Optional

import aiohttp

from devnet_sdk.cheats import Cheats
from devnet_sdk.constants import (
    DEFAULT_BALANCE_UNIT,
    DEFAULT_DEVNET_URL,
    DEFAULT_HTTP_TIMEOUT,
    IS_ALIVE_PATH,
    RPC_PATH,
)
from devnet_sdk.logging import get_devnet_logger
from devnet_sdk.postman import Postman
from devnet_sdk.rpc_provider import RpcProvider
from devnet_sdk.types import (
    AbortedBlocksResponse,
    BalanceUnit,
    BlockId,
    GasModificationResponse,
    IncreaseTimeResponse,
    MintResponse,
    NewBlockResponse,
    PredeployedAccount,
    SetTimeResponse,
    to_rpc_block_id,
)
from devnet_sdk.utils import add_sync_methods

logger = get_devnet_logger()


def _without_none(params: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in params.items() if value is not None}


@add_sync_methods
class DevnetProvider:
    """
    Client for the Devnet specific RPC methods.
    see https://0xspaceshard.github.io/starknet-devnet/docs/intro

    :param url: Base URL of the Devnet instance. Defaults to http://127.0.0.1:5050
    :param timeout: Timeout of each HTTP request in seconds. Defaults to 30.
    """

    url: str
    timeout: float
    postman: Postman
    cheats: Cheats

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ):
        self.url = (url or DEFAULT_DEVNET_URL).rstrip("/")
        self.timeout = timeout
        self.rpc_provider = RpcProvider(self.url + RPC_PATH, timeout=timeout)

        # Contains methods for L1-L2 communication.
        self.postman = Postman(self.rpc_provider)
        # Contains methods for cheating, e.g. account impersonation.
        self.cheats = Cheats(self.rpc_provider)

    async def is_alive(self) -> bool:
        """
        :return: True if the underlying Devnet instance is responsive; False otherwise
        """
        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                async with session.get(self.url + IS_ALIVE_PATH) as response:
                    return 200 <= response.status < 300
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError):
            return False

    async def restart(self, restart_l1_to_l2_messaging: Optional[bool] = None) -> None:
        """
        Restart the state of the underlying Devnet instance.
        see https://0xspaceshard.github.io/starknet-devnet/docs/dump-load-restart#restarting

        :param restart_l1_to_l2_messaging: If True, L1-L2 messaging is restarted as well
        """
        await self.rpc_provider.send_request(
            "devnet_restart",
            _without_none({"restart_l1_to_l2_messaging": restart_l1_to_l2_messaging}),
        )

    async def mint(
        self,
        address: str,
        amount: int,
        unit: BalanceUnit = DEFAULT_BALANCE_UNIT,
    ) -> MintResponse:
        """
        Generate funds at the provided address.
        see https://0xspaceshard.github.io/starknet-devnet/docs/balance#mint-token---local-faucet

        :param address: The account address to receive funds
        :param amount: How much to mint
        :param unit: Currency unit, defaults to FRI
        :return: The new balance and the hash of the minting transaction
        """
        # Serialized by hand so that amounts above 2**53 stay exact whatever parses the body.
        params_serialized = (
            f'{{"address": "{address}", "amount": {int(amount)}, "unit": "{unit}"}}'
        )
        response = await self.rpc_provider.send_request("devnet_mint", params_serialized)
        return MintResponse.model_validate(response)

    async def get_predeployed_accounts(
        self, with_balance: bool = False
    ) -> List[PredeployedAccount]:
        """
        see https://0xspaceshard.github.io/starknet-devnet/docs/predeployed#how-to-get-predeployment-info

        :param with_balance: If True, balances are included in the response
        :return: Information on predeployed accounts
        """
        response = await self.rpc_provider.send_request(
            "devnet_getPredeployedAccounts", {"with_balance": with_balance}
        )
        return [PredeployedAccount.model_validate(account) for account in response]

    async def create_block(self) -> NewBlockResponse:
        """
        see https://0xspaceshard.github.io/starknet-devnet/docs/blocks

        :return: The hash of the newly created block
        """
        response = await self.rpc_provider.send_request("devnet_createBlock")
        return NewBlockResponse.model_validate(response)

    async def abort_blocks(self, starting_block_id: BlockId) -> AbortedBlocksResponse:
        """
        Abort all blocks from `starting_block_id` (inclusive) onwards.
        see https://0xspaceshard.github.io/starknet-devnet/docs/blocks

        :param starting_block_id: A block tag, a block number or a block hash
        :return: Hashes of the aborted blocks
        """
        response = await self.rpc_provider.send_request(
            "devnet_abortBlocks",
            {"starting_block_id": to_rpc_block_id(starting_block_id)},
        )
        return AbortedBlocksResponse.model_validate(response)

    async def set_time(self, time: int, generate_block: bool = False) -> SetTimeResponse:
        """
        see https://0xspaceshard.github.io/starknet-devnet/docs/starknet-time#set-time

        :param time: The new time in unix seconds
        :param generate_block: If True, a new block is created
        :return: The new time and, if a block was generated, its hash
        """
        response = await self.rpc_provider.send_request(
            "devnet_setTime", {"time": time, "generate_block": generate_block}
        )
        return SetTimeResponse.model_validate(response)

    async def increase_time(self, increment: int) -> IncreaseTimeResponse:
        """
        Increase the time by `increment` seconds.
        see https://0xspaceshard.github.io/starknet-devnet/docs/starknet-time#increase-time
        """
        response = await self.rpc_provider.send_request(
            "devnet_increaseTime", {"time": increment}
        )
        return IncreaseTimeResponse.model_validate(response)

    async def dump(self, path: Optional[str] = None) -> None:
        """
        see https://0xspaceshard.github.io/starknet-devnet/docs/dump-load-restart#dumping

        :param path: Where the Devnet state is written. Defaults to the dump path
            given to Devnet on startup.
        """
        await self.rpc_provider.send_request("devnet_dump", _without_none({"path": path}))

    async def load(self, path: str) -> None:
        """
        Replace the state of the Devnet instance with the one dumped at `path`.
        see https://0xspaceshard.github.io/starknet-devnet/docs/dump-load-restart#loading
        """
        await self.rpc_provider.send_request("devnet_load", {"path": path})

    async def set_gas_price(
        self,
        l1_gas_price: Optional[int] = None,
        l1_data_gas_price: Optional[int] = None,
        l2_gas_price: Optional[int] = None,
        generate_block: Optional[bool] = None,
    ) -> GasModificationResponse:
        """
        Modify the gas prices (in FRI) used for the next block.
        see https://0xspaceshard.github.io/starknet-devnet/docs/gas

        :param generate_block: If True, a block with the new prices is created immediately
        :return: The gas prices after the modification
        """
        response = await self.rpc_provider.send_request(
            "devnet_setGasPrice",
            _without_none(
                {
                    "gas_price_fri": l1_gas_price,
                    "data_gas_price_fri": l1_data_gas_price,
                    "l2_gas_price_fri": l2_gas_price,
                    "generate_block": generate_block,
                }
            ),
        )
        return GasModificationResponse(
            l1_gas_price=response.get("gas_price_fri"),
            l1_data_gas_price=response.get("data_gas_price_fri"),
            l2_gas_price=response.get("l2_gas_price_fri"),
        )
