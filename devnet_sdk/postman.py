from typing import Optional, Sequence

from devnet_sdk.rpc_provider import RpcProvider
from devnet_sdk.types import (
    FlushResponse,
    L1ToL2MockTxResponse,
    L2ToL1MockTxResponse,
    LoadL1MessagingContractResponse,
)
from devnet_sdk.utils import BigNumberish, add_sync_methods, numeric_to_hex


@add_sync_methods
class Postman:
    """
    L1-L2 messaging utilities.
    see https://0xspaceshard.github.io/starknet-devnet/docs/postman
    """

    def __init__(self, rpc_provider: RpcProvider):
        self.rpc_provider = rpc_provider

    async def flush(self, dry_run: bool = False) -> FlushResponse:
        """
        Relay the pending L1->L2 and L2->L1 messages.

        :param dry_run: If True, the messages are returned but not relayed
        :return: the flushed messages and the generated L2 transactions
        """
        response = await self.rpc_provider.send_request(
            "devnet_postmanFlush", {"dry_run": dry_run}
        )
        return FlushResponse.model_validate(response)

    async def load_l1_messaging_contract(
        self,
        network_url: str,
        address: Optional[str] = None,
        network_id: Optional[str] = None,
    ) -> LoadL1MessagingContractResponse:
        """
        Load the messaging contract of the L1 network at `network_url`.
        If `address` is omitted, Devnet deploys a new messaging contract.

        :param network_url: URL of the L1 node
        :param address: Address of an already deployed messaging contract
        :param network_id: Identifier of the L1 network
        """
        params = {"network_url": network_url}
        if address is not None:
            params["address"] = address
        if network_id is not None:
            params["network_id"] = network_id

        response = await self.rpc_provider.send_request("devnet_postmanLoad", params)
        return LoadL1MessagingContractResponse.model_validate(response)

    async def send_message_to_l2(
        self,
        l2_contract_address: str,
        entry_point_selector: str,
        l1_contract_address: str,
        payload: Sequence[BigNumberish],
        nonce: BigNumberish,
        paid_fee_on_l1: BigNumberish,
    ) -> L1ToL2MockTxResponse:
        """
        Mock a message sent from L1 to L2, without an actual L1 node.
        """
        response = await self.rpc_provider.send_request(
            "devnet_postmanSendMessageToL2",
            {
                "l2_contract_address": l2_contract_address,
                "entry_point_selector": entry_point_selector,
                "l1_contract_address": l1_contract_address,
                "payload": [numeric_to_hex(item) for item in payload],
                "nonce": numeric_to_hex(nonce),
                "paid_fee_on_l1": numeric_to_hex(paid_fee_on_l1),
            },
        )
        return L1ToL2MockTxResponse.model_validate(response)

    async def consume_message_from_l2(
        self,
        from_address: str,
        to_address: str,
        payload: Sequence[BigNumberish],
    ) -> L2ToL1MockTxResponse:
        """
        Mock the consumption of an L2->L1 message on L1.
        """
        response = await self.rpc_provider.send_request(
            "devnet_postmanConsumeMessageFromL2",
            {
                "from_address": from_address,
                "to_address": to_address,
                "payload": [numeric_to_hex(item) for item in payload],
            },
        )
        return L2ToL1MockTxResponse.model_validate(response)
