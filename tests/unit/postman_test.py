# pylint: disable=redefined-outer-name

from unittest.mock import AsyncMock, MagicMock

import pytest

from devnet_sdk.postman import Postman
from devnet_sdk.rpc_provider import RpcProvider

L1_URL = "http://127.0.0.1:8545"
L2_CONTRACT = "0x0123"
L1_CONTRACT = "0x0456"
DEPOSIT_SELECTOR = "0xc73f681176fc7b3f9693986fd7b14581e8d540519e27400e88b8713932be01"


@pytest.fixture
def rpc_provider() -> MagicMock:
    rpc_provider = MagicMock(spec=RpcProvider)
    rpc_provider.send_request = AsyncMock()
    return rpc_provider


@pytest.fixture
def postman(rpc_provider) -> Postman:
    return Postman(rpc_provider)


@pytest.mark.asyncio
async def test_flush(postman, rpc_provider):
    rpc_provider.send_request.return_value = {
        "messages_to_l1": [
            {"from_address": L2_CONTRACT, "to_address": L1_CONTRACT, "payload": ["0x0"]}
        ],
        "messages_to_l2": [],
        "generated_l2_transactions": [],
        "l1_provider": L1_URL,
    }

    response = await postman.flush()

    rpc_provider.send_request.assert_awaited_once_with(
        "devnet_postmanFlush", {"dry_run": False}
    )
    assert response.messages_to_l2 == []
    assert response.messages_to_l1[0].from_address == L2_CONTRACT


@pytest.mark.asyncio
async def test_load_l1_messaging_contract_without_address(postman, rpc_provider):
    rpc_provider.send_request.return_value = {"messaging_contract_address": "0xabc"}

    response = await postman.load_l1_messaging_contract(L1_URL)

    rpc_provider.send_request.assert_awaited_once_with(
        "devnet_postmanLoad", {"network_url": L1_URL}
    )
    assert response.messaging_contract_address == "0xabc"


@pytest.mark.asyncio
async def test_load_l1_messaging_contract_with_address(postman, rpc_provider):
    rpc_provider.send_request.return_value = {"messaging_contract_address": "0xabc"}

    await postman.load_l1_messaging_contract(L1_URL, address="0xabc", network_id="anvil")

    rpc_provider.send_request.assert_awaited_once_with(
        "devnet_postmanLoad",
        {"network_url": L1_URL, "address": "0xabc", "network_id": "anvil"},
    )


@pytest.mark.asyncio
async def test_send_message_to_l2_hexifies_numbers(postman, rpc_provider):
    rpc_provider.send_request.return_value = {"transaction_hash": "0x99"}

    response = await postman.send_message_to_l2(
        L2_CONTRACT, DEPOSIT_SELECTOR, L1_CONTRACT, [1, "2", "0x10"], 0, 1
    )

    rpc_provider.send_request.assert_awaited_once_with(
        "devnet_postmanSendMessageToL2",
        {
            "l2_contract_address": L2_CONTRACT,
            "entry_point_selector": DEPOSIT_SELECTOR,
            "l1_contract_address": L1_CONTRACT,
            "payload": ["0x1", "0x2", "0x10"],
            "nonce": "0x0",
            "paid_fee_on_l1": "0x1",
        },
    )
    assert response.transaction_hash == "0x99"


@pytest.mark.asyncio
async def test_consume_message_from_l2(postman, rpc_provider):
    rpc_provider.send_request.return_value = {"message_hash": "0x77"}

    response = await postman.consume_message_from_l2(L2_CONTRACT, L1_CONTRACT, [0, 1, 10])

    rpc_provider.send_request.assert_awaited_once_with(
        "devnet_postmanConsumeMessageFromL2",
        {
            "from_address": L2_CONTRACT,
            "to_address": L1_CONTRACT,
            "payload": ["0x0", "0x1", "0xa"],
        },
    )
    assert response.message_hash == "0x77"
