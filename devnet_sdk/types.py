from dataclasses import dataclass, field
from enum import StrEnum, unique
from typing import IO, Any, Dict, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, field_validator
from starknet_py.net.client_models import Tag

from devnet_sdk.constants import DEFAULT_MAX_STARTUP_SECONDS
from devnet_sdk.utils import parse_int

BalanceUnit = Literal["WEI", "FRI"]

# Accepted by Devnet on top of the tags known to starknet_py
BlockTag = Union[Tag, Literal["pre_confirmed", "l1_accepted"]]
BlockNumber = int
BlockHash = str
BlockId = Union[BlockTag, BlockNumber, BlockHash]

BLOCK_TAGS = ("latest", "pending", "pre_confirmed", "l1_accepted")

# "inherit" keeps the parent's stream, "ignore" discards the output.
DevnetOutput = Union[Literal["inherit", "ignore"], IO[Any], int]


def to_rpc_block_id(block_id: BlockId) -> Union[str, Dict[str, Any]]:
    """
    Convert a block id to the shape expected by Devnet.

    :param block_id: A block tag, a block number or a 0x prefixed block hash
    :return: The tag as is, ``{"block_number": n}`` or ``{"block_hash": h}``
    """
    if isinstance(block_id, bool):
        raise ValueError(f"Invalid block id: {block_id}")
    if isinstance(block_id, int):
        return {"block_number": block_id}
    if block_id in BLOCK_TAGS:
        return block_id
    if isinstance(block_id, str) and block_id.lower().startswith("0x"):
        return {"block_hash": block_id}
    raise ValueError(f"Invalid block id: {block_id}")


@unique
class DevnetState(StrEnum):
    SPAWNING = "SPAWNING"
    ALIVE = "ALIVE"
    KILLED = "KILLED"
    EXITED = "EXITED"


@dataclass(frozen=True)
class DevnetConfig:
    """
    Configuration of a spawned Devnet.

    :param args: The CLI args you would pass to a Devnet run in terminal.
    :param stdout: Where Devnet's stdout goes. Defaults to the parent's stdout.
    :param stderr: Where Devnet's stderr goes. Defaults to the parent's stderr.
    :param max_startup_seconds: The maximum amount of time waited for Devnet to start.
    :param keep_alive: If False (default), the spawned Devnet is killed on program exit.
    """

    args: Sequence[str] = field(default_factory=tuple)
    stdout: DevnetOutput = "inherit"
    stderr: DevnetOutput = "inherit"
    max_startup_seconds: float = DEFAULT_MAX_STARTUP_SECONDS
    keep_alive: bool = False


class DevnetModel(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)


class PredeployedAccount(DevnetModel):
    initial_balance: str
    private_key: str
    public_key: str
    address: str
    balance: Optional[Dict[str, Any]] = None


class MintResponse(DevnetModel):
    new_balance: int
    unit: BalanceUnit
    tx_hash: str

    @field_validator("new_balance", mode="before")
    def validate_new_balance(cls, value: Union[str, int]) -> int:
        return parse_int(value)


class NewBlockResponse(DevnetModel):
    block_hash: str


class AbortedBlocksResponse(DevnetModel):
    aborted: List[str]


class SetTimeResponse(DevnetModel):
    time: int
    block_hash: Optional[str] = None


class IncreaseTimeResponse(DevnetModel):
    time: int
    block_hash: str


class GasModificationResponse(DevnetModel):
    l1_gas_price: Optional[int] = None
    l1_data_gas_price: Optional[int] = None
    l2_gas_price: Optional[int] = None

    @field_validator(
        "l1_gas_price", "l1_data_gas_price", "l2_gas_price", mode="before"
    )
    def validate_price(cls, value: Optional[Union[str, int]]) -> Optional[int]:
        return None if value is None else parse_int(value)


class L1ToL2Message(DevnetModel):
    l2_contract_address: str
    entry_point_selector: str
    l1_contract_address: str
    payload: List[str]
    paid_fee_on_l1: str
    nonce: str


class L2ToL1Message(DevnetModel):
    from_address: str
    to_address: str
    payload: List[str]


class FlushResponse(DevnetModel):
    messages_to_l1: List[L2ToL1Message]
    messages_to_l2: List[L1ToL2Message]
    generated_l2_transactions: List[str]
    l1_provider: str


class LoadL1MessagingContractResponse(DevnetModel):
    messaging_contract_address: str


class L1ToL2MockTxResponse(DevnetModel):
    transaction_hash: str


class L2ToL1MockTxResponse(DevnetModel):
    message_hash: str
