"""
Contract Reader Module

Binds pool, strategy, registry and router addresses to web3 contracts and
wraps reads that are allowed to revert.
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union
import logging

from eth_utils import to_checksum_address
from web3 import Web3
from web3.exceptions import Web3Exception

from ..config.contract_abis import (
    POOL_V2_ABI,
    POOL_V3_ABI,
    ERC20_ABI,
    ADDRESS_LIST_ABI,
    CONTROLLER_ABI,
    STRATEGY_V2_ABI,
    PRICE_ROUTER_ABI,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

BlockIdentifier = Union[int, str]


@dataclass(frozen=True)
class CallResult(Generic[T]):
    """Outcome of a read that may revert."""
    value: Optional[T] = None
    reverted: bool = False

    @classmethod
    def ok(cls, value: T) -> "CallResult[T]":
        return cls(value=value, reverted=False)

    @classmethod
    def revert(cls) -> "CallResult[T]":
        return cls(value=None, reverted=True)


def try_call(
    contract_fn: Any,
    label: str,
    block_identifier: BlockIdentifier = "latest",
) -> CallResult:
    """
    Execute a prepared contract function call, mapping reverts to CallResult.

    Args:
        contract_fn: web3 ContractFunction, e.g. ``pool.functions.totalSupply()``
        label: name used in log lines
        block_identifier: block to read at

    Returns:
        CallResult with the decoded value, or ``reverted=True``
    """
    try:
        return CallResult.ok(contract_fn.call(block_identifier=block_identifier))
    except (Web3Exception, ValueError) as e:
        # ContractLogicError and BadFunctionCallOutput are Web3Exceptions;
        # some providers surface "execution reverted" as ValueError
        logger.warning(f"{label} call reverted at block {block_identifier}: {e}")
        return CallResult.revert()


def call(contract_fn: Any, block_identifier: BlockIdentifier = "latest") -> Any:
    """Execute a read whose failure should abort the current handler."""
    return contract_fn.call(block_identifier=block_identifier)


def normalize_address(address: Any) -> str:
    """Lowercase hex form used for entity ids and comparisons."""
    if isinstance(address, bytes):
        address = "0x" + address.hex()
    return str(address).lower()


class ContractBinder:
    """
    Creates web3 contract handles for every contract the handlers read.
    Handles are cheap and bound per call, nothing is cached.
    """

    def __init__(self, w3: Web3):
        self.w3 = w3

    @classmethod
    def from_rpc_url(cls, rpc_url: str) -> "ContractBinder":
        """Connect to an HTTP JSON-RPC endpoint."""
        logger.info(f"Connecting to Web3 provider: {rpc_url[:50]}...")
        return cls(Web3(Web3.HTTPProvider(rpc_url)))

    @classmethod
    def from_config(cls, config) -> "ContractBinder":
        return cls.from_rpc_url(config.rpc_url)

    def bind(self, address: str, abi: list):
        return self.w3.eth.contract(address=to_checksum_address(address), abi=abi)

    def pool_v2(self, address: str):
        return self.bind(address, POOL_V2_ABI)

    def pool_v3(self, address: str):
        return self.bind(address, POOL_V3_ABI)

    def erc20(self, address: str):
        return self.bind(address, ERC20_ABI)

    def address_list(self, address: str):
        return self.bind(address, ADDRESS_LIST_ABI)

    def controller(self, address: str):
        return self.bind(address, CONTROLLER_ABI)

    def strategy_v2(self, address: str):
        return self.bind(address, STRATEGY_V2_ABI)

    def price_router(self, address: str):
        return self.bind(address, PRICE_ROUTER_ABI)

    def token_decimals(self, token_address: str, block_identifier: BlockIdentifier = "latest") -> int:
        """ERC-20 decimals(); a revert here aborts the handler."""
        return int(call(self.erc20(token_address).functions.decimals(), block_identifier))


