"""
Resolves the strategy behind a V2 pool through the Vesper controller.
Strategies can be migrated, so nothing is cached between events.
"""

import logging

from eth_utils import to_checksum_address

from ..config.revenue_config import RevenueConfig
from .contract_reader import BlockIdentifier, CallResult, ContractBinder, call, normalize_address, try_call

logger = logging.getLogger(__name__)


class StrategyHandle:
    """A bound V2 strategy exposing totalLocked()."""

    def __init__(self, address: str, contract):
        self.address = address
        self.contract = contract

    def try_total_locked(self, block_identifier: BlockIdentifier = "latest") -> CallResult:
        return try_call(self.contract.functions.totalLocked(), f"totalLocked({self.address})", block_identifier)


class StrategyResolver:

    def __init__(self, binder: ContractBinder, config: RevenueConfig):
        self.binder = binder
        self.config = config

    def resolve_strategy_address(self, pool_address: str, block_identifier: BlockIdentifier = "latest") -> str:
        controller = self.binder.controller(self.config.controller_address)
        strategy = call(controller.functions.strategy(to_checksum_address(pool_address)), block_identifier)
        logger.debug(f"Strategy for pool {pool_address} is {strategy}")
        return normalize_address(strategy)

    def resolve_strategy(self, pool_address: str, block_identifier: BlockIdentifier = "latest") -> StrategyHandle:
        address = self.resolve_strategy_address(pool_address, block_identifier)
        return StrategyHandle(address, self.binder.strategy_v2(address))
