"""
Revenue Indexer - routes host notifications to the revenue handlers.

Routing follows the pool metadata:
- every watched pool gets a block handler
- Withdraw goes to the withdraw-fee handler for both versions
- Deposit (V2) and Transfer (V3) go to the interest-fee handler
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union
import json
import logging

from ..config.revenue_config import RevenueConfig
from .contract_reader import ContractBinder, normalize_address
from .events import BlockTick, DepositEvent, PoolEvent, TransferEvent, WithdrawEvent, event_from_log
from .handlers import RevenueHandlers
from .pool_adapters import PoolAdapter, create_adapter
from .pool_ledger import PoolLedger, PoolStore, create_store
from .price_oracle import PriceOracle
from .revenue_calculator import Revenue, RevenueCalculator
from .strategy_resolver import StrategyResolver

logger = logging.getLogger(__name__)

DEFAULT_POOL_VERSION = 2

# events each pool generation subscribes to, besides Withdraw
INTEREST_FEE_EVENTS = {
    2: DepositEvent,
    3: TransferEvent,
}


@dataclass(frozen=True)
class WatchedPool:
    """One entry of the pool metadata list."""
    address: str
    name: str
    version: int = DEFAULT_POOL_VERSION
    chain_id: int = 1
    stage: str = "prod"
    birthblock: int = 0

    @classmethod
    def from_metadata(cls, entry: dict) -> "WatchedPool":
        return cls(
            address=normalize_address(entry['address']),
            name=entry.get('name', ''),
            version=int(entry.get('version') or DEFAULT_POOL_VERSION),
            chain_id=int(entry.get('chainId', 1)),
            stage=entry.get('stage', 'prod'),
            birthblock=int(entry.get('birthblock', 0)),
        )


def load_watched_pools(path: Union[str, Path], chain_id: int = 1, stage: str = "prod") -> List[WatchedPool]:
    """
    Read pool metadata (a JSON list, or an object with a ``pools`` list)
    and keep the pools deployed on ``chain_id`` at ``stage``.
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    entries = data.get('pools', []) if isinstance(data, dict) else data

    pools = [WatchedPool.from_metadata(entry) for entry in entries]
    watched = [pool for pool in pools if pool.chain_id == chain_id and pool.stage == stage]
    logger.info(f"Loaded {len(watched)} watched pools out of {len(pools)} (chainId={chain_id}, stage={stage})")
    return watched


class RevenueIndexer:
    """Entry point for the indexing host: one call per block or decoded log."""

    def __init__(
        self,
        config: RevenueConfig,
        binder: ContractBinder,
        ledger: PoolLedger,
        pools: List[WatchedPool],
    ):
        self.config = config
        self.binder = binder
        self.ledger = ledger
        self.pools: Dict[str, WatchedPool] = {pool.address: pool for pool in pools}
        self.strategy_resolver = StrategyResolver(binder, config)

        oracle = PriceOracle(binder, config)
        calculator = RevenueCalculator(oracle, binder.token_decimals)
        self.handlers = RevenueHandlers(ledger, calculator, oracle)
        self._adapters: Dict[str, PoolAdapter] = {}

    @classmethod
    def from_config(
        cls,
        config: RevenueConfig,
        pools: List[WatchedPool],
        store: Optional[PoolStore] = None,
        binder: Optional[ContractBinder] = None,
    ) -> "RevenueIndexer":
        binder = binder or ContractBinder.from_config(config)
        ledger = PoolLedger(store or create_store(config), dedupe_events=config.dedupe_events)
        return cls(config, binder, ledger, pools)

    def adapter_for(self, pool_address: str) -> Optional[PoolAdapter]:
        address = normalize_address(pool_address)
        pool = self.pools.get(address)
        if pool is None:
            return None
        if address not in self._adapters:
            self._adapters[address] = create_adapter(pool.version, address, self.binder, self.config, self.strategy_resolver)
        return self._adapters[address]

    def on_block(self, pool_address: str, block_number: int):
        adapter = self.adapter_for(pool_address)
        if adapter is None:
            logger.debug(f"Block {block_number} for unwatched pool {pool_address}, ignoring")
            return None
        return self.handlers.handle_block(adapter, BlockTick(adapter.pool_address, block_number))

    def on_new_block(self, block_number: int) -> None:
        """Run the block handler for every watched pool born at or before the block."""
        for pool in self.pools.values():
            if block_number >= pool.birthblock:
                self.on_block(pool.address, block_number)

    def on_event(self, event: PoolEvent) -> Optional[Revenue]:
        adapter = self.adapter_for(event.pool_address)
        if adapter is None:
            logger.debug(f"Event in tx {event.tx_hash} for unwatched pool {event.pool_address}, ignoring")
            return None

        if isinstance(event, WithdrawEvent):
            return self.handlers.handle_withdraw_fee(adapter, event)
        if isinstance(event, INTEREST_FEE_EVENTS.get(adapter.VERSION, ())):
            return self.handlers.handle_interest_fee(adapter, event)

        logger.debug(f"V{adapter.VERSION} pool {adapter.pool_address} does not handle {type(event).__name__}")
        return None

    def on_log(self, log: dict) -> Optional[Revenue]:
        event = event_from_log(log)
        if event is None:
            return None
        return self.on_event(event)
