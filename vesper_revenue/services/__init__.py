"""
Revenue services: unit helpers, price oracle, pool adapters, ledger and
event handlers.
"""

from .units import decimal_divisor, shares_to_tokens, to_decimal_amount
from .contract_reader import CallResult, ContractBinder, try_call
from .price_oracle import PriceOracle
from .strategy_resolver import StrategyResolver, StrategyHandle
from .revenue_calculator import Revenue, RevenueCalculator
from .pool_ledger import (
    Pool,
    PoolLedger,
    PoolStore,
    InMemoryPoolStore,
    S3PoolStore,
    PoolPersistenceError,
)
from .events import BlockTick, WithdrawEvent, DepositEvent, TransferEvent, event_from_log
from .pool_adapters import (
    PoolAdapter,
    ElderGenerationAdapter,
    NewerGenerationAdapter,
    WhitelistRegistry,
    create_adapter,
)
from .handlers import RevenueHandlers
from .indexer import RevenueIndexer, WatchedPool, load_watched_pools

__all__ = [
    'decimal_divisor',
    'to_decimal_amount',
    'shares_to_tokens',
    'CallResult',
    'ContractBinder',
    'try_call',
    'PriceOracle',
    'StrategyResolver',
    'StrategyHandle',
    'Revenue',
    'RevenueCalculator',
    'Pool',
    'PoolLedger',
    'PoolStore',
    'InMemoryPoolStore',
    'S3PoolStore',
    'PoolPersistenceError',
    'BlockTick',
    'WithdrawEvent',
    'DepositEvent',
    'TransferEvent',
    'event_from_log',
    'PoolAdapter',
    'ElderGenerationAdapter',
    'NewerGenerationAdapter',
    'WhitelistRegistry',
    'create_adapter',
    'RevenueHandlers',
    'RevenueIndexer',
    'WatchedPool',
    'load_watched_pools',
]
