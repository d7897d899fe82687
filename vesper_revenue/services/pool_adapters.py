"""
Pool Adapters - uniform read surface over the two Vesper pool generations.

Elder generation (V2):
- withdrawFee() is 1e18 fixed point, feeWhiteList(), getPricePerShare() 1e18 scaled
- debt is the strategy's totalLocked(), resolved through the controller
- interest fees arrive as Deposit events sent by the strategy, in collateral

Newer generation (V3):
- withdrawFee() in basis points, feeWhitelist(), pricePerShare() in collateral decimals
- totalDebt() on the pool itself
- interest fees arrive as share mints (Transfer from the zero address) to a strategy
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Set
import logging

from eth_utils import to_checksum_address

from ..config.revenue_config import (
    RevenueConfig,
    V2_WITHDRAW_FEE_DECIMALS,
    V3_WITHDRAW_FEE_DIVISOR,
    V2_PRICE_PER_SHARE_DECIMALS,
)
from .contract_reader import (
    BlockIdentifier,
    CallResult,
    ContractBinder,
    call,
    normalize_address,
    try_call,
)
from .events import DepositEvent, PoolEvent, TransferEvent
from .strategy_resolver import StrategyResolver
from .units import decimal_divisor, to_decimal_amount

logger = logging.getLogger(__name__)


class WhitelistRegistry:
    """Fee whitelist backed by an on-chain AddressList contract."""

    def __init__(self, address: str, contract):
        self.address = address
        self.contract = contract

    def contains(self, account: str, block_identifier: BlockIdentifier = "latest") -> bool:
        return bool(call(self.contract.functions.contains(to_checksum_address(account)), block_identifier))


@dataclass(frozen=True)
class FeeCandidate:
    """An event that may carry interest fees, before the fee-source check."""
    source_address: str
    raw_amount: int
    share_denominated: bool


class PoolAdapter(ABC):
    """Version-specific reads behind a common interface."""

    VERSION: int = 0

    def __init__(
        self,
        pool_address: str,
        binder: ContractBinder,
        config: RevenueConfig,
        strategy_resolver: Optional[StrategyResolver] = None,
    ):
        self.pool_address = normalize_address(pool_address)
        self.binder = binder
        self.config = config
        self.strategy_resolver = strategy_resolver or StrategyResolver(binder, config)
        self.contract = self._bind()

    @abstractmethod
    def _bind(self):
        pass

    @property
    def is_fee_exempt(self) -> bool:
        return self.config.is_fee_exempt(self.pool_address)

    # -- plain reads, failures abort the handler --------------------------

    def token_address(self, block_identifier: BlockIdentifier = "latest") -> str:
        return normalize_address(call(self.contract.functions.token(), block_identifier))

    def pool_decimals(self, block_identifier: BlockIdentifier = "latest") -> int:
        return int(call(self.contract.functions.decimals(), block_identifier))

    def collateral_decimals(self, block_identifier: BlockIdentifier = "latest") -> int:
        return self.binder.token_decimals(self.token_address(block_identifier), block_identifier)

    # -- uniform capability surface ---------------------------------------

    def fetch_supply(self, block_identifier: BlockIdentifier = "latest") -> CallResult:
        return try_call(self.contract.functions.totalSupply(), f"totalSupply({self.pool_address})", block_identifier)

    @abstractmethod
    def fetch_debt_or_locked_value(self, block_identifier: BlockIdentifier = "latest") -> Optional[CallResult]:
        """Raw debt read, or None when the pool has no debt concept."""

    @abstractmethod
    def fetch_withdraw_fee_rate(self, block_identifier: BlockIdentifier = "latest") -> Decimal:
        """Withdraw fee as a fraction (0.005 == 0.5%)."""

    @abstractmethod
    def fetch_conversion_rate(self, block_identifier: BlockIdentifier = "latest") -> Optional[Decimal]:
        """Share-to-token rate, None when it cannot be read."""

    @abstractmethod
    def fetch_whitelist(self, block_identifier: BlockIdentifier = "latest") -> Optional[WhitelistRegistry]:
        """Configured fee whitelist, None when unset (zero address)."""

    @abstractmethod
    def fetch_fee_sources(self, block_identifier: BlockIdentifier = "latest") -> Set[str]:
        """Addresses whose transfers into the pool are interest fees."""

    @abstractmethod
    def fee_candidate(self, event: PoolEvent) -> Optional[FeeCandidate]:
        """Map an interest-fee event to a candidate, None if not applicable."""

    @abstractmethod
    def fee_amount_decimals(self, block_identifier: BlockIdentifier = "latest") -> int:
        """Decimals of the raw amount carried by a fee candidate."""

    def _whitelist_from(self, address) -> Optional[WhitelistRegistry]:
        address = normalize_address(address)
        if self.config.is_zero_address(address):
            return None
        return WhitelistRegistry(address, self.binder.address_list(address))


class ElderGenerationAdapter(PoolAdapter):
    """V2 pools."""

    VERSION = 2

    def _bind(self):
        return self.binder.pool_v2(self.pool_address)

    def fetch_debt_or_locked_value(self, block_identifier: BlockIdentifier = "latest") -> Optional[CallResult]:
        # vVSP does not have total debt
        if self.is_fee_exempt:
            return None
        strategy = self.strategy_resolver.resolve_strategy(self.pool_address, block_identifier)
        return strategy.try_total_locked(block_identifier)

    def fetch_withdraw_fee_rate(self, block_identifier: BlockIdentifier = "latest") -> Decimal:
        raw_fee = call(self.contract.functions.withdrawFee(), block_identifier)
        return to_decimal_amount(raw_fee, V2_WITHDRAW_FEE_DECIMALS)

    def fetch_conversion_rate(self, block_identifier: BlockIdentifier = "latest") -> Optional[Decimal]:
        result = try_call(
            self.contract.functions.getPricePerShare(),
            f"getPricePerShare({self.pool_address})",
            block_identifier,
        )
        if result.reverted:
            return None
        return to_decimal_amount(result.value, V2_PRICE_PER_SHARE_DECIMALS)

    def fetch_whitelist(self, block_identifier: BlockIdentifier = "latest") -> Optional[WhitelistRegistry]:
        return self._whitelist_from(call(self.contract.functions.feeWhiteList(), block_identifier))

    def fetch_fee_sources(self, block_identifier: BlockIdentifier = "latest") -> Set[str]:
        return {self.strategy_resolver.resolve_strategy_address(self.pool_address, block_identifier)}

    def fee_amount_decimals(self, block_identifier: BlockIdentifier = "latest") -> int:
        return self.collateral_decimals(block_identifier)

    def fee_candidate(self, event: PoolEvent) -> Optional[FeeCandidate]:
        if not isinstance(event, DepositEvent):
            return None
        # deposits are denominated in collateral, not in shares
        return FeeCandidate(
            source_address=event.owner,
            raw_amount=event.amount,
            share_denominated=False,
        )


class NewerGenerationAdapter(PoolAdapter):
    """V3 pools."""

    VERSION = 3

    def _bind(self):
        return self.binder.pool_v3(self.pool_address)

    def fetch_debt_or_locked_value(self, block_identifier: BlockIdentifier = "latest") -> Optional[CallResult]:
        return try_call(self.contract.functions.totalDebt(), f"totalDebt({self.pool_address})", block_identifier)

    def fetch_withdraw_fee_rate(self, block_identifier: BlockIdentifier = "latest") -> Decimal:
        raw_fee = call(self.contract.functions.withdrawFee(), block_identifier)
        return Decimal(int(raw_fee)) / V3_WITHDRAW_FEE_DIVISOR

    def fetch_conversion_rate(self, block_identifier: BlockIdentifier = "latest") -> Optional[Decimal]:
        result = try_call(
            self.contract.functions.pricePerShare(),
            f"pricePerShare({self.pool_address})",
            block_identifier,
        )
        if result.reverted:
            return None
        return Decimal(int(result.value)) / decimal_divisor(self.collateral_decimals(block_identifier))

    def fetch_whitelist(self, block_identifier: BlockIdentifier = "latest") -> Optional[WhitelistRegistry]:
        return self._whitelist_from(call(self.contract.functions.feeWhitelist(), block_identifier))

    def fetch_fee_sources(self, block_identifier: BlockIdentifier = "latest") -> Set[str]:
        strategies = call(self.contract.functions.getStrategies(), block_identifier)
        return {normalize_address(strategy) for strategy in strategies}

    def fee_amount_decimals(self, block_identifier: BlockIdentifier = "latest") -> int:
        return self.pool_decimals(block_identifier)

    def fee_candidate(self, event: PoolEvent) -> Optional[FeeCandidate]:
        if not isinstance(event, TransferEvent):
            return None
        # only mints carry fees; regular transfers between holders do not
        if not self.config.is_zero_address(event.from_address):
            return None
        return FeeCandidate(
            source_address=event.to_address,
            raw_amount=event.value,
            share_denominated=True,
        )


ADAPTERS = {
    ElderGenerationAdapter.VERSION: ElderGenerationAdapter,
    NewerGenerationAdapter.VERSION: NewerGenerationAdapter,
}


def create_adapter(
    version: int,
    pool_address: str,
    binder: ContractBinder,
    config: RevenueConfig,
    strategy_resolver: Optional[StrategyResolver] = None,
) -> PoolAdapter:
    try:
        adapter_cls = ADAPTERS[int(version)]
    except KeyError:
        raise ValueError(f"Unsupported pool version {version} for {pool_address}")
    return adapter_cls(pool_address, binder, config, strategy_resolver)
