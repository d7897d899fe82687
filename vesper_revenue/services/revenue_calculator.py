"""
Revenue Calculator Module

Splits an extracted fee 95/5 between protocol and suppliers, converts it
from shares to underlying tokens and values both halves in USD.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional
import logging

from ..config.revenue_config import PROTOCOL_REVENUE_SHARE, SUPPLY_SIDE_REVENUE_SHARE
from .contract_reader import BlockIdentifier
from .price_oracle import PriceOracle
from .units import shares_to_tokens

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Revenue:
    """Revenue produced by a single event; merged into a Pool by the ledger."""
    protocol_revenue: Decimal
    protocol_revenue_usd: Decimal
    supply_side_revenue: Decimal
    supply_side_revenue_usd: Decimal

    @property
    def total_revenue(self) -> Decimal:
        return self.protocol_revenue + self.supply_side_revenue

    @property
    def total_revenue_usd(self) -> Decimal:
        return self.protocol_revenue_usd + self.supply_side_revenue_usd

    def to_dict(self) -> dict:
        return {
            'protocol_revenue': str(self.protocol_revenue),
            'protocol_revenue_usd': str(self.protocol_revenue_usd),
            'supply_side_revenue': str(self.supply_side_revenue),
            'supply_side_revenue_usd': str(self.supply_side_revenue_usd),
        }


def split_fee(interest_amount: Decimal) -> tuple:
    """Return (protocol share, supply-side share) of a fee."""
    return (
        interest_amount * PROTOCOL_REVENUE_SHARE,
        interest_amount * SUPPLY_SIDE_REVENUE_SHARE,
    )


class RevenueCalculator:
    """
    Computes Revenue tuples. Never touches persisted state.

    ``token_decimals`` resolves a token address to its ERC-20 decimals; the
    binder's ``token_decimals`` is used in production.
    """

    def __init__(self, oracle: PriceOracle, token_decimals: Callable[..., int]):
        self.oracle = oracle
        self.token_decimals = token_decimals

    def compute_revenue(
        self,
        interest_amount: Decimal,
        conversion_rate: Decimal,
        token_address: str,
        block_identifier: BlockIdentifier = "latest",
        decimals: Optional[int] = None,
    ) -> Revenue:
        """
        Args:
            interest_amount: fee in shares (or tokens when conversion_rate is 1)
            conversion_rate: share-to-token rate
            token_address: underlying token, used for USD pricing
            block_identifier: block the prices are read at
            decimals: token decimals if the caller already knows them

        Returns:
            Revenue with token and USD figures
        """
        if decimals is None:
            decimals = self.token_decimals(token_address, block_identifier)

        protocol_share, supply_share = split_fee(interest_amount)
        protocol_revenue = shares_to_tokens(protocol_share, conversion_rate)
        supply_side_revenue = shares_to_tokens(supply_share, conversion_rate)

        return Revenue(
            protocol_revenue=protocol_revenue,
            protocol_revenue_usd=self.oracle.quote_usd(protocol_revenue, decimals, token_address, block_identifier),
            supply_side_revenue=supply_side_revenue,
            supply_side_revenue_usd=self.oracle.quote_usd(supply_side_revenue, decimals, token_address, block_identifier),
        )
