# -*- coding: utf-8 -*-
"""
Price Oracle Module

USD valuation of token amounts through the price router's getAmountsOut().
Quotes are re-read for every call; a failed quote degrades to a 1:1 rate
so ledger accumulation never stops on a missing price.
"""

from decimal import Decimal
from typing import List
import logging

from eth_utils import to_checksum_address

from ..config.revenue_config import RevenueConfig
from .contract_reader import BlockIdentifier, ContractBinder, try_call, normalize_address
from .units import decimal_divisor, to_decimal_amount

logger = logging.getLogger(__name__)

IDENTITY_RATE = Decimal(1)


class PriceOracle:
    """Quotes token amounts in the USD reference token."""

    def __init__(self, binder: ContractBinder, config: RevenueConfig):
        self.binder = binder
        self.config = config

    def build_path(self, token_address: str) -> List[str]:
        """Routing path token -> [intermediate] -> USD token."""
        token = normalize_address(token_address)
        hop = normalize_address(self.config.intermediate_token_address)
        usd = normalize_address(self.config.usd_token_address)

        path = [token]
        if token != hop:
            path.append(hop)
        path.append(usd)
        return [to_checksum_address(address) for address in path]

    def get_usd_rate(
        self,
        decimals: int,
        token_address: str,
        block_identifier: BlockIdentifier = "latest",
    ) -> Decimal:
        """
        USD value of one whole token.

        Args:
            decimals: token decimals, used to build the one-unit input amount
            token_address: token to price
            block_identifier: block to quote at

        Returns:
            Rate as a Decimal, or 1 when the router call fails
        """
        if normalize_address(token_address) == normalize_address(self.config.usd_token_address):
            return IDENTITY_RATE

        one_unit = int(decimal_divisor(decimals))
        path = self.build_path(token_address)
        logger.debug(f"Retrieving USD rate for {token_address} with decimals={decimals} via {len(path)}-hop path")

        router = self.binder.price_router(self.config.router_address)
        result = try_call(
            router.functions.getAmountsOut(one_unit, path),
            f"getAmountsOut({token_address})",
            block_identifier,
        )
        if result.reverted or not result.value:
            logger.warning(f"USD rate unavailable for token {token_address}, using 1:1")
            return IDENTITY_RATE

        rate = to_decimal_amount(result.value[-1], self.config.usd_token_decimals)
        logger.debug(f"USD rate for {token_address} is {rate}")
        return rate

    def quote_usd(
        self,
        amount: Decimal,
        decimals: int,
        token_address: str,
        block_identifier: BlockIdentifier = "latest",
    ) -> Decimal:
        """Value ``amount`` token units in USD."""
        if normalize_address(token_address) == normalize_address(self.config.usd_token_address):
            return amount
        return amount * self.get_usd_rate(decimals, token_address, block_identifier)
