"""
Revenue Event Handlers

Version-agnostic handlers for block ticks, withdraw fees and interest fees.
Every handler reads what it needs through a PoolAdapter, returns early
(with a log line) when the event carries no fee, and leaves all state
changes to the PoolLedger.
"""

from decimal import Decimal
from typing import Optional
import logging

from .events import BlockTick, PoolEvent, WithdrawEvent
from .pool_adapters import PoolAdapter
from .pool_ledger import Pool, PoolLedger, event_key
from .price_oracle import PriceOracle
from .revenue_calculator import Revenue, RevenueCalculator
from .contract_reader import normalize_address
from .units import shares_to_tokens, to_decimal_amount

logger = logging.getLogger(__name__)

NO_CONVERSION = Decimal(1)


class RevenueHandlers:

    def __init__(self, ledger: PoolLedger, calculator: RevenueCalculator, oracle: PriceOracle):
        self.ledger = ledger
        self.calculator = calculator
        self.oracle = oracle

    # ------------------------------------------------------------------
    # Block tick
    # ------------------------------------------------------------------

    def handle_block(self, adapter: PoolAdapter, tick: BlockTick) -> Pool:
        """
        Snapshot totalSupply and totalDebt (or the strategy's locked value)
        for one pool. These have no events, so they are polled per block.
        A reverted read skips only the field it feeds.
        """
        pool_address = adapter.pool_address
        block = tick.block_number
        logger.info(f"Entered handle_block V{adapter.VERSION} for pool {pool_address} at block {block}")

        token_address = adapter.token_address(block)
        pool_decimals = adapter.pool_decimals(block)
        collateral_decimals = adapter.binder.token_decimals(token_address, block)
        pool = self.ledger.load_or_create(pool_address, pool_decimals, collateral_decimals)

        self._snapshot_supply(adapter, pool, token_address, block)
        self._snapshot_debt(adapter, pool, token_address, block)

        # one write per tick, also for a fresh entity whose reads all reverted
        self.ledger.save(pool)
        return pool

    def _snapshot_supply(self, adapter: PoolAdapter, pool: Pool, token_address: str, block: int) -> None:
        supply_call = adapter.fetch_supply(block)
        if supply_call.reverted:
            logger.warning(f"TotalSupply call reverted for pool={pool.id} in blockNumber={block}")
            return

        share_to_token_rate = adapter.fetch_conversion_rate(block)
        if share_to_token_rate is None:
            logger.warning(f"Skipping totalSupply for pool={pool.id} in blockNumber={block}: price per share unavailable")
            return

        supply_in_tokens = shares_to_tokens(
            to_decimal_amount(supply_call.value, pool.pool_token_decimals), share_to_token_rate
        )
        supply_usd = self.oracle.quote_usd(supply_in_tokens, pool.collateral_token_decimals, token_address, block)
        self.ledger.apply_supply_snapshot(pool, supply_call.value, supply_usd, persist=False)
        logger.info(f"pool {pool.id}, totalSupply={pool.total_supply}")

    def _snapshot_debt(self, adapter: PoolAdapter, pool: Pool, token_address: str, block: int) -> None:
        debt_call = adapter.fetch_debt_or_locked_value(block)
        if debt_call is None:
            logger.debug(f"pool {pool.id} has no total debt")
            return
        if debt_call.reverted:
            logger.warning(f"TotalDebt call reverted for pool={pool.id} in blockNumber={block}")
            return

        debt_in_tokens = to_decimal_amount(debt_call.value, pool.collateral_token_decimals)
        debt_usd = self.oracle.quote_usd(debt_in_tokens, pool.collateral_token_decimals, token_address, block)
        self.ledger.apply_debt_snapshot(pool, debt_call.value, debt_usd, persist=False)
        logger.info(f"pool {pool.id}, totalDebt={pool.total_debt}")

    # ------------------------------------------------------------------
    # Withdraw fee
    # ------------------------------------------------------------------

    def handle_withdraw_fee(self, adapter: PoolAdapter, event: WithdrawEvent) -> Optional[Revenue]:
        """
        Withdraw fees apply to every withdraw except those from
        whitelisted addresses; vVSP has no withdraw fees at all.
        """
        pool_address = adapter.pool_address
        withdrawer = normalize_address(event.owner)
        tx_hash = event.tx_hash
        block = event.block_number
        logger.info(f"Entered handle_withdraw_fee for pool {pool_address}, withdraw made by {withdrawer} in tx {tx_hash}")

        if adapter.is_fee_exempt:
            logger.info(f"Tx {tx_hash}, pool {pool_address} is vVSP, which has no fees.")
            return None

        whitelist = adapter.fetch_whitelist(block)
        if whitelist is not None and whitelist.contains(withdrawer, block):
            logger.info(f"Address {withdrawer} is whitelisted in pool {pool_address}, withdraw is fee-less")
            return None

        share_to_token_rate = adapter.fetch_conversion_rate(block)
        if share_to_token_rate is None:
            logger.warning(
                f"Skipping tx={tx_hash} in blockNumber={block} for pool={pool_address} "
                f"due to price per share unavailable"
            )
            return None

        withdraw_fee = adapter.fetch_withdraw_fee_rate(block)
        shares = to_decimal_amount(event.shares, adapter.pool_decimals(block))
        fees = shares * withdraw_fee
        logger.info(
            f"Fees for tx {tx_hash} in pool {pool_address} originated by withdraw from {withdrawer} "
            f"are {fees} (shares={shares}, withdrawFee={withdraw_fee})"
        )

        revenue = self.calculator.compute_revenue(fees, share_to_token_rate, adapter.token_address(block), block)
        self._save_revenue(pool_address, revenue, event)
        return revenue

    # ------------------------------------------------------------------
    # Interest fee
    # ------------------------------------------------------------------

    def handle_interest_fee(self, adapter: PoolAdapter, event: PoolEvent) -> Optional[Revenue]:
        """
        Interest fees reach the pool from its strategies: as a collateral
        Deposit for V2 pools, as a share mint for V3 pools.
        """
        pool_address = adapter.pool_address
        tx_hash = event.tx_hash
        block = event.block_number
        logger.info(f"Entered handle_interest_fee V{adapter.VERSION} in tx={tx_hash}, pool={pool_address}")

        candidate = adapter.fee_candidate(event)
        if candidate is None:
            logger.info(f"Event in tx={tx_hash} for pool={pool_address} is not interest fees")
            return None

        source = normalize_address(candidate.source_address)
        if source not in adapter.fetch_fee_sources(block):
            logger.info(f"Event in tx={tx_hash} for pool={pool_address} from {source} is not interest fees")
            return None

        interest_fees = to_decimal_amount(candidate.raw_amount, adapter.fee_amount_decimals(block))
        logger.info(f"interestFees={interest_fees} for tx={tx_hash}")

        if candidate.share_denominated:
            share_to_token_rate = adapter.fetch_conversion_rate(block)
            if share_to_token_rate is None:
                logger.warning(
                    f"Skipping tx={tx_hash} in blockNumber={block} for pool={pool_address} "
                    f"due to price per share unavailable"
                )
                return None
        else:
            share_to_token_rate = NO_CONVERSION

        revenue = self.calculator.compute_revenue(
            interest_fees, share_to_token_rate, adapter.token_address(block), block
        )
        self._save_revenue(pool_address, revenue, event)
        return revenue

    def _save_revenue(self, pool_address: str, revenue: Revenue, event: PoolEvent) -> None:
        key = event_key(event.tx_hash, event.log_index)
        logger.info(f"Fees distribution for {key} in pool={pool_address}: {revenue.to_dict()}")
        pool = self.ledger.load_or_create(pool_address)
        self.ledger.apply_revenue(pool, revenue, key)
