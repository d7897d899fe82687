"""
Revenue Indexer Configuration Module

Contains the mainnet addresses, unit conventions and the immutable
RevenueConfig handed to every component constructor.
"""

import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv

# Special Addresses
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# vVSP pool: no withdraw fees, no total debt
VVSP_POOL_ADDRESS = "0xbA4cFE5741b357FA371b506e5db0774aBFeCf8Fc"

# Vesper controller, maps a V2 pool to its strategy
CONTROLLER_ADDRESS = "0xa4F1671d3Aee73C05b552d57f2d16d3cfcBd0217"

# Uniswap V2 router on Ethereum mainnet
PRICE_ROUTER_ADDRESS = "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D"

# USD reference token and routing hop
USDC_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
USDC_DECIMALS = 6
WETH_ADDRESS = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"

DEFAULT_RPC_URL = "https://eth.llamarpc.com"

# Fee split between protocol and suppliers
PROTOCOL_REVENUE_SHARE = Decimal("0.95")
SUPPLY_SIDE_REVENUE_SHARE = Decimal("0.05")

# Withdraw fee normalisation
V2_WITHDRAW_FEE_DECIMALS = 18   # 1e18 == 100%
V3_WITHDRAW_FEE_DIVISOR = Decimal("10000")  # basis points

# V2 getPricePerShare() is always 1e18-scaled
V2_PRICE_PER_SHARE_DECIMALS = 18

# Pool metadata filter
DEFAULT_CHAIN_ID = 1
DEFAULT_STAGE = "prod"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes')


@dataclass(frozen=True)
class RevenueConfig:
    """Process-wide settings, fixed for the lifetime of the indexer."""
    zero_address: str = ZERO_ADDRESS
    fee_exempt_pool: str = VVSP_POOL_ADDRESS
    controller_address: str = CONTROLLER_ADDRESS
    router_address: str = PRICE_ROUTER_ADDRESS
    usd_token_address: str = USDC_ADDRESS
    usd_token_decimals: int = USDC_DECIMALS
    intermediate_token_address: str = WETH_ADDRESS
    rpc_url: str = DEFAULT_RPC_URL
    chain_id: int = DEFAULT_CHAIN_ID
    stage: str = DEFAULT_STAGE
    dedupe_events: bool = False
    s3_bucket: Optional[str] = None
    s3_prefix: str = "vesper_revenue"

    @classmethod
    def from_env(cls) -> "RevenueConfig":
        """Build the configuration from environment variables (and a .env file)."""
        load_dotenv()
        return cls(
            fee_exempt_pool=os.getenv("VESPER_FEE_EXEMPT_POOL", VVSP_POOL_ADDRESS),
            controller_address=os.getenv("VESPER_CONTROLLER_ADDRESS", CONTROLLER_ADDRESS),
            router_address=os.getenv("PRICE_ROUTER_ADDRESS", PRICE_ROUTER_ADDRESS),
            usd_token_address=os.getenv("USD_TOKEN_ADDRESS", USDC_ADDRESS),
            usd_token_decimals=int(os.getenv("USD_TOKEN_DECIMALS", str(USDC_DECIMALS))),
            intermediate_token_address=os.getenv("INTERMEDIATE_TOKEN_ADDRESS", WETH_ADDRESS),
            rpc_url=os.getenv("WEB3_HTTP_URL", os.getenv("MAINNET_RPC_URL", DEFAULT_RPC_URL)),
            chain_id=int(os.getenv("VESPER_CHAIN_ID", str(DEFAULT_CHAIN_ID))),
            stage=os.getenv("VESPER_STAGE", DEFAULT_STAGE),
            dedupe_events=_env_bool("REVENUE_DEDUPE_EVENTS"),
            s3_bucket=os.getenv("REVENUE_S3_BUCKET") or None,
            s3_prefix=os.getenv("REVENUE_S3_PREFIX", "vesper_revenue"),
        )

    def is_zero_address(self, address: Optional[str]) -> bool:
        return not address or address.lower() == self.zero_address.lower()

    def is_fee_exempt(self, pool_address: str) -> bool:
        return pool_address.lower() == self.fee_exempt_pool.lower()
