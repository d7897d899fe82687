from .revenue_config import (
    RevenueConfig,
    ZERO_ADDRESS,
    VVSP_POOL_ADDRESS,
    CONTROLLER_ADDRESS,
    PRICE_ROUTER_ADDRESS,
    USDC_ADDRESS,
    USDC_DECIMALS,
    WETH_ADDRESS,
)

__all__ = [
    'RevenueConfig',
    'ZERO_ADDRESS',
    'VVSP_POOL_ADDRESS',
    'CONTROLLER_ADDRESS',
    'PRICE_ROUTER_ADDRESS',
    'USDC_ADDRESS',
    'USDC_DECIMALS',
    'WETH_ADDRESS',
]
