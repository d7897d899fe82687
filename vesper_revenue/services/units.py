"""
Fixed-point helpers for on-chain integer amounts.
"""

from decimal import Decimal, getcontext

# 1e18-scale amounts times prices need more than the default 28 digits
getcontext().prec = 50

def decimal_divisor(decimals: int) -> Decimal:
    """Return 10**decimals as an exact Decimal."""
    return Decimal(10) ** int(decimals)

def to_decimal_amount(raw_amount: int, decimals: int) -> Decimal:
    """Convert a raw integer amount to token units."""
    return Decimal(int(raw_amount)) / decimal_divisor(decimals)

def shares_to_tokens(shares: Decimal, share_to_token_rate: Decimal) -> Decimal:
    """Express a share-denominated amount in underlying token units."""
    return shares * share_to_token_rate
