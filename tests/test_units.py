"""
Unit tests for fixed-point amount helpers.
"""
from decimal import Decimal

from vesper_revenue.services.units import (
    decimal_divisor,
    to_decimal_amount,
    shares_to_tokens,
)


class TestDecimalDivisor:

    def test_zero_decimals_is_one(self):
        assert decimal_divisor(0) == Decimal(1)

    def test_divisor_is_exact_for_18_decimals(self):
        """10**18 must not go through float."""
        assert decimal_divisor(18) == Decimal(10**18)
        assert int(decimal_divisor(18)) == 10**18

    def test_divisor_beyond_float_precision(self):
        assert int(decimal_divisor(30)) == 10**30


class TestToDecimalAmount:

    def test_usdc_amount(self):
        assert to_decimal_amount(1_234_500, 6) == Decimal("1.2345")

    def test_large_wei_amount_keeps_every_digit(self):
        raw = 123456789012345678901234567890
        assert to_decimal_amount(raw, 18) == Decimal("123456789012.345678901234567890")

    def test_shares_to_tokens(self):
        assert shares_to_tokens(Decimal("100"), Decimal("1.1")) == Decimal("110")
