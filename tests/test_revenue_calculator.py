"""
Tests for the 95/5 fee split and USD valuation of revenue.
"""
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from vesper_revenue.services.revenue_calculator import Revenue, RevenueCalculator, split_fee


@pytest.fixture
def fake_oracle():
    """Oracle that values every token at 2 USD."""
    oracle = MagicMock()
    oracle.quote_usd.side_effect = lambda amount, decimals, token, block="latest": amount * 2
    return oracle


@pytest.fixture
def calculator(fake_oracle):
    return RevenueCalculator(fake_oracle, lambda token, block="latest": 18)


class TestSplitFee:

    def test_split_is_95_5(self):
        protocol, supply = split_fee(Decimal("100"))
        assert protocol == Decimal("95")
        assert supply == Decimal("5")

    def test_halves_add_back_to_fee(self):
        fee = Decimal("3.14159")
        protocol, supply = split_fee(fee)
        assert protocol + supply == fee

    def test_protocol_to_supply_ratio_is_19(self):
        protocol, supply = split_fee(Decimal("0.37"))
        assert protocol / supply == Decimal(19)


class TestComputeRevenue:

    def test_withdraw_fee_example(self, calculator):
        """5 shares of fees at 1.02 tokens per share."""
        revenue = calculator.compute_revenue(Decimal("5"), Decimal("1.02"), "0x" + "ab" * 20)

        assert revenue.protocol_revenue == Decimal("4.845")
        assert revenue.supply_side_revenue == Decimal("0.255")
        assert revenue.protocol_revenue_usd == Decimal("9.690")
        assert revenue.supply_side_revenue_usd == Decimal("0.510")

    def test_interest_fee_example(self, calculator):
        revenue = calculator.compute_revenue(Decimal("100"), Decimal("1.1"), "0x" + "ab" * 20)

        assert revenue.protocol_revenue == Decimal("104.5")
        assert revenue.supply_side_revenue == Decimal("5.5")
        assert revenue.total_revenue == Decimal("110")
        assert revenue.total_revenue_usd == Decimal("220")

    def test_zero_fee_gives_zero_revenue(self, calculator):
        revenue = calculator.compute_revenue(Decimal(0), Decimal("1.5"), "0x" + "ab" * 20)

        assert revenue.total_revenue == Decimal(0)
        assert revenue.total_revenue_usd == Decimal(0)

    def test_decimals_looked_up_when_not_given(self, fake_oracle):
        lookup = MagicMock(return_value=6)
        calculator = RevenueCalculator(fake_oracle, lookup)

        calculator.compute_revenue(Decimal("1"), Decimal("1"), "0xtoken", 1234)

        lookup.assert_called_once_with("0xtoken", 1234)
        assert fake_oracle.quote_usd.call_args.args[1] == 6

    def test_given_decimals_skip_lookup(self, fake_oracle):
        lookup = MagicMock()
        calculator = RevenueCalculator(fake_oracle, lookup)

        calculator.compute_revenue(Decimal("1"), Decimal("1"), "0xtoken", decimals=8)

        lookup.assert_not_called()

    def test_revenue_to_dict_keeps_precision(self):
        revenue = Revenue(Decimal("4.845"), Decimal("4.845"), Decimal("0.255"), Decimal("0.255"))
        assert revenue.to_dict()['protocol_revenue'] == "4.845"
