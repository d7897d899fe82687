"""
Tests for USD valuation through the price router.
"""
from decimal import Decimal

from eth_utils import to_checksum_address


class TestPricePath:

    def test_path_goes_through_intermediate_hop(self, oracle, addresses):
        path = oracle.build_path(addresses["DAI"])
        assert path == [
            to_checksum_address(addresses["DAI"]),
            to_checksum_address(addresses["WETH"]),
            to_checksum_address(addresses["USDC"]),
        ]

    def test_path_skips_hop_for_hop_token(self, oracle, addresses):
        path = oracle.build_path(addresses["WETH"].lower())
        assert path == [
            to_checksum_address(addresses["WETH"]),
            to_checksum_address(addresses["USDC"]),
        ]


class TestQuoteUsd:

    def test_usd_token_is_identity_without_router_call(self, oracle, chain, addresses):
        result = oracle.quote_usd(Decimal("42.5"), 6, addresses["USDC"])

        assert result == Decimal("42.5")
        assert chain.calls_to(addresses["ROUTER"], "getAmountsOut") == 0

    def test_usd_token_match_ignores_case(self, oracle, addresses):
        assert oracle.quote_usd(Decimal("3"), 6, addresses["USDC"].lower()) == Decimal("3")

    def test_rate_uses_last_element_of_amounts(self, oracle, chain, addresses):
        """One WETH quoted at 2000 USDC."""
        chain.set_call(addresses["ROUTER"], "getAmountsOut", [10**18, 2000 * 10**6])

        result = oracle.quote_usd(Decimal("1.5"), 18, addresses["WETH"])

        assert result == Decimal("3000")

    def test_multi_hop_quote(self, oracle, chain, addresses):
        chain.set_call(addresses["ROUTER"], "getAmountsOut", [10**18, 5 * 10**14, 999_500])

        result = oracle.quote_usd(Decimal("10"), 18, addresses["DAI"])

        assert result == Decimal("9.995")

    def test_one_unit_input_uses_token_decimals(self, oracle, chain, addresses):
        fn = chain.set_call(addresses["ROUTER"], "getAmountsOut", [10**8, 30_000 * 10**6])

        oracle.get_usd_rate(8, addresses["DAI"])

        amount_in, path = fn.call_args.args
        assert amount_in == 10**8
        assert len(path) == 3

    def test_router_revert_falls_back_to_identity(self, oracle, chain, addresses):
        """A failed quote must not raise; the amount is returned unchanged."""
        chain.revert_call(addresses["ROUTER"], "getAmountsOut")

        result = oracle.quote_usd(Decimal("7.25"), 18, addresses["DAI"])

        assert result == Decimal("7.25")

    def test_empty_router_result_falls_back_to_identity(self, oracle, chain, addresses):
        chain.set_call(addresses["ROUTER"], "getAmountsOut", [])

        assert oracle.get_usd_rate(18, addresses["DAI"]) == Decimal(1)

    def test_rate_is_requeried_every_call(self, oracle, chain, addresses):
        chain.set_call(addresses["ROUTER"], "getAmountsOut", [10**18, 2000 * 10**6])
        first = oracle.quote_usd(Decimal("1"), 18, addresses["WETH"])

        chain.set_call(addresses["ROUTER"], "getAmountsOut", [10**18, 2100 * 10**6])
        second = oracle.quote_usd(Decimal("1"), 18, addresses["WETH"])

        assert first == Decimal("2000")
        assert second == Decimal("2100")
        assert chain.calls_to(addresses["ROUTER"], "getAmountsOut") == 2
