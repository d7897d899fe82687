"""
Shared fixtures for the revenue indexer tests.

On-chain reads are faked with MagicMock web3 contracts: every address bound
through ``w3.eth.contract`` maps to one mock whose
``functions.<name>().call()`` returns a configured value or reverts.
"""

import sys
import os
from unittest.mock import MagicMock

import pytest
from web3.exceptions import ContractLogicError

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from vesper_revenue.config.revenue_config import (
    RevenueConfig,
    ZERO_ADDRESS,
    USDC_ADDRESS,
    WETH_ADDRESS,
    VVSP_POOL_ADDRESS,
    CONTROLLER_ADDRESS,
    PRICE_ROUTER_ADDRESS,
)
from vesper_revenue.services.contract_reader import ContractBinder
from vesper_revenue.services.pool_ledger import InMemoryPoolStore, PoolLedger
from vesper_revenue.services.price_oracle import PriceOracle
from vesper_revenue.services.revenue_calculator import RevenueCalculator
from vesper_revenue.services.handlers import RevenueHandlers


ADDRESSES = {
    "ZERO": ZERO_ADDRESS,
    "USDC": USDC_ADDRESS,
    "WETH": WETH_ADDRESS,
    "DAI": "0x6B175474E89094C44Da98b954EedeAC495271d0F",
    "VVSP": VVSP_POOL_ADDRESS,
    "CONTROLLER": CONTROLLER_ADDRESS,
    "ROUTER": PRICE_ROUTER_ADDRESS,
    "POOL_V2": "0x0c49066c0808ee8c673553b7cbd99bcc9abf113d",
    "POOL_V3": "0xa8b607aa09b6a2e306f93e74c282fb13f6a80452",
    "STRATEGY_V2": "0x9a7d2a3c8d9f5a31b8e0c0b5f9e1c3a6d2b4e6f8",
    "STRATEGY_V3_A": "0x1111111111111111111111111111111111111111",
    "STRATEGY_V3_B": "0x2222222222222222222222222222222222222222",
    "WHITELIST": "0x3333333333333333333333333333333333333333",
    "WITHDRAWER": "0xa30a689ec0f9d717c5ba1098455b031b868b720f",
}


class FakeChain:
    """Per-address MagicMock contracts behind a mocked Web3 instance."""

    def __init__(self):
        self.contracts = {}
        self.w3 = MagicMock(name="w3")
        self.w3.eth.contract.side_effect = lambda address, abi: self.contract(address)

    def contract(self, address: str) -> MagicMock:
        key = address.lower()
        if key not in self.contracts:
            self.contracts[key] = MagicMock(name=f"contract_{key[:10]}")
        return self.contracts[key]

    def set_call(self, address: str, fn_name: str, value=None):
        fn = getattr(self.contract(address).functions, fn_name)
        fn.return_value.call.side_effect = None
        fn.return_value.call.return_value = value
        return fn

    def revert_call(self, address: str, fn_name: str):
        fn = getattr(self.contract(address).functions, fn_name)
        fn.return_value.call.side_effect = ContractLogicError("execution reverted")
        return fn

    def calls_to(self, address: str, fn_name: str) -> int:
        return getattr(self.contract(address).functions, fn_name).call_count


@pytest.fixture
def addresses():
    return dict(ADDRESSES)


@pytest.fixture
def config():
    return RevenueConfig()


@pytest.fixture
def chain():
    fake = FakeChain()
    fake.set_call(ADDRESSES["USDC"], "decimals", 6)
    fake.set_call(ADDRESSES["WETH"], "decimals", 18)
    fake.set_call(ADDRESSES["DAI"], "decimals", 18)
    return fake


@pytest.fixture
def binder(chain):
    return ContractBinder(chain.w3)


@pytest.fixture
def store():
    return InMemoryPoolStore()


@pytest.fixture
def ledger(store):
    return PoolLedger(store)


@pytest.fixture
def oracle(binder, config):
    return PriceOracle(binder, config)


@pytest.fixture
def handlers(ledger, oracle, binder):
    return RevenueHandlers(ledger, RevenueCalculator(oracle, binder.token_decimals), oracle)


@pytest.fixture
def v2_pool(chain):
    """USDC-collateral V2 pool: 18-decimal shares, 0.5% withdraw fee, price per share 1.02."""
    pool = ADDRESSES["POOL_V2"]
    chain.set_call(pool, "token", ADDRESSES["USDC"])
    chain.set_call(pool, "decimals", 18)
    chain.set_call(pool, "withdrawFee", 5 * 10**15)
    chain.set_call(pool, "feeWhiteList", ADDRESSES["ZERO"])
    chain.set_call(pool, "getPricePerShare", 102 * 10**16)
    chain.set_call(pool, "totalSupply", 1000 * 10**18)
    chain.set_call(ADDRESSES["CONTROLLER"], "strategy", ADDRESSES["STRATEGY_V2"])
    chain.set_call(ADDRESSES["STRATEGY_V2"], "totalLocked", 750 * 10**6)
    return pool


@pytest.fixture
def v3_pool(chain):
    """USDC-collateral V3 pool: 18-decimal shares, 50 bps withdraw fee, price per share 1.1."""
    pool = ADDRESSES["POOL_V3"]
    chain.set_call(pool, "token", ADDRESSES["USDC"])
    chain.set_call(pool, "decimals", 18)
    chain.set_call(pool, "withdrawFee", 50)
    chain.set_call(pool, "feeWhitelist", ADDRESSES["ZERO"])
    chain.set_call(pool, "pricePerShare", 1_100_000)
    chain.set_call(pool, "totalSupply", 1000 * 10**18)
    chain.set_call(pool, "totalDebt", 500 * 10**6)
    chain.set_call(pool, "getStrategies", [ADDRESSES["STRATEGY_V3_A"], ADDRESSES["STRATEGY_V3_B"]])
    return pool
