"""
Minimal contract ABIs for the reads and events the revenue handlers use.
Only the functions actually called are listed.
"""


def _view(name, inputs=None, outputs=None):
    return {
        "inputs": inputs or [],
        "name": name,
        "outputs": outputs or [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    }


_ADDRESS_OUT = [{"internalType": "address", "name": "", "type": "address"}]
_UINT8_OUT = [{"internalType": "uint8", "name": "", "type": "uint8"}]

WITHDRAW_EVENT_ABI = {
    "anonymous": False,
    "inputs": [
        {"indexed": True, "internalType": "address", "name": "owner", "type": "address"},
        {"indexed": False, "internalType": "uint256", "name": "shares", "type": "uint256"},
        {"indexed": False, "internalType": "uint256", "name": "amount", "type": "uint256"},
    ],
    "name": "Withdraw",
    "type": "event",
}

DEPOSIT_EVENT_ABI = {
    "anonymous": False,
    "inputs": [
        {"indexed": True, "internalType": "address", "name": "owner", "type": "address"},
        {"indexed": False, "internalType": "uint256", "name": "shares", "type": "uint256"},
        {"indexed": False, "internalType": "uint256", "name": "amount", "type": "uint256"},
    ],
    "name": "Deposit",
    "type": "event",
}

TRANSFER_EVENT_ABI = {
    "anonymous": False,
    "inputs": [
        {"indexed": True, "internalType": "address", "name": "from", "type": "address"},
        {"indexed": True, "internalType": "address", "name": "to", "type": "address"},
        {"indexed": False, "internalType": "uint256", "name": "value", "type": "uint256"},
    ],
    "name": "Transfer",
    "type": "event",
}

# Elder generation pool (V2)
POOL_V2_ABI = [
    _view("totalSupply"),
    _view("decimals", outputs=_UINT8_OUT),
    _view("token", outputs=_ADDRESS_OUT),
    _view("withdrawFee"),
    _view("feeWhiteList", outputs=_ADDRESS_OUT),
    _view("getPricePerShare"),
    WITHDRAW_EVENT_ABI,
    DEPOSIT_EVENT_ABI,
]

# Newer generation pool (V3)
POOL_V3_ABI = [
    _view("totalSupply"),
    _view("totalDebt"),
    _view("decimals", outputs=_UINT8_OUT),
    _view("token", outputs=_ADDRESS_OUT),
    _view("withdrawFee"),
    _view("feeWhitelist", outputs=_ADDRESS_OUT),
    _view("pricePerShare"),
    _view("getStrategies", outputs=[{"internalType": "address[]", "name": "", "type": "address[]"}]),
    WITHDRAW_EVENT_ABI,
    TRANSFER_EVENT_ABI,
]

ERC20_ABI = [
    _view("decimals", outputs=_UINT8_OUT),
]

ADDRESS_LIST_ABI = [
    _view(
        "contains",
        inputs=[{"internalType": "address", "name": "a", "type": "address"}],
        outputs=[{"internalType": "bool", "name": "", "type": "bool"}],
    ),
]

CONTROLLER_ABI = [
    _view(
        "strategy",
        inputs=[{"internalType": "address", "name": "", "type": "address"}],
        outputs=_ADDRESS_OUT,
    ),
]

STRATEGY_V2_ABI = [
    _view("totalLocked"),
]

PRICE_ROUTER_ABI = [
    _view(
        "getAmountsOut",
        inputs=[
            {"internalType": "uint256", "name": "amountIn", "type": "uint256"},
            {"internalType": "address[]", "name": "path", "type": "address[]"},
        ],
        outputs=[{"internalType": "uint256[]", "name": "amounts", "type": "uint256[]"}],
    ),
]
