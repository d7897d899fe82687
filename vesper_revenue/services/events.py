"""
Inbound event payloads delivered by the indexing host.

The host decodes logs with the pool ABIs; ``event_from_log`` turns a web3
decoded log (as returned by ``process_receipt`` or ``get_logs`` plus
``process_log``) into one of the dataclasses below.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
import logging

from .contract_reader import normalize_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockTick:
    """Periodic block notification for one watched pool."""
    pool_address: str
    block_number: int


@dataclass(frozen=True)
class WithdrawEvent:
    pool_address: str
    owner: str
    shares: int
    tx_hash: str
    block_number: int
    log_index: int = 0


@dataclass(frozen=True)
class DepositEvent:
    """V2 Deposit; the amount is in collateral token units."""
    pool_address: str
    owner: str
    amount: int
    tx_hash: str
    block_number: int
    log_index: int = 0


@dataclass(frozen=True)
class TransferEvent:
    """V3 share Transfer; mints (from == zero address) carry interest fees."""
    pool_address: str
    from_address: str
    to_address: str
    value: int
    tx_hash: str
    block_number: int
    log_index: int = 0


PoolEvent = Union[WithdrawEvent, DepositEvent, TransferEvent]


def _hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        hex_str = bytes(value).hex()
    elif hasattr(value, 'hex') and not isinstance(value, str):
        hex_str = value.hex()
    else:
        hex_str = str(value)
    return hex_str if hex_str.startswith('0x') else f"0x{hex_str}"


def event_from_log(log: Dict[str, Any]) -> Optional[PoolEvent]:
    """
    Build a pool event from a decoded web3 log.

    Args:
        log: mapping with ``event``, ``args``, ``address``, ``transactionHash``,
            ``blockNumber`` and ``logIndex``

    Returns:
        WithdrawEvent, DepositEvent or TransferEvent; None for other events
    """
    name = log.get('event')
    args = dict(log.get('args', {}))
    common = {
        'pool_address': normalize_address(log.get('address', '')),
        'tx_hash': _hex(log.get('transactionHash', b'')).lower(),
        'block_number': int(log.get('blockNumber', 0)),
        'log_index': int(log.get('logIndex', 0)),
    }

    if name == 'Withdraw':
        return WithdrawEvent(owner=normalize_address(args['owner']), shares=int(args['shares']), **common)
    if name == 'Deposit':
        return DepositEvent(owner=normalize_address(args['owner']), amount=int(args['amount']), **common)
    if name == 'Transfer':
        return TransferEvent(
            from_address=normalize_address(args['from']),
            to_address=normalize_address(args['to']),
            value=int(args['value']),
            **common,
        )

    logger.debug(f"Ignoring unsupported event {name} from {common['pool_address']}")
    return None
