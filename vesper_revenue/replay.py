"""
Revenue Replay - rebuild the pool ledger from historical logs

Usage:
    python -m vesper_revenue.replay --pools pools.json --from-block 12000000 --to-block 12100000
    python -m vesper_revenue.replay ... --chunk-size 500      # Blocks per get_logs request
    python -m vesper_revenue.replay ... --output ledger.csv   # Export the ledger to CSV
    python -m vesper_revenue.replay ... --verbose             # Debug log file for the handlers
"""

import argparse
import sys
from typing import Dict, Iterator, List, Tuple

from eth_utils import event_abi_to_log_topic, to_checksum_address

from .config.contract_abis import POOL_V2_ABI, POOL_V3_ABI
from .config.revenue_config import RevenueConfig
from .logging_config import get_logger, setup_logging, setup_handler_debug_logging, DEBUG_LOG_PATH
from .services.contract_reader import ContractBinder
from .services.indexer import RevenueIndexer, WatchedPool, load_watched_pools
from .services.ledger_report import export_ledger_csv, revenue_summary

logger = get_logger(__name__)

POOL_ABIS = {
    2: POOL_V2_ABI,
    3: POOL_V3_ABI,
}

# event names each pool generation is subscribed to
SUBSCRIBED_EVENTS = {
    2: ('Withdraw', 'Deposit'),
    3: ('Withdraw', 'Transfer'),
}


def iter_block_ranges(from_block: int, to_block: int, chunk_size: int) -> Iterator[Tuple[int, int]]:
    """Inclusive (start, end) ranges covering from_block..to_block."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    start = from_block
    while start <= to_block:
        end = min(start + chunk_size - 1, to_block)
        yield start, end
        start = end + 1


def event_topics(version: int) -> Dict[bytes, str]:
    """topic0 -> event name for the events a pool version subscribes to."""
    names = SUBSCRIBED_EVENTS[version]
    return {
        event_abi_to_log_topic(entry): entry['name']
        for entry in POOL_ABIS[version]
        if entry.get('type') == 'event' and entry['name'] in names
    }


def fetch_pool_logs(binder: ContractBinder, pool: WatchedPool, start: int, end: int) -> List[dict]:
    """Decoded subscribed logs emitted by one pool in [start, end]."""
    start = max(start, pool.birthblock)
    if start > end:
        return []

    contract = binder.bind(pool.address, POOL_ABIS[pool.version])
    topics = event_topics(pool.version)
    raw_logs = binder.w3.eth.get_logs({
        'address': to_checksum_address(pool.address),
        'fromBlock': start,
        'toBlock': end,
    })

    decoded = []
    for raw in raw_logs:
        if not raw['topics']:
            continue
        name = topics.get(bytes(raw['topics'][0]))
        if name is None:
            continue
        decoded.append(getattr(contract.events, name)().process_log(raw))
    return decoded


def replay(indexer: RevenueIndexer, from_block: int, to_block: int, chunk_size: int = 1000) -> int:
    """
    Feed every subscribed log in block order, then tick every pool at the
    end of each chunk.

    Returns:
        Number of logs handled
    """
    handled = 0
    for start, end in iter_block_ranges(from_block, to_block, chunk_size):
        logs = []
        for pool in indexer.pools.values():
            logs.extend(fetch_pool_logs(indexer.binder, pool, start, end))
        logs.sort(key=lambda log: (log['blockNumber'], log['logIndex']))

        for log in logs:
            indexer.on_log(log)
        handled += len(logs)

        indexer.on_new_block(end)
        logger.info(f"Blocks {start}-{end}: {len(logs)} logs handled")
    return handled


def main():
    parser = argparse.ArgumentParser(description='Replay Vesper pool logs into the revenue ledger')
    parser.add_argument('--pools', required=True, help='Pool metadata JSON file')
    parser.add_argument('--from-block', type=int, required=True, help='First block to replay')
    parser.add_argument('--to-block', type=int, help='Last block to replay (default: latest)')
    parser.add_argument('--chunk-size', type=int, default=1000, help='Blocks per get_logs request (default: 1000)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    parser.add_argument('--output', '-o', type=str, help='Output CSV file path')
    args = parser.parse_args()

    setup_logging()
    if args.verbose:
        setup_handler_debug_logging()
        logger.info(f"Verbose logging enabled -> {DEBUG_LOG_PATH}")

    config = RevenueConfig.from_env()
    pools = load_watched_pools(args.pools, config.chain_id, config.stage)
    if not pools:
        logger.error("No watched pools loaded")
        sys.exit(1)

    binder = ContractBinder.from_config(config)
    if not binder.w3.is_connected():
        logger.error(f"Failed to connect to RPC: {config.rpc_url}")
        sys.exit(1)

    to_block = args.to_block if args.to_block is not None else binder.w3.eth.block_number
    indexer = RevenueIndexer.from_config(config, pools, binder=binder)

    handled = replay(indexer, args.from_block, to_block, args.chunk_size)
    logger.info(f"Replayed {handled} logs for {len(pools)} pools up to block {to_block}")

    ledger_pools = indexer.ledger.pools()
    for column, value in revenue_summary(ledger_pools).items():
        logger.info(f"{column}: {value}")

    if args.output:
        export_ledger_csv(ledger_pools, args.output)


if __name__ == "__main__":
    main()
