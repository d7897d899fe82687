"""
Pool Ledger Module

Owns the persisted per-pool revenue entity: lazy creation, additive revenue
accrual and point-in-time supply/debt gauges. Storage backends are
pluggable (in-memory for tests and replays, S3 for deployments).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields, replace
from decimal import Decimal
from typing import Dict, List, Optional
import json
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .revenue_calculator import Revenue

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_DECIMALS = 18

_INT_FIELDS = ('total_supply', 'total_debt', 'pool_token_decimals', 'collateral_token_decimals')
_PLAIN_FIELDS = ('id', 'pool_token_decimals', 'collateral_token_decimals')


class PoolPersistenceError(Exception):
    """Raised when the pool store cannot load or save an entity."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


@dataclass
class Pool:
    """
    Accumulated revenue and balance gauges for one watched pool.

    ``applied_events`` holds the event keys already merged into the revenue
    totals; it is only filled when the ledger dedupes events, and is written
    in the same object as the totals it guards.
    """
    id: str
    total_supply: int = 0
    total_supply_usd: Decimal = Decimal(0)
    total_debt: int = 0
    total_debt_usd: Decimal = Decimal(0)
    protocol_revenue: Decimal = Decimal(0)
    protocol_revenue_usd: Decimal = Decimal(0)
    supply_side_revenue: Decimal = Decimal(0)
    supply_side_revenue_usd: Decimal = Decimal(0)
    total_revenue: Decimal = Decimal(0)
    total_revenue_usd: Decimal = Decimal(0)
    pool_token_decimals: int = DEFAULT_TOKEN_DECIMALS
    collateral_token_decimals: int = DEFAULT_TOKEN_DECIMALS
    applied_events: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.id = self.id.lower()

    def to_dict(self) -> dict:
        """JSON-safe form; Decimals and raw integers are kept as strings."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == 'applied_events':
                result[f.name] = list(value)
            elif f.name in _PLAIN_FIELDS:
                result[f.name] = value
            else:
                result[f.name] = str(value)
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "Pool":
        kwargs = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            if f.name == 'id':
                kwargs[f.name] = value
            elif f.name == 'applied_events':
                kwargs[f.name] = list(value)
            elif f.name in _INT_FIELDS:
                kwargs[f.name] = int(value)
            else:
                kwargs[f.name] = Decimal(str(value))
        return cls(**kwargs)


def event_key(tx_hash: str, log_index: int) -> str:
    """Stable identifier of a delivered log."""
    return f"{tx_hash.lower()}:{log_index}"


# ============================================================================
# STORES
# ============================================================================

class PoolStore(ABC):
    """Load-by-key / upsert-by-key storage for Pool entities."""

    @abstractmethod
    def load(self, pool_id: str) -> Optional[Pool]:
        pass

    @abstractmethod
    def save(self, pool: Pool) -> None:
        pass

    @abstractmethod
    def all(self) -> List[Pool]:
        pass


class InMemoryPoolStore(PoolStore):

    def __init__(self):
        self._pools: Dict[str, dict] = {}

    def load(self, pool_id: str) -> Optional[Pool]:
        data = self._pools.get(pool_id.lower())
        return Pool.from_dict(data) if data is not None else None

    def save(self, pool: Pool) -> None:
        # store a copy so callers cannot mutate persisted state in place
        self._pools[pool.id] = pool.to_dict()

    def all(self) -> List[Pool]:
        return [Pool.from_dict(data) for data in self._pools.values()]


class S3PoolStore(PoolStore):
    """One JSON object per pool under ``<prefix>/pools/<id>.json``."""

    def __init__(self, bucket: str, prefix: str = "vesper_revenue", s3_client=None):
        self.bucket = bucket
        self.prefix = prefix.rstrip('/')
        self.s3_client = s3_client or boto3.client('s3')
        logger.info(f"Initialized S3PoolStore at s3://{bucket}/{self.prefix}")

    def _pool_key(self, pool_id: str) -> str:
        return f"{self.prefix}/pools/{pool_id.lower()}.json"

    @staticmethod
    def _is_missing(error: ClientError) -> bool:
        return error.response.get('Error', {}).get('Code') in ('NoSuchKey', '404', 'NotFound')

    def load(self, pool_id: str) -> Optional[Pool]:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket, Key=self._pool_key(pool_id))
        except ClientError as e:
            if self._is_missing(e):
                return None
            raise PoolPersistenceError(f"Failed to load pool {pool_id}", e) from e
        except BotoCoreError as e:
            raise PoolPersistenceError(f"Failed to load pool {pool_id}", e) from e
        return Pool.from_dict(json.loads(response['Body'].read()))

    def save(self, pool: Pool) -> None:
        try:
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=self._pool_key(pool.id),
                Body=json.dumps(pool.to_dict()).encode('utf-8'),
                ContentType='application/json',
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to save pool {pool.id}: {e}")
            raise PoolPersistenceError(f"Failed to save pool {pool.id}", e) from e

    def all(self) -> List[Pool]:
        pools = []
        paginator = self.s3_client.get_paginator('list_objects_v2')
        try:
            for page in paginator.paginate(Bucket=self.bucket, Prefix=f"{self.prefix}/pools/"):
                for obj in page.get('Contents', []):
                    body = self.s3_client.get_object(Bucket=self.bucket, Key=obj['Key'])['Body'].read()
                    pools.append(Pool.from_dict(json.loads(body)))
        except (ClientError, BotoCoreError) as e:
            raise PoolPersistenceError("Failed to list pools", e) from e
        return pools


def create_store(config) -> PoolStore:
    """S3 store when a bucket is configured, in-memory otherwise."""
    if config.s3_bucket:
        return S3PoolStore(config.s3_bucket, config.s3_prefix)
    logger.warning("No REVENUE_S3_BUCKET configured, pool state is kept in memory only")
    return InMemoryPoolStore()


# ============================================================================
# LEDGER
# ============================================================================

class PoolLedger:
    """
    The only mutator of Pool entities.

    With ``dedupe_events`` enabled, revenue deltas carrying an event key are
    applied at most once per (tx hash, log index).
    """

    def __init__(self, store: PoolStore, dedupe_events: bool = False):
        self.store = store
        self.dedupe_events = dedupe_events

    def load_or_create(
        self,
        address: str,
        pool_token_decimals: Optional[int] = None,
        collateral_token_decimals: Optional[int] = None,
    ) -> Pool:
        """Return the stored pool, or a zeroed one (not yet persisted)."""
        pool = self.store.load(address.lower())
        if pool is None:
            logger.info(f"Creating pool entity {address.lower()}")
            pool = Pool(id=address)
        if pool_token_decimals is not None:
            pool.pool_token_decimals = int(pool_token_decimals)
        if collateral_token_decimals is not None:
            pool.collateral_token_decimals = int(collateral_token_decimals)
        return pool

    def save(self, pool: Pool) -> None:
        self.store.save(pool)


    def apply_revenue(self, pool: Pool, revenue: Revenue, key: Optional[str] = None) -> bool:
        """
        Add one event's revenue to the running totals and persist.

        In dedupe mode the event key is stored on the pool, in the same write
        as the totals.

        Returns:
            False when the event was already applied (dedupe mode only)
        """
        track = self.dedupe_events and key is not None
        if track and key in pool.applied_events:
            logger.warning(f"Event {key} already applied to pool {pool.id}, skipping")
            return False

        # work on a copy; ``pool`` only changes once the write succeeded
        updated = replace(pool, applied_events=list(pool.applied_events))
        updated.protocol_revenue += revenue.protocol_revenue
        updated.protocol_revenue_usd += revenue.protocol_revenue_usd
        updated.supply_side_revenue += revenue.supply_side_revenue
        updated.supply_side_revenue_usd += revenue.supply_side_revenue_usd
        updated.total_revenue += revenue.supply_side_revenue + revenue.protocol_revenue
        updated.total_revenue_usd += revenue.supply_side_revenue_usd + revenue.protocol_revenue_usd
        if track:
            updated.applied_events.append(key)

        self.store.save(updated)
        for f in fields(Pool):
            setattr(pool, f.name, getattr(updated, f.name))
        return True

    def apply_supply_snapshot(self, pool: Pool, raw_supply: int, supply_usd: Decimal, persist: bool = True) -> None:
        """Overwrite the supply gauge. ``persist=False`` leaves the write to the caller."""
        pool.total_supply = int(raw_supply)
        pool.total_supply_usd = supply_usd
        if persist:
            self.store.save(pool)

    def apply_debt_snapshot(self, pool: Pool, raw_debt: int, debt_usd: Decimal, persist: bool = True) -> None:
        """Overwrite the debt gauge. ``persist=False`` leaves the write to the caller."""
        pool.total_debt = int(raw_debt)
        pool.total_debt_usd = debt_usd
        if persist:
            self.store.save(pool)

    def pools(self) -> List[Pool]:
        return self.store.all()
