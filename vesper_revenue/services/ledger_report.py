# -*- coding: utf-8 -*-
"""
Ledger Report Module

Tabular views of the pool ledger for review and CSV export.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
import logging

import pandas as pd

from .pool_ledger import Pool

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    'pool',
    'total_supply',
    'total_supply_usd',
    'total_debt',
    'total_debt_usd',
    'protocol_revenue',
    'protocol_revenue_usd',
    'supply_side_revenue',
    'supply_side_revenue_usd',
    'total_revenue',
    'total_revenue_usd',
]

USD_COLUMNS = [c for c in REPORT_COLUMNS if c.endswith('_usd')]


def pools_to_dataframe(pools: List[Pool]) -> pd.DataFrame:
    """One row per pool. Decimal columns stay Decimal (object dtype)."""
    if not pools:
        return pd.DataFrame(columns=REPORT_COLUMNS)

    rows = []
    for pool in sorted(pools, key=lambda p: p.id):
        rows.append({
            'pool': pool.id,
            'total_supply': pool.total_supply,
            'total_supply_usd': pool.total_supply_usd,
            'total_debt': pool.total_debt,
            'total_debt_usd': pool.total_debt_usd,
            'protocol_revenue': pool.protocol_revenue,
            'protocol_revenue_usd': pool.protocol_revenue_usd,
            'supply_side_revenue': pool.supply_side_revenue,
            'supply_side_revenue_usd': pool.supply_side_revenue_usd,
            'total_revenue': pool.total_revenue,
            'total_revenue_usd': pool.total_revenue_usd,
        })
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def revenue_summary(pools: List[Pool]) -> Dict[str, Decimal]:
    """USD totals across all pools."""
    summary = {column: Decimal(0) for column in USD_COLUMNS}
    for pool in pools:
        for column in USD_COLUMNS:
            summary[column] += getattr(pool, column)
    summary['pool_count'] = Decimal(len(pools))
    return summary


def export_ledger_csv(pools: List[Pool], filename: Optional[str] = None) -> str:
    """Write the ledger table to CSV, USD columns rounded to cents."""
    if filename is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"pool_revenue_{timestamp}.csv"

    df = pools_to_dataframe(pools)
    for column in USD_COLUMNS:
        df[column] = df[column].map(lambda v: float(round(Decimal(v), 2)))
    df.to_csv(filename, index=False)
    logger.info(f"Exported {len(df)} pools to {filename}")
    return filename
