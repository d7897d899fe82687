"""
Vesper pool revenue indexer.

Turns pool events and block ticks into per-pool protocol / supply-side
revenue totals valued in USD.
"""

__version__ = "0.1.0"
