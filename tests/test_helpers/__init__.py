"""
Utility functions for building test transactions.
"""
from .transactions import (
    ZRA,
    RAW_KEY,
    RAW_EXTENDED_KEY,
    WALLET,
    OTHER_WALLET,
    key_blob,
    coin_txn,
    mint_txn,
    FakeClock,
    CountingRateSource,
)

__all__ = [
    'ZRA',
    'RAW_KEY',
    'RAW_EXTENDED_KEY',
    'WALLET',
    'OTHER_WALLET',
    'key_blob',
    'coin_txn',
    'mint_txn',
    'FakeClock',
    'CountingRateSource',
]
