"""
Test transactions, keys and rate sources with consistent defaults.
"""
import asyncio
from collections import Counter
from decimal import Decimal
from typing import Dict, Iterable, Optional

import base58

from zera_fee_sdk.exceptions import RateFetchError
from zera_fee_sdk.rates.source import RateSource

# Test constants used throughout tests
ZRA = "$ZRA+0000"
RAW_KEY = bytes(range(1, 33))
RAW_EXTENDED_KEY = bytes(range(1, 58))
WALLET = base58.b58encode(bytes([7] * 32)).decode()
OTHER_WALLET = base58.b58encode(bytes([9] * 32)).decode()


def key_blob(key: str = "A", hashes: Iterable[str] = ("c",), restricted: bool = False,
             raw: Optional[bytes] = None) -> bytes:
    """Build a public key blob such as ``b"A_c_" + 32 bytes``."""
    if raw is None:
        raw = RAW_EXTENDED_KEY if key == "B" else RAW_KEY
    prefix = "r_" if restricted else ""
    prefix += f"{key}_" + "".join(f"{h}_" for h in hashes)
    return prefix.encode("ascii") + raw


def coin_txn(outputs: int = 1, memo: Optional[str] = None, keys: Optional[Iterable[bytes]] = None,
             contract_id: str = ZRA, amount: str = "1000000000") -> dict:
    """Unwrapped CoinTXN dict with one input per key."""
    keys = list(keys) if keys is not None else [key_blob()]
    record = {
        "base": {"memo": memo} if memo else {},
        "contract_id": contract_id,
        "auth": {
            "public_key": [{"single": blob} for blob in keys],
            "nonce": [1 + i for i in range(len(keys))],
        },
        "input_transfers": [
            {"index": i, "amount": amount, "fee_percent": 100000000} for i in range(len(keys))
        ],
        "output_transfers": [
            {"wallet_address": base58.b58decode(WALLET), "amount": amount} for _ in range(outputs)
        ],
    }
    return record


def mint_txn(key: Optional[bytes] = None, amount: str = "5000") -> dict:
    """MintTXN dict wrapped under its probe key."""
    return {
        "mint_txn": {
            "base": {"public_key": {"single": key or key_blob()}, "nonce": 3},
            "contract_id": "$MINT+0001",
            "amount": amount,
            "recipient_address": base58.b58decode(WALLET),
        }
    }


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingRateSource(RateSource):
    """Static rates that records every fetch, optionally failing or pausing."""

    def __init__(self, rates: Optional[Dict[str, str]] = None, delay: float = 0.0):
        self.rates = {k: Decimal(v) for k, v in (rates or {}).items()}
        self.delay = delay
        self.calls = Counter()

    async def fetch_rate(self, currency_id: str) -> Decimal:
        self.calls[currency_id] += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if currency_id not in self.rates:
            raise RateFetchError(f"No test rate for {currency_id}", currency_id)
        return self.rates[currency_id]
