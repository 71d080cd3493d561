"""
Time-bounded exchange-rate cache with in-flight request coalescing.

Per currency id a rate is either absent, pending (one fetch in flight that
every concurrent caller awaits) or cached until its TTL elapses. Failed
fetches fall back to a configured rate. A per-currency minimum floor applies
to live and fallback rates alike.
"""
import asyncio
import logging
import re
import time
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple, Union

from cachetools import TTLCache

from ..amounts import AmountInput, multiply, safe_divide, to_decimal
from ..exceptions import ExchangeRateUnavailableError, RateFetchError
from ._rate_limited_log import rate_limited_log
from .source import RateFetcher, RateSource, StaticRateSource, as_rate_source

# Configure logger
logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3.0
DEFAULT_MAXSIZE = 1024

FALLBACK_RATES: Dict[str, Decimal] = {
    "$ZRA+0000": Decimal("0.10"),
}

MINIMUM_RATES: Dict[str, Decimal] = {
    "$ZRA+0000": Decimal("0.10"),
}

_SYMBOL_PATTERN = re.compile(r"^\$([A-Za-z]+)\+\d{4}$")

LIVE = "live"
CACHED = "cached"
FALLBACK = "fallback"


@dataclass(frozen=True)
class RateQuote:
    """A USD-per-unit rate and where it came from."""
    currency_id: str
    rate: Decimal
    source: str
    floored: bool = False
    fetched_at: float = 0.0

    @property
    def is_fallback(self) -> bool:
        return self.source == FALLBACK


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    fetches: int = 0
    failures: int = 0
    fallbacks: int = 0
    coalesced: int = 0
    entries: int = 0
    pending: list = field(default_factory=list)


class ExchangeRateCache:
    """
    Exchange-rate cache shared by concurrent fee calculations.

    The cache is owned by whoever creates it and passed into the fee
    calculator; there is no module-level instance.
    """

    def __init__(
        self,
        source: Union[RateSource, RateFetcher],
        ttl: float = DEFAULT_TTL_SECONDS,
        fallback_rates: Optional[Mapping[str, AmountInput]] = None,
        minimum_rates: Optional[Mapping[str, AmountInput]] = None,
        maxsize: int = DEFAULT_MAXSIZE,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the cache

        Args:
            source: Rate source, or a bare ``async def fetch_rate(currency_id)``
            ttl: Seconds a fetched rate stays fresh
            fallback_rates: Rates used when a fetch fails
            minimum_rates: Per-currency floor applied to every returned rate
            maxsize: Maximum number of cached currencies
            clock: Monotonic clock in seconds
            logger: Optional logger instance
        """
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.source = as_rate_source(source)
        self.ttl = ttl
        self.fallback_rates = {
            currency_id: to_decimal(rate)
            for currency_id, rate in (FALLBACK_RATES if fallback_rates is None else fallback_rates).items()
        }
        self.minimum_rates = {
            currency_id: to_decimal(rate)
            for currency_id, rate in (MINIMUM_RATES if minimum_rates is None else minimum_rates).items()
        }
        self.logger = logger or logging.getLogger(__name__)
        self._clock = clock
        self._entries: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=clock)
        self._pending: Dict[str, "asyncio.Future[RateQuote]"] = {}
        self._stats = CacheStats()

    @classmethod
    def create(
        cls,
        source: Optional[Union[RateSource, RateFetcher]] = None,
        **options,
    ) -> "ExchangeRateCache":
        """
        Create a cache, defaulting to a static source holding the fallback rates.

        Keyword arguments are passed to the constructor.
        """
        if source is None:
            source = StaticRateSource(options.get("fallback_rates", FALLBACK_RATES))
        return cls(source, **options)

    def clear(self) -> None:
        """Drop every cached rate. In-flight fetches are left to complete."""
        self._entries.clear()
        self.logger.debug("Exchange rate cache cleared")

    def cleanup_expired(self) -> int:
        """Remove expired entries and return how many were removed."""
        return len(self._entries.expire())

    def stats(self) -> CacheStats:
        """Snapshot of hit, miss and fetch counters with the current entries and pending ids."""
        self._entries.expire()
        return replace(
            self._stats,
            entries=len(self._entries),
            pending=sorted(self._pending),
        )

    async def get_quote(self, currency_id: str) -> RateQuote:
        """
        Get the rate for ``currency_id`` with its provenance.

        Concurrent callers for a currency that is not cached share a single
        fetch.

        Raises:
            ExchangeRateUnavailableError: If the fetch failed and no fallback rate exists
        """
        self._entries.expire()
        cached = self._entries.get(currency_id)
        if cached is not None:
            self._stats.hits += 1
            return replace(cached, source=CACHED)

        pending = self._pending.get(currency_id)
        if pending is None:
            self._stats.misses += 1
            pending = asyncio.ensure_future(self._resolve(currency_id))
            self._pending[currency_id] = pending
        else:
            self._stats.coalesced += 1
        return await asyncio.shield(pending)

    async def get_rate(self, currency_id: str) -> Decimal:
        """USD value of one unit of ``currency_id``."""
        return (await self.get_quote(currency_id)).rate

    async def get_quotes(
        self,
        currency_ids: Iterable[str],
        optional: Iterable[str] = (),
    ) -> Dict[str, RateQuote]:
        """
        Fetch several currencies in parallel, one fetch per distinct id.

        Args:
            currency_ids: Currencies whose rates are required
            optional: Currencies left out of the result when their rate is unavailable

        Raises:
            ExchangeRateUnavailableError: If a required rate is unavailable
        """
        required = list(dict.fromkeys(currency_ids))
        unique = list(dict.fromkeys([*required, *optional]))
        results = await asyncio.gather(
            *(self.get_quote(currency_id) for currency_id in unique),
            return_exceptions=True,
        )
        quotes: Dict[str, RateQuote] = {}
        for currency_id, result in zip(unique, results):
            if isinstance(result, ExchangeRateUnavailableError) and currency_id not in required:
                continue
            if isinstance(result, BaseException):
                raise result
            quotes[currency_id] = result
        return quotes

    async def usd_to_currency(self, usd_amount: AmountInput, currency_id: str) -> Decimal:
        return safe_divide(usd_amount, await self.get_rate(currency_id))

    async def currency_to_usd(self, amount: AmountInput, currency_id: str) -> Decimal:
        return multiply(amount, await self.get_rate(currency_id))

    async def _resolve(self, currency_id: str) -> RateQuote:
        try:
            self._stats.fetches += 1
            try:
                rate = await self.source.fetch_rate(currency_id)
            except RateFetchError as exc:
                self._stats.failures += 1
                self.logger.debug(f"Rate fetch for {currency_id} failed: {exc}")
                return self._fallback_quote(currency_id, exc)

            rate, floored = self._apply_floor(currency_id, rate)
            quote = RateQuote(currency_id, rate, LIVE, floored, self._clock())
            self._entries[currency_id] = quote
            return quote
        finally:
            self._pending.pop(currency_id, None)

    def fallback_rate(self, currency_id: str) -> Optional[Decimal]:
        """
        Configured fallback rate for ``currency_id``, matching first on the
        exact id and then on the ``$SYMBOL+0000`` id of the same symbol.
        """
        if currency_id in self.fallback_rates:
            return self.fallback_rates[currency_id]
        match = _SYMBOL_PATTERN.match(currency_id)
        if match:
            return self.fallback_rates.get(f"${match.group(1)}+0000")
        return None

    def _fallback_quote(self, currency_id: str, error: Exception) -> RateQuote:
        rate = self.fallback_rate(currency_id)
        if rate is None:
            raise ExchangeRateUnavailableError(currency_id) from error

        self._stats.fallbacks += 1
        rate_limited_log(
            f"Using fallback rate for {currency_id}: {error}",
            level="warning",
            logger_instance=self.logger,
        )
        rate, floored = self._apply_floor(currency_id, rate)
        return RateQuote(currency_id, rate, FALLBACK, floored, self._clock())

    def _apply_floor(self, currency_id: str, rate: Decimal) -> Tuple[Decimal, bool]:
        floor = self.minimum_rates.get(currency_id)
        if floor is not None and rate < floor:
            self.logger.warning(f"Rate {rate} for {currency_id} is below the minimum; using {floor}")
            return floor, True
        return rate, False
