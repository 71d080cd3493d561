"""
Exchange-rate sources.

A rate source answers one question: how many USD is one unit of a currency
worth right now. Sources raise ``RateFetchError`` on any failure; caching,
fallback rates and floors are the job of ``ExchangeRateCache``.
"""
import asyncio
import logging
import urllib.parse
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..amounts import AmountInput, to_decimal
from ..exceptions import InvalidAmountError, RateFetchError

# Configure logger
logger = logging.getLogger(__name__)

DEFAULT_RATE_ENDPOINT = "https://api.zerascan.io/api/v1/exchange-rates"
DEFAULT_RATE_TIMEOUT = 2.5

RateFetcher = Callable[[str], Awaitable[Any]]


def parse_rate(value: Any, currency_id: str) -> Decimal:
    """
    Validate a raw USD-per-unit rate.

    Raises:
        RateFetchError: If the value is not a positive finite number
    """
    try:
        rate = to_decimal(value)
    except InvalidAmountError as exc:
        raise RateFetchError(f"Malformed rate for {currency_id}: {value!r}", currency_id) from exc
    if rate <= 0:
        raise RateFetchError(f"Non-positive rate for {currency_id}: {value!r}", currency_id)
    return rate


class RateSource(ABC):
    """
    Abstract base class for exchange-rate sources.
    """

    @abstractmethod
    async def fetch_rate(self, currency_id: str) -> Decimal:
        """
        Fetch the USD value of one unit of ``currency_id``.

        Args:
            currency_id: Currency identifier such as ``$ZRA+0000``

        Returns:
            Positive USD-per-unit rate

        Raises:
            RateFetchError: If the rate cannot be obtained
        """
        pass

    def close(self) -> None:
        """Release any resources held by the source."""
        pass


class HttpRateSource(RateSource):
    """
    Rate source backed by ``GET <base_url>/<currency id>`` returning ``{"rate": number}``.

    Requests run in a worker thread so the event loop is never blocked. The
    request timeout is enforced here; the cache itself places no timeout on
    fetches.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_RATE_ENDPOINT,
        timeout: float = DEFAULT_RATE_TIMEOUT,
        retry_count: int = 0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the HTTP rate source

        Args:
            base_url: Endpoint prefix; the URL-quoted currency id is appended
            timeout: Timeout for each HTTP request in seconds
            retry_count: Number of retries for connection errors and 5xx responses
            session: Optional pre-configured requests session
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        if session is None and retry_count:
            retries = Retry(
                total=retry_count,
                backoff_factor=0.2,
                status_forcelist=[500, 502, 503, 504],
                allowed_methods=["GET"],
                raise_on_status=False,
            )
            self.session.mount("http://", HTTPAdapter(max_retries=retries))
            self.session.mount("https://", HTTPAdapter(max_retries=retries))

    def rate_url(self, currency_id: str) -> str:
        return f"{self.base_url}/{urllib.parse.quote(currency_id, safe='')}"

    def _fetch(self, currency_id: str) -> Decimal:
        url = self.rate_url(currency_id)
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise RateFetchError(f"Rate request for {currency_id} failed: {exc}", currency_id) from exc
        except ValueError as exc:
            raise RateFetchError(f"Rate response for {currency_id} is not JSON", currency_id) from exc

        if not isinstance(payload, dict) or "rate" not in payload:
            raise RateFetchError(f"Rate response for {currency_id} has no 'rate' field", currency_id)
        rate = parse_rate(payload["rate"], currency_id)
        logger.debug(f"Fetched rate {rate} USD for {currency_id}")
        return rate

    async def fetch_rate(self, currency_id: str) -> Decimal:
        return await asyncio.to_thread(self._fetch, currency_id)

    def close(self) -> None:
        self.session.close()


class StaticRateSource(RateSource):
    """
    Rate source serving a fixed table, for development and tests.
    """

    def __init__(self, rates: Optional[Mapping[str, AmountInput]] = None):
        self.rates: Dict[str, Decimal] = {
            currency_id: parse_rate(rate, currency_id) for currency_id, rate in (rates or {}).items()
        }

    def set_rate(self, currency_id: str, rate: AmountInput) -> None:
        self.rates[currency_id] = parse_rate(rate, currency_id)

    async def fetch_rate(self, currency_id: str) -> Decimal:
        if currency_id not in self.rates:
            raise RateFetchError(f"No static rate for {currency_id}", currency_id)
        return self.rates[currency_id]


class CallableRateSource(RateSource):
    """
    Adapts a bare ``async def fetch_rate(currency_id)`` function.

    Anything the function raises, and any malformed result, surfaces as a
    ``RateFetchError``.
    """

    def __init__(self, fetcher: RateFetcher):
        self.fetcher = fetcher

    async def fetch_rate(self, currency_id: str) -> Decimal:
        try:
            raw = await self.fetcher(currency_id)
        except RateFetchError:
            raise
        except Exception as exc:
            raise RateFetchError(f"Rate fetch for {currency_id} failed: {exc}", currency_id) from exc
        return parse_rate(raw, currency_id)


def as_rate_source(source: Union[RateSource, RateFetcher]) -> RateSource:
    """Wrap a bare async fetch function as a ``RateSource``."""
    if isinstance(source, RateSource):
        return source
    if callable(source):
        return CallableRateSource(source)
    raise TypeError(f"Expected a RateSource or async callable, got {type(source).__name__}")


def get_rate_source(
    base_url: Optional[str] = None,
    timeout: float = DEFAULT_RATE_TIMEOUT,
    static_rates: Optional[Mapping[str, AmountInput]] = None,
) -> RateSource:
    """
    Get the rate source for a configuration.

    Args:
        base_url: HTTP endpoint prefix; when unset a static source is used
        timeout: HTTP timeout in seconds
        static_rates: Rates served by the static source

    Returns:
        Rate source implementation
    """
    if base_url:
        logger.info(f"Using HTTP rate source at {base_url}")
        return HttpRateSource(base_url, timeout=timeout)

    logger.info("Using static rate source")
    return StaticRateSource(static_rates)
