"""
Exchange-rate sources and the exchange-rate cache.
"""
from .source import (
    RateSource,
    HttpRateSource,
    StaticRateSource,
    CallableRateSource,
    as_rate_source,
    get_rate_source,
)
from .cache import ExchangeRateCache, RateQuote, CacheStats

__all__ = [
    'RateSource',
    'HttpRateSource',
    'StaticRateSource',
    'CallableRateSource',
    'as_rate_source',
    'get_rate_source',
    'ExchangeRateCache',
    'RateQuote',
    'CacheStats',
]
