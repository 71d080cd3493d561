"""
Pytest fixtures for the ZERA fee SDK tests.
"""
import pytest

from zera_fee_sdk.client import FeeCalculator
from zera_fee_sdk.denominations import DenominationResolver
from zera_fee_sdk.rates._rate_limited_log import reset_rate_limited_log
from zera_fee_sdk.rates.cache import ExchangeRateCache

from tests.test_helpers import ZRA, CountingRateSource, FakeClock


@pytest.fixture(autouse=True)
def _reset_rate_limited_log():
    """Each test sees fallback warnings afresh."""
    reset_rate_limited_log()
    yield
    reset_rate_limited_log()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_source():
    return CountingRateSource({
        ZRA: "0.10",
        "$TESTFEE+0000": "1.5",
        "$TESTFEE+0001": "0.5",
        "$TESTFEE+0002": "2",
        "$BTC+1234": "60000",
    })


@pytest.fixture
def rate_cache(rate_source, clock):
    return ExchangeRateCache(rate_source, clock=clock)


@pytest.fixture
def denominations():
    return DenominationResolver(token_decimals={
        "$TESTFEE+0000": 9,
        "$TESTFEE+0001": 9,
        "$TESTFEE+0002": 9,
        "$BTC+1234": 8,
    })


@pytest.fixture
def calculator(rate_cache, denominations):
    return FeeCalculator(rate_cache, denominations=denominations)
