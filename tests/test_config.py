"""
Tests for fee engine settings.
"""
from decimal import Decimal

import pytest
from pydantic import ValidationError

from zera_fee_sdk.config import FeeEngineSettings
from zera_fee_sdk.rates.cache import DEFAULT_TTL_SECONDS

from tests.test_helpers import ZRA


def test_defaults():
    settings = FeeEngineSettings()

    assert settings.rate_endpoint is None
    assert settings.rate_ttl_seconds == DEFAULT_TTL_SECONDS
    assert settings.fallback_rates == {ZRA: Decimal("0.10")}
    assert settings.minimum_rates == {ZRA: Decimal("0.10")}
    assert settings.default_settlement_currency == ZRA
    assert settings.convergence.max_iterations == 10


def test_defaults_not_shared():
    first = FeeEngineSettings()
    first.fallback_rates["$ABC+0001"] = Decimal(1)
    assert "$ABC+0001" not in FeeEngineSettings().fallback_rates


def test_ttl_must_be_positive():
    with pytest.raises(ValidationError):
        FeeEngineSettings(rate_ttl_seconds=0)


def test_from_env():
    settings = FeeEngineSettings.from_env({
        "ZERA_RATE_ENDPOINT": "https://rates.test/v1",
        "ZERA_RATE_TIMEOUT": "1.5",
        "ZERA_RATE_TTL": "10",
        "ZERA_DEFAULT_FEE_ID": "$TESTFEE+0000",
        "ZERA_MAX_FEE_ITERATIONS": "4",
    })

    assert settings.rate_endpoint == "https://rates.test/v1"
    assert settings.rate_timeout == 1.5
    assert settings.rate_ttl_seconds == 10.0
    assert settings.default_settlement_currency == "$TESTFEE+0000"
    assert settings.convergence.max_iterations == 4


def test_from_env_indexer_url():
    settings = FeeEngineSettings.from_env({"INDEXER_URL": "https://indexer.test/"})
    assert settings.rate_endpoint == "https://indexer.test/api/v1/exchange-rates"


def test_explicit_endpoint_beats_indexer_url():
    settings = FeeEngineSettings.from_env({
        "INDEXER_URL": "https://indexer.test",
        "ZERA_RATE_ENDPOINT": "https://rates.test",
    })
    assert settings.rate_endpoint == "https://rates.test"


def test_keyword_overrides_win():
    settings = FeeEngineSettings.from_env({"ZERA_RATE_TTL": "10"}, rate_ttl_seconds=1.0)
    assert settings.rate_ttl_seconds == 1.0


def test_from_process_environment(monkeypatch):
    monkeypatch.setenv("ZERA_DEFAULT_FEE_ID", "$BTC+1234")
    monkeypatch.delenv("ZERA_RATE_ENDPOINT", raising=False)
    monkeypatch.delenv("INDEXER_URL", raising=False)

    settings = FeeEngineSettings.from_env()

    assert settings.default_settlement_currency == "$BTC+1234"
    assert settings.rate_endpoint is None
