"""
Configuration for the fee engine.
"""
import logging
import os
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field

from .denominations import DEFAULT_SETTLEMENT_CURRENCY
from .fees.convergence import ConvergenceSettings
from .rates.cache import DEFAULT_TTL_SECONDS, FALLBACK_RATES, MINIMUM_RATES
from .rates.source import DEFAULT_RATE_TIMEOUT

# Configure logger
logger = logging.getLogger(__name__)


class FeeEngineSettings(BaseModel):
    """Every tunable of the fee engine, with the network defaults"""
    rate_endpoint: Optional[str] = None
    rate_timeout: float = DEFAULT_RATE_TIMEOUT
    rate_ttl_seconds: float = Field(DEFAULT_TTL_SECONDS, gt=0)
    fallback_rates: Dict[str, Decimal] = Field(default_factory=lambda: dict(FALLBACK_RATES))
    minimum_rates: Dict[str, Decimal] = Field(default_factory=lambda: dict(MINIMUM_RATES))
    fee_schedule_overrides: Dict[str, Decimal] = Field(default_factory=dict)
    contract_fee_overrides: Dict[str, Any] = Field(default_factory=dict)
    denomination_fallbacks: Dict[str, str] = Field(default_factory=dict)
    token_decimals: Dict[str, int] = Field(default_factory=dict)
    default_settlement_currency: str = DEFAULT_SETTLEMENT_CURRENCY
    convergence: ConvergenceSettings = Field(default_factory=ConvergenceSettings)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "FeeEngineSettings":
        """
        Build settings from environment variables.

        Recognized variables: ``ZERA_RATE_ENDPOINT`` (or ``INDEXER_URL``, to which
        the exchange-rate path is appended), ``ZERA_RATE_TIMEOUT``,
        ``ZERA_RATE_TTL``, ``ZERA_DEFAULT_FEE_ID`` and ``ZERA_MAX_FEE_ITERATIONS``.
        Keyword arguments take precedence over the environment.
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}

        endpoint = env.get("ZERA_RATE_ENDPOINT")
        indexer_url = env.get("INDEXER_URL")
        if endpoint:
            values["rate_endpoint"] = endpoint
        elif indexer_url:
            values["rate_endpoint"] = f"{indexer_url.rstrip('/')}/api/v1/exchange-rates"

        if env.get("ZERA_RATE_TIMEOUT"):
            values["rate_timeout"] = float(env["ZERA_RATE_TIMEOUT"])
        if env.get("ZERA_RATE_TTL"):
            values["rate_ttl_seconds"] = float(env["ZERA_RATE_TTL"])
        if env.get("ZERA_DEFAULT_FEE_ID"):
            values["default_settlement_currency"] = env["ZERA_DEFAULT_FEE_ID"]
        if env.get("ZERA_MAX_FEE_ITERATIONS"):
            values["convergence"] = ConvergenceSettings(max_iterations=int(env["ZERA_MAX_FEE_ITERATIONS"]))

        values.update(overrides)
        logger.debug(f"Loaded fee engine settings from environment: {sorted(values)}")
        return cls(**values)

