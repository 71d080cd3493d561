"""
Contract-specific fees.

Each token contract may charge a fee on transfers: a fixed amount, a
percentage of the transferred value, a USD face value paid in an allowed
currency, or nothing. The fee may only be paid in one of the contract's
allowed fee currencies.
"""
import logging
from decimal import Decimal
from enum import IntEnum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from cachetools import TTLCache
from pydantic import BaseModel, Field, field_validator

from ..amounts import (
    AmountInput,
    calculate_percentage,
    ceil_to_smallest_units,
    format_decimal,
    multiply,
    safe_divide,
    to_decimal,
)
from ..denominations import DEFAULT_SETTLEMENT_CURRENCY, DenominationResolver
from ..exceptions import ExchangeRateUnavailableError, FeeContractNotAllowedError
from ..rates.cache import ExchangeRateCache, RateQuote

# Configure logger
logger = logging.getLogger(__name__)

CONFIG_TTL_SECONDS = 300


class ContractFeeType(IntEnum):
    FIXED = 0
    PERCENTAGE = 1
    CUR_EQUIVALENT = 2
    NONE = 3


_FEE_TYPE_ALIASES = {
    "FIXED": ContractFeeType.FIXED,
    "PERCENTAGE": ContractFeeType.PERCENTAGE,
    "PERCENT": ContractFeeType.PERCENTAGE,
    "CUR_EQUIVALENT": ContractFeeType.CUR_EQUIVALENT,
    "CURRENCY_EQUIVALENT": ContractFeeType.CUR_EQUIVALENT,
    "CUREQUIVALENT": ContractFeeType.CUR_EQUIVALENT,
    "NONE": ContractFeeType.NONE,
}


def normalize_fee_type(value: Any) -> ContractFeeType:
    """
    Normalize an enum member, integer or case-insensitive name to ``ContractFeeType``.

    Raises:
        ValueError: If the value names no fee type
    """
    if isinstance(value, ContractFeeType):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return ContractFeeType(value)
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return ContractFeeType(int(text))
        key = text.upper().replace("-", "_").replace(" ", "_")
        if key in _FEE_TYPE_ALIASES:
            return _FEE_TYPE_ALIASES[key]
    raise ValueError(f"Unknown contract fee type: {value!r}")


class ContractFeeConfig(BaseModel):
    """Fee policy of a token contract"""
    fee_type: ContractFeeType = Field(..., alias="feeType")
    fee_amount: Decimal = Field(..., alias="feeAmount")
    allowed_fee_ids: List[str] = Field(..., alias="allowedFeeIds")

    class Config:
        populate_by_name = True

    @field_validator("fee_type", mode="before")
    @classmethod
    def _normalize_fee_type(cls, value):
        return normalize_fee_type(value)

    @field_validator("fee_amount", mode="before")
    @classmethod
    def _parse_fee_amount(cls, value):
        amount = to_decimal(value)
        if amount < 0:
            raise ValueError("fee_amount must not be negative")
        return amount

    @field_validator("allowed_fee_ids")
    @classmethod
    def _check_allowed_fee_ids(cls, value):
        unique = list(dict.fromkeys(value))
        if not unique:
            raise ValueError("allowed_fee_ids must not be empty")
        return unique


FALLBACK_CONTRACT_FEES: Dict[str, ContractFeeConfig] = {
    "$TESTFEE+0000": ContractFeeConfig(
        fee_type=ContractFeeType.FIXED, fee_amount="0.001", allowed_fee_ids=["$TESTFEE+0000", "$ZRA+0000"]
    ),
    "$TESTFEE+0001": ContractFeeConfig(
        fee_type=ContractFeeType.CUR_EQUIVALENT, fee_amount="0.01", allowed_fee_ids=["$TESTFEE+0001", "$ZRA+0000"]
    ),
    "$TESTFEE+0002": ContractFeeConfig(
        fee_type=ContractFeeType.PERCENTAGE, fee_amount="0.5", allowed_fee_ids=["$TESTFEE+0002", "$ZRA+0000"]
    ),
    "$BTC+1234": ContractFeeConfig(
        fee_type=ContractFeeType.FIXED, fee_amount="0.0001", allowed_fee_ids=["$BTC+1234", "$ZRA+0000"]
    ),
    "$ETH+5678": ContractFeeConfig(
        fee_type=ContractFeeType.PERCENTAGE, fee_amount="0.25", allowed_fee_ids=["$ETH+5678", "$ZRA+0000"]
    ),
    "$USDC+9999": ContractFeeConfig(
        fee_type=ContractFeeType.CUR_EQUIVALENT, fee_amount="0.01", allowed_fee_ids=["$USDC+9999", "$ZRA+0000"]
    ),
}

DEFAULT_CONTRACT_FEE_CONFIG = ContractFeeConfig(
    fee_type=ContractFeeType.NONE, fee_amount="0", allowed_fee_ids=[DEFAULT_SETTLEMENT_CURRENCY]
)

ContractConfigFetcher = Callable[[str], Awaitable[Any]]


class ContractFeeResult(BaseModel):
    """Contract fee in the currency it is paid in"""
    contract_id: str = Field(..., alias="contractId")
    fee_type: ContractFeeType = Field(..., alias="feeType")
    fee_currency_id: str = Field(..., alias="feeCurrencyId")
    fee_amount: Decimal = Field(..., alias="feeAmount")
    fee_smallest_units: int = Field(..., alias="feeSmallestUnits")
    configured_amount: Decimal = Field(..., alias="configuredAmount")
    degraded: bool = False
    breakdown: Dict[str, str] = Field(default_factory=dict)

    class Config:
        populate_by_name = True


class ContractFeeResolver:
    """
    Resolves contract fee policies and computes contract fees.

    Configuration is looked up in the caller override map, then through the
    ``fetch_contract_fee_config`` collaborator (results kept for five
    minutes), then in the built-in fallback table, then the default
    no-fee policy.
    """

    def __init__(
        self,
        rate_cache: ExchangeRateCache,
        denominations: Optional[DenominationResolver] = None,
        fetch_contract_fee_config: Optional[ContractConfigFetcher] = None,
        overrides: Optional[Mapping[str, Any]] = None,
        config_ttl: float = CONFIG_TTL_SECONDS,
        logger: Optional[logging.Logger] = None,
    ):
        self.rate_cache = rate_cache
        self.denominations = denominations or DenominationResolver()
        self.fetch_contract_fee_config = fetch_contract_fee_config
        self.overrides = {
            contract_id: _as_config(config) for contract_id, config in (overrides or {}).items()
        }
        self.logger = logger or logging.getLogger(__name__)
        self._configs: TTLCache = TTLCache(maxsize=256, ttl=config_ttl)

    async def get_config(self, contract_id: str) -> ContractFeeConfig:
        """Fee policy for ``contract_id``."""
        if contract_id in self.overrides:
            return self.overrides[contract_id]
        cached = self._configs.get(contract_id)
        if cached is not None:
            return cached

        if self.fetch_contract_fee_config is not None:
            try:
                fetched = await self.fetch_contract_fee_config(contract_id)
            except Exception as exc:
                self.logger.warning(f"Contract fee config fetch for {contract_id} failed: {exc}")
            else:
                if fetched is not None:
                    try:
                        config = _as_config(fetched)
                    except ValueError as exc:
                        self.logger.warning(f"Ignoring malformed fee config for {contract_id}: {exc}")
                    else:
                        self._configs[contract_id] = config
                        return config

        return FALLBACK_CONTRACT_FEES.get(contract_id, DEFAULT_CONTRACT_FEE_CONFIG)

    def clear(self) -> None:
        self._configs.clear()

    def select_pay_currency(
        self,
        contract_id: str,
        config: ContractFeeConfig,
        pay_currency_id: Optional[str] = None,
    ) -> str:
        """
        Return the currency the contract fee is paid in.

        Raises:
            FeeContractNotAllowedError: If ``pay_currency_id`` is not an allowed fee currency
        """
        pay_currency_id = pay_currency_id or config.allowed_fee_ids[0]
        if pay_currency_id not in config.allowed_fee_ids:
            raise FeeContractNotAllowedError(contract_id, pay_currency_id, config.allowed_fee_ids)
        return pay_currency_id

    async def resolve(
        self,
        contract_id: str,
        transaction_value: AmountInput = 0,
        pay_currency_id: Optional[str] = None,
        settlement_transaction_currency_id: Optional[str] = None,
        rates: Optional[Mapping[str, RateQuote]] = None,
    ) -> ContractFeeResult:
        """
        Compute the contract fee of a transfer.

        Args:
            contract_id: Contract whose fee policy applies
            transaction_value: Transferred value in whole units of the transaction currency
            pay_currency_id: Currency the fee is paid in; defaults to the first allowed id
            settlement_transaction_currency_id: Currency of ``transaction_value``;
                defaults to ``contract_id``
            rates: Already fetched quotes to use instead of the cache; a currency
                missing from them is treated as unavailable

        Returns:
            ContractFeeResult in the pay currency

        Raises:
            FeeContractNotAllowedError: If ``pay_currency_id`` is not an allowed fee currency
        """
        config = await self.get_config(contract_id)
        pay_currency_id = self.select_pay_currency(contract_id, config, pay_currency_id)
        transaction_currency_id = settlement_transaction_currency_id or contract_id
        value = to_decimal(transaction_value)

        degraded = False
        breakdown: Dict[str, str] = {"feeType": config.fee_type.name}
        if config.fee_type == ContractFeeType.FIXED:
            amount = config.fee_amount
        elif config.fee_type == ContractFeeType.PERCENTAGE:
            breakdown["transactionValue"] = format_decimal(value)
            breakdown["percentage"] = format_decimal(config.fee_amount)
            if pay_currency_id == transaction_currency_id:
                amount = calculate_percentage(value, config.fee_amount)
            else:
                try:
                    usd_value = multiply(value, await self._rate(transaction_currency_id, rates))
                    usd_fee = calculate_percentage(usd_value, config.fee_amount)
                    amount = safe_divide(usd_fee, await self._rate(pay_currency_id, rates))
                    breakdown["usdValue"] = format_decimal(usd_value)
                    breakdown["usdFee"] = format_decimal(usd_fee)
                except ExchangeRateUnavailableError as exc:
                    amount = calculate_percentage(value, config.fee_amount)
                    degraded = True
                    self.logger.warning(
                        f"Percentage fee for {contract_id} not converted to {pay_currency_id}: {exc}"
                    )
        elif config.fee_type == ContractFeeType.CUR_EQUIVALENT:
            breakdown["usdAmount"] = format_decimal(config.fee_amount)
            try:
                amount = safe_divide(config.fee_amount, await self._rate(pay_currency_id, rates))
            except ExchangeRateUnavailableError as exc:
                amount = config.fee_amount
                degraded = True
                self.logger.warning(
                    f"Currency-equivalent fee for {contract_id} not converted to {pay_currency_id}: {exc}"
                )
        else:
            amount = Decimal(0)

        units = ceil_to_smallest_units(amount, self.denominations.decimals_for(pay_currency_id)) if amount else 0
        breakdown["feeAmount"] = format_decimal(amount)
        return ContractFeeResult(
            contract_id=contract_id,
            fee_type=config.fee_type,
            fee_currency_id=pay_currency_id,
            fee_amount=amount,
            fee_smallest_units=units,
            configured_amount=config.fee_amount,
            degraded=degraded,
            breakdown=breakdown,
        )

    async def _rate(self, currency_id: str, rates: Optional[Mapping[str, RateQuote]]) -> Decimal:
        if rates is None:
            return await self.rate_cache.get_rate(currency_id)
        if currency_id not in rates:
            raise ExchangeRateUnavailableError(currency_id)
        return rates[currency_id].rate


def _as_config(value: Any) -> ContractFeeConfig:
    if isinstance(value, ContractFeeConfig):
        return value
    return ContractFeeConfig.model_validate(value)
