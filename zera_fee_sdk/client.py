"""
FeeCalculator - computes network, contract and interface fees for ZERA transactions.
"""
import asyncio
import logging
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Union

from .amounts import (
    ceil_to_smallest_units,
    format_decimal,
    from_smallest_units,
    multiply,
    safe_divide,
    to_decimal,
    to_smallest_units,
)
from .config import FeeEngineSettings
from .denominations import DEFAULT_SETTLEMENT_CURRENCY, DenominationResolver
from .fees.contract import ContractConfigFetcher, ContractFeeConfig, ContractFeeResolver, ContractFeeType
from .fees.convergence import ConvergenceSettings, converge
from .fees.interface import InterfaceFee, InterfaceFeeSpec, resolve_interface_fee_spec
from .fees.schedule import DEFAULT_SCHEDULE, FeeSchedule
from .models import (
    ContractFeeDetail,
    FeeBreakdown,
    FeeComponents,
    InterfaceFeeDetail,
    NetworkFeeDetail,
    RateDetail,
)
from .rates.cache import ExchangeRateCache, RateQuote
from .rates.source import RateFetcher, RateSource, get_rate_source
from .txn.classifier import Classification, classify
from .txn.size import estimate_size


class FeeCalculator:
    """
    Computes the fees of unsigned ZERA transactions.

    A calculation:
    1. Classifies the record and works on a private copy of it
    2. Pre-fetches every needed exchange rate in parallel
    3. Computes the contract fee and writes it into the copy
    4. Validates the interface fee and writes it into the copy
    5. Solves the size/network-fee fixed point on the fee-augmented copy

    The exchange-rate cache is the only state shared between calculations.
    """

    def __init__(
        self,
        rate_cache: ExchangeRateCache,
        fee_schedule: Optional[FeeSchedule] = None,
        denominations: Optional[DenominationResolver] = None,
        contract_fees: Optional[ContractFeeResolver] = None,
        convergence: Optional[ConvergenceSettings] = None,
        default_settlement_currency: str = DEFAULT_SETTLEMENT_CURRENCY,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the FeeCalculator

        Args:
            rate_cache: Exchange-rate cache, possibly shared with other calculators
            fee_schedule: Fixed and per-byte fee table
            denominations: Currency denomination resolver
            contract_fees: Contract fee resolver; built on ``rate_cache`` if omitted
            convergence: Size/fee solver tolerances
            default_settlement_currency: Currency used when a call names none
            logger: Optional logger instance to use for debug/info logging
        """
        self.rate_cache = rate_cache
        self.fee_schedule = fee_schedule or DEFAULT_SCHEDULE
        self.denominations = denominations or DenominationResolver()
        self.contract_fees = contract_fees or ContractFeeResolver(rate_cache, self.denominations)
        self.convergence = convergence or ConvergenceSettings()
        self.default_settlement_currency = default_settlement_currency
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[FeeEngineSettings] = None,
        rate_source: Optional[Union[RateSource, RateFetcher]] = None,
        fetch_contract_fee_config: Optional[ContractConfigFetcher] = None,
        logger: Optional[logging.Logger] = None
    ) -> "FeeCalculator":
        """
        Wire a calculator and its collaborators from settings.

        Args:
            settings: Engine settings; defaults to the network defaults
            rate_source: Rate source or async fetch function; chosen from
                ``settings.rate_endpoint`` if omitted
            fetch_contract_fee_config: Async contract fee config lookup
            logger: Optional logger instance

        Returns:
            Configured FeeCalculator
        """
        settings = settings or FeeEngineSettings()
        if rate_source is None:
            rate_source = get_rate_source(
                settings.rate_endpoint,
                timeout=settings.rate_timeout,
                static_rates=settings.fallback_rates,
            )
        rate_cache = ExchangeRateCache(
            rate_source,
            ttl=settings.rate_ttl_seconds,
            fallback_rates=settings.fallback_rates,
            minimum_rates=settings.minimum_rates,
            logger=logger,
        )
        denominations = DenominationResolver(settings.token_decimals, settings.denomination_fallbacks)
        fee_schedule = DEFAULT_SCHEDULE
        if settings.fee_schedule_overrides:
            fee_schedule = DEFAULT_SCHEDULE.merge(settings.fee_schedule_overrides)
        contract_fees = ContractFeeResolver(
            rate_cache,
            denominations,
            fetch_contract_fee_config=fetch_contract_fee_config,
            overrides=settings.contract_fee_overrides,
            logger=logger,
        )
        return cls(
            rate_cache,
            fee_schedule=fee_schedule,
            denominations=denominations,
            contract_fees=contract_fees,
            convergence=settings.convergence,
            default_settlement_currency=settings.default_settlement_currency,
            logger=logger,
        )

    def classify(self, record: Any) -> Classification:
        return classify(record)

    def estimate_size(self, record: Any) -> int:
        """Size in bytes of ``record`` once signed, as it stands (no fees added)."""
        classification = classify(record)
        return estimate_size(classification.message, classification)

    async def calculate_fee(
        self,
        record: Any,
        settlement_currency_id: Optional[str] = None,
        contract_fee_currency_id: Optional[str] = None,
        interface_fee: Optional[Union[InterfaceFeeSpec, Mapping[str, Any]]] = None,
    ) -> FeeBreakdown:
        """
        Calculate every fee of a transaction.

        Args:
            record: Transaction as a protobuf message or dict; it is not modified
            settlement_currency_id: Currency the network fee is paid in
            contract_fee_currency_id: Currency the contract fee is paid in;
                defaults to the contract's first allowed fee currency
            interface_fee: Optional interface fee (amount, fee_currency_id, provider_address)

        Returns:
            FeeBreakdown with amounts in smallest units of the settlement currency

        Raises:
            ClassificationError: If the transaction cannot be classified
            UnknownFeeTypeError: If the fee schedule lacks a needed token
            UnsupportedCurrencyError: If a currency has no known denomination
            FeeContractNotAllowedError: If the contract fee currency is not allowed
            InvalidInterfaceFeeError: If the interface fee is incomplete or invalid
            ExchangeRateUnavailableError: If a rate fetch failed with no fallback rate
        """
        settlement = settlement_currency_id or self.default_settlement_currency
        settlement_decimals = self.denominations.decimals_for(settlement)

        classification = classify(record)
        message = classification.message
        interface = resolve_interface_fee_spec(_as_interface_spec(interface_fee), self.denominations)

        contract_id = _contract_fee_target(classification)
        contract_config: Optional[ContractFeeConfig] = None
        pay_currency_id: Optional[str] = None
        if contract_id:
            contract_config = await self.contract_fees.get_config(contract_id)
            pay_currency_id = self.contract_fees.select_pay_currency(
                contract_id, contract_config, contract_fee_currency_id
            )

        needed = [settlement]
        if interface is not None:
            needed.append(interface.fee_currency_id)
        # Contract currencies may degrade instead of failing the calculation
        contract_currencies = []
        if contract_config is not None and contract_config.fee_type != ContractFeeType.NONE:
            contract_currencies.append(pay_currency_id)
            if contract_config.fee_type == ContractFeeType.PERCENTAGE:
                contract_currencies.append(contract_id)
        quotes = await self.rate_cache.get_quotes(needed, optional=contract_currencies)

        contract_detail = None
        contract_units: Optional[int] = 0
        if contract_config is not None:
            value = Decimal(0)
            if contract_config.fee_type == ContractFeeType.PERCENTAGE:
                value = self._transfer_value(message, contract_id)
            contract = await self.contract_fees.resolve(
                contract_id,
                value,
                pay_currency_id=pay_currency_id,
                settlement_transaction_currency_id=contract_id,
                rates=quotes,
            )
            if contract.fee_smallest_units > 0:
                message.contract_fee_id = contract.fee_currency_id
                message.contract_fee_amount = str(contract.fee_smallest_units)
                if contract.fee_currency_id == settlement or contract.fee_currency_id in quotes:
                    contract_units = self._to_settlement_units(
                        contract.fee_smallest_units, contract.fee_currency_id, settlement, quotes
                    )
                else:
                    contract_units = None
                    self.logger.warning(
                        f"No rate for {contract.fee_currency_id}; contract fee left out of the total"
                    )
                contract_detail = ContractFeeDetail(
                    contract_id=contract_id,
                    fee_type=contract.fee_type.name,
                    fee_currency_id=contract.fee_currency_id,
                    configured_amount=format_decimal(contract.configured_amount),
                    amount=format_decimal(contract.fee_amount),
                    smallest_units=str(contract.fee_smallest_units),
                    degraded=contract.degraded,
                    details=contract.breakdown,
                )

        interface_detail = None
        interface_units = 0
        if interface is not None:
            message.base.interface_fee = str(interface.smallest_units)
            message.base.interface_fee_id = interface.fee_currency_id
            message.base.interface_address = interface.address_bytes
            interface_units = self._to_settlement_units(
                interface.smallest_units, interface.fee_currency_id, settlement, quotes
            )
            interface_detail = _interface_detail(interface)

        fee_types = self.fee_schedule.resolve_fee_types(
            classification.kind, classification.keys, classification.hashes
        )
        fee_values = self.fee_schedule.sum_fee_values(fee_types)
        rate = quotes[settlement].rate
        message.base.fee_id = settlement

        def price(size: int) -> Decimal:
            units = ceil_to_smallest_units(safe_divide(fee_values.usd_fee(size), rate), settlement_decimals)
            return from_smallest_units(units, settlement_decimals)

        def apply_fee(fee: Decimal) -> None:
            message.base.fee_amount = str(to_smallest_units(fee, settlement_decimals))

        result = converge(
            lambda: estimate_size(message, classification),
            price,
            apply_fee,
            self.convergence,
        )
        network_units = to_smallest_units(result.fee, settlement_decimals)
        total_units = network_units + (contract_units or 0) + interface_units

        self.logger.debug(
            f"{classification.kind.name} fee: {result.size} bytes, network={network_units} "
            f"contract={contract_units} interface={interface_units} {settlement}"
        )

        return FeeBreakdown(
            network_fee=str(network_units),
            contract_fee=str(contract_units) if contract_detail and contract_units is not None else None,
            interface_fee=str(interface_units) if interface_detail else None,
            total_fee=str(total_units),
            fee_currency_id=settlement,
            breakdown=FeeComponents(
                network=NetworkFeeDetail(
                    fee_types=fee_types,
                    size_bytes=result.size,
                    fixed_usd=format_decimal(fee_values.fixed_usd),
                    per_byte_usd=format_decimal(fee_values.per_byte_usd),
                    usd_fee=format_decimal(fee_values.usd_fee(result.size)),
                    rate=format_decimal(rate),
                    amount=format_decimal(result.fee),
                    smallest_units=str(network_units),
                ),
                contract=contract_detail,
                interface=interface_detail,
            ),
            transaction_kind=classification.kind.name,
            converged=result.converged,
            iterations=result.iterations,
            used_fallback_rate=any(quote.is_fallback for quote in quotes.values()),
            rates={currency_id: _rate_detail(quote) for currency_id, quote in quotes.items()},
            transaction=message,
        )

    def calculate_fee_sync(self, record: Any, **kwargs) -> FeeBreakdown:
        """Run ``calculate_fee`` to completion outside of an event loop."""
        return asyncio.run(self.calculate_fee(record, **kwargs))

    def close(self) -> None:
        """Release the rate source's resources."""
        self.rate_cache.source.close()

    def _transfer_value(self, message: Any, contract_id: str) -> Decimal:
        total = sum(to_decimal(output.amount or "0") for output in message.output_transfers)
        return self.denominations.from_smallest_units(total, contract_id)

    def _to_settlement_units(
        self,
        units: int,
        currency_id: str,
        settlement: str,
        quotes: Dict[str, RateQuote],
    ) -> int:
        if currency_id == settlement:
            return units
        usd = multiply(self.denominations.from_smallest_units(units, currency_id), quotes[currency_id].rate)
        return ceil_to_smallest_units(
            safe_divide(usd, quotes[settlement].rate),
            self.denominations.decimals_for(settlement),
        )


def _contract_fee_target(classification: Classification) -> Optional[str]:
    if not classification.transaction.spec.value_transfer:
        return None
    message = classification.message
    if message.contract_id and len(message.output_transfers) > 0:
        return message.contract_id
    return None


def _as_interface_spec(value: Optional[Union[InterfaceFeeSpec, Mapping[str, Any]]]) -> Optional[InterfaceFeeSpec]:
    if value is None or isinstance(value, InterfaceFeeSpec):
        return value
    return InterfaceFeeSpec(
        amount=value.get("amount"),
        fee_currency_id=value.get("fee_currency_id", value.get("feeCurrencyId")),
        provider_address=value.get("provider_address", value.get("providerAddress")),
    )


def _interface_detail(interface: InterfaceFee) -> InterfaceFeeDetail:
    return InterfaceFeeDetail(
        fee_currency_id=interface.fee_currency_id,
        provider_address=interface.provider_address,
        amount=format_decimal(interface.amount),
        smallest_units=str(interface.smallest_units),
    )


def _rate_detail(quote: RateQuote) -> RateDetail:
    return RateDetail(rate=format_decimal(quote.rate), source=quote.source, floored=quote.floored)
