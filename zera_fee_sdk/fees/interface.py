"""
Third-party interface fees.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..amounts import AmountInput, to_decimal
from ..denominations import DenominationResolver
from ..exceptions import InvalidAmountError, InvalidInterfaceFeeError
from ..txn.records import address_bytes


@dataclass(frozen=True)
class InterfaceFeeSpec:
    """Caller request for an interface fee; all three fields go together."""
    amount: Optional[AmountInput] = None
    fee_currency_id: Optional[str] = None
    provider_address: Optional[str] = None


@dataclass(frozen=True)
class InterfaceFee:
    amount: Decimal
    smallest_units: int
    fee_currency_id: str
    provider_address: str
    address_bytes: bytes


def resolve_interface_fee(
    amount: Optional[AmountInput] = None,
    fee_currency_id: Optional[str] = None,
    provider_address: Optional[str] = None,
    denominations: Optional[DenominationResolver] = None,
) -> Optional[InterfaceFee]:
    """
    Validate an interface fee and convert it to smallest units.

    Args:
        amount: Fee in whole units of ``fee_currency_id``
        fee_currency_id: Currency the fee is paid in
        provider_address: Base58 address of the interface provider
        denominations: Denomination resolver for ``fee_currency_id``

    Returns:
        The fee, or None when no fee was requested or it rounds down to zero units

    Raises:
        InvalidInterfaceFeeError: If only some of the three values are given,
            the amount is not positive, or the address is not base58
    """
    supplied = {
        "amount": amount not in (None, ""),
        "fee_currency_id": bool(fee_currency_id),
        "provider_address": bool(provider_address),
    }
    if not any(supplied.values()):
        return None
    missing = [name for name, present in supplied.items() if not present]
    if missing:
        raise InvalidInterfaceFeeError(
            f"Interface fee requires amount, fee_currency_id and provider_address; missing: {', '.join(missing)}"
        )

    try:
        value = to_decimal(amount)
    except InvalidAmountError as exc:
        raise InvalidInterfaceFeeError(f"Invalid interface fee amount: {amount!r}") from exc
    if value <= 0:
        raise InvalidInterfaceFeeError(f"Interface fee amount must be positive: {amount!r}")

    try:
        raw_address = address_bytes(provider_address)
    except ValueError as exc:
        raise InvalidInterfaceFeeError(f"Invalid interface provider address: {provider_address!r}") from exc

    denominations = denominations or DenominationResolver()
    units = denominations.to_smallest_units(value, fee_currency_id)
    if units == 0:
        return None
    return InterfaceFee(
        amount=denominations.from_smallest_units(units, fee_currency_id),
        smallest_units=units,
        fee_currency_id=fee_currency_id,
        provider_address=provider_address,
        address_bytes=raw_address,
    )


def resolve_interface_fee_spec(
    spec: Optional[InterfaceFeeSpec],
    denominations: Optional[DenominationResolver] = None,
) -> Optional[InterfaceFee]:
    if spec is None:
        return None
    return resolve_interface_fee(spec.amount, spec.fee_currency_id, spec.provider_address, denominations)
