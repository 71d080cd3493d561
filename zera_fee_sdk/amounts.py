"""
Decimal arithmetic for fee computation.

Every money value in the engine is a ``decimal.Decimal`` evaluated in a
dedicated 50-digit context, and crosses module boundaries either as a
``Decimal`` or as a plain decimal string. Floats are accepted on input only
through their shortest ``repr``.
"""
import math
import re
from decimal import (
    Context,
    Decimal,
    InvalidOperation,
    ROUND_CEILING,
    ROUND_DOWN,
    ROUND_HALF_UP,
    localcontext,
)
from typing import Union

from .exceptions import InvalidAmountError

AmountInput = Union[Decimal, int, float, str]

# Precision used for all money arithmetic
MONEY_CONTEXT = Context(prec=50, rounding=ROUND_DOWN)

# Fee sums are quantized to one-millionth of a USD
USD_QUANTUM = Decimal("0.000001")

_DECIMAL_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")


def to_decimal(value: AmountInput) -> Decimal:
    """
    Convert a value to a finite ``Decimal``.

    Args:
        value: Decimal, integer, float or decimal string (no exponent)

    Returns:
        The value as a Decimal

    Raises:
        InvalidAmountError: If the value is not a finite decimal number
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidAmountError(f"Invalid amount: {value!r}")
        result = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip()
        if not _DECIMAL_PATTERN.match(text):
            raise InvalidAmountError(f"Invalid amount format: {value!r}")
        result = Decimal(text)
    else:
        raise InvalidAmountError(f"Unsupported amount type: {type(value).__name__}")

    if not result.is_finite():
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    return result


def to_smallest_units(amount: AmountInput, decimals: int, rounding: str = ROUND_DOWN) -> int:
    """
    Scale a human-readable amount to integer smallest units.

    Args:
        amount: Amount in whole currency units
        decimals: Number of decimal places of the currency
        rounding: Decimal rounding mode for sub-unit remainders

    Returns:
        Integer amount in smallest units
    """
    with localcontext(MONEY_CONTEXT):
        scaled = to_decimal(amount).scaleb(decimals)
        return int(scaled.to_integral_value(rounding=rounding))


def ceil_to_smallest_units(amount: AmountInput, decimals: int) -> int:
    """Scale an amount to smallest units, rounding any remainder up."""
    return to_smallest_units(amount, decimals, rounding=ROUND_CEILING)


def from_smallest_units(units: Union[int, str, Decimal], decimals: int) -> Decimal:
    """
    Scale integer smallest units back to whole currency units.

    Raises:
        InvalidAmountError: If ``units`` is not an integral value
    """
    value = to_decimal(units)
    if value != value.to_integral_value():
        raise InvalidAmountError(f"Smallest-unit amount must be an integer: {units!r}")
    with localcontext(MONEY_CONTEXT):
        return value.scaleb(-decimals)


def calculate_percentage(value: AmountInput, percentage: AmountInput) -> Decimal:
    """Return ``value * percentage / 100`` without intermediate rounding."""
    with localcontext(MONEY_CONTEXT):
        return to_decimal(value) * to_decimal(percentage) / Decimal(100)


def safe_divide(numerator: AmountInput, denominator: AmountInput) -> Decimal:
    """
    Divide two amounts.

    Raises:
        InvalidAmountError: If the denominator is zero
    """
    divisor = to_decimal(denominator)
    if divisor == 0:
        raise InvalidAmountError("Division by zero")
    with localcontext(MONEY_CONTEXT):
        return to_decimal(numerator) / divisor


def multiply(left: AmountInput, right: AmountInput) -> Decimal:
    with localcontext(MONEY_CONTEXT):
        return to_decimal(left) * to_decimal(right)


def quantize_usd(value: AmountInput) -> Decimal:
    """Round a USD amount to the nearest one-millionth."""
    try:
        return to_decimal(value).quantize(USD_QUANTUM, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise InvalidAmountError(f"Cannot quantize amount: {value!r}") from exc


def format_decimal(value: AmountInput) -> str:
    """Render a decimal as a plain string without exponent or trailing zeros."""
    normalized = to_decimal(value).normalize()
    if normalized == 0:
        return "0"
    return format(normalized, "f")
