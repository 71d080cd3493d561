"""
Currency denomination lookup.

A currency's smallest-unit exponent comes from explicit token configuration
first and from the denomination fallback table second. Anything else is an
``UnsupportedCurrencyError``.
"""
import logging
import re
from decimal import Decimal, ROUND_DOWN
from typing import Dict, Mapping, Optional, Union

from .amounts import AmountInput, from_smallest_units, to_smallest_units
from .exceptions import InvalidAmountError, UnsupportedCurrencyError

# Configure logger
logger = logging.getLogger(__name__)

DEFAULT_SETTLEMENT_CURRENCY = "$ZRA+0000"

TOKEN_DECIMALS: Dict[str, int] = {
    "$ZRA+0000": 9,
}

DENOMINATION_FALLBACKS: Dict[str, str] = {
    "$ZRA+0000": "1000000000",
}

CURRENCY_ID_PATTERN = re.compile(r"^\$[A-Za-z]+\+\d{4}$")


def is_valid_currency_id(currency_id: str) -> bool:
    """Return True for identifiers of the form ``$SYMBOL+NNNN``."""
    return isinstance(currency_id, str) and bool(CURRENCY_ID_PATTERN.match(currency_id))


def decimals_from_denomination(denomination: Union[str, int]) -> int:
    """
    Convert a denomination such as ``"1000000000"`` to its decimal places.

    Raises:
        InvalidAmountError: If the denomination is not a positive power of ten
    """
    text = str(denomination).strip()
    if not text.isdigit() or text[0] != "1" or set(text[1:]) - {"0"}:
        raise InvalidAmountError(f"Denomination must be a power of ten: {denomination!r}")
    return len(text) - 1


class DenominationResolver:
    """
    Resolves currency identifiers to their number of decimal places.

    Args:
        token_decimals: Explicit decimals per currency id
        denomination_fallbacks: Denomination strings (``"1000000000"``) per currency id
    """

    def __init__(
        self,
        token_decimals: Optional[Mapping[str, int]] = None,
        denomination_fallbacks: Optional[Mapping[str, Union[str, int]]] = None,
    ):
        self._decimals: Dict[str, int] = dict(TOKEN_DECIMALS)
        for currency_id, decimals in (token_decimals or {}).items():
            self.add_token(currency_id, decimals)

        self._fallbacks: Dict[str, int] = {
            currency_id: decimals_from_denomination(denomination)
            for currency_id, denomination in DENOMINATION_FALLBACKS.items()
        }
        for currency_id, denomination in (denomination_fallbacks or {}).items():
            self.add_fallback(currency_id, denomination)

    def add_token(self, currency_id: str, decimals: int) -> None:
        if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
            raise InvalidAmountError(f"Invalid decimals for {currency_id}: {decimals!r}")
        self._decimals[currency_id] = decimals

    def add_fallback(self, currency_id: str, denomination: Union[str, int]) -> None:
        self._fallbacks[currency_id] = decimals_from_denomination(denomination)

    @property
    def supported(self):
        return sorted(set(self._decimals) | set(self._fallbacks))

    def decimals_for(
        self,
        currency_id: str,
        fallback_denomination: Optional[Union[str, int]] = None,
    ) -> int:
        """
        Return the number of decimal places of ``currency_id``.

        Args:
            currency_id: Currency identifier such as ``$ZRA+0000``
            fallback_denomination: Denomination to use when nothing is configured

        Returns:
            Number of decimal places

        Raises:
            UnsupportedCurrencyError: If the currency is unknown and no fallback applies
        """
        if currency_id in self._decimals:
            return self._decimals[currency_id]
        if currency_id in self._fallbacks:
            logger.debug(f"Using denomination fallback for {currency_id}")
            return self._fallbacks[currency_id]
        if fallback_denomination is not None:
            return decimals_from_denomination(fallback_denomination)
        raise UnsupportedCurrencyError(currency_id, self.supported)

    def to_smallest_units(self, amount: AmountInput, currency_id: str, rounding: str = ROUND_DOWN) -> int:
        return to_smallest_units(amount, self.decimals_for(currency_id), rounding=rounding)

    def from_smallest_units(self, units: Union[int, str, Decimal], currency_id: str) -> Decimal:
        return from_smallest_units(units, self.decimals_for(currency_id))
