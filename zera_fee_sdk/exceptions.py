"""
Exceptions for the ZERA fee engine.
"""
from typing import Optional, Sequence


class FeeError(Exception):
    """Base exception for fee-computation errors."""
    pass


class ClassificationError(FeeError):
    """Raised when a transaction, key or hash shape cannot be recognized."""

    def __init__(self, message: str, byte_length: Optional[int] = None):
        self.byte_length = byte_length
        if byte_length is not None:
            message = f"{message} (public key length: {byte_length} bytes)"
        super().__init__(message)


class UnknownFeeTypeError(FeeError):
    """Raised when a fee-type token has no entry in the fee schedule."""

    def __init__(self, fee_type: str):
        self.fee_type = fee_type
        super().__init__(f"Unknown fee type: {fee_type}")


class UnsupportedCurrencyError(FeeError):
    """Raised when a currency has no known denomination."""

    def __init__(self, currency_id: str, supported: Sequence[str] = ()):
        self.currency_id = currency_id
        self.supported = list(supported)
        listed = ", ".join(self.supported) or "none"
        super().__init__(
            f"Unsupported currency: {currency_id}. Supported currencies: {listed}"
        )


class FeeContractNotAllowedError(FeeError):
    """Raised when the requested fee currency is not in a contract's allow-list."""

    def __init__(self, contract_id: str, pay_currency_id: str, allowed_fee_ids: Sequence[str]):
        self.contract_id = contract_id
        self.pay_currency_id = pay_currency_id
        self.allowed_fee_ids = list(allowed_fee_ids)
        super().__init__(
            f"Fee currency {pay_currency_id} is not allowed for contract {contract_id}. "
            f"Allowed IDs: {', '.join(self.allowed_fee_ids)}"
        )


class InvalidAmountError(FeeError, ValueError):
    """Raised when a value cannot be used as a decimal amount."""
    pass


class InvalidInterfaceFeeError(FeeError, ValueError):
    """Raised when an interface fee specification is incomplete or invalid."""
    pass


class RateFetchError(FeeError):
    """Raised by rate sources when a rate cannot be fetched.

    The exchange-rate cache recovers from this error with a fallback rate,
    so callers of the fee engine never see it directly.
    """

    def __init__(self, message: str, currency_id: Optional[str] = None):
        self.currency_id = currency_id
        super().__init__(message)


class ExchangeRateUnavailableError(FeeError):
    """Raised when a rate fetch failed and no fallback rate is configured."""

    def __init__(self, currency_id: str):
        self.currency_id = currency_id
        super().__init__(
            f"No exchange rate available for {currency_id}: fetch failed and no fallback rate is configured"
        )
