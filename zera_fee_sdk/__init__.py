"""
ZERA fee SDK - fee computation and exchange-rate caching for ZERA transactions.
"""
from .version import __version__
from .exceptions import (
    FeeError,
    ClassificationError,
    UnknownFeeTypeError,
    UnsupportedCurrencyError,
    FeeContractNotAllowedError,
    InvalidAmountError,
    InvalidInterfaceFeeError,
    RateFetchError,
    ExchangeRateUnavailableError,
)
from .config import FeeEngineSettings
from .denominations import DenominationResolver
from .models import FeeBreakdown
from .txn import TxnKind, KeyKind, HashKind, classify, estimate_size, public_key_bytes, address_bytes
from .fees import (
    FeeSchedule,
    ContractFeeConfig,
    ContractFeeResolver,
    ContractFeeType,
    ConvergenceSettings,
    InterfaceFeeSpec,
    resolve_interface_fee,
)
from .rates import ExchangeRateCache, HttpRateSource, StaticRateSource, get_rate_source
from .client import FeeCalculator

__all__ = [
    '__version__',
    'FeeCalculator',
    'FeeEngineSettings',
    'FeeBreakdown',
    'DenominationResolver',
    'TxnKind',
    'KeyKind',
    'HashKind',
    'classify',
    'estimate_size',
    'public_key_bytes',
    'address_bytes',
    'FeeSchedule',
    'ContractFeeConfig',
    'ContractFeeResolver',
    'ContractFeeType',
    'ConvergenceSettings',
    'InterfaceFeeSpec',
    'resolve_interface_fee',
    'ExchangeRateCache',
    'HttpRateSource',
    'StaticRateSource',
    'get_rate_source',
    'FeeError',
    'ClassificationError',
    'UnknownFeeTypeError',
    'UnsupportedCurrencyError',
    'FeeContractNotAllowedError',
    'InvalidAmountError',
    'InvalidInterfaceFeeError',
    'RateFetchError',
    'ExchangeRateUnavailableError',
]
