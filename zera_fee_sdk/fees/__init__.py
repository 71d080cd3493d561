"""
Fee schedule, contract fees, interface fees and the size/fee solver.
"""
from .schedule import FeeSchedule, FeeValues, DEFAULT_SCHEDULE, resolve_fee_types, sum_fee_values
from .contract import (
    ContractFeeType,
    ContractFeeConfig,
    ContractFeeResult,
    ContractFeeResolver,
    normalize_fee_type,
)
from .interface import InterfaceFee, InterfaceFeeSpec, resolve_interface_fee
from .convergence import ConvergenceResult, ConvergenceSettings, converge

__all__ = [
    'FeeSchedule',
    'FeeValues',
    'DEFAULT_SCHEDULE',
    'resolve_fee_types',
    'sum_fee_values',
    'ContractFeeType',
    'ContractFeeConfig',
    'ContractFeeResult',
    'ContractFeeResolver',
    'normalize_fee_type',
    'InterfaceFee',
    'InterfaceFeeSpec',
    'resolve_interface_fee',
    'ConvergenceResult',
    'ConvergenceSettings',
    'converge',
]
