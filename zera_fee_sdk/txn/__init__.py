"""
Transaction kinds, schema, classification and size estimation.
"""
from .kinds import HashDescriptor, HashKind, KeyDescriptor, KeyKind, TxnKind
from .records import Transaction, address_bytes, public_key_bytes, to_transaction
from .classifier import Classification, classify, parse_key_identifier
from .size import SizeBreakdown, estimate_size, size_breakdown

__all__ = [
    'TxnKind',
    'KeyKind',
    'HashKind',
    'KeyDescriptor',
    'HashDescriptor',
    'Transaction',
    'to_transaction',
    'public_key_bytes',
    'address_bytes',
    'Classification',
    'classify',
    'parse_key_identifier',
    'SizeBreakdown',
    'estimate_size',
    'size_breakdown',
]
