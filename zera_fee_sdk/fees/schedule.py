"""
Fixed and per-byte fee schedule.

Fee-type tokens name either a fixed USD cost (one per key and per hash) or
a USD cost per byte (one per transaction kind). The ``RESTRICTED_KEY_FEE``
marker multiplies the whole fixed subtotal.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..amounts import AmountInput, multiply, quantize_usd, to_decimal
from ..exceptions import UnknownFeeTypeError
from ..txn.kinds import SPEC_BY_KIND, HashDescriptor, KeyDescriptor, TxnKind

# Configure logger
logger = logging.getLogger(__name__)

RESTRICTED_KEY_FEE = "RESTRICTED_KEY_FEE"
DEFAULT_RESTRICTED_MULTIPLIER = Decimal("3.0")

FIXED_FEES: Dict[str, Decimal] = {
    "A_KEY_FEE": Decimal("0.02"),
    "B_KEY_FEE": Decimal("0.05"),
    "a_HASH_FEE": Decimal("0.02"),
    "b_HASH_FEE": Decimal("0.05"),
    "c_HASH_FEE": Decimal("0.01"),
    "d_HASH_FEE": Decimal("0.50"),
    "e_HASH_FEE": Decimal("1.00"),
    "f_HASH_FEE": Decimal("2.00"),
    "g_HASH_FEE": Decimal("4.00"),
    "dbz_HASH_FEE": Decimal("9.01"),
    "h_HASH_FEE": Decimal("2.00"),
    "i_HASH_FEE": Decimal("4.00"),
    "j_HASH_FEE": Decimal("8.00"),
}

PER_BYTE_FEES: Dict[str, Decimal] = {
    "COIN_TXN_FEE": Decimal("0.00015"),
    "MINT_TXN_FEE": Decimal("0.001"),
    "FOUNDATION_TXN_FEE": Decimal("0.0001"),
    "ITEM_MINT_TXN_FEE": Decimal("0.001"),
    "CONTRACT_TXN_FEE": Decimal("0.075"),
    "VOTE_TXN_FEE": Decimal("0.0001"),
    "PROPOSAL_TXN_FEE": Decimal("0.005"),
    "SMART_CONTRACT_DEPLOYMENT_FEE": Decimal("0.0004"),
    "SMART_CONTRACT_EXECUTE_FEE": Decimal("0.0015"),
    "SELF_CURRENCY_EQUIV_FEE": Decimal("0.0005"),
    "AUTHORIZED_CURRENCY_EQUIV_FEE": Decimal("0.0005"),
    "EXPENSE_RATIO_FEE": Decimal("0.10"),
    "NFT_TXN_FEE": Decimal("0.0003"),
    "UPDATE_CONTRACT_FEE": Decimal("0.075"),
    "VALIDATOR_REGISTRATION_FEE": Decimal("0.01"),
    "VALIDATOR_HEARTBEAT_FEE": Decimal("0.00005"),
    "PROPOSAL_RESULT_FEE": Decimal("0.01"),
    "DELEGATED_VOTING_FEE": Decimal("0.05"),
    "REVOKE_TXN_FEE": Decimal("0.001"),
    "QUASH_TXN_FEE": Decimal("0.001"),
    "FAST_QUORUM_FEE": Decimal("0.04"),
    "COMPLIANCE_FEE": Decimal("0.0001"),
    "SBT_BURN_FEE": Decimal("0.0001"),
    "REQUIRED_VERSION_FEE": Decimal("0.0001"),
    "SMART_CONTRACT_INSTANTIATE_FEE": Decimal("0.02"),
    "UNKNOWN_TXN_FEE": Decimal("0.0001"),
    "ALLOWANCE_FEE": Decimal("0.0001"),
}


@dataclass(frozen=True)
class FeeValues:
    """USD contributions of a set of fee-type tokens."""
    fixed_usd: Decimal
    per_byte_usd: Decimal

    def usd_fee(self, size: int) -> Decimal:
        """Total USD fee for a transaction of ``size`` bytes."""
        return self.fixed_usd + multiply(self.per_byte_usd, size)


class FeeSchedule:
    """
    Immutable fee table with an explicit merge operation.

    Args:
        fixed: Fixed USD fee per token
        per_byte: USD fee per byte per token
        restricted_multiplier: Multiplier applied to the fixed subtotal of restricted keys
    """

    def __init__(
        self,
        fixed: Optional[Mapping[str, AmountInput]] = None,
        per_byte: Optional[Mapping[str, AmountInput]] = None,
        restricted_multiplier: AmountInput = DEFAULT_RESTRICTED_MULTIPLIER,
    ):
        fixed = FIXED_FEES if fixed is None else fixed
        per_byte = PER_BYTE_FEES if per_byte is None else per_byte
        self._fixed = {token: to_decimal(value) for token, value in fixed.items()}
        self._per_byte = {token: to_decimal(value) for token, value in per_byte.items()}
        self.restricted_multiplier = to_decimal(restricted_multiplier)

    @property
    def fixed(self) -> Dict[str, Decimal]:
        return dict(self._fixed)

    @property
    def per_byte(self) -> Dict[str, Decimal]:
        return dict(self._per_byte)

    def merge(self, overrides: Mapping[str, AmountInput]) -> "FeeSchedule":
        """
        Return a new schedule with ``overrides`` applied on top of this one.

        Keys are existing fee-type tokens, or ``RESTRICTED_KEY_FEE`` for the
        restricted multiplier. Tokens not listed keep their current value.

        Raises:
            UnknownFeeTypeError: If an override names an unknown token
        """
        fixed = dict(self._fixed)
        per_byte = dict(self._per_byte)
        multiplier = self.restricted_multiplier
        for token, value in overrides.items():
            if token == RESTRICTED_KEY_FEE:
                multiplier = to_decimal(value)
            elif token in fixed:
                fixed[token] = to_decimal(value)
            elif token in per_byte:
                per_byte[token] = to_decimal(value)
            else:
                raise UnknownFeeTypeError(token)
        logger.debug(f"Merged {len(overrides)} fee schedule override(s)")
        return FeeSchedule(fixed, per_byte, multiplier)

    def resolve_fee_types(
        self,
        kind: TxnKind,
        keys: Sequence[KeyDescriptor],
        hashes: Sequence[HashDescriptor],
    ) -> List[str]:
        """
        List the fee-type tokens charged for a transaction.

        One token per key, one per hash (the default hash token when none
        was detected), the restricted marker if any key is restricted, and
        exactly one per-byte token for the transaction kind.
        """
        tokens = [key.fee_type for key in keys]
        tokens.extend(h.fee_type for h in (hashes or [HashDescriptor.default()]))
        if any(key.restricted for key in keys):
            tokens.append(RESTRICTED_KEY_FEE)
        tokens.append(SPEC_BY_KIND[kind].fee_type)
        return tokens

    def sum_fee_values(self, tokens: Iterable[str]) -> FeeValues:
        """
        Sum the USD contributions of ``tokens``.

        Raises:
            UnknownFeeTypeError: If a token is not in the schedule
        """
        fixed = Decimal(0)
        per_byte = Decimal(0)
        restricted = False
        for token in tokens:
            if token == RESTRICTED_KEY_FEE:
                restricted = True
            elif token in self._fixed:
                fixed += self._fixed[token]
            elif token in self._per_byte:
                per_byte += self._per_byte[token]
            else:
                raise UnknownFeeTypeError(token)

        if restricted:
            fixed = multiply(fixed, self.restricted_multiplier)
        return FeeValues(quantize_usd(fixed), quantize_usd(per_byte))


DEFAULT_SCHEDULE = FeeSchedule()


def resolve_fee_types(kind: TxnKind, keys: Sequence[KeyDescriptor], hashes: Sequence[HashDescriptor]) -> List[str]:
    return DEFAULT_SCHEDULE.resolve_fee_types(kind, keys, hashes)


def sum_fee_values(tokens: Iterable[str]) -> FeeValues:
    return DEFAULT_SCHEDULE.sum_fee_values(tokens)
