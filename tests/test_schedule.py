"""
Tests for the fee schedule.
"""
from decimal import Decimal

import pytest

from zera_fee_sdk.amounts import safe_divide
from zera_fee_sdk.exceptions import UnknownFeeTypeError
from zera_fee_sdk.fees.schedule import (
    DEFAULT_SCHEDULE,
    PER_BYTE_FEES,
    RESTRICTED_KEY_FEE,
    FeeSchedule,
    resolve_fee_types,
    sum_fee_values,
)
from zera_fee_sdk.txn.kinds import KIND_SPECS, HashDescriptor, HashKind, KeyDescriptor, KeyKind, TxnKind

PRIMARY = KeyDescriptor(KeyKind.PRIMARY, 32)
EXTENDED = KeyDescriptor(KeyKind.EXTENDED, 57)


class TestResolveFeeTypes:
    """Tests for fee-type token resolution."""

    def test_one_token_per_key_and_hash_and_kind(self):
        tokens = resolve_fee_types(
            TxnKind.COIN,
            [PRIMARY, EXTENDED],
            [HashDescriptor.for_kind(HashKind.BLAKE3), HashDescriptor.for_kind(HashKind.SHA3_512)],
        )
        assert tokens == ["A_KEY_FEE", "B_KEY_FEE", "c_HASH_FEE", "b_HASH_FEE", "COIN_TXN_FEE"]

    def test_default_hash_token(self):
        assert resolve_fee_types(TxnKind.MINT, [PRIMARY], []) == ["A_KEY_FEE", "a_HASH_FEE", "MINT_TXN_FEE"]

    def test_restricted_marker(self):
        restricted = KeyDescriptor(KeyKind.PRIMARY, 32, restricted=True)
        tokens = resolve_fee_types(TxnKind.COIN, [restricted], [HashDescriptor.default()])
        assert tokens.count(RESTRICTED_KEY_FEE) == 1

    def test_every_kind_has_a_per_byte_fee(self):
        for spec in KIND_SPECS:
            assert spec.fee_type in PER_BYTE_FEES


class TestSumFeeValues:
    """Tests for summing fee values."""

    def test_reference_transfer(self):
        """0.02 key + 0.02 hash + 246 bytes at 0.00015 is 0.0769 USD, 0.769 units at 0.10."""
        values = sum_fee_values(["A_KEY_FEE", "a_HASH_FEE", "COIN_TXN_FEE"])
        assert values.fixed_usd == Decimal("0.04")
        assert values.per_byte_usd == Decimal("0.00015")
        usd = values.usd_fee(246)
        assert usd == Decimal("0.0769")
        assert safe_divide(usd, "0.10") == Decimal("0.769")

    def test_restricted_multiplies_whole_fixed_subtotal(self):
        values = sum_fee_values(["A_KEY_FEE", "c_HASH_FEE", RESTRICTED_KEY_FEE, "COIN_TXN_FEE"])
        assert values.fixed_usd == Decimal("0.09")
        assert values.per_byte_usd == Decimal("0.00015")

    def test_restricted_marker_position_does_not_matter(self):
        first = sum_fee_values([RESTRICTED_KEY_FEE, "A_KEY_FEE", "c_HASH_FEE"])
        last = sum_fee_values(["A_KEY_FEE", "c_HASH_FEE", RESTRICTED_KEY_FEE])
        assert first == last

    def test_unknown_token(self):
        with pytest.raises(UnknownFeeTypeError) as exc_info:
            sum_fee_values(["A_KEY_FEE", "Z_KEY_FEE"])
        assert exc_info.value.fee_type == "Z_KEY_FEE"

    def test_sums_are_quantized(self):
        schedule = FeeSchedule(fixed={"A_KEY_FEE": "0.0000004"}, per_byte={"COIN_TXN_FEE": "0.0000006"})
        values = schedule.sum_fee_values(["A_KEY_FEE", "COIN_TXN_FEE"])
        assert values.fixed_usd == Decimal("0")
        assert values.per_byte_usd == Decimal("0.000001")

    def test_fee_grows_with_size(self):
        values = sum_fee_values(["A_KEY_FEE", "a_HASH_FEE", "VALIDATOR_HEARTBEAT_FEE"])
        assert values.usd_fee(101) > values.usd_fee(100)


class TestMerge:
    """Tests for schedule overrides."""

    def test_merge_overrides_only_named_tokens(self):
        schedule = DEFAULT_SCHEDULE.merge({"COIN_TXN_FEE": "0.001", "A_KEY_FEE": 0})
        assert schedule.per_byte["COIN_TXN_FEE"] == Decimal("0.001")
        assert schedule.fixed["A_KEY_FEE"] == Decimal(0)
        assert schedule.fixed["B_KEY_FEE"] == DEFAULT_SCHEDULE.fixed["B_KEY_FEE"]

    def test_merge_does_not_modify_original(self):
        DEFAULT_SCHEDULE.merge({"COIN_TXN_FEE": "1"})
        assert DEFAULT_SCHEDULE.per_byte["COIN_TXN_FEE"] == Decimal("0.00015")

    def test_merge_restricted_multiplier(self):
        schedule = DEFAULT_SCHEDULE.merge({RESTRICTED_KEY_FEE: "2"})
        values = schedule.sum_fee_values(["A_KEY_FEE", RESTRICTED_KEY_FEE])
        assert values.fixed_usd == Decimal("0.04")

    def test_merge_rejects_unknown_tokens(self):
        with pytest.raises(UnknownFeeTypeError):
            DEFAULT_SCHEDULE.merge({"NOT_A_FEE": "1"})
