"""
Tests for interface fee validation.
"""
from decimal import Decimal

import base58
import pytest

from zera_fee_sdk.exceptions import InvalidInterfaceFeeError, UnsupportedCurrencyError
from zera_fee_sdk.fees.interface import InterfaceFeeSpec, resolve_interface_fee, resolve_interface_fee_spec

from tests.test_helpers import WALLET, ZRA


def test_valid_fee():
    fee = resolve_interface_fee("0.5", ZRA, WALLET)

    assert fee.smallest_units == 500_000_000
    assert fee.amount == Decimal("0.5")
    assert fee.fee_currency_id == ZRA
    assert fee.provider_address == WALLET
    assert fee.address_bytes == base58.b58decode(WALLET)


def test_amount_truncated_to_smallest_units(denominations):
    fee = resolve_interface_fee("0.123456789", "$BTC+1234", WALLET, denominations)
    assert fee.smallest_units == 12_345_678
    assert fee.amount == Decimal("0.12345678")


def test_nothing_requested():
    assert resolve_interface_fee() is None
    assert resolve_interface_fee_spec(None) is None
    assert resolve_interface_fee_spec(InterfaceFeeSpec()) is None


def test_sub_unit_amount_is_no_fee():
    assert resolve_interface_fee("0.0000000001", ZRA, WALLET) is None


@pytest.mark.parametrize("amount,currency,address,missing", [
    ("1", None, None, "fee_currency_id, provider_address"),
    (None, ZRA, WALLET, "amount"),
    ("1", ZRA, "", "provider_address"),
])
def test_partial_spec_rejected(amount, currency, address, missing):
    with pytest.raises(InvalidInterfaceFeeError) as excinfo:
        resolve_interface_fee(amount, currency, address)
    assert f"missing: {missing}" in str(excinfo.value)


@pytest.mark.parametrize("amount", ["0", "-1", "one", 0])
def test_non_positive_or_malformed_amount(amount):
    with pytest.raises(InvalidInterfaceFeeError):
        resolve_interface_fee(amount, ZRA, WALLET)


def test_invalid_address():
    with pytest.raises(InvalidInterfaceFeeError):
        resolve_interface_fee("1", ZRA, "0OIl")


def test_unknown_currency():
    with pytest.raises(UnsupportedCurrencyError):
        resolve_interface_fee("1", "$NOPE+0001", WALLET)


def test_spec_object():
    fee = resolve_interface_fee_spec(InterfaceFeeSpec("2", ZRA, WALLET))
    assert fee.smallest_units == 2_000_000_000
