"""
Property-based tests for the ZERA fee SDK.

These tests verify that properties hold true across many random inputs.
"""
from decimal import Decimal

from hypothesis import given, settings, strategies as st

from zera_fee_sdk.amounts import ceil_to_smallest_units, from_smallest_units, to_smallest_units
from zera_fee_sdk.fees.schedule import DEFAULT_SCHEDULE
from zera_fee_sdk.txn.classifier import classify
from zera_fee_sdk.txn.kinds import HashKind, TxnKind
from zera_fee_sdk.txn.size import estimate_size

from tests.test_helpers import coin_txn, key_blob

units_strategy = st.integers(min_value=0, max_value=10**30)
decimals_strategy = st.integers(min_value=0, max_value=18)
hash_tokens_strategy = st.lists(st.sampled_from([h.value for h in HashKind]), max_size=4)
memo_strategy = st.text(max_size=200)


@given(units=units_strategy, decimals=decimals_strategy)
def test_smallest_units_survive_scaling(units, decimals):
    amount = from_smallest_units(units, decimals)
    assert to_smallest_units(amount, decimals) == units
    assert ceil_to_smallest_units(amount, decimals) == units


@given(
    amount=st.decimals(min_value=0, max_value=10**9, places=12, allow_nan=False, allow_infinity=False),
    decimals=decimals_strategy,
)
def test_ceil_never_below_truncation(amount, decimals):
    low = to_smallest_units(amount, decimals)
    high = ceil_to_smallest_units(amount, decimals)
    assert high - low in (0, 1)
    assert from_smallest_units(high, decimals) >= amount


@settings(max_examples=50)
@given(hashes=hash_tokens_strategy, key=st.sampled_from(["A", "B"]), restricted=st.booleans())
def test_classification_is_deterministic(hashes, key, restricted):
    record = coin_txn(keys=[key_blob(key=key, hashes=hashes, restricted=restricted)])

    first = classify(record)
    second = classify(record)

    assert first.kind == second.kind == TxnKind.COIN
    assert first.keys == second.keys
    assert first.hashes == second.hashes
    assert first.restricted is restricted
    assert [h.kind.value for h in first.hashes if not h.is_default] == hashes


@settings(max_examples=50)
@given(memo=memo_strategy, extra=st.text(min_size=1, max_size=50))
def test_size_grows_with_memo(memo, extra):
    shorter = classify(coin_txn(memo=memo or None))
    longer = classify(coin_txn(memo=memo + extra))

    assert estimate_size(longer.message, longer) > estimate_size(shorter.message, shorter)


@given(size=st.integers(min_value=0, max_value=100_000), growth=st.integers(min_value=1, max_value=10_000))
def test_network_fee_monotonic_in_size(size, growth):
    classification = classify(coin_txn())
    tokens = DEFAULT_SCHEDULE.resolve_fee_types(classification.kind, classification.keys, classification.hashes)
    values = DEFAULT_SCHEDULE.sum_fee_values(tokens)

    assert values.usd_fee(size) >= values.fixed_usd
    assert values.usd_fee(size + growth) > values.usd_fee(size)
    assert values.usd_fee(size + growth) - values.usd_fee(size) == values.per_byte_usd * growth


@given(rate=st.decimals(min_value=Decimal("0.0001"), max_value=10**6, places=4))
def test_fee_in_units_covers_usd_cost(rate):
    values = DEFAULT_SCHEDULE.sum_fee_values(["A_KEY_FEE", "c_HASH_FEE", "COIN_TXN_FEE"])
    units = ceil_to_smallest_units(values.usd_fee(250) / rate, 9)
    assert from_smallest_units(units, 9) * rate >= values.usd_fee(250)
