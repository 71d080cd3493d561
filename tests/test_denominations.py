"""
Tests for currency denomination lookup.
"""
from decimal import Decimal

import pytest

from zera_fee_sdk.denominations import (
    DenominationResolver,
    decimals_from_denomination,
    is_valid_currency_id,
)
from zera_fee_sdk.exceptions import InvalidAmountError, UnsupportedCurrencyError


class TestDenominationResolver:
    """Tests for DenominationResolver."""

    def test_default_zra(self):
        """ZRA has nine decimal places out of the box."""
        assert DenominationResolver().decimals_for("$ZRA+0000") == 9

    def test_explicit_config_wins_over_fallback(self):
        resolver = DenominationResolver(
            token_decimals={"$ABC+0001": 6},
            denomination_fallbacks={"$ABC+0001": "100"},
        )
        assert resolver.decimals_for("$ABC+0001") == 6

    def test_fallback_table(self):
        resolver = DenominationResolver(denomination_fallbacks={"$ABC+0001": "1000"})
        assert resolver.decimals_for("$ABC+0001") == 3

    def test_unknown_currency_lists_supported(self):
        """The error names the currency and what is supported."""
        with pytest.raises(UnsupportedCurrencyError) as exc_info:
            DenominationResolver().decimals_for("$NOPE+0000")
        assert exc_info.value.currency_id == "$NOPE+0000"
        assert "$ZRA+0000" in exc_info.value.supported
        assert "$NOPE+0000" in str(exc_info.value)

    def test_call_site_fallback(self):
        resolver = DenominationResolver()
        assert resolver.decimals_for("$NOPE+0000", fallback_denomination="1000000") == 6

    def test_add_fallback(self):
        resolver = DenominationResolver()
        resolver.add_fallback("$NEW+0000", 100)
        assert resolver.decimals_for("$NEW+0000") == 2

    def test_unit_conversion(self):
        resolver = DenominationResolver()
        assert resolver.to_smallest_units("0.769", "$ZRA+0000") == 769000000
        assert resolver.from_smallest_units(769000000, "$ZRA+0000") == Decimal("0.769")

    def test_rejects_negative_decimals(self):
        with pytest.raises(InvalidAmountError):
            DenominationResolver(token_decimals={"$ABC+0001": -1})


class TestHelpers:
    """Tests for module helpers."""

    @pytest.mark.parametrize("denomination,decimals", [("1", 0), ("10", 1), ("1000000000", 9), (1000, 3)])
    def test_decimals_from_denomination(self, denomination, decimals):
        assert decimals_from_denomination(denomination) == decimals

    @pytest.mark.parametrize("denomination", ["0", "12", "1001", "abc", ""])
    def test_rejects_non_powers_of_ten(self, denomination):
        with pytest.raises(InvalidAmountError):
            decimals_from_denomination(denomination)

    @pytest.mark.parametrize("currency_id,valid", [
        ("$ZRA+0000", True),
        ("$TESTFEE+0002", True),
        ("ZRA+0000", False),
        ("$ZRA0000", False),
        ("$ZRA+00", False),
    ])
    def test_currency_id_format(self, currency_id, valid):
        assert is_valid_currency_id(currency_id) is valid
