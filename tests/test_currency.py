"""Tests for currency conversion: pivot math, formatting, lookups, rate table."""

from decimal import Decimal

import pytest

from payout_ledger.core.currency import (
    CURRENCY_SYMBOLS,
    DEFAULT_RATES,
    CurrencyCode,
    CurrencyConverter,
    Money,
    RateTable,
)
from payout_ledger.core.exceptions import UnknownCurrency

ALL_CODES = list(CurrencyCode)


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


class TestConvert:

    @pytest.mark.parametrize("code", ALL_CODES)
    def test_same_currency_returns_amount_unchanged(self, converter, code):
        """No rounding pass when source and target match."""
        amount = Decimal("1234.5678")
        assert converter.convert(amount, code, code) == amount

    def test_inr_to_dollars(self, converter):
        """1000 INR at 0.012 = 12 USD exactly."""
        assert converter.convert(Decimal("1000"), CurrencyCode.INR, CurrencyCode.DOLLARS) == Decimal("12")

    def test_dollars_to_inr(self, converter):
        """12 USD back to INR is exactly 1000."""
        assert converter.convert(Decimal("12"), CurrencyCode.DOLLARS, CurrencyCode.INR) == Decimal("1000")

    def test_cross_rate_goes_through_pivot(self, converter):
        """USD -> PKR = amount / 0.012 * 3.33."""
        result = converter.convert(Decimal("3"), CurrencyCode.DOLLARS, CurrencyCode.PKR)
        assert result == Decimal("3") / Decimal("0.012") * Decimal("3.33")
        assert result == Decimal("832.5")

    @pytest.mark.parametrize("source", ALL_CODES)
    @pytest.mark.parametrize("target", ALL_CODES)
    def test_round_trip_within_tolerance(self, converter, source, target):
        """convert(convert(x, a, b), b, a) stays within 1e-6 relative error."""
        for amount in (Decimal("0.01"), Decimal("1"), Decimal("99.99"), Decimal("1250000.50")):
            there = converter.convert(amount, source, target)
            back = converter.convert(there, target, source)
            assert abs(back - amount) <= amount * Decimal("1e-6")

    def test_accepts_string_codes(self, converter):
        """Lowercase strings and the singular 'dollar' are accepted."""
        assert converter.convert(Decimal("1000"), "inr", "dollar") == Decimal("12")
        assert converter.convert(Decimal("1000"), "INR", "Dollars") == Decimal("12")

    def test_unknown_currency_raises(self, converter):
        with pytest.raises(UnknownCurrency):
            converter.convert(Decimal("1"), "inr", "yen")

    def test_float_amounts_use_their_shortest_repr(self, converter):
        """0.1 converts as Decimal('0.1'), not its binary expansion."""
        assert converter.convert(0.1, "dollars", "dollars") == Decimal("0.1")
        assert converter.convert(0.1, "inr", "pkr") == Decimal("0.333")
        assert converter.convert(1000, "inr", "dollars") == Decimal("12")

    def test_total_aggregates_mixed_currencies(self, converter):
        """Expenses in several currencies sum in the target currency."""
        amounts = [
            Money(amount=Decimal("1000"), currency=CurrencyCode.INR),
            Money(amount=Decimal("3"), currency=CurrencyCode.DOLLARS),
            Money(amount=Decimal("1"), currency=CurrencyCode.DOLLARS),
        ]
        assert converter.total(amounts, CurrencyCode.DOLLARS) == Decimal("16")

    def test_total_of_nothing_is_zero(self, converter):
        assert converter.total([], CurrencyCode.EURO) == Decimal("0")


# ---------------------------------------------------------------------------
# Formatting and lookups
# ---------------------------------------------------------------------------


class TestFormat:

    def test_rounds_to_whole_units_with_separators(self, converter):
        assert converter.format(Decimal("1234567.4"), CurrencyCode.INR) == "₹1,234,567"

    def test_rounds_half_up(self, converter):
        assert converter.format(Decimal("1234.5"), CurrencyCode.DOLLARS) == "$1,235"

    def test_small_negative_is_not_minus_zero(self, converter):
        assert converter.format(Decimal("-0.3"), CurrencyCode.GBP) == "£0"

    def test_negative_amount(self, converter):
        assert converter.format(Decimal("-1500"), CurrencyCode.EURO) == "€-1,500"

    def test_multi_character_symbols(self, converter):
        assert converter.format(Decimal("10"), CurrencyCode.CAD) == "C$10"
        assert converter.format(Decimal("10"), CurrencyCode.AUD) == "A$10"

    def test_convert_and_format(self, converter):
        """12 USD shown in INR."""
        assert converter.convert_and_format(Decimal("12"), "dollars", "inr") == "₹1,000"

    @pytest.mark.parametrize("code", ALL_CODES)
    def test_every_currency_has_symbol_and_name(self, converter, code):
        assert converter.symbol_of(code) == CURRENCY_SYMBOLS[code]
        assert converter.display_name_of(code)

    def test_display_names_are_iso_codes(self, converter):
        assert converter.display_name_of("dollars") == "USD"
        assert converter.display_name_of("euro") == "EUR"

    def test_symbol_of_unknown_currency(self, converter):
        with pytest.raises(UnknownCurrency):
            converter.symbol_of("btc")

    def test_display_name_of_unknown_currency(self, converter):
        with pytest.raises(UnknownCurrency):
            converter.display_name_of(42)


# ---------------------------------------------------------------------------
# Rate table
# ---------------------------------------------------------------------------


class TestRateTable:

    def test_default_rates_loaded(self):
        table = RateTable()
        assert table[CurrencyCode.DOLLARS] == Decimal("0.012")
        assert table[CurrencyCode.INR] == Decimal("1")

    def test_injected_table_changes_results(self):
        """A custom table is honoured by the converter."""
        rates = dict(DEFAULT_RATES)
        rates[CurrencyCode.DOLLARS] = Decimal("0.01")
        converter = CurrencyConverter(RateTable(rates))
        assert converter.convert(Decimal("1000"), "inr", "dollars") == Decimal("10")

    def test_missing_currency_rejected(self):
        rates = dict(DEFAULT_RATES)
        del rates[CurrencyCode.AUD]
        with pytest.raises(ValueError, match="aud"):
            RateTable(rates)

    def test_non_positive_rate_rejected(self):
        rates = dict(DEFAULT_RATES)
        rates[CurrencyCode.PKR] = Decimal("0")
        with pytest.raises(ValueError):
            RateTable(rates)

    def test_pivot_must_be_one(self):
        rates = dict(DEFAULT_RATES)
        rates[CurrencyCode.INR] = Decimal("2")
        with pytest.raises(ValueError, match="Pivot"):
            RateTable(rates)

    def test_table_is_read_only(self):
        table = RateTable()
        with pytest.raises(TypeError):
            table._rates[CurrencyCode.INR] = Decimal("5")

    def test_as_dict_uses_codes(self):
        assert RateTable().as_dict()["pkr"] == Decimal("3.33")
