"""
Currency conversion and display formatting.

All pairs convert through a single pivot currency (INR), so the rate table
holds one rate per currency instead of one per pair. Rates read
"1 INR = rate units of the currency".

The rate table is immutable and built once at startup; pass a different
``RateTable`` to ``CurrencyConverter`` in tests.
"""

import enum
from decimal import Decimal, ROUND_HALF_UP
from types import MappingProxyType
from typing import Iterable, Mapping

from pydantic import BaseModel, Field

from payout_ledger.core.exceptions import UnknownCurrency


# ---------------------------------------------------------------------------
# Currency codes
# ---------------------------------------------------------------------------


class CurrencyCode(str, enum.Enum):
    INR = "inr"
    DOLLARS = "dollars"
    EURO = "euro"
    PKR = "pkr"
    GBP = "gbp"
    CAD = "cad"
    AUD = "aud"

    @classmethod
    def parse(cls, value) -> "CurrencyCode":
        """
        Lenient lookup: accepts any case and the singular ``dollar``.

        Raises UnknownCurrency for anything outside the supported set.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise UnknownCurrency(value)
        normalized = value.strip().lower()
        if normalized == "dollar":
            normalized = "dollars"
        try:
            return cls(normalized)
        except ValueError:
            raise UnknownCurrency(value) from None


PIVOT_CURRENCY = CurrencyCode.INR

CURRENCY_SYMBOLS: Mapping[CurrencyCode, str] = MappingProxyType({
    CurrencyCode.INR: "₹",
    CurrencyCode.DOLLARS: "$",
    CurrencyCode.EURO: "€",
    CurrencyCode.PKR: "₨",
    CurrencyCode.GBP: "£",
    CurrencyCode.CAD: "C$",
    CurrencyCode.AUD: "A$",
})

CURRENCY_NAMES: Mapping[CurrencyCode, str] = MappingProxyType({
    CurrencyCode.INR: "INR",
    CurrencyCode.DOLLARS: "USD",
    CurrencyCode.EURO: "EUR",
    CurrencyCode.PKR: "PKR",
    CurrencyCode.GBP: "GBP",
    CurrencyCode.CAD: "CAD",
    CurrencyCode.AUD: "AUD",
})

# Approximate display rates per 1 INR
DEFAULT_RATES: Mapping[CurrencyCode, Decimal] = MappingProxyType({
    CurrencyCode.INR: Decimal("1"),
    CurrencyCode.DOLLARS: Decimal("0.012"),
    CurrencyCode.EURO: Decimal("0.011"),
    CurrencyCode.PKR: Decimal("3.33"),
    CurrencyCode.GBP: Decimal("0.0095"),
    CurrencyCode.CAD: Decimal("0.016"),
    CurrencyCode.AUD: Decimal("0.018"),
})


def as_decimal(value) -> Decimal:
    """Coerce a number to Decimal via its string form, so 0.1 stays 0.1."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


class Money(BaseModel):
    """An amount tagged with its currency."""
    amount: Decimal
    currency: CurrencyCode

    model_config = {"frozen": True}


class RateTable:
    """Read-only pivot rate table."""

    __slots__ = ("_rates",)

    def __init__(self, rates: Mapping = DEFAULT_RATES):
        parsed: dict[CurrencyCode, Decimal] = {}
        for code, rate in rates.items():
            rate = as_decimal(rate)
            if rate <= 0:
                raise ValueError(f"Rate for {code} must be positive, got {rate}")
            parsed[CurrencyCode.parse(code)] = rate

        missing = [c.value for c in CurrencyCode if c not in parsed]
        if missing:
            raise ValueError(f"Rate table is missing currencies: {', '.join(missing)}")
        if parsed[PIVOT_CURRENCY] != 1:
            raise ValueError("Pivot currency rate must be exactly 1")

        self._rates = MappingProxyType(parsed)

    def __getitem__(self, code: CurrencyCode) -> Decimal:
        return self._rates[code]

    def as_dict(self) -> dict[str, Decimal]:
        return {code.value: rate for code, rate in self._rates.items()}


# ---------------------------------------------------------------------------
# Converter
# ---------------------------------------------------------------------------


class CurrencyConverter:
    """Stateless cross-rate conversion and formatting over a fixed rate table."""

    def __init__(self, rates: RateTable | None = None):
        self.rates = rates if rates is not None else RateTable()

    def convert(self, amount: Decimal, from_currency, to_currency) -> Decimal:
        """
        Convert *amount* between two currencies via the pivot.

        Same-currency conversions return the amount untouched. No rounding is
        applied; callers round only for display.
        """
        source = CurrencyCode.parse(from_currency)
        target = CurrencyCode.parse(to_currency)
        amount = as_decimal(amount)

        if source == target:
            return amount

        in_pivot = amount if source == PIVOT_CURRENCY else amount / self.rates[source]
        if target == PIVOT_CURRENCY:
            return in_pivot
        return in_pivot * self.rates[target]

    def total(self, amounts: Iterable[Money], to_currency) -> Decimal:
        """Convert every amount into *to_currency* and sum them."""
        target = CurrencyCode.parse(to_currency)
        return sum(
            (self.convert(m.amount, m.currency, target) for m in amounts),
            Decimal("0"),
        )

    def format(self, amount: Decimal, display_currency) -> str:
        """Render e.g. ``₹1,234``: whole units, half-up, comma separators."""
        symbol = self.symbol_of(display_currency)
        rounded = as_decimal(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        if rounded == 0:
            rounded = Decimal("0")  # avoid "-0"
        return f"{symbol}{rounded:,.0f}"

    def convert_and_format(self, amount: Decimal, from_currency, display_currency) -> str:
        return self.format(
            self.convert(amount, from_currency, display_currency), display_currency,
        )

    @staticmethod
    def symbol_of(currency) -> str:
        return CURRENCY_SYMBOLS[CurrencyCode.parse(currency)]

    @staticmethod
    def display_name_of(currency) -> str:
        return CURRENCY_NAMES[CurrencyCode.parse(currency)]


# Process-wide converter over the default table
default_converter = CurrencyConverter()


def get_converter() -> CurrencyConverter:
    """FastAPI dependency that provides the shared converter."""
    return default_converter
