"""
Pydantic schemas for currency metadata, conversions and withdrawal costs.
"""

from decimal import Decimal

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from payout_ledger.core.currency import CurrencyCode

_camel = {"alias_generator": to_camel, "populate_by_name": True}


class CurrencyInfo(BaseModel):
    code: CurrencyCode
    symbol: str
    display_name: str
    rate_per_inr: Decimal

    model_config = _camel


class ConversionResponse(BaseModel):
    amount: Decimal
    from_currency: CurrencyCode
    to_currency: CurrencyCode
    converted: Decimal
    formatted: str

    model_config = _camel


class WithdrawalCostRequest(BaseModel):
    """Gross withdrawal to price against a platform's fee schedule."""
    amount: Decimal = Field(..., ge=0)
    currency: CurrencyCode
    target_currency: CurrencyCode

    model_config = _camel


class FeeBreakdown(BaseModel):
    """
    Cost of a withdrawal expressed in ``currency``.

    ``net`` may be zero or negative when fees exceed the gross amount; that
    is reported through ``caution`` rather than treated as an error.
    """
    currency: CurrencyCode
    gross_in_target: Decimal
    percentage_fee: Decimal
    fees_by_leg: dict[str, Decimal]
    total_fees: Decimal
    net: Decimal
    caution: str | None = None

    model_config = _camel
