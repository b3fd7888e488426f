"""
Currency endpoints: supported currencies, display symbols, and conversions.

Public: no session cookie required.
"""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query

from payout_ledger.config import settings
from payout_ledger.core.currency import CurrencyCode, CurrencyConverter, get_converter
from payout_ledger.schemas.currency import ConversionResponse, CurrencyInfo

router = APIRouter()


@router.get("", response_model=list[CurrencyInfo])
async def list_currencies(converter: CurrencyConverter = Depends(get_converter)):
    """Every supported currency with its symbol and rate per 1 INR."""
    return [
        CurrencyInfo(
            code=code,
            symbol=converter.symbol_of(code),
            display_name=converter.display_name_of(code),
            rate_per_inr=converter.rates[code],
        )
        for code in CurrencyCode
    ]


@router.get("/convert", response_model=ConversionResponse)
async def convert(
    amount: Decimal = Query(..., description="Amount in the source currency", examples=[1000]),
    from_currency: CurrencyCode = Query(..., alias="from", examples=["inr"]),
    to_currency: CurrencyCode = Query(
        CurrencyCode(settings.DEFAULT_DISPLAY_CURRENCY), alias="to", examples=["dollars"],
    ),
    converter: CurrencyConverter = Depends(get_converter),
):
    """Convert an amount and render it for display in the target currency."""
    converted = converter.convert(amount, from_currency, to_currency)
    return ConversionResponse(
        amount=amount,
        from_currency=from_currency,
        to_currency=to_currency,
        converted=converted,
        formatted=converter.format(converted, to_currency),
    )
