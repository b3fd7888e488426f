"""
Withdrawal cost calculator.

Prices a withdrawal routed through a platform's fee schedule: a percentage
fee on the gross amount plus a flat fee for every withdrawal hop, all
normalised into one target currency. Pure and deterministic for a given
rate table.
"""

from decimal import Decimal

from pydantic.alias_generators import to_camel

from payout_ledger.core.currency import CurrencyCode, CurrencyConverter, Money
from payout_ledger.schemas.currency import FeeBreakdown
from payout_ledger.schemas.platform_setting import FeeProfile

HUNDRED = Decimal("100")


class FeeChainCalculator:
    """Combines a FeeProfile with a gross amount to produce a cost breakdown."""

    def __init__(self, converter: CurrencyConverter):
        self.converter = converter

    def compute_total_cost(
        self, profile: FeeProfile, gross: Money, target_currency: CurrencyCode,
    ) -> FeeBreakdown:
        target = CurrencyCode.parse(target_currency)
        gross_in_target = self.converter.convert(gross.amount, gross.currency, target)

        percentage_fee = gross_in_target * profile.platform_fee_percentage / HUNDRED

        fees_by_leg: dict[str, Decimal] = {}
        for name, leg in profile.withdrawal_fees.present():
            fees_by_leg[to_camel(name)] = self.converter.convert(leg.amount, leg.currency, target)

        total_fees = percentage_fee + sum(fees_by_leg.values(), Decimal("0"))
        net = gross_in_target - total_fees

        caution = None
        if net <= 0:
            caution = (
                f"Fees of {self.converter.format(total_fees, target)} leave nothing "
                f"from a {self.converter.format(gross_in_target, target)} withdrawal"
            )

        return FeeBreakdown(
            currency=target,
            gross_in_target=gross_in_target,
            percentage_fee=percentage_fee,
            fees_by_leg=fees_by_leg,
            total_fees=total_fees,
            net=net,
            caution=caution,
        )
