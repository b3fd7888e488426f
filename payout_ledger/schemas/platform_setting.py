"""
Pydantic schemas for platform fee profiles.

Field names serialize as camelCase (``platformName``, ``withdrawalFees``…)
to stay compatible with the existing web client.
"""

import enum
from datetime import datetime
from decimal import Decimal
from typing import Iterator
from uuid import UUID

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from payout_ledger.core.currency import CurrencyCode
from payout_ledger.models.platform_setting import LEG_NAMES, PlatformSetting

_camel = {"alias_generator": to_camel, "populate_by_name": True}


class OwnerScope(str, enum.Enum):
    SYSTEM = "system"
    USER = "user"


# ---------------------------------------------------------------------------
# Fee legs
# ---------------------------------------------------------------------------


class FeeLeg(BaseModel):
    """Flat fee charged on one withdrawal hop."""
    amount: Decimal
    currency: CurrencyCode

    model_config = _camel


class WithdrawalFees(BaseModel):
    """The optional flat-fee legs of a platform's payout path."""
    platform_to_payoneer: FeeLeg | None = None
    platform_to_local_bank: FeeLeg | None = None
    payoneer_to_local_bank: FeeLeg | None = None

    model_config = _camel

    def present(self) -> Iterator[tuple[str, FeeLeg]]:
        """Yield ``(leg_name, leg)`` for every leg that is set."""
        for name in LEG_NAMES:
            leg = getattr(self, name)
            if leg is not None:
                yield name, leg


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class FeeProfileDraft(BaseModel):
    """
    Payload for creating or updating a custom platform.

    Range checks live in the registry so that they apply to every caller,
    not only HTTP requests.
    """
    platform_name: str
    platform_fee_percentage: Decimal
    withdrawal_fees: WithdrawalFees = Field(default_factory=WithdrawalFees)
    is_custom: bool | None = None

    model_config = _camel


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class FeeProfile(BaseModel):
    """A stored fee schedule, with ``id`` as a first-class field."""
    id: UUID
    platform_name: str
    platform_fee_percentage: Decimal
    withdrawal_fees: WithdrawalFees
    is_custom: bool
    owner_scope: OwnerScope
    user_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = _camel

    @classmethod
    def from_row(cls, row: PlatformSetting) -> "FeeProfile":
        legs = {}
        for name in LEG_NAMES:
            leg = row.get_leg(name)
            if leg is not None:
                legs[name] = FeeLeg(amount=leg[0], currency=CurrencyCode.parse(leg[1]))

        return cls(
            id=row.id,
            platform_name=row.platform_name,
            platform_fee_percentage=row.platform_fee_percentage,
            withdrawal_fees=WithdrawalFees(**legs),
            is_custom=row.is_custom,
            owner_scope=OwnerScope.SYSTEM if row.is_system else OwnerScope.USER,
            user_id=row.owner_id,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


class DeleteResponse(BaseModel):
    message: str = "Platform setting deleted successfully"
