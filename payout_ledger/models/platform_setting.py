"""
PlatformSetting model: one withdrawal-fee schedule for a payment platform.

Rows are owned either by the system (well-known defaults, ``owner_id`` is the
literal ``"system"``) or by a single user (custom entries). The unique
constraint on ``(owner_id, platform_name)`` keeps one row per platform per
owner, which also makes concurrent seeding safe.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column

from payout_ledger.database import Base

SYSTEM_OWNER = "system"

# Withdrawal hops, in the order a payout travels
LEG_NAMES = ("platform_to_payoneer", "platform_to_local_bank", "payoneer_to_local_bank")


class PlatformSetting(Base):
    __tablename__ = "platform_settings"
    __table_args__ = (
        UniqueConstraint("owner_id", "platform_name", name="uq_platform_settings_owner_platform"),
        CheckConstraint(
            "platform_fee_percentage >= 0 AND platform_fee_percentage <= 100",
            name="ck_platform_settings_fee_percentage",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    platform_name: Mapped[str] = mapped_column(String(100), nullable=False)
    platform_fee_percentage: Mapped[Decimal] = mapped_column(
        Numeric(precision=5, scale=2), nullable=False
    )

    # Flat fee legs: amount and currency are set together or not at all
    platform_to_payoneer_amount: Mapped[Decimal | None] = mapped_column(Numeric(18, 2))
    platform_to_payoneer_currency: Mapped[str | None] = mapped_column(String(10))
    platform_to_local_bank_amount: Mapped[Decimal | None] = mapped_column(Numeric(18, 2))
    platform_to_local_bank_currency: Mapped[str | None] = mapped_column(String(10))
    payoneer_to_local_bank_amount: Mapped[Decimal | None] = mapped_column(Numeric(18, 2))
    payoneer_to_local_bank_currency: Mapped[str | None] = mapped_column(String(10))

    is_custom: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    owner_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def is_system(self) -> bool:
        return self.owner_id == SYSTEM_OWNER

    def get_leg(self, name: str) -> tuple[Decimal, str] | None:
        """Return ``(amount, currency)`` for a fee leg, or None when unset."""
        amount = getattr(self, f"{name}_amount")
        currency = getattr(self, f"{name}_currency")
        if amount is None or currency is None:
            return None
        return amount, currency

    def set_leg(self, name: str, amount: Decimal | None, currency: str | None) -> None:
        if name not in LEG_NAMES:
            raise ValueError(f"Unknown fee leg: {name}")
        if amount is None or currency is None:
            amount, currency = None, None
        setattr(self, f"{name}_amount", amount)
        setattr(self, f"{name}_currency", currency)

    def __repr__(self) -> str:
        return (
            f"<PlatformSetting {self.platform_name!r} "
            f"owner={self.owner_id} custom={self.is_custom}>"
        )


@event.listens_for(PlatformSetting, "init")
def _set_defaults(target, args, kwargs):
    if "id" not in kwargs:
        target.id = uuid.uuid4()
    if "is_custom" not in kwargs:
        target.is_custom = False
    if "created_at" not in kwargs:
        target.created_at = datetime.now(timezone.utc)
    if "updated_at" not in kwargs:
        target.updated_at = datetime.now(timezone.utc)
