"""
Platform fee registry: the source of truth for withdrawal-fee schedules.

Two kinds of rows live in ``platform_settings``:

  - well-known platforms, owned by the system, shipped as defaults and
    read-only for every user;
  - custom platforms, owned by one user, created and deleted by that user.

Lookups prefer the caller's own entry over the system default of the same
name. Seeding the well-known catalog is idempotent and safe to run from many
processes at once: the catalog is inserted in a single commit and a unique
violation on ``(owner_id, platform_name)`` means another caller got there
first.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from decimal import Decimal

from pydantic.alias_generators import to_camel
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from payout_ledger.core.currency import CurrencyCode
from payout_ledger.core.exceptions import (
    Forbidden,
    InvalidFeeProfile,
    NotFound,
    StorageUnavailable,
)
from payout_ledger.models.platform_setting import LEG_NAMES, SYSTEM_OWNER, PlatformSetting
from payout_ledger.schemas.platform_setting import (
    FeeLeg,
    FeeProfile,
    FeeProfileDraft,
    WithdrawalFees,
)

logger = logging.getLogger(__name__)

MIN_FEE_PERCENTAGE = Decimal("0")
MAX_FEE_PERCENTAGE = Decimal("100")
MAX_PLATFORM_NAME_LENGTH = 100

# Stored as NUMERIC(5, 2) and NUMERIC(18, 2)
CENT = Decimal("0.01")
MAX_LEG_AMOUNT = Decimal("1e16")

FORBIDDEN_DELETE_MESSAGE = "Cannot delete well-known platform settings"


# ---------------------------------------------------------------------------
# Well-known catalog
# ---------------------------------------------------------------------------


def _leg(amount: str, currency: CurrencyCode = CurrencyCode.DOLLARS) -> FeeLeg:
    return FeeLeg(amount=Decimal(amount), currency=currency)


WELL_KNOWN_PLATFORMS: list[tuple[str, Decimal, WithdrawalFees]] = [
    ("Fiverr", Decimal("20"), WithdrawalFees(
        platform_to_payoneer=_leg("3"),
        payoneer_to_local_bank=_leg("1"),
    )),
    ("Freelancer", Decimal("10"), WithdrawalFees(platform_to_local_bank=_leg("1"))),
    ("Upwork", Decimal("10"), WithdrawalFees(platform_to_local_bank=_leg("0.99"))),
    ("Toptal", Decimal("0"), WithdrawalFees()),
    ("99designs", Decimal("15"), WithdrawalFees()),
]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _finer_than_cents(value: Decimal) -> bool:
    return value != value.quantize(CENT)


def validate_draft(draft: FeeProfileDraft) -> str:
    """
    Check a user-supplied fee profile and return the normalised platform name.

    Raises InvalidFeeProfile naming the first offending field.
    """
    name = (draft.platform_name or "").strip()
    if not name:
        raise InvalidFeeProfile("platformName", "Platform name is required")
    if len(name) > MAX_PLATFORM_NAME_LENGTH:
        raise InvalidFeeProfile(
            "platformName", f"Platform name must be at most {MAX_PLATFORM_NAME_LENGTH} characters",
        )

    pct = draft.platform_fee_percentage
    if pct is None or not pct.is_finite() or not MIN_FEE_PERCENTAGE <= pct <= MAX_FEE_PERCENTAGE:
        raise InvalidFeeProfile(
            "platformFeePercentage", "Platform fee percentage must be between 0 and 100",
        )
    if _finer_than_cents(pct):
        raise InvalidFeeProfile(
            "platformFeePercentage", "Platform fee percentage allows at most 2 decimal places",
        )

    if draft.is_custom is False:
        raise InvalidFeeProfile(
            "isCustom", "Cannot create well-known platform settings. Create a custom platform instead.",
        )

    for leg_name, leg in draft.withdrawal_fees.present():
        field = f"withdrawalFees.{to_camel(leg_name)}.amount"
        if not leg.amount.is_finite() or leg.amount < 0:
            raise InvalidFeeProfile(field, "Withdrawal fee must not be negative")
        if leg.amount >= MAX_LEG_AMOUNT:
            raise InvalidFeeProfile(field, "Withdrawal fee is too large")
        if _finer_than_cents(leg.amount):
            raise InvalidFeeProfile(field, "Withdrawal fee allows at most 2 decimal places")

    return name


def _apply_legs(row: PlatformSetting, fees: WithdrawalFees) -> None:
    for name in LEG_NAMES:
        leg = getattr(fees, name)
        if leg is None:
            row.set_leg(name, None, None)
        else:
            row.set_leg(name, leg.amount, leg.currency.value)


def _catalog_row(name: str, pct: Decimal, fees: WithdrawalFees) -> PlatformSetting:
    row = PlatformSetting(
        platform_name=name,
        platform_fee_percentage=pct,
        owner_id=SYSTEM_OWNER,
        is_custom=False,
    )
    _apply_legs(row, fees)
    return row


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class PlatformFeeRegistry:
    """Fee schedule store bound to a single database session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _storage(self, action: str):
        """Re-raise database failures as StorageUnavailable."""
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error("Platform settings storage failure during %s: %s", action, exc)
            raise StorageUnavailable(f"Platform settings storage unavailable ({action})") from exc

    async def _find_one(self, *criteria) -> PlatformSetting | None:
        result = await self.db.execute(select(PlatformSetting).where(*criteria))
        return result.scalar_one_or_none()

    # --- Reads ---

    async def resolve(self, user_id: str, platform_name: str) -> FeeProfile:
        """
        Return the effective fee profile for *platform_name*.

        The caller's own entry wins; otherwise the well-known default is used.
        Raises NotFound when neither exists.
        """
        async with self._storage("resolve"):
            row = await self._find_one(
                PlatformSetting.owner_id == user_id,
                PlatformSetting.platform_name == platform_name,
            )
            if row is None:
                row = await self._find_one(
                    PlatformSetting.owner_id == SYSTEM_OWNER,
                    PlatformSetting.platform_name == platform_name,
                )

        if row is None:
            raise NotFound(f"No platform settings for {platform_name!r}")
        return FeeProfile.from_row(row)

    async def get(self, user_id: str, profile_id: uuid.UUID) -> FeeProfile:
        """Return a profile the caller may see (their own or a system one)."""
        async with self._storage("get"):
            row = await self._find_one(
                PlatformSetting.id == profile_id,
                PlatformSetting.owner_id.in_([user_id, SYSTEM_OWNER]),
            )
        if row is None:
            raise NotFound("Platform setting not found")
        return FeeProfile.from_row(row)

    async def list_well_known(self) -> list[FeeProfile]:
        async with self._storage("list_well_known"):
            result = await self.db.execute(
                select(PlatformSetting)
                .where(
                    PlatformSetting.owner_id == SYSTEM_OWNER,
                    PlatformSetting.is_custom.is_(False),
                )
                .order_by(PlatformSetting.platform_name)
            )
            rows = result.scalars().all()
        return [FeeProfile.from_row(r) for r in rows]

    async def list_mine(self, user_id: str) -> list[FeeProfile]:
        async with self._storage("list_mine"):
            result = await self.db.execute(
                select(PlatformSetting)
                .where(PlatformSetting.owner_id == user_id)
                .order_by(PlatformSetting.platform_name)
            )
            rows = result.scalars().all()
        return [FeeProfile.from_row(r) for r in rows]

    async def list_visible(self, user_id: str) -> list[FeeProfile]:
        """Well-known platforms followed by the caller's own entries."""
        return await self.list_well_known() + await self.list_mine(user_id)

    # --- Writes ---

    async def create_or_update(
        self, user_id: str, draft: FeeProfileDraft
    ) -> tuple[FeeProfile, bool]:
        """
        Save a custom platform for *user_id*.

        An existing entry with the same name is updated in place. Returns the
        stored profile and whether a new row was created.
        """
        if user_id == SYSTEM_OWNER:
            raise InvalidFeeProfile("userId", "System settings cannot be written by users")
        name = validate_draft(draft)

        async with self._storage("create"):
            row = await self._find_one(
                PlatformSetting.owner_id == user_id,
                PlatformSetting.platform_name == name,
            )
            created = row is None
            if created:
                row = PlatformSetting(platform_name=name, owner_id=user_id, is_custom=True)
                self.db.add(row)

            row.platform_fee_percentage = draft.platform_fee_percentage
            row.is_custom = True
            _apply_legs(row, draft.withdrawal_fees)

            try:
                await self.db.flush()
            except IntegrityError as exc:
                # Lost a race with a concurrent create of the same name
                await self.db.rollback()
                raise InvalidFeeProfile(
                    "platformName", f"Platform {name!r} already exists",
                ) from exc
            await self.db.refresh(row)

        logger.info(
            "%s custom platform %r for user %s",
            "Created" if created else "Updated", name, user_id,
        )
        return FeeProfile.from_row(row), created

    async def create(self, user_id: str, draft: FeeProfileDraft) -> FeeProfile:
        profile, _ = await self.create_or_update(user_id, draft)
        return profile

    async def delete(self, user_id: str, profile_id: uuid.UUID) -> None:
        """
        Delete one of the caller's custom platforms.

        Raises Forbidden for system or well-known rows, NotFound when the row
        is missing or owned by someone else.
        """
        async with self._storage("delete"):
            row = await self._find_one(PlatformSetting.id == profile_id)
            if row is None:
                raise NotFound("Platform setting not found or cannot be deleted")

            if row.is_system or not row.is_custom:
                raise Forbidden(FORBIDDEN_DELETE_MESSAGE)

            result = await self.db.execute(
                delete(PlatformSetting).where(
                    PlatformSetting.id == profile_id,
                    PlatformSetting.owner_id == user_id,
                    PlatformSetting.is_custom.is_(True),
                )
            )
            if result.rowcount == 0:
                raise NotFound("Platform setting not found or cannot be deleted")

        logger.info("Deleted custom platform %s for user %s", profile_id, user_id)

    # --- Seeding ---

    async def ensure_well_known_seeded(self) -> None:
        """
        Insert the well-known catalog when no system platforms exist yet.

        The whole catalog goes in as one transaction, so a failed run leaves
        nothing behind and the next call starts over. Never raises: a failed
        seed is logged and the caller carries on, so reads are not blocked by
        a bootstrap problem.
        """
        try:
            count = await self.db.scalar(
                select(func.count())
                .select_from(PlatformSetting)
                .where(
                    PlatformSetting.owner_id == SYSTEM_OWNER,
                    PlatformSetting.is_custom.is_(False),
                )
            )
            if count:
                return

            logger.info("No well-known platforms found, seeding...")
            self.db.add_all([
                _catalog_row(name, pct, fees) for name, pct, fees in WELL_KNOWN_PLATFORMS
            ])
            try:
                await self.db.commit()
            except IntegrityError:
                # Another process seeded the catalog concurrently
                await self.db.rollback()
                logger.info("Well-known platforms already seeded by another process")
                return
            logger.info("Seeded %d well-known platforms", len(WELL_KNOWN_PLATFORMS))
        except Exception:
            logger.exception("Error ensuring well-known platforms")
            await self._safe_rollback()

    async def _safe_rollback(self) -> None:
        try:
            await self.db.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback after failed seeding also failed")
