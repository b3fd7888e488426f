"""
Platform settings endpoints: fee schedules for payout platforms.

Well-known platforms (Fiverr, Upwork, …) are seeded on demand and are
read-only; users manage their own custom platforms alongside them.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status

from payout_ledger.api.deps import get_calculator, get_current_user_id, get_registry
from payout_ledger.core.currency import Money
from payout_ledger.core.exceptions import (
    Forbidden,
    InvalidFeeProfile,
    LedgerError,
    NotFound,
    StorageUnavailable,
    UnknownCurrency,
)
from payout_ledger.schemas.currency import FeeBreakdown, WithdrawalCostRequest
from payout_ledger.schemas.platform_setting import DeleteResponse, FeeProfile, FeeProfileDraft
from payout_ledger.services.fee_calculator import FeeChainCalculator
from payout_ledger.services.platform_registry import PlatformFeeRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _http_error(exc: LedgerError) -> HTTPException:
    """Map a registry error onto the HTTP status the web client expects."""
    if isinstance(exc, InvalidFeeProfile):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"field": exc.field, "reason": exc.reason},
        )
    if isinstance(exc, Forbidden):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, NotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, StorageUnavailable):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Platform settings are temporarily unavailable",
        )
    logger.error("Unhandled ledger error: %s", exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@router.get("", response_model=list[FeeProfile])
async def list_platform_settings(
    user_id: str = Depends(get_current_user_id),
    registry: PlatformFeeRegistry = Depends(get_registry),
):
    """
    All platforms visible to the caller: well-known defaults first, then
    the caller's custom entries, each group sorted by name.
    """
    await registry.ensure_well_known_seeded()
    try:
        return await registry.list_visible(user_id)
    except LedgerError as exc:
        raise _http_error(exc)


@router.get("/well-known", response_model=list[FeeProfile])
async def list_well_known(
    user_id: str = Depends(get_current_user_id),
    registry: PlatformFeeRegistry = Depends(get_registry),
):
    await registry.ensure_well_known_seeded()
    try:
        return await registry.list_well_known()
    except LedgerError as exc:
        raise _http_error(exc)


@router.get("/mine", response_model=list[FeeProfile])
async def list_mine(
    user_id: str = Depends(get_current_user_id),
    registry: PlatformFeeRegistry = Depends(get_registry),
):
    try:
        return await registry.list_mine(user_id)
    except LedgerError as exc:
        raise _http_error(exc)


@router.get("/resolve/{platform_name}", response_model=FeeProfile)
async def resolve_platform(
    platform_name: str,
    user_id: str = Depends(get_current_user_id),
    registry: PlatformFeeRegistry = Depends(get_registry),
):
    """Effective fee schedule: the caller's own entry, else the well-known one."""
    await registry.ensure_well_known_seeded()
    try:
        return await registry.resolve(user_id, platform_name)
    except LedgerError as exc:
        raise _http_error(exc)


@router.get("/{profile_id}", response_model=FeeProfile)
async def get_platform_setting(
    profile_id: UUID,
    user_id: str = Depends(get_current_user_id),
    registry: PlatformFeeRegistry = Depends(get_registry),
):
    try:
        return await registry.get(user_id, profile_id)
    except LedgerError as exc:
        raise _http_error(exc)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


@router.post("", response_model=FeeProfile, status_code=status.HTTP_201_CREATED)
async def save_platform_setting(
    payload: FeeProfileDraft,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    registry: PlatformFeeRegistry = Depends(get_registry),
):
    """
    Create a custom platform, or update the caller's existing entry with the
    same name (200 instead of 201).
    """
    try:
        profile, created = await registry.create_or_update(user_id, payload)
    except LedgerError as exc:
        raise _http_error(exc)

    if not created:
        response.status_code = status.HTTP_200_OK
    return profile


@router.delete("/{profile_id}", response_model=DeleteResponse)
async def delete_platform_setting(
    profile_id: UUID,
    user_id: str = Depends(get_current_user_id),
    registry: PlatformFeeRegistry = Depends(get_registry),
):
    """
    Delete one of the caller's custom platforms.

    Well-known platforms answer 400; missing or foreign entries answer 404.
    """
    try:
        await registry.delete(user_id, profile_id)
    except LedgerError as exc:
        raise _http_error(exc)
    return DeleteResponse()


# ---------------------------------------------------------------------------
# Withdrawal pricing
# ---------------------------------------------------------------------------


@router.post("/{profile_id}/withdrawal-cost", response_model=FeeBreakdown)
async def withdrawal_cost(
    profile_id: UUID,
    payload: WithdrawalCostRequest,
    user_id: str = Depends(get_current_user_id),
    registry: PlatformFeeRegistry = Depends(get_registry),
    calculator: FeeChainCalculator = Depends(get_calculator),
):
    """Price a withdrawal of ``amount`` through this platform's fee legs."""
    try:
        profile = await registry.get(user_id, profile_id)
    except LedgerError as exc:
        raise _http_error(exc)

    try:
        return calculator.compute_total_cost(
            profile,
            Money(amount=payload.amount, currency=payload.currency),
            payload.target_currency,
        )
    except UnknownCurrency as exc:
        logger.error("Stored fee leg has an unsupported currency: %s", exc)
        raise _http_error(exc)
