"""
Reusable FastAPI dependencies for authentication and service wiring.

Dependencies:
  - get_current_user_id: verified user id from the session cookie (401 if invalid)
  - get_registry: PlatformFeeRegistry bound to the request session
  - get_calculator: FeeChainCalculator over the shared converter
"""

from fastapi import Cookie, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from payout_ledger.config import settings
from payout_ledger.core.currency import CurrencyConverter, get_converter
from payout_ledger.core.exceptions import Unauthenticated
from payout_ledger.core.security import decode_token
from payout_ledger.database import get_db
from payout_ledger.services.fee_calculator import FeeChainCalculator
from payout_ledger.services.platform_registry import PlatformFeeRegistry


async def get_current_user_id(
    auth_token: str | None = Cookie(
        None, alias=settings.AUTH_COOKIE_NAME, description="Signed session token",
    ),
) -> str:
    """
    Read the session cookie, verify the JWT, and return the user id.

    Raises 401 if the cookie is missing, malformed, or expired.
    """
    if not auth_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    try:
        return decode_token(auth_token)
    except Unauthenticated as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        )


async def get_registry(db: AsyncSession = Depends(get_db)) -> PlatformFeeRegistry:
    return PlatformFeeRegistry(db)


def get_calculator(
    converter: CurrencyConverter = Depends(get_converter),
) -> FeeChainCalculator:
    return FeeChainCalculator(converter)
