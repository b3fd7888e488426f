"""
Core security module: session token creation and verification.

The web client stores a signed JWT in the ``auth-token`` cookie. Tokens are
HS256-signed with the shared ``AUTH_SECRET`` and carry the user id in the
``id`` claim.
"""

import logging
from datetime import datetime, timedelta, timezone

import jwt

from payout_ledger.config import settings
from payout_ledger.core.exceptions import Unauthenticated

logger = logging.getLogger(__name__)

_secret: str = settings.AUTH_SECRET
_algorithm: str = settings.JWT_ALGORITHM


def configure_secret(secret: str, algorithm: str = "HS256") -> None:
    """Override the signing secret at runtime (used in tests)."""
    global _secret, _algorithm
    _secret = secret
    _algorithm = algorithm


def create_access_token(user_id: str) -> str:
    """Create a session JWT for *user_id*."""
    now = datetime.now(timezone.utc)
    payload = {
        "id": str(user_id),
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, _secret, algorithm=_algorithm)


def decode_token(token: str) -> str:
    """
    Verify a session JWT and return the user id it carries.

    Raises Unauthenticated on expiry, bad signature or a missing ``id`` claim.
    """
    try:
        payload = jwt.decode(token, _secret, algorithms=[_algorithm])
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token has expired")
    except jwt.InvalidTokenError:
        raise Unauthenticated("Invalid or expired token")

    user_id = payload.get("id")
    if not user_id:
        logger.warning("Session token without an id claim")
        raise Unauthenticated("Invalid or expired token")
    return str(user_id)
