"""SQLAlchemy ORM models for Payout Ledger."""

from payout_ledger.models.platform_setting import LEG_NAMES, SYSTEM_OWNER, PlatformSetting

__all__ = [
    "PlatformSetting", "LEG_NAMES", "SYSTEM_OWNER",
]
