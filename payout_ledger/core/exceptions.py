"""
Domain errors raised by the fee registry, currency converter and identity layer.

Route handlers translate these into HTTP responses; services never raise
``HTTPException`` themselves.
"""


class LedgerError(Exception):
    """Base class for all payout-ledger domain errors."""
    pass


class InvalidFeeProfile(LedgerError):
    """A fee profile failed validation. Carries the offending field name."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class NotFound(LedgerError):
    """No such profile, or the profile is not visible to the caller."""
    pass


class Forbidden(LedgerError):
    """Attempted mutation of a protected (system / well-known) profile."""
    pass


class UnknownCurrency(LedgerError):
    """Currency code outside the supported set."""

    def __init__(self, code):
        self.code = code
        super().__init__(f"Unknown currency: {code!r}")


class StorageUnavailable(LedgerError):
    """The backing database failed. Retryable by the caller."""
    pass


class Unauthenticated(LedgerError):
    """The caller did not present a valid session token."""
    pass
