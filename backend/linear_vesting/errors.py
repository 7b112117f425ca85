"""Vesting error taxonomy.

Every failure raised by the grant operations derives from ``VestingError`` and
carries a stable ``code`` so callers can branch on the cause (for example
``cliff_not_reached`` versus ``already_empty``). Errors are raised before any
state is mutated; the request session rolls back whatever was flushed.
"""
from typing import Any, Dict, Optional


class VestingError(Exception):
    """Base class for all vesting failures"""

    code: str = "vesting_error"
    message: str = "Vesting operation failed"
    status_code: int = 400

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.message
        self.context: Dict[str, Any] = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "context": self.context}


class Unauthorized(VestingError):
    code = "unauthorized"
    message = "Signer is not authorized for this grant"
    status_code = 403


class InvalidAmount(VestingError):
    code = "invalid_amount"
    message = "Deposit amount must be a positive unsigned 64-bit integer"


class InvalidDuration(VestingError):
    code = "invalid_duration"
    message = "Vesting duration must be positive"


class AlreadyInitialized(VestingError):
    code = "already_initialized"
    message = "A grant already exists for this beneficiary and asset"
    status_code = 409


class InsufficientFunds(VestingError):
    code = "insufficient_funds"
    message = "Source account holds fewer tokens than requested"


class GrantNotFound(VestingError):
    code = "grant_not_found"
    message = "Vesting grant not found"
    status_code = 404


class CliffNotReached(VestingError):
    code = "cliff_not_reached"
    message = "Not yet past the cliff!"


class NothingToRelease(VestingError):
    code = "nothing_to_release"
    message = "No vested tokens available for release"


class AlreadyEmpty(NothingToRelease):
    """The vault has been fully drained; nothing will ever be releasable again."""

    code = "already_empty"
    message = "The vesting account is already empty!"


class NotRevocable(VestingError):
    code = "not_revocable"
    message = "Account is not revocable!"


class AlreadyRevoked(VestingError):
    code = "already_revoked"
    message = "Account already revoked!"
    status_code = 409


class AlreadyFullyVested(VestingError):
    code = "already_fully_vested"
    message = "Cannot revoke a fully vested account!"
