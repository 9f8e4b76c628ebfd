"""Domain error codes for the registration fees module."""

from dataclasses import dataclass
from enum import Enum

from registration_fees.domain.availability import UnavailableReason


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_FEE_ID = "INVALID_FEE_ID"
    FEE_NOT_FOUND = "FEE_NOT_FOUND"
    CONFERENCE_NOT_FOUND = "CONFERENCE_NOT_FOUND"
    FEE_UNAVAILABLE = "FEE_UNAVAILABLE"
    REGISTRATION_CONFLICT = "REGISTRATION_CONFLICT"
    TRANSIENT_CONFLICT = "TRANSIENT_CONFLICT"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class FeeValidationError(DomainError):
    """Raised when fee input breaks a fee invariant."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(code=ErrorCode.VALIDATION_ERROR, message=message)
        self.field = field


class InvalidFeeIdError(DomainError):
    """Raised when a fee or conference ID is not a valid UUID."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_FEE_ID,
            message="Invalid fee ID format",
        )


class FeeNotFoundError(DomainError):
    """Raised when a fee does not exist within the given conference."""

    def __init__(self, fee_id: str) -> None:
        super().__init__(
            code=ErrorCode.FEE_NOT_FOUND,
            message="Fee not found",
        )
        self.fee_id = fee_id


class ConferenceNotFoundError(DomainError):
    """Raised when a conference id or slug cannot be resolved."""

    def __init__(self, conference_ref: str) -> None:
        super().__init__(
            code=ErrorCode.CONFERENCE_NOT_FOUND,
            message="Conference not found",
        )
        self.conference_ref = conference_ref


_REASON_MESSAGES = {
    UnavailableReason.SOLD_OUT: "This registration fee is sold out",
    UnavailableReason.NOT_AVAILABLE_YET: "This registration fee is not available yet",
    UnavailableReason.EXPIRED: "This registration fee has expired",
    UnavailableReason.INACTIVE: "This registration fee is no longer offered",
}


class AllocationError(DomainError):
    """Raised when a fee cannot be committed at reservation time.

    This is a final, user-facing outcome; callers should re-fetch the fee list
    to show updated availability.
    """

    def __init__(self, reason: UnavailableReason) -> None:
        super().__init__(
            code=ErrorCode.FEE_UNAVAILABLE,
            message=_REASON_MESSAGES[reason],
        )
        self.reason = reason


class RegistrationConflictError(DomainError):
    """Raised when a registration already holds a fee linkage."""

    def __init__(self, reference: str) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_CONFLICT,
            message="Registration already has a fee",
        )
        self.reference = reference


class TransientConflictError(DomainError):
    """Raised when the fee lock could not be taken or the commit conflicted."""

    def __init__(self, detail: str = "Fee is busy, please retry") -> None:
        super().__init__(
            code=ErrorCode.TRANSIENT_CONFLICT,
            message="Could not confirm the registration fee, please retry",
        )
        self.detail = detail
