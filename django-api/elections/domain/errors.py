"""Domain error codes for the elections module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    INVALID_EVENT_ID = "INVALID_EVENT_ID"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INVALID_OPTION = "INVALID_OPTION"
    DUPLICATE_VOTE = "DUPLICATE_VOTE"
    VOTING_IN_PROGRESS = "VOTING_IN_PROGRESS"
    ELECTION_NOT_ACTIVE = "ELECTION_NOT_ACTIVE"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str
    details: tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationFailedError(DomainError):
    """Raised when caller input breaks one or more business rules."""

    def __init__(self, violations: list[str]) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_FAILED,
            message="; ".join(violations),
            details=tuple(violations),
        )


class InvalidEventIdError(DomainError):
    """Raised when an event ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EVENT_ID,
            message="Invalid event ID format",
        )


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )


class ForbiddenError(DomainError):
    """Raised when an authenticated caller may not perform the operation."""

    def __init__(self, message: str = "Not authorized") -> None:
        super().__init__(code=ErrorCode.FORBIDDEN, message=message)


class InvalidOptionError(DomainError):
    """Raised when an option does not belong to the event."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_OPTION,
            message="Invalid option",
        )


class DuplicateVoteError(DomainError):
    """Raised when the participant already voted on the event. Never retried."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_VOTE,
            message="You have already voted on this event",
        )


class VotingInProgressError(DomainError):
    """Raised when options are changed after the first vote."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.VOTING_IN_PROGRESS,
            message="Cannot modify options after voting has started",
        )


class ElectionNotActiveError(DomainError):
    """Raised when a vote arrives outside the voting window."""

    def __init__(self, status: str) -> None:
        super().__init__(
            code=ErrorCode.ELECTION_NOT_ACTIVE,
            message=f"Election is {status}, voting is closed",
        )


class StoreUnavailableError(DomainError):
    """Raised on transient store failures. Safe to retry with backoff."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.STORE_UNAVAILABLE,
            message="Service temporarily unavailable",
        )
