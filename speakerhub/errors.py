"""Domain error codes and the transition result envelope."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """Domain error codes."""

    PRECONDITION_FAILED = "PRECONDITION_FAILED"
    DUPLICATE = "DUPLICATE"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INVALID_INPUT = "INVALID_INPUT"
    BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class PreconditionError(DomainError):
    """Raised when the entity's current state does not permit the operation."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.PRECONDITION_FAILED, message=message)


class DuplicateError(DomainError):
    """Raised when a second record would be created for the same (event, speaker) pair."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.DUPLICATE, message=message)


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""

    def __init__(self, entity: str) -> None:
        super().__init__(code=ErrorCode.NOT_FOUND, message=f"{entity} not found")


class ForbiddenError(DomainError):
    """Raised when the caller is not a party allowed to perform the operation."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.FORBIDDEN, message=message)


class InvalidInputError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_INPUT, message=message)


class BackendUnavailableError(DomainError):
    """Raised when the data store fails; the driver message is never exposed."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.BACKEND_UNAVAILABLE,
            message="The data store is unavailable. Please try again.",
        )


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a transition: either ``data`` on success or ``error`` on failure."""

    ok: bool
    data: Any = None
    error: Optional[DomainError] = None

    @classmethod
    def success(cls, data: Any = None) -> "TransitionResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: DomainError) -> "TransitionResult":
        return cls(ok=False, error=error)

    @property
    def code(self) -> Optional[ErrorCode]:
        return self.error.code if self.error else None

    @property
    def reason(self) -> Optional[str]:
        return self.error.message if self.error else None
