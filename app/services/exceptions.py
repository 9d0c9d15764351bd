"""Domain errors raised by the services and mapped to HTTP responses in app.main."""

import enum


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "NOT_FOUND"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    EVENT_NOT_MODIFIABLE = "EVENT_NOT_MODIFIABLE"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    DUPLICATE_REQUEST = "DUPLICATE_REQUEST"
    SELF_PARTICIPATION_FORBIDDEN = "SELF_PARTICIPATION_FORBIDDEN"
    EVENT_NOT_PUBLISHED = "EVENT_NOT_PUBLISHED"
    INVALID_REQUEST_STATE = "INVALID_REQUEST_STATE"
    INVALID_EVENT_DATE = "INVALID_EVENT_DATE"
    CONFLICT = "CONFLICT"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"


class DomainError(Exception):
    """Base domain error with a kind, an HTTP status and a user-safe message."""

    kind: ErrorKind = ErrorKind.CONFLICT
    status_code: int = 409
    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404


class NotAuthorizedError(DomainError):
    kind = ErrorKind.NOT_AUTHORIZED
    status_code = 403


class InvalidTransitionError(DomainError):
    kind = ErrorKind.INVALID_TRANSITION


class EventNotModifiableError(DomainError):
    kind = ErrorKind.EVENT_NOT_MODIFIABLE


class CapacityExceededError(DomainError):
    kind = ErrorKind.CAPACITY_EXCEEDED


class DuplicateRequestError(DomainError):
    kind = ErrorKind.DUPLICATE_REQUEST


class SelfParticipationForbiddenError(DomainError):
    kind = ErrorKind.SELF_PARTICIPATION_FORBIDDEN


class EventNotPublishedError(DomainError):
    kind = ErrorKind.EVENT_NOT_PUBLISHED


class InvalidRequestStateError(DomainError):
    kind = ErrorKind.INVALID_REQUEST_STATE


class InvalidEventDateError(DomainError):
    kind = ErrorKind.INVALID_EVENT_DATE
    status_code = 400


class ConflictError(DomainError):
    """Unique-name clashes and records still referenced elsewhere."""

    kind = ErrorKind.CONFLICT


class StorageUnavailableError(DomainError):
    """Transient storage or lock failure; the caller may retry with backoff."""

    kind = ErrorKind.STORAGE_UNAVAILABLE
    status_code = 503
    retryable = True
