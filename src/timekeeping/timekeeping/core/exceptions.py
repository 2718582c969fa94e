class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400
    code = "domain_error"


class ValidationError(DomainError):
    """Raised when input data is missing, malformed or violates domain rules."""

    code = "validation_error"


class AuthenticationError(DomainError):
    """Raised when a request carries no caller identity."""

    status_code = 401
    code = "unauthenticated"


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""

    status_code = 403
    code = "forbidden"


class NotFoundError(DomainError):
    status_code = 404
    code = "not_found"


class ConflictError(DomainError):
    """The request conflicts with the current state; the caller must change intent."""

    status_code = 409
    code = "conflict"


class DuplicateRecord(ConflictError):
    code = "duplicate_record"


class AlreadyClockedIn(ConflictError):
    code = "already_clocked_in"


class NoOpenSession(ConflictError):
    code = "no_open_session"


class InvalidTransition(ConflictError):
    code = "invalid_transition"


class DuplicatePendingRequest(ConflictError):
    code = "duplicate_pending_request"
