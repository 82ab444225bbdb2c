class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when an id-based lookup misses."""


class AlreadyCheckedIn(ValidationError):
    pass


class AlreadyCheckedOut(ValidationError):
    pass


class NotCheckedInYet(ValidationError):
    pass


class DuplicatePendingRequest(ValidationError):
    pass


class RequestAlreadyResolved(ValidationError):
    pass


class MissingRejectionReason(ValidationError):
    pass


class RecordNotFound(NotFoundError):
    pass


class RequestNotFound(NotFoundError):
    pass


class TeacherNotFound(NotFoundError):
    pass


class SchoolConfigNotFound(NotFoundError):
    pass


class StorageError(Exception):
    """Infrastructure failure in the store (connectivity, driver, constraints).

    Not a DomainError; controllers answer it with a generic 500.
    """
