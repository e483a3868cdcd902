class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class CrewNotFoundError(ValidationError):
    """Raised when a crew id does not reference an existing crew."""


class AuthenticationError(DomainError):
    """Raised when no acting user is known."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class ConflictError(DomainError):
    """Raised on an expected uniqueness conflict the caller can recover from."""


class DuplicateAttendanceError(ConflictError):
    """Raised when a bulk insert hits the one-event-per-user-per-day key."""


class InviteCodeExhaustedError(ConflictError):
    """Raised when no unique invite code was found within the attempt bound."""


class StoreError(Exception):
    """Raised when the underlying store fails."""


class DuplicateKeyError(StoreError):
    """Raised by the store layer on a unique-constraint violation."""
