from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class AccessDeniedError(UserError):
    """Raised when a user tries to act on a resource they do not own and is not an admin."""


class ValidationError(UserError):
    """Raised when user input fails validation."""


class InvalidFormatError(ValidationError):
    """Raised when a reference id is not a positive decimal integer."""


class ConflictError(UserError):
    """Raised when a reference id is already held by a document or an active reservation."""


class StorageFailure(Exception):  # noqa: N818
    """Raised when persisted data cannot be read back intact.

    Not a UserError: the message is logged but never shown to the user.
    """
