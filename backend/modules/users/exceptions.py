"""
User module exceptions.
"""

from shared.exceptions import ConflictError, NotFoundError, ValidationError


class UserNotFoundError(NotFoundError):
    """Raised when no active user matches the given id or email."""

    def __init__(self, identifier: str):
        super().__init__(
            "User not found",
            code="USER_NOT_FOUND",
            details={"identifier": identifier},
        )


class DuplicateEmailError(ConflictError):
    """
    Raised when an email is already taken by an active user.

    Used for both the application-level check and a unique-constraint
    violation reported by storage.
    """

    def __init__(self):
        super().__init__(
            "A user with this email already exists",
            code="EMAIL_ALREADY_EXISTS",
        )


class UnderageError(ValidationError):
    """Raised when the date of birth makes the user younger than allowed."""

    def __init__(self, minimum_age: int):
        super().__init__(
            f"User must be at least {minimum_age} years old",
            code="UNDERAGE",
            details={"minimum_age": minimum_age},
        )


class InvalidUserIdError(ValidationError):
    """Raised when a user id is not a UUID."""

    def __init__(self, user_id: str):
        super().__init__(
            "Invalid user ID format",
            code="INVALID_USER_ID",
            details={"user_id": user_id},
        )
