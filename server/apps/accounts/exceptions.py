"""Exceptions for accounts app."""


class AuthError(Exception):
    """Base class for authentication failures (HTTP 401)."""


class MissingTokenError(AuthError):
    """Raised when a request carries no bearer token."""

    def __init__(self) -> None:
        """Initialize MissingTokenError."""
        super().__init__('Auth token missing')


class InvalidTokenError(AuthError):
    """Raised when a bearer token is unknown, expired or revoked."""

    def __init__(self) -> None:
        """Initialize InvalidTokenError."""
        super().__init__('Invalid or expired token')


class InvalidCredentialsError(AuthError):
    """Raised when email and password do not match an active user."""

    def __init__(self) -> None:
        """Initialize InvalidCredentialsError."""
        super().__init__('Invalid credentials')


class RegistrationError(Exception):
    """Raised when registration input is missing or rejected (HTTP 400)."""


class UserAlreadyExistsError(Exception):
    """Raised when registering an email that is already taken (HTTP 409)."""

    def __init__(self, email: str) -> None:
        """Initialize UserAlreadyExistsError.

        Args:
            email: Email address that is already registered.
        """
        self.email = email
        super().__init__('User already exists')
