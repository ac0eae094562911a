"""
Error types raised by resolvers.

The exception message is what clients see in the GraphQL ``errors`` list.
"""


class InkwellError(Exception):
    """Base class for errors surfaced to API clients."""

    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class Unauthenticated(InkwellError):
    """No valid identity where one is required."""

    default_message = "Not authenticated"


class Forbidden(InkwellError):
    """Valid identity that does not own the resource."""

    default_message = "Not authorized"


class NotFound(InkwellError):
    """Referenced entity does not exist."""

    default_message = "Not found"


class Conflict(InkwellError):
    """Uniqueness violation."""

    default_message = "User with this email or username already exists"


class InvalidCredentials(InkwellError):
    """Login failure. Same message for unknown email and wrong password."""

    default_message = "Invalid credentials"


class InvalidInput(InkwellError):
    """Argument rejected before reaching business logic."""

    default_message = "Invalid input"
