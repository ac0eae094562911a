"""
Authentication payload type
"""

import strawberry

from .user import User


@strawberry.type
class AuthPayload:
    """Token plus the user it was issued for."""

    token: str
    user: User
