"""Password hashing with argon2id."""

from __future__ import annotations

from argon2 import PasswordHasher as Argon2Hasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from ..logging import get_logger

logger = get_logger(__name__)


class PasswordHasher:
    """One-way, self-salted password hashing.

    The cost parameters are configurable so deployments can raise them over
    time; hashes produced under older parameters still verify and can be
    upgraded via ``needs_rehash``.
    """

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
    ):
        self._hasher = Argon2Hasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    def hash(self, plaintext: str) -> str:
        """Hash a password. A random salt is embedded in the result."""
        if not plaintext:
            raise ValueError("Password must not be empty")
        return self._hasher.hash(plaintext)

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Check a password against a stored hash. Never raises."""
        if not plaintext or not hashed:
            return False
        try:
            return self._hasher.verify(hashed, plaintext)
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError) as e:
            logger.warning("Stored password hash could not be verified", error=str(e))
            return False

    def needs_rehash(self, hashed: str) -> bool:
        """True when ``hashed`` was produced with different cost parameters."""
        try:
            return self._hasher.check_needs_rehash(hashed)
        except InvalidHashError:
            return True
