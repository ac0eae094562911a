"""
Process-wide dependencies, built once at startup.
"""

from dataclasses import dataclass
from datetime import timedelta

from .auth.passwords import PasswordHasher
from .auth.tokens import TokenService
from .config import Settings
from .database.connection import Database


@dataclass(frozen=True)
class Services:
    """Everything a resolver needs beyond its arguments and the auth context."""

    settings: Settings
    database: Database
    tokens: TokenService
    passwords: PasswordHasher


def build_services(settings: Settings) -> Services:
    """Construct the store pool, token service and password hasher from settings."""
    if not settings.jwt_secret:
        raise ValueError("JWT secret is required. Set INKWELL_JWT_SECRET.")

    return Services(
        settings=settings,
        database=Database(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            echo=settings.sql_echo,
        ),
        tokens=TokenService(
            secret_key=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            token_expiry=timedelta(days=settings.token_expiry_days),
        ),
        passwords=PasswordHasher(
            time_cost=settings.password_time_cost,
            memory_cost=settings.password_memory_cost,
            parallelism=settings.password_parallelism,
        ),
    )
