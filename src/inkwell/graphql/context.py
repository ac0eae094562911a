"""GraphQL context: carries the auth state, services and loaders into resolvers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from strawberry.fastapi import BaseContext

if TYPE_CHECKING:
    from fastapi import Request

    from ..auth.context import AuthContext
    from ..services import Services
    from .loaders import Loaders


class GraphQLContext(BaseContext):
    """Context passed to every resolver of a single request.

    Built fresh for each request and dropped when the response is sent.
    """

    def __init__(
        self,
        auth: AuthContext,
        services: Services,
        loaders: Loaders,
        request: Request | None = None,
    ) -> None:
        super().__init__()
        self.auth = auth
        self.services = services
        self.loaders = loaders
        self.request = request
