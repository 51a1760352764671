"""User lookup factories for the demo graph.

Provides:
    userService -- process-wide ``UserService`` (singleton).
    user        -- the ``User`` authenticated by the request token.
"""

from __future__ import annotations

import logging
from typing import Any

from quarry.core.context import Context
from quarry.core.factory import Dependencies, singleton
from quarry.core.graph import Quarry
from quarry.sample.models import HasToken, User

logger = logging.getLogger(__name__)


class UserService:
    """Stand-in for a remote user directory."""

    def fetch_user_for_token(self, ctx: Context, token: str) -> User:
        logger.info("UserService.fetch_user_for_token")
        ctx.raise_if_done()
        if not token:
            raise PermissionError("missing authentication token")
        return User(username="taco", email="taco@example.com")


def _create_user_service(ctx: Context, deps: Dependencies) -> UserService:
    return UserService()


def fetch_user(ctx: Context, params: Any, deps: Dependencies) -> User:
    if not isinstance(params, HasToken):
        raise TypeError("request params must carry a token")
    service = deps.typed("userService", UserService)
    return service.fetch_user_for_token(ctx, params.token)


def register(graph: Quarry) -> None:
    """Add the user factories to ``graph``."""
    graph.add_factory("userService", singleton(_create_user_service))
    graph.add_factory("user", fetch_user)
    graph.add_dependency("user", "userService")
