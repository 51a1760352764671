"""Demo application: resolving a user's inbox response from a request.

Each module exposes ``register(graph)``; nothing is registered as a side
effect of importing it. ``build_graph()`` assembles the demo graph by
calling every module's ``register`` in a fixed order::

    response -> user, inbox
    user -> userService
    inbox -> notifications, unreadNotifications [if request.show_unread]
    notifications -> notificationService, user
    unreadNotifications -> notifications
"""

from __future__ import annotations

from quarry.core.graph import Quarry
from quarry.sample import notifications, response, users
from quarry.sample.models import SampleRequest, SampleResponse

RESPONSE = "response"

_MODULES = (users, notifications, response)


def build_graph(graph: Quarry | None = None) -> Quarry:
    """Register every demo module into ``graph`` (a new graph when None).

    Returns:
        The populated graph.
    """
    graph = Quarry() if graph is None else graph
    for module in _MODULES:
        module.register(graph)
    return graph


__all__ = ["RESPONSE", "SampleRequest", "SampleResponse", "build_graph"]
