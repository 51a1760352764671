"""Notification and inbox factories for the demo graph.

Provides:
    notificationService -- a shared ``NotificationService`` (provider).
    notifications       -- all notifications addressed to ``user``.
    unreadNotifications -- the subset of ``notifications`` not yet read.
    inbox               -- ``notifications`` plus, only when the request
                           asks for it, ``unreadNotifications``.
"""

from __future__ import annotations

import logging
from typing import Any

from quarry.core.context import Context
from quarry.core.factory import Dependencies, provider
from quarry.core.graph import Quarry
from quarry.sample.models import (
    HasUnreadOption,
    Inbox,
    Notification,
    NotificationStatus,
    User,
)

logger = logging.getLogger(__name__)

_ADMIN = User(username="admin", email="admin@example.com")


class NotificationService:
    """Stand-in for a remote notification store."""

    def fetch_notifications(self, ctx: Context, user: User) -> list[Notification]:
        logger.info("NotificationService.fetch_notifications")
        ctx.raise_if_done()
        return [
            Notification(
                title="hello",
                body=f"Hello, {user.username}!",
                to=user,
                sender=_ADMIN,
                status=NotificationStatus.UNREAD,
            ),
            Notification(
                title="graph time",
                body="Graphs are pretty fun",
                to=user,
                sender=_ADMIN,
                status=NotificationStatus.READ,
            ),
        ]


def unread_option(params: Any) -> bool:
    """Condition: the request asked for unread notifications."""
    return isinstance(params, HasUnreadOption) and bool(params.show_unread)


def fetch_notifications(ctx: Context, params: Any, deps: Dependencies) -> list[Notification]:
    service = deps.typed("notificationService", NotificationService)
    user = deps.typed("user", User)
    return service.fetch_notifications(ctx, user)


def fetch_unread_notifications(
    ctx: Context, params: Any, deps: Dependencies
) -> list[Notification]:
    notifications = deps.typed("notifications", list)
    return [n for n in notifications if n.status is not NotificationStatus.READ]


def fetch_inbox(ctx: Context, params: Any, deps: Dependencies) -> Inbox:
    notifications = deps.typed("notifications", list)
    # Conditional edge: None unless the request asked for unread notifications.
    unread = deps.typed("unreadNotifications", list, optional=True)
    return Inbox(notifications=notifications, unread_notifications=unread)


def register(graph: Quarry) -> None:
    """Add the notification and inbox factories to ``graph``.

    Depends on ``user`` being provided by another module.
    """
    graph.add_factory("notificationService", provider(NotificationService()))

    graph.add_factory("notifications", fetch_notifications)
    graph.add_dependency("notifications", "notificationService")
    graph.add_dependency("notifications", "user")

    graph.add_factory("unreadNotifications", fetch_unread_notifications)
    graph.add_dependency("unreadNotifications", "notifications")

    graph.add_factory("inbox", fetch_inbox)
    graph.add_dependency("inbox", "notifications")
    graph.add_dependency("inbox", "unreadNotifications", unread_option)
