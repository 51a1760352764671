"""Data models for the demo user/inbox graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable


class NotificationStatus(Enum):
    UNREAD = "unread"
    READ = "read"


@dataclass(frozen=True)
class User:
    username: str
    email: str


@dataclass(frozen=True)
class Notification:
    title: str
    body: str
    to: User
    sender: User
    status: NotificationStatus = NotificationStatus.UNREAD


@dataclass(frozen=True)
class Inbox:
    notifications: list[Notification] = field(default_factory=list)
    # None when the request did not ask for unread notifications.
    unread_notifications: list[Notification] | None = None


@dataclass(frozen=True)
class SampleRequest:
    """Inbound request resolved by the demo graph."""

    token: str
    show_unread: bool = True


@dataclass(frozen=True)
class SampleResponse:
    user: User
    inbox: Inbox

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dict."""

        def _notification(n: Notification) -> dict:
            return {
                "title": n.title,
                "body": n.body,
                "to": n.to.username,
                "from": n.sender.username,
                "status": n.status.value,
            }

        unread = self.inbox.unread_notifications
        return {
            "user": {"username": self.user.username, "email": self.user.email},
            "inbox": {
                "notifications": [_notification(n) for n in self.inbox.notifications],
                "unread_notifications": (
                    None if unread is None else [_notification(n) for n in unread]
                ),
            },
        }


# ---------------------------------------------------------------------------
# Capabilities factories need from request params
# ---------------------------------------------------------------------------


@runtime_checkable
class HasToken(Protocol):
    """Request params carrying an authentication token."""

    token: str


@runtime_checkable
class HasUnreadOption(Protocol):
    """Request params selecting whether unread notifications are included."""

    show_unread: bool
