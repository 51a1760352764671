"""Rich output formatting helpers for the Quarry CLI."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from quarry.core.graph import Quarry
from quarry.sample.models import Notification, NotificationStatus, SampleResponse

_STATUS_STYLES: dict[NotificationStatus, str] = {
    NotificationStatus.UNREAD: "bold yellow",
    NotificationStatus.READ: "dim",
}

console = Console()


def _notification_table(title: str, notifications: list[Notification]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Title", style="bold")
    table.add_column("From")
    table.add_column("Body")
    table.add_column("Status", justify="center")
    for n in notifications:
        style = _STATUS_STYLES.get(n.status, "white")
        table.add_row(n.title, n.sender.username, n.body, Text(n.status.value.upper(), style=style))
    return table


def print_response(response: SampleResponse) -> None:
    """Print a resolved demo response.

    Args:
        response: The value resolved for ``response``.
    """
    header = Text.assemble(
        ("User: ", "bold"), (response.user.username, ""),
        ("  Email: ", "bold"), (response.user.email, "dim"),
    )
    console.print(Panel(header, title="Response"))
    console.print(_notification_table("Notifications", response.inbox.notifications))

    unread = response.inbox.unread_notifications
    if unread is None:
        console.print("[dim]Unread notifications not requested.[/dim]")
    else:
        console.print(_notification_table("Unread Notifications", unread))


def print_graph(graph: Quarry) -> None:
    """Print the factories and edges of a graph.

    Args:
        graph: A populated graph.
    """
    table = Table(title="Quarry Graph", show_header=True, header_style="bold")
    table.add_column("Factory", style="bold")
    table.add_column("Depends On")
    table.add_column("Conditional", style="dim")
    for name in sorted(graph.names):
        children = graph.dependencies_of(name)
        conditional = [
            child for child in children if graph.conditions_for(name, child)
        ]
        table.add_row(name, ", ".join(children) or "-", ", ".join(conditional) or "-")
    console.print(table)

    missing = graph.missing_factories()
    if missing:
        for name, parents in missing.items():
            needed_by = ", ".join(parents) or "-"
            console.print(f"[red]Missing factory[/red] {name} (needed by {needed_by})")
    else:
        console.print(f"[green]{len(graph)} factories, all dependencies registered.[/green]")
