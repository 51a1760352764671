"""``quarry graph`` -- Describe the demo graph.

Lists every factory with its dependencies, marks conditional edges, and
reports dependencies that have no registered factory.

Exit Codes:
    0 -- Always (informational command).
"""

from __future__ import annotations

import json

import click

from quarry.core.graph import Quarry
from quarry.sample import build_graph


def graph_to_dict(graph: Quarry) -> dict:
    """Convert a graph's structure to a JSON-serializable dict."""
    return {
        "factories": sorted(graph.names),
        "edges": [
            {"parent": parent, "child": child, "conditions": count}
            for parent, child, count in graph.edges()
        ],
        "missing": graph.missing_factories(),
    }


@click.command("graph")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def graph_command(output_format: str) -> None:
    """Show the factories and dependency edges of the demo graph."""
    graph = build_graph()
    if output_format == "json":
        click.echo(json.dumps(graph_to_dict(graph), indent=2))
    else:
        from quarry.cli.output import print_graph
        print_graph(graph)
