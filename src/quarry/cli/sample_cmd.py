"""``quarry sample`` -- Resolve the demo inbox response.

Builds the demo graph, resolves ``response`` for a request with the given
token, and prints the result.

Exit Codes:
    0 -- Response resolved and displayed.
    1 -- Resolution failed (factory error, missing factory, timeout).
    2 -- Invalid settings or usage.
"""

from __future__ import annotations

import json
import logging
import sys

import click

from quarry.core.context import Context
from quarry.exceptions import ContextError, ResolutionError
from quarry.sample import RESPONSE, SampleRequest, SampleResponse, build_graph

logger = logging.getLogger(__name__)


def resolve_sample(request: SampleRequest, timeout: float | None = None) -> SampleResponse:
    """Resolve the demo response for ``request`` on a fresh graph.

    Raises:
        ContextError: ``timeout`` elapsed before resolution finished.
        ResolutionError: The demo graph could not be resolved.
        Exception: Whatever a demo factory raised.
    """
    graph = build_graph()
    ctx = Context.background()
    if timeout is not None:
        ctx = ctx.with_timeout(timeout)
    try:
        return graph.get_typed(ctx, request, RESPONSE, SampleResponse)
    finally:
        ctx.cancel()


@click.command("sample")
@click.option(
    "--token",
    default="0xdeadbeef",
    show_default=True,
    help="Authentication token sent with the request.",
)
@click.option(
    "--unread/--no-unread",
    "show_unread",
    default=None,
    help="Include unread notifications (default from settings).",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Deadline in seconds for the resolution.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
@click.pass_context
def sample_command(
    click_ctx: click.Context,
    token: str,
    show_unread: bool | None,
    timeout: float | None,
    output_format: str,
) -> None:
    """Resolve the demo inbox response and print it.

    Exit code 0 on success, 1 if resolution fails.
    """
    settings = click_ctx.obj["settings"]
    if show_unread is None:
        show_unread = settings.show_unread
    if timeout is None:
        timeout = settings.timeout

    request = SampleRequest(token=token, show_unread=show_unread)
    try:
        response = resolve_sample(request, timeout=timeout)
    except (ResolutionError, ContextError, PermissionError) as exc:
        logger.debug("Sample resolution failed", exc_info=True)
        if output_format == "json":
            click.echo(json.dumps({"error": str(exc)}))
        else:
            click.echo(f"Error: {exc}")
        sys.exit(1)

    if output_format == "json":
        click.echo(json.dumps(response.to_dict(), indent=2))
    else:
        from quarry.cli.output import print_response
        print_response(response)
