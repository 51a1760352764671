"""The top-level ``response`` factory of the demo graph."""

from __future__ import annotations

from typing import Any

from quarry.core.context import Context
from quarry.core.factory import Dependencies
from quarry.core.graph import Quarry
from quarry.sample.models import Inbox, SampleResponse, User


def build_response(ctx: Context, params: Any, deps: Dependencies) -> SampleResponse:
    return SampleResponse(
        user=deps.typed("user", User),
        inbox=deps.typed("inbox", Inbox),
    )


def register(graph: Quarry) -> None:
    graph.add_factory("response", build_response)
    graph.add_dependency("response", "user")
    graph.add_dependency("response", "inbox")
