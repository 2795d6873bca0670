"""Polling loop that reports build status changes, like the explore page's 5 s poll."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from goat.builds.status import build_status_payload
from goat.clients.github import GitHubActionsClient, GitHubError

logger = logging.getLogger(__name__)


async def poll_build_status(client: GitHubActionsClient) -> dict[str, Any]:
    """Current build status; any failure degrades to ``{"isBuilding": False}``."""
    if not client.configured:
        return {"isBuilding": False}
    try:
        run = await client.latest_run()
    except GitHubError as exc:
        logger.warning("build_status_unavailable error=%s", exc)
        return {"isBuilding": False}
    return build_status_payload(run)


async def watch_builds(
    client: GitHubActionsClient,
    *,
    iterations: int = 10,
    interval_s: float = 5.0,
    on_status: Callable[[int, dict[str, Any]], None] | None = None,
) -> list[dict[str, Any]]:
    """Poll ``iterations`` times, sleeping ``interval_s`` between polls."""
    statuses: list[dict[str, Any]] = []
    for index in range(iterations):
        status = await poll_build_status(client)
        statuses.append(status)
        if on_status is not None:
            on_status(index, status)
        if index + 1 < iterations:
            await asyncio.sleep(interval_s)
    return statuses
