from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any, Final

import aiohttp

from .queries import (
    ENTRANTS_PER_PAGE,
    EVENT_PARTICIPANTS_QUERY,
    EVENT_PHASE_GROUPS_QUERY,
    EVENT_TYPE_SINGLES,
    PHASE_GROUP_EXPANDS,
    TOURNAMENTS_PER_PAGE,
    TOURNAMENTS_QUERY,
)
from .ratelimit import NoopRateLimiter, RateLimiter
from .requester import RetryingRequester

log: Final = logging.getLogger("startgg-client")

DEFAULT_GRAPHQL_URL: Final = "https://api.start.gg/gql/alpha"
DEFAULT_REST_URL: Final = "https://api.smash.gg"
DEFAULT_REQUESTS_PER_MINUTE: Final = 75


def _connection(data: dict[str, Any], *path: str) -> tuple[list[dict[str, Any]], int]:
    node: Any = data
    for name in path:
        if not isinstance(node, dict):
            return [], 0
        node = node.get(name)
    if not isinstance(node, dict):
        return [], 0
    nodes = node.get("nodes") or []
    total_pages = (node.get("pageInfo") or {}).get("totalPages") or 0
    return list(nodes), int(total_pages)


class StartggClient:
    """Named start.gg queries on top of a ``RetryingRequester``."""

    def __init__(
        self,
        requester: RetryingRequester,
        *,
        rest_url: str = DEFAULT_REST_URL,
        videogame_ids: Sequence[int] = (1,),
    ) -> None:
        self._requester = requester
        self._rest_url = rest_url.rstrip("/")
        self._videogame_ids = list(videogame_ids)

    async def tournaments_page(
        self, page: int, after_date: int | None = None
    ) -> tuple[list[dict[str, Any]], int]:
        log.info("tournaments page %d", page)
        variables: dict[str, Any] = {
            "page": page,
            "perPage": TOURNAMENTS_PER_PAGE,
            "videogameIds": self._videogame_ids,
            "eventTypes": [EVENT_TYPE_SINGLES],
        }
        if after_date is not None:
            variables["afterDate"] = after_date
        data = await self._requester.post_graphql(TOURNAMENTS_QUERY, variables)
        return _connection(data, "tournaments")

    async def event_phase_groups(self, event_id: int) -> list[dict[str, Any]]:
        data = await self._requester.post_graphql(
            EVENT_PHASE_GROUPS_QUERY, {"id": event_id}
        )
        event = data.get("event") or {}
        return list(event.get("phaseGroups") or [])

    async def event_participants_page(
        self, event_id: int, page: int
    ) -> tuple[list[dict[str, Any]], int]:
        log.info("event id: %s, participants page %d", event_id, page)
        data = await self._requester.post_graphql(
            EVENT_PARTICIPANTS_QUERY,
            {"id": event_id, "page": page, "perPage": ENTRANTS_PER_PAGE},
        )
        return _connection(data, "event", "entrants")

    async def phase_group_detail(self, group_id: int) -> dict[str, Any]:
        params = [("expand[]", expand) for expand in PHASE_GROUP_EXPANDS]
        return await self._requester.get_json(
            f"{self._rest_url}/phase_group/{group_id}", params=params
        )


@asynccontextmanager
async def connect(
    token: str,
    *,
    requests_per_minute: int = DEFAULT_REQUESTS_PER_MINUTE,
    graphql_url: str = DEFAULT_GRAPHQL_URL,
    rest_url: str = DEFAULT_REST_URL,
    videogame_ids: Sequence[int] = (1,),
    max_attempts: int | None = None,
    max_delay: float | None = None,
) -> AsyncIterator[StartggClient]:
    """Open an HTTP session and yield a client sharing one rate limiter."""
    async with aiohttp.ClientSession() as session:
        requester = RetryingRequester(
            session,
            token=token,
            graphql_url=graphql_url,
            limiter=RateLimiter.per_minute(requests_per_minute),
            rest_limiter=NoopRateLimiter(),
            max_attempts=max_attempts,
            max_delay=max_delay,
        )
        yield StartggClient(requester, rest_url=rest_url, videogame_ids=videogame_ids)


__all__ = [
    "DEFAULT_GRAPHQL_URL",
    "DEFAULT_REQUESTS_PER_MINUTE",
    "DEFAULT_REST_URL",
    "StartggClient",
    "connect",
]
