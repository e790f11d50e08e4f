from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Final, Literal

import aiohttp

from .ratelimit import NoopRateLimiter, RateLimiter

log: Final = logging.getLogger("startgg-client")

TRANSIENT_STATUSES: Final = frozenset({501, 502, 503, 504})
DEFAULT_BASE_DELAY: Final = 1.0

RequestStatus = Literal["ok", "transient", "fatal"]


class StartggError(Exception):
    """Base exception for start.gg request failures."""


class RequestFailedError(StartggError):
    """Raised for failures that must not be retried."""

    def __init__(self, message: str, *, http_status: int | None = None) -> None:
        super().__init__(message)
        self.http_status = http_status


class RetriesExhaustedError(StartggError):
    """Raised when a configured attempt limit is reached."""


@dataclass(slots=True)
class RequestResult:
    """Classified outcome of a single request attempt."""

    status: RequestStatus
    payload: Any = None
    error: str | None = None
    http_status: int | None = None


def _classify_status(http_status: int) -> RequestResult | None:
    if http_status in TRANSIENT_STATUSES:
        return RequestResult(
            status="transient", error=f"HTTP {http_status}", http_status=http_status
        )
    if not 200 <= http_status < 300:
        return RequestResult(
            status="fatal", error=f"HTTP {http_status}", http_status=http_status
        )
    return None


def classify_graphql(http_status: int, body: Any) -> RequestResult:
    failure = _classify_status(http_status)
    if failure is not None:
        return failure
    if not isinstance(body, dict):
        return RequestResult(
            status="transient", error="Malformed response body", http_status=http_status
        )
    errors = body.get("errors")
    if errors:
        first = errors[0] if isinstance(errors, list) else errors
        message = first.get("message") if isinstance(first, dict) else str(first)
        return RequestResult(
            status="fatal",
            error=message or "GraphQL error",
            http_status=http_status,
        )
    data = body.get("data")
    if not isinstance(data, dict):
        return RequestResult(
            status="transient", error="Response is missing data", http_status=http_status
        )
    return RequestResult(status="ok", payload=data, http_status=http_status)


def classify_entities(http_status: int, body: Any) -> RequestResult:
    failure = _classify_status(http_status)
    if failure is not None:
        return failure
    if not isinstance(body, dict) or "entities" not in body:
        return RequestResult(
            status="transient",
            error="Response is missing entities",
            http_status=http_status,
        )
    return RequestResult(status="ok", payload=body["entities"], http_status=http_status)


async def _read_json(resp: aiohttp.ClientResponse) -> Any:
    try:
        return await resp.json(content_type=None)
    except ValueError:
        return None


class RetryingRequester:
    """Send start.gg requests and retry transient failures with doubling delays.

    GraphQL calls pass through ``limiter``; plain JSON calls pass through
    ``rest_limiter`` which defaults to no limiting at all. Retries are
    unbounded unless ``max_attempts`` is given.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        token: str,
        graphql_url: str,
        limiter: RateLimiter | NoopRateLimiter | None = None,
        rest_limiter: RateLimiter | NoopRateLimiter | None = None,
        base_delay: float = DEFAULT_BASE_DELAY,
        max_attempts: int | None = None,
        max_delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._session = session
        self._token = token
        self._graphql_url = graphql_url
        self._limiter = limiter or NoopRateLimiter()
        self._rest_limiter = rest_limiter or NoopRateLimiter()
        self._base_delay = base_delay
        self._max_attempts = max_attempts
        self._max_delay = max_delay
        self._sleep = sleep

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }

    async def post_graphql(
        self, query: str, variables: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Run a GraphQL query and return its ``data`` object."""
        body = {"query": query, "variables": dict(variables or {})}

        async def send() -> tuple[int, Any]:
            async with self._session.post(
                self._graphql_url, json=body, headers=self._headers()
            ) as resp:
                return resp.status, await _read_json(resp)

        async def attempt() -> RequestResult:
            try:
                http_status, payload = await self._limiter.schedule(send)
            except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                return RequestResult(status="transient", error=str(exc) or repr(exc))
            return classify_graphql(http_status, payload)

        return await self._run(f"GraphQL {self._graphql_url}", attempt)

    async def get_json(
        self, url: str, params: Mapping[str, Any] | list[tuple[str, Any]] | None = None
    ) -> dict[str, Any]:
        """Fetch a JSON document and return its ``entities`` envelope."""

        async def send() -> tuple[int, Any]:
            async with self._session.get(url, params=params) as resp:
                return resp.status, await _read_json(resp)

        async def attempt() -> RequestResult:
            try:
                http_status, payload = await self._rest_limiter.schedule(send)
            except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                return RequestResult(status="transient", error=str(exc) or repr(exc))
            return classify_entities(http_status, payload)

        return await self._run(f"GET {url}", attempt)

    async def _run(
        self, description: str, attempt: Callable[[], Awaitable[RequestResult]]
    ) -> Any:
        delay: float | None = None
        attempts = 0
        while True:
            if delay is not None:
                log.info("Retrying after %.1f seconds.", delay)
                await self._sleep(delay)
            attempts += 1
            result = await attempt()
            if result.status == "ok":
                return result.payload
            if result.status == "fatal":
                log.error("%s failed: %s", description, result.error)
                raise RequestFailedError(
                    result.error or "Request failed", http_status=result.http_status
                )

            log.warning(
                "%s transient failure (attempt %d): %s",
                description,
                attempts,
                result.error,
            )
            if self._max_attempts is not None and attempts >= self._max_attempts:
                raise RetriesExhaustedError(
                    f"{description} still failing after {attempts} attempts: {result.error}"
                )
            delay = self._base_delay if delay is None else delay * 2
            if self._max_delay is not None:
                delay = min(delay, self._max_delay)


__all__ = [
    "RequestFailedError",
    "RequestResult",
    "RetriesExhaustedError",
    "RetryingRequester",
    "StartggError",
    "TRANSIENT_STATUSES",
    "classify_entities",
    "classify_graphql",
]
