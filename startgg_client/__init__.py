"""start.gg transport: rate limiting, retries, pagination and named queries."""

from .api import StartggClient, connect
from .pagination import WatermarkPaginator, iter_pages, paginate
from .ratelimit import NoopRateLimiter, RateLimiter
from .requester import (
    RequestFailedError,
    RequestResult,
    RetriesExhaustedError,
    RetryingRequester,
    StartggError,
)

__all__ = [
    "NoopRateLimiter",
    "RateLimiter",
    "RequestFailedError",
    "RequestResult",
    "RetriesExhaustedError",
    "RetryingRequester",
    "StartggClient",
    "StartggError",
    "WatermarkPaginator",
    "connect",
    "iter_pages",
    "paginate",
]
