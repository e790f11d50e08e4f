"""Configuration helpers for the upset harvester."""

from __future__ import annotations

import os
from dataclasses import dataclass

from startgg_client.api import (
    DEFAULT_GRAPHQL_URL,
    DEFAULT_REQUESTS_PER_MINUTE,
    DEFAULT_REST_URL,
)
from startgg_client.pagination import DEFAULT_WINDOW_PAGES

from .pronouns import PronounPolicy, parse_policy

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def env_bool(name: str, *, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


def env_int(name: str, *, default: int | None = None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, *, default: float | None = None) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def env_int_list(name: str, *, default: tuple[int, ...] = ()) -> tuple[int, ...]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    values: list[int] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            values.append(int(part))
        except ValueError as exc:
            raise RuntimeError(f"Invalid integer in {name}: {part}") from exc
    return tuple(values) or default


@dataclass(slots=True)
class HarvesterConfig:
    api_key: str
    requests_per_minute: int = DEFAULT_REQUESTS_PER_MINUTE
    graphql_url: str = DEFAULT_GRAPHQL_URL
    rest_url: str = DEFAULT_REST_URL
    max_attempts: int | None = None
    max_retry_delay: float | None = None
    videogame_ids: tuple[int, ...] = (1,)
    window_pages: int = DEFAULT_WINDOW_PAGES
    after_date: int | None = None
    pronoun_policy: PronounPolicy = PronounPolicy.INCLUSIVE
    output_dir: str = "csv"
    table_name: str | None = None
    aws_region: str = "us-east-1"
    abort_on_error: bool = False

    @classmethod
    def load(cls) -> HarvesterConfig:
        missing: list[str] = []

        def need(name: str) -> str:
            value = os.getenv(name)
            if not value:
                missing.append(name)
                return ""
            return value

        api_key = need("STARTGG_API_KEY")

        if missing:
            raise RuntimeError("Missing env vars: " + ", ".join(sorted(set(missing))))

        try:
            pronoun_policy = parse_policy(os.getenv("UPSET_PRONOUN_POLICY"))
        except ValueError as exc:
            raise RuntimeError(str(exc)) from exc

        return cls(
            api_key=api_key,
            requests_per_minute=env_int(
                "STARTGG_REQUESTS_PER_MINUTE", default=DEFAULT_REQUESTS_PER_MINUTE
            ),
            graphql_url=os.getenv("STARTGG_GQL_URL") or DEFAULT_GRAPHQL_URL,
            rest_url=os.getenv("STARTGG_REST_URL") or DEFAULT_REST_URL,
            max_attempts=env_int("STARTGG_MAX_ATTEMPTS"),
            max_retry_delay=env_float("STARTGG_MAX_RETRY_DELAY"),
            videogame_ids=env_int_list("UPSET_VIDEOGAME_IDS", default=(1,)),
            window_pages=env_int("UPSET_WINDOW_PAGES", default=DEFAULT_WINDOW_PAGES),
            after_date=env_int("UPSET_AFTER_DATE"),
            pronoun_policy=pronoun_policy,
            output_dir=os.getenv("UPSET_OUTPUT_DIR") or "csv",
            table_name=os.getenv("UPSET_TABLE_NAME") or None,
            aws_region=os.getenv("AWS_REGION", "us-east-1"),
            abort_on_error=env_bool("UPSET_ABORT_ON_ERROR"),
        )


__all__ = [
    "HarvesterConfig",
    "env_bool",
    "env_float",
    "env_int",
    "env_int_list",
]
