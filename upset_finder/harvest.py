"""One harvesting pass over the start.gg tournament listing."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any, Final

from startgg_client import StartggClient, StartggError, WatermarkPaginator
from startgg_client.pagination import DEFAULT_WINDOW_PAGES

from .detector import UpsetDetector
from .models import Event, Match, PhaseGroup, Tournament, UpsetRecord
from .reconcile import EntityReconciler
from .storage import UpsetSink

log: Final = logging.getLogger("upset-finder")


def _listing_key(node: dict[str, Any]) -> int:
    return int(node.get("startAt") or 0)


def _listing_identity(node: dict[str, Any]) -> str:
    return str(node["slug"])


class UpsetHarvester:
    """Walk tournaments, events and phase groups and emit upsets to the sinks.

    Traversal is sequential except for the phase group detail requests of a
    single event, which are all issued at once; if one of them fails the rest
    are cancelled. A request failure inside an
    event skips that event unless ``abort_on_error`` is set; failures on the
    tournament listing always end the run.
    """

    def __init__(
        self,
        client: StartggClient,
        *,
        reconciler: EntityReconciler,
        detector: UpsetDetector,
        sinks: Sequence[UpsetSink] = (),
        window_pages: int = DEFAULT_WINDOW_PAGES,
        after_date: int | None = None,
        abort_on_error: bool = False,
    ) -> None:
        self._client = client
        self._reconciler = reconciler
        self._detector = detector
        self._sinks = list(sinks)
        self._window_pages = window_pages
        self._after_date = after_date
        self._abort_on_error = abort_on_error
        self.skipped_events: list[int] = []

    def paginator(self) -> WatermarkPaginator[dict[str, Any]]:
        return WatermarkPaginator(
            self._client.tournaments_page,
            key=_listing_key,
            identity=_listing_identity,
            window_pages=self._window_pages,
            watermark=self._after_date,
        )

    async def run(self) -> int:
        total = 0
        async for node in self.paginator():
            total += await self.process_tournament(Tournament.from_api(node))
        log.info("Harvest finished with %d upsets", total)
        return total

    async def process_tournament(self, tournament: Tournament) -> int:
        found = 0
        for event in tournament.events:
            try:
                records = await self.process_event(tournament, event)
            except StartggError:
                if self._abort_on_error:
                    raise
                log.exception(
                    "Skipping event %s (%s - %s)", event.id, tournament.name, event.name
                )
                self.skipped_events.append(event.id)
                continue
            for record in records:
                for sink in self._sinks:
                    sink.write(record)
            found += len(records)
        return found

    async def process_event(
        self, tournament: Tournament, event: Event
    ) -> list[UpsetRecord]:
        groups = await self.fetch_groups(event)
        if not groups:
            return []
        entrants = await self._reconciler.resolve_event(event.id, groups)
        matches = [
            Match.from_api(raw)
            for entities in groups
            for raw in entities.get("sets") or []
            if isinstance(raw, dict)
        ]
        return self._detector.scan(matches, entrants, tournament, event)

    async def fetch_groups(self, event: Event) -> list[dict[str, Any]]:
        raw_groups = await self._client.event_phase_groups(event.id)
        groups = sorted(
            (PhaseGroup.from_api(raw) for raw in raw_groups),
            key=lambda group: (group.phase_order, group.id),
        )
        started = [group for group in groups if group.has_started]
        log.info("event id: %s, fetching %d phase groups", event.id, len(started))
        tasks = [
            asyncio.ensure_future(self._client.phase_group_detail(group.id))
            for group in started
        ]
        try:
            details = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return list(details)


__all__ = ["UpsetHarvester"]
