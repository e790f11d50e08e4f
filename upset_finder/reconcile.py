from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import Any, Final

from startgg_client import StartggClient, iter_pages

from .models import Entrant, Player

log: Final = logging.getLogger("upset-finder")


class ReconciliationContext:
    """Player records looked up so far, keyed by player id.

    Records are only ever added or improved: a known pronoun or profile slug
    is never replaced by an empty one.
    """

    def __init__(self, players: Iterable[Player] = ()) -> None:
        self._players: dict[int, Player] = {}
        for player in players:
            self.upsert(player)

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._players

    def __len__(self) -> int:
        return len(self._players)

    def __iter__(self) -> Iterator[Player]:
        return iter(self._players.values())

    def get(self, player_id: int | None) -> Player | None:
        if player_id is None:
            return None
        return self._players.get(player_id)

    def upsert(self, player: Player) -> Player:
        existing = self._players.get(player.player_id)
        merged = player if existing is None else existing.merged(player)
        self._players[player.player_id] = merged
        return merged


_LINKED_KINDS: Final = ("entrants", "participants", "players")


class _SnapshotIndex:
    """Lookup of linked entities inside one group detail payload.

    Records embedded in a seed's ``mutations`` take precedence over the
    top-level lists of the payload.
    """

    def __init__(self, entities: dict[str, Any]) -> None:
        self._top: dict[str, dict[str, Any]] = {}
        for kind in _LINKED_KINDS:
            found: dict[str, Any] = {}
            for raw in entities.get(kind) or []:
                if isinstance(raw, dict) and raw.get("id") is not None:
                    found[str(raw["id"])] = raw
            self._top[kind] = found

    def find(self, seed: dict[str, Any], kind: str, key: Any) -> dict[str, Any] | None:
        if key is None:
            return None
        mutations = (seed.get("mutations") or {}).get(kind) or {}
        raw = mutations.get(str(key)) or self._top[kind].get(str(key))
        return raw if isinstance(raw, dict) else None


def _seed_number(seed: dict[str, Any]) -> int | None:
    for name in ("seedNum", "groupSeedNum"):
        value = seed.get(name)
        if value is not None:
            try:
                return int(value)
            except (TypeError, ValueError):
                continue
    return None


class EntityReconciler:
    """Resolve entrant pronouns from group snapshots, then the participants query."""

    def __init__(self, client: StartggClient, context: ReconciliationContext) -> None:
        self._client = client
        self._context = context

    @property
    def context(self) -> ReconciliationContext:
        return self._context

    def entrants_from_snapshot(
        self, groups: Sequence[dict[str, Any]]
    ) -> tuple[dict[int, Entrant], list[int]]:
        """Build entrants from group detail payloads.

        Returns the entrants by id and the ids still waiting on a pronoun
        lookup. The first group an entrant appears in supplies its seed.
        """
        entrants: dict[int, Entrant] = {}
        pending: list[int] = []
        for entities in groups:
            index = _SnapshotIndex(entities)
            for seed in entities.get("seeds") or []:
                entrant_id = seed.get("entrantId")
                if entrant_id is None or int(entrant_id) in entrants:
                    continue
                entrant_id = int(entrant_id)
                entrant_raw = index.find(seed, "entrants", entrant_id) or {}
                participant_ids = entrant_raw.get("participantIds") or [None]
                participant = index.find(seed, "participants", participant_ids[0]) or {}
                player_id = participant.get("playerId")
                player_raw = index.find(seed, "players", player_id)

                entrant = Entrant(
                    entrant_id=entrant_id,
                    display_name=str(
                        entrant_raw.get("name") or participant.get("gamerTag") or ""
                    ),
                    seed=_seed_number(seed),
                    player_id=int(player_id) if player_id is not None else None,
                )
                entrants[entrant_id] = entrant

                if player_raw is not None:
                    player = Player.from_api({"id": player_id, **player_raw})
                    if player.resolved:
                        entrant.apply_player(self._context.upsert(player))
                        continue
                if entrant.player_id is not None:
                    pending.append(entrant_id)
        return entrants, pending

    async def resolve_event(
        self, event_id: int, groups: Sequence[dict[str, Any]]
    ) -> dict[int, Entrant]:
        entrants, pending = self.entrants_from_snapshot(groups)
        missing = {
            entrants[entrant_id].player_id
            for entrant_id in pending
            if entrants[entrant_id].player_id not in self._context
        }
        if missing:
            log.info(
                "event id: %s, looking up %d players missing pronouns",
                event_id,
                len(missing),
            )
            await self._fetch_participants(event_id)
            for player_id in missing:
                if player_id not in self._context:
                    # Looked up with no result; remember it so later events skip it.
                    self._context.upsert(Player(player_id=player_id))

        for entrant_id in pending:
            entrant = entrants[entrant_id]
            player = self._context.get(entrant.player_id)
            if player is not None:
                entrant.apply_player(player)
            else:
                entrant.pronouns = ""
        return entrants

    async def _fetch_participants(self, event_id: int) -> None:
        async def fetch_page(page: int) -> tuple[list[dict[str, Any]], int]:
            return await self._client.event_participants_page(event_id, page)

        async for nodes in iter_pages(fetch_page):
            for node in nodes:
                for participant in node.get("participants") or []:
                    raw_player = (participant or {}).get("player")
                    if not raw_player or raw_player.get("id") is None:
                        continue
                    self._context.upsert(Player.from_api(raw_player))


__all__ = ["EntityReconciler", "ReconciliationContext"]
