from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Final

from .models import Entrant, Event, Match, Tournament, UpsetRecord
from .pronouns import PronounPolicy, matches_she_her
from .tiers import tier_of

log: Final = logging.getLogger("upset-finder")


class UpsetDetector:
    """Decide whether a completed match is a tracked upset."""

    def __init__(self, policy: PronounPolicy = PronounPolicy.INCLUSIVE) -> None:
        self.policy = policy

    def detect(
        self,
        match: Match,
        entrants: Mapping[int, Entrant],
        tournament: Tournament,
        event: Event,
    ) -> UpsetRecord | None:
        if not match.is_complete:
            return None
        entrant_a = entrants.get(match.entrant_a_id)
        entrant_b = entrants.get(match.entrant_b_id)
        if entrant_a is None or entrant_b is None:
            return None

        tier_a = tier_of(entrant_a.seed)
        tier_b = tier_of(entrant_b.seed)
        if tier_a is None or tier_b is None or tier_a == tier_b:
            return None

        # A larger seed number is the worse ranking.
        if entrant_a.seed > entrant_b.seed:
            lower, higher, lower_tier, higher_tier = entrant_a, entrant_b, tier_a, tier_b
        else:
            lower, higher, lower_tier, higher_tier = entrant_b, entrant_a, tier_b, tier_a

        if match.winner_id != lower.entrant_id:
            return None
        if not matches_she_her(lower.pronouns, self.policy):
            return None

        record = UpsetRecord(
            winner_name=lower.display_name,
            winner_pronouns=lower.pronouns,
            winner_seed=lower.seed,
            opponent_name=higher.display_name,
            opponent_pronouns=higher.pronouns,
            opponent_seed=higher.seed,
            factor=abs(lower_tier - higher_tier),
            tournament_name=tournament.name,
            event_name=event.name,
            start_at_ms=tournament.start_at_ms,
            tournament_slug=tournament.slug,
            event_id=event.id,
            set_id=match.set_id,
        )
        log.info(
            "%s (%s), %s seed upset %s (%s), %s seed (factor: %s) at %s - %s",
            record.winner_name,
            record.winner_pronouns,
            record.winner_seed,
            record.opponent_name,
            record.opponent_pronouns,
            record.opponent_seed,
            record.factor,
            record.tournament_name,
            record.event_name,
        )
        return record

    def scan(
        self,
        matches: Iterable[Match],
        entrants: Mapping[int, Entrant],
        tournament: Tournament,
        event: Event,
    ) -> list[UpsetRecord]:
        records: list[UpsetRecord] = []
        for match in matches:
            record = self.detect(match, entrants, tournament, event)
            if record is not None:
                records.append(record)
        return records


__all__ = ["UpsetDetector"]
