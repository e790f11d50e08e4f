from __future__ import annotations

from typing import Any

import pytest

from upset_finder import ReconciliationContext


class FakeStartggClient:
    """In-memory stand-in for ``StartggClient``."""

    def __init__(
        self,
        *,
        listing_pages: list[list[dict[str, Any]]] | None = None,
        phase_groups: dict[int, list[dict[str, Any]]] | None = None,
        group_details: dict[int, dict[str, Any]] | None = None,
        participant_pages: dict[int, list[list[dict[str, Any]]]] | None = None,
    ) -> None:
        self.listing_pages = listing_pages or []
        self.phase_groups = phase_groups or {}
        self.group_details = group_details or {}
        self.participant_pages = participant_pages or {}
        self.listing_calls: list[tuple[int, int | None]] = []
        self.participant_calls: list[tuple[int, int]] = []
        self.detail_calls: list[int] = []

    async def tournaments_page(self, page: int, after_date: int | None = None):
        self.listing_calls.append((page, after_date))
        pages = self.listing_pages
        if page > len(pages):
            return [], len(pages)
        return pages[page - 1], len(pages)

    async def event_phase_groups(self, event_id: int):
        return self.phase_groups.get(event_id, [])

    async def event_participants_page(self, event_id: int, page: int):
        self.participant_calls.append((event_id, page))
        pages = self.participant_pages.get(event_id, [])
        if page > len(pages):
            return [], len(pages)
        return pages[page - 1], len(pages)

    async def phase_group_detail(self, group_id: int):
        self.detail_calls.append(group_id)
        return self.group_details[group_id]


def build_group(
    entrants: list[tuple[int, str, int | None, int, str | None]],
    sets: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Build a phase group ``entities`` payload.

    Each entrant is ``(entrant_id, name, seed, player_id, pronouns)``; a
    pronoun of None leaves the embedded player without a user link.
    """
    seeds = []
    for entrant_id, name, seed_num, player_id, pronouns in entrants:
        participant_id = entrant_id * 10
        player: dict[str, Any] = {"id": player_id, "gamerTag": name}
        if pronouns is not None:
            player["user"] = {"genderPronoun": pronouns, "slug": f"user/{name.lower()}"}
        seeds.append(
            {
                "id": entrant_id * 100,
                "entrantId": entrant_id,
                "seedNum": seed_num,
                "groupSeedNum": 1,
                "mutations": {
                    "entrants": {
                        str(entrant_id): {
                            "id": entrant_id,
                            "name": name,
                            "participantIds": [participant_id],
                        }
                    },
                    "participants": {
                        str(participant_id): {
                            "id": participant_id,
                            "playerId": player_id,
                            "gamerTag": name,
                        }
                    },
                    "players": {str(player_id): player},
                },
            }
        )
    return {"seeds": seeds, "sets": sets or []}


def build_set(
    set_id: int,
    entrant_a: int | None,
    entrant_b: int | None,
    winner: int | None,
    score: tuple[int | None, int | None] = (2, 1),
    **extra: Any,
) -> dict[str, Any]:
    raw = {
        "id": set_id,
        "entrant1Id": entrant_a,
        "entrant2Id": entrant_b,
        "entrant1Score": score[0],
        "entrant2Score": score[1],
        "winnerId": winner,
    }
    raw.update(extra)
    return raw


def participant_node(
    entrant_id: int, player_id: int, tag: str, pronouns: str | None
) -> dict[str, Any]:
    user = None if pronouns is None else {"genderPronoun": pronouns, "slug": f"user/{tag}"}
    return {
        "id": entrant_id,
        "participants": [{"player": {"id": player_id, "gamerTag": tag, "user": user}}],
    }


@pytest.fixture
def fake_client_cls():
    return FakeStartggClient


@pytest.fixture
def group_builder():
    return build_group


@pytest.fixture
def set_builder():
    return build_set


@pytest.fixture
def participant_builder():
    return participant_node


@pytest.fixture
def context() -> ReconciliationContext:
    return ReconciliationContext()
