from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Final

NOT_PLAYED_SCORE: Final = -1
DQ_DISPLAY_SCORE: Final = "DQ"

# start.gg phase group states
GROUP_STATE_CREATED: Final = 1
GROUP_STATE_ACTIVE: Final = 2
GROUP_STATE_COMPLETED: Final = 3


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(slots=True)
class Event:
    id: int
    name: str

    @classmethod
    def from_api(cls, node: dict[str, Any]) -> Event:
        return cls(id=int(node["id"]), name=str(node.get("name") or ""))


@dataclass(slots=True)
class Tournament:
    slug: str
    name: str
    start_at: int
    events: list[Event] = field(default_factory=list)

    @classmethod
    def from_api(cls, node: dict[str, Any]) -> Tournament:
        return cls(
            slug=str(node["slug"]),
            name=str(node.get("name") or ""),
            start_at=int(node.get("startAt") or 0),
            events=[Event.from_api(event) for event in node.get("events") or []],
        )

    @property
    def start_at_ms(self) -> int:
        return self.start_at * 1000


@dataclass(slots=True)
class PhaseGroup:
    id: int
    state: int | None = None
    phase_order: int = 0

    @classmethod
    def from_api(cls, node: dict[str, Any]) -> PhaseGroup:
        phase = node.get("phase") or {}
        return cls(
            id=int(node["id"]),
            state=_optional_int(node.get("state")),
            phase_order=_optional_int(phase.get("phaseOrder")) or 0,
        )

    @property
    def has_started(self) -> bool:
        return self.state != GROUP_STATE_CREATED


@dataclass(slots=True)
class Player:
    player_id: int
    gamer_tag: str = ""
    pronouns: str = ""
    profile_slug: str = ""

    @property
    def resolved(self) -> bool:
        return bool(self.pronouns)

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> Player:
        """Build a player from either a GraphQL node or a snapshot entity.

        Pronouns may sit on the player itself or on its linked ``user``.
        """
        user = raw.get("user") or {}
        pronouns = raw.get("genderPronoun") or user.get("genderPronoun") or ""
        profile_slug = user.get("slug") or raw.get("userSlug") or ""
        return cls(
            player_id=int(raw["id"]),
            gamer_tag=str(raw.get("gamerTag") or ""),
            pronouns=str(pronouns).strip(),
            profile_slug=str(profile_slug),
        )

    def merged(self, newer: Player) -> Player:
        """Combine two records for the same player without losing data."""
        return Player(
            player_id=self.player_id,
            gamer_tag=newer.gamer_tag or self.gamer_tag,
            pronouns=self.pronouns or newer.pronouns,
            profile_slug=self.profile_slug or newer.profile_slug,
        )


@dataclass(slots=True)
class Entrant:
    entrant_id: int
    display_name: str
    seed: int | None
    pronouns: str = ""
    profile_slug: str = ""
    player_id: int | None = None

    def apply_player(self, player: Player) -> None:
        self.pronouns = player.pronouns
        self.profile_slug = player.profile_slug
        if not self.display_name:
            self.display_name = player.gamer_tag


@dataclass(slots=True)
class Match:
    set_id: str
    entrant_a_id: int | None
    entrant_b_id: int | None
    score_a: int | None
    score_b: int | None
    winner_id: int | None
    disqualified: bool = False

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> Match:
        display_score = str(raw.get("displayScore") or "").strip().upper()
        return cls(
            set_id=str(raw.get("id", "")),
            entrant_a_id=_optional_int(raw.get("entrant1Id")),
            entrant_b_id=_optional_int(raw.get("entrant2Id")),
            score_a=_optional_int(raw.get("entrant1Score")),
            score_b=_optional_int(raw.get("entrant2Score")),
            winner_id=_optional_int(raw.get("winnerId")),
            disqualified=display_score == DQ_DISPLAY_SCORE,
        )

    @property
    def is_complete(self) -> bool:
        if self.entrant_a_id is None or self.entrant_b_id is None:
            return False
        if self.winner_id is None:
            return False
        if NOT_PLAYED_SCORE in (self.score_a, self.score_b):
            return False
        return not self.disqualified


@dataclass(slots=True)
class UpsetRecord:
    winner_name: str
    winner_pronouns: str
    winner_seed: int
    opponent_name: str
    opponent_pronouns: str
    opponent_seed: int
    factor: int
    tournament_name: str
    event_name: str
    start_at_ms: int
    tournament_slug: str = ""
    event_id: int = 0
    set_id: str = ""

    PK_TEMPLATE: ClassVar[str] = "TOURNAMENT#%s"
    SK_TEMPLATE: ClassVar[str] = "EVENT#%s#SET#%s"

    def as_row(self) -> tuple[str | int, ...]:
        return (
            self.winner_name,
            self.winner_pronouns,
            self.winner_seed,
            self.opponent_name,
            self.opponent_pronouns,
            self.opponent_seed,
            self.factor,
            self.tournament_name,
            self.event_name,
            self.start_at_ms,
        )

    @classmethod
    def key(cls, tournament_slug: str, event_id: int, set_id: str) -> dict[str, str]:
        return {
            "pk": cls.PK_TEMPLATE % tournament_slug,
            "sk": cls.SK_TEMPLATE % (event_id, set_id),
        }

    def to_item(self) -> dict[str, object]:
        item = self.key(self.tournament_slug, self.event_id, self.set_id)
        item.update(
            {
                "winner_name": self.winner_name,
                "winner_pronouns": self.winner_pronouns,
                "winner_seed": self.winner_seed,
                "opponent_name": self.opponent_name,
                "opponent_pronouns": self.opponent_pronouns,
                "opponent_seed": self.opponent_seed,
                "factor": self.factor,
                "tournament_name": self.tournament_name,
                "event_name": self.event_name,
                "start_at_ms": self.start_at_ms,
            }
        )
        return item


__all__ = [
    "DQ_DISPLAY_SCORE",
    "Entrant",
    "Event",
    "GROUP_STATE_ACTIVE",
    "GROUP_STATE_COMPLETED",
    "GROUP_STATE_CREATED",
    "Match",
    "NOT_PLAYED_SCORE",
    "PhaseGroup",
    "Player",
    "Tournament",
    "UpsetRecord",
]
