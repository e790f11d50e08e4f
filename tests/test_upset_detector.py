import pytest

from upset_finder import (
    Entrant,
    Event,
    Match,
    PronounPolicy,
    Tournament,
    UpsetDetector,
)

TOURNAMENT = Tournament(slug="tournament/genesis", name="Genesis", start_at=1_700_000_000)
EVENT = Event(id=77, name="Melee Singles")


def make_entrants(
    seed_a: int | None = 5,
    seed_b: int | None = 40,
    pronouns_a: str = "he/him",
    pronouns_b: str = "she/her",
) -> dict[int, Entrant]:
    return {
        1: Entrant(entrant_id=1, display_name="Favorite", seed=seed_a, pronouns=pronouns_a),
        2: Entrant(entrant_id=2, display_name="Underdog", seed=seed_b, pronouns=pronouns_b),
    }


def make_match(winner: int | None = 2, score=(1, 2), **kwargs) -> Match:
    return Match(
        set_id="s1",
        entrant_a_id=kwargs.pop("entrant_a_id", 1),
        entrant_b_id=kwargs.pop("entrant_b_id", 2),
        score_a=score[0],
        score_b=score[1],
        winner_id=winner,
        **kwargs,
    )


def test_lower_seed_win_is_recorded():
    record = UpsetDetector().detect(make_match(), make_entrants(), TOURNAMENT, EVENT)

    assert record is not None
    assert record.as_row() == (
        "Underdog",
        "she/her",
        40,
        "Favorite",
        "he/him",
        5,
        6,
        "Genesis",
        "Melee Singles",
        1_700_000_000_000,
    )
    assert record.tournament_slug == "tournament/genesis"
    assert record.event_id == 77
    assert record.set_id == "s1"


def test_slot_order_does_not_matter():
    entrants = make_entrants(seed_a=40, seed_b=5, pronouns_a="she/her", pronouns_b="he/him")

    record = UpsetDetector().detect(make_match(winner=1), entrants, TOURNAMENT, EVENT)

    assert record is not None
    assert record.winner_seed == 40
    assert record.factor == 6


def test_higher_seed_win_is_not_an_upset():
    assert UpsetDetector().detect(make_match(winner=1), make_entrants(), TOURNAMENT, EVENT) is None


@pytest.mark.parametrize("winner", [1, 2])
def test_same_tier_is_never_an_upset(winner):
    entrants = make_entrants(seed_a=5, seed_b=6, pronouns_a="she/her")

    assert UpsetDetector().detect(make_match(winner=winner), entrants, TOURNAMENT, EVENT) is None


@pytest.mark.parametrize(
    "match",
    [
        make_match(winner=None),
        make_match(score=(-1, 0)),
        make_match(score=(2, -1)),
        make_match(entrant_a_id=None),
        make_match(disqualified=True),
    ],
)
def test_incomplete_matches_are_skipped(match):
    assert UpsetDetector().detect(match, make_entrants(), TOURNAMENT, EVENT) is None


def test_out_of_range_seed_is_skipped():
    entrants = make_entrants(seed_a=5, seed_b=4000)

    assert UpsetDetector().detect(make_match(), entrants, TOURNAMENT, EVENT) is None


def test_unknown_entrant_is_skipped():
    entrants = make_entrants()
    del entrants[1]

    assert UpsetDetector().detect(make_match(), entrants, TOURNAMENT, EVENT) is None


@pytest.mark.parametrize("pronouns", ["he/him", "", "he/they"])
def test_winner_pronouns_must_match(pronouns):
    entrants = make_entrants(pronouns_b=pronouns)

    assert UpsetDetector().detect(make_match(), entrants, TOURNAMENT, EVENT) is None


def test_they_them_follows_policy():
    entrants = make_entrants(pronouns_b="they/them")

    assert UpsetDetector(PronounPolicy.INCLUSIVE).detect(
        make_match(), entrants, TOURNAMENT, EVENT
    ) is not None
    assert UpsetDetector(PronounPolicy.STRICT).detect(
        make_match(), entrants, TOURNAMENT, EVENT
    ) is None


def test_scan_keeps_qualifying_records_in_order():
    entrants = make_entrants()
    entrants[3] = Entrant(entrant_id=3, display_name="Third", seed=200, pronouns="any/all")
    matches = [
        make_match(),
        make_match(winner=1),
        Match("s3", 3, 1, 3, 0, 3),
    ]

    records = UpsetDetector().scan(matches, entrants, TOURNAMENT, EVENT)

    assert [record.winner_name for record in records] == ["Underdog", "Third"]
    assert records[1].factor == 15 - 4


def test_match_from_api_reads_dq_display_score():
    match = Match.from_api(
        {
            "id": 9,
            "entrant1Id": 1,
            "entrant2Id": 2,
            "entrant1Score": 0,
            "entrant2Score": 0,
            "winnerId": 2,
            "displayScore": "DQ",
        }
    )

    assert match.disqualified is True
    assert match.is_complete is False
    assert match.set_id == "9"
