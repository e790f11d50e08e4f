from __future__ import annotations

import re
from enum import Enum
from typing import Final

_WORD_PATTERN = re.compile(r"[a-z]+")

SHE_HER: Final = frozenset({"she", "her", "hers"})
HE_HIM: Final = frozenset({"he", "him", "his"})
ANY_ALL: Final = frozenset({"any", "all"})
THEY_THEM: Final = frozenset({"they", "them", "their", "theirs"})


class PronounPolicy(str, Enum):
    STRICT = "strict"
    INCLUSIVE = "inclusive"


def parse_policy(raw: str | None) -> PronounPolicy:
    if raw is None or not raw.strip():
        return PronounPolicy.INCLUSIVE
    try:
        return PronounPolicy(raw.strip().lower())
    except ValueError as exc:
        raise ValueError(f"Unknown pronoun policy: {raw}") from exc


def matches_she_her(
    pronouns: str | None, policy: PronounPolicy = PronounPolicy.INCLUSIVE
) -> bool:
    """Return True when free-text pronouns fall in the tracked subset.

    Words are compared whole, so "they" does not count as "he".
    """
    if not pronouns:
        return False
    words = set(_WORD_PATTERN.findall(pronouns.lower()))
    if words & SHE_HER:
        return True
    if words & HE_HIM:
        return False
    if words & ANY_ALL:
        return True
    return policy is PronounPolicy.INCLUSIVE and bool(words & THEY_THEM)


__all__ = ["PronounPolicy", "matches_she_her", "parse_policy"]
