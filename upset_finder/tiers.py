from __future__ import annotations

from typing import Final

# Lowest seed of each tier. Each step roughly matches one round of a
# double-elimination bracket.
SEED_FLOORS: Final[tuple[int, ...]] = (
    1, 2, 3, 4, 5, 7, 9, 13, 17, 25, 33, 49, 65, 97, 129, 193, 257, 385, 513,
    769, 1025, 1537, 2049, 3073,
)  # fmt: skip


def tier_of(seed: int | None) -> int | None:
    """Return the tier index for ``seed`` or None when it has no tier.

    Seeds below 1 and seeds past the last floor have no tier.
    """
    if seed is None:
        return None
    for index, floor in enumerate(SEED_FLOORS):
        if floor == seed:
            return index
        if floor > seed:
            return index - 1 if index > 0 else None
    return None


def tier_distance(seed_a: int | None, seed_b: int | None) -> int | None:
    tier_a = tier_of(seed_a)
    tier_b = tier_of(seed_b)
    if tier_a is None or tier_b is None:
        return None
    return abs(tier_a - tier_b)


__all__ = ["SEED_FLOORS", "tier_distance", "tier_of"]
