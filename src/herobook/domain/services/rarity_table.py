"""Declarative rarity weights and the pure sampler used for item drops.

The table is data: a tuple of ``(rarity, weight)`` rows whose weights sum to
100. Level skew is expressed as per-rarity deltas applied to a copy of the
baseline, so the baseline never drifts between rolls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from herobook.domain.models.item import Rarity


@dataclass(frozen=True)
class WeightedEntry:
    rarity: Rarity
    weight: int


BASE_RARITY_WEIGHTS: tuple[WeightedEntry, ...] = (
    WeightedEntry(Rarity.COMMON, 50),
    WeightedEntry(Rarity.UNCOMMON, 25),
    WeightedEntry(Rarity.RARE, 15),
    WeightedEntry(Rarity.LEGENDARY, 10),
)

# (minimum level, deltas); first matching band wins.
LEVEL_SKEW_BANDS: tuple[tuple[int, dict[Rarity, int]], ...] = (
    (20, {Rarity.COMMON: -15, Rarity.UNCOMMON: 5, Rarity.RARE: 5, Rarity.LEGENDARY: 5}),
    (10, {Rarity.COMMON: -6, Rarity.UNCOMMON: 3, Rarity.RARE: 3}),
)


def rarity_table_for_level(
    level: int,
    *,
    base: Sequence[WeightedEntry] = BASE_RARITY_WEIGHTS,
) -> tuple[WeightedEntry, ...]:
    deltas: dict[Rarity, int] = {}
    for minimum_level, band in LEVEL_SKEW_BANDS:
        if int(level) >= minimum_level:
            deltas = band
            break
    return tuple(
        WeightedEntry(entry.rarity, max(0, entry.weight + deltas.get(entry.rarity, 0)))
        for entry in base
    )


def total_weight(table: Sequence[WeightedEntry]) -> int:
    return sum(int(entry.weight) for entry in table)


def pick_weighted(table: Sequence[WeightedEntry], roll: float) -> Rarity:
    """Map a roll in ``[0, total_weight)`` onto the cumulative buckets of ``table``."""
    if not table:
        raise ValueError("Rarity table is empty")
    cumulative = 0
    for entry in table:
        cumulative += int(entry.weight)
        if roll < cumulative:
            return entry.rarity
    return table[-1].rarity
