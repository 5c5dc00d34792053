from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Npc:
    """A transient combat opponent; never persisted."""

    name: str
    hp: int
    atk: int
    level: int
    defense: int = 2
    spd: int = 2
    boss: bool = False

    @property
    def defeated(self) -> bool:
        return self.hp <= 0
