from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from herobook.domain.errors import InvalidArgumentError
from herobook.domain.models.character_class import DEFAULT_CLASS, ClassProfile


EQUIPMENT_SLOTS: tuple[str, ...] = ("weapon", "armor")


def _non_negative(value, fallback: int = 0) -> int:
    try:
        return max(0, int(value))
    except Exception:
        return max(0, int(fallback))


@dataclass
class Character:
    name: str
    class_name: str = DEFAULT_CLASS
    hp: int = 20
    max_hp: int = 20
    mp: int = 10
    max_mp: int = 10
    atk: int = 5
    defense: int = 2
    spd: int = 2
    xp: int = 0
    level: int = 1
    skill_points: int = 0
    abilities: List[str] = field(default_factory=list)
    color: int = 0
    inventory: Dict[str, int] = field(default_factory=dict)
    equipped_weapon: Optional[str] = None
    equipped_armor: Optional[str] = None
    gold: int = 0
    daily_explorations: int = 0
    last_daily_reset: int = 0
    session_xp_gained: int = 0
    last_session_reset: int = 0
    created_at: int = 0

    def __post_init__(self) -> None:
        inventory: Dict[str, int] = {}
        if isinstance(self.inventory, dict):
            for raw_id, raw_qty in self.inventory.items():
                item_id = str(raw_id or "").strip()
                qty = _non_negative(raw_qty)
                if item_id and qty > 0:
                    inventory[item_id] = inventory.get(item_id, 0) + qty
        self.inventory = inventory

        self.abilities = [str(name) for name in (self.abilities or [])]
        for attr in ("atk", "defense", "spd", "xp", "skill_points", "gold", "daily_explorations", "session_xp_gained"):
            setattr(self, attr, _non_negative(getattr(self, attr)))
        self.level = max(1, int(self.level or 1))
        self.clamp_vitals()

    def clamp_vitals(self) -> None:
        self.max_hp = _non_negative(self.max_hp)
        self.max_mp = _non_negative(self.max_mp)
        self.hp = min(self.max_hp, _non_negative(self.hp))
        self.mp = min(self.max_mp, _non_negative(self.mp))

    def equipped_in(self, slot: str) -> Optional[str]:
        if slot == "weapon":
            return self.equipped_weapon
        if slot == "armor":
            return self.equipped_armor
        return None

    def set_equipped(self, slot: str, item_id: Optional[str]) -> None:
        if slot == "weapon":
            self.equipped_weapon = item_id
        elif slot == "armor":
            self.equipped_armor = item_id


def new_character(name: str, profile: ClassProfile, *, now_ms: int) -> Character:
    """Build a level 1 character from a class profile's base stats."""
    stats = profile.base_stats
    return Character(
        name=name,
        class_name=profile.slug,
        hp=stats["hp"],
        max_hp=stats["maxHp"],
        mp=stats["mp"],
        max_mp=stats["maxMp"],
        atk=stats["atk"],
        defense=stats["def"],
        spd=stats["spd"],
        abilities=list(profile.abilities),
        color=profile.color,
        last_daily_reset=now_ms,
        last_session_reset=now_ms,
        created_at=now_ms,
    )


NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 32
_PLAYER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9_.-]{0,63}$")


def sanitize_name(raw_name: str | None, *, player_id: str) -> str:
    """Strip control characters and markup brackets, then trim.

    A blank name falls back to ``Player`` plus the first four characters of
    the player id.
    """
    cleaned = "".join(ch for ch in str(raw_name or "") if unicodedata.category(ch)[0] != "C")
    cleaned = cleaned.replace("<", "").replace(">", "").strip()
    if not cleaned:
        cleaned = f"Player{str(player_id)[:4]}"
    if not (NAME_MIN_LENGTH <= len(cleaned) <= NAME_MAX_LENGTH):
        raise InvalidArgumentError(
            f"Name must be {NAME_MIN_LENGTH}-{NAME_MAX_LENGTH} characters long"
        )
    return cleaned


def validate_player_id(player_id: str | None) -> str:
    value = str(player_id or "")
    if not _PLAYER_ID_PATTERN.match(value):
        raise InvalidArgumentError(f"Invalid player id: {player_id!r}")
    return value
