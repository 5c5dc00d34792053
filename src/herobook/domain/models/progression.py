from __future__ import annotations

from dataclasses import dataclass

from herobook.domain.errors import InvalidArgumentError


XP_PER_LEVEL = 20
MAX_SKILL_POINT_SPEND = 100

VALID_SKILL_STATS: tuple[str, ...] = ("hp", "maxhp", "mp", "maxmp", "atk", "def", "spd")


@dataclass(frozen=True)
class ExperiencePoints:
    value: int

    def __post_init__(self) -> None:
        if int(self.value) < 0:
            raise InvalidArgumentError("Experience points cannot be negative")


@dataclass(frozen=True)
class Level:
    value: int

    def __post_init__(self) -> None:
        if int(self.value) < 1:
            raise InvalidArgumentError("Level must be at least 1")


def level_from_xp(xp: int) -> int:
    return Level(1 + ExperiencePoints(int(xp or 0)).value // XP_PER_LEVEL).value


def normalize_skill_stat(raw_stat: str | None) -> str:
    normalized = str(raw_stat or "").strip().lower()
    if normalized not in VALID_SKILL_STATS:
        raise InvalidArgumentError(f"Invalid stat. Must be one of: {', '.join(VALID_SKILL_STATS)}")
    return normalized


def require_positive_int(value: object, *, label: str, maximum: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{label} must be a whole number")
    if value <= 0:
        raise InvalidArgumentError(f"{label} must be positive")
    if maximum is not None and value > maximum:
        raise InvalidArgumentError(f"{label} must be at most {maximum}")
    return value
