"""Translate between on-disk character records and ``Character``.

Field names on disk are kept readable by the legacy bot (``maxHp``, ``def``,
``lvl``, ...). Every record written carries ``schemaVersion``; anything older
goes through ``upgrade_record`` before it is decoded.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from herobook.domain.models.character import Character
from herobook.domain.models.character_class import CLASS_PROFILES, DEFAULT_CLASS, CharacterClass
from herobook.domain.models.progression import level_from_xp


SCHEMA_VERSION = 1

# (Character attribute, record key)
_FIELDS = (
    ("name", "name"),
    ("class_name", "class"),
    ("hp", "hp"),
    ("max_hp", "maxHp"),
    ("mp", "mp"),
    ("max_mp", "maxMp"),
    ("atk", "atk"),
    ("defense", "def"),
    ("spd", "spd"),
    ("xp", "xp"),
    ("level", "lvl"),
    ("skill_points", "skillPoints"),
    ("abilities", "abilities"),
    ("color", "color"),
    ("inventory", "inventory"),
    ("equipped_weapon", "equipped_weapon"),
    ("equipped_armor", "equipped_armor"),
    ("gold", "gold"),
    ("daily_explorations", "dailyExplorations"),
    ("last_daily_reset", "lastDailyReset"),
    ("session_xp_gained", "sessionXpGained"),
    ("last_session_reset", "lastSessionReset"),
    ("created_at", "createdAt"),
)


def _upgrade_v0(record: Dict[str, Any], *, player_id: str, now_ms: int) -> Dict[str, Any]:
    class_name = CharacterClass.normalize(record.get("class")) or DEFAULT_CLASS
    profile = CLASS_PROFILES[class_name]
    record["class"] = class_name
    record.setdefault("name", f"Player{str(player_id)[:4]}")
    record.setdefault("xp", 0)
    record.setdefault("skillPoints", 0)
    record.setdefault("hp", 20)
    record.setdefault("maxHp", 20)
    record.setdefault("mp", 10)
    record.setdefault("maxMp", 10)
    record.setdefault("atk", 5)
    record.setdefault("def", 2)
    record.setdefault("spd", 2)
    if not record.get("abilities"):
        record["abilities"] = list(profile.abilities)
    if not record.get("color"):
        record["color"] = profile.color
    if not isinstance(record.get("inventory"), dict):
        record["inventory"] = {}
    record.setdefault("equipped_weapon", None)
    record.setdefault("equipped_armor", None)
    record.setdefault("gold", 0)
    record.setdefault("dailyExplorations", 0)
    record.setdefault("lastDailyReset", now_ms)
    record.setdefault("sessionXpGained", 0)
    record.setdefault("lastSessionReset", now_ms)
    record.setdefault("createdAt", now_ms)
    return record


def upgrade_record(raw: Mapping[str, Any], *, player_id: str, now_ms: int) -> Dict[str, Any]:
    record = dict(raw)
    try:
        version = int(record.get("schemaVersion") or 0)
    except (TypeError, ValueError):
        version = 0
    if version < 1:
        record = _upgrade_v0(record, player_id=player_id, now_ms=now_ms)
    record["schemaVersion"] = SCHEMA_VERSION
    return record


def character_from_record(record: Mapping[str, Any]) -> Character:
    kwargs = {attr: record[key] for attr, key in _FIELDS if key in record}
    kwargs["inventory"] = dict(kwargs.get("inventory") or {})
    kwargs["abilities"] = list(kwargs.get("abilities") or [])
    character = Character(**kwargs)
    character.level = level_from_xp(character.xp)
    return character


def character_to_record(character: Character) -> Dict[str, Any]:
    record: Dict[str, Any] = {key: getattr(character, attr) for attr, key in _FIELDS}
    record["inventory"] = dict(character.inventory)
    record["abilities"] = list(character.abilities)
    record["lvl"] = level_from_xp(character.xp)
    record["schemaVersion"] = SCHEMA_VERSION
    return record
