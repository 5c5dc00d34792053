from __future__ import annotations

import asyncio
import copy
import logging
import os
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Callable, Dict, List, Optional

from herobook.domain.errors import AlreadyExistsError, InvalidArgumentError, NotFoundError, PersistenceFailureError
from herobook.domain.models.character import Character, new_character, sanitize_name, validate_player_id
from herobook.domain.models.character_class import class_profile
from herobook.domain.repositories import CharacterRepository
from herobook.infrastructure.file_store.atomic_write import read_json, write_json_atomic
from herobook.infrastructure.file_store.player_locks import PlayerLockTable
from herobook.infrastructure.file_store.record_codec import (
    character_from_record,
    character_to_record,
    upgrade_record,
)


logger = logging.getLogger(__name__)

_RECORD_SUFFIX = ".json"


class FileCharacterStore(CharacterRepository):
    """One JSON file per player, fronted by an in-memory cache.

    The cache is the source of truth once populated. Callers only ever see
    detached copies; a copy reaches the cache after its file write succeeded.
    Mutations hold the player's fail-fast lock for their whole duration.
    """

    def __init__(
        self,
        players_dir: str | Path,
        *,
        legacy_file: str | Path | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.players_dir = Path(players_dir)
        self.legacy_file = Path(legacy_file) if legacy_file else None
        self._clock = clock
        self._cache: Dict[str, Character] = {}
        self._generations: Dict[str, int] = {}
        self._locks = PlayerLockTable()
        self._ready = False
        self._ready_lock = asyncio.Lock()

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _path_for(self, player_id: str) -> Path:
        return self.players_dir / f"{validate_player_id(player_id)}{_RECORD_SUFFIX}"

    @staticmethod
    def _require_profile(class_name: str | None):
        profile = class_profile(class_name)
        if profile is None:
            raise InvalidArgumentError(f"Unknown class: {class_name}")
        return profile

    # lifecycle

    async def start(self) -> int:
        """Create the players directory and run the one-time legacy migration."""
        async with self._ready_lock:
            if self._ready:
                return 0
            migrated = await asyncio.to_thread(self._start_sync)
            self._ready = True
            return migrated

    async def _ensure_ready(self) -> None:
        if not self._ready:
            await self.start()

    def close(self) -> None:
        self._cache.clear()
        self._locks.clear()
        self._ready = False

    def is_locked(self, player_id: str) -> bool:
        return self._locks.is_locked(player_id)

    def _start_sync(self) -> int:
        try:
            self.players_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceFailureError(f"Cannot create {self.players_dir}") from exc
        return self._migrate_legacy_sync()

    def _migrate_legacy_sync(self) -> int:
        legacy = self.legacy_file
        if legacy is None or not legacy.exists():
            return 0

        try:
            payload = read_json(legacy)
        except (OSError, ValueError) as exc:
            logger.exception("Legacy character file unreadable", extra={"path": str(legacy)})
            raise PersistenceFailureError(f"Cannot read legacy file {legacy}") from exc
        if not isinstance(payload, dict):
            raise PersistenceFailureError(f"Legacy file {legacy} is not a JSON object")

        now_ms = self._now_ms()
        written = 0
        kept = 0
        for player_id, raw in payload.items():
            try:
                path = self._path_for(player_id)
            except InvalidArgumentError:
                logger.warning("Skipping legacy record with unsafe id", extra={"player_id": player_id})
                continue
            if not isinstance(raw, dict):
                logger.warning("Skipping malformed legacy record", extra={"player_id": player_id})
                continue
            if path.exists():
                kept += 1
                continue
            record = upgrade_record(raw, player_id=player_id, now_ms=now_ms)
            try:
                write_json_atomic(path, record)
            except OSError as exc:
                logger.exception("Legacy migration write failed", extra={"player_id": player_id})
                raise PersistenceFailureError(f"Cannot write {path}") from exc
            written += 1

        backup = legacy.with_name(f"{legacy.name}.bak")
        try:
            os.replace(legacy, backup)
        except OSError as exc:
            raise PersistenceFailureError(f"Cannot rename {legacy}") from exc
        logger.info(
            "Legacy characters migrated",
            extra={"written": written, "kept_existing": kept, "backup": str(backup)},
        )
        return written

    # file I/O, always run off the event loop

    def _read_sync(self, player_id: str, path: Path) -> Optional[Character]:
        try:
            raw = read_json(path)
        except (OSError, ValueError) as exc:
            logger.exception("Character read failed", extra={"player_id": player_id})
            raise PersistenceFailureError(f"Cannot read character {player_id}") from exc
        if raw is None:
            return None
        if not isinstance(raw, dict):
            raise PersistenceFailureError(f"Character record for {player_id} is not a JSON object")
        try:
            return character_from_record(upgrade_record(raw, player_id=player_id, now_ms=self._now_ms()))
        except (TypeError, ValueError) as exc:
            raise PersistenceFailureError(f"Character record for {player_id} is malformed") from exc

    def _write_sync(self, player_id: str, path: Path, character: Character) -> None:
        try:
            write_json_atomic(path, character_to_record(character))
        except (OSError, TypeError, ValueError) as exc:
            logger.exception("Character write failed", extra={"player_id": player_id})
            raise PersistenceFailureError(f"Cannot save character {player_id}") from exc

    def _delete_sync(self, path: Path) -> bool:
        try:
            existed = path.exists()
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceFailureError(f"Cannot delete {path}") from exc
        return existed

    def _bump_generation(self, player_id: str) -> None:
        self._generations[player_id] = self._generations.get(player_id, 0) + 1

    async def _load(self, player_id: str) -> Optional[Character]:
        cached = self._cache.get(player_id)
        if cached is not None:
            return cached
        generation = self._generations.get(player_id, 0)
        loaded = await asyncio.to_thread(self._read_sync, player_id, self._path_for(player_id))
        if self._generations.get(player_id, 0) != generation:
            # A write or delete finished while the read ran; the cache holds the newer state.
            return self._cache.get(player_id)
        if loaded is None:
            return None
        return self._cache.setdefault(player_id, loaded)

    async def _persist(self, player_id: str, character: Character) -> None:
        snapshot = copy.deepcopy(character)
        await asyncio.to_thread(self._write_sync, player_id, self._path_for(player_id), snapshot)
        self._cache[player_id] = snapshot
        self._bump_generation(player_id)

    # CharacterRepository

    async def get(self, player_id: str) -> Optional[Character]:
        validate_player_id(player_id)
        await self._ensure_ready()
        character = await self._load(player_id)
        return copy.deepcopy(character) if character is not None else None

    async def create(self, player_id: str, name: str | None, class_name: str) -> Character:
        validate_player_id(player_id)
        profile = self._require_profile(class_name)
        clean_name = sanitize_name(name, player_id=player_id)
        await self._ensure_ready()

        with self._locks.hold(player_id):
            if await self._load(player_id) is not None:
                raise AlreadyExistsError(f"Character already exists for {player_id}")
            character = new_character(clean_name, profile, now_ms=self._now_ms())
            await self._persist(player_id, character)

        logger.info(
            "Character created",
            extra={"player_id": player_id, "class_name": profile.slug},
        )
        return copy.deepcopy(character)

    async def save(self, player_id: str, character: Character) -> None:
        validate_player_id(player_id)
        await self._ensure_ready()
        with self._locks.hold(player_id):
            await self._persist(player_id, character)

    async def reset(self, player_id: str, class_name: str) -> Character:
        validate_player_id(player_id)
        profile = self._require_profile(class_name)
        await self._ensure_ready()

        with self._locks.hold(player_id):
            current = await self._load(player_id)
            if current is None:
                raise NotFoundError(f"No character for {player_id}")
            fresh = new_character(current.name, profile, now_ms=self._now_ms())
            fresh.created_at = current.created_at
            await self._persist(player_id, fresh)

        logger.info("Character reset", extra={"player_id": player_id, "class_name": profile.slug})
        return copy.deepcopy(fresh)

    async def delete(self, player_id: str) -> bool:
        path = self._path_for(player_id)
        await self._ensure_ready()
        with self._locks.hold(player_id):
            existed = await asyncio.to_thread(self._delete_sync, path)
            cached = self._cache.pop(player_id, None)
            self._bump_generation(player_id)
        if existed or cached is not None:
            logger.info("Character deleted", extra={"player_id": player_id})
            return True
        return False

    def _list_ids_sync(self) -> List[str]:
        try:
            return sorted(p.stem for p in self.players_dir.glob(f"*{_RECORD_SUFFIX}") if p.is_file())
        except OSError as exc:
            raise PersistenceFailureError(f"Cannot list {self.players_dir}") from exc

    async def list_all(self) -> Dict[str, Character]:
        """Every readable character. Unreadable files are logged and skipped."""
        await self._ensure_ready()
        player_ids = set(await asyncio.to_thread(self._list_ids_sync)) | set(self._cache)
        result: Dict[str, Character] = {}
        for player_id in sorted(player_ids):
            try:
                character = await self._load(player_id)
            except (PersistenceFailureError, InvalidArgumentError):
                logger.warning("Skipping unreadable character", extra={"player_id": player_id})
                continue
            if character is not None:
                result[player_id] = copy.deepcopy(character)
        return result

    @asynccontextmanager
    async def transaction(self, player_id: str) -> AsyncIterator[Character]:
        """Yield a working copy under the player's lock and persist it on clean exit.

        Do not call ``save``/``reset``/``delete`` for the same player inside the
        block; the lock is already held and they would raise ``LockedError``.
        """
        validate_player_id(player_id)
        await self._ensure_ready()
        with self._locks.hold(player_id):
            current = await self._load(player_id)
            if current is None:
                raise NotFoundError(f"No character for {player_id}")
            working = copy.deepcopy(current)
            yield working
            await self._persist(player_id, working)
