import logging
import os
import random
from dataclasses import dataclass, fields, is_dataclass
from pathlib import Path
from typing import Optional

from herobook.application.services.character_service import CharacterService
from herobook.application.services.combat_service import CombatService
from herobook.application.services.crafting_service import CraftingService
from herobook.application.services.event_bus import EventBus
from herobook.application.services.inventory_service import InventoryService
from herobook.application.services.item_catalog import ItemCatalog
from herobook.application.services.narration import Narrator
from herobook.application.services.progression_service import ProgressionService
from herobook.application.services.quest_service import QuestService
from herobook.application.services.rate_limiter import RateLimiter
from herobook.domain import events
from herobook.domain.repositories import QuestRepository
from herobook.infrastructure.file_store.character_store import FileCharacterStore
from herobook.infrastructure.inmemory.inmemory_quest_repo import InMemoryQuestRepository
from herobook.infrastructure.narration_client import NarrationClient


logger = logging.getLogger(__name__)


def _is_truthy(value: str | None, *, default: str = "0") -> bool:
    normalized = str(value if value is not None else default).strip().lower()
    return normalized in {"1", "true", "yes"}


@dataclass
class CharacterEngine:
    store: FileCharacterStore
    catalog: ItemCatalog
    event_bus: EventBus
    progression: ProgressionService
    combat: CombatService
    inventory: InventoryService
    crafting: CraftingService
    rate_limiter: RateLimiter
    quests: QuestService
    narrator: Narrator
    characters: CharacterService
    narration_client: Optional[NarrationClient] = None

    async def start(self) -> int:
        return await self.store.start()

    async def aclose(self) -> None:
        await self.event_bus.drain()
        if self.narration_client is not None:
            await self.narration_client.aclose()
        self.store.close()


def _data_dir() -> Path:
    return Path(os.getenv("HEROBOOK_DATA_DIR", "data"))


def _build_rng() -> random.Random:
    raw_seed = os.getenv("HEROBOOK_RNG_SEED", "").strip()
    if not raw_seed:
        return random.Random()
    try:
        return random.Random(int(raw_seed))
    except ValueError:
        return random.Random(raw_seed)


def _build_quest_repo() -> QuestRepository:
    database_url = os.getenv("HEROBOOK_DATABASE_URL", "").strip()
    if not database_url:
        return InMemoryQuestRepository()

    from herobook.infrastructure.db.connection import build_engine
    from herobook.infrastructure.db.sql_quest_repo import SqlQuestRepository

    if database_url.startswith("sqlite:///") and not database_url.startswith("sqlite:///:memory:"):
        Path(database_url[len("sqlite:///") :]).parent.mkdir(parents=True, exist_ok=True)
    return SqlQuestRepository(build_engine(database_url))


def _build_narration_client() -> Optional[NarrationClient]:
    url = os.getenv("HEROBOOK_NARRATION_URL", "").strip()
    if not url or not _is_truthy(os.getenv("HEROBOOK_NARRATION_ENABLED"), default="1"):
        return None
    return NarrationClient(
        url,
        timeout=float(os.getenv("HEROBOOK_NARRATION_TIMEOUT_S", "10")),
        retries=int(os.getenv("HEROBOOK_NARRATION_RETRIES", "2")),
        backoff_seconds=float(os.getenv("HEROBOOK_NARRATION_BACKOFF_S", "0.2")),
    )


def _log_event(event: object) -> None:
    payload = {field.name: getattr(event, field.name) for field in fields(event)} if is_dataclass(event) else {}
    logger.info("Domain event %s", type(event).__name__, extra={"event": payload})


def register_event_logging(event_bus: EventBus) -> None:
    for event_type in (
        events.CharacterCreated,
        events.CharacterReset,
        events.CharacterDeleted,
        events.LevelUpApplied,
        events.SkillPointsSpent,
        events.ItemEquipped,
        events.ItemCrafted,
        events.QuestCompleted,
    ):
        event_bus.subscribe(event_type, _log_event, priority=1000)


def create_character_engine() -> CharacterEngine:
    data_dir = _data_dir()
    players_dir = Path(os.getenv("HEROBOOK_PLAYERS_DIR", str(data_dir / "players")))
    legacy_file = Path(os.getenv("HEROBOOK_LEGACY_FILE", str(data_dir / "rpg.json")))

    rng = _build_rng()
    event_bus = EventBus()
    register_event_logging(event_bus)

    store = FileCharacterStore(players_dir, legacy_file=legacy_file)
    catalog = ItemCatalog()
    progression = ProgressionService(event_publisher=event_bus.publish)
    combat = CombatService(rng=rng)
    inventory = InventoryService(catalog, rng=rng)
    crafting = CraftingService(catalog, inventory, progression, event_publisher=event_bus.publish)
    rate_limiter = RateLimiter(store)
    quests = QuestService(
        _build_quest_repo(),
        store,
        progression,
        event_publisher=event_bus.publish,
        rng=rng,
    )
    narration_client = _build_narration_client()
    narrator = Narrator(narration_client.narrate if narration_client is not None else None)
    characters = CharacterService(
        store,
        catalog,
        progression,
        inventory,
        crafting,
        event_publisher=event_bus.publish,
    )
    logger.debug(
        "Character engine built",
        extra={
            "players_dir": str(players_dir),
            "narration": narration_client is not None,
            "seeded": bool(os.getenv("HEROBOOK_RNG_SEED", "").strip()),
        },
    )
    return CharacterEngine(
        store=store,
        catalog=catalog,
        event_bus=event_bus,
        progression=progression,
        combat=combat,
        inventory=inventory,
        crafting=crafting,
        rate_limiter=rate_limiter,
        quests=quests,
        narrator=narrator,
        characters=characters,
        narration_client=narration_client,
    )
