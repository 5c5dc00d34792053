import random
import sys
import tempfile
from pathlib import Path
import unittest
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from herobook.application.services.progression_service import ProgressionService
from herobook.application.services.quest_service import QuestService, quest_templates
from herobook.domain.errors import InvalidArgumentError, NotFoundError, PersistenceFailureError
from herobook.domain.events import QuestCompleted
from herobook.domain.models.quest import QuestRequirement, QuestStatus
from herobook.infrastructure.file_store import atomic_write
from herobook.infrastructure.file_store.character_store import FileCharacterStore
from herobook.infrastructure.inmemory.inmemory_quest_repo import InMemoryQuestRepository


class QuestTemplateTests(unittest.TestCase):
    def test_six_templates_scale_with_level(self) -> None:
        drafts = quest_templates(3)
        self.assertEqual(6, len(drafts))
        by_kind = {draft.requirement: draft for draft in drafts}
        self.assertEqual(11, by_kind[QuestRequirement.GOBLINS_DEFEATED].amount)
        self.assertEqual("Reach Level 8", by_kind[QuestRequirement.LEVEL_REACHED].title)
        self.assertEqual(250, by_kind[QuestRequirement.GOLD_EARNED].amount)


class QuestServiceTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.store = FileCharacterStore(Path(self._tmp.name) / "players", clock=lambda: 1_700_000_000.0)
        self.events: list[object] = []
        self.service = QuestService(
            InMemoryQuestRepository(),
            self.store,
            ProgressionService(),
            event_publisher=self.events.append,
            rng=random.Random(3),
            clock=lambda: 1_700_000_000.0,
        )
        await self.store.create("p1", "Ayla", "warrior")

    async def asyncTearDown(self) -> None:
        self.store.close()
        self._tmp.cleanup()

    async def test_create_and_list(self) -> None:
        first = await self.service.create_quest("p1", "Find the cat", "It is somewhere")
        second = await self.service.create_quest("p1", "Feed the cat")
        await self.service.create_quest("p2", "Someone else's")

        quests = await self.service.list_quests("p1")
        self.assertEqual([first.id, second.id], [quest.id for quest in quests])
        self.assertEqual(QuestStatus.OPEN, quests[0].status)
        self.assertEqual(1_700_000_000_000, quests[0].created_at)

    async def test_create_rejects_blank_title(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            await self.service.create_quest("p1", "   ")

    async def test_complete_pays_rewards_once(self) -> None:
        quest = await self.service.create_quest("p1", "Find the cat")
        completion = await self.service.complete_quest("p1", quest.id)

        self.assertEqual(52, completion.xp_reward)
        self.assertEqual(30, completion.gold_reward)
        self.assertTrue(completion.quest.is_completed)
        character = await self.store.get("p1")
        self.assertEqual(52, character.xp)
        self.assertEqual(30, character.gold)
        self.assertEqual(3, character.level)
        self.assertIsInstance(self.events[-1], QuestCompleted)

        with self.assertRaises(InvalidArgumentError):
            await self.service.complete_quest("p1", quest.id)
        character = await self.store.get("p1")
        self.assertEqual(52, character.xp)

    async def test_failed_reward_write_reopens_quest(self) -> None:
        quest = await self.service.create_quest("p1", "Find the cat")

        with mock.patch.object(atomic_write.os, "replace", side_effect=OSError("disk full")):
            with self.assertRaises(PersistenceFailureError):
                await self.service.complete_quest("p1", quest.id)

        self.assertEqual(QuestStatus.OPEN, (await self.service.list_quests("p1"))[0].status)
        self.assertEqual(0, (await self.store.get("p1")).xp)
        self.assertEqual([], self.events)

        completion = await self.service.complete_quest("p1", quest.id)
        self.assertEqual(52, completion.xp_reward)
        self.assertEqual(52, (await self.store.get("p1")).xp)

    async def test_complete_unknown_quest(self) -> None:
        with self.assertRaises(NotFoundError):
            await self.service.complete_quest("p1", 999)

    async def test_cannot_complete_another_players_quest(self) -> None:
        await self.store.create("p2", "Bram", "mage")
        quest = await self.service.create_quest("p2", "Mine")
        with self.assertRaises(NotFoundError):
            await self.service.complete_quest("p1", quest.id)

    async def test_random_quest_uses_template_rewards(self) -> None:
        quest = await self.service.generate_random_quest("p1", level=2)
        self.assertIsNotNone(quest.requirement)
        self.assertGreater(quest.amount, 0)

        completion = await self.service.complete_quest("p1", quest.id)
        self.assertGreaterEqual(completion.xp_reward, 50)


if __name__ == "__main__":
    unittest.main()
