import json
import sys
from pathlib import Path
import unittest

import httpx

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from herobook.application.services.narration import Narrator
from herobook.domain.models.npc import Npc
from herobook.infrastructure.narration_client import NarrationClient


class NarratorTests(unittest.IsolatedAsyncioTestCase):
    async def test_returns_generated_text(self) -> None:
        async def narrate(context: str, prompt: str) -> str:
            return f"  {context}:{prompt}  "

        narrator = Narrator(narrate)
        self.assertEqual("guild:hello", await narrator.describe("guild", "hello", "fallback"))

    async def test_empty_reply_uses_fallback(self) -> None:
        async def narrate(context: str, prompt: str) -> str:
            return "   "

        self.assertEqual("fallback", await Narrator(narrate).describe("guild", "hello", "fallback"))

    async def test_failure_uses_fallback_and_logs_warning(self) -> None:
        async def narrate(context: str, prompt: str) -> str:
            raise RuntimeError("model offline")

        with self.assertLogs("herobook.application.services.narration", level="WARNING"):
            text = await Narrator(narrate).describe("guild", "hello", "fallback")
        self.assertEqual("fallback", text)

    async def test_disabled_narrator_returns_fallback(self) -> None:
        narrator = Narrator()
        self.assertFalse(narrator.enabled)
        self.assertEqual("static", await narrator.describe("guild", "hello", "static"))

    async def test_encounter_prompt_mentions_npc(self) -> None:
        prompts: list[str] = []

        async def narrate(context: str, prompt: str) -> str:
            prompts.append(prompt)
            return ""

        npc = Npc(name="Goblin L2", hp=16, atk=5, level=2)
        text = await Narrator(narrate).describe_encounter("guild", npc, adventurer_level=2)

        self.assertEqual("You encounter Goblin L2!", text)
        self.assertIn("Goblin L2", prompts[0])


class NarrationClientTests(unittest.IsolatedAsyncioTestCase):
    async def test_posts_context_and_prompt(self) -> None:
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.read()))
            return httpx.Response(200, json={"text": " A goblin snarls. "})

        http_client = httpx.AsyncClient(base_url="https://narrator.invalid", transport=httpx.MockTransport(handler))
        client = NarrationClient("https://narrator.invalid", retries=0, http_client=http_client)
        try:
            text = await client.narrate("guild-1", "Intro please")
        finally:
            await client.aclose()

        self.assertEqual("A goblin snarls.", text)
        self.assertEqual([{"context": "guild-1", "prompt": "Intro please"}], seen)

    async def test_server_error_falls_back_through_narrator(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        http_client = httpx.AsyncClient(base_url="https://narrator.invalid", transport=httpx.MockTransport(handler))
        client = NarrationClient("https://narrator.invalid", retries=1, backoff_seconds=0, http_client=http_client)
        try:
            text = await Narrator(client.narrate).describe("guild-1", "Intro", "You meet a stranger.")
        finally:
            await client.aclose()

        self.assertEqual("You meet a stranger.", text)


if __name__ == "__main__":
    unittest.main()
