from pathlib import Path
import argparse
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv
from rich.console import Console

# Ensure the src directory is on sys.path when running as a script
_SRC_DIR = Path(__file__).resolve().parents[1]
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from herobook.bootstrap import CharacterEngine, create_character_engine
from herobook.domain.errors import CharacterEngineError
from herobook.presentation.character_sheet import (
    character_panel,
    class_table,
    inventory_table,
    leaderboard_table,
)


_CONSOLE = Console()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="herobook", description="Inspect and maintain herobook character data.")
    commands = parser.add_subparsers(dest="command", required=True)

    show = commands.add_parser("show", help="Show a character sheet")
    show.add_argument("player_id")

    inventory = commands.add_parser("inventory", help="List a character's inventory")
    inventory.add_argument("player_id")

    leaderboard = commands.add_parser("leaderboard", help="Rank characters by level, XP and attack")
    leaderboard.add_argument("--limit", type=int, default=10)
    leaderboard.add_argument("--offset", type=int, default=0)

    commands.add_parser("migrate", help="Split the legacy rpg.json into per-player files")
    commands.add_parser("classes", help="List the playable classes")
    return parser


async def _run(engine: CharacterEngine, args: argparse.Namespace) -> int:
    if args.command == "migrate":
        migrated = await engine.start()
        _CONSOLE.print(f"Migrated {migrated} legacy character(s) into {engine.store.players_dir}.")
        return 0

    if args.command == "classes":
        _CONSOLE.print(class_table(engine.characters.class_catalog()))
        return 0

    if args.command == "leaderboard":
        rows = await engine.characters.leaderboard(args.limit, args.offset)
        total = await engine.characters.leaderboard_count()
        _CONSOLE.print(leaderboard_table(rows, total=total, offset=args.offset))
        return 0

    character = await engine.characters.require_character(args.player_id)
    if args.command == "show":
        _CONSOLE.print(character_panel(args.player_id, character, engine.catalog))
    else:
        _CONSOLE.print(inventory_table(character, engine.catalog))
    return 0


async def _main_async(args: argparse.Namespace) -> int:
    engine = create_character_engine()
    try:
        return await _run(engine, args)
    finally:
        await engine.aclose()


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    logging.basicConfig(
        level=getattr(logging, os.getenv("HEROBOOK_LOG_LEVEL", "WARNING").strip().upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = _build_parser().parse_args(argv)
    try:
        return asyncio.run(_main_async(args))
    except KeyboardInterrupt:
        _CONSOLE.print("\nInterrupted.")
        return 130
    except CharacterEngineError as exc:
        _CONSOLE.print(f"[red]{exc.code}[/red]: {exc}")
        return 1
    except Exception as exc:
        _CONSOLE.print("An unexpected error occurred. The command stopped safely.")
        _CONSOLE.print(f"Reason: {exc}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
