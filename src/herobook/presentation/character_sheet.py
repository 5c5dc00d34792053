from typing import Iterable

from rich.panel import Panel
from rich.table import Table

from herobook.application.dtos import ClassInfoView, LeaderboardRow
from herobook.application.services.item_catalog import ItemCatalog
from herobook.domain.models.character import Character
from herobook.domain.models.progression import XP_PER_LEVEL


_BORDER_SHEET = "yellow"
_BORDER_INVENTORY = "green"
_BORDER_BOARD = "magenta"

_RARITY_STYLES = {
    "common": "white",
    "uncommon": "green",
    "rare": "blue",
    "legendary": "bold yellow",
}


def _ornate_title(title: str) -> str:
    return f"[bold yellow]{title}[/bold yellow]"


def _bar(current: int, maximum: int, width: int = 20) -> str:
    if maximum <= 0:
        return "-" * width
    filled = max(0, min(width, round(width * current / maximum)))
    return "#" * filled + "-" * (width - filled)


def character_panel(player_id: str, character: Character, catalog: ItemCatalog) -> Panel:
    xp_into_level = int(character.xp) % XP_PER_LEVEL
    header = Table.grid(padding=(0, 1))
    header.add_column(style="bold yellow", justify="right")
    header.add_column(style="white")
    header.add_row("Player", player_id)
    header.add_row("Class", character.class_name.title())
    header.add_row("Level", f"{character.level}  ({xp_into_level}/{XP_PER_LEVEL} XP)")
    header.add_row("HP", f"{_bar(character.hp, character.max_hp)} {character.hp}/{character.max_hp}")
    header.add_row("MP", f"{_bar(character.mp, character.max_mp)} {character.mp}/{character.max_mp}")
    header.add_row("ATK / DEF / SPD", f"{character.atk} / {character.defense} / {character.spd}")
    header.add_row("Skill points", str(character.skill_points))
    header.add_row("Gold", str(character.gold))
    for slot, item_id in (("Weapon", character.equipped_weapon), ("Armor", character.equipped_armor)):
        item = catalog.get(item_id) if item_id else None
        header.add_row(slot, item.name if item is not None else (item_id or "-"))
    if character.abilities:
        header.add_row("Abilities", ", ".join(character.abilities))
    return Panel.fit(header, title=_ornate_title(character.name), border_style=_BORDER_SHEET)


def inventory_table(character: Character, catalog: ItemCatalog) -> Panel:
    if not character.inventory:
        return Panel.fit("Inventory is empty.", title=_ornate_title("Inventory"), border_style=_BORDER_INVENTORY)

    table = Table(show_header=True, header_style="bold yellow")
    table.add_column("Item")
    table.add_column("Type")
    table.add_column("Rarity")
    table.add_column("Qty", justify="right")
    table.add_column("Value", justify="right")
    total = 0
    for item_id, quantity in sorted(character.inventory.items()):
        item = catalog.get(item_id)
        if item is None:
            table.add_row(item_id, "?", "?", str(quantity), "0")
            continue
        value = int(item.value) * int(quantity)
        total += value
        style = _RARITY_STYLES.get(item.rarity.value, "white")
        table.add_row(item.name, item.type.value, f"[{style}]{item.rarity.value}[/{style}]", str(quantity), str(value))
    return Panel.fit(
        table,
        title=_ornate_title("Inventory"),
        subtitle=f"Total value: {total}",
        border_style=_BORDER_INVENTORY,
    )


def leaderboard_table(rows: Iterable[LeaderboardRow], *, total: int, offset: int = 0) -> Panel:
    table = Table(show_header=True, header_style="bold yellow")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Level", justify="right")
    table.add_column("XP", justify="right")
    table.add_column("ATK", justify="right")
    for rank, row in enumerate(rows, start=offset + 1):
        table.add_row(str(rank), row.name, str(row.level), str(row.xp), str(row.atk))
    return Panel.fit(
        table,
        title=_ornate_title("Leaderboard"),
        subtitle=f"{total} adventurers",
        border_style=_BORDER_BOARD,
    )


def class_table(classes: Iterable[ClassInfoView]) -> Table:
    table = Table(show_header=True, header_style="bold yellow")
    table.add_column("Class")
    table.add_column("HP", justify="right")
    table.add_column("MP", justify="right")
    table.add_column("ATK", justify="right")
    table.add_column("DEF", justify="right")
    table.add_column("SPD", justify="right")
    table.add_column("Abilities")
    for view in classes:
        stats = view.base_stats
        table.add_row(
            f"{view.name}\n[dim]{view.description}[/dim]",
            str(stats.get("maxHp", 0)),
            str(stats.get("maxMp", 0)),
            str(stats.get("atk", 0)),
            str(stats.get("def", 0)),
            str(stats.get("spd", 0)),
            ", ".join(view.abilities),
        )
    return table
