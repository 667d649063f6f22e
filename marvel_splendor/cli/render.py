"""Rendering helpers dedicated to the CLI experience."""

from __future__ import annotations

from typing import Sequence

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table

from ..cards import ALL_LOCATION_TILES, Card
from ..gems import COLORS, ColoredGemCounts, GemColor, GemCounts
from ..rules import PlayerStanding, card_color_counts
from ..state import GameState

_COLOR_STYLES = {
    GemColor.PURPLE: "magenta",
    GemColor.RED: "red",
    GemColor.ORANGE: "dark_orange",
    GemColor.BLUE: "blue",
    GemColor.YELLOW: "yellow",
}


def format_counts(counts: ColoredGemCounts) -> str:
    """Return Rich markup listing the nonzero counts in ``counts``."""

    parts = [
        f"[{_COLOR_STYLES[color]}]{count} {color.value}[/{_COLOR_STYLES[color]}]"
        for color, count in counts.items()
        if count
    ]
    if isinstance(counts, GemCounts) and counts.wild:
        parts.append(f"[white]{counts.wild} wild[/white]")
    return ", ".join(parts) if parts else "—"


def format_card(card: Card | None) -> str:
    """Return a Rich-rendered label for ``card``."""

    if card is None:
        return "[dim]empty[/dim]"
    style = _COLOR_STYLES[card.color]
    extras = ""
    if card.avenger_count:
        extras += f" A{card.avenger_count}"
    if card.has_time_stone:
        extras += " [bold green]⏳[/bold green]"
    return (
        f"[{style}]{card.name}[/{style}] ({card.points}pt{extras})\n"
        f"cost: {format_counts(card.cost)}"
    )


def _board_table(state: GameState) -> Table:
    table = Table(box=box.ROUNDED, expand=True, title="Board")
    table.add_column("Tier", justify="center", style="bold")
    for slot in range(len(state.board[0])):
        table.add_column(f"Slot {slot + 1}", justify="left")
    table.add_column("Stack", justify="right")
    for tier in reversed(range(len(state.board))):
        row = state.board[tier]
        table.add_row(
            str(tier + 1),
            *(format_card(card) for card in row),
            str(len(state.card_stacks[tier])),
        )
    return table


def _players_table(state: GameState, standings: Sequence[PlayerStanding]) -> Table:
    table = Table(box=box.ROUNDED, expand=True, title="Players")
    table.add_column("Player", justify="left", style="bold")
    table.add_column("Score", justify="right")
    table.add_column("Gems", justify="left")
    table.add_column("Discounts", justify="left")
    table.add_column("Reserved", justify="left")
    table.add_column("Tiles", justify="left")

    for standing, player in zip(standings, state.players):
        name = f"P{standing.player_index}"
        if standing.player_index == state.player_turn:
            name = f"[bold cyan]▶ {name}[/bold cyan]"
        score = str(standing.score)
        if standing.has_win_con:
            score = f"[bold green]{score} ★[/bold green]"
        tiles = [tile.value for tile in player.location_tiles]
        if player.has_avenger_tile:
            tiles.append("Avengers")
        reserved = [card.name for card in player.reserved_cards if card is not None]
        table.add_row(
            name,
            score,
            format_counts(player.gems),
            format_counts(card_color_counts(player)),
            ", ".join(reserved) or "—",
            ", ".join(tiles) or "—",
        )
    return table


def render_state(
    state: GameState,
    standings: Sequence[PlayerStanding],
    *,
    title: str = "Marvel Splendor",
) -> RenderableType:
    """Return a Rich panel describing the full game state."""

    tiles = ", ".join(tile.value for tile in state.unclaimed_location_tiles) or "—"
    meta = Table.grid(expand=True)
    meta.add_column(justify="left")
    meta.add_row(f"[cyan]Turn[/cyan]: P{state.player_turn}")
    meta.add_row(f"[cyan]Bank[/cyan]: {format_counts(state.gems)}")
    meta.add_row(f"[cyan]Location tiles[/cyan]: {tiles}")
    body = Group(
        Panel(meta, title="Table State", box=box.SQUARE, border_style="blue"),
        _board_table(state),
        _players_table(state, standings),
    )
    return Panel(body, title=title, padding=(0, 1), border_style="cyan")


def render_standings(standings: Sequence[PlayerStanding]) -> Table:
    table = Table(box=box.ROUNDED, title="Standings")
    table.add_column("Player", justify="left", style="bold")
    table.add_column("Score", justify="right")
    table.add_column("Cards", justify="right")
    table.add_column("Gems", justify="right")
    table.add_column("Tiles", justify="right")
    table.add_column("Avenger Tile", justify="center")
    table.add_column("Win", justify="center")
    for standing in standings:
        table.add_row(
            f"P{standing.player_index}",
            str(standing.score),
            str(standing.cards),
            str(standing.total_gems),
            str(standing.location_tiles),
            "yes" if standing.has_avenger_tile else "no",
            "[bold green]yes[/bold green]" if standing.has_win_con else "no",
        )
    return table


def render_tiles() -> Table:
    table = Table(box=box.ROUNDED, title="Location Tiles")
    table.add_column("Tile", justify="left", style="bold")
    for color in COLORS:
        table.add_column(color.value.title(), justify="right", style=_COLOR_STYLES[color])
    for tile in ALL_LOCATION_TILES:
        table.add_row(tile.value, *(str(tile.threshold[color] or "") for color in COLORS))
    return table
