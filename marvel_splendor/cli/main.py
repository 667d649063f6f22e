"""Typer entry-point wiring for the Marvel Splendor CLI."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from .. import actions, rules, serialization
from ..state import DEFAULT_RULES, GameState, RulesConfig
from .render import render_standings, render_state, render_tiles

app = typer.Typer(add_completion=False, rich_markup_mode="rich")
console = Console()


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise typer.BadParameter(f"cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"{path} is not valid JSON: {exc}") from exc


def _load_state(path: Path) -> GameState:
    try:
        return serialization.state_from_dict(_read_json(path))
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _rules(charge: bool) -> RulesConfig:
    return replace(DEFAULT_RULES, charge_for_purchases=charge)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log why moves are rejected."),
) -> None:
    """Inspect Marvel Splendor game states and apply moves to them."""

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


@app.command()
def show(state_file: Path = typer.Argument(..., help="Game state JSON file.")) -> None:
    """Render the board, bank, and players."""

    game_state = _load_state(state_file)
    console.print(render_state(game_state, rules.standings(game_state)))


@app.command()
def score(state_file: Path = typer.Argument(..., help="Game state JSON file.")) -> None:
    """Print the current standings."""

    game_state = _load_state(state_file)
    console.print(render_standings(rules.standings(game_state)))


@app.command()
def tiles() -> None:
    """List location tiles and their thresholds."""

    console.print(render_tiles())


@app.command("moves")
def moves_cli(
    state_file: Path = typer.Argument(..., help="Game state JSON file."),
    charge: bool = typer.Option(False, "--charge/--no-charge", help="Debit gems for purchases."),
) -> None:
    """Print every legal move for the player to act, one JSON object per line."""

    game_state = _load_state(state_file)
    legal = actions.legal_actions(game_state, game_state.player_turn, config=_rules(charge))
    for move in legal:
        typer.echo(json.dumps(serialization.move_to_dict(move)))
    console.print(f"[cyan]{len(legal)} legal move(s)[/cyan]", highlight=False)


@app.command("apply")
def apply_cli(
    state_file: Path = typer.Argument(..., help="Game state JSON file."),
    move_file: Path = typer.Argument(..., help="Move JSON file."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the resulting state here."),
    charge: bool = typer.Option(False, "--charge/--no-charge", help="Debit gems for purchases."),
) -> None:
    """Apply a move and report the outcome."""

    game_state = _load_state(state_file)
    try:
        move = serialization.move_from_dict(_read_json(move_file))
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    try:
        next_state = rules.apply_move(game_state, move, config=_rules(charge))
    except rules.IllegalMove as exc:
        console.print(f"[bold red]Move ignored:[/bold red] {exc}")
        raise typer.Exit(code=1)

    console.print(f"[green]Applied {move.action.kind} for P{move.player_index}.[/green]")
    if output is not None:
        output.write_text(json.dumps(serialization.state_to_dict(next_state), indent=2), encoding="utf-8")
        console.print(f"Wrote {output}")
    else:
        console.print(render_state(next_state, rules.standings(next_state)))


if __name__ == "__main__":  # pragma: no cover
    app()
