"""Conversion between engine values and plain JSON-compatible dicts."""

from __future__ import annotations

from typing import Any, Mapping

from .actions import (
    Action,
    BuyReservedCard,
    CardBoardLocation,
    Move,
    RecruitCard,
    ReserveCard,
    TakeDifferentTokens,
    TakeSameTokens,
)
from .adt import assert_never
from .cards import Card, LocationTile
from .gems import COLORS, ColoredGemCounts, GemColor, GemCounts, colored_gem_counts
from .state import RESERVE_SLOTS, GameState, PlayerState

__all__ = [
    "card_to_dict",
    "card_from_dict",
    "state_to_dict",
    "state_from_dict",
    "move_to_dict",
    "move_from_dict",
]


def _colored_to_dict(counts: ColoredGemCounts) -> dict[str, int]:
    return {color.value: counts[color] for color in COLORS if counts[color]}


def _colored_from_dict(data: Mapping[str, int] | None) -> ColoredGemCounts:
    return colored_gem_counts({GemColor(name): int(count) for name, count in (data or {}).items()})


def _gems_to_dict(gems: GemCounts) -> dict[str, int]:
    data = {color.value: gems[color] for color in COLORS}
    data["wild"] = gems.wild
    return data


def _gems_from_dict(data: Mapping[str, int] | None) -> GemCounts:
    data = dict(data or {})
    wild = int(data.pop("wild", 0))
    colored = _colored_from_dict(data)
    return GemCounts(*(colored[color] for color in COLORS), wild=wild)


def card_to_dict(card: Card) -> dict[str, Any]:
    return {
        "name": card.name,
        "points": card.points,
        "color": card.color.value,
        "cost": _colored_to_dict(card.cost),
        "avenger_count": card.avenger_count,
        "has_time_stone": card.has_time_stone,
    }


def card_from_dict(data: Mapping[str, Any]) -> Card:
    return Card(
        name=str(data["name"]),
        points=int(data.get("points", 0)),
        color=GemColor(data["color"]),
        cost=_colored_from_dict(data.get("cost")),
        avenger_count=int(data.get("avenger_count", 0)),
        has_time_stone=bool(data.get("has_time_stone", False)),
    )


def _optional_card_to_dict(card: Card | None) -> dict[str, Any] | None:
    return None if card is None else card_to_dict(card)


def _optional_card_from_dict(data: Mapping[str, Any] | None) -> Card | None:
    return None if data is None else card_from_dict(data)


def _player_to_dict(player: PlayerState) -> dict[str, Any]:
    return {
        "cards": [card_to_dict(card) for card in player.cards],
        "reserved_cards": [_optional_card_to_dict(card) for card in player.reserved_cards],
        "gems": _gems_to_dict(player.gems),
        "location_tiles": [tile.value for tile in player.location_tiles],
        "has_avenger_tile": player.has_avenger_tile,
    }


def _player_from_dict(data: Mapping[str, Any]) -> PlayerState:
    reserved = tuple(_optional_card_from_dict(item) for item in data.get("reserved_cards", []))
    if len(reserved) > RESERVE_SLOTS:
        raise ValueError(f"a player has at most {RESERVE_SLOTS} reserve slots")
    return PlayerState(
        cards=tuple(card_from_dict(item) for item in data.get("cards", [])),
        reserved_cards=reserved + (None,) * (RESERVE_SLOTS - len(reserved)),
        gems=_gems_from_dict(data.get("gems")),
        location_tiles=tuple(LocationTile(value) for value in data.get("location_tiles", [])),
        has_avenger_tile=bool(data.get("has_avenger_tile", False)),
    )


def state_to_dict(state: GameState) -> dict[str, Any]:
    """Return a JSON-compatible representation of ``state``."""

    return {
        "board": [[_optional_card_to_dict(card) for card in row] for row in state.board],
        "card_stacks": [[card_to_dict(card) for card in stack] for stack in state.card_stacks],
        "gems": _gems_to_dict(state.gems),
        "unclaimed_location_tiles": [tile.value for tile in state.unclaimed_location_tiles],
        "players": [_player_to_dict(player) for player in state.players],
        "player_turn": state.player_turn,
    }


def state_from_dict(data: Mapping[str, Any]) -> GameState:
    """Rebuild a ``GameState``; malformed input raises ``ValueError``."""

    try:
        return GameState(
            board=tuple(
                tuple(_optional_card_from_dict(item) for item in row) for row in data["board"]
            ),
            card_stacks=tuple(
                tuple(card_from_dict(item) for item in stack) for stack in data["card_stacks"]
            ),
            gems=_gems_from_dict(data.get("gems")),
            unclaimed_location_tiles=tuple(
                LocationTile(value) for value in data.get("unclaimed_location_tiles", [])
            ),
            players=tuple(_player_from_dict(item) for item in data["players"]),
            player_turn=int(data.get("player_turn", 0)),
        )
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"malformed game state: {exc}") from exc


def _action_to_dict(action: Action) -> dict[str, Any]:
    if isinstance(action, (TakeDifferentTokens, TakeSameTokens)):
        return {
            "kind": action.kind,
            "take": _colored_to_dict(action.take),
            "give_back": _colored_to_dict(action.give_back),
        }
    if isinstance(action, ReserveCard):
        return {
            "kind": action.kind,
            "card": card_to_dict(action.card),
            "give_back": _colored_to_dict(action.give_back),
        }
    if isinstance(action, BuyReservedCard):
        return {"kind": action.kind, "reserve_slot": action.reserve_slot}
    if isinstance(action, RecruitCard):
        return {"kind": action.kind, "tier": action.card.tier, "slot": action.card.slot}
    assert_never(action)


def _action_from_dict(data: Mapping[str, Any]) -> Action:
    kind = data.get("kind")
    give_back = _colored_from_dict(data.get("give_back"))
    if kind == "TakeDifferentTokens":
        return TakeDifferentTokens(take=_colored_from_dict(data["take"]), give_back=give_back)
    if kind == "TakeSameTokens":
        return TakeSameTokens(take=_colored_from_dict(data["take"]), give_back=give_back)
    if kind == "ReserveCard":
        return ReserveCard(card=card_from_dict(data["card"]), give_back=give_back)
    if kind == "BuyReservedCard":
        return BuyReservedCard(reserve_slot=int(data["reserve_slot"]))
    if kind == "RecruitCard":
        return RecruitCard(card=CardBoardLocation(tier=int(data["tier"]), slot=int(data["slot"])))
    raise ValueError(f"unknown action kind {kind!r}")


def move_to_dict(move: Move) -> dict[str, Any]:
    return {"player_index": move.player_index, "action": _action_to_dict(move.action)}


def move_from_dict(data: Mapping[str, Any]) -> Move:
    """Rebuild a ``Move``; malformed input raises ``ValueError``."""

    try:
        return Move(player_index=int(data["player_index"]), action=_action_from_dict(data["action"]))
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"malformed move: {exc}") from exc
