"""Fixed-length numeric encodings of game state for search and learning agents."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

import numpy as np

from .cards import ALL_LOCATION_TILES, Card
from .gems import COLORS
from .rules import card_color_counts, compute_player_score
from .state import DEFAULT_RULES, NUM_TIERS, SLOTS_PER_TIER, GameState, PlayerState, RulesConfig

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from numpy.typing import NDArray

    Float32Array = NDArray[np.float32]
else:
    Float32Array = np.ndarray

__all__ = [
    "CARD_FEATURES",
    "PLAYER_FEATURES",
    "BANK_FEATURES",
    "encode_card",
    "encode_player",
    "encode_state",
    "observation_size",
]

# present, points, color one-hot, cost per color, avenger icons, time stone
CARD_FEATURES: Final[int] = 1 + 1 + len(COLORS) + len(COLORS) + 1 + 1
# gems incl. wild, card discounts, score, reserved, tiles, avenger tile, avenger icons, time stone
PLAYER_FEATURES: Final[int] = (len(COLORS) + 1) + len(COLORS) + 6
BANK_FEATURES: Final[int] = len(COLORS) + 1
_BOARD_FEATURES: Final[int] = NUM_TIERS * SLOTS_PER_TIER * CARD_FEATURES
_TILE_FEATURES: Final[int] = len(ALL_LOCATION_TILES)


def encode_card(card: Card | None) -> Float32Array:
    """Encode a card slot; an empty slot encodes as all zeros."""

    features = np.zeros(CARD_FEATURES, dtype=np.float32)
    if card is None:
        return features
    features[0] = 1.0
    features[1] = card.points
    features[2 + COLORS.index(card.color)] = 1.0
    offset = 2 + len(COLORS)
    features[offset : offset + len(COLORS)] = [card.cost[color] for color in COLORS]
    features[-2] = card.avenger_count
    features[-1] = float(card.has_time_stone)
    return features


def encode_player(player: PlayerState, *, config: RulesConfig = DEFAULT_RULES) -> Float32Array:
    """Encode the publicly visible parts of a player's state, scored under ``config``."""

    discounts = card_color_counts(player)
    values = [player.gems[color] for color in COLORS]
    values.append(player.gems.wild)
    values.extend(discounts[color] for color in COLORS)
    values.extend(
        [
            compute_player_score(player, config=config),
            player.reserved_count,
            len(player.location_tiles),
            float(player.has_avenger_tile),
            player.avenger_count,
            float(any(card.has_time_stone for card in player.cards)),
        ]
    )
    return np.asarray(values, dtype=np.float32)


def observation_size(num_players: int) -> int:
    return BANK_FEATURES + _BOARD_FEATURES + NUM_TIERS + _TILE_FEATURES + num_players * PLAYER_FEATURES


def encode_state(
    state: GameState,
    perspective: int | None = None,
    *,
    config: RulesConfig = DEFAULT_RULES,
) -> Float32Array:
    """Encode ``state`` as a flat ``float32`` vector.

    Players are rotated so that ``perspective`` (the player to move when
    omitted) occupies the first player block.
    """

    if perspective is None:
        perspective = state.player_turn
    if not 0 <= perspective < state.num_players:
        raise ValueError("perspective must index an existing player")

    bank = np.asarray([state.gems[color] for color in COLORS] + [state.gems.wild], dtype=np.float32)
    board = [encode_card(card) for row in state.board for card in row]
    stacks = np.asarray([len(stack) for stack in state.card_stacks], dtype=np.float32)
    tiles = np.asarray(
        [float(tile in state.unclaimed_location_tiles) for tile in ALL_LOCATION_TILES],
        dtype=np.float32,
    )
    order = [(perspective + offset) % state.num_players for offset in range(state.num_players)]
    players = [encode_player(state.players[idx], config=config) for idx in order]

    return np.concatenate([bank, *board, stacks, tiles, *players])
