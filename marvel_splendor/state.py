"""Immutable game state data structures for Marvel Splendor."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Final, Optional, Sequence

from .cards import ALL_LOCATION_TILES, Card, LocationTile
from .gems import COLORS, GemCounts

__all__ = [
    "NUM_TIERS",
    "SLOTS_PER_TIER",
    "RESERVE_SLOTS",
    "MIN_PLAYERS",
    "MAX_PLAYERS",
    "RulesConfig",
    "DEFAULT_RULES",
    "Board",
    "ReserveSlots",
    "PlayerState",
    "GameState",
    "default_bank",
    "new_game",
]

NUM_TIERS: Final[int] = 3
SLOTS_PER_TIER: Final[int] = 4
RESERVE_SLOTS: Final[int] = 3
MIN_PLAYERS: Final[int] = 2
MAX_PLAYERS: Final[int] = 4

# colored gems per color in the bank, keyed by player count
_BANK_COLORED_GEMS: Final[dict[int, int]] = {2: 4, 3: 5, 4: 7}
_BANK_WILD_GEMS: Final[int] = 5

Board = tuple[tuple[Optional[Card], ...], ...]
ReserveSlots = tuple[Optional[Card], ...]


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Rule constants consulted by the transition and query functions."""

    max_player_gems: int = 10
    max_distinct_take: int = 3
    same_color_take: int = 2
    same_color_min_pile: int = 4
    wild_on_reserve: int = 1
    location_tile_points: int = 3
    avenger_tile_points: int = 3
    winning_score: int = 16
    avenger_tile_threshold: int = 3
    charge_for_purchases: bool = False
    claim_location_tiles: bool = False
    award_avenger_tile: bool = False


DEFAULT_RULES: Final[RulesConfig] = RulesConfig()


def _empty_reserve() -> ReserveSlots:
    return (None,) * RESERVE_SLOTS


@dataclass(frozen=True, slots=True)
class PlayerState:
    """Everything a single player owns."""

    cards: tuple[Card, ...] = ()
    reserved_cards: ReserveSlots = field(default_factory=_empty_reserve)
    gems: GemCounts = field(default_factory=GemCounts)
    location_tiles: tuple[LocationTile, ...] = ()
    has_avenger_tile: bool = False

    def __post_init__(self) -> None:
        if len(self.reserved_cards) != RESERVE_SLOTS:
            raise ValueError(f"reserve area must have exactly {RESERVE_SLOTS} slots")
        seen_empty = False
        for card in self.reserved_cards:
            if card is None:
                seen_empty = True
            elif seen_empty:
                raise ValueError("reserved cards must be compacted to the left")

    @property
    def reserved_count(self) -> int:
        return sum(1 for card in self.reserved_cards if card is not None)

    @property
    def avenger_count(self) -> int:
        return sum(card.avenger_count for card in self.cards)

    def with_card(self, card: Card) -> "PlayerState":
        """Return a copy with ``card`` appended to the owned cards."""

        return replace(self, cards=self.cards + (card,))

    def with_reserved(self, card: Card) -> "PlayerState":
        """Return a copy with ``card`` placed in the first free reserve slot."""

        held = [reserved for reserved in self.reserved_cards if reserved is not None]
        if len(held) >= RESERVE_SLOTS:
            raise ValueError("no free reserve slot")
        held.append(card)
        return replace(self, reserved_cards=_compact(held))

    def without_reserved(self, index: int) -> "PlayerState":
        """Return a copy with the reserve slot at ``index`` removed and compacted."""

        held = [
            reserved
            for slot, reserved in enumerate(self.reserved_cards)
            if reserved is not None and slot != index
        ]
        return replace(self, reserved_cards=_compact(held))


def _compact(cards: Sequence[Card]) -> ReserveSlots:
    return tuple(cards) + (None,) * (RESERVE_SLOTS - len(cards))


@dataclass(frozen=True, slots=True)
class GameState:
    """Complete game snapshot; replaced wholesale by every transition."""

    board: Board
    card_stacks: tuple[tuple[Card, ...], ...]
    gems: GemCounts
    unclaimed_location_tiles: tuple[LocationTile, ...]
    players: tuple[PlayerState, ...]
    player_turn: int = 0

    def __post_init__(self) -> None:
        if len(self.board) != NUM_TIERS:
            raise ValueError(f"board must have {NUM_TIERS} tiers")
        if any(len(row) != SLOTS_PER_TIER for row in self.board):
            raise ValueError(f"each tier must have {SLOTS_PER_TIER} slots")
        if len(self.card_stacks) != NUM_TIERS:
            raise ValueError(f"expected {NUM_TIERS} card stacks")
        if not 0 <= self.player_turn < len(self.players):
            raise ValueError("player_turn must index an existing player")

    @property
    def current_player(self) -> PlayerState:
        return self.players[self.player_turn]

    @property
    def num_players(self) -> int:
        return len(self.players)

    def with_player(self, index: int, player: PlayerState) -> "GameState":
        """Return a copy with the player at ``index`` replaced."""

        players = self.players[:index] + (player,) + self.players[index + 1 :]
        return replace(self, players=players)

    def with_board_slot(self, tier: int, slot: int, card: Card | None) -> "GameState":
        """Return a copy with one board slot replaced (zero-based indices)."""

        row = self.board[tier]
        new_row = row[:slot] + (card,) + row[slot + 1 :]
        board = self.board[:tier] + (new_row,) + self.board[tier + 1 :]
        return replace(self, board=board)

    def with_stack(self, tier: int, stack: tuple[Card, ...]) -> "GameState":
        """Return a copy with the draw stack for ``tier`` replaced (zero-based)."""

        stacks = self.card_stacks[:tier] + (stack,) + self.card_stacks[tier + 1 :]
        return replace(self, card_stacks=stacks)


def default_bank(num_players: int) -> GemCounts:
    """Return the opening bank for ``num_players`` players."""

    if num_players not in _BANK_COLORED_GEMS:
        raise ValueError(f"player count must be between {MIN_PLAYERS} and {MAX_PLAYERS}")
    per_color = _BANK_COLORED_GEMS[num_players]
    return GemCounts(*(per_color for _ in COLORS), wild=_BANK_WILD_GEMS)


def new_game(
    stacks: Sequence[Sequence[Card]],
    num_players: int,
    *,
    bank: GemCounts | None = None,
    location_tiles: Sequence[LocationTile] = ALL_LOCATION_TILES,
    first_player: int = 0,
) -> GameState:
    """Lay out a fresh game from already-ordered tier stacks.

    The first four cards of each stack are dealt face up; the rest remain in
    the stack in the given order. Shuffling is the caller's responsibility.
    """

    if not MIN_PLAYERS <= num_players <= MAX_PLAYERS:
        raise ValueError(f"player count must be between {MIN_PLAYERS} and {MAX_PLAYERS}")
    if len(stacks) != NUM_TIERS:
        raise ValueError(f"expected {NUM_TIERS} card stacks")

    board_rows = []
    remaining = []
    for stack in stacks:
        dealt = tuple(stack[:SLOTS_PER_TIER])
        board_rows.append(dealt + (None,) * (SLOTS_PER_TIER - len(dealt)))
        remaining.append(tuple(stack[SLOTS_PER_TIER:]))

    return GameState(
        board=tuple(board_rows),
        card_stacks=tuple(remaining),
        gems=bank if bank is not None else default_bank(num_players),
        unclaimed_location_tiles=tuple(location_tiles),
        players=tuple(PlayerState() for _ in range(num_players)),
        player_turn=first_player,
    )
