"""Move and action definitions plus legal move generation."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations, combinations_with_replacement
from typing import Union

from .adt import Variant
from .cards import Card
from .gems import (
    COLORS,
    ZERO_COLORED,
    ColoredGemCounts,
    add_colored_gem_counts,
    colored_gem_counts,
    colored_part,
    total_gems,
)
from .state import (
    DEFAULT_RULES,
    NUM_TIERS,
    RESERVE_SLOTS,
    SLOTS_PER_TIER,
    GameState,
    PlayerState,
    RulesConfig,
)

__all__ = [
    "CardBoardLocation",
    "TakeDifferentTokens",
    "TakeSameTokens",
    "ReserveCard",
    "BuyReservedCard",
    "RecruitCard",
    "Action",
    "Move",
    "legal_actions",
]


@dataclass(frozen=True, slots=True)
class CardBoardLocation:
    """One-based board coordinates: tier 1-3, slot 1-4."""

    tier: int
    slot: int

    def __post_init__(self) -> None:
        if not 1 <= self.tier <= NUM_TIERS:
            raise ValueError(f"tier must be between 1 and {NUM_TIERS}")
        if not 1 <= self.slot <= SLOTS_PER_TIER:
            raise ValueError(f"slot must be between 1 and {SLOTS_PER_TIER}")


@dataclass(frozen=True, slots=True)
class TakeDifferentTokens(Variant):
    """Take up to three gems of distinct colors."""

    take: ColoredGemCounts
    give_back: ColoredGemCounts = ZERO_COLORED


@dataclass(frozen=True, slots=True)
class TakeSameTokens(Variant):
    """Take two gems of a single color."""

    take: ColoredGemCounts
    give_back: ColoredGemCounts = ZERO_COLORED


@dataclass(frozen=True, slots=True)
class ReserveCard(Variant):
    """Reserve a face-up card or the top of a tier stack."""

    card: Card
    give_back: ColoredGemCounts = ZERO_COLORED


@dataclass(frozen=True, slots=True)
class BuyReservedCard(Variant):
    """Buy the card in one of the player's reserve slots (1-3)."""

    reserve_slot: int

    def __post_init__(self) -> None:
        if not 1 <= self.reserve_slot <= RESERVE_SLOTS:
            raise ValueError(f"reserve_slot must be between 1 and {RESERVE_SLOTS}")


@dataclass(frozen=True, slots=True)
class RecruitCard(Variant):
    """Acquire a face-up card straight from the board."""

    card: CardBoardLocation


Action = Union[TakeDifferentTokens, TakeSameTokens, ReserveCard, BuyReservedCard, RecruitCard]


@dataclass(frozen=True, slots=True)
class Move:
    """A single action submitted by the player at ``player_index``."""

    player_index: int
    action: Action


def _give_back_options(holding: ColoredGemCounts, overflow: int) -> list[ColoredGemCounts]:
    """Return every way to hand back exactly ``overflow`` colored gems from ``holding``."""

    if overflow <= 0:
        return [ZERO_COLORED]
    available = [color for color in COLORS if holding[color] > 0]
    options: list[ColoredGemCounts] = []
    for combo in combinations_with_replacement(available, overflow):
        counts: dict = {}
        for color in combo:
            counts[color] = counts.get(color, 0) + 1
        if all(holding[color] >= count for color, count in counts.items()):
            options.append(colored_gem_counts(counts))
    return options


def _overflow(player: PlayerState, gained: int, config: RulesConfig) -> int:
    return total_gems(player.gems) + gained - config.max_player_gems


def _token_candidates(state: GameState, player: PlayerState, config: RulesConfig) -> list[Action]:
    candidates: list[Action] = []
    in_bank = [color for color in COLORS if state.gems[color] > 0]
    for size in range(1, config.max_distinct_take + 1):
        for combo in combinations(in_bank, size):
            take = colored_gem_counts({color: 1 for color in combo})
            after = add_colored_gem_counts(colored_part(player.gems), take)
            for give_back in _give_back_options(after, _overflow(player, size, config)):
                candidates.append(TakeDifferentTokens(take=take, give_back=give_back))

    for color in COLORS:
        if state.gems[color] < config.same_color_min_pile:
            continue
        take = colored_gem_counts({color: config.same_color_take})
        after = add_colored_gem_counts(colored_part(player.gems), take)
        for give_back in _give_back_options(after, _overflow(player, config.same_color_take, config)):
            candidates.append(TakeSameTokens(take=take, give_back=give_back))
    return candidates


def _reserve_candidates(state: GameState, player: PlayerState, config: RulesConfig) -> list[Action]:
    if player.reserved_count >= RESERVE_SLOTS:
        return []
    targets = [card for row in state.board for card in row if card is not None]
    targets.extend(stack[0] for stack in state.card_stacks if stack)
    wild_gain = min(config.wild_on_reserve, state.gems.wild)
    give_backs = _give_back_options(colored_part(player.gems), _overflow(player, wild_gain, config))

    candidates: list[Action] = []
    seen: set[Card] = set()
    for card in targets:
        if card in seen:
            continue
        seen.add(card)
        candidates.extend(ReserveCard(card=card, give_back=give_back) for give_back in give_backs)
    return candidates


def legal_actions(
    state: GameState,
    player_index: int,
    *,
    config: RulesConfig = DEFAULT_RULES,
) -> list[Move]:
    """Return every move ``player_index`` may legally submit in ``state``."""

    from . import rules  # Local import to avoid cycles

    if player_index != state.player_turn:
        return []

    player = state.players[player_index]
    candidates: list[Action] = []
    candidates.extend(_token_candidates(state, player, config))
    candidates.extend(_reserve_candidates(state, player, config))
    candidates.extend(
        BuyReservedCard(reserve_slot=slot + 1)
        for slot, card in enumerate(player.reserved_cards)
        if card is not None
    )
    candidates.extend(
        RecruitCard(card=CardBoardLocation(tier=tier + 1, slot=slot + 1))
        for tier, row in enumerate(state.board)
        for slot, card in enumerate(row)
        if card is not None
    )

    moves: list[Move] = []
    for action in candidates:
        move = Move(player_index=player_index, action=action)
        if rules.is_legal(state, move, config=config):
            moves.append(move)
    return moves
