"""State transitions and rule queries for Marvel Splendor."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from .actions import (
    BuyReservedCard,
    CardBoardLocation,
    Move,
    RecruitCard,
    ReserveCard,
    TakeDifferentTokens,
    TakeSameTokens,
)
from .adt import assert_never
from .cards import Card
from .gems import (
    COLORS,
    ZERO_COLORED,
    ColoredGemCounts,
    GemColor,
    GemCounts,
    add_colored_gem_counts,
    add_gem_counts,
    gems_needed_to_buy,
    subtract_colored_gem_counts,
    subtract_gem_counts,
    total_colored_gems,
    total_gems,
)
from .state import DEFAULT_RULES, RESERVE_SLOTS, GameState, PlayerState, RulesConfig

__all__ = [
    "IllegalMove",
    "NotPlayersTurn",
    "IllegalTokenTake",
    "IllegalReserve",
    "IllegalPurchase",
    "PlayerStanding",
    "transition",
    "apply_move",
    "is_legal",
    "is_player_turn",
    "get_card_at_board_location",
    "card_color_counts",
    "player_colored_gem_counts",
    "can_recruit_card",
    "payment_for",
    "compute_player_score",
    "has_win_con",
    "player_total_gems",
    "standings",
]

logger = logging.getLogger(__name__)


class IllegalMove(RuntimeError):
    """Raised by ``apply_move`` when a move cannot be applied."""


class NotPlayersTurn(IllegalMove):
    """Raised when a move is submitted out of turn."""


class IllegalTokenTake(IllegalMove):
    """Raised when a token take breaks the bank or hand-limit rules."""


class IllegalReserve(IllegalMove):
    """Raised when a card cannot be reserved."""


class IllegalPurchase(IllegalMove):
    """Raised when a card cannot be bought or recruited."""


@dataclass(frozen=True, slots=True)
class PlayerStanding:
    """Scoreboard row for a single player."""

    player_index: int
    score: int
    cards: int
    total_gems: int
    location_tiles: int
    has_avenger_tile: bool
    has_win_con: bool


def transition(state: GameState, move: Move, *, config: RulesConfig = DEFAULT_RULES) -> GameState:
    """Return the state after ``move``, or ``state`` itself when the move does not apply."""

    try:
        return apply_move(state, move, config=config)
    except IllegalMove as exc:
        logger.debug("ignoring %s from player %d: %s", move.action.kind, move.player_index, exc)
        return state


def is_legal(state: GameState, move: Move, *, config: RulesConfig = DEFAULT_RULES) -> bool:
    """Return ``True`` if ``apply_move`` accepts ``move``."""

    try:
        apply_move(state, move, config=config)
    except IllegalMove:
        return False
    return True


def apply_move(state: GameState, move: Move, *, config: RulesConfig = DEFAULT_RULES) -> GameState:
    """Apply ``move`` to ``state``, raising ``IllegalMove`` when it is inapplicable."""

    if not is_player_turn(state, move):
        raise NotPlayersTurn(f"it is player {state.player_turn}'s turn, not {move.player_index}'s")

    action = move.action
    if isinstance(action, TakeDifferentTokens):
        return _take_different_tokens(state, action, config)
    if isinstance(action, TakeSameTokens):
        return _take_same_tokens(state, action, config)
    if isinstance(action, ReserveCard):
        return _reserve_card(state, action, config)
    if isinstance(action, BuyReservedCard):
        return _buy_reserved_card(state, action.reserve_slot, config)
    if isinstance(action, RecruitCard):
        return _recruit_card(state, action.card, config)
    assert_never(action)


def is_player_turn(state: GameState, move: Move) -> bool:
    return state.player_turn == move.player_index


def get_card_at_board_location(state: GameState, location: CardBoardLocation) -> Card | None:
    return state.board[location.tier - 1][location.slot - 1]


# ---------------------------------------------------------------------------
# Token actions


def _take_different_tokens(state: GameState, action: TakeDifferentTokens, config: RulesConfig) -> GameState:
    take = action.take
    colors = take.nonzero_colors()
    if any(take[color] > 1 for color in colors):
        raise IllegalTokenTake("at most one gem of each color may be taken")
    if not 1 <= len(colors) <= config.max_distinct_take:
        raise IllegalTokenTake(f"must take between 1 and {config.max_distinct_take} colors")
    for color in colors:
        if state.gems[color] < 1:
            raise IllegalTokenTake(f"the bank has no {color.value} gems")
    return _collect_gems(state, take, 0, action.give_back, config)


def _take_same_tokens(state: GameState, action: TakeSameTokens, config: RulesConfig) -> GameState:
    take = action.take
    colors = take.nonzero_colors()
    if len(colors) != 1:
        raise IllegalTokenTake("must take gems of exactly one color")
    color = colors[0]
    if take[color] != config.same_color_take:
        raise IllegalTokenTake(f"must take exactly {config.same_color_take} {color.value} gems")
    if state.gems[color] < config.same_color_min_pile:
        raise IllegalTokenTake(
            f"the {color.value} pile needs at least {config.same_color_min_pile} gems"
        )
    return _collect_gems(state, take, 0, action.give_back, config)


def _exchange_gems(
    bank: GemCounts,
    held: GemCounts,
    gain: ColoredGemCounts,
    wild_gain: int,
    give_back: ColoredGemCounts,
    config: RulesConfig,
    error: type[IllegalMove],
) -> tuple[GemCounts, GemCounts]:
    """Move ``gain`` from the bank to the player, then ``give_back`` the other way."""

    after_gain = add_gem_counts(held, gain, wild=wild_gain)
    overflow = total_gems(after_gain) - config.max_player_gems
    returned = total_colored_gems(give_back)
    if overflow <= 0 and returned:
        raise error("gems may only be given back above the hand limit")
    if overflow > 0 and returned != overflow:
        raise error(f"must give back exactly {overflow} gem(s) to stay at {config.max_player_gems}")
    for color in COLORS:
        if give_back[color] > after_gain[color]:
            raise error(f"cannot give back {give_back[color]} {color.value} gem(s)")

    next_bank = add_gem_counts(subtract_gem_counts(bank, gain, wild=wild_gain), give_back)
    return next_bank, subtract_gem_counts(after_gain, give_back)


def _collect_gems(
    state: GameState,
    gain: ColoredGemCounts,
    wild_gain: int,
    give_back: ColoredGemCounts,
    config: RulesConfig,
) -> GameState:
    player = state.current_player
    bank, held = _exchange_gems(
        state.gems, player.gems, gain, wild_gain, give_back, config, IllegalTokenTake
    )
    next_state = state.with_player(state.player_turn, replace(player, gems=held))
    return replace(next_state, gems=bank)


# ---------------------------------------------------------------------------
# Card actions


def _refill_slot(state: GameState, tier: int, slot: int) -> GameState:
    """Replace a board slot with the head of its tier stack, or leave it empty."""

    stack = state.card_stacks[tier]
    if not stack:
        return state.with_board_slot(tier, slot, None)
    return state.with_board_slot(tier, slot, stack[0]).with_stack(tier, stack[1:])


def _find_on_board(state: GameState, card: Card) -> tuple[int, int] | None:
    for tier, row in enumerate(state.board):
        for slot, candidate in enumerate(row):
            if candidate == card:
                return tier, slot
    return None


def _find_stack_head(state: GameState, card: Card) -> int | None:
    for tier, stack in enumerate(state.card_stacks):
        if stack and stack[0] == card:
            return tier
    return None


def _reserve_card(state: GameState, action: ReserveCard, config: RulesConfig) -> GameState:
    player = state.current_player
    if player.reserved_count >= RESERVE_SLOTS:
        raise IllegalReserve("no free reserve slot")

    location = _find_on_board(state, action.card)
    if location is not None:
        next_state = _refill_slot(state, *location)
    else:
        tier = _find_stack_head(state, action.card)
        if tier is None:
            raise IllegalReserve(f"{action.card.name} is not available to reserve")
        next_state = state.with_stack(tier, state.card_stacks[tier][1:])

    wild_gain = min(config.wild_on_reserve, state.gems.wild)
    bank, held = _exchange_gems(
        state.gems, player.gems, ZERO_COLORED, wild_gain, action.give_back, config, IllegalReserve
    )
    next_player = replace(player.with_reserved(action.card), gems=held)
    next_state = next_state.with_player(state.player_turn, next_player)
    return replace(next_state, gems=bank)


def _pay_for(state: GameState, player: PlayerState, card: Card) -> tuple[GameState, PlayerState]:
    payment = payment_for(player, card)
    paid = replace(player, gems=subtract_gem_counts(player.gems, payment))
    return replace(state, gems=add_gem_counts(state.gems, payment)), paid


def _buy_reserved_card(state: GameState, reserve_slot: int, config: RulesConfig) -> GameState:
    player = state.current_player
    index = reserve_slot - 1
    card = player.reserved_cards[index]
    if card is None:
        raise IllegalPurchase(f"reserve slot {reserve_slot} is empty")

    next_state = state
    next_player = player
    if config.charge_for_purchases:
        if not can_recruit_card(player, card):
            raise IllegalPurchase(f"cannot afford {card.name}")
        next_state, next_player = _pay_for(state, player, card)
    next_player = next_player.without_reserved(index).with_card(card)
    next_state = next_state.with_player(state.player_turn, next_player)
    return _after_acquisition(next_state, state.player_turn, config)


def _recruit_card(state: GameState, location: CardBoardLocation, config: RulesConfig) -> GameState:
    card = get_card_at_board_location(state, location)
    if card is None:
        raise IllegalPurchase(f"no card at tier {location.tier} slot {location.slot}")
    player = state.current_player
    if not can_recruit_card(player, card):
        raise IllegalPurchase(f"cannot afford {card.name}")

    next_state = _refill_slot(state, location.tier - 1, location.slot - 1)
    next_player = player
    if config.charge_for_purchases:
        next_state, next_player = _pay_for(next_state, player, card)
    next_state = next_state.with_player(state.player_turn, next_player.with_card(card))
    return _after_acquisition(next_state, state.player_turn, config)


def _after_acquisition(state: GameState, player_index: int, config: RulesConfig) -> GameState:
    if config.claim_location_tiles:
        state = _claim_location_tile(state, player_index)
    if config.award_avenger_tile:
        state = _award_avenger_tile(state, player_index, config)
    return state


def _claim_location_tile(state: GameState, player_index: int) -> GameState:
    """Hand the first location tile whose threshold is met to the player."""

    player = state.players[player_index]
    counts = card_color_counts(player)
    for tile in state.unclaimed_location_tiles:
        if not tile.is_met_by(counts):
            continue
        remaining = tuple(other for other in state.unclaimed_location_tiles if other is not tile)
        claimed = replace(player, location_tiles=player.location_tiles + (tile,))
        return replace(state.with_player(player_index, claimed), unclaimed_location_tiles=remaining)
    return state


def _award_avenger_tile(state: GameState, player_index: int, config: RulesConfig) -> GameState:
    """Move the avenger tile to the player once they lead on avenger icons."""

    player = state.players[player_index]
    if player.has_avenger_tile:
        return state
    count = player.avenger_count
    if count < config.avenger_tile_threshold:
        return state

    holder = next((idx for idx, other in enumerate(state.players) if other.has_avenger_tile), None)
    if holder is not None:
        if state.players[holder].avenger_count >= count:
            return state
        state = state.with_player(holder, replace(state.players[holder], has_avenger_tile=False))
    return state.with_player(player_index, replace(player, has_avenger_tile=True))


# ---------------------------------------------------------------------------
# Queries


def card_color_counts(player: PlayerState) -> ColoredGemCounts:
    """Count owned cards per color; each acts as a permanent gem of that color."""

    counts: dict[GemColor, int] = {}
    for card in player.cards:
        counts[card.color] = counts.get(card.color, 0) + 1
    return ColoredGemCounts(*(counts.get(color, 0) for color in COLORS))


def player_colored_gem_counts(player: PlayerState) -> ColoredGemCounts:
    """Return buying power per color, ignoring wild gems."""

    return add_colored_gem_counts(card_color_counts(player), player.gems)


def can_recruit_card(player: PlayerState, card: Card) -> bool:
    """Return ``True`` when wild gems cover the player's shortfall for ``card``."""

    gems_needed = gems_needed_to_buy(card.cost, player_colored_gem_counts(player))
    return player.gems.wild >= total_colored_gems(gems_needed)


def payment_for(player: PlayerState, card: Card) -> GemCounts:
    """Return the gems ``player`` would spend on ``card``.

    Owned cards discount the cost first, held colored gems pay what they can,
    and wild gems cover the rest. The result is only meaningful when
    ``can_recruit_card`` holds.
    """

    effective = subtract_colored_gem_counts(card.cost, card_color_counts(player))
    spend = ColoredGemCounts(*(min(player.gems[color], effective[color]) for color in COLORS))
    shortfall = total_colored_gems(effective) - total_colored_gems(spend)
    return GemCounts(*(spend[color] for color in COLORS), wild=shortfall)


def compute_player_score(player: PlayerState, *, config: RulesConfig = DEFAULT_RULES) -> int:
    points_from_cards = sum(card.points for card in player.cards)
    points_from_tiles = config.location_tile_points * len(player.location_tiles)
    points_from_avenger_tile = config.avenger_tile_points if player.has_avenger_tile else 0
    return points_from_cards + points_from_tiles + points_from_avenger_tile


def has_win_con(player: PlayerState, *, config: RulesConfig = DEFAULT_RULES) -> bool:
    """Return ``True`` when the player has enough points and owns the time stone."""

    has_time_stone = any(card.has_time_stone for card in player.cards)
    return has_time_stone and compute_player_score(player, config=config) >= config.winning_score


def player_total_gems(player: PlayerState) -> int:
    return total_gems(player.gems)


def standings(state: GameState, *, config: RulesConfig = DEFAULT_RULES) -> list[PlayerStanding]:
    """Return a scoreboard row for every player in seating order."""

    return [
        PlayerStanding(
            player_index=idx,
            score=compute_player_score(player, config=config),
            cards=len(player.cards),
            total_gems=player_total_gems(player),
            location_tiles=len(player.location_tiles),
            has_avenger_tile=player.has_avenger_tile,
            has_win_con=has_win_con(player, config=config),
        )
        for idx, player in enumerate(state.players)
    ]

