from __future__ import annotations

from dataclasses import replace

import pytest

from marvel_splendor import rules
from marvel_splendor.actions import (
    BuyReservedCard,
    CardBoardLocation,
    Move,
    RecruitCard,
    ReserveCard,
    TakeDifferentTokens,
    TakeSameTokens,
)
from marvel_splendor.cards import Card, LocationTile
from marvel_splendor.gems import ColoredGemCounts, GemColor, GemCounts, total_gems
from marvel_splendor.state import GameState, PlayerState, RulesConfig, default_bank


def _card(
    name: str,
    *,
    color: GemColor = GemColor.RED,
    points: int = 0,
    cost: ColoredGemCounts | None = None,
    avenger_count: int = 0,
) -> Card:
    return Card(
        name=name,
        points=points,
        color=color,
        cost=cost or ColoredGemCounts(),
        avenger_count=avenger_count,
    )


def _make_state(
    *,
    players: tuple[PlayerState, ...] | None = None,
    stacks: tuple[tuple[Card, ...], ...] | None = None,
    bank: GemCounts | None = None,
    player_turn: int = 0,
) -> GameState:
    board = tuple(
        tuple(_card(f"t{tier}s{slot}", color=GemColor.PURPLE) for slot in range(1, 5))
        for tier in range(1, 4)
    )
    if stacks is None:
        stacks = tuple(
            tuple(_card(f"t{tier}d{depth}", color=GemColor.ORANGE) for depth in range(1, 3))
            for tier in range(1, 4)
        )
    return GameState(
        board=board,
        card_stacks=stacks,
        gems=bank if bank is not None else default_bank(2),
        unclaimed_location_tiles=tuple(LocationTile),
        players=players if players is not None else (PlayerState(), PlayerState()),
        player_turn=player_turn,
    )


def _recruit(player_index: int, tier: int, slot: int) -> Move:
    return Move(player_index=player_index, action=RecruitCard(card=CardBoardLocation(tier=tier, slot=slot)))


def _all_gems(state: GameState) -> int:
    return total_gems(state.gems) + sum(total_gems(player.gems) for player in state.players)


@pytest.mark.parametrize(
    "action",
    [
        RecruitCard(card=CardBoardLocation(tier=1, slot=1)),
        BuyReservedCard(reserve_slot=1),
        TakeDifferentTokens(take=ColoredGemCounts(red=1, blue=1)),
        TakeSameTokens(take=ColoredGemCounts(red=2)),
        ReserveCard(card=Card(name="t1s1", points=0, color=GemColor.PURPLE)),
    ],
)
def test_move_out_of_turn_is_ignored(action) -> None:
    game_state = _make_state(player_turn=0)

    assert rules.transition(game_state, Move(player_index=1, action=action)) is game_state
    with pytest.raises(rules.NotPlayersTurn):
        rules.apply_move(game_state, Move(player_index=1, action=action))


def test_recruit_refills_slot_from_stack_and_shares_untouched_zones() -> None:
    game_state = _make_state()
    target = game_state.board[1][2]
    stack_head = game_state.card_stacks[1][0]

    result = rules.transition(game_state, _recruit(0, tier=2, slot=3))

    assert result.players[0].cards == (target,)
    assert result.board[1][2] == stack_head
    assert result.card_stacks[1] == game_state.card_stacks[1][1:]
    assert result.board[0] is game_state.board[0]
    assert result.board[2] is game_state.board[2]
    assert result.card_stacks[0] is game_state.card_stacks[0]
    assert result.card_stacks[2] is game_state.card_stacks[2]
    assert result.players[1] is game_state.players[1]
    assert result.gems is game_state.gems
    assert game_state.board[1][2] is target


def test_recruit_with_exhausted_stack_leaves_slot_empty() -> None:
    game_state = _make_state(stacks=((), (), ()))

    result = rules.transition(game_state, _recruit(0, tier=3, slot=4))

    assert result.board[2][3] is None
    assert result.card_stacks[2] == ()
    assert len(result.players[0].cards) == 1


def test_recruit_from_empty_slot_is_ignored() -> None:
    game_state = _make_state(stacks=((), (), ()))
    emptied = rules.transition(game_state, _recruit(0, tier=1, slot=1))

    assert rules.transition(emptied, _recruit(0, tier=1, slot=1)) is emptied


def test_recruit_requires_affordability_but_does_not_charge_by_default() -> None:
    pricey = _card("pricey", cost=ColoredGemCounts(red=3))
    owner = PlayerState(cards=(_card("red bonus"),), gems=GemCounts(red=1, wild=1))
    game_state = _make_state(players=(owner, PlayerState()))
    game_state = game_state.with_board_slot(0, 0, pricey)

    result = rules.transition(game_state, _recruit(0, tier=1, slot=1))
    assert result.players[0].cards[-1] == pricey
    assert result.players[0].gems == owner.gems

    broke = replace(owner, gems=GemCounts(red=1))
    poor_state = game_state.with_player(0, broke)
    assert rules.transition(poor_state, _recruit(0, tier=1, slot=1)) is poor_state


def test_recruit_charges_when_purchases_cost_gems() -> None:
    config = RulesConfig(charge_for_purchases=True)
    pricey = _card("pricey", cost=ColoredGemCounts(red=3, blue=1))
    owner = PlayerState(
        cards=(_card("red bonus"), _card("blue bonus", color=GemColor.BLUE)),
        gems=GemCounts(red=1, yellow=2, wild=1),
    )
    game_state = _make_state(players=(owner, PlayerState())).with_board_slot(0, 0, pricey)

    result = rules.transition(game_state, _recruit(0, tier=1, slot=1), config=config)

    assert result.players[0].gems == GemCounts(yellow=2)
    assert result.gems == replace(game_state.gems, red=game_state.gems.red + 1, wild=game_state.gems.wild + 1)
    assert _all_gems(result) == _all_gems(game_state)


def test_buy_reserved_card_compacts_remaining_slots() -> None:
    first, second, third = _card("first"), _card("second"), _card("third")
    owner = PlayerState(reserved_cards=(first, second, third))
    game_state = _make_state(players=(owner, PlayerState()))

    result = rules.transition(game_state, Move(player_index=0, action=BuyReservedCard(reserve_slot=2)))

    assert result.players[0].cards == (second,)
    assert result.players[0].reserved_cards == (first, third, None)
    assert result.board is game_state.board
    assert result.players[1] is game_state.players[1]


def test_buy_empty_reserve_slot_is_ignored() -> None:
    owner = PlayerState(reserved_cards=(_card("only"), None, None))
    game_state = _make_state(players=(owner, PlayerState()))

    move = Move(player_index=0, action=BuyReservedCard(reserve_slot=2))
    assert rules.transition(game_state, move) is game_state


def test_buy_reserved_card_checks_cost_only_when_charging() -> None:
    pricey = _card("pricey", cost=ColoredGemCounts(blue=2))
    owner = PlayerState(reserved_cards=(pricey, None, None), gems=GemCounts(blue=1))
    game_state = _make_state(players=(owner, PlayerState()))
    move = Move(player_index=0, action=BuyReservedCard(reserve_slot=1))

    free = rules.transition(game_state, move)
    assert free.players[0].cards == (pricey,)
    assert free.players[0].gems == owner.gems

    charging = RulesConfig(charge_for_purchases=True)
    assert rules.transition(game_state, move, config=charging) is game_state

    funded = game_state.with_player(0, replace(owner, gems=GemCounts(blue=1, wild=1)))
    paid = rules.transition(funded, move, config=charging)
    assert paid.players[0].gems == GemCounts()
    assert _all_gems(paid) == _all_gems(funded)


def test_take_different_tokens_moves_gems_from_bank() -> None:
    game_state = _make_state()
    take = ColoredGemCounts(red=1, blue=1, yellow=1)

    result = rules.transition(game_state, Move(player_index=0, action=TakeDifferentTokens(take=take)))

    assert result.players[0].gems == GemCounts(red=1, blue=1, yellow=1)
    assert result.gems.red == game_state.gems.red - 1
    assert result.gems.purple == game_state.gems.purple
    assert result.board is game_state.board
    assert _all_gems(result) == _all_gems(game_state)


@pytest.mark.parametrize(
    "take",
    [
        ColoredGemCounts(),
        ColoredGemCounts(red=2),
        ColoredGemCounts(purple=1, red=1, orange=1, blue=1),
    ],
)
def test_take_different_tokens_rejects_bad_shapes(take: ColoredGemCounts) -> None:
    game_state = _make_state()

    move = Move(player_index=0, action=TakeDifferentTokens(take=take))
    assert rules.transition(game_state, move) is game_state


def test_take_different_tokens_requires_bank_stock() -> None:
    game_state = _make_state(bank=GemCounts(red=0, blue=4, wild=5))

    move = Move(player_index=0, action=TakeDifferentTokens(take=ColoredGemCounts(red=1, blue=1)))
    assert rules.transition(game_state, move) is game_state


def test_take_same_tokens_needs_a_full_pile() -> None:
    game_state = _make_state(bank=GemCounts(red=4, blue=3, wild=5))

    taken = rules.transition(game_state, Move(player_index=0, action=TakeSameTokens(take=ColoredGemCounts(red=2))))
    assert taken.players[0].gems == GemCounts(red=2)
    assert taken.gems.red == 2

    short_pile = Move(player_index=0, action=TakeSameTokens(take=ColoredGemCounts(blue=2)))
    assert rules.transition(game_state, short_pile) is game_state

    wrong_amount = Move(player_index=0, action=TakeSameTokens(take=ColoredGemCounts(red=3)))
    assert rules.transition(game_state, wrong_amount) is game_state


def test_hand_limit_requires_exact_give_back() -> None:
    owner = PlayerState(gems=GemCounts(red=3, blue=3, yellow=3))
    game_state = _make_state(players=(owner, PlayerState()))
    take = ColoredGemCounts(purple=1, orange=1, red=1)

    no_return = Move(player_index=0, action=TakeDifferentTokens(take=take))
    assert rules.transition(game_state, no_return) is game_state

    too_many = Move(player_index=0, action=TakeDifferentTokens(take=take, give_back=ColoredGemCounts(red=3)))
    assert rules.transition(game_state, too_many) is game_state

    exact = Move(player_index=0, action=TakeDifferentTokens(take=take, give_back=ColoredGemCounts(red=2)))
    result = rules.transition(game_state, exact)
    assert total_gems(result.players[0].gems) == 10
    assert result.players[0].gems.red == 2
    assert result.gems.red == game_state.gems.red + 1
    assert _all_gems(result) == _all_gems(game_state)


def test_give_back_below_hand_limit_is_rejected() -> None:
    owner = PlayerState(gems=GemCounts(red=2))
    game_state = _make_state(players=(owner, PlayerState()))

    move = Move(
        player_index=0,
        action=TakeSameTokens(take=ColoredGemCounts(blue=2), give_back=ColoredGemCounts(red=1)),
    )
    with pytest.raises(rules.IllegalTokenTake):
        rules.apply_move(game_state, move)


def test_reserve_from_board_refills_slot_and_grants_wild() -> None:
    game_state = _make_state()
    target = game_state.board[0][1]

    result = rules.transition(game_state, Move(player_index=0, action=ReserveCard(card=target)))

    assert result.players[0].reserved_cards == (target, None, None)
    assert result.players[0].gems == GemCounts(wild=1)
    assert result.gems.wild == game_state.gems.wild - 1
    assert result.board[0][1] == game_state.card_stacks[0][0]
    assert result.card_stacks[0] == game_state.card_stacks[0][1:]
    assert result.board[1] is game_state.board[1]


def test_reserve_top_of_stack() -> None:
    game_state = _make_state(bank=GemCounts(red=4))
    hidden = game_state.card_stacks[2][0]

    result = rules.transition(game_state, Move(player_index=0, action=ReserveCard(card=hidden)))

    assert result.players[0].reserved_cards[0] == hidden
    assert result.players[0].gems == GemCounts()
    assert result.card_stacks[2] == game_state.card_stacks[2][1:]
    assert result.board is game_state.board


def test_reserve_rejects_full_reserve_and_unknown_cards() -> None:
    full = PlayerState(reserved_cards=(_card("a"), _card("b"), _card("c")))
    game_state = _make_state(players=(full, PlayerState()))
    on_board = Move(player_index=0, action=ReserveCard(card=game_state.board[0][0]))
    assert rules.transition(game_state, on_board) is game_state

    fresh = _make_state()
    missing = Move(player_index=0, action=ReserveCard(card=_card("nowhere")))
    with pytest.raises(rules.IllegalReserve):
        rules.apply_move(fresh, missing)


def test_reserve_with_full_hand_must_return_a_colored_gem() -> None:
    owner = PlayerState(gems=GemCounts(red=5, blue=5))
    game_state = _make_state(players=(owner, PlayerState()))
    target = game_state.board[2][0]

    assert rules.transition(game_state, Move(player_index=0, action=ReserveCard(card=target))) is game_state

    move = Move(player_index=0, action=ReserveCard(card=target, give_back=ColoredGemCounts(blue=1)))
    result = rules.transition(game_state, move)
    assert result.players[0].gems == GemCounts(red=5, blue=4, wild=1)


def test_recruit_claims_first_met_location_tile() -> None:
    bonuses = tuple(
        _card(f"{color.value}{idx}", color=color)
        for color, amount in ((GemColor.RED, 3), (GemColor.BLUE, 3), (GemColor.YELLOW, 2))
        for idx in range(amount)
    )
    owner = PlayerState(cards=bonuses)
    game_state = _make_state(players=(owner, PlayerState()))
    game_state = game_state.with_board_slot(0, 0, _card("yellow", color=GemColor.YELLOW))

    claiming = RulesConfig(claim_location_tiles=True)
    result = rules.transition(game_state, _recruit(0, tier=1, slot=1), config=claiming)

    assert result.players[0].location_tiles == (LocationTile.KNOWHERE,)
    assert LocationTile.KNOWHERE not in result.unclaimed_location_tiles
    assert len(result.unclaimed_location_tiles) == len(game_state.unclaimed_location_tiles) - 1

    untouched = rules.transition(game_state, _recruit(0, tier=1, slot=1))
    assert untouched.players[0].location_tiles == ()
    assert untouched.unclaimed_location_tiles is game_state.unclaimed_location_tiles


def test_avenger_tile_goes_to_strict_leader() -> None:
    holder = PlayerState(cards=(_card("veteran", avenger_count=3),), has_avenger_tile=True)
    challenger = PlayerState(cards=(_card("rookie", avenger_count=2),))
    game_state = _make_state(players=(challenger, holder))
    awarding = RulesConfig(award_avenger_tile=True)

    tie = game_state.with_board_slot(0, 0, _card("one", avenger_count=1))
    tied = rules.transition(tie, _recruit(0, tier=1, slot=1), config=awarding)
    assert not tied.players[0].has_avenger_tile
    assert tied.players[1].has_avenger_tile

    lead = game_state.with_board_slot(0, 0, _card("two", avenger_count=2))
    overtaken = rules.transition(lead, _recruit(0, tier=1, slot=1), config=awarding)
    assert overtaken.players[0].has_avenger_tile
    assert not overtaken.players[1].has_avenger_tile


def test_recruit_leaves_avenger_tile_holder_untouched_by_default() -> None:
    holder = PlayerState(cards=(_card("veteran", avenger_count=3),), has_avenger_tile=True)
    game_state = _make_state(players=(PlayerState(), holder))
    game_state = game_state.with_board_slot(1, 2, _card("icons", avenger_count=4))

    result = rules.transition(game_state, _recruit(0, tier=2, slot=3))

    assert result.players[0].cards[-1].avenger_count == 4
    assert not result.players[0].has_avenger_tile
    assert result.players[1] is game_state.players[1]


def test_recruit_leaves_location_tiles_untouched_by_default() -> None:
    bonuses = tuple(_card(f"red{idx}") for idx in range(4)) + tuple(
        _card(f"blue{idx}", color=GemColor.BLUE) for idx in range(3)
    )
    game_state = _make_state(players=(PlayerState(cards=bonuses), PlayerState()))
    game_state = game_state.with_board_slot(0, 0, _card("blue", color=GemColor.BLUE))

    result = rules.transition(game_state, _recruit(0, tier=1, slot=1))

    assert result.players[0].location_tiles == ()
    assert result.unclaimed_location_tiles is game_state.unclaimed_location_tiles
