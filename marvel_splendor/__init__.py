"""Top-level package for the Marvel Splendor rules engine."""

from . import actions, cards, encoding, gems, rules, serialization, state
from .actions import Move
from .rules import can_recruit_card, compute_player_score, has_win_con, transition
from .state import GameState, PlayerState

__all__ = [
    "actions",
    "cards",
    "encoding",
    "gems",
    "rules",
    "serialization",
    "state",
    "GameState",
    "Move",
    "PlayerState",
    "can_recruit_card",
    "compute_player_score",
    "has_win_con",
    "transition",
]
