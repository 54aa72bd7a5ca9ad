"""Basic-strategy trainer core: shoe, hand evaluation and the strategy chart."""

from .errors import (
    EmptyShoe,
    InvalidAction,
    InvalidConfiguration,
    InvalidHandSize,
    LookupMiss,
    RoundNotActive,
    TrainerError,
)
from .game import (
    Card,
    DecisionResult,
    Hand,
    RoundView,
    ScoreSnapshot,
    ScoreState,
    Shoe,
    TrainerSession,
    check_natural_blackjack,
    deal_initial_hands,
    evaluate_decision,
)
from .strategy import (
    ACTIONS,
    ACTION_LABELS,
    STRATEGY,
    hand_value,
    is_pair,
    is_soft,
    normalise_dealer_key,
    normalise_player_key,
    recommend,
)

__all__ = [
    "ACTIONS",
    "ACTION_LABELS",
    "Card",
    "DecisionResult",
    "EmptyShoe",
    "Hand",
    "InvalidAction",
    "InvalidConfiguration",
    "InvalidHandSize",
    "LookupMiss",
    "RoundNotActive",
    "RoundView",
    "STRATEGY",
    "ScoreSnapshot",
    "ScoreState",
    "Shoe",
    "TrainerError",
    "TrainerSession",
    "check_natural_blackjack",
    "deal_initial_hands",
    "evaluate_decision",
    "hand_value",
    "is_pair",
    "is_soft",
    "normalise_dealer_key",
    "normalise_player_key",
    "recommend",
]
