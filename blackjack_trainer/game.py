from __future__ import annotations

import logging
import random
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .errors import EmptyShoe, InvalidConfiguration, RoundNotActive
from .strategy import (
    ACTIONS,
    CARD_VALUES,
    SPLIT,
    hand_value,
    is_pair,
    is_soft,
    normalise_dealer_key,
    player_key_for,
    recommend,
    validate_action,
)

logger = logging.getLogger(__name__)

SUITS: Tuple[str, ...] = ("diamond", "clover", "heart", "spade")
RANKS: Tuple[str, ...] = tuple(CARD_VALUES.keys())
DEFAULT_DECKS = 4

NATURAL_NONE = "none"
NATURAL_PLAYER = "player_blackjack"
NATURAL_DEALER = "dealer_blackjack"
NATURAL_PUSH = "push"


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in CARD_VALUES:
            raise ValueError(f"Unknown rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Unknown suit: {self.suit}")

    @property
    def value(self) -> int:
        return int(CARD_VALUES[self.rank])

    @property
    def asset_name(self) -> str:
        return f"{self.suit}-{self.rank}"

    def as_dict(self) -> Dict[str, object]:
        return {"rank": self.rank, "suit": self.suit, "value": self.value}


@dataclass
class Hand:
    cards: List[Card] = field(default_factory=list)

    def add(self, card: Card) -> None:
        self.cards.append(card)

    def value(self) -> int:
        return hand_value(self.cards)

    def is_soft(self) -> bool:
        return is_soft(self.cards)

    def is_pair(self) -> bool:
        return is_pair(self.cards)

    def as_list(self) -> List[Dict[str, object]]:
        return [card.as_dict() for card in self.cards]

    def __len__(self) -> int:
        return len(self.cards)


class Shoe:
    """Several 52-card decks merged and shuffled; cards are drawn from the end."""

    def __init__(self, decks: int = DEFAULT_DECKS, rng: Optional[random.Random] = None) -> None:
        if isinstance(decks, bool) or not isinstance(decks, int) or decks < 1:
            raise InvalidConfiguration(f"At least one deck is required, got {decks!r}")
        self.decks = decks
        self._rng = rng or random.Random()
        self.cards: List[Card] = [
            Card(rank, suit)
            for _ in range(self.decks)
            for suit in SUITS
            for rank in RANKS
        ]
        self.initial_size = len(self.cards)
        self.shuffle()

    def shuffle(self) -> None:
        # Fisher-Yates, walking down from the last card.
        cards = self.cards
        for i in range(len(cards) - 1, 0, -1):
            j = self._rng.randint(0, i)
            cards[i], cards[j] = cards[j], cards[i]

    def draw(self) -> Card:
        if not self.cards:
            raise EmptyShoe("No cards left in the shoe")
        return self.cards.pop()

    def size(self) -> int:
        return len(self.cards)

    def remaining_fraction(self) -> float:
        return len(self.cards) / self.initial_size

    def __len__(self) -> int:
        return len(self.cards)


@dataclass
class DealtHands:
    player: Hand
    dealer_visible: Hand
    dealer_hidden: Hand


def deal_initial_hands(shoe: Shoe) -> DealtHands:
    """Deal two player cards, then the dealer up-card and hole card."""

    player, dealer_visible, dealer_hidden = Hand(), Hand(), Hand()
    player.add(shoe.draw())
    player.add(shoe.draw())
    dealer_visible.add(shoe.draw())
    dealer_hidden.add(shoe.draw())
    return DealtHands(player, dealer_visible, dealer_hidden)


def check_natural_blackjack(player: Hand, dealer_visible: Hand, dealer_hidden: Hand) -> str:
    player_natural = player.value() == 21
    dealer_natural = hand_value(dealer_visible.cards + dealer_hidden.cards) == 21
    if player_natural and dealer_natural:
        return NATURAL_PUSH
    if player_natural:
        return NATURAL_PLAYER
    if dealer_natural:
        return NATURAL_DEALER
    return NATURAL_NONE


@dataclass(frozen=True)
class Decision:
    recommended: str
    correct: bool


def evaluate_decision(player: Hand, dealer_visible: Hand, declared: str) -> Decision:
    """Judge ``declared`` against the strategy chart without touching any score."""

    action = validate_action(declared)
    player_key, soft, pair = player_key_for(player.cards)
    dealer_key = normalise_dealer_key(dealer_visible.value())
    recommended = recommend(dealer_key, player_key, soft, pair)
    logger.debug(
        "Recommended action: %s, soft: %s, player hand: %s, dealer card: %s, pair: %s",
        recommended,
        soft,
        player_key,
        dealer_key,
        pair,
    )
    return Decision(recommended=recommended, correct=action == recommended)


def percentage(correct: int, total: int) -> int:
    if total == 0:
        return 0
    # Halves round up.
    return (200 * correct + total) // (2 * total)


@dataclass(frozen=True)
class ScoreSnapshot:
    correct: int
    total: int
    percentage: int

    def as_dict(self) -> Dict[str, int]:
        return {"correct": self.correct, "total": self.total, "percentage": self.percentage}


@dataclass
class ScoreState:
    correct: int = 0
    total: int = 0

    def record(self, correct: bool) -> None:
        self.total += 1
        if correct:
            self.correct += 1

    @property
    def percentage(self) -> int:
        return percentage(self.correct, self.total)

    def snapshot(self) -> ScoreSnapshot:
        return ScoreSnapshot(self.correct, self.total, self.percentage)


@dataclass(frozen=True)
class RoundView:
    player_hand: Hand
    dealer_visible_hand: Hand
    natural_outcome: str
    dealer_hidden_hand: Optional[Hand] = None

    @property
    def awaiting_action(self) -> bool:
        return self.natural_outcome == NATURAL_NONE

    def as_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "player_hand": self.player_hand.as_list(),
            "player_total": self.player_hand.value(),
            "dealer_visible_hand": self.dealer_visible_hand.as_list(),
            "dealer_total": self.dealer_visible_hand.value(),
            "natural_outcome": self.natural_outcome,
        }
        # The hole card is only revealed once a natural has closed the round.
        if self.dealer_hidden_hand is not None and not self.awaiting_action:
            payload["dealer_hidden_hand"] = self.dealer_hidden_hand.as_list()
        return payload


@dataclass(frozen=True)
class DecisionResult:
    declared_action: str
    recommended_action: str
    was_correct: bool
    score: ScoreSnapshot

    def feedback(self) -> Tuple[str, str]:
        if self.was_correct:
            return "Correct!", f"You always want to {self.recommended_action} in this situation"
        return "Incorrect.", f"The correct action was to {self.recommended_action}."

    def as_dict(self) -> Dict[str, object]:
        heading, detail = self.feedback()
        return {
            "declared_action": self.declared_action,
            "recommended_action": self.recommended_action,
            "was_correct": self.was_correct,
            "score": self.score.as_dict(),
            "feedback": {"heading": heading, "detail": detail},
        }


class TrainerSession:
    """One trainee's rounds and running score.

    Each session owns its random source, shoe and score; nothing is shared
    between sessions.
    """

    def __init__(
        self,
        decks: int = DEFAULT_DECKS,
        *,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        if isinstance(decks, bool) or not isinstance(decks, int) or decks < 1:
            raise InvalidConfiguration(f"At least one deck is required, got {decks!r}")
        self.decks = decks
        self.rng = rng or random.Random(seed)
        self.score = ScoreState()
        self.shoe: Optional[Shoe] = None
        self.player_hand = Hand()
        self.dealer_visible_hand = Hand()
        self.dealer_hidden_hand = Hand()
        self.natural_outcome = NATURAL_NONE
        self.awaiting_action = False
        self.lock = threading.Lock()

    def new_round(self, decks: Optional[int] = None) -> RoundView:
        # A fresh shoe every round.
        self.shoe = Shoe(self.decks if decks is None else decks, rng=self.rng)
        dealt = deal_initial_hands(self.shoe)
        self.player_hand = dealt.player
        self.dealer_visible_hand = dealt.dealer_visible
        self.dealer_hidden_hand = dealt.dealer_hidden
        self.natural_outcome = check_natural_blackjack(
            dealt.player, dealt.dealer_visible, dealt.dealer_hidden
        )
        self.awaiting_action = self.natural_outcome == NATURAL_NONE
        if not self.awaiting_action:
            logger.info("Round closed by natural: %s", self.natural_outcome)
        return self.round_view()

    def round_view(self) -> RoundView:
        return RoundView(
            player_hand=self.player_hand,
            dealer_visible_hand=self.dealer_visible_hand,
            natural_outcome=self.natural_outcome,
            dealer_hidden_hand=self.dealer_hidden_hand,
        )

    def available_actions(self) -> List[str]:
        if not self.awaiting_action:
            return []
        if self.player_hand.is_pair():
            return list(ACTIONS)
        return [action for action in ACTIONS if action != SPLIT]

    def submit_action(self, action: str) -> DecisionResult:
        if not self.awaiting_action:
            raise RoundNotActive("No round is waiting for a decision; deal a new round first")
        decision = evaluate_decision(self.player_hand, self.dealer_visible_hand, action)
        self.score.record(decision.correct)
        self.awaiting_action = False
        return DecisionResult(
            declared_action=validate_action(action),
            recommended_action=decision.recommended,
            was_correct=decision.correct,
            score=self.score.snapshot(),
        )

    def current_score(self) -> ScoreSnapshot:
        return self.score.snapshot()


__all__ = [
    "Card",
    "DEFAULT_DECKS",
    "Decision",
    "DecisionResult",
    "DealtHands",
    "Hand",
    "NATURAL_DEALER",
    "NATURAL_NONE",
    "NATURAL_PLAYER",
    "NATURAL_PUSH",
    "RANKS",
    "RoundView",
    "SUITS",
    "ScoreSnapshot",
    "ScoreState",
    "Shoe",
    "TrainerSession",
    "check_natural_blackjack",
    "deal_initial_hands",
    "evaluate_decision",
    "percentage",
]
