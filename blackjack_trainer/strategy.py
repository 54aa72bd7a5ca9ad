from __future__ import annotations

from itertools import combinations_with_replacement
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple, Union

from .errors import InvalidAction, InvalidHandSize, LookupMiss

CARD_VALUES: Dict[str, int] = {
    "a": 11,
    "2": 2,
    "3": 3,
    "4": 4,
    "5": 5,
    "6": 6,
    "7": 7,
    "8": 8,
    "9": 9,
    "10": 10,
    "j": 10,
    "q": 10,
    "k": 10,
}
RANKS: Tuple[str, ...] = tuple(CARD_VALUES.keys())

HIT = "hit"
STAND = "stand"
DOUBLE_DOWN = "double down"
SPLIT = "split"
SURRENDER = "surrender"
ACTIONS: Tuple[str, ...] = (HIT, STAND, DOUBLE_DOWN, SPLIT, SURRENDER)

ACTION_LABELS = {
    HIT: "Hit",
    STAND: "Stand",
    DOUBLE_DOWN: "Double Down",
    SPLIT: "Split",
    SURRENDER: "Surrender",
}

DEALER_KEYS: Tuple[str, ...] = ("2", "3", "4", "5", "6", "7", "8", "9", "10", "a")

PlayerKey = Union[int, str]

# Dealer stands on soft 17, double after split allowed, late surrender, 4-8 decks.
# Rows are the player's hand (hard total, soft total or pair), columns the dealer up-card.
_H, _S, _D, _P, _R = HIT, STAND, DOUBLE_DOWN, SPLIT, SURRENDER


def _row(*actions: str) -> Mapping[str, str]:
    return MappingProxyType(dict(zip(DEALER_KEYS, actions)))


STRATEGY: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        # Hard totals
        "8-": _row(_H, _H, _H, _H, _H, _H, _H, _H, _H, _H),
        "9": _row(_H, _D, _D, _D, _D, _H, _H, _H, _H, _H),
        "10": _row(_D, _D, _D, _D, _D, _D, _D, _D, _H, _H),
        "11": _row(_D, _D, _D, _D, _D, _D, _D, _D, _D, _D),
        "12": _row(_H, _H, _S, _S, _S, _H, _H, _H, _H, _H),
        "13": _row(_S, _S, _S, _S, _S, _H, _H, _H, _H, _H),
        "14": _row(_S, _S, _S, _S, _S, _H, _H, _H, _H, _H),
        "15": _row(_S, _S, _S, _S, _S, _H, _H, _H, _R, _H),
        "16": _row(_S, _S, _S, _S, _S, _H, _H, _R, _R, _R),
        "17+": _row(_S, _S, _S, _S, _S, _S, _S, _S, _S, _S),
        # Soft totals
        "a,2": _row(_H, _H, _H, _D, _D, _H, _H, _H, _H, _H),
        "a,3": _row(_H, _H, _H, _D, _D, _H, _H, _H, _H, _H),
        "a,4": _row(_H, _H, _H, _D, _D, _H, _H, _H, _H, _H),
        "a,5": _row(_H, _H, _H, _D, _D, _H, _H, _H, _H, _H),
        "a,6": _row(_H, _D, _D, _D, _D, _H, _H, _H, _H, _H),
        "a,7": _row(_S, _D, _D, _D, _D, _S, _S, _H, _H, _H),
        "a,8": _row(_S, _S, _S, _S, _S, _S, _S, _S, _S, _S),
        "a,9": _row(_S, _S, _S, _S, _S, _S, _S, _S, _S, _S),
        # Pairs
        "a,a": _row(_P, _P, _P, _P, _P, _P, _P, _P, _P, _P),
        "2,2": _row(_P, _P, _P, _P, _P, _P, _H, _H, _H, _H),
        "3,3": _row(_P, _P, _P, _P, _P, _P, _H, _H, _H, _H),
        "4,4": _row(_H, _H, _H, _P, _P, _H, _H, _H, _H, _H),
        "5,5": _row(_D, _D, _D, _D, _D, _D, _D, _D, _H, _H),
        "6,6": _row(_P, _P, _P, _P, _P, _H, _H, _H, _H, _H),
        "7,7": _row(_P, _P, _P, _P, _P, _P, _S, _H, _H, _H),
        "8,8": _row(_P, _P, _P, _P, _P, _P, _P, _P, _S, _P),
        "9,9": _row(_P, _P, _P, _P, _P, _S, _P, _P, _S, _S),
        "10,10": _row(_S, _S, _S, _S, _S, _S, _S, _S, _S, _S),
    }
)


def _rank(card: object) -> str:
    rank = card if isinstance(card, str) else getattr(card, "rank", None)
    rank = str(rank).lower()
    if rank not in CARD_VALUES:
        raise ValueError(f"Unknown card rank: {rank}")
    return rank


def _require_two_cards(cards: Sequence[object]) -> None:
    if len(cards) != 2:
        raise InvalidHandSize(f"Expected a two-card hand, got {len(cards)} card(s)")


def hand_value(cards: Iterable[object]) -> int:
    """Return the blackjack total of ``cards`` (ranks or objects with a ``rank``).

    Aces are valued left to right: 11 while the running total is at most 10,
    1 afterwards. This matches the best total for two-card hands only.
    """

    total = 0
    for card in cards:
        rank = _rank(card)
        if rank == "a":
            total += 11 if total <= 10 else 1
        else:
            total += CARD_VALUES[rank]
    return total


def is_soft(cards: Sequence[object]) -> bool:
    """Return True when a two-card hand holds at least one ace."""

    _require_two_cards(cards)
    return any(_rank(card) == "a" for card in cards)


def is_pair(cards: Sequence[object]) -> bool:
    """Return True for two cards of the same rank or any two ten-valued cards."""

    _require_two_cards(cards)
    first, second = (_rank(card) for card in cards)
    if first == second:
        return True
    return hand_value(cards) == 20 and not is_soft(cards)


def normalise_player_key(value: int, soft: bool, pair: bool) -> PlayerKey:
    if pair and soft:
        return "a,a"
    if pair:
        half = value // 2
        return f"{half},{half}"
    if soft:
        return f"a,{value - 11}"
    return value


def normalise_dealer_key(value: int) -> str:
    return "a" if value == 11 else str(value)


def recommend(dealer_key: str, player_key: PlayerKey, soft: bool, pair: bool) -> str:
    """Look up the basic-strategy action for a normalised hand."""

    if not pair and not soft:
        if int(player_key) <= 8:
            return HIT
        if int(player_key) >= 17:
            return STAND
    row = STRATEGY.get(str(player_key))
    if row is None or str(dealer_key) not in row:
        raise LookupMiss(player_key, dealer_key)
    return row[str(dealer_key)]


def validate_action(action: object) -> str:
    text = str(action).strip().lower() if action is not None else ""
    if text not in ACTIONS:
        raise InvalidAction(f"Unknown action {action!r}; expected one of {', '.join(ACTIONS)}")
    return text


def player_key_for(cards: Sequence[object]) -> Tuple[PlayerKey, bool, bool]:
    """Return ``(key, soft, pair)`` for a two-card player hand."""

    soft = is_soft(cards)
    pair = is_pair(cards)
    return normalise_player_key(hand_value(cards), soft, pair), soft, pair


def reachable_player_keys() -> List[PlayerKey]:
    """Every player key a two-card deal can produce, naturals excluded."""

    keys: List[PlayerKey] = []
    for first, second in combinations_with_replacement(RANKS, 2):
        if hand_value((first, second)) == 21:
            continue
        key, _, _ = player_key_for((first, second))
        if key not in keys:
            keys.append(key)
    return keys


__all__ = [
    "ACTIONS",
    "ACTION_LABELS",
    "CARD_VALUES",
    "DEALER_KEYS",
    "DOUBLE_DOWN",
    "HIT",
    "RANKS",
    "SPLIT",
    "STAND",
    "STRATEGY",
    "SURRENDER",
    "hand_value",
    "is_pair",
    "is_soft",
    "normalise_dealer_key",
    "normalise_player_key",
    "player_key_for",
    "reachable_player_keys",
    "recommend",
    "validate_action",
]
