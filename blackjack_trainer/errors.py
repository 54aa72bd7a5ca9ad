"""Exceptions raised by the strategy trainer core."""

from __future__ import annotations


class TrainerError(Exception):
    """Base class for every error raised by :mod:`blackjack_trainer`."""


class InvalidConfiguration(TrainerError, ValueError):
    """Raised when a shoe or session is configured with a bad deck count."""


class EmptyShoe(TrainerError, IndexError):
    """Raised when drawing from a shoe with no cards left."""


class LookupMiss(TrainerError, KeyError):
    """Raised when a player/dealer key pair is missing from the strategy chart."""

    def __init__(self, player_key: object, dealer_key: object) -> None:
        super().__init__(f"No strategy entry for player {player_key!r} vs dealer {dealer_key!r}")
        self.player_key = player_key
        self.dealer_key = dealer_key

    def __str__(self) -> str:
        return str(self.args[0])


class InvalidHandSize(TrainerError, ValueError):
    """Raised when a two-card check is applied to a hand of another size."""


class InvalidAction(TrainerError, ValueError):
    """Raised when a declared action is not part of the action vocabulary."""


class RoundNotActive(TrainerError, RuntimeError):
    """Raised when an action is submitted while no round awaits a decision."""


__all__ = [
    "EmptyShoe",
    "InvalidAction",
    "InvalidConfiguration",
    "InvalidHandSize",
    "LookupMiss",
    "RoundNotActive",
    "TrainerError",
]
