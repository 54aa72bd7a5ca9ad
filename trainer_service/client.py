"""Command-line client for practising basic strategy against the trainer server."""

from __future__ import annotations

import argparse
import json
import logging
import os
from typing import Any, Callable, Dict, Iterable, Optional

import requests

from blackjack_trainer.strategy import ACTIONS, ACTION_LABELS

DEFAULT_SERVER = os.getenv("BLACKJACK_TRAINER_SERVER", "http://localhost:8000/api/v1")

# Single-key shortcuts accepted at the prompt.
SHORTCUTS = {
    "h": "hit",
    "s": "stand",
    "d": "double down",
    "p": "split",
    "r": "surrender",
}

NATURAL_MESSAGES = {
    "player_blackjack": "BLACKJACK! Nothing to decide this round.",
    "dealer_blackjack": "Dealer has blackjack. Nothing to decide this round.",
    "push": "Both sides have blackjack. Nothing to decide this round.",
}


def _url(server_url: str, path: str) -> str:
    return server_url.rstrip("/") + path


def _post(server_url: str, path: str, payload: Optional[Dict[str, Any]] = None, *, timeout: float = 5.0) -> Dict[str, Any]:
    response = requests.post(_url(server_url, path), json=payload or {}, timeout=timeout)
    if response.status_code >= 400:
        try:
            print(response.json().get("error", response.text))
        except ValueError:
            print(response.text)
    response.raise_for_status()
    return response.json()


def _get(server_url: str, path: str, *, timeout: float = 5.0) -> Dict[str, Any]:
    response = requests.get(_url(server_url, path), timeout=timeout)
    response.raise_for_status()
    return response.json()


def _describe_cards(cards: Iterable[Dict[str, Any]]) -> str:
    ranks = [str(card["rank"]) for card in cards]
    return " + ".join(ranks) if ranks else "-"


def _print_round(round_view: Dict[str, Any]) -> None:
    print(
        "Player:",
        _describe_cards(round_view["player_hand"]),
        f"(total {round_view['player_total']})",
    )
    print(
        "Dealer:",
        _describe_cards(round_view["dealer_visible_hand"]),
        f"(total {round_view['dealer_total']})",
    )


def _print_score(score: Dict[str, Any]) -> None:
    print(f"Score: {score['correct']}/{score['total']} ({score['percentage']}%)")


def parse_action(text: str, available: Iterable[str]) -> Optional[str]:
    """Map prompt input to an action name, or None when it is not allowed."""

    choice = text.strip().lower()
    choice = SHORTCUTS.get(choice, choice)
    if choice in ACTIONS and choice in available:
        return choice
    return None


def _prompt_action(available: Iterable[str], read: Callable[[str], str]) -> Optional[str]:
    available = list(available)
    options = ", ".join(ACTION_LABELS[action] for action in available)
    while True:
        answer = read(f"Your action [{options}] (q to quit): ")
        if answer.strip().lower() in {"q", "quit"}:
            return None
        action = parse_action(answer, available)
        if action is not None:
            return action
        print("Unknown or unavailable action:", answer)


def play(
    server_url: str,
    *,
    rounds: Optional[int] = None,
    decks: Optional[int] = None,
    seed: Optional[int] = None,
    read: Callable[[str], str] = input,
) -> Dict[str, Any]:
    """Play rounds until ``rounds`` is reached or the user quits; return the final score."""

    payload: Dict[str, Any] = {}
    if decks is not None:
        payload["decks"] = decks
    if seed is not None:
        payload["seed"] = seed
    session = _post(server_url, "/sessions", payload)
    session_id = session["session_id"]
    print("Session:", session_id)

    played = 0
    while rounds is None or played < rounds:
        round_view = _post(server_url, f"/sessions/{session_id}/rounds")
        played += 1
        print()
        _print_round(round_view)
        outcome = round_view["natural_outcome"]
        if outcome != "none":
            print(NATURAL_MESSAGES.get(outcome, outcome))
            continue
        action = _prompt_action(round_view["available_actions"], read)
        if action is None:
            break
        result = _post(server_url, f"/sessions/{session_id}/actions", {"action": action})
        print(result["feedback"]["heading"], result["feedback"]["detail"])
        _print_score(result["score"])

    score = _get(server_url, f"/sessions/{session_id}/score")
    print()
    _print_score(score)
    return score


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Blackjack basic-strategy trainer client")
    parser.add_argument("--log-level", default=os.getenv("BLACKJACK_TRAINER_LOG_LEVEL", "WARNING"), help="Logging level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    play_cmd = subparsers.add_parser("play", help="Practise rounds in the terminal")
    play_cmd.add_argument("--rounds", type=int, default=None, help="Stop after N rounds (unlimited if absent)")
    play_cmd.add_argument("--decks", type=int, default=None, help="Decks per shoe (server default if absent)")
    play_cmd.add_argument("--seed", type=int, default=None, help="Seed for reproducible deals")
    play_cmd.add_argument("--server-url", default=DEFAULT_SERVER, help="Trainer server base URL")

    score = subparsers.add_parser("score", help="Display a session's score")
    score.add_argument("session_id", help="Session identifier")
    score.add_argument("--server-url", default=DEFAULT_SERVER, help="Trainer server base URL")

    status = subparsers.add_parser("status", help="Display server status")
    status.add_argument("--server-url", default=DEFAULT_SERVER, help="Trainer server base URL")

    return parser


def main(argv: Optional[Iterable[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=str(args.log_level).upper())

    try:
        if args.command == "play":
            play(args.server_url, rounds=args.rounds, decks=args.decks, seed=args.seed)
        elif args.command == "score":
            print(json.dumps(_get(args.server_url, f"/sessions/{args.session_id}/score"), indent=2))
        elif args.command == "status":
            print(json.dumps(_get(args.server_url, "/status"), indent=2))
        else:  # pragma: no cover - argparse rejects unknown commands
            parser.error(f"Unknown command {args.command}")
    except requests.RequestException as exc:
        print("Request to the trainer server failed:", exc)
        raise SystemExit(1) from exc
    except (KeyboardInterrupt, EOFError):
        print()


if __name__ == "__main__":
    main()
