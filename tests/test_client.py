from __future__ import annotations

import io
import unittest
from contextlib import redirect_stdout
from typing import Any, Dict
from unittest import mock

import requests

from trainer_service import client


def _response(payload: Dict[str, Any], status_code: int = 200) -> mock.Mock:
    response = mock.Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


ROUND = {
    "player_hand": [{"rank": "k", "suit": "heart", "value": 10}, {"rank": "5", "suit": "spade", "value": 5}],
    "player_total": 15,
    "dealer_visible_hand": [{"rank": "7", "suit": "clover", "value": 7}],
    "dealer_total": 7,
    "natural_outcome": "none",
    "available_actions": ["hit", "stand", "double down", "surrender"],
}
RESULT = {
    "declared_action": "stand",
    "recommended_action": "hit",
    "was_correct": False,
    "score": {"correct": 0, "total": 1, "percentage": 0},
    "feedback": {"heading": "Incorrect.", "detail": "The correct action was to hit."},
}
SCORE = {"correct": 0, "total": 1, "percentage": 0}


class ParseActionTests(unittest.TestCase):
    def test_shortcuts_and_names(self) -> None:
        available = ["hit", "stand", "double down", "split", "surrender"]
        self.assertEqual(client.parse_action("h", available), "hit")
        self.assertEqual(client.parse_action(" Double Down ", available), "double down")
        self.assertEqual(client.parse_action("p", available), "split")

    def test_unavailable_actions(self) -> None:
        self.assertIsNone(client.parse_action("p", ["hit", "stand"]))
        self.assertIsNone(client.parse_action("insurance", ["hit", "stand"]))


class PlayTests(unittest.TestCase):
    def test_single_round(self) -> None:
        posts = [_response({"session_id": "abc", "decks": 4, "score": {}}, 201), _response(ROUND), _response(RESULT)]
        with mock.patch.object(client.requests, "post", side_effect=posts) as post, mock.patch.object(
            client.requests, "get", return_value=_response(SCORE)
        ) as get, redirect_stdout(io.StringIO()) as output:
            score = client.play("http://trainer/api/v1/", rounds=1, seed=3, read=lambda prompt: "s")

        self.assertEqual(score, SCORE)
        self.assertEqual(post.call_args_list[0].args[0], "http://trainer/api/v1/sessions")
        self.assertEqual(post.call_args_list[0].kwargs["json"], {"seed": 3})
        self.assertEqual(post.call_args_list[2].kwargs["json"], {"action": "stand"})
        get.assert_called_once_with("http://trainer/api/v1/sessions/abc/score", timeout=5.0)
        self.assertIn("The correct action was to hit.", output.getvalue())
        self.assertIn("Score: 0/1 (0%)", output.getvalue())

    def test_quit_stops_without_submitting(self) -> None:
        posts = [_response({"session_id": "abc"}, 201), _response(ROUND)]
        answers = iter(["x", "q"])
        with mock.patch.object(client.requests, "post", side_effect=posts) as post, mock.patch.object(
            client.requests, "get", return_value=_response({"correct": 0, "total": 0, "percentage": 0})
        ), redirect_stdout(io.StringIO()) as output:
            client.play("http://trainer/api/v1", read=lambda prompt: next(answers))

        self.assertEqual(post.call_count, 2)
        self.assertIn("Unknown or unavailable action: x", output.getvalue())

    def test_natural_round_is_skipped(self) -> None:
        natural = dict(ROUND, natural_outcome="player_blackjack", available_actions=[])
        posts = [_response({"session_id": "abc"}, 201), _response(natural)]
        with mock.patch.object(client.requests, "post", side_effect=posts), mock.patch.object(
            client.requests, "get", return_value=_response(SCORE)
        ), redirect_stdout(io.StringIO()) as output:
            client.play("http://trainer/api/v1", rounds=1, read=lambda prompt: self.fail("prompted"))

        self.assertIn("BLACKJACK!", output.getvalue())


class MainTests(unittest.TestCase):
    def test_status(self) -> None:
        with mock.patch.object(client.requests, "get", return_value=_response({"sessions": 2})) as get, redirect_stdout(
            io.StringIO()
        ) as output:
            client.main(["status", "--server-url", "http://trainer/api/v1"])
        get.assert_called_once_with("http://trainer/api/v1/status", timeout=5.0)
        self.assertIn('"sessions": 2', output.getvalue())

    def test_request_failure_exits(self) -> None:
        with mock.patch.object(
            client.requests, "get", side_effect=requests.ConnectionError("refused")
        ), redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                client.main(["score", "abc"])
        self.assertEqual(ctx.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
