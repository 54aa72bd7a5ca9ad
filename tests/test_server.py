from __future__ import annotations

import os
import unittest
from typing import Any, Dict
from unittest import mock

from blackjack_trainer import InvalidConfiguration
from trainer_service import SessionRegistry, UnknownSession, create_app
from trainer_service.sessions import SessionLimitReached


class SessionRegistryTests(unittest.TestCase):
    def test_sessions_are_independent(self) -> None:
        registry = SessionRegistry(default_decks=2)
        first = registry.create(seed=1)
        second = registry.create(seed=1)
        self.assertNotEqual(first, second)
        self.assertIsNot(registry.get(first), registry.get(second))
        self.assertIsNot(registry.get(first).rng, registry.get(second).rng)
        self.assertEqual(registry.get(first).decks, 2)
        self.assertEqual(registry.session_count(), 2)

    def test_drop_unknown_session(self) -> None:
        registry = SessionRegistry()
        session_id = registry.create()
        registry.drop(session_id)
        with self.assertRaises(UnknownSession):
            registry.get(session_id)
        with self.assertRaises(UnknownSession):
            registry.drop(session_id)

    def test_session_limit(self) -> None:
        registry = SessionRegistry(max_sessions=1)
        registry.create()
        with self.assertRaises(SessionLimitReached):
            registry.create()


class AppConfigTests(unittest.TestCase):
    def test_non_positive_defaults_rejected(self) -> None:
        for config in ({"default_decks": 0}, {"default_decks": -2}, {"max_sessions": 0}):
            with self.subTest(config=config):
                with self.assertRaises(InvalidConfiguration):
                    create_app(config)

    def test_non_integer_defaults_rejected(self) -> None:
        for config in ({"default_decks": 1.5}, {"default_decks": True}, {"max_sessions": "lots"}):
            with self.subTest(config=config):
                with self.assertRaises(InvalidConfiguration):
                    create_app(config)

    def test_environment_fallbacks(self) -> None:
        env = {"BLACKJACK_TRAINER_DECKS": "6", "BLACKJACK_TRAINER_MAX_SESSIONS": "3"}
        with mock.patch.dict(os.environ, env):
            client = create_app().test_client()
        data = client.get("/api/v1/status").get_json()
        self.assertEqual(data["default_decks"], 6)
        self.assertEqual(data["max_sessions"], 3)

    def test_invalid_environment_value_rejected(self) -> None:
        with mock.patch.dict(os.environ, {"BLACKJACK_TRAINER_DECKS": "0"}):
            with self.assertRaises(InvalidConfiguration):
                create_app()


class ServerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.app = create_app({"default_decks": 2, "max_sessions": 5})
        self.client = self.app.test_client()

    def _create_session(self, **payload: Any) -> str:
        response = self.client.post("/api/v1/sessions", json=payload)
        self.assertEqual(response.status_code, 201)
        return response.get_json()["session_id"]

    def _deal_until_decision(self, session_id: str) -> Dict[str, Any]:
        for _ in range(50):
            response = self.client.post(f"/api/v1/sessions/{session_id}/rounds")
            self.assertEqual(response.status_code, 200)
            data = response.get_json()
            if data["natural_outcome"] == "none":
                return data
        self.fail("No playable round dealt")

    def test_health(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.get_json(), {"status": "ok"})

    def test_status_counts_sessions(self) -> None:
        self._create_session()
        data = self.client.get("/api/v1/status").get_json()
        self.assertEqual(data["sessions"], 1)
        self.assertEqual(data["default_decks"], 2)

    def test_create_session(self) -> None:
        response = self.client.post("/api/v1/sessions", json={"decks": 6, "seed": 3})
        data = response.get_json()
        self.assertEqual(response.status_code, 201)
        self.assertEqual(data["decks"], 6)
        self.assertEqual(data["score"], {"correct": 0, "total": 0, "percentage": 0})

    def test_create_session_without_body(self) -> None:
        response = self.client.post("/api/v1/sessions")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()["decks"], 2)

    def test_invalid_deck_count(self) -> None:
        for decks in (0, -1, "many", 1.5, True):
            with self.subTest(decks=decks):
                response = self.client.post("/api/v1/sessions", json={"decks": decks})
                self.assertEqual(response.status_code, 400)
                self.assertIn("error", response.get_json())

    def test_round_then_action(self) -> None:
        session_id = self._create_session(seed=4)
        round_view = self._deal_until_decision(session_id)
        self.assertEqual(len(round_view["player_hand"]), 2)
        self.assertEqual(len(round_view["dealer_visible_hand"]), 1)
        self.assertNotIn("dealer_hidden_hand", round_view)
        self.assertIn("stand", round_view["available_actions"])

        response = self.client.post(f"/api/v1/sessions/{session_id}/actions", json={"action": "stand"})
        self.assertEqual(response.status_code, 200)
        result = response.get_json()
        self.assertEqual(result["declared_action"], "stand")
        self.assertEqual(result["was_correct"], result["recommended_action"] == "stand")
        self.assertEqual(result["score"]["total"], 1)
        self.assertIn(result["feedback"]["heading"], ("Correct!", "Incorrect."))

        score = self.client.get(f"/api/v1/sessions/{session_id}/score").get_json()
        self.assertEqual(score["total"], 1)

    def test_second_action_conflicts(self) -> None:
        session_id = self._create_session(seed=4)
        self._deal_until_decision(session_id)
        self.client.post(f"/api/v1/sessions/{session_id}/actions", json={"action": "hit"})
        response = self.client.post(f"/api/v1/sessions/{session_id}/actions", json={"action": "hit"})
        self.assertEqual(response.status_code, 409)

    def test_action_before_deal_conflicts(self) -> None:
        session_id = self._create_session()
        response = self.client.post(f"/api/v1/sessions/{session_id}/actions", json={"action": "hit"})
        self.assertEqual(response.status_code, 409)

    def test_invalid_action(self) -> None:
        session_id = self._create_session(seed=4)
        self._deal_until_decision(session_id)
        for payload in ({"action": "insurance"}, {}, ["hit"]):
            with self.subTest(payload=payload):
                response = self.client.post(f"/api/v1/sessions/{session_id}/actions", json=payload)
                self.assertEqual(response.status_code, 400)

    def test_malformed_body(self) -> None:
        session_id = self._create_session(seed=4)
        self._deal_until_decision(session_id)
        paths = (
            "/api/v1/sessions",
            f"/api/v1/sessions/{session_id}/rounds",
            f"/api/v1/sessions/{session_id}/actions",
        )
        for path in paths:
            for body in ("{not json", "[1, 2]"):
                with self.subTest(path=path, body=body):
                    response = self.client.post(path, data=body, content_type="application/json")
                    self.assertEqual(response.status_code, 400)
                    self.assertEqual(response.get_json(), {"error": "Invalid JSON payload"})

    def test_fractional_deck_count_for_round(self) -> None:
        session_id = self._create_session()
        response = self.client.post(f"/api/v1/sessions/{session_id}/rounds", json={"decks": 1.5})
        self.assertEqual(response.status_code, 400)

    def test_unknown_session(self) -> None:
        self.assertEqual(self.client.post("/api/v1/sessions/missing/rounds").status_code, 404)
        self.assertEqual(self.client.get("/api/v1/sessions/missing/score").status_code, 404)

    def test_drop_session(self) -> None:
        session_id = self._create_session()
        self.assertEqual(self.client.delete(f"/api/v1/sessions/{session_id}").status_code, 204)
        self.assertEqual(self.client.get(f"/api/v1/sessions/{session_id}/score").status_code, 404)

    def test_session_limit(self) -> None:
        for _ in range(5):
            self._create_session()
        self.assertEqual(self.client.post("/api/v1/sessions", json={}).status_code, 503)


if __name__ == "__main__":
    unittest.main()
