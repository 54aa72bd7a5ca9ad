"""Flask application hosting independent basic-strategy trainer sessions."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Mapping, Optional

from flask import Flask, jsonify, request

from blackjack_trainer import (
    EmptyShoe,
    InvalidAction,
    InvalidConfiguration,
    LookupMiss,
    RoundNotActive,
)
from blackjack_trainer.game import DEFAULT_DECKS

from .sessions import SessionLimitReached, SessionRegistry, UnknownSession


def _optional_int(payload: Mapping[str, Any], key: str) -> Optional[int]:
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidConfiguration(f"'{key}' must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"'{key}' must be an integer") from None


def _json_body(required: bool = False) -> Optional[Dict[str, Any]]:
    """Return the request's JSON object, or None when the body is not one."""

    payload = request.get_json(force=True, silent=True)
    if payload is None and not required and not request.get_data():
        return {}
    if not isinstance(payload, dict):
        return None
    return payload


def _invalid_body() -> Any:
    return jsonify({"error": "Invalid JSON payload"}), 400


def _config_int(config: Mapping[str, Any], key: str, env_var: str, default: int) -> int:
    raw = config[key] if key in config else os.environ.get(env_var, default)
    if isinstance(raw, bool) or (isinstance(raw, float) and not raw.is_integer()):
        raise InvalidConfiguration(f"{key} must be an integer, got {raw!r}")
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"{key} must be an integer, got {raw!r}") from None
    if value < 1:
        raise InvalidConfiguration(f"{key} must be at least 1, got {value}")
    return value


def create_app(config: Dict[str, Any] | None = None) -> Flask:
    """Create and configure the trainer server."""

    config = config or {}
    default_decks = _config_int(config, "default_decks", "BLACKJACK_TRAINER_DECKS", DEFAULT_DECKS)
    max_sessions = _config_int(config, "max_sessions", "BLACKJACK_TRAINER_MAX_SESSIONS", 1000)

    registry = SessionRegistry(default_decks=default_decks, max_sessions=max_sessions)

    app = Flask(__name__)
    app.config["SESSION_REGISTRY"] = registry

    @app.errorhandler(InvalidAction)
    @app.errorhandler(InvalidConfiguration)
    def bad_request(exc: Exception) -> Any:
        return jsonify({"error": str(exc)}), 400

    @app.errorhandler(UnknownSession)
    def unknown_session(exc: UnknownSession) -> Any:
        return jsonify({"error": str(exc)}), 404

    @app.errorhandler(RoundNotActive)
    def round_not_active(exc: RoundNotActive) -> Any:
        return jsonify({"error": str(exc)}), 409

    @app.errorhandler(SessionLimitReached)
    def session_limit(exc: SessionLimitReached) -> Any:
        return jsonify({"error": str(exc)}), 503

    @app.errorhandler(EmptyShoe)
    @app.errorhandler(LookupMiss)
    def internal_error(exc: Exception) -> Any:
        logging.exception("Trainer evaluation failed")
        return jsonify({"error": str(exc)}), 500

    @app.get("/health")
    def health() -> Any:
        return {"status": "ok"}

    @app.get("/api/v1/status")
    def status() -> Any:
        return jsonify(
            {
                "sessions": registry.session_count(),
                "max_sessions": registry.max_sessions,
                "default_decks": registry.default_decks,
            }
        )

    @app.post("/api/v1/sessions")
    def create_session() -> Any:
        payload = _json_body()
        if payload is None:
            return _invalid_body()
        decks = _optional_int(payload, "decks")
        seed = _optional_int(payload, "seed")
        session_id = registry.create(decks=decks, seed=seed)
        session = registry.get(session_id)
        response = {
            "session_id": session_id,
            "decks": session.decks,
            "score": session.current_score().as_dict(),
        }
        return jsonify(response), 201

    @app.delete("/api/v1/sessions/<session_id>")
    def drop_session(session_id: str) -> Any:
        registry.drop(session_id)
        return "", 204

    @app.post("/api/v1/sessions/<session_id>/rounds")
    def new_round(session_id: str) -> Any:
        session = registry.get(session_id)
        payload = _json_body()
        if payload is None:
            return _invalid_body()
        decks = _optional_int(payload, "decks")
        with session.lock:
            view = session.new_round(decks)
            response = view.as_dict()
            response["available_actions"] = session.available_actions()
            response["score"] = session.current_score().as_dict()
        return jsonify(response)

    @app.post("/api/v1/sessions/<session_id>/actions")
    def submit_action(session_id: str) -> Any:
        session = registry.get(session_id)
        payload = _json_body(required=True)
        if payload is None:
            return _invalid_body()
        if "action" not in payload:
            raise InvalidAction("Missing 'action' field")
        with session.lock:
            result = session.submit_action(payload["action"])
        return jsonify(result.as_dict())

    @app.get("/api/v1/sessions/<session_id>/score")
    def score(session_id: str) -> Any:
        session = registry.get(session_id)
        with session.lock:
            snapshot = session.current_score()
        return jsonify(snapshot.as_dict())

    return app


if __name__ == "__main__":
    logging.basicConfig(level=os.environ.get("BLACKJACK_TRAINER_LOG_LEVEL", "INFO").upper())
    app = create_app()
    port = int(os.environ.get("BLACKJACK_SERVER_PORT", "8000"))
    app.run(host="0.0.0.0", port=port)
