"""In-memory registry of trainer sessions served over HTTP."""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Dict, Optional

from blackjack_trainer import TrainerSession
from blackjack_trainer.game import DEFAULT_DECKS

logger = logging.getLogger(__name__)


class UnknownSession(KeyError):
    """Raised when a session id is not registered."""

    def __str__(self) -> str:
        return f"Unknown session: {self.args[0]}"


class SessionLimitReached(RuntimeError):
    """Raised when the registry already holds its maximum number of sessions."""


class SessionRegistry:
    """Thread-safe mapping of session ids to independent :class:`TrainerSession`s."""

    def __init__(self, default_decks: int = DEFAULT_DECKS, max_sessions: int = 1000) -> None:
        self.default_decks = default_decks
        self.max_sessions = max_sessions
        self._sessions: Dict[str, TrainerSession] = {}
        self._lock = threading.Lock()

    def create(self, decks: Optional[int] = None, seed: Optional[int] = None) -> str:
        """Register a new session and return its id."""

        session = TrainerSession(self.default_decks if decks is None else decks, seed=seed)
        session_id = uuid.uuid4().hex
        with self._lock:
            if len(self._sessions) >= self.max_sessions:
                raise SessionLimitReached(f"Session limit of {self.max_sessions} reached")
            self._sessions[session_id] = session
        logger.info("Created session %s (%d decks)", session_id, session.decks)
        return session_id

    def get(self, session_id: str) -> TrainerSession:
        with self._lock:
            try:
                return self._sessions[session_id]
            except KeyError:
                raise UnknownSession(session_id) from None

    def drop(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise UnknownSession(session_id)
        logger.info("Dropped session %s", session_id)

    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)


__all__ = ["SessionLimitReached", "SessionRegistry", "UnknownSession"]
