"""HTTP service and terminal client for remote basic-strategy practice."""

from .server import create_app
from .sessions import SessionLimitReached, SessionRegistry, UnknownSession

__all__ = [
    "create_app",
    "SessionLimitReached",
    "SessionRegistry",
    "UnknownSession",
]
