"""In-memory calculator session store.

Each session owns one KeypadCalculator.  Nothing survives a restart; the
store exists so that several front ends can drive independent machines
through the API.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from calculator import KeypadCalculator
from keys import press_all
from log_config import get_logger, reset_session_id, set_session_id
from models import CalculatorView, _new_id, _utcnow

logger = get_logger(__name__)


class CalculatorNotFoundError(Exception):
    """Raised when a session lookup fails."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Calculator not found: {session_id}")


@dataclass
class CalculatorSession:
    id: str = field(default_factory=_new_id)
    calculator: KeypadCalculator = field(default_factory=KeypadCalculator)
    presses: int = 0
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def view(self) -> CalculatorView:
        return CalculatorView.from_state(
            self.id,
            self.calculator.snapshot(),
            presses=self.presses,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class CalculatorStore:
    """In-memory store of calculator sessions."""

    def __init__(self) -> None:
        self._sessions: dict[str, CalculatorSession] = {}

    def create(self) -> CalculatorSession:
        """Start a new session with a fresh calculator."""
        now = _utcnow()
        session = CalculatorSession(created_at=now, updated_at=now)
        self._sessions[session.id] = session
        logger.info("created calculator %s", session.id)
        return session

    def get(self, session_id: str) -> CalculatorSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise CalculatorNotFoundError(session_id) from None

    def list(self, *, offset: int = 0, limit: int = 50) -> list[CalculatorSession]:
        """List sessions, newest first."""
        items = sorted(
            self._sessions.values(), key=lambda s: s.created_at, reverse=True
        )
        return items[offset : offset + limit]

    def press(self, session_id: str, keys: Iterable[str]) -> CalculatorSession:
        """Apply ``keys`` to a session's calculator.

        Raises UnknownKeyError (before any key is applied) when a key is
        not on the keypad.
        """
        session = self.get(session_id)
        keys = list(keys)
        token = set_session_id(session_id)
        try:
            display = press_all(session.calculator, keys)
            logger.debug("pressed %r -> %r", "".join(keys), display)
        finally:
            reset_session_id(token)
        session.presses += len(keys)
        session.updated_at = _utcnow()
        return session

    def reset(self, session_id: str) -> CalculatorSession:
        """Clear a session's calculator back to its initial state."""
        session = self.get(session_id)
        session.calculator.clear()
        session.updated_at = _utcnow()
        return session

    def delete(self, session_id: str) -> CalculatorSession:
        """Delete a session and return it."""
        session = self.get(session_id)
        del self._sessions[session_id]
        logger.info("deleted calculator %s", session_id)
        return session

    def count(self) -> int:
        return len(self._sessions)

    def clear(self) -> None:
        """Remove all sessions (useful for testing)."""
        self._sessions.clear()
