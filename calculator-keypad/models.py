"""Request and response models for the calculator session API.

A session wraps one keypad calculator.  Clients drive it by posting key
sequences and read back a view of the machine.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from keys import is_known_key
from spec import ErrorKind, KeypadState, Operator

MAX_KEYS_PER_REQUEST = 1024


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class KeySequence(BaseModel):
    """Payload for pressing one or more keys, e.g. ``{"keys": "3+4="}``."""

    keys: str = Field(
        ...,
        min_length=1,
        max_length=MAX_KEYS_PER_REQUEST,
        description="Keypad symbols pressed in order: 0-9 . + - * / = C <",
    )

    @field_validator("keys")
    @classmethod
    def keys_are_known(cls, v: str) -> str:
        unknown = sorted({k for k in v if not is_known_key(k)})
        if unknown:
            raise ValueError(f"Unknown keys: {''.join(unknown)!r}")
        return v


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class CalculatorView(BaseModel):
    """Everything a front end needs to render one calculator."""

    id: str
    display: str
    phase: str
    entry: str
    pending_operand: float | None = None
    pending_operator: Operator | None = None
    error: ErrorKind | None = None
    presses: int = 0
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_state(
        cls,
        session_id: str,
        state: KeypadState,
        *,
        presses: int,
        created_at: datetime,
        updated_at: datetime,
    ) -> CalculatorView:
        return cls(
            id=session_id,
            display=state.display,
            phase=state.phase.name.lower(),
            entry=state.entry,
            pending_operand=state.pending_operand,
            pending_operator=state.pending_operator,
            error=state.error,
            presses=presses,
            created_at=created_at,
            updated_at=updated_at,
        )


class CalculatorListResponse(BaseModel):
    items: list[CalculatorView]
    total: int
