"""Tests for the API request/response models."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from models import (
    MAX_KEYS_PER_REQUEST,
    CalculatorListResponse,
    CalculatorView,
    KeySequence,
    _utcnow,
)
from spec import DIVIDE_BY_ZERO_MESSAGE, ErrorKind, KeypadState, Operator


class TestKeySequence:

    @pytest.mark.parametrize("keys", ["1", "3+4=", "12.5*2<C", "7×6÷2−1\n"])
    def test_valid(self, keys):
        assert KeySequence(keys=keys).keys == keys

    def test_empty_rejected(self):
        with pytest.raises(ValidationError):
            KeySequence(keys="")

    def test_too_long_rejected(self):
        with pytest.raises(ValidationError):
            KeySequence(keys="1" * (MAX_KEYS_PER_REQUEST + 1))

    def test_max_length_accepted(self):
        assert len(KeySequence(keys="1" * MAX_KEYS_PER_REQUEST).keys) == MAX_KEYS_PER_REQUEST

    @pytest.mark.parametrize("keys", ["1%2", "(1+2)", "sqrt"])
    def test_unknown_keys_rejected(self, keys):
        with pytest.raises(ValidationError) as exc:
            KeySequence(keys=keys)
        assert "Unknown keys" in str(exc.value)

    def test_missing_field(self):
        with pytest.raises(ValidationError):
            KeySequence()


class TestCalculatorView:

    def _view(self, state: KeypadState) -> CalculatorView:
        now = _utcnow()
        return CalculatorView.from_state(
            "abc", state, presses=4, created_at=now, updated_at=now
        )

    def test_idle(self):
        view = self._view(KeypadState(entry="42"))
        assert view.display == "42"
        assert view.phase == "idle"
        assert view.pending_operand is None
        assert view.pending_operator is None
        assert view.error is None
        assert view.presses == 4

    def test_pending(self):
        view = self._view(KeypadState(
            entry="", pending_operand=3.0, pending_operator=Operator.DIVIDE,
        ))
        assert view.display == ""
        assert view.phase == "awaiting_second_operand"
        assert view.pending_operator == Operator.DIVIDE

    def test_error(self):
        view = self._view(KeypadState(
            entry="0",
            pending_operand=6.0,
            pending_operator=Operator.DIVIDE,
            error=ErrorKind.DIVIDE_BY_ZERO,
            second_operand_started=True,
        ))
        assert view.display == DIVIDE_BY_ZERO_MESSAGE
        assert view.phase == "error"
        assert view.entry == "0"

    def test_json_uses_symbols(self):
        view = self._view(KeypadState(
            entry="", pending_operand=1.5, pending_operator=Operator.MULTIPLY,
        ))
        data = view.model_dump(mode="json")
        assert data["pending_operator"] == "*"
        assert data["pending_operand"] == 1.5


class TestListResponse:

    def test_empty(self):
        resp = CalculatorListResponse(items=[], total=0)
        assert resp.model_dump() == {"items": [], "total": 0}
