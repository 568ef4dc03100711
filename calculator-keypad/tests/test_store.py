"""Tests for the in-memory calculator session store."""
from __future__ import annotations

import pytest

from keys import UnknownKeyError
from spec import INITIAL_STATE, Operator
from store import CalculatorNotFoundError, CalculatorStore


class TestCreate:

    def test_create_returns_session_with_id(self, store):
        session = store.create()
        assert session.id
        assert session.presses == 0
        assert session.calculator.snapshot() == INITIAL_STATE

    def test_create_sets_timestamps(self, store):
        session = store.create()
        assert session.created_at is not None
        assert session.updated_at == session.created_at

    def test_create_increments_count(self, store):
        assert store.count() == 0
        store.create()
        store.create()
        assert store.count() == 2

    def test_sessions_are_independent(self, store):
        a = store.create()
        b = store.create()
        store.press(a.id, "12")
        assert b.calculator.display_text() == "0"


class TestGet:

    def test_get_existing(self, store):
        session = store.create()
        assert store.get(session.id) is session

    def test_get_missing_raises(self, store):
        with pytest.raises(CalculatorNotFoundError) as exc:
            store.get("nope")
        assert exc.value.session_id == "nope"


class TestList:

    def test_list_empty(self, store):
        assert store.list() == []

    def test_list_all(self, store):
        ids = {store.create().id for _ in range(3)}
        assert {s.id for s in store.list()} == ids

    def test_list_pagination(self, store):
        for _ in range(5):
            store.create()
        assert len(store.list(limit=2)) == 2
        assert len(store.list(offset=4, limit=10)) == 1
        assert store.list(offset=10) == []


class TestPress:

    def test_press_updates_calculator(self, store):
        session = store.create()
        store.press(session.id, "3+4=")
        assert session.calculator.display_text() == "7"

    def test_press_counts_keys(self, store):
        session = store.create()
        store.press(session.id, "12")
        store.press(session.id, "+")
        assert session.presses == 3

    def test_press_bumps_updated_at(self, store):
        session = store.create()
        created = session.updated_at
        store.press(session.id, "1")
        assert session.updated_at >= created

    def test_press_keeps_state_between_calls(self, store):
        session = store.create()
        store.press(session.id, "9*")
        assert session.calculator.pending_operator == Operator.MULTIPLY
        store.press(session.id, "9=")
        assert session.calculator.display_text() == "81"

    def test_press_unknown_key(self, store):
        session = store.create()
        with pytest.raises(UnknownKeyError):
            store.press(session.id, "1?")
        assert session.presses == 0
        assert session.calculator.display_text() == "0"

    def test_press_missing_raises(self, store):
        with pytest.raises(CalculatorNotFoundError):
            store.press("nope", "1")


class TestReset:

    def test_reset_clears_calculator(self, store):
        session = store.create()
        store.press(session.id, "6/0=")
        store.reset(session.id)
        assert session.calculator.snapshot() == INITIAL_STATE

    def test_reset_missing_raises(self, store):
        with pytest.raises(CalculatorNotFoundError):
            store.reset("nope")


class TestDelete:

    def test_delete_returns_session(self, store):
        session = store.create()
        deleted = store.delete(session.id)
        assert deleted is session
        assert store.count() == 0

    def test_delete_then_get_raises(self, store):
        session = store.create()
        store.delete(session.id)
        with pytest.raises(CalculatorNotFoundError):
            store.get(session.id)

    def test_delete_missing_raises(self, store):
        with pytest.raises(CalculatorNotFoundError):
            store.delete("nope")

    def test_clear_removes_everything(self, store):
        store.create()
        store.create()
        store.clear()
        assert store.count() == 0


class TestView:

    def test_view_mirrors_calculator(self, store):
        session = store.create()
        store.press(session.id, "12+")
        view = session.view()
        assert view.id == session.id
        assert view.display == ""
        assert view.phase == "awaiting_second_operand"
        assert view.pending_operand == 12.0
        assert view.pending_operator == Operator.ADD
        assert view.presses == 3
