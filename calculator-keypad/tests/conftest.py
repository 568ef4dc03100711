"""Shared fixtures for keypad calculator tests."""
from __future__ import annotations

from typing import Callable

import pytest

from calculator import KeypadCalculator
from keys import press_all
from store import CalculatorStore


@pytest.fixture
def calc() -> KeypadCalculator:
    return KeypadCalculator()


@pytest.fixture
def typed() -> Callable[[str], KeypadCalculator]:
    """Build a fresh calculator with ``keys`` already pressed."""

    def _typed(keys: str) -> KeypadCalculator:
        c = KeypadCalculator()
        press_all(c, keys)
        return c

    return _typed


@pytest.fixture
def store() -> CalculatorStore:
    return CalculatorStore()
