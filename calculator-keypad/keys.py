"""Keypad symbol table and dispatch.

Maps the symbols printed on the keypad to calculator actions so a whole
key sequence like ``"12+7="`` can be replayed against a machine.
"""
from __future__ import annotations

from typing import Callable, Iterable

from calculator import KeypadCalculator
from spec import DIGITS, Operator

CLEAR_KEYS = ("C", "c")
BACKSPACE_KEYS = ("<", "←")
EQUALS_KEYS = ("=", "\n")
DECIMAL_KEYS = (".",)

OPERATOR_ALIASES: dict[str, Operator] = {
    "+": Operator.ADD,
    "-": Operator.SUBTRACT,
    "−": Operator.SUBTRACT,
    "*": Operator.MULTIPLY,
    "×": Operator.MULTIPLY,
    "x": Operator.MULTIPLY,
    "/": Operator.DIVIDE,
    "÷": Operator.DIVIDE,
}


class UnknownKeyError(ValueError):
    """Raised when a key has no action on the keypad."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Unknown key: {key!r}")


def _action_for(key: str) -> Callable[[KeypadCalculator], None]:
    if key in DIGITS:
        return lambda calc: calc.digit(key)
    if key in OPERATOR_ALIASES:
        op = OPERATOR_ALIASES[key]
        return lambda calc: calc.operator(op)
    if key in DECIMAL_KEYS:
        return KeypadCalculator.decimal_point
    if key in EQUALS_KEYS:
        return KeypadCalculator.equals
    if key in CLEAR_KEYS:
        return KeypadCalculator.clear
    if key in BACKSPACE_KEYS:
        return KeypadCalculator.backspace
    raise UnknownKeyError(key)


def is_known_key(key: str) -> bool:
    try:
        _action_for(key)
    except UnknownKeyError:
        return False
    return True


def press(calc: KeypadCalculator, key: str) -> None:
    """Apply a single key to ``calc``."""
    _action_for(key)(calc)


def press_all(calc: KeypadCalculator, keys: Iterable[str]) -> str:
    """Apply every key in order and return the resulting display text.

    Keys are validated up front so an unknown key leaves ``calc``
    untouched.
    """
    actions = [_action_for(k) for k in keys]
    for action in actions:
        action(calc)
    return calc.display_text()
