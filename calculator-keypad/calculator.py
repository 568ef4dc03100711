"""Keypad calculator state machine.

One method per button, plus a read-only display projection.  Operators
use immediate execution: pressing one evaluates any pending operation
before starting the next.  Decision branches are annotated with their
spec branch-IDs (see spec.py BranchSpec) so white-box tests can trace
coverage back to the specification.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from formatting import format_number, parse_operand
from log_config import get_logger
from spec import (
    DIGITS,
    ERROR_MESSAGES,
    INITIAL_ENTRY,
    ErrorKind,
    KeypadState,
    Operator,
    Phase,
)

logger = get_logger(__name__)


@dataclass
class KeypadCalculator:
    entry: str = INITIAL_ENTRY
    pending_operand: float | None = None
    pending_operator: Operator | None = None
    error: ErrorKind | None = None
    # Set by the first edit after an operator press.  Gates both digit
    # replacement and chained-operator evaluation.
    second_operand_started: bool = False

    # -- internal helpers ---------------------------------------------------

    def _mark_edit(self) -> None:
        """Branch: SECOND-OPERAND-BEGIN"""
        if self.pending_operator is not None:                     # SECOND-OPERAND-BEGIN
            self.second_operand_started = True

    def _evaluate(self) -> float | None:
        """Apply the pending operator to the pending operand and the entry.

        Returns None when either operand is not a number.  Raises
        ZeroDivisionError on a zero divisor without touching any state.

        Branches: EVAL-PARSE-FAIL, EVAL-DIV-ZERO, EVAL-ARITHMETIC
        """
        assert self.pending_operand is not None
        assert self.pending_operator is not None

        a = self.pending_operand
        b = parse_operand(self.entry)
        if b is None or math.isnan(a):                            # EVAL-PARSE-FAIL
            return None

        op = self.pending_operator                                # EVAL-ARITHMETIC
        if op == Operator.ADD:
            return a + b
        if op == Operator.SUBTRACT:
            return a - b
        if op == Operator.MULTIPLY:
            return a * b
        if b == 0:                                                # EVAL-DIV-ZERO
            raise ZeroDivisionError("division by zero")
        return a / b

    def _fail(self, kind: ErrorKind) -> None:
        logger.debug(
            "%s: %s %s %s", kind.value, self.pending_operand,
            self.pending_operator.value if self.pending_operator else None,
            self.entry,
        )
        self.error = kind

    # -- actions ------------------------------------------------------------

    def digit(self, d: str | int) -> None:
        """Type one digit.

        Branches: DIGIT-INVALID, DIGIT-ERROR-RESET, DIGIT-REPLACE,
                  DIGIT-APPEND, SECOND-OPERAND-BEGIN
        """
        d = str(d)
        if d not in DIGITS:                                       # DIGIT-INVALID
            raise ValueError(f"{d!r} is not a digit")

        if self.error is not None:                                # DIGIT-ERROR-RESET
            self.error = None
            self.entry = d
        elif self.entry == "0" or (
            self.pending_operator is not None
            and not self.second_operand_started
        ):                                                        # DIGIT-REPLACE
            self.entry = d
        else:                                                     # DIGIT-APPEND
            self.entry += d

        self._mark_edit()

    def decimal_point(self) -> None:
        """Branches: DECIMAL-ERROR-NOOP, DECIMAL-PRESENT, DECIMAL-APPEND"""
        if self.error is not None:                                # DECIMAL-ERROR-NOOP
            return
        if "." in self.entry:                                     # DECIMAL-PRESENT
            return
        self.entry += "."                                         # DECIMAL-APPEND
        self._mark_edit()

    def operator(self, op: Operator | str) -> None:
        """Press a binary operator.

        Evaluation only happens when an operator is pending AND the
        second operand has been started; a press straight after another
        operator just replaces it.

        Branches: OP-ERROR-CLEAR, OP-REPLACE, OP-EMPTY-GUARD,
                  OP-CHAIN-EVAL, OP-CHAIN-DIV-ZERO, OP-CAPTURE
        """
        op = Operator(op)

        if self.error is not None:                                # OP-ERROR-CLEAR
            self.error = None
            self.entry = INITIAL_ENTRY

        if (
            self.pending_operator is not None
            and not self.second_operand_started
        ):                                                        # OP-REPLACE
            self.pending_operator = op
            return

        if self.entry == "":                                      # OP-EMPTY-GUARD
            return

        if self.pending_operator is not None and self.pending_operand is not None:
            try:                                                  # OP-CHAIN-EVAL
                result = self._evaluate()
            except ZeroDivisionError:                             # OP-CHAIN-DIV-ZERO
                self._fail(ErrorKind.DIVIDE_BY_ZERO)
                return
            if result is None:
                return
            self.pending_operand = result
        else:                                                     # OP-CAPTURE
            # A non-numeric entry ("NaN") is still taken as the left
            # operand; the evaluation that uses it yields no result.
            value = parse_operand(self.entry)
            self.pending_operand = math.nan if value is None else value

        self.pending_operator = op
        self.entry = ""
        self.second_operand_started = False

    def equals(self) -> None:
        """Branches: EQ-NOTHING-PENDING, EQ-DIV-ZERO, EQ-RESULT"""
        if self.pending_operator is None or self.pending_operand is None:
            return                                                # EQ-NOTHING-PENDING

        try:
            result = self._evaluate()
        except ZeroDivisionError:                                 # EQ-DIV-ZERO
            self._fail(ErrorKind.DIVIDE_BY_ZERO)
            return
        if result is None:
            return

        self.entry = format_number(result)                        # EQ-RESULT
        self.pending_operand = None
        self.pending_operator = None
        self.second_operand_started = False

    def clear(self) -> None:
        self.entry = INITIAL_ENTRY
        self.pending_operand = None
        self.pending_operator = None
        self.error = None
        self.second_operand_started = False

    def backspace(self) -> None:
        """Branches: BS-ERROR-RESET, BS-TRIM, BS-FLOOR"""
        if self.error is not None:                                # BS-ERROR-RESET
            self.error = None
            self.entry = INITIAL_ENTRY
            return

        if len(self.entry) > 1:                                   # BS-TRIM
            self.entry = self.entry[:-1]
        else:                                                     # BS-FLOOR
            self.entry = INITIAL_ENTRY
        self._mark_edit()

    # -- projections --------------------------------------------------------

    def display_text(self) -> str:
        if self.error is not None:
            return ERROR_MESSAGES[self.error]
        return self.entry

    @property
    def phase(self) -> Phase:
        return self.snapshot().phase

    def snapshot(self) -> KeypadState:
        return KeypadState(
            entry=self.entry,
            pending_operand=self.pending_operand,
            pending_operator=self.pending_operator,
            error=self.error,
            second_operand_started=self.second_operand_started,
        )

    @classmethod
    def from_state(cls, state: KeypadState) -> KeypadCalculator:
        """Rebuild a machine positioned at ``state``."""
        return cls(
            entry=state.entry,
            pending_operand=state.pending_operand,
            pending_operator=state.pending_operator,
            error=state.error,
            second_operand_started=state.second_operand_started,
        )
