"""Formal specification for the keypad calculator.

The keypad calculator is a state machine driven by button presses.  Its
contract is expressed as machine-readable pieces that tests and the
validation tools iterate over:

- state invariants: what must hold after every action
- action postconditions: how a snapshot before an action relates to the
  snapshot after it
- scenarios: named key sequences with the display they must produce
- branches: every decision point in the implementation

Layers
------
Operator / ErrorKind / Phase   vocabulary of the machine
KeypadState                    immutable snapshot of the machine
StateInvariant                 predicate over one snapshot
ActionSpec                     per-action postconditions
Scenario                       key sequence -> expected display
BranchSpec                     decision point white-box tests must cover
KeypadSpec                     the full contract
build_spec()                   constructs a KeypadSpec
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any, Callable


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

class Operator(str, Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"


class ErrorKind(str, Enum):
    DIVIDE_BY_ZERO = "divide_by_zero"


class Phase(Enum):
    IDLE = auto()
    AWAITING_SECOND_OPERAND = auto()
    ERROR = auto()


DIVIDE_BY_ZERO_MESSAGE = "Cannot divide by zero"

ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.DIVIDE_BY_ZERO: DIVIDE_BY_ZERO_MESSAGE,
}

INITIAL_ENTRY = "0"


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class KeypadState:
    """Immutable copy of everything the machine holds."""

    entry: str = INITIAL_ENTRY
    pending_operand: float | None = None
    pending_operator: Operator | None = None
    error: ErrorKind | None = None
    second_operand_started: bool = False

    @property
    def phase(self) -> Phase:
        if self.error is not None:
            return Phase.ERROR
        if self.pending_operator is not None:
            return Phase.AWAITING_SECOND_OPERAND
        return Phase.IDLE

    @property
    def display(self) -> str:
        if self.error is not None:
            return ERROR_MESSAGES[self.error]
        return self.entry


INITIAL_STATE = KeypadState()


# ---------------------------------------------------------------------------
# Spec building blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StateInvariant:
    id: str
    name: str
    description: str
    check: Callable[[KeypadState], bool]


@dataclass(frozen=True)
class Postcondition:
    name: str
    description: str
    # (before, after, argument) -> bool; argument is None for nullary actions
    check: Callable[[KeypadState, KeypadState, Any], bool]


@dataclass(frozen=True)
class ActionSpec:
    name: str
    arguments: tuple[Any, ...]      # sample domain; (None,) for nullary
    postconditions: list[Postcondition]


@dataclass(frozen=True)
class Scenario:
    name: str
    description: str
    keys: str
    expected_display: str


@dataclass(frozen=True)
class BranchSpec:
    """A decision point in the implementation that must be exercised."""

    id: str
    description: str
    condition: str      # human-readable boolean expression
    action: str         # which action / helper this belongs to


@dataclass(frozen=True)
class KeypadSpec:
    """Complete contract for the keypad calculator."""

    invariants: list[StateInvariant]
    actions: dict[str, ActionSpec]
    scenarios: list[Scenario]
    branches: list[BranchSpec] = field(default_factory=list)

    @property
    def all_postconditions(self) -> list[tuple[str, Postcondition]]:
        out: list[tuple[str, Postcondition]] = []
        for name, action in self.actions.items():
            for post in action.postconditions:
                out.append((name, post))
        return out

    def violated_invariants(self, state: KeypadState) -> list[StateInvariant]:
        return [inv for inv in self.invariants if not inv.check(state)]


# ---------------------------------------------------------------------------
# Helpers used inside the spec predicates
# ---------------------------------------------------------------------------

DIGITS = tuple("0123456789")


def _unchanged_except_error(before: KeypadState, after: KeypadState) -> bool:
    return (
        after.entry == before.entry
        and after.pending_operand == before.pending_operand
        and after.pending_operator == before.pending_operator
        and after.second_operand_started == before.second_operand_started
    )


def _error_reset(before: KeypadState) -> KeypadState:
    """State an operator press starts from: a pending error restarts the entry."""
    if before.error is None:
        return before
    return replace(before, error=None, entry=INITIAL_ENTRY)


def _chained_press(before: KeypadState) -> bool:
    """An operator is pending and nothing has been typed after it."""
    return (
        before.pending_operator is not None
        and not before.second_operand_started
    )


# ---------------------------------------------------------------------------
# Spec builder
# ---------------------------------------------------------------------------

def build_spec() -> KeypadSpec:
    """Construct the full keypad calculator specification."""

    # ------------------------------------------------------------ invariants
    invariants = [
        StateInvariant(
            "INV-ONE-DECIMAL",
            "entry_has_at_most_one_decimal_point",
            "The entry never holds more than one '.'",
            lambda s: s.entry.count(".") <= 1,
        ),
        StateInvariant(
            "INV-PENDING-PAIR",
            "pending_operator_and_operand_travel_together",
            "pending_operator is set iff pending_operand is set",
            lambda s: (s.pending_operator is None) == (s.pending_operand is None),
        ),
        StateInvariant(
            "INV-STARTED-NEEDS-OPERATOR",
            "second_operand_only_under_operator",
            "second_operand_started implies a pending operator",
            lambda s: not s.second_operand_started or s.pending_operator is not None,
        ),
        StateInvariant(
            "INV-EMPTY-ENTRY",
            "empty_entry_only_after_operator",
            "An empty entry only occurs right after an operator press",
            lambda s: s.entry != "" or _chained_press(s),
        ),
        StateInvariant(
            "INV-DISPLAY",
            "display_projects_error_or_entry",
            "Display is the error message in error state, else the entry",
            lambda s: s.display == (
                ERROR_MESSAGES[s.error] if s.error is not None else s.entry
            ),
        ),
    ]

    # --------------------------------------------------------------- digit
    digit_spec = ActionSpec(
        name="digit",
        arguments=DIGITS,
        postconditions=[
            Postcondition(
                "error_cleared",
                "A digit always leaves the error state",
                lambda b, a, d: a.error is None,
            ),
            Postcondition(
                "entry_ends_with_digit",
                "The entry ends with the pressed digit",
                lambda b, a, d: a.entry.endswith(d),
            ),
            Postcondition(
                "fresh_entry",
                "Error, '0' or a fresh second operand give just the digit",
                lambda b, a, d: (
                    a.entry == d
                    if b.error is not None or b.entry == "0" or _chained_press(b)
                    else a.entry == b.entry + d
                ),
            ),
            Postcondition(
                "pending_untouched",
                "Digits never touch the pending operator or operand",
                lambda b, a, d: (
                    a.pending_operator == b.pending_operator
                    and a.pending_operand == b.pending_operand
                ),
            ),
            Postcondition(
                "marks_second_operand",
                "Under a pending operator the second operand has started",
                lambda b, a, d: (
                    a.second_operand_started
                    if b.pending_operator is not None else True
                ),
            ),
        ],
    )

    # ------------------------------------------------------------- decimal
    decimal_spec = ActionSpec(
        name="decimal_point",
        arguments=(None,),
        postconditions=[
            Postcondition(
                "noop_in_error",
                "Ignored while in error state",
                lambda b, a, _: b.error is None or a == b,
            ),
            Postcondition(
                "single_decimal",
                "Outside error state the entry holds exactly one '.'",
                lambda b, a, _: b.error is not None or a.entry.count(".") == 1,
            ),
            Postcondition(
                "idempotent",
                "A second decimal point changes nothing",
                lambda b, a, _: "." not in b.entry or a == b,
            ),
        ],
    )

    # ------------------------------------------------------------ operator
    operator_spec = ActionSpec(
        name="operator",
        arguments=tuple(Operator),
        postconditions=[
            Postcondition(
                "error_resets_entry",
                "In error state the entry restarts from '0' before proceeding",
                lambda b, a, op: (
                    b.error is None or a.entry in (INITIAL_ENTRY, "")
                ),
            ),
            Postcondition(
                "chained_press_replaces",
                "Pressing an operator right after another replaces it",
                lambda b, a, op: (
                    not _chained_press(b)
                    or (
                        a.pending_operator == op
                        and a.pending_operand == b.pending_operand
                        and a.entry == _error_reset(b).entry
                        and a.error is None
                    )
                ),
            ),
            Postcondition(
                "empty_entry_noop",
                "With an empty entry and no chained press nothing happens",
                lambda b, a, op: (
                    _error_reset(b).entry != "" or _chained_press(b)
                    or _unchanged_except_error(_error_reset(b), a)
                ),
            ),
            Postcondition(
                "success_starts_new_entry",
                "Unless aborted, the operator is pending and the entry is empty",
                lambda b, a, op: (
                    a.error is not None
                    or _unchanged_except_error(_error_reset(b), a)
                    or _chained_press(b)
                    or (
                        a.pending_operator == op
                        and a.entry == ""
                        and not a.second_operand_started
                    )
                ),
            ),
            Postcondition(
                "error_aborts",
                "A divide-by-zero leaves everything but the error unchanged",
                lambda b, a, op: (
                    a.error is None
                    or _unchanged_except_error(_error_reset(b), a)
                ),
            ),
        ],
    )

    # -------------------------------------------------------------- equals
    equals_spec = ActionSpec(
        name="equals",
        arguments=(None,),
        postconditions=[
            Postcondition(
                "noop_without_pending",
                "Nothing happens without a pending operator and operand",
                lambda b, a, _: (
                    b.pending_operator is not None
                    and b.pending_operand is not None
                ) or a == b,
            ),
            Postcondition(
                "success_clears_pending",
                "A computed result leaves nothing pending",
                lambda b, a, _: (
                    a.error is not None
                    or _unchanged_except_error(b, a)
                    or (
                        a.pending_operator is None
                        and a.pending_operand is None
                        and not a.second_operand_started
                    )
                ),
            ),
            Postcondition(
                "error_keeps_state",
                "A divide-by-zero leaves everything but the error unchanged",
                lambda b, a, _: (
                    a.error is None or _unchanged_except_error(b, a)
                ),
            ),
        ],
    )

    # --------------------------------------------------------------- clear
    clear_spec = ActionSpec(
        name="clear",
        arguments=(None,),
        postconditions=[
            Postcondition(
                "initial_state",
                "clear() always restores the initial state",
                lambda b, a, _: a == INITIAL_STATE,
            ),
        ],
    )

    # ----------------------------------------------------------- backspace
    backspace_spec = ActionSpec(
        name="backspace",
        arguments=(None,),
        postconditions=[
            Postcondition(
                "error_resets_entry",
                "In error state the entry becomes '0' and the error clears",
                lambda b, a, _: (
                    b.error is None
                    or (
                        a.entry == "0"
                        and a.error is None
                        and a.pending_operator == b.pending_operator
                        and a.pending_operand == b.pending_operand
                    )
                ),
            ),
            Postcondition(
                "drops_last_character",
                "Long entries lose their last character, short ones become '0'",
                lambda b, a, _: (
                    b.error is not None
                    or a.entry == (b.entry[:-1] if len(b.entry) > 1 else "0")
                ),
            ),
            Postcondition(
                "never_empty",
                "The entry is never empty after a backspace",
                lambda b, a, _: a.entry != "",
            ),
        ],
    )

    # ----------------------------------------------------------- scenarios
    scenarios = [
        Scenario("leading_zero_replaced", "0 then 5 shows 5, not 05", "05", "5"),
        Scenario("digits_concatenate", "Digits append to the entry", "53", "53"),
        Scenario("repeated_decimal_ignored", "Second '.' is ignored", "1..2", "1.2"),
        Scenario("simple_addition", "3 + 4 = 7", "3+4=", "7"),
        Scenario(
            "divide_by_zero", "Division by zero shows the error message",
            "6/0=", DIVIDE_BY_ZERO_MESSAGE,
        ),
        Scenario(
            "digit_after_error", "A digit after an error starts fresh",
            "6/0=5", "5",
        ),
        Scenario(
            "last_operator_wins", "Chained operators keep the last one",
            "5+-3=", "2",
        ),
        Scenario("backspace_once", "Backspace drops one character", "12<", "1"),
        Scenario("backspace_twice", "Backspace floors at 0", "12<<", "0"),
        Scenario("backspace_floor", "Backspace stays at 0", "12<<<", "0"),
        Scenario("clear_resets", "Clear from mid-operation", "7*8C", "0"),
        Scenario(
            "clear_forgets_operands", "Clear discards pending operands",
            "9+C+=", "",
        ),
        Scenario(
            "immediate_execution", "Operators evaluate left to right",
            "2+3*4=", "20",
        ),
        Scenario("empty_after_operator", "Entry is blank after an operator", "8*", ""),
        Scenario("float_inherited", "Binary floating point is kept", ".1+.2=", "0.30000000000000004"),
    ]

    # -------------------------------------------------------------- branches
    branches = [
        # digit
        BranchSpec(
            "DIGIT-INVALID",
            "Argument is not a single digit",
            "d not in '0'..'9'",
            "digit",
        ),
        BranchSpec(
            "DIGIT-ERROR-RESET",
            "Error cleared, entry restarted with the digit",
            "error is not None",
            "digit",
        ),
        BranchSpec(
            "DIGIT-REPLACE",
            "Entry replaced by the digit",
            "entry == '0' or (pending_operator and not second_operand_started)",
            "digit",
        ),
        BranchSpec(
            "DIGIT-APPEND",
            "Digit appended to the entry",
            "otherwise",
            "digit",
        ),
        BranchSpec(
            "SECOND-OPERAND-BEGIN",
            "First edit after an operator press marks the second operand",
            "pending_operator is not None",
            "edit",
        ),
        # decimal
        BranchSpec(
            "DECIMAL-ERROR-NOOP",
            "Decimal point ignored in error state",
            "error is not None",
            "decimal_point",
        ),
        BranchSpec(
            "DECIMAL-PRESENT",
            "Entry already holds a '.'",
            "'.' in entry",
            "decimal_point",
        ),
        BranchSpec(
            "DECIMAL-APPEND",
            "'.' appended",
            "'.' not in entry",
            "decimal_point",
        ),
        # operator
        BranchSpec(
            "OP-ERROR-CLEAR",
            "Error cleared before the operator proceeds",
            "error is not None",
            "operator",
        ),
        BranchSpec(
            "OP-REPLACE",
            "Chained press replaces the pending operator",
            "pending_operator and not second_operand_started",
            "operator",
        ),
        BranchSpec(
            "OP-EMPTY-GUARD",
            "Operator ignored on an empty entry",
            "entry == ''",
            "operator",
        ),
        BranchSpec(
            "OP-CHAIN-EVAL",
            "Pending operation evaluated, result becomes the operand",
            "pending_operator and pending_operand",
            "operator",
        ),
        BranchSpec(
            "OP-CHAIN-DIV-ZERO",
            "Chained evaluation divides by zero, action aborted",
            "pending_operator == DIVIDE and entry == 0",
            "operator",
        ),
        BranchSpec(
            "OP-CAPTURE",
            "Entry captured as the pending operand (NaN when not a number)",
            "pending_operator is None",
            "operator",
        ),
        # evaluate
        BranchSpec(
            "EVAL-PARSE-FAIL",
            "Entry or pending operand is not a number, no result",
            "parse_operand(entry) is None or isnan(pending_operand)",
            "evaluate",
        ),
        BranchSpec(
            "EVAL-DIV-ZERO",
            "ZeroDivisionError on a zero divisor",
            "pending_operator == DIVIDE and b == 0",
            "evaluate",
        ),
        BranchSpec(
            "EVAL-ARITHMETIC",
            "a op b computed",
            "otherwise",
            "evaluate",
        ),
        # equals
        BranchSpec(
            "EQ-NOTHING-PENDING",
            "Equals ignored without a pending operation",
            "pending_operator is None or pending_operand is None",
            "equals",
        ),
        BranchSpec(
            "EQ-DIV-ZERO",
            "Equals divides by zero, error set",
            "pending_operator == DIVIDE and entry == 0",
            "equals",
        ),
        BranchSpec(
            "EQ-RESULT",
            "Result written to the entry, pending state cleared",
            "evaluation succeeded",
            "equals",
        ),
        # backspace
        BranchSpec(
            "BS-ERROR-RESET",
            "Backspace in error state resets the entry to '0'",
            "error is not None",
            "backspace",
        ),
        BranchSpec(
            "BS-TRIM",
            "Last character dropped",
            "len(entry) > 1",
            "backspace",
        ),
        BranchSpec(
            "BS-FLOOR",
            "Entry reset to '0'",
            "len(entry) <= 1",
            "backspace",
        ),
    ]

    return KeypadSpec(
        invariants=invariants,
        actions={
            "digit": digit_spec,
            "decimal_point": decimal_spec,
            "operator": operator_spec,
            "equals": equals_spec,
            "clear": clear_spec,
            "backspace": backspace_spec,
        },
        scenarios=scenarios,
        branches=branches,
    )
