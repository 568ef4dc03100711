"""Counterexample search — discovers gaps in implementation or tests.

This module runs independently of the test suite.  Starting from the
initial state it explores every machine state reachable within a fixed
number of key presses and searches for:

1. Invariant violations: reachable states that break a state invariant.
2. Postcondition violations: a single action whose before/after
   snapshots contradict the action's spec.
3. Unexpected errors: an action that raises for a declared input.
4. Scenario mismatches: named key sequences whose display differs from
   the expected text.

Run directly::

    cd calculator-keypad
    python -m validation.counterexample_search
"""
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any

sys.path.insert(0, ".")

from calculator import KeypadCalculator
from keys import press_all
from spec import INITIAL_STATE, KeypadSpec, KeypadState, Operator, build_spec


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class Counterexample:
    category: str
    action: str
    state: Any
    expected: str
    actual: str
    description: str


@dataclass
class SearchReport:
    counterexamples: list[Counterexample] = field(default_factory=list)
    checks_run: int = 0
    states_explored: int = 0

    @property
    def passed(self) -> bool:
        return len(self.counterexamples) == 0

    def summary(self) -> str:
        lines = [
            "Counterexample Search Report",
            "=" * 40,
            f"States explored: {self.states_explored}",
            f"Total checks: {self.checks_run}",
            f"Counterexamples found: {len(self.counterexamples)}",
        ]
        if self.counterexamples:
            lines.append("")
            for i, cx in enumerate(self.counterexamples, 1):
                lines.append(f"  [{i}] {cx.category} / {cx.action}")
                lines.append(f"      State:    {cx.state}")
                lines.append(f"      Expected: {cx.expected}")
                lines.append(f"      Actual:   {cx.actual}")
                lines.append(f"      {cx.description}")
        else:
            lines.append("\nNo counterexamples found — all checks passed.")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Search alphabet
# ---------------------------------------------------------------------------

# (label, action name, argument).  A few digits are enough to reach every
# branch; "0" matters for leading zeros and division by zero.
STEPS: list[tuple[str, str, Any]] = [
    ("0", "digit", "0"),
    ("1", "digit", "1"),
    ("2", "digit", "2"),
    (".", "decimal_point", None),
    ("+", "operator", Operator.ADD),
    ("-", "operator", Operator.SUBTRACT),
    ("*", "operator", Operator.MULTIPLY),
    ("/", "operator", Operator.DIVIDE),
    ("=", "equals", None),
    ("C", "clear", None),
    ("<", "backspace", None),
]


def _apply(calc: KeypadCalculator, action: str, arg: Any) -> None:
    method = getattr(calc, action)
    if arg is None:
        method()
    else:
        method(arg)


# ---------------------------------------------------------------------------
# Search functions
# ---------------------------------------------------------------------------

def check_step(
    spec: KeypadSpec,
    before: KeypadState,
    label: str,
    action: str,
    arg: Any,
) -> tuple[KeypadState | None, list[Counterexample], int]:
    """Apply one action to ``before`` and check everything the spec says."""
    cxs: list[Counterexample] = []
    checks = 1

    calc = KeypadCalculator.from_state(before)
    try:
        _apply(calc, action, arg)
    except Exception as e:
        cxs.append(Counterexample(
            category="unexpected_error",
            action=label,
            state=before,
            expected="no error",
            actual=f"{type(e).__name__}: {e}",
            description="Action raised for a declared input",
        ))
        return None, cxs, checks

    after = calc.snapshot()

    for post in spec.actions[action].postconditions:
        checks += 1
        if not post.check(before, after, arg):
            cxs.append(Counterexample(
                category="postcondition_violation",
                action=label,
                state=before,
                expected=post.description,
                actual=f"after={after}",
                description=f"Postcondition '{post.name}' violated",
            ))

    for inv in spec.invariants:
        checks += 1
        if not inv.check(after):
            cxs.append(Counterexample(
                category="invariant_violation",
                action=label,
                state=before,
                expected=inv.description,
                actual=f"after={after}",
                description=f"Invariant '{inv.id}' violated",
            ))

    checks += 1
    if calc.display_text() != after.display or calc.display_text() != calc.display_text():
        cxs.append(Counterexample(
            category="display_mismatch",
            action=label,
            state=before,
            expected=after.display,
            actual=calc.display_text(),
            description="display_text() is not a pure projection of the state",
        ))

    return after, cxs, checks


def search_reachable_states(
    spec: KeypadSpec, depth: int
) -> tuple[list[Counterexample], int, int]:
    """Breadth-first walk over every state reachable in ``depth`` presses."""
    cxs: list[Counterexample] = []
    checks = 0
    seen: set[KeypadState] = {INITIAL_STATE}
    frontier = [INITIAL_STATE]

    for _ in range(depth):
        next_frontier: list[KeypadState] = []
        for state in frontier:
            for label, action, arg in STEPS:
                after, found, n = check_step(spec, state, label, action, arg)
                cxs.extend(found)
                checks += n
                if after is not None and after not in seen:
                    seen.add(after)
                    next_frontier.append(after)
        frontier = next_frontier

    return cxs, checks, len(seen)


def search_scenario_mismatches(
    spec: KeypadSpec,
) -> tuple[list[Counterexample], int]:
    """Replay every named scenario from a fresh calculator."""
    cxs: list[Counterexample] = []
    for scenario in spec.scenarios:
        display = press_all(KeypadCalculator(), scenario.keys)
        if display != scenario.expected_display:
            cxs.append(Counterexample(
                category="scenario_mismatch",
                action=scenario.keys,
                state=INITIAL_STATE,
                expected=repr(scenario.expected_display),
                actual=repr(display),
                description=f"Scenario '{scenario.name}' failed",
            ))
    return cxs, len(spec.scenarios)


# ---------------------------------------------------------------------------
# Top-level runner
# ---------------------------------------------------------------------------

def run_search(depth: int) -> SearchReport:
    """Run the complete counterexample search to the given depth."""
    spec = build_spec()
    report = SearchReport()

    cxs, checks, states = search_reachable_states(spec, depth)
    report.counterexamples.extend(cxs)
    report.checks_run += checks
    report.states_explored = states

    cxs, checks = search_scenario_mismatches(spec)
    report.counterexamples.extend(cxs)
    report.checks_run += checks

    return report


def main() -> None:
    """Run counterexample search at increasing depths."""
    all_passed = True
    for depth in (3, 5, 6):
        print(f"\n--- Depth: {depth} key presses ---")
        report = run_search(depth)
        print(report.summary())
        if not report.passed:
            all_passed = False

    print("\n" + "=" * 40)
    if all_passed:
        print("ALL DEPTHS PASSED")
    else:
        print("SOME DEPTHS HAD COUNTEREXAMPLES")
        sys.exit(1)


if __name__ == "__main__":
    main()
