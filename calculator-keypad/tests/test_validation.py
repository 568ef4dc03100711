"""Tests for the validation tooling."""
from __future__ import annotations

from calculator import KeypadCalculator
from spec import INITIAL_STATE, build_spec
from validation.counterexample_search import check_step, run_search
from validation.mutation_analysis import (
    Mutant,
    MutationReport,
    branch_annotations,
    mutated_line,
    nearest_branch,
)


class TestCounterexampleSearch:

    def test_shallow_search_finds_nothing(self):
        report = run_search(depth=3)
        assert report.passed, report.summary()
        assert report.states_explored > 1
        assert report.checks_run > 0

    def test_check_step_reports_unexpected_error(self):
        _, cxs, _ = check_step(build_spec(), INITIAL_STATE, "digit", "digit", "x")
        assert [c.category for c in cxs] == ["unexpected_error"]

    def test_check_step_reports_broken_postcondition(self, monkeypatch):
        # A clear() that forgets the error flag must be caught.
        def broken_clear(self):
            self.entry = "0"

        monkeypatch.setattr(KeypadCalculator, "clear", broken_clear)
        calc = KeypadCalculator()
        for key in "6/0=":
            if key == "/":
                calc.operator(key)
            elif key == "=":
                calc.equals()
            else:
                calc.digit(key)
        _, cxs, _ = check_step(build_spec(), calc.snapshot(), "C", "clear", None)
        assert any(c.category == "postcondition_violation" for c in cxs)


SOURCE = '''\
def f(x):
    if x:                      # BR-ONE
        return 1
    y = 2
    return y                   # BR-TWO
'''

DIFF = '''\
--- calculator.py
+++ calculator.py
@@ -3,3 +3,3 @@
         return 1
-    y = 2
+    y = 3
     return y
'''


class TestMutationAnalysis:

    def test_branch_annotations(self):
        assert branch_annotations(SOURCE) == {2: "BR-ONE", 5: "BR-TWO"}

    def test_nearest_branch(self):
        ann = {2: "BR-ONE", 5: "BR-TWO"}
        assert nearest_branch(ann, 1) is None
        assert nearest_branch(ann, 2) == "BR-ONE"
        assert nearest_branch(ann, 4) == "BR-ONE"
        assert nearest_branch(ann, 9) == "BR-TWO"

    def test_mutated_line(self):
        assert mutated_line(DIFF) == 4

    def test_mutated_line_without_hunk(self):
        assert mutated_line("no diff here") is None

    def test_report_groups_survivors_by_branch(self):
        report = MutationReport(total=4, killed=2, survived=2, survivors=[
            Mutant("1", "survived", 4, "BS-TRIM", "a"),
            Mutant("2", "survived", 5, "BS-TRIM", "b"),
        ])
        assert report.score == 0.5
        assert report.weak_branches() == {"BS-TRIM": 2}
        assert "BS-TRIM" in report.summary()
