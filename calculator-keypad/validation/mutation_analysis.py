"""Mutation testing analysis.

Wraps ``mutmut`` results for ``calculator.py`` and maps every surviving
mutant back to the branch-ID annotation nearest to the mutated line, so
the report names the decision point whose tests are too weak.

Workflow::

    cd calculator-keypad
    pip install mutmut
    mutmut run --paths-to-mutate=calculator.py --tests-dir=tests/
    python -m validation.mutation_analysis

The goal: every mutant should be *killed* by at least one test.
"""
from __future__ import annotations

import re
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path

sys.path.insert(0, ".")

from spec import build_spec

SOURCE_FILE = "calculator.py"

_HUNK_RE = re.compile(r"^@@ -(\d+)")
_BRANCH_RE = re.compile(r"#\s*([A-Z]+(?:-[A-Z]+)+)\s*$")


@dataclass
class Mutant:
    id: str
    status: str          # killed | survived | timeout | suspicious
    line: int | None
    branch_id: str | None
    diff: str


@dataclass
class MutationReport:
    total: int = 0
    killed: int = 0
    survived: int = 0
    timeout: int = 0
    suspicious: int = 0
    survivors: list[Mutant] = field(default_factory=list)

    @property
    def score(self) -> float:
        if self.total == 0:
            return 0.0
        return self.killed / self.total

    def weak_branches(self) -> dict[str, int]:
        """Surviving mutant count per branch id."""
        out: dict[str, int] = {}
        for m in self.survivors:
            key = m.branch_id or "(unannotated)"
            out[key] = out.get(key, 0) + 1
        return out

    def summary(self) -> str:
        lines = [
            "Mutation Testing Report",
            "=" * 40,
            f"Total mutants:   {self.total}",
            f"Killed:          {self.killed}",
            f"Survived:        {self.survived}",
            f"Timeout:         {self.timeout}",
            f"Suspicious:      {self.suspicious}",
            f"Mutation score:  {self.score:.1%}",
        ]
        if self.survivors:
            lines.append("")
            lines.append("Surviving mutants by branch:")
            descriptions = {b.id: b.description for b in build_spec().branches}
            for branch_id, n in sorted(self.weak_branches().items()):
                desc = descriptions.get(branch_id, "")
                lines.append(f"  {branch_id:<22} {n:>3}  {desc}")
            lines.append("")
            for m in self.survivors:
                where = f"line {m.line}" if m.line else "unknown line"
                lines.append(f"  [mutant {m.id}] {SOURCE_FILE} {where}")
                lines.append(f"       {m.diff}")
        else:
            lines.append("\nAll mutants killed — test suite is thorough.")
        return "\n".join(lines)


def _run(cmd: list[str]) -> subprocess.CompletedProcess:
    return subprocess.run(cmd, capture_output=True, text=True, cwd=".")


# ---------------------------------------------------------------------------
# Mapping mutants to branches
# ---------------------------------------------------------------------------

def branch_annotations(source: str) -> dict[int, str]:
    """Return {line_number: branch_id} for annotated lines (1-based)."""
    out: dict[int, str] = {}
    for lineno, line in enumerate(source.splitlines(), 1):
        m = _BRANCH_RE.search(line)
        if m:
            out[lineno] = m.group(1)
    return out


def nearest_branch(annotations: dict[int, str], line: int) -> str | None:
    """Branch id on ``line`` or the closest annotated line above it."""
    candidates = [n for n in annotations if n <= line]
    if not candidates:
        return None
    return annotations[max(candidates)]


def mutated_line(diff: str) -> int | None:
    """First changed source line of a unified diff from ``mutmut show``."""
    start = None
    offset = 0
    for line in diff.splitlines():
        hunk = _HUNK_RE.match(line)
        if hunk:
            start = int(hunk.group(1))
            offset = 0
            continue
        if start is None or line.startswith(("---", "+++")):
            continue
        if line.startswith("-"):
            return start + offset
        if line.startswith("+"):
            continue
        offset += 1
    return None


def _changed_text(diff: str) -> str:
    changed = [
        line for line in diff.splitlines()
        if line[:1] in "+-" and not line.startswith(("---", "+++"))
    ]
    return " | ".join(c.strip() for c in changed)[:200]


# ---------------------------------------------------------------------------
# mutmut output parsing
# ---------------------------------------------------------------------------

def parse_mutmut_results() -> MutationReport:
    """Parse ``mutmut results`` output into a structured report."""
    report = MutationReport()

    try:
        result = _run(["mutmut", "results"])
    except FileNotFoundError:
        print("mutmut not installed.  Install with: pip install mutmut")
        sys.exit(1)

    survivor_ids: list[str] = []
    for line in result.stdout.strip().splitlines():
        line = line.strip()
        if not line:
            continue
        # mutmut prints either summary lines ("Killed 42") or
        # per-mutant lines ("calculator.x_digit__mutmut_3: survived")
        if ":" in line:
            mutant_id, _, status = line.rpartition(":")
            status = status.strip().lower()
            if status == "survived":
                survivor_ids.append(mutant_id.strip())
            continue
        parts = line.split()
        if len(parts) >= 2 and parts[-1].isdigit():
            count = int(parts[-1])
            label = parts[0].lower()
            if "killed" in label:
                report.killed = count
            elif "survived" in label:
                report.survived = count
            elif "timeout" in label:
                report.timeout = count
            elif "suspicious" in label:
                report.suspicious = count

    if survivor_ids and report.survived == 0:
        report.survived = len(survivor_ids)
    report.total = (
        report.killed + report.survived + report.timeout + report.suspicious
    )

    annotations = branch_annotations(Path(SOURCE_FILE).read_text())
    for mutant_id in survivor_ids:
        diff = _run(["mutmut", "show", mutant_id]).stdout
        line = mutated_line(diff)
        report.survivors.append(Mutant(
            id=mutant_id,
            status="survived",
            line=line,
            branch_id=nearest_branch(annotations, line) if line else None,
            diff=_changed_text(diff),
        ))

    return report


def main() -> None:
    print("Analyzing mutation testing results ...\n")
    report = parse_mutmut_results()
    print(report.summary())

    if report.total == 0:
        print("\nNo mutmut results found.  Run mutmut first:")
        print(f"  mutmut run --paths-to-mutate={SOURCE_FILE} --tests-dir=tests/")
        sys.exit(1)

    if report.score < 1.0:
        print("\nTarget:  100% mutation score")
        print(f"Current: {report.score:.1%}")
        print(f"Action:  Add tests for the {report.survived} surviving mutant(s)")
        sys.exit(1)
    else:
        print("\nMutation score target met!")


if __name__ == "__main__":
    main()
