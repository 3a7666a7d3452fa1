"""Aggregate verdicts and render run reports."""

from __future__ import annotations

import json
import threading
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from sqllogic.model import Outcome, Verdict


@dataclass
class ScriptReport:
    """Verdicts of one script, or the reason it did not run."""

    path: str
    verdicts: list[Verdict] = field(default_factory=list)
    parse_error: str | None = None
    parse_error_line: int = 0
    cancelled: bool = False

    @property
    def failures(self) -> list[Verdict]:
        return [v for v in self.verdicts if v.outcome.is_failure]

    @property
    def status(self) -> str:
        if self.parse_error is not None:
            return "PARSE ERROR"
        if self.cancelled:
            return "CANCELLED"
        failed = len(self.failures)
        if failed:
            return f"FAIL ({failed} failure{'s' if failed != 1 else ''})"
        return "PASS"

    def to_dict(self) -> dict[str, Any]:
        counts = Counter(v.outcome.value for v in self.verdicts)
        result: dict[str, Any] = {
            "path": self.path,
            "status": self.status,
            "counts": {outcome.value: counts.get(outcome.value, 0) for outcome in Outcome},
        }
        if self.parse_error is not None:
            result["parse_error"] = {"message": self.parse_error, "line": self.parse_error_line}
        return result


class Reporter:
    """Thread-safe collector of script results.

    Parallel script workers record into one reporter; every update happens
    under a single lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._scripts: dict[str, ScriptReport] = {}
        self._counts: Counter[Outcome] = Counter()

    # --- Recording ---

    def record_script(self, path: str, verdicts: list[Verdict]) -> None:
        with self._lock:
            self._scripts[path] = ScriptReport(path=path, verdicts=list(verdicts))
            self._counts.update(v.outcome for v in verdicts)

    def record_parse_error(self, path: str, message: str, line: int) -> None:
        with self._lock:
            self._scripts[path] = ScriptReport(path=path, parse_error=message, parse_error_line=line)

    def record_cancelled(self, path: str) -> None:
        with self._lock:
            self._scripts[path] = ScriptReport(path=path, cancelled=True)

    # --- Queries ---

    @property
    def scripts(self) -> list[ScriptReport]:
        """Script reports ordered by path."""
        with self._lock:
            return [self._scripts[path] for path in sorted(self._scripts)]

    def count(self, outcome: Outcome) -> int:
        with self._lock:
            return self._counts[outcome]

    @property
    def failures(self) -> list[Verdict]:
        return [v for script in self.scripts for v in script.failures]

    @property
    def parse_errors(self) -> list[ScriptReport]:
        return [s for s in self.scripts if s.parse_error is not None]

    @property
    def cancelled(self) -> list[ScriptReport]:
        return [s for s in self.scripts if s.cancelled]

    @property
    def ok(self) -> bool:
        """True when every script ran and every directive passed or was skipped."""
        return not self.failures and not self.parse_errors and not self.cancelled

    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def summary(self) -> dict[str, Any]:
        """Machine-readable summary of the run."""
        scripts = self.scripts
        with self._lock:
            counts = {outcome.value: self._counts[outcome] for outcome in Outcome}
        return {
            "ok": self.ok,
            "scripts": len(scripts),
            "directives": sum(counts.values()),
            "counts": counts,
            "parse_errors": len([s for s in scripts if s.parse_error is not None]),
            "cancelled": len([s for s in scripts if s.cancelled]),
            "results": [s.to_dict() for s in scripts],
            "failures": [v.to_dict() for s in scripts for v in s.failures],
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.summary(), indent=indent)

    # --- Console rendering ---

    def render(self, show_scripts: bool = True) -> str:
        """Human-readable report listing every failing directive."""
        lines: list[str] = []
        scripts = self.scripts

        if show_scripts:
            for script in scripts:
                lines.append(f"{script.path}: {script.status}")

        parse_errors = [s for s in scripts if s.parse_error is not None]
        if parse_errors:
            lines.append("")
            lines.append("Parse errors:")
            for script in parse_errors:
                lines.append(f"  {script.path}:{script.parse_error_line}: {script.parse_error}")

        failures = [v for s in scripts for v in s.failures]
        if failures:
            lines.append("")
            lines.append("Failures:")
            for verdict in failures:
                lines.extend(format_failure(verdict))

        lines.append("")
        lines.append(self.summary_line())
        return "\n".join(lines)

    def summary_line(self) -> str:
        with self._lock:
            counts = dict(self._counts)
        parts = [
            f"{counts.get(Outcome.PASS, 0)} passed",
            f"{counts.get(Outcome.FAIL, 0)} failed",
            f"{counts.get(Outcome.UNEXPECTED_ERROR, 0)} unexpected errors",
            f"{counts.get(Outcome.UNEXPECTED_SUCCESS, 0)} unexpected successes",
            f"{counts.get(Outcome.SKIPPED, 0)} skipped",
        ]
        parse_errors = len(self.parse_errors)
        if parse_errors:
            parts.append(f"{parse_errors} parse error{'s' if parse_errors != 1 else ''}")
        cancelled = len(self.cancelled)
        if cancelled:
            parts.append(f"{cancelled} cancelled")
        return ", ".join(parts)


def _indent_block(title: str, values: list[str]) -> list[str]:
    if not values:
        return [f"  {title}: (none)"]
    return [f"  {title}:"] + [f"    {value}" for value in values]


def format_failure(verdict: Verdict) -> list[str]:
    """Lines describing one failing directive."""
    lines = [f"{verdict.location}: {verdict.outcome.value} [{verdict.kind}] {verdict.reason}"]
    sql_lines = verdict.sql.splitlines() or [""]
    lines.append(f"  SQL: {sql_lines[0]}")
    lines.extend(f"       {line}" for line in sql_lines[1:])
    lines.extend(_indent_block("Expected", verdict.expected))
    lines.extend(_indent_block("Actual", verdict.actual))
    return lines
