"""Base rule protocol, catalog record and violation model."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, Protocol

Severity = Literal["error", "warning", "info"]
Category = Literal[
    "flaky",
    "theater",
    "over-mocking",
    "assertions",
    "isolation",
    "maintainability",
    "structure",
]

SEVERITY_ORDER: tuple[Severity, ...] = ("info", "warning", "error")

# Test-block body: balanced one level deep, which covers the common
# `it("x", () => { if (a) { ... } })` shape without a parser.
TEST_BLOCK_RE = re.compile(
    r"\b(?:it|test)\s*\(\s*['\"`]([^'\"`]+)['\"`]\s*,\s*(?:async\s*)?\([^)]*\)\s*=>\s*"
    r"\{([^}]*(?:\{[^}]*\}[^}]*)*)\}"
)
TEST_CALL_RE = re.compile(r"\b(?:it|test)\s*\(")
EXPECT_CALL_RE = re.compile(r"\bexpect\s*\(")


@dataclass(slots=True)
class Violation:
    """A single occurrence of a rule firing on a file."""

    rule_id: str
    message: str
    line: int | None = None
    column: int | None = None
    snippet: str | None = None
    suggestion: str | None = None


class Detector(Protocol):
    """Protocol for pure, deterministic text detectors."""

    rule_id: str

    def detect(self, content: str, filename: str) -> list[Violation]:
        """Scan file content and return violations in source order."""


@dataclass(frozen=True, slots=True)
class QualityRule:
    """Catalog entry binding a detector to its category, severity and weight."""

    rule_id: str
    name: str
    description: str
    category: Category
    severity: Severity
    weight: int
    detector: Detector

    def detect(self, content: str, filename: str) -> list[Violation]:
        return self.detector.detect(content, filename)


@dataclass(frozen=True, slots=True)
class Match:
    """A regex match located by line with its trimmed source line."""

    match: re.Match[str]
    line: int
    snippet: str


def find_line_number(content: str, index: int) -> int:
    """Return the 1-based line number of a character offset."""
    return content.count("\n", 0, index) + 1


def line_content(content: str, line_number: int) -> str:
    lines = content.split("\n")
    if 1 <= line_number <= len(lines):
        return lines[line_number - 1].strip()
    return ""


def match_all(content: str, pattern: re.Pattern[str]) -> list[Match]:
    """Return every non-overlapping match with its line and snippet."""
    results: list[Match] = []
    lines: list[str] | None = None
    line = 1
    position = 0
    for match in pattern.finditer(content):
        line += content.count("\n", position, match.start())
        position = match.start()
        if lines is None:
            lines = content.split("\n")
        results.append(Match(match=match, line=line, snippet=lines[line - 1].strip()))
    return results


def count_matches(content: str, pattern: re.Pattern[str]) -> int:
    return sum(1 for _ in pattern.finditer(content))


def severity_rank(severity: str) -> int:
    """Rank severities on the total order info < warning < error."""
    try:
        return SEVERITY_ORDER.index(severity)  # type: ignore[arg-type]
    except ValueError as exc:
        choices = ", ".join(SEVERITY_ORDER)
        raise ValueError(f"Unknown severity '{severity}'. Expected one of: {choices}") from exc
