"""Per-file review and category-weighted scoring."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import PurePath

from suite_score.rules import ALL_RULES, CATEGORIES, CATEGORY_DESCRIPTIONS, QualityRule
from suite_score.rules.base import Violation

logger = logging.getLogger(__name__)

CATEGORY_WEIGHTS: dict[str, int] = {
    "flaky": 20,
    "theater": 25,
    "over-mocking": 15,
    "assertions": 15,
    "isolation": 10,
    "maintainability": 10,
    "structure": 5,
}

SEVERITY_MULTIPLIERS: dict[str, float] = {
    "error": 1.0,
    "warning": 0.6,
    "info": 0.3,
}

TEST_DECLARATION_PATTERNS = (
    re.compile(r"\b(?:it|test)\s*\("),
    re.compile(r"(?m)^[ \t]*(?:async[ \t]+)?def[ \t]+test_\w*\s*\("),
)
ASSERTION_PATTERNS = (
    re.compile(r"\bexpect\s*\("),
    re.compile(r"\bassert[.(]"),
    re.compile(r"\bshould[.(]"),
    re.compile(r"(?m)^[ \t]*assert[ \t]"),
    re.compile(r"\bself\.assert[A-Z]\w*\s*\("),
)


@dataclass(slots=True)
class CategoryScore:
    """Scoring details for one rule category."""

    category: str
    description: str
    score: int = 100
    weight: int = 0
    violations: int = 0
    max_deduction: int = 0
    actual_deduction: float = 0.0


@dataclass(frozen=True, slots=True)
class ReviewedFile:
    """Review outcome for a single test file."""

    path: str
    relative_path: str
    violations: list[Violation] = field(default_factory=list)
    score: int = 100
    score_breakdown: list[CategoryScore] = field(default_factory=list)
    test_count: int = 0
    assertion_count: int = 0
    summary: str = ""


def review_file(
    content: str,
    filename: str,
    rules: Iterable[QualityRule] | None = None,
) -> ReviewedFile:
    """Run the selected rules over one file's text and score the result.

    A detector that raises is logged and contributes no violations; the
    remaining rules still run.
    """
    active_rules = list(ALL_RULES if rules is None else rules)
    violations: list[Violation] = []
    for rule in active_rules:
        try:
            found = rule.detect(content, filename)
        except Exception:
            logger.warning("Rule %s failed on %s", rule.rule_id, filename, exc_info=True)
            continue
        violations.extend(found)

    test_count = count_tests(content)
    assertion_count = count_assertions(content)
    score, breakdown = calculate_score(violations, active_rules)
    return ReviewedFile(
        path=filename,
        relative_path=PurePath(filename).name,
        violations=violations,
        score=score,
        score_breakdown=breakdown,
        test_count=test_count,
        assertion_count=assertion_count,
        summary=file_summary(violations, test_count, assertion_count, score, active_rules),
    )


def calculate_score(
    violations: list[Violation], rules: Iterable[QualityRule]
) -> tuple[int, list[CategoryScore]]:
    """Normalize deductions per category and combine them with fixed weights."""
    rule_map = {rule.rule_id: rule for rule in rules}
    breakdown: dict[str, CategoryScore] = {
        category: CategoryScore(
            category=category,
            description=CATEGORY_DESCRIPTIONS[category],
            weight=CATEGORY_WEIGHTS[category],
        )
        for category in CATEGORIES
    }
    for rule in rule_map.values():
        breakdown[rule.category].max_deduction += rule.weight

    for violation in violations:
        rule = rule_map.get(violation.rule_id)
        if rule is None:
            continue
        category_score = breakdown[rule.category]
        category_score.violations += 1
        category_score.actual_deduction += rule.weight * SEVERITY_MULTIPLIERS[rule.severity]

    for category_score in breakdown.values():
        if category_score.max_deduction > 0:
            normalized = category_score.actual_deduction / category_score.max_deduction * 100
            category_score.score = clamp(round_half_up(100 - normalized))
        else:
            category_score.score = 100
        category_score.actual_deduction = round(category_score.actual_deduction, 2)

    scores = list(breakdown.values())
    total_weight = sum(item.weight for item in scores)
    weighted_sum = sum(item.score * item.weight for item in scores)
    overall = round_half_up(weighted_sum / total_weight) if total_weight > 0 else 100
    return (clamp(overall), scores)


def count_tests(content: str) -> int:
    """Count test declarations (`it(`/`test(` calls and `def test_*` functions)."""
    return sum(_count(content, pattern) for pattern in TEST_DECLARATION_PATTERNS)


def count_assertions(content: str) -> int:
    """Count assertion calls and statements."""
    return sum(_count(content, pattern) for pattern in ASSERTION_PATTERNS)


def file_summary(
    violations: list[Violation],
    test_count: int,
    assertion_count: int,
    score: int,
    rules: Iterable[QualityRule] = ALL_RULES,
) -> str:
    """Build the one-line summary shown next to each file."""
    if not violations:
        return f"Clean! {test_count} tests, {assertion_count} assertions, no issues detected."

    severities = {rule.rule_id: rule.severity for rule in rules}
    errors = sum(1 for item in violations if severities.get(item.rule_id) == "error")
    warnings = sum(1 for item in violations if severities.get(item.rule_id) == "warning")
    parts: list[str] = []
    if errors:
        parts.append(_plural(errors, "error"))
    if warnings:
        parts.append(_plural(warnings, "warning"))
    counts = ", ".join(parts) if parts else _plural(len(violations), "note")
    return (
        f"Score: {score}/100. {counts}. "
        f"{test_count} tests, {assertion_count} assertions."
    )


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives, matching score conventions."""
    return int(math.floor(value + 0.5))


def clamp(value: int, lower: int = 0, upper: int = 100) -> int:
    return max(lower, min(upper, value))


def _count(content: str, pattern: re.Pattern[str]) -> int:
    return sum(1 for _ in pattern.finditer(content))


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"
