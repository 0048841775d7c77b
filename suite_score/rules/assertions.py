"""Assertion-quality rules."""

from __future__ import annotations

import re

from suite_score.rules.base import (
    EXPECT_CALL_RE,
    TEST_CALL_RE,
    Violation,
    count_matches,
    match_all,
)

WEAK_PATTERNS = (
    (
        re.compile(r"expect\s*\([^)]+\)\s*\.toBeTruthy\s*\(\)"),
        "toBeTruthy() is weak - be specific about expected value",
    ),
    (
        re.compile(r"expect\s*\([^)]+\)\s*\.toBeFalsy\s*\(\)"),
        "toBeFalsy() is weak - be specific (null, undefined, false, 0?)",
    ),
    (
        re.compile(r"expect\s*\([^)]+\)\s*\.toBeDefined\s*\(\)"),
        "toBeDefined() only checks existence - verify the actual value",
    ),
    (
        re.compile(r"expect\s*\(typeof\s+\w+\)\s*\.toBe\s*\("),
        "Checking type alone is weak - verify behavior",
    ),
    (
        re.compile(r"(?m)^[ \t]*assert[ \t]+\w+(?:\.\w+)*[ \t]+is[ \t]+not[ \t]+None[ \t]*$"),
        "'is not None' only checks existence - verify the actual value",
    ),
)

ASYNC_TEST_RE = re.compile(r"\b(?:it|test)\s*\([^,]+,\s*async")
ERROR_ASSERTION_PATTERNS = (
    re.compile(r"\.rejects\."),
    re.compile(r"toThrow"),
    re.compile(r"\.catch\s*\("),
    re.compile(r"try\s*\{[^}]*\}\s*catch"),
)

SPARSE_ASSERTION_MIN_TESTS = 3


class WeakAssertionRule:
    """Using weak assertions that barely verify anything."""

    rule_id = "assertion/weak-assertion"

    def detect(self, content: str, filename: str) -> list[Violation]:
        violations: list[Violation] = []
        for pattern, issue in WEAK_PATTERNS:
            for found in match_all(content, pattern):
                violations.append(
                    Violation(
                        rule_id=self.rule_id,
                        message=issue,
                        line=found.line,
                        snippet=found.snippet,
                        suggestion=(
                            "Use specific assertions like toBe(), toEqual(), or toMatchObject()."
                        ),
                    )
                )
        return violations


class NoErrorAssertionRule:
    """Async code should verify error handling."""

    rule_id = "assertion/no-error-assertion"

    def detect(self, content: str, filename: str) -> list[Violation]:
        if not ASYNC_TEST_RE.search(content):
            return []
        if any(pattern.search(content) for pattern in ERROR_ASSERTION_PATTERNS):
            return []
        return [
            Violation(
                rule_id=self.rule_id,
                message="Async tests should include error handling verification.",
                line=1,
                suggestion="Add tests for error cases using .rejects.toThrow() or try/catch.",
            )
        ]


class SingleAssertionSyndromeRule:
    """Test file with very few assertions may be incomplete."""

    rule_id = "assertion/single-assertion-syndrome"

    def detect(self, content: str, filename: str) -> list[Violation]:
        test_count = count_matches(content, TEST_CALL_RE)
        assertion_count = count_matches(content, EXPECT_CALL_RE)
        if test_count < SPARSE_ASSERTION_MIN_TESTS or assertion_count >= test_count:
            return []
        return [
            Violation(
                rule_id=self.rule_id,
                message=(
                    f"{test_count} tests with only {assertion_count} assertions. "
                    "Some tests may be incomplete."
                ),
                line=1,
                suggestion="Ensure each test has meaningful assertions.",
            )
        ]
