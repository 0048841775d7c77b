"""Maintainability rules."""

from __future__ import annotations

import re

from suite_score.rules.base import TEST_CALL_RE, Violation, count_matches, match_all

TEST_NAME_RE = re.compile(r"\b(?:it|test)\s*\(\s*['\"`]([^'\"`]+)['\"`]")
VAGUE_NAME_PATTERNS = (
    (re.compile(r"^test\s*\d+$", re.IGNORECASE), "Numbered test name (test 1, test 2)"),
    (re.compile(r"^it works$", re.IGNORECASE), 'Vague "it works" name'),
    (re.compile(r"^works$", re.IGNORECASE), 'Vague "works" name'),
    (re.compile(r"^basic test$", re.IGNORECASE), 'Vague "basic test" name'),
    (re.compile(r"^test$", re.IGNORECASE), 'Just "test" as name'),
    (re.compile(r"function\s+\w+$"), "Name just describes what function, not behavior"),
)
MIN_NAME_LENGTH = 5

DESCRIBE_RE = re.compile(r"\bdescribe\s*\(")
MAX_DESCRIBE_BLOCKS = 4
MAX_BRACE_DEPTH = 8

LARGE_FILE_LINES = 500

MAGIC_NUMBER_RE = re.compile(r"expect\s*\([^)]+\)\s*\.toBe\s*\(\s*(\d{3,})\s*\)")

LINE_COMMENTED_TEST_RE = re.compile(r"//\s*(?:it|test|describe)\s*\(")
COMMENTED_CALL_RE = re.compile(r"\b(?:it|test|describe)\s*\(")


class PoorTestNameRule:
    """Test names should describe behavior, not implementation."""

    rule_id = "maintain/poor-test-name"

    def detect(self, content: str, filename: str) -> list[Violation]:
        violations: list[Violation] = []
        for found in match_all(content, TEST_NAME_RE):
            name = found.match.group(1)
            snippet = f'test("{name}", ...)'
            for pattern, issue in VAGUE_NAME_PATTERNS:
                if pattern.search(name):
                    violations.append(
                        Violation(
                            rule_id=self.rule_id,
                            message=f'Test name "{name}": {issue}.',
                            line=found.line,
                            snippet=snippet,
                            suggestion=(
                                "Use descriptive names like "
                                '"should return empty array when input is null".'
                            ),
                        )
                    )
                    break

            if len(name) < MIN_NAME_LENGTH and "should" not in name:
                violations.append(
                    Violation(
                        rule_id=self.rule_id,
                        message=f'Test name "{name}" is too short to be descriptive.',
                        line=found.line,
                        snippet=snippet,
                        suggestion="Describe what behavior is being tested.",
                    )
                )
        return violations


class DeeplyNestedRule:
    """Excessive nesting makes tests hard to read."""

    rule_id = "maintain/deeply-nested"

    def detect(self, content: str, filename: str) -> list[Violation]:
        if count_matches(content, DESCRIBE_RE) <= MAX_DESCRIBE_BLOCKS:
            return []
        if _max_brace_depth(content) <= MAX_BRACE_DEPTH:
            return []
        return [
            Violation(
                rule_id=self.rule_id,
                message="Test file has deeply nested describe blocks.",
                line=1,
                suggestion="Flatten structure or split into multiple test files.",
            )
        ]


class LargeTestFileRule:
    """Very large test files are hard to maintain."""

    rule_id = "maintain/large-test-file"

    def detect(self, content: str, filename: str) -> list[Violation]:
        line_count = content.count("\n") + 1
        if line_count <= LARGE_FILE_LINES:
            return []
        test_count = count_matches(content, TEST_CALL_RE)
        return [
            Violation(
                rule_id=self.rule_id,
                message=(
                    f"Test file is {line_count} lines with {test_count} tests. "
                    "Consider splitting."
                ),
                line=1,
                suggestion="Split into focused test files organized by feature or component.",
            )
        ]


class MagicNumbersRule:
    """Unexplained magic numbers reduce test clarity."""

    rule_id = "maintain/magic-numbers"

    def detect(self, content: str, filename: str) -> list[Violation]:
        return [
            Violation(
                rule_id=self.rule_id,
                message=f"Magic number {found.match.group(1)} in assertion.",
                line=found.line,
                snippet=found.snippet,
                suggestion="Extract to a named constant that explains the expected value.",
            )
            for found in match_all(content, MAGIC_NUMBER_RE)
        ]


class CommentedTestRule:
    """Commented tests should be deleted or fixed."""

    rule_id = "maintain/commented-test"

    def detect(self, content: str, filename: str) -> list[Violation]:
        locations = [
            (found.line, found.snippet) for found in match_all(content, LINE_COMMENTED_TEST_RE)
        ]
        starts = _block_comments_with_tests(content)
        if starts:
            lines = content.split("\n")
            line, position = 1, 0
            for start in starts:
                line += content.count("\n", position, start)
                position = start
                locations.append((line, lines[line - 1].strip()))
        return [
            Violation(
                rule_id=self.rule_id,
                message="Commented out test code found.",
                line=line,
                snippet=snippet,
                suggestion=(
                    "Delete commented tests or use .skip() / .todo() for temporary skipping."
                ),
            )
            for line, snippet in locations
        ]


def _block_comments_with_tests(content: str) -> list[int]:
    """Return start offsets of closed `/* ... */` comments that contain a test call."""
    starts: list[int] = []
    position = 0
    while True:
        start = content.find("/*", position)
        if start == -1:
            break
        end = content.find("*/", start + 2)
        if end == -1:
            break
        if COMMENTED_CALL_RE.search(content, start + 2, end):
            starts.append(start)
        position = end + 2
    return starts


def _max_brace_depth(content: str) -> int:
    depth = 0
    deepest = 0
    for char in content:
        if char == "{":
            depth += 1
            deepest = max(deepest, depth)
        elif char == "}":
            depth -= 1
    return deepest
