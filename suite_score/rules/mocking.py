"""Over-mocking rules."""

from __future__ import annotations

import re

from suite_score.rules.base import (
    EXPECT_CALL_RE,
    Violation,
    count_matches,
    find_line_number,
    match_all,
)

MOCK_REGISTRATION_PATTERNS = (
    re.compile(r"\bjest\.mock\s*\("),
    re.compile(r"\bvi\.mock\s*\("),
    re.compile(r"\b(?:jest|vi)\.spyOn\s*\("),
    re.compile(r"\b(?:jest|vi)\.fn\s*\("),
    re.compile(r"\.mockImplementation\s*\("),
    re.compile(r"@(?:mock\.)?patch(?:\.object)?\s*\("),
    re.compile(r"\bmocker\.patch(?:\.object)?\s*\("),
)
EXCESSIVE_MOCK_FLOOR = 5

IMPORT_FROM_RE = re.compile(r"import\s+.*\s+from\s+['\"]([^'\"]+)['\"]")
MODULE_MOCK_RE = re.compile(r"\b(?:jest|vi)\.mock\s*\(\s*['\"]([^'\"]+)['\"]")

FIXED_RETURN_RE = re.compile(r"\.mockReturnValue\s*\([^)]+\)")
FIXED_RETURN_THRESHOLD = 3


def count_mocks(content: str) -> int:
    """Count mock registrations across jest, vitest and unittest.mock styles."""
    return sum(count_matches(content, pattern) for pattern in MOCK_REGISTRATION_PATTERNS)


class ExcessiveMockingRule:
    """Over-mocking defeats the purpose of testing."""

    rule_id = "mock/excessive-mocking"

    def detect(self, content: str, filename: str) -> list[Violation]:
        total_mocks = count_mocks(content)
        assertion_count = count_matches(content, EXPECT_CALL_RE)
        if total_mocks <= EXCESSIVE_MOCK_FLOOR or total_mocks <= assertion_count * 2:
            return []
        return [
            Violation(
                rule_id=self.rule_id,
                message=(
                    f"File has {total_mocks} mocks but only {assertion_count} assertions. "
                    "Possible over-mocking."
                ),
                line=1,
                suggestion="Consider testing with fewer mocks. Each mock reduces test confidence.",
            )
        ]


class MockingWhatYouTestRule:
    """Mocking the module under test defeats the purpose."""

    rule_id = "mock/mocking-what-you-test"

    def detect(self, content: str, filename: str) -> list[Violation]:
        relative_imports = [
            match.group(1)
            for match in IMPORT_FROM_RE.finditer(content)
            if match.group(1).startswith(("./", "../"))
        ]
        if not relative_imports:
            return []

        violations: list[Violation] = []
        for match in MODULE_MOCK_RE.finditer(content):
            mocked_path = match.group(1)
            if not any(_same_module(imported, mocked_path) for imported in relative_imports):
                continue
            violations.append(
                Violation(
                    rule_id=self.rule_id,
                    message=f'Mocking "{mocked_path}" which appears to be the module under test.',
                    line=find_line_number(content, match.start()),
                    snippet=match.group(0),
                    suggestion="Mock dependencies, not the code you are testing.",
                )
            )
        return violations


class MockReturnIgnoresInputRule:
    """Mocks that always return the same value regardless of input."""

    rule_id = "mock/mock-return-ignores-input"

    def detect(self, content: str, filename: str) -> list[Violation]:
        fixed_returns = match_all(content, FIXED_RETURN_RE)
        if len(fixed_returns) <= FIXED_RETURN_THRESHOLD:
            return []
        return [
            Violation(
                rule_id=self.rule_id,
                message="Multiple fixed mock return values may indicate over-specification.",
                line=fixed_returns[0].line,
                suggestion="Consider if the test is too coupled to implementation details.",
            )
        ]


def _same_module(imported: str, mocked: str) -> bool:
    return (
        imported == mocked
        or imported.endswith(mocked)
        or mocked.endswith(imported.replace("./", "", 1))
    )
