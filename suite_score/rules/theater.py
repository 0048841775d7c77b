"""Testing-theater rules: tests that look like tests but verify nothing."""

from __future__ import annotations

import re

from suite_score.rules.base import TEST_BLOCK_RE, Violation, match_all

ASSERTION_MARKERS = (
    re.compile(r"\bexpect\s*\("),
    re.compile(r"\bassert[.(]"),
    re.compile(r"\bshould[.(]"),
    re.compile(r"\.to\."),
    re.compile(r"\.toBe"),
    re.compile(r"toThrow"),
    re.compile(r"rejects"),
    re.compile(r"resolves"),
)
CONSOLE_CALL_RE = re.compile(r"\bconsole\.\w+\s*\(")
DIRECT_ASSERTION_RE = re.compile(r"\bexpect\s*\(|\bassert[.(]|\bshould[.(]")

ALWAYS_TRUE_PATTERNS = (
    re.compile(r"expect\s*\(\s*true\s*\)\s*\.toBe\s*\(\s*true\s*\)"),
    re.compile(r"expect\s*\(\s*1\s*\)\s*\.toBe\s*\(\s*1\s*\)"),
    re.compile(
        r"expect\s*\(\s*['\"`][^'\"`]*['\"`]\s*\)\s*\.toBe\s*\(\s*['\"`][^'\"`]*['\"`]\s*\)"
    ),
    re.compile(r"expect\s*\(\s*\d+\s*\+\s*\d+\s*\)\s*\.toBe\s*\(\s*\d+\s*\)"),
    re.compile(r"assert\.ok\s*\(\s*true\s*\)"),
    re.compile(r"expect\s*\(\s*['\"]\w+['\"]\s*\)\s*\.toContain\s*\(\s*['\"]\w*['\"]\s*\)"),
    re.compile(r"(?m)^[ \t]*assert[ \t]+True[ \t]*$"),
)

EMPTY_TEST_RE = re.compile(
    r"\b(?:it|test)\s*\(\s*['\"`]([^'\"`]+)['\"`]\s*,\s*"
    r"(?:async\s*)?\([^)]*\)\s*=>\s*\{\s*\}\s*\)"
)

EXPECT_NOTHING_PATTERNS = (
    re.compile(r"expect\s*\(\s*undefined\s*\)\s*\.(?!toBeUndefined|toBeDefined)"),
    re.compile(r"expect\s*\(\s*null\s*\)\s*\.(?!toBeNull|toBe\(null)"),
    re.compile(r"expect\s*\(\s*\)\s*\."),
)


class NoAssertionsRule:
    """Tests without assertions prove nothing."""

    rule_id = "theater/no-assertions"

    def detect(self, content: str, filename: str) -> list[Violation]:
        violations: list[Violation] = []
        for found in match_all(content, TEST_BLOCK_RE):
            name, body = found.match.group(1), found.match.group(2)
            if not body.strip():
                continue
            if any(marker.search(body) for marker in ASSERTION_MARKERS):
                continue
            violations.append(
                Violation(
                    rule_id=self.rule_id,
                    message=f'Test "{name}" has no assertions.',
                    line=found.line,
                    snippet=f'test("{name}", ...)',
                    suggestion=(
                        "Add expect() calls to verify behavior, or mark as .todo() if incomplete."
                    ),
                )
            )
        return violations


class AlwaysTrueRule:
    """Assertions that always pass are meaningless."""

    rule_id = "theater/always-true"

    def detect(self, content: str, filename: str) -> list[Violation]:
        violations: list[Violation] = []
        for pattern in ALWAYS_TRUE_PATTERNS:
            for found in match_all(content, pattern):
                violations.append(
                    Violation(
                        rule_id=self.rule_id,
                        message="This assertion always passes and tests nothing meaningful.",
                        line=found.line,
                        snippet=found.snippet,
                        suggestion="Assert on actual function outputs, not hardcoded values.",
                    )
                )
        return violations


class EmptyTestRule:
    """Empty tests provide no coverage."""

    rule_id = "theater/empty-test"

    def detect(self, content: str, filename: str) -> list[Violation]:
        return [
            Violation(
                rule_id=self.rule_id,
                message=f'Test "{found.match.group(1)}" is empty.',
                line=found.line,
                snippet=f'test("{found.match.group(1)}", () => {{}})',
                suggestion="Implement the test or mark as .todo() if planned for later.",
            )
            for found in match_all(content, EMPTY_TEST_RE)
        ]


class ConsoleOnlyRule:
    """Tests that only console.log without asserting."""

    rule_id = "theater/console-only"

    def detect(self, content: str, filename: str) -> list[Violation]:
        violations: list[Violation] = []
        for found in match_all(content, TEST_BLOCK_RE):
            name, body = found.match.group(1), found.match.group(2)
            if CONSOLE_CALL_RE.search(body) and not DIRECT_ASSERTION_RE.search(body):
                violations.append(
                    Violation(
                        rule_id=self.rule_id,
                        message=f'Test "{name}" only logs to console without assertions.',
                        line=found.line,
                        snippet=f'test("{name}", ...)',
                        suggestion="Replace console.log with proper assertions.",
                    )
                )
        return violations


class ExpectNothingRule:
    """Expecting on undefined/null without meaningful comparison."""

    rule_id = "theater/expect-nothing"

    def detect(self, content: str, filename: str) -> list[Violation]:
        violations: list[Violation] = []
        for pattern in EXPECT_NOTHING_PATTERNS:
            for found in match_all(content, pattern):
                violations.append(
                    Violation(
                        rule_id=self.rule_id,
                        message="Assertion on undefined/null may not test actual behavior.",
                        line=found.line,
                        snippet=found.snippet,
                        suggestion="Verify you are testing the right variable and behavior.",
                    )
                )
        return violations
