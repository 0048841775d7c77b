"""Test-structure rules."""

from __future__ import annotations

import re

from suite_score.rules.base import TEST_BLOCK_RE, TEST_CALL_RE, Violation, count_matches, match_all

DESCRIBE_RE = re.compile(r"\bdescribe\s*\(")
MIN_TESTS_FOR_GROUPING = 2

AAA_COMMENT_RE = re.compile(
    r"(?://|#)\s*(?:arrange|act|assert|given|when|then|setup)", re.IGNORECASE
)
BLANK_LINE_RE = re.compile(r"\n[ \t]*\n")
AAA_MIN_BODY_LINES = 5
AAA_MIN_BODY_CHARS = 200

EXPECT_SPLIT_RE = re.compile(r"\bexpect\s*\(")
STATEMENT_END_RE = re.compile(r"\)\s*;")
CALL_RE = re.compile(r"\w+\s*\(")
MAX_ACT_PHASES = 1


class MissingDescribeRule:
    """Tests should be organized in describe blocks."""

    rule_id = "structure/missing-describe"

    def detect(self, content: str, filename: str) -> list[Violation]:
        if DESCRIBE_RE.search(content):
            return []
        if count_matches(content, TEST_CALL_RE) < MIN_TESTS_FOR_GROUPING:
            return []
        return [
            Violation(
                rule_id=self.rule_id,
                message="Tests are not organized in describe blocks.",
                line=1,
                suggestion="Wrap related tests in describe() blocks for better organization.",
            )
        ]


class ArrangeActAssertRule:
    """Tests should follow Arrange-Act-Assert pattern."""

    rule_id = "structure/arrange-act-assert"

    def detect(self, content: str, filename: str) -> list[Violation]:
        violations: list[Violation] = []
        for found in match_all(content, TEST_BLOCK_RE):
            name, body = found.match.group(1), found.match.group(2)
            if body.count("\n") + 1 < AAA_MIN_BODY_LINES:
                continue
            if len(body) <= AAA_MIN_BODY_CHARS or _has_sections(body):
                continue
            violations.append(
                Violation(
                    rule_id=self.rule_id,
                    message=f'Test "{name}" may benefit from clearer AAA structure.',
                    line=found.line,
                    suggestion=(
                        "Add comments (// Arrange, // Act, // Assert) "
                        "or blank lines to separate sections."
                    ),
                )
            )
        return violations


class MultipleActsRule:
    """Tests with multiple acts are testing multiple things."""

    rule_id = "structure/multiple-acts"

    def detect(self, content: str, filename: str) -> list[Violation]:
        violations: list[Violation] = []
        for found in match_all(content, TEST_BLOCK_RE):
            name, body = found.match.group(1), found.match.group(2)
            if _count_act_phases(body) <= MAX_ACT_PHASES:
                continue
            violations.append(
                Violation(
                    rule_id=self.rule_id,
                    message=f'Test "{name}" appears to have multiple act phases.',
                    line=found.line,
                    suggestion="Split into separate tests, each testing one behavior.",
                )
            )
        return violations


def _has_sections(body: str) -> bool:
    if AAA_COMMENT_RE.search(body):
        return True
    setup = body.split("expect", 1)[0]
    return bool(BLANK_LINE_RE.search(setup))


def _count_act_phases(body: str) -> int:
    acts = 0
    for group in EXPECT_SPLIT_RE.split(body)[1:]:
        pieces = STATEMENT_END_RE.split(group)
        between = pieces[1] if len(pieces) > 1 else ""
        if CALL_RE.search(between):
            acts += 1
    return acts
