"""Test-isolation rules."""

from __future__ import annotations

import re

from suite_score.rules.base import TEST_CALL_RE, Violation, match_all

BARE_DECLARATION_RE = re.compile(r"\b(?:let|var)\s+\w+[ \t]*;?[ \t]*\n")
BEFORE_EACH_WORD_RE = re.compile(r"\bbeforeEach")
MUTATION_IN_TEST_RE = re.compile(
    r"\b(?:it|test)\s*\([^)]*\)\s*=>\s*\{[^}]*(?:\w+\s*=\s*[^=]|\.push\(|\.pop\(|\.splice\()"
)
BEFORE_EACH_RE = re.compile(r"\bbeforeEach\s*\(")
BEFORE_EACH_RESET_RE = re.compile(
    r"\bbeforeEach\s*\([^)]*\)\s*=>\s*\{[^}]*(?:\w+\s*=\s*[\[{]|\.length\s*=\s*0)"
)

GLOBAL_MODIFICATIONS = (
    (re.compile(r"\bprocess\.env\.\w+\s*=(?!=)"), "Modifying process.env"),
    (re.compile(r"\bglobal\.\w+\s*=(?!=)"), "Modifying global object"),
    (re.compile(r"\bwindow\.\w+\s*=(?!=)"), "Modifying window object"),
    (re.compile(r"\bdocument\.\w+\s*=(?!=)"), "Modifying document"),
    (re.compile(r"\bos\.environ\[[^\]]+\]\s*=(?!=)"), "Modifying os.environ"),
)
AFTER_EACH_RE = re.compile(r"\bafterEach\s*\([^)]*\)\s*=>\s*\{")

FS_WRITE_RE = re.compile(r"\b(?:writeFile|writeFileSync|mkdir|mkdirSync|appendFile)\s*\(")
FS_CLEANUP_PATTERNS = (
    re.compile(r"\b(?:unlink|unlinkSync|rm|rmSync|rmdir)\s*\("),
    re.compile(r"\bafterEach\s*\([^)]*\)\s*=>\s*\{[^}]*(?:unlink|rm)"),
    re.compile(r"tmp|temp", re.IGNORECASE),
)


class OrderDependencyRule:
    """Tests that depend on execution order are fragile."""

    rule_id = "isolation/test-order-dependency"

    def detect(self, content: str, filename: str) -> list[Violation]:
        if not _declaration_before_setup_and_tests(content):
            return []
        if not MUTATION_IN_TEST_RE.search(content):
            return []
        if BEFORE_EACH_RE.search(content) and BEFORE_EACH_RESET_RE.search(content):
            return []
        return [
            Violation(
                rule_id=self.rule_id,
                message="Tests may depend on execution order due to shared mutable state.",
                line=1,
                suggestion=(
                    "Reset all shared state in beforeEach() or create fresh instances per test."
                ),
            )
        ]


class GlobalStateRule:
    """Tests modifying global state can affect other tests."""

    rule_id = "isolation/global-state"

    def detect(self, content: str, filename: str) -> list[Violation]:
        cleanup_word = "verifying" if AFTER_EACH_RE.search(content) else "any"
        violations: list[Violation] = []
        for pattern, label in GLOBAL_MODIFICATIONS:
            for found in match_all(content, pattern):
                violations.append(
                    Violation(
                        rule_id=self.rule_id,
                        message=f"{label} without {cleanup_word} cleanup.",
                        line=found.line,
                        snippet=found.snippet,
                        suggestion=(
                            "Restore original value in afterEach() "
                            "or use vi.stubEnv()/jest.replaceProperty()."
                        ),
                    )
                )
        return violations


class FilesystemSideEffectsRule:
    """Tests creating files without cleanup."""

    rule_id = "isolation/filesystem-side-effects"

    def detect(self, content: str, filename: str) -> list[Violation]:
        operations = match_all(content, FS_WRITE_RE)
        if not operations:
            return []
        if any(pattern.search(content) for pattern in FS_CLEANUP_PATTERNS):
            return []
        return [
            Violation(
                rule_id=self.rule_id,
                message="File system operation without visible cleanup.",
                line=found.line,
                snippet=found.snippet,
                suggestion="Clean up created files in afterEach() or use temp directories.",
            )
            for found in operations
        ]


def _declaration_before_setup_and_tests(content: str) -> bool:
    """Return True for a bare `let`/`var`, then `beforeEach`, then a test call, in order."""
    declaration = BARE_DECLARATION_RE.search(content)
    if declaration is None:
        return False
    setup = BEFORE_EACH_WORD_RE.search(content, declaration.end())
    if setup is None:
        return False
    return TEST_CALL_RE.search(content, setup.end()) is not None
