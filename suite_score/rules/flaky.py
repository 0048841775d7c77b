"""Flaky-test detection rules."""

from __future__ import annotations

import re

from suite_score.rules.base import Violation, match_all

TIMING_PATTERNS = (
    re.compile(r"setTimeout\s*\([^,]+,\s*\d+\)"),
    re.compile(r"setInterval\s*\([^,]+,\s*\d+\)"),
    re.compile(r"new\s+Promise\s*\(\s*(?:resolve|r)\s*=>\s*setTimeout"),
    re.compile(r"await\s+new\s+Promise\s*\(\s*r\s*=>\s*setTimeout\s*\(\s*r\s*,"),
    re.compile(r"\btime\.sleep\s*\(\s*[\d.]+\s*\)"),
)

RANDOM_PATTERNS = (
    re.compile(r"Math\.random\s*\(\)"),
    re.compile(r"crypto\.randomUUID\s*\(\)"),
    re.compile(r"\buuid\s*\(\)"),
    re.compile(r"\bfaker\.\w+"),
    re.compile(r"Date\.now\s*\(\)"),
    re.compile(r"new\s+Date\s*\(\s*\)"),
)
SEED_MARKERS = ("faker.seed", "Math.seedrandom", "random.seed")

UNAWAITED_PATTERNS = (
    re.compile(r"\bfetch\s*\("),
    re.compile(r"\baxios\.\w+\s*\("),
)
THEN_THEN_EXPECT_RE = re.compile(r"\.then\s*\([^)]*\)\s*;?\s*\n\s*expect")
AWAITED_PREFIX_RE = re.compile(r"\b(?:await|return)\s+$")

MUTABLE_DECLARATION_RE = re.compile(r"(?m)^[ \t]*(?:let|var)\s+\w+\s*=[^;\n]+;")
TEST_MARKER_RE = re.compile(r"\b(?:beforeEach|beforeAll|it|test|describe)\b")

NETWORK_CALL_RE = re.compile(r"\b(?:fetch|axios|http|https)\s*[.(]")
NETWORK_MOCK_MARKERS = ("mock", "Mock", "nock", "msw", "fetchMock")
NETWORK_EXEMPT_MARKERS = (".e2e.", ".integration.", "_e2e", "_integration")


class TimingDependencyRule:
    """Tests that depend on specific timing are flaky."""

    rule_id = "flaky/timing-dependency"

    def detect(self, content: str, filename: str) -> list[Violation]:
        violations: list[Violation] = []
        for pattern in TIMING_PATTERNS:
            for found in match_all(content, pattern):
                violations.append(
                    Violation(
                        rule_id=self.rule_id,
                        message=(
                            "Avoid hardcoded delays in tests. "
                            "Use fake timers or waitFor utilities."
                        ),
                        line=found.line,
                        snippet=found.snippet,
                        suggestion=(
                            "Use vi.useFakeTimers() or jest.useFakeTimers(), "
                            "or use waitFor/waitForExpect patterns."
                        ),
                    )
                )
        return violations


class RandomDataRule:
    """Tests using random data without seeds are non-deterministic."""

    rule_id = "flaky/random-data"

    def detect(self, content: str, filename: str) -> list[Violation]:
        if any(marker in content for marker in SEED_MARKERS):
            return []

        violations: list[Violation] = []
        for pattern in RANDOM_PATTERNS:
            for found in match_all(content, pattern):
                violations.append(
                    Violation(
                        rule_id=self.rule_id,
                        message=(
                            f'Random/dynamic value "{found.match.group(0)}" '
                            "can cause flaky tests."
                        ),
                        line=found.line,
                        snippet=found.snippet,
                        suggestion=(
                            "Use seeded random generators or fixed test data. "
                            "For dates, mock Date.now()."
                        ),
                    )
                )
        return violations


class AsyncWithoutAwaitRule:
    """Async operations without proper awaiting cause race conditions."""

    rule_id = "flaky/async-without-await"

    def detect(self, content: str, filename: str) -> list[Violation]:
        violations: list[Violation] = []
        for pattern in UNAWAITED_PATTERNS:
            for found in match_all(content, pattern):
                start = found.match.start()
                prefix = content[max(0, start - 32) : start]
                if AWAITED_PREFIX_RE.search(prefix):
                    continue
                violations.append(self._violation(found.line, found.snippet))

        for found in match_all(content, THEN_THEN_EXPECT_RE):
            violations.append(self._violation(found.line, found.snippet))
        return violations

    def _violation(self, line: int, snippet: str) -> Violation:
        return Violation(
            rule_id=self.rule_id,
            message="Async operation may not be properly awaited.",
            line=line,
            snippet=snippet,
            suggestion="Ensure all async operations are awaited before assertions.",
        )


class SharedStateRule:
    """Tests sharing mutable state can interfere with each other."""

    rule_id = "flaky/shared-state"

    def detect(self, content: str, filename: str) -> list[Violation]:
        markers = [marker.start() for marker in TEST_MARKER_RE.finditer(content)]
        if not markers:
            return []
        last_marker = markers[-1]

        violations: list[Violation] = []
        for found in match_all(content, MUTABLE_DECLARATION_RE):
            if "const" in found.snippet or "//" in found.snippet:
                continue
            # Only declarations that precede test scaffolding are shared state.
            if found.match.end() > last_marker:
                continue
            violations.append(
                Violation(
                    rule_id=self.rule_id,
                    message=(
                        "Mutable variable declared outside test scope may cause test interference."
                    ),
                    line=found.line,
                    snippet=found.snippet,
                    suggestion=(
                        "Move variable declaration inside beforeEach or individual tests, "
                        "or use const."
                    ),
                )
            )
        return violations


class NetworkDependencyRule:
    """Tests making real network calls are unreliable."""

    rule_id = "flaky/network-dependency"

    def detect(self, content: str, filename: str) -> list[Violation]:
        lowered_name = filename.lower()
        if any(marker in lowered_name for marker in NETWORK_EXEMPT_MARKERS):
            return []
        if any(marker in content for marker in NETWORK_MOCK_MARKERS):
            return []

        return [
            Violation(
                rule_id=self.rule_id,
                message="Real network call detected without mocking.",
                line=found.line,
                snippet=found.snippet,
                suggestion="Use MSW, nock, or mock the HTTP client for reliable tests.",
            )
            for found in match_all(content, NETWORK_CALL_RE)
        ]
