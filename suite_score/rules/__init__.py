"""Rules package."""

from collections.abc import Iterable
from dataclasses import dataclass

from suite_score.rules.assertions import (
    NoErrorAssertionRule,
    SingleAssertionSyndromeRule,
    WeakAssertionRule,
)
from suite_score.rules.base import (
    Category,
    Detector,
    QualityRule,
    Severity,
    Violation,
    severity_rank,
)
from suite_score.rules.flaky import (
    AsyncWithoutAwaitRule,
    NetworkDependencyRule,
    RandomDataRule,
    SharedStateRule,
    TimingDependencyRule,
)
from suite_score.rules.isolation import (
    FilesystemSideEffectsRule,
    GlobalStateRule,
    OrderDependencyRule,
)
from suite_score.rules.maintainability import (
    CommentedTestRule,
    DeeplyNestedRule,
    LargeTestFileRule,
    MagicNumbersRule,
    PoorTestNameRule,
)
from suite_score.rules.mocking import (
    ExcessiveMockingRule,
    MockingWhatYouTestRule,
    MockReturnIgnoresInputRule,
)
from suite_score.rules.structure import (
    ArrangeActAssertRule,
    MissingDescribeRule,
    MultipleActsRule,
)
from suite_score.rules.theater import (
    AlwaysTrueRule,
    ConsoleOnlyRule,
    EmptyTestRule,
    ExpectNothingRule,
    NoAssertionsRule,
)

__all__ = [
    "ALL_RULES",
    "CATEGORIES",
    "CATEGORY_DESCRIPTIONS",
    "Category",
    "QualityRule",
    "RuleInfo",
    "Severity",
    "Violation",
    "get_rule",
    "list_rule_info",
    "rules_by_category",
    "select_rules",
]

# Ordered as the score breakdown is reported.
CATEGORIES: tuple[Category, ...] = (
    "flaky",
    "theater",
    "over-mocking",
    "assertions",
    "isolation",
    "maintainability",
    "structure",
)

CATEGORY_DESCRIPTIONS: dict[str, str] = {
    "flaky": "Flaky Test Detection - Tests that may pass or fail randomly",
    "theater": "Testing Theater - Tests that appear to test but actually verify nothing",
    "over-mocking": "Over-Mocking - Tests that mock so much they test nothing real",
    "assertions": "Assertion Quality - Weak or missing assertions",
    "isolation": "Test Isolation - Tests that may interfere with each other",
    "maintainability": "Maintainability - Tests that are hard to understand or maintain",
    "structure": "Test Structure - Organization and clarity issues",
}


@dataclass(frozen=True, slots=True)
class RuleInfo:
    """Rule metadata for listing and selection."""

    rule_id: str
    name: str
    description: str
    category: str
    severity: str
    weight: int
    selected: bool


def _catalog_entry(
    detector_cls: type[Detector],
    *,
    name: str,
    category: Category,
    severity: Severity,
    weight: int,
) -> QualityRule:
    detector = detector_cls()
    return QualityRule(
        rule_id=detector.rule_id,
        name=name,
        description=(detector_cls.__doc__ or "").strip(),
        category=category,
        severity=severity,
        weight=weight,
        detector=detector,
    )


ALL_RULES: tuple[QualityRule, ...] = (
    _catalog_entry(
        TimingDependencyRule,
        name="Timing Dependency",
        category="flaky",
        severity="error",
        weight=8,
    ),
    _catalog_entry(
        RandomDataRule,
        name="Random Data Without Seed",
        category="flaky",
        severity="warning",
        weight=6,
    ),
    _catalog_entry(
        AsyncWithoutAwaitRule,
        name="Async Without Await",
        category="flaky",
        severity="error",
        weight=9,
    ),
    _catalog_entry(
        SharedStateRule,
        name="Shared Mutable State",
        category="flaky",
        severity="error",
        weight=8,
    ),
    _catalog_entry(
        NetworkDependencyRule,
        name="Network Dependency",
        category="flaky",
        severity="error",
        weight=9,
    ),
    _catalog_entry(
        NoAssertionsRule,
        name="No Assertions",
        category="theater",
        severity="error",
        weight=10,
    ),
    _catalog_entry(
        AlwaysTrueRule,
        name="Always-True Assertion",
        category="theater",
        severity="error",
        weight=9,
    ),
    _catalog_entry(
        EmptyTestRule,
        name="Empty Test",
        category="theater",
        severity="error",
        weight=10,
    ),
    _catalog_entry(
        ConsoleOnlyRule,
        name="Console-Only Test",
        category="theater",
        severity="warning",
        weight=7,
    ),
    _catalog_entry(
        ExpectNothingRule,
        name="Expect on Undefined",
        category="theater",
        severity="warning",
        weight=6,
    ),
    _catalog_entry(
        ExcessiveMockingRule,
        name="Excessive Mocking",
        category="over-mocking",
        severity="warning",
        weight=7,
    ),
    _catalog_entry(
        MockingWhatYouTestRule,
        name="Mocking What You Test",
        category="over-mocking",
        severity="error",
        weight=9,
    ),
    _catalog_entry(
        MockReturnIgnoresInputRule,
        name="Mock Ignores Input",
        category="over-mocking",
        severity="info",
        weight=3,
    ),
    _catalog_entry(
        WeakAssertionRule,
        name="Weak Assertion",
        category="assertions",
        severity="warning",
        weight=5,
    ),
    _catalog_entry(
        NoErrorAssertionRule,
        name="No Error Assertions",
        category="assertions",
        severity="info",
        weight=4,
    ),
    _catalog_entry(
        SingleAssertionSyndromeRule,
        name="Single Assertion Per Test File",
        category="assertions",
        severity="info",
        weight=3,
    ),
    _catalog_entry(
        OrderDependencyRule,
        name="Test Order Dependency",
        category="isolation",
        severity="warning",
        weight=7,
    ),
    _catalog_entry(
        GlobalStateRule,
        name="Global State Modification",
        category="isolation",
        severity="error",
        weight=8,
    ),
    _catalog_entry(
        FilesystemSideEffectsRule,
        name="Filesystem Side Effects",
        category="isolation",
        severity="warning",
        weight=6,
    ),
    _catalog_entry(
        PoorTestNameRule,
        name="Poor Test Name",
        category="maintainability",
        severity="info",
        weight=3,
    ),
    _catalog_entry(
        DeeplyNestedRule,
        name="Deeply Nested Tests",
        category="maintainability",
        severity="warning",
        weight=4,
    ),
    _catalog_entry(
        LargeTestFileRule,
        name="Large Test File",
        category="maintainability",
        severity="info",
        weight=2,
    ),
    _catalog_entry(
        MagicNumbersRule,
        name="Magic Numbers in Tests",
        category="maintainability",
        severity="info",
        weight=2,
    ),
    _catalog_entry(
        CommentedTestRule,
        name="Commented Out Test",
        category="maintainability",
        severity="warning",
        weight=4,
    ),
    _catalog_entry(
        MissingDescribeRule,
        name="Missing Describe Block",
        category="structure",
        severity="info",
        weight=2,
    ),
    _catalog_entry(
        ArrangeActAssertRule,
        name="Missing AAA Pattern",
        category="structure",
        severity="info",
        weight=2,
    ),
    _catalog_entry(
        MultipleActsRule,
        name="Multiple Acts Per Test",
        category="structure",
        severity="warning",
        weight=5,
    ),
)

_RULES_BY_ID: dict[str, QualityRule] = {rule.rule_id: rule for rule in ALL_RULES}


def get_rule(rule_id: str) -> QualityRule | None:
    """Look up a catalog rule by id."""
    return _RULES_BY_ID.get(rule_id)


def rules_by_category(
    catalog: Iterable[QualityRule] = ALL_RULES,
) -> dict[str, list[QualityRule]]:
    """Group rules by category, keeping every category key present."""
    grouped: dict[str, list[QualityRule]] = {category: [] for category in CATEGORIES}
    for rule in catalog:
        grouped[rule.category].append(rule)
    return grouped


def select_rules(
    catalog: Iterable[QualityRule] | None = None,
    *,
    included_categories: Iterable[str] | None = None,
    excluded_categories: Iterable[str] | None = None,
    min_severity: str | None = None,
) -> list[QualityRule]:
    """Filter the catalog by category inclusion, exclusion, then minimum severity."""
    rules = list(ALL_RULES if catalog is None else catalog)
    included = _validate_categories(included_categories or [])
    excluded = _validate_categories(excluded_categories or [])

    if included:
        rules = [rule for rule in rules if rule.category in included]
    if excluded:
        rules = [rule for rule in rules if rule.category not in excluded]
    if min_severity:
        threshold = severity_rank(min_severity.lower())
        rules = [rule for rule in rules if severity_rank(rule.severity) >= threshold]
    return rules


def list_rule_info(selected: Iterable[QualityRule] | None = None) -> list[RuleInfo]:
    """Return metadata for every catalog rule with its selection state."""
    selected_ids = {rule.rule_id for rule in (ALL_RULES if selected is None else selected)}
    return [
        RuleInfo(
            rule_id=rule.rule_id,
            name=rule.name,
            description=rule.description,
            category=rule.category,
            severity=rule.severity,
            weight=rule.weight,
            selected=rule.rule_id in selected_ids,
        )
        for rule in ALL_RULES
    ]


def _validate_categories(categories: Iterable[str]) -> set[str]:
    requested = {category.lower() for category in categories}
    unknown = requested.difference(CATEGORIES)
    if unknown:
        joined = ", ".join(sorted(unknown))
        choices = ", ".join(CATEGORIES)
        raise ValueError(f"Unknown rule categories: {joined}. Expected one of: {choices}")
    return requested
