"""Project-level aggregation of per-file reviews."""

from __future__ import annotations

from dataclasses import dataclass, field

from suite_score.rules import CATEGORIES, CATEGORY_DESCRIPTIONS, get_rule
from suite_score.rules.base import SEVERITY_ORDER
from suite_score.scoring import CATEGORY_WEIGHTS, CategoryScore, ReviewedFile, round_half_up

TOP_ISSUES_LIMIT = 10


@dataclass(frozen=True, slots=True)
class TopIssue:
    """One rule's occurrence count across every reviewed file."""

    rule: str
    count: int
    severity: str


@dataclass(slots=True)
class ReviewSummary:
    """Aggregate counters and scores for a whole review run."""

    total_files: int = 0
    total_tests: int = 0
    total_assertions: int = 0
    total_violations: int = 0
    overall_score: int = 0
    score_breakdown: list[CategoryScore] = field(default_factory=list)
    violations_by_category: dict[str, int] = field(default_factory=dict)
    violations_by_severity: dict[str, int] = field(default_factory=dict)
    top_issues: list[TopIssue] = field(default_factory=list)


def aggregate(files: list[ReviewedFile]) -> ReviewSummary:
    """Combine per-file reviews into one summary.

    Aggregate category scores are the mean of each file's category score and
    the overall score is the mean of each file's overall score; the two are
    computed independently. With no files the overall score is 0, which
    means "nothing evaluated" rather than "perfect".
    """
    by_category = {category: 0 for category in CATEGORIES}
    by_severity = {severity: 0 for severity in reversed(SEVERITY_ORDER)}
    issue_counts: dict[str, int] = {}
    issue_severity: dict[str, str] = {}

    for reviewed in files:
        for violation in reviewed.violations:
            rule = get_rule(violation.rule_id)
            if rule is None:
                continue
            by_category[rule.category] += 1
            by_severity[rule.severity] += 1
            issue_counts[rule.rule_id] = issue_counts.get(rule.rule_id, 0) + 1
            issue_severity[rule.rule_id] = rule.severity

    top_issues = [
        TopIssue(rule=rule_id, count=count, severity=issue_severity[rule_id])
        for rule_id, count in issue_counts.items()
    ]
    # Stable sort keeps first-seen order for ties.
    top_issues.sort(key=lambda item: (-_severity_weight(item.severity), -item.count))

    return ReviewSummary(
        total_files=len(files),
        total_tests=sum(item.test_count for item in files),
        total_assertions=sum(item.assertion_count for item in files),
        total_violations=sum(len(item.violations) for item in files),
        overall_score=_mean([item.score for item in files], empty=0),
        score_breakdown=_average_breakdown(files, by_category),
        violations_by_category=by_category,
        violations_by_severity=by_severity,
        top_issues=top_issues[:TOP_ISSUES_LIMIT],
    )


def _average_breakdown(
    files: list[ReviewedFile], by_category: dict[str, int]
) -> list[CategoryScore]:
    per_category: dict[str, list[int]] = {category: [] for category in CATEGORIES}
    for reviewed in files:
        for category_score in reviewed.score_breakdown:
            per_category.setdefault(category_score.category, []).append(category_score.score)

    return [
        CategoryScore(
            category=category,
            description=CATEGORY_DESCRIPTIONS[category],
            score=_mean(per_category[category], empty=100),
            weight=CATEGORY_WEIGHTS[category],
            violations=by_category[category],
        )
        for category in CATEGORIES
    ]


def _mean(values: list[int], *, empty: int) -> int:
    if not values:
        return empty
    return round_half_up(sum(values) / len(values))


def _severity_weight(severity: str) -> int:
    return SEVERITY_ORDER.index(severity)  # type: ignore[arg-type]
