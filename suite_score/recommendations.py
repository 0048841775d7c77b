"""Human-readable guidance derived from an aggregate summary."""

from __future__ import annotations

from suite_score.aggregate import ReviewSummary

FLAKY_THRESHOLD = 3
OVER_MOCKING_THRESHOLD = 2
LOW_SCORE_THRESHOLD = 60
GOOD_SCORE_THRESHOLD = 80
FOCUS_AREA_THRESHOLD = 70
FOCUS_AREA_LIMIT = 2

NO_FILES_MESSAGE = "No test files found. Start by adding tests!"
NO_RULES_MESSAGE = (
    "NOTE: No rules were selected, so scores reflect no checks. "
    "Widen the category or severity filters to evaluate test quality."
)


def generate_recommendations(summary: ReviewSummary, *, rules_selected: int = 1) -> list[str]:
    """Return applicable recommendations in priority order.

    Every matching message is emitted; they are not mutually exclusive.
    """
    if summary.total_files == 0:
        return [NO_FILES_MESSAGE]

    recommendations: list[str] = []
    if rules_selected == 0:
        recommendations.append(NO_RULES_MESSAGE)

    by_category = summary.violations_by_category
    if by_category.get("theater", 0) > 0:
        recommendations.append(
            "CRITICAL: Some tests don't actually test anything (testing theater). "
            "Review empty tests and tests without assertions."
        )
    if by_category.get("flaky", 0) > FLAKY_THRESHOLD:
        recommendations.append(
            "CRITICAL: Multiple flaky test patterns detected. "
            "These cause intermittent CI failures. "
            "Address timing dependencies and random data usage."
        )
    if by_category.get("over-mocking", 0) > OVER_MOCKING_THRESHOLD:
        recommendations.append(
            "WARNING: Excessive mocking detected. Tests that mock everything verify nothing. "
            "Consider integration tests for complex interactions."
        )
    if by_category.get("isolation", 0) > 0:
        recommendations.append(
            "Address test isolation issues to prevent tests from affecting each other. "
            "Use beforeEach() for setup and afterEach() for cleanup."
        )
    if summary.overall_score < LOW_SCORE_THRESHOLD:
        recommendations.append(
            "Overall test quality is below acceptable threshold. "
            "Prioritize fixing error-level issues before adding new tests."
        )
    if summary.total_tests > 0 and summary.total_assertions / summary.total_tests < 1:
        recommendations.append(
            "Low assertion density. Aim for at least 1-2 meaningful assertions per test."
        )
    if summary.overall_score >= GOOD_SCORE_THRESHOLD:
        recommendations.append(
            "Good test quality! Focus on maintaining standards and adding edge case coverage."
        )
    if summary.total_violations == 0:
        recommendations.append(
            "Excellent! No quality issues detected. Consider adding more edge case tests."
        )

    flagged = sorted(
        (item for item in summary.score_breakdown if item.violations > 0),
        key=lambda item: item.score,
    )
    for category_score in flagged[:FOCUS_AREA_LIMIT]:
        if category_score.score < FOCUS_AREA_THRESHOLD:
            recommendations.append(
                f"Focus area: {category_score.description}. "
                f"Score: {category_score.score}/100."
            )
    return recommendations
