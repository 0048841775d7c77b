"""Recommendation generator tests."""

from __future__ import annotations

from suite_score.aggregate import ReviewSummary, aggregate
from suite_score.recommendations import (
    NO_FILES_MESSAGE,
    NO_RULES_MESSAGE,
    generate_recommendations,
)
from suite_score.rules import CATEGORIES, CATEGORY_DESCRIPTIONS
from suite_score.scoring import CATEGORY_WEIGHTS, CategoryScore, review_file


def _summary(
    *,
    overall: int = 90,
    tests: int = 4,
    assertions: int = 8,
    by_category: dict[str, int] | None = None,
    scores: dict[str, int] | None = None,
) -> ReviewSummary:
    counts = {category: 0 for category in CATEGORIES}
    counts.update(by_category or {})
    breakdown = [
        CategoryScore(
            category=category,
            description=CATEGORY_DESCRIPTIONS[category],
            score=(scores or {}).get(category, 100),
            weight=CATEGORY_WEIGHTS[category],
            violations=counts[category],
        )
        for category in CATEGORIES
    ]
    return ReviewSummary(
        total_files=1,
        total_tests=tests,
        total_assertions=assertions,
        total_violations=sum(counts.values()),
        overall_score=overall,
        score_breakdown=breakdown,
        violations_by_category=counts,
    )


def test_no_files_yields_single_message() -> None:
    assert generate_recommendations(aggregate([])) == [NO_FILES_MESSAGE]


def test_clean_summary_is_praised() -> None:
    recommendations = generate_recommendations(_summary())
    assert recommendations[0].startswith("Good test quality!")
    assert recommendations[1].startswith("Excellent! No quality issues detected")


def test_theater_is_critical() -> None:
    summary = aggregate([review_file("it('should work', () => {})", "a.test.ts")])
    recommendations = generate_recommendations(summary)
    assert "testing theater" in recommendations[0]
    assert any(item.startswith("Good test quality!") for item in recommendations)


def test_thresholds_are_strict() -> None:
    at_threshold = generate_recommendations(
        _summary(by_category={"flaky": 3, "over-mocking": 2})
    )
    assert not any("flaky test patterns" in item for item in at_threshold)
    assert not any("Excessive mocking" in item for item in at_threshold)

    above = generate_recommendations(_summary(by_category={"flaky": 4, "over-mocking": 3}))
    assert any("flaky test patterns" in item for item in above)
    assert any("Excessive mocking" in item for item in above)


def test_low_score_and_density() -> None:
    recommendations = generate_recommendations(
        _summary(overall=40, tests=10, assertions=5, by_category={"isolation": 1})
    )
    assert any("isolation" in item for item in recommendations)
    assert any("below acceptable threshold" in item for item in recommendations)
    assert any(item.startswith("Low assertion density") for item in recommendations)
    assert not any(item.startswith("Good test quality!") for item in recommendations)


def test_focus_areas_pick_two_worst_flagged_categories() -> None:
    recommendations = generate_recommendations(
        _summary(
            overall=70,
            by_category={"flaky": 1, "assertions": 1, "structure": 1, "isolation": 1},
            scores={"flaky": 40, "assertions": 65, "structure": 20, "isolation": 90},
        )
    )
    focus = [item for item in recommendations if item.startswith("Focus area")]
    assert focus == [
        f"Focus area: {CATEGORY_DESCRIPTIONS['structure']}. Score: 20/100.",
        f"Focus area: {CATEGORY_DESCRIPTIONS['flaky']}. Score: 40/100.",
    ]


def test_zero_selected_rules_adds_leading_note() -> None:
    recommendations = generate_recommendations(_summary(), rules_selected=0)
    assert recommendations[0] == NO_RULES_MESSAGE
