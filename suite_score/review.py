"""Project-level review orchestration."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from pathlib import Path

from suite_score.aggregate import ReviewSummary, aggregate
from suite_score.discovery import SourceFile, discover_test_files, load_sources
from suite_score.recommendations import generate_recommendations
from suite_score.rules import QualityRule, select_rules
from suite_score.scoring import ReviewedFile, review_file

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ReviewOptions:
    """Rule selection and discovery options for a review run."""

    included_categories: list[str] = field(default_factory=list)
    excluded_categories: list[str] = field(default_factory=list)
    min_severity: str | None = None
    ignore_patterns: list[str] = field(default_factory=list)
    workers: int = 1


@dataclass(frozen=True, slots=True)
class ReviewReport:
    """Top-level review output."""

    root_dir: str
    timestamp: str
    files: list[ReviewedFile]
    summary: ReviewSummary
    recommendations: list[str]


def resolve_rules(options: ReviewOptions | None = None) -> list[QualityRule]:
    """Select catalog rules for the given options."""
    effective = options or ReviewOptions()
    return select_rules(
        included_categories=effective.included_categories,
        excluded_categories=effective.excluded_categories,
        min_severity=effective.min_severity,
    )


def review_sources(
    sources: Sequence[SourceFile],
    *,
    rules: Sequence[QualityRule],
    workers: int = 1,
) -> list[ReviewedFile]:
    """Review already-loaded files, preserving input order."""

    def _review(source: SourceFile) -> ReviewedFile:
        reviewed = review_file(source.content, str(source.path), rules)
        return replace(reviewed, relative_path=source.relative_path)

    if workers <= 1 or len(sources) <= 1:
        return [_review(source) for source in sources]

    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(_review, sources))


def build_report(
    root_dir: str,
    files: list[ReviewedFile],
    *,
    rules_selected: int,
    timestamp: str | None = None,
) -> ReviewReport:
    """Aggregate reviewed files into a report with recommendations."""
    summary = aggregate(files)
    return ReviewReport(
        root_dir=root_dir,
        timestamp=timestamp or _utc_now(),
        files=files,
        summary=summary,
        recommendations=generate_recommendations(summary, rules_selected=rules_selected),
    )


def review_test_files(
    root_dir: Path,
    options: ReviewOptions | None = None,
    *,
    timestamp: str | None = None,
) -> ReviewReport:
    """Discover, read and review every test file under ``root_dir``."""
    effective = options or ReviewOptions()
    rules = resolve_rules(effective)
    started = time.perf_counter()

    paths = discover_test_files(root_dir, effective.ignore_patterns)
    sources = load_sources(root_dir, paths)
    files = review_sources(sources, rules=rules, workers=effective.workers)

    logger.debug(
        "Reviewed %d files with %d rules in %.3fs",
        len(files),
        len(rules),
        time.perf_counter() - started,
    )
    return build_report(
        str(root_dir),
        files,
        rules_selected=len(rules),
        timestamp=timestamp,
    )


def review_paths(
    paths: Iterable[Path],
    options: ReviewOptions | None = None,
    *,
    root_dir: Path = Path("."),
    timestamp: str | None = None,
) -> ReviewReport:
    """Review explicit file paths without discovery."""
    effective = options or ReviewOptions()
    rules = resolve_rules(effective)
    sources = load_sources(root_dir, paths)
    files = review_sources(sources, rules=rules, workers=effective.workers)
    return build_report(
        str(root_dir),
        files,
        rules_selected=len(rules),
        timestamp=timestamp,
    )


def _utc_now() -> str:
    return datetime.now(tz=UTC).replace(microsecond=0).isoformat().replace("+00:00", "Z")
