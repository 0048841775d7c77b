"""Output rendering."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any

import click

from suite_score import __version__
from suite_score.review import ReviewReport
from suite_score.rules import get_rule
from suite_score.scoring import ReviewedFile, round_half_up

RULE_WIDTH = 60
BAR_WIDTH = 20
TOP_ISSUES_SHOWN = 5
VIOLATIONS_PER_FILE = 5

_SEVERITY_COLORS = {"error": "red", "warning": "yellow", "info": "blue"}
_SEVERITY_LABELS = {"error": "Errors", "warning": "Warnings", "info": "Info"}


def render_human(report: ReviewReport, *, verbose: bool = False) -> str:
    """Render a colorized quality report."""
    summary = report.summary
    lines: list[str] = [
        "=" * RULE_WIDTH,
        click.style("  TEST QUALITY REVIEW REPORT", bold=True),
        "=" * RULE_WIDTH,
        "",
        click.style(
            f"Overall Score: {summary.overall_score}/100",
            fg=_score_color(summary.overall_score),
            bold=True,
        ),
        "",
        click.style("Statistics:", bold=True),
        f"   Files reviewed:   {summary.total_files}",
        f"   Total tests:      {summary.total_tests}",
        f"   Total assertions: {summary.total_assertions}",
        f"   Issues found:     {summary.total_violations}",
        "",
        click.style("Score Breakdown:", bold=True),
    ]
    for category_score in summary.score_breakdown:
        bar = progress_bar(category_score.score, BAR_WIDTH)
        lines.append(
            f"   {category_score.category:<15} "
            + click.style(f"{bar} {category_score.score}%", fg=_score_color(category_score.score))
        )
    lines.append("")

    if sum(summary.violations_by_severity.values()) > 0:
        lines.append(click.style("Issues by Severity:", bold=True))
        for severity, count in summary.violations_by_severity.items():
            if count > 0:
                label = f"{_SEVERITY_LABELS[severity]}:"
                lines.append(
                    "   " + click.style(f"{label:<10}{count}", fg=_SEVERITY_COLORS[severity])
                )
        lines.append("")

    if summary.top_issues:
        lines.append(click.style("Top Issues:", bold=True))
        for issue in summary.top_issues[:TOP_ISSUES_SHOWN]:
            lines.append(
                "   "
                + click.style(f"[{issue.severity}]", fg=_SEVERITY_COLORS[issue.severity])
                + f" {issue.rule} ({issue.count}x)"
            )
        lines.append("")

    if report.recommendations:
        lines.append(click.style("Recommendations:", bold=True))
        for recommendation in report.recommendations:
            lines.append(f"   - {recommendation}")
        lines.append("")

    if verbose and report.files:
        lines.append("-" * RULE_WIDTH)
        lines.append(click.style("File Details:", bold=True))
        lines.append("")
        for reviewed in sorted(report.files, key=lambda item: item.score):
            lines.extend(_file_detail(reviewed))
            lines.append("")

    lines.append("=" * RULE_WIDTH)
    return "\n".join(lines)


def _file_detail(reviewed: ReviewedFile) -> list[str]:
    lines = [f"  {reviewed.relative_path}", f"  {reviewed.summary}"]
    for violation in reviewed.violations[:VIOLATIONS_PER_FILE]:
        rule = get_rule(violation.rule_id)
        severity = rule.severity if rule is not None else "info"
        location = f":{violation.line}" if violation.line else ""
        lines.append(
            "    "
            + click.style(f"[{severity}]", fg=_SEVERITY_COLORS[severity])
            + f" {violation.message}{location}"
        )
        if violation.suggestion:
            lines.append(f"       fix: {violation.suggestion}")
    hidden = len(reviewed.violations) - VIOLATIONS_PER_FILE
    if hidden > 0:
        lines.append(f"    ... and {hidden} more issues")
    return lines


def progress_bar(value: int, width: int = BAR_WIDTH) -> str:
    """Render ``value`` percent as a fixed-width bar."""
    filled = max(0, min(width, round_half_up(value / 100 * width)))
    return "[" + "#" * filled + "." * (width - filled) + "]"


def render_json(report: ReviewReport) -> str:
    """Render stable JSON output for CI and automation."""
    return json.dumps(build_json_payload(report), indent=2, sort_keys=True)


def build_json_payload(report: ReviewReport) -> dict[str, Any]:
    """Build the full report structure as plain JSON-compatible data."""
    payload = asdict(report)
    payload["meta"] = {"version": __version__}
    return payload


def _score_color(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 60:
        return "yellow"
    return "red"
