"""CLI entrypoint for suite-score."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer

from suite_score import __version__
from suite_score.aggregate import ReviewSummary
from suite_score.config import AppConfig, default_config_template, load_app_config
from suite_score.discovery import DiscoveryError
from suite_score.output import render_human, render_json
from suite_score.review import (
    ReviewOptions,
    ReviewReport,
    resolve_rules,
    review_paths,
    review_test_files,
)
from suite_score.rules import QualityRule, list_rule_info

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

app = typer.Typer(
    name="suite-score",
    no_args_is_help=True,
    help="Score test suites for flakiness, testing theater and other quality problems.",
)


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
    log_level: Annotated[
        str, typer.Option("--log-level", help="Logging level written to stderr.")
    ] = "WARNING",
) -> None:
    """Root command callback."""
    _ = version
    level = log_level.upper()
    if level not in LOG_LEVELS:
        raise typer.BadParameter(
            f"log level must be one of: {', '.join(LOG_LEVELS)}", param_hint="--log-level"
        )
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("review")
def review_command(
    root: Annotated[Path, typer.Argument(help="Directory to scan for test files.")] = Path("."),
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json.", show_default="human")
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show per-file details.")
    ] = False,
    category: Annotated[
        list[str] | None, typer.Option("--category", help="Only run rules in this category.")
    ] = None,
    exclude_category: Annotated[
        list[str] | None,
        typer.Option("--exclude-category", help="Skip rules in this category."),
    ] = None,
    min_severity: Annotated[
        str | None, typer.Option("--min-severity", help="info|warning|error")
    ] = None,
    ignore: Annotated[
        list[str] | None, typer.Option("--ignore", help="Glob pattern to skip.")
    ] = None,
    workers: Annotated[
        int | None, typer.Option("--workers", help="Files reviewed in parallel.")
    ] = None,
    min_score: Annotated[
        int | None, typer.Option("--min-score", help="Exit nonzero below this overall score.")
    ] = None,
    max_errors: Annotated[
        int | None,
        typer.Option("--max-errors", help="Exit nonzero above this many error violations."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Discover and review every test file under ROOT."""
    app_config = _load_config_or_raise(root, config_file)
    output_format = _resolve_format(format, app_config)
    options = _build_options(
        app_config,
        category=category,
        exclude_category=exclude_category,
        min_severity=min_severity,
        ignore=ignore,
        workers=workers,
    )
    _resolve_rules_or_raise(options)

    try:
        report = review_test_files(root, options)
    except DiscoveryError as exc:
        raise typer.BadParameter(str(exc), param_hint="ROOT") from exc

    _emit_report(
        report,
        output_format=output_format,
        verbose=verbose or app_config.verbose,
        min_score=min_score if min_score is not None else app_config.min_score,
        max_errors=max_errors if max_errors is not None else app_config.max_errors,
    )


@app.command("check")
def check_command(
    files: Annotated[list[Path], typer.Argument(help="Test files to review.")],
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json.", show_default="human")
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show per-file details.")
    ] = False,
    category: Annotated[
        list[str] | None, typer.Option("--category", help="Only run rules in this category.")
    ] = None,
    exclude_category: Annotated[
        list[str] | None,
        typer.Option("--exclude-category", help="Skip rules in this category."),
    ] = None,
    min_severity: Annotated[
        str | None, typer.Option("--min-severity", help="info|warning|error")
    ] = None,
    min_score: Annotated[
        int | None, typer.Option("--min-score", help="Exit nonzero below this overall score.")
    ] = None,
    max_errors: Annotated[
        int | None,
        typer.Option("--max-errors", help="Exit nonzero above this many error violations."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Review individual test files without discovery."""
    root = Path(".")
    app_config = _load_config_or_raise(root, config_file)
    output_format = _resolve_format(format, app_config)
    options = _build_options(
        app_config,
        category=category,
        exclude_category=exclude_category,
        min_severity=min_severity,
        ignore=None,
        workers=None,
    )
    _resolve_rules_or_raise(options)

    missing = [str(path) for path in files if not path.is_file()]
    if missing:
        raise typer.BadParameter(f"File not found: {', '.join(missing)}", param_hint="FILES")

    report = review_paths(files, options, root_dir=root)
    _emit_report(
        report,
        output_format=output_format,
        verbose=verbose or app_config.verbose,
        min_score=min_score if min_score is not None else app_config.min_score,
        max_errors=max_errors if max_errors is not None else app_config.max_errors,
    )


@app.command("rules")
def rules_command(
    root: Annotated[Path, typer.Option("--root", help="Project path.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """List available quality rules and whether they are selected."""
    output_format = _resolve_format(format, None)
    app_config = _load_config_or_raise(root, config_file)
    selected = _resolve_rules_or_raise(_build_options(app_config))
    rule_info = list_rule_info(selected)

    if output_format == "json":
        payload = {
            "rules": [
                {
                    "rule_id": item.rule_id,
                    "name": item.name,
                    "description": item.description,
                    "category": item.category,
                    "severity": item.severity,
                    "weight": item.weight,
                    "selected": item.selected,
                }
                for item in rule_info
            ],
            "meta": {"config_source": app_config.source},
        }
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = ["Available rules:"]
    for item in rule_info:
        status = "selected" if item.selected else "skipped"
        lines.append(
            f"- {item.rule_id} [{item.severity}, weight {item.weight}, {status}]"
            f" - {item.description}"
        )
    typer.echo("\n".join(lines))


@app.command("config")
def config_command(
    root: Annotated[Path, typer.Option("--root", help="Project path.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Show resolved configuration."""
    output_format = _resolve_format(format, None)
    app_config = _load_config_or_raise(root, config_file)
    selected = _resolve_rules_or_raise(_build_options(app_config))
    payload = app_config.to_dict()
    payload["selected_rule_ids"] = [rule.rule_id for rule in selected]

    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [
        "Resolved configuration:",
        f"- source: {payload['source'] or 'defaults'}",
        f"- format: {payload['format']}",
        f"- verbose: {payload['verbose']}",
        f"- min_score: {payload['min_score']}",
        f"- max_errors: {payload['max_errors']}",
        f"- workers: {payload['workers']}",
        f"- ignore: {payload['ignore']}",
        f"- rules.include: {payload['rules']['include']}",
        f"- rules.exclude: {payload['rules']['exclude']}",
        f"- rules.min_severity: {payload['rules']['min_severity']}",
        f"- selected_rule_ids: {payload['selected_rule_ids']}",
    ]
    typer.echo("\n".join(lines))


@app.command("config-init")
def config_init_command(
    out: Annotated[Path, typer.Option(help="Output path for starter config TOML.")] = Path(
        ".suite-score.toml"
    ),
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite if file already exists."),
    ] = False,
) -> None:
    """Create a starter project config file."""
    out_path = out.resolve()
    if out_path.exists() and not force:
        raise typer.BadParameter(
            f"Refusing to overwrite existing file: {out_path}. Use --force to overwrite."
        )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote starter config: {out_path}")


def should_fail(
    summary: ReviewSummary,
    *,
    min_score: int = 50,
    max_errors: int = 5,
) -> bool:
    """Return True when a review should fail a CI gate."""
    errors = summary.violations_by_severity.get("error", 0)
    return summary.overall_score < min_score or errors > max_errors


def main() -> None:
    """Console script entrypoint."""
    app()


def _emit_report(
    report: ReviewReport,
    *,
    output_format: str,
    verbose: bool,
    min_score: int,
    max_errors: int,
) -> None:
    if output_format == "json":
        typer.echo(render_json(report))
    else:
        typer.echo(render_human(report, verbose=verbose))

    if should_fail(report.summary, min_score=min_score, max_errors=max_errors):
        raise typer.Exit(code=1)


def _resolve_format(value: str | None, app_config: AppConfig | None) -> str:
    default = app_config.format if app_config is not None else "human"
    output_format = (value or default).lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")
    return output_format


def _build_options(
    app_config: AppConfig,
    *,
    category: list[str] | None = None,
    exclude_category: list[str] | None = None,
    min_severity: str | None = None,
    ignore: list[str] | None = None,
    workers: int | None = None,
) -> ReviewOptions:
    resolved_workers = workers if workers is not None else app_config.workers
    if resolved_workers < 1:
        raise typer.BadParameter("workers must be >= 1", param_hint="--workers")
    return ReviewOptions(
        included_categories=list(category or app_config.rules.include),
        excluded_categories=list(exclude_category or app_config.rules.exclude),
        min_severity=min_severity or app_config.rules.min_severity,
        ignore_patterns=[*app_config.ignore, *(ignore or [])],
        workers=resolved_workers,
    )


def _load_config_or_raise(root: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(root, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _resolve_rules_or_raise(options: ReviewOptions) -> list[QualityRule]:
    try:
        return resolve_rules(options)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="rules") from exc
