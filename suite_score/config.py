"""Configuration loading for suite-score."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from suite_score.rules import CATEGORIES
from suite_score.rules.base import SEVERITY_ORDER

CONFIG_FILENAMES = (".suite-score.toml", "suite-score.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("suite_score", "suite-score")

DEFAULT_MIN_SCORE = 50
DEFAULT_MAX_ERRORS = 5


@dataclass(slots=True)
class RulesConfig:
    """Rule selection defaults."""

    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    min_severity: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "include": list(self.include),
            "exclude": list(self.exclude),
            "min_severity": self.min_severity,
        }


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration values resolved from project files."""

    format: str = "human"
    verbose: bool = False
    min_score: int = DEFAULT_MIN_SCORE
    max_errors: int = DEFAULT_MAX_ERRORS
    workers: int = 1
    ignore: list[str] = field(default_factory=list)
    rules: RulesConfig = field(default_factory=RulesConfig)
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "verbose": self.verbose,
            "min_score": self.min_score,
            "max_errors": self.max_errors,
            "workers": self.workers,
            "ignore": list(self.ignore),
            "rules": self.rules.to_dict(),
            "source": self.source,
        }


def load_app_config(root: Path, config_path: Path | None = None) -> AppConfig:
    """Load config from an explicit path or project-local files with precedence."""
    root = root.resolve()
    if config_path is not None:
        resolved = config_path if config_path.is_absolute() else (root / config_path)
        if not resolved.exists():
            raise ValueError(f"Config file does not exist: {resolved}")
        mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
        return _from_mapping(mapping, source=str(resolved))

    for filename in CONFIG_FILENAMES:
        resolved = root / filename
        if resolved.exists():
            mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
            return _from_mapping(mapping, source=str(resolved))

    pyproject_path = root / PYPROJECT_FILENAME
    if pyproject_path.exists():
        mapping = _extract_config_mapping(_load_toml(pyproject_path), source_path=pyproject_path)
        if mapping:
            return _from_mapping(mapping, source=str(pyproject_path))

    return AppConfig()


def default_config_template() -> str:
    """Return a starter config template."""
    categories = ", ".join(f'"{category}"' for category in CATEGORIES)
    return "\n".join(
        [
            'format = "human"',
            "verbose = false",
            f"min_score = {DEFAULT_MIN_SCORE}",
            f"max_errors = {DEFAULT_MAX_ERRORS}",
            "workers = 1",
            'ignore = ["**/fixtures/**"]',
            "",
            "[rules]",
            f"# categories: {categories}",
            "include = []",
            'exclude = ["structure"]',
            '# min_severity = "warning"',
            "",
        ]
    )


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            loaded = tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc
    if not isinstance(loaded, dict):
        return {}
    return loaded


def _extract_config_mapping(loaded: dict[str, Any], *, source_path: Path) -> dict[str, Any]:
    tool_section = _find_pyproject_tool_section(loaded)
    if source_path.name == PYPROJECT_FILENAME:
        return tool_section if tool_section is not None else {}
    return tool_section if tool_section is not None else loaded


def _find_pyproject_tool_section(loaded: dict[str, Any]) -> dict[str, Any] | None:
    tool = loaded.get("tool")
    if not isinstance(tool, dict):
        return None
    for key in PYPROJECT_TOOL_KEYS:
        section = tool.get(key)
        if isinstance(section, dict):
            return section
    return None


def _from_mapping(mapping: dict[str, Any], *, source: str) -> AppConfig:
    rules_mapping = _as_table(mapping.get("rules"), "rules")

    workers = _as_int(mapping.get("workers", 1), "workers")
    if workers < 1:
        raise ValueError("workers must be >= 1")

    return AppConfig(
        format=_as_choice(mapping.get("format", "human"), {"human", "json"}, "format"),
        verbose=_as_bool(mapping.get("verbose", False), "verbose"),
        min_score=_as_int(mapping.get("min_score", DEFAULT_MIN_SCORE), "min_score"),
        max_errors=_as_int(mapping.get("max_errors", DEFAULT_MAX_ERRORS), "max_errors"),
        workers=workers,
        ignore=_as_str_list(mapping.get("ignore"), "ignore"),
        rules=_parse_rules_config(rules_mapping),
        source=source,
    )


def _parse_rules_config(value: dict[str, Any]) -> RulesConfig:
    raw_severity = value.get("min_severity")
    return RulesConfig(
        include=_as_categories(value.get("include"), "rules.include"),
        exclude=_as_categories(value.get("exclude"), "rules.exclude"),
        min_severity=(
            None
            if raw_severity is None
            else _as_choice(raw_severity, set(SEVERITY_ORDER), "rules.min_severity")
        ),
    )


def _as_categories(value: Any, field_name: str) -> list[str]:
    items = _as_str_list(value, field_name)
    for item in items:
        if item.lower() not in CATEGORIES:
            choices = ", ".join(CATEGORIES)
            raise ValueError(f"{field_name} has unknown category {item!r}; expected: {choices}")
    return [item.lower() for item in items]


def _as_table(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table/object")
    return value


def _as_str_list(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{field_name} must be a list of strings")
    return list(value)


def _as_choice(raw: Any, allowed: set[str], field_name: str) -> str:
    value = str(raw).lower()
    if value not in allowed:
        choices = ", ".join(sorted(allowed))
        raise ValueError(f"{field_name} must be one of: {choices}")
    return value


def _as_int(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"{field_name} must be an integer")
    return raw


def _as_bool(raw: Any, field_name: str) -> bool:
    if not isinstance(raw, bool):
        raise ValueError(f"{field_name} must be a boolean")
    return raw
