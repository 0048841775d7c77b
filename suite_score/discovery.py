"""Test-file discovery and loading."""

from __future__ import annotations

import fnmatch
import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)

JS_EXTENSIONS = ("ts", "tsx", "js", "jsx", "mjs")

TEST_FILE_PATTERNS: tuple[str, ...] = (
    *(f"*.test.{ext}" for ext in JS_EXTENSIONS),
    *(f"*.spec.{ext}" for ext in JS_EXTENSIONS),
    *(f"__tests__/*.{ext}" for ext in JS_EXTENSIONS),
    "test_*.py",
    "*_test.py",
)

DEFAULT_IGNORE: tuple[str, ...] = (
    "**/node_modules/**",
    "**/dist/**",
    "**/build/**",
    "**/coverage/**",
    "**/.git/**",
)
_PRUNED_DIRS = frozenset({"node_modules", "dist", "build", "coverage", ".git"})


class DiscoveryError(RuntimeError):
    """Raised when the review root cannot be scanned."""


@dataclass(frozen=True, slots=True)
class SourceFile:
    """A discovered test file and its raw text."""

    path: Path
    relative_path: str
    content: str


def is_test_file(relative_path: str) -> bool:
    """Return True when a root-relative POSIX path follows a test-file convention."""
    pure_path = PurePosixPath(relative_path)
    name = pure_path.name
    for pattern in TEST_FILE_PATTERNS:
        if pattern.startswith("__tests__/"):
            if "__tests__" in pure_path.parts[:-1] and fnmatch.fnmatch(
                name, pattern.split("/", 1)[1]
            ):
                return True
        elif fnmatch.fnmatch(name, pattern):
            return True
    return False


def is_ignored(relative_path: str, patterns: Iterable[str]) -> bool:
    """Match a root-relative path against glob patterns.

    ``**/`` prefixes also match at the root, so ``**/dist/**`` excludes a
    top-level ``dist/`` directory.
    """
    candidates = (relative_path, f"./{relative_path}")
    for pattern in patterns:
        variants = {pattern}
        if pattern.startswith("**/"):
            variants.add(pattern[3:])
        for variant in variants:
            if any(fnmatch.fnmatch(candidate, variant) for candidate in candidates):
                return True
    return False


def discover_test_files(root_dir: Path, ignore_patterns: Iterable[str] = ()) -> list[Path]:
    """Return test files under ``root_dir`` sorted by relative path."""
    root = root_dir.resolve()
    if not root.exists():
        raise DiscoveryError(f"Review root does not exist: {root}")
    if not root.is_dir():
        raise DiscoveryError(f"Review root is not a directory: {root}")

    patterns = [*DEFAULT_IGNORE, *ignore_patterns]
    found: list[tuple[str, Path]] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in _PRUNED_DIRS)
        for filename in filenames:
            path = Path(dirpath) / filename
            relative = path.relative_to(root).as_posix()
            if not is_test_file(relative) or is_ignored(relative, patterns):
                continue
            found.append((relative, path))

    found.sort(key=lambda item: item[0])
    logger.debug("Discovered %d test files under %s", len(found), root)
    return [path for _, path in found]


def load_sources(root_dir: Path, paths: Iterable[Path]) -> list[SourceFile]:
    """Read UTF-8 text for each path, skipping files that cannot be read."""
    root = root_dir.resolve()
    sources: list[SourceFile] = []
    for path in paths:
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable file %s: %s", path, exc)
            continue
        sources.append(
            SourceFile(path=path, relative_path=_relative_to(path, root), content=content)
        )
    return sources


def _relative_to(path: Path, root: Path) -> str:
    try:
        return path.resolve().relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()
