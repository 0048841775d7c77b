"""Discovery and loading tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from suite_score.discovery import (
    DiscoveryError,
    discover_test_files,
    is_ignored,
    is_test_file,
    load_sources,
)


def _write(root: Path, relative: str, content: str = "it('x', () => {});\n") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_discovers_conventional_test_files_sorted(tmp_path: Path) -> None:
    for relative in (
        "src/b.spec.js",
        "a.test.ts",
        "src/__tests__/widget.tsx",
        "pkg/test_models.py",
        "pkg/views_test.py",
        "src/util.ts",
        "node_modules/lib/x.test.js",
        "dist/y.test.js",
        "fixtures/f.test.ts",
    ):
        _write(tmp_path, relative)

    found = discover_test_files(tmp_path, ["fixtures/**"])
    relative = [path.relative_to(tmp_path.resolve()).as_posix() for path in found]

    assert relative == [
        "a.test.ts",
        "pkg/test_models.py",
        "pkg/views_test.py",
        "src/__tests__/widget.tsx",
        "src/b.spec.js",
    ]


def test_missing_root_raises(tmp_path: Path) -> None:
    with pytest.raises(DiscoveryError):
        discover_test_files(tmp_path / "missing")


def test_is_test_file_conventions() -> None:
    assert is_test_file("a.test.mjs")
    assert is_test_file("deep/__tests__/nested/thing.js")
    assert not is_test_file("src/contest.ts")
    assert not is_test_file("__tests__/README.md")


def test_is_ignored_matches_root_level_double_star() -> None:
    assert is_ignored("dist/a.test.js", ["**/dist/**"])
    assert is_ignored("packages/app/dist/a.test.js", ["**/dist/**"])
    assert not is_ignored("src/a.test.js", ["**/dist/**"])


def test_load_sources_skips_undecodable_files(tmp_path: Path, caplog) -> None:
    good = _write(tmp_path, "good.test.ts")
    bad = tmp_path / "bad.test.ts"
    bad.write_bytes(b"\xff\xfe\x00invalid")

    with caplog.at_level("WARNING"):
        sources = load_sources(tmp_path, [bad, good])

    assert [source.relative_path for source in sources] == ["good.test.ts"]
    assert "bad.test.ts" in caplog.text
