# tests/test_utils.py

from __future__ import annotations

from pathlib import Path

import pytest

from njord_build.orchestrator.utils import expand_globs, glob_base, match_path, relative_to_root

from .helpers import write


@pytest.mark.parametrize(
    "path, pattern, expected",
    [
        ("src/njord.scss", "src/**/*.scss", True),
        ("src/grid/_cols.scss", "./src/**/*.scss", True),
        ("src/njord.css", "src/**/*.scss", False),
        ("njord.css", "*.css", True),
        ("examples/njord.css", "*.css", False),
        ("a1.css", "a?.css", True),
        ("b.css", "[ab].css", True),
        ("c.css", "[!ab].css", True),
        ("src/grid/a.scss", "src/*.scss", False),
        ("examples/a/b/demo.scss", "examples/**/*.scss", True),
    ],
)
def test_match_path(path, pattern, expected):
    assert match_path(path, [pattern]) is expected


def test_glob_base():
    assert glob_base("./src/**/*.scss") == "src"
    assert glob_base("src/njord.scss") == "src"
    assert glob_base("*.css") == ""


def test_expand_globs_recursive_and_sorted(tmp_path: Path):
    write(tmp_path / "src/b.scss", "")
    write(tmp_path / "src/a.scss", "")
    write(tmp_path / "src/deep/c.scss", "")
    write(tmp_path / "src/notes.txt", "")

    found = expand_globs(["src/**/*.scss"], tmp_path)
    assert [p.relative_to(tmp_path).as_posix() for p in found] == [
        "src/a.scss",
        "src/b.scss",
        "src/deep/c.scss",
    ]


def test_expand_globs_top_level_only(tmp_path: Path):
    write(tmp_path / "njord.css", "")
    write(tmp_path / "examples/demo.css", "")

    found = expand_globs(["*.css"], tmp_path)
    assert found == [tmp_path / "njord.css"]


def test_expand_globs_literal_and_dedupe(tmp_path: Path):
    write(tmp_path / "src/njord.scss", "")
    found = expand_globs(["src/njord.scss", "src/*.scss", "src/missing.scss"], tmp_path)
    assert found == [tmp_path / "src/njord.scss"]


def test_relative_to_root(tmp_path: Path):
    assert relative_to_root(tmp_path / "src" / "a.scss", tmp_path) == "src/a.scss"
    assert relative_to_root("/elsewhere/a.scss", tmp_path) is None
