# tests/test_style.py

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

from njord_build.orchestrator.core import Scheduler, TaskRegistry
from njord_build.orchestrator.config import Settings
from njord_build.tasks.style import compile_stylesheets, examples, style

from .helpers import write

RULE = "a { color: red; }\n"


def _registry(*fns) -> TaskRegistry:
    return TaskRegistry(fn._task_spec for fn in fns)


def test_production_output_is_compressed(tmp_path: Path):
    write(tmp_path / "src/njord.scss", RULE)
    s = Settings(root=tmp_path, production=True)

    Scheduler(_registry(style), s).run("style")

    css = (tmp_path / "njord.css").read_text(encoding="utf-8")
    assert "a{color:red}" in css
    assert " " not in css.strip()


def test_development_output_is_expanded(tmp_path: Path):
    write(tmp_path / "src/njord.scss", RULE)
    s = Settings(root=tmp_path, production=False)

    Scheduler(_registry(style), s).run("style")

    css = (tmp_path / "njord.css").read_text(encoding="utf-8")
    assert "a {\n  color: red;\n}" in css


def test_precision_is_ten_digits(tmp_path: Path):
    write(tmp_path / "src/njord.scss", ".third { width: percentage(1/3); }\n")
    Scheduler(_registry(style), Settings(root=tmp_path)).run("style")

    css = (tmp_path / "njord.css").read_text(encoding="utf-8")
    assert "33.3333333333%" in css


def test_imports_partials_but_never_emits_them(tmp_path: Path):
    write(tmp_path / "examples/_vars.scss", "$c: blue;\n")
    write(tmp_path / "examples/grid/demo.scss", "@import '../vars';\n.demo { color: $c; }\n")
    s = Settings(root=tmp_path)

    Scheduler(_registry(examples), s).run("examples")

    assert (tmp_path / "examples/grid/demo.css").exists()
    assert not (tmp_path / "examples/_vars.css").exists()
    assert "color: blue" in (tmp_path / "examples/grid/demo.css").read_text(encoding="utf-8")


def test_compile_error_is_logged_and_plan_continues(tmp_path: Path, caplog):
    write(tmp_path / "src/njord.scss", "a { color: red;\n")
    events: list[str] = []
    registry = _registry(style)
    registry.add("after", [], lambda ctx: events.append("after"))
    registry.add("all", ["style", "after"])

    with caplog.at_level(logging.ERROR):
        Scheduler(registry, Settings(root=tmp_path)).run("all")

    assert events == ["after"]
    assert not (tmp_path / "njord.css").exists()
    assert any("Sass error" in r.getMessage() for r in caplog.records)


def test_one_broken_source_does_not_stop_the_others(tmp_path: Path):
    write(tmp_path / "examples/bad.scss", "a {\n")
    write(tmp_path / "examples/good.scss", RULE)
    s = Settings(root=tmp_path)

    written = compile_stylesheets(s.style_examples, s.examples_dest, s)

    assert written == [tmp_path / "examples/good.css"]


def test_custom_destination(tmp_path: Path):
    write(tmp_path / "src/njord.scss", RULE)
    s = replace(Settings(root=tmp_path), style_dest="dist")

    Scheduler(_registry(style), s).run("style")

    assert (tmp_path / "dist/njord.css").exists()
