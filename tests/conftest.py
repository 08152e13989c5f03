# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from njord_build.orchestrator.config import Settings
from njord_build.orchestrator.core import Scheduler, TaskRegistry

from .helpers import Recorder


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(root=tmp_path)


@pytest.fixture()
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture()
def make_scheduler(settings: Settings, recorder: Recorder):
    """Scheduler over a {name: deps} graph whose actions record themselves."""

    def build(graph: dict[str, list[str]], retries: int = 0) -> Scheduler:
        registry = TaskRegistry()
        for name, deps in graph.items():
            registry.add(name, deps, recorder.action(name))
        return Scheduler(registry, settings, retries=retries)

    return build
