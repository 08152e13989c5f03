from __future__ import annotations

from pathlib import Path


class Recorder:
    """Collects action invocations so tests can assert on order."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def action(self, name: str):
        def fn(ctx):
            self.calls.append(name)

        return fn


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
