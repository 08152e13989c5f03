from __future__ import annotations

from typing import Sequence


class OrchestratorError(Exception):
    """Base class for errors the CLI reports as a one-line message."""


class ConfigError(OrchestratorError):
    pass


class UnknownTaskError(OrchestratorError, KeyError):
    def __init__(self, name: str, required_by: str | None = None):
        self.name = name
        self.required_by = required_by
        if required_by:
            msg = f"Unknown task: {name!r} (required by {required_by!r})"
        else:
            msg = f"Unknown task: {name!r}"
        super().__init__(msg)

    def __str__(self) -> str:
        # KeyError would repr() the message otherwise
        return self.args[0]


class DuplicateTaskError(OrchestratorError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Task already registered: {name!r}")


class CyclicDependencyError(OrchestratorError):
    def __init__(self, cycle: Sequence[str]):
        self.cycle = list(cycle)
        super().__init__("Cycle detected in task graph: " + " -> ".join(self.cycle))


class CompilationError(OrchestratorError):
    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")


class BumpError(OrchestratorError):
    pass


class ToolNotFoundError(OrchestratorError):
    pass
