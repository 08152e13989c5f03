"""Small in-repo task runner for the njord stylesheet build.

Provides TaskSpec/TaskRegistry primitives, depth-first dependency scheduling,
a watch loop and a Typer CLI.
"""

from .core import BuildContext, Scheduler, TaskRegistry, TaskSpec, task  # re-export for convenience

__all__ = ["BuildContext", "Scheduler", "TaskRegistry", "TaskSpec", "task"]
