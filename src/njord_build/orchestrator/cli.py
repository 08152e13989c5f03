from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path
from typing import List, Optional

import typer

from .config import Settings, load_settings
from .core import Scheduler, TaskRegistry, TaskSpec
from .errors import OrchestratorError
from .logging import configure_logging, get_logger


app = typer.Typer(add_completion=False, help="njord stylesheet build runner")
log = get_logger("njord.cli")

TASKS_PACKAGE = "njord_build.tasks"


def discover_tasks(tasks_pkg: str = TASKS_PACKAGE) -> TaskRegistry:
    """Import all modules in the tasks package and register decorated functions."""
    registry = TaskRegistry()
    try:
        pkg = importlib.import_module(tasks_pkg)
    except ModuleNotFoundError:
        log.warning("No tasks package found.")
        return registry
    for m in pkgutil.iter_modules(pkg.__path__, prefix=f"{tasks_pkg}."):
        try:
            mod = importlib.import_module(m.name)
        except Exception as e:  # noqa: BLE001
            log.warning("Failed to import %s: %s", m.name, e)
            continue
        for obj in vars(mod).values():
            spec = getattr(obj, "_task_spec", None)
            if isinstance(spec, TaskSpec):
                registry.register(spec)
    return registry


def _fail(message: str, code: int = 1) -> typer.Exit:
    typer.secho(message, fg=typer.colors.RED, err=True)
    return typer.Exit(code=code)


def execute(
    names: List[str],
    settings: Settings,
    retries: int = 0,
    registry: TaskRegistry | None = None,
) -> None:
    """Run tasks, translating failures into exit codes."""
    registry = registry if registry is not None else discover_tasks()
    scheduler = Scheduler(registry, settings, retries=retries)
    log.info("Mode: %s", "production" if settings.production else "development")
    try:
        scheduler.run(*names)
    except OrchestratorError as e:
        raise _fail(str(e))
    except KeyboardInterrupt:
        raise _fail("Interrupted", code=130)
    except Exception as e:  # noqa: BLE001
        # Traceback was already logged by the scheduler
        raise _fail(f"Build failed: {e}")


def _settings(config: Optional[Path], production: bool, bump: Optional[str]) -> Settings:
    try:
        return load_settings(config, production=production, bump=bump)
    except OrchestratorError as e:
        raise _fail(str(e))


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    log_file: Optional[Path] = typer.Option(None, help="Also log to this file"),
    production: bool = typer.Option(False, "--production", help="Compressed output"),
    bump: Optional[str] = typer.Option(None, help="Bump type: major, minor, patch, prerelease"),
    config: Optional[Path] = typer.Option(None, help="Path to YAML config"),
):
    """Run `default` (build then watch) when no command is given."""
    configure_logging(verbose=verbose, log_file=log_file)
    if ctx.invoked_subcommand is None:
        execute(["default"], _settings(config, production, bump))


@app.command("list")
def list_tasks():
    """List registered tasks and their prerequisites."""
    registry = discover_tasks()
    if not len(registry):
        typer.echo("No tasks registered.")
        raise typer.Exit(code=0)
    width = max(len(spec.name) for spec in registry)
    for spec in registry:
        deps = f" [{', '.join(spec.deps)}]" if spec.deps else ""
        typer.echo(f"{spec.name.ljust(width)}  {spec.description}{deps}")


@app.command()
def plan(names: List[str] = typer.Argument(..., help="Task names")):
    """Print the execution order without running anything."""
    registry = discover_tasks()
    scheduler = Scheduler(registry, Settings())
    try:
        selected = scheduler.plan(*names)
    except OrchestratorError as e:
        raise _fail(str(e))
    typer.echo(" → ".join(selected))


@app.command()
def run(
    names: Optional[List[str]] = typer.Argument(None, help="Tasks to run (default: default)"),
    production: bool = typer.Option(False, "--production", help="Compressed output"),
    bump: Optional[str] = typer.Option(None, help="Bump type: major, minor, patch, prerelease"),
    config: Optional[Path] = typer.Option(None, help="Path to YAML config"),
    retries: int = typer.Option(0, help="Retries per task on failure"),
):
    """Run tasks and their prerequisites."""
    settings = _settings(config, production, bump)
    execute(list(names or ["default"]), settings, retries=retries)


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
