from __future__ import annotations

import asyncio
import inspect
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, Mapping, Sequence, Tuple

from .config import Settings
from .errors import CyclicDependencyError, DuplicateTaskError, UnknownTaskError
from .logging import get_logger


# An action receives the BuildContext and either returns when done or
# returns an awaitable that completes when the work is done.
Action = Callable[["BuildContext"], Any]


@dataclass(frozen=True)
class TaskSpec:
    name: str
    deps: Tuple[str, ...]
    fn: Action
    description: str = ""


@dataclass
class BuildContext:
    settings: Settings
    scheduler: "Scheduler"
    task: str = ""


def task(name: str, deps: Sequence[str] = (), description: str = ""):
    """Decorator to declare a task on a function.

    The wrapped function receives a single `BuildContext`. `deps` lists the
    tasks that must complete first, in the order they should run.
    """

    def deco(fn: Action):
        doc = description or (inspect.getdoc(fn) or "").split("\n", 1)[0]
        spec = TaskSpec(name=name, deps=tuple(deps), fn=fn, description=doc)
        setattr(fn, "_task_spec", spec)
        return fn

    return deco


def noop(ctx: BuildContext) -> None:
    return None


class TaskRegistry:
    """Name -> TaskSpec mapping, in declaration order.

    Registering a second, different task under an existing name raises
    DuplicateTaskError. Registering the same TaskSpec object again is a no-op.
    """

    def __init__(self, specs: Iterable[TaskSpec] = ()):
        self._tasks: Dict[str, TaskSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: TaskSpec) -> TaskSpec:
        existing = self._tasks.get(spec.name)
        if existing is spec:
            return spec
        if existing is not None:
            raise DuplicateTaskError(spec.name)
        self._tasks[spec.name] = spec
        return spec

    def add(
        self, name: str, deps: Sequence[str] = (), fn: Action = noop, description: str = ""
    ) -> TaskSpec:
        return self.register(
            TaskSpec(name=name, deps=tuple(deps), fn=fn, description=description)
        )

    def lookup(self, name: str) -> TaskSpec:
        try:
            return self._tasks[name]
        except KeyError:
            raise UnknownTaskError(name) from None

    def names(self) -> list[str]:
        return list(self._tasks)

    def graph(self) -> Dict[str, Tuple[str, ...]]:
        return {name: spec.deps for name, spec in self._tasks.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[TaskSpec]:
        return iter(self._tasks.values())

    def __len__(self) -> int:
        return len(self._tasks)


def resolve_order(graph: Mapping[str, Sequence[str]], target: str) -> list[str]:
    """Depth-first post-order of `target` and its prerequisites.

    Every prerequisite comes before the task that needs it, siblings keep their
    declared order, and each task appears once. Raises UnknownTaskError for a
    missing name and CyclicDependencyError naming the cycle.
    """
    if target not in graph:
        raise UnknownTaskError(target)

    ordered: list[str] = []
    done: set[str] = set()
    path: list[str] = []
    on_path: set[str] = set()
    # Explicit stack of (node, iterator over its deps) so deep graphs don't recurse
    stack: list[tuple[str, Iterator[str]]] = []

    def enter(node: str) -> None:
        path.append(node)
        on_path.add(node)
        stack.append((node, iter(graph[node])))

    enter(target)
    while stack:
        node, deps = stack[-1]
        for dep in deps:
            if dep in done:
                continue
            if dep in on_path:
                start = path.index(dep)
                raise CyclicDependencyError(path[start:] + [dep])
            if dep not in graph:
                raise UnknownTaskError(dep, required_by=node)
            enter(dep)
            break
        else:
            stack.pop()
            path.pop()
            on_path.discard(node)
            done.add(node)
            ordered.append(node)
    return ordered


class Scheduler:
    def __init__(
        self,
        registry: TaskRegistry,
        settings: Settings,
        retries: int = 0,
        name: str = "scheduler",
    ):
        self.registry = registry
        self.settings = settings
        self.retries = retries
        self.logger = get_logger(f"njord.{name}")
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def plan(self, *names: str) -> list[str]:
        graph = self.registry.graph()
        selected: list[str] = []
        seen: set[str] = set()
        for name in names:
            for step in resolve_order(graph, name):
                if step not in seen:
                    seen.add(step)
                    selected.append(step)
        return selected

    def _lock_for(self, name: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(name, threading.Lock())

    def run(self, *names: str) -> list[str]:
        """Run the requested tasks and their prerequisites; returns the names run.

        The whole plan is resolved before any action runs. The first failing
        action (after retries) stops the plan and its exception propagates.
        """
        selected = self.plan(*names)
        self.logger.info("Plan: %s", " → ".join(selected))
        for step_name in selected:
            self.run_step(self.registry.lookup(step_name))
        return selected

    def run_step(self, spec: TaskSpec) -> None:
        step_logger = get_logger(f"njord.task.{spec.name}")
        ctx = BuildContext(settings=self.settings, scheduler=self, task=spec.name)
        attempt = 0
        with self._lock_for(spec.name):
            while True:
                started = time.monotonic()
                try:
                    step_logger.info("Run: %s", spec.name)
                    _complete(spec.fn(ctx))
                    step_logger.info(
                        "Done: %s (%.2fs)", spec.name, time.monotonic() - started
                    )
                    return
                except Exception:  # noqa: BLE001
                    attempt += 1
                    step_logger.exception(
                        "Step failed (%s), attempt %d/%d",
                        spec.name,
                        attempt,
                        self.retries + 1,
                    )
                    if attempt > self.retries:
                        raise


def _complete(result: Any) -> None:
    """Wait for an action's awaitable result, if it returned one."""
    if not inspect.isawaitable(result):
        return

    async def _wait():
        return await result

    asyncio.run(_wait())
