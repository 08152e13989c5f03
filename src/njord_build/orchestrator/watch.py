from __future__ import annotations

"""Re-run tasks when watched files change.

A watchdog observer thread only enqueues matching paths. The loop thread
blocks on that queue, gathers every event that arrives within the debounce
window into one batch, and runs the bound tasks through the scheduler, one
batch at a time.
"""

import queue
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .core import Scheduler
from .logging import get_logger
from .utils import glob_base, match_path, relative_to_root


IGNORED_EVENT_TYPES = {"opened", "closed_no_write"}


@dataclass(frozen=True)
class WatchBinding:
    globs: Tuple[str, ...]
    task_names: Tuple[str, ...]


class _GlobEventHandler(FileSystemEventHandler):
    def __init__(self, watcher: "Watcher"):
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in IGNORED_EVENT_TYPES:
            return
        for path in (event.src_path, getattr(event, "dest_path", "")):
            if path:
                self.watcher.notify(path)


class Watcher:
    def __init__(self, scheduler: Scheduler, root: Path | None = None, debounce: float = 0.2):
        self.scheduler = scheduler
        self.root = Path(root) if root is not None else scheduler.settings.root
        self.debounce = debounce
        self.bindings: List[WatchBinding] = []
        self.events: "queue.Queue[str]" = queue.Queue()
        self.logger = get_logger("njord.watch")
        self._observer: Optional[Observer] = None

    def watch(self, globs: Sequence[str], task_names: Sequence[str]) -> WatchBinding:
        binding = WatchBinding(tuple(globs), tuple(task_names))
        self.bindings.append(binding)
        self.logger.debug("Watching %s -> %s", ", ".join(binding.globs), ", ".join(binding.task_names))
        return binding

    def handler(self) -> FileSystemEventHandler:
        return _GlobEventHandler(self)

    def notify(self, path: str | Path) -> None:
        rel = relative_to_root(path, self.root)
        if rel is None:
            return
        if any(match_path(rel, b.globs) for b in self.bindings):
            self.events.put(rel)

    def tasks_for(self, paths: Sequence[str]) -> list[str]:
        """Bound task names for the changed paths, in binding order, each once."""
        names: list[str] = []
        for binding in self.bindings:
            if any(match_path(p, binding.globs) for p in paths):
                for name in binding.task_names:
                    if name not in names:
                        names.append(name)
        return names

    def _watch_dirs(self) -> list[Path]:
        dirs: list[Path] = []
        for binding in self.bindings:
            for pattern in binding.globs:
                d = self.root / glob_base(pattern)
                if d.is_dir() and d not in dirs:
                    dirs.append(d)
        # Nested directories are covered by their recursive parent
        return [d for d in dirs if not any(o != d and o in d.parents for o in dirs)]

    def start(self) -> None:
        if self._observer is not None:
            return
        observer = Observer()
        handler = self.handler()
        for d in self._watch_dirs():
            observer.schedule(handler, str(d), recursive=True)
            self.logger.info("Watching %s", d)
        observer.start()
        self._observer = observer

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join()
        self._observer = None

    def process_batch(self, timeout: float | None = None) -> list[str]:
        """Wait for one batch of changes and run its tasks; returns the names run."""
        try:
            first = self.events.get(timeout=timeout)
        except queue.Empty:
            return []
        changed = [first]
        while True:
            try:
                changed.append(self.events.get(timeout=self.debounce))
            except queue.Empty:
                break
        names = self.tasks_for(changed)
        self.logger.info("Changed: %s", ", ".join(sorted(set(changed))))
        ran: list[str] = []
        for name in names:
            try:
                self.scheduler.run(name)
                ran.append(name)
            except Exception:  # noqa: BLE001
                # A failed rebuild must not end the watch session
                self.logger.error("Rebuild of %s failed; still watching", name)
        return ran

    def serve_forever(self, stop: threading.Event | None = None, poll: float = 0.5) -> None:
        self.start()
        try:
            while stop is None or not stop.is_set():
                self.process_batch(timeout=poll)
        except KeyboardInterrupt:
            # Watching never completes normally; the CLI maps this to exit 130
            self.logger.info("Watch interrupted")
            raise
        finally:
            self.stop()
