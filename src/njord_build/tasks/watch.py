from ..orchestrator import BuildContext, task
from ..orchestrator.watch import Watcher


def build_watcher(ctx: BuildContext) -> Watcher:
    s = ctx.settings
    watcher = Watcher(ctx.scheduler, root=s.root, debounce=s.watch_debounce)
    watcher.watch(s.style_files, ["style"])
    watcher.watch(s.style_files + s.style_examples, ["examples"])
    return watcher


@task(name="watch")
def watch(ctx: BuildContext):
    """Rebuild stylesheets whenever a source changes (runs until interrupted)."""
    build_watcher(ctx).serve_forever()
