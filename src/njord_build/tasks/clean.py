from ..orchestrator import BuildContext, task
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import expand_globs


@task(name="clean")
def clean(ctx: BuildContext):
    """Delete generated CSS from the project root."""
    logger = get_logger("njord.task.clean")
    removed = 0
    for path in expand_globs(ctx.settings.clean_globs, ctx.settings.root):
        path.unlink()
        logger.debug("Deleted %s", path)
        removed += 1
    logger.info("Deleted %d file(s) matching %s", removed, ", ".join(ctx.settings.clean_globs))
