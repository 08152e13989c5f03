"""Stylesheet compilation tasks.

`style` builds the library stylesheet into the project root and `examples`
builds every example stylesheet next to its source. Compiler errors are
reported and skipped so a watch session survives a typo.
"""

from pathlib import Path
from typing import List, Sequence

import sass

from ..orchestrator import BuildContext, task
from ..orchestrator.config import Settings
from ..orchestrator.errors import CompilationError
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import expand_globs, glob_base


def compile_file(source: Path, settings: Settings) -> str:
    """Compile one SCSS file with the mode-dependent output style."""
    include_paths = [str(source.parent)] + [
        str(settings.path(p)) for p in settings.include_paths
    ]
    try:
        return sass.compile(
            filename=str(source),
            output_style=settings.output_style,
            precision=settings.precision,
            include_paths=include_paths,
        )
    except sass.CompileError as e:
        raise CompilationError(str(source), str(e)) from e


def output_path(source: Path, pattern: str, dest: Path, root: Path) -> Path:
    rel = source.relative_to(root / glob_base(pattern))
    return dest / rel.with_suffix(".css")


def compile_stylesheets(
    patterns: Sequence[str], dest: str, settings: Settings, logger=None
) -> List[Path]:
    """Compile every non-partial match of `patterns` into `dest`.

    Returns the files written. Compilation errors are logged and the
    remaining sources are still compiled; file system errors propagate.
    """
    logger = logger or get_logger("njord.task.style")
    root = settings.root
    dest_dir = settings.path(dest)
    written: list[Path] = []
    for pattern in patterns:
        for source in expand_globs([pattern], root):
            if source.name.startswith("_") or source.suffix != ".scss":
                continue
            try:
                css = compile_file(source, settings)
            except CompilationError as e:
                logger.error("Sass error: %s", e)
                continue
            target = output_path(source, pattern, dest_dir, root)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(css, encoding="utf-8")
            logger.info("Wrote %s (%s)", target, settings.output_style)
            written.append(target)
    if not written:
        logger.warning("No stylesheet written for %s", ", ".join(patterns))
    return written


@task(name="style")
def style(ctx: BuildContext):
    """Compile the main stylesheet into the project root."""
    s = ctx.settings
    compile_stylesheets([s.style_main], s.style_dest, s, get_logger("njord.task.style"))


@task(name="examples")
def examples(ctx: BuildContext):
    """Compile the example stylesheets into the examples directory."""
    s = ctx.settings
    compile_stylesheets(s.style_examples, s.examples_dest, s, get_logger("njord.task.examples"))
