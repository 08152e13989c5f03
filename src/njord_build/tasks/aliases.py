"""Aggregate tasks with no work of their own."""

from ..orchestrator import BuildContext, task


@task(name="build", deps=["style"])
def build(ctx: BuildContext):
    """Build the stylesheet once."""


@task(name="default", deps=["build", "watch"])
def default(ctx: BuildContext):
    """Build, then keep rebuilding on change."""
