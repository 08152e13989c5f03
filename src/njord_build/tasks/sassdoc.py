"""Documentation task.

Runs the SassDoc command-line tool over the library sources. Options SassDoc
only accepts through a config file (groups, description source) are written
to a temporary YAML config for the duration of the run.
"""

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Dict, List

import yaml

from ..orchestrator import BuildContext, task
from ..orchestrator.config import Settings
from ..orchestrator.errors import ConfigError, ToolNotFoundError
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import expand_globs


def load_groups(path: Path) -> Dict[str, str]:
    """Group slug -> display name; JSON or YAML. Missing file means no groups."""
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid groups file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping of group names")
    return {str(k): str(v) for k, v in data.items()}


def sassdoc_config(settings: Settings) -> dict:
    return {
        "dest": str(settings.path(settings.docs_dest)),
        "descriptionPath": str(settings.path(settings.docs_description)),
        "groups": load_groups(settings.path(settings.docs_groups)),
    }


def sassdoc_command(settings: Settings, config_file: str) -> List[str]:
    exe = shutil.which(settings.sassdoc_bin)
    if exe is None:
        raise ToolNotFoundError(
            f"{settings.sassdoc_bin!r} not found on PATH; install it with `npm install -g sassdoc`"
        )
    sources = [str(p) for p in expand_globs(settings.style_files, settings.root)]
    return [exe, *sources, "--config", config_file]


@task(name="sassdoc")
def sassdoc(ctx: BuildContext):
    """Generate SassDoc documentation into the docs directory."""
    logger = get_logger("njord.task.sassdoc")
    s = ctx.settings
    config = sassdoc_config(s)
    fd, config_file = tempfile.mkstemp(prefix="sassdoc-", suffix=".yaml")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            yaml.safe_dump(config, f, sort_keys=False)
        cmd = sassdoc_command(s, config_file)
        logger.info("Documenting %d file(s) into %s", len(cmd) - 3, config["dest"])
        logger.debug("Running: %s", " ".join(cmd))
        subprocess.run(cmd, cwd=s.root, check=True)
    finally:
        os.unlink(config_file)
