from __future__ import annotations

"""Build settings: production switch, source globs and output paths.

Settings are resolved once by the CLI and handed to every task through the
build context. Values come from (highest first) CLI flags, the environment,
an optional ``njord-build.yaml`` and the defaults below.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Tuple

import yaml
from dotenv import load_dotenv

from .errors import ConfigError


DEFAULT_CONFIG_FILE = "njord-build.yaml"
PRODUCTION_ENV_VAR = "NODE_ENV"
BUMP_KINDS = ("major", "minor", "patch", "prerelease")


def is_production(environ: Mapping[str, str] | None = None, flag: bool = False) -> bool:
    """True if NODE_ENV is exactly "production" or the --production flag is set."""
    env = os.environ if environ is None else environ
    return env.get(PRODUCTION_ENV_VAR) == "production" or bool(flag)


@dataclass(frozen=True)
class Settings:
    root: Path = Path(".")
    production: bool = False
    # Sources
    style_main: str = "src/njord.scss"
    style_files: Tuple[str, ...] = ("src/**/*.scss",)
    style_examples: Tuple[str, ...] = ("examples/**/*.scss",)
    include_paths: Tuple[str, ...] = ()
    # Outputs
    style_dest: str = "."
    examples_dest: str = "examples"
    clean_globs: Tuple[str, ...] = ("*.css",)
    # Versioning
    manifest: str = "package.json"
    bump: str = "patch"
    # Documentation
    docs_dest: str = "docs"
    docs_description: str = "readme.md"
    docs_groups: str = "sassdoc-groups.json"
    sassdoc_bin: str = "sassdoc"
    # Compiler
    precision: int = 10
    # Watch
    watch_debounce: float = 0.2

    @property
    def output_style(self) -> str:
        return "compressed" if self.production else "expanded"

    def path(self, rel: str) -> Path:
        return self.root / rel


def _get(d: Dict, *keys, default=None):
    cur = d
    for k in keys:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(k)
        if cur is None:
            return default
    return cur


def _as_tuple(value) -> Tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


def load_config(path: str | Path) -> dict:
    p = Path(path)
    try:
        with open(p, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{p} must contain a mapping, got {type(data).__name__}")
    return data


def settings_from_params(params: dict, root: Path) -> Settings:
    """Map the YAML layout onto Settings; unknown keys are ignored."""
    base = Settings(root=root)
    overrides: dict = {}
    for key, section, name in (
        ("style_main", "style", "main"),
        ("style_dest", "style", "dest"),
        ("examples_dest", "examples", "dest"),
        ("manifest", "bump", "manifest"),
        ("bump", "bump", "type"),
        ("docs_dest", "sassdoc", "dest"),
        ("docs_description", "sassdoc", "description"),
        ("docs_groups", "sassdoc", "groups"),
        ("sassdoc_bin", "sassdoc", "bin"),
    ):
        value = _get(params, section, name)
        if value is not None:
            overrides[key] = str(value)
    for key, section, name in (
        ("style_files", "style", "files"),
        ("include_paths", "style", "include_paths"),
        ("style_examples", "examples", "files"),
        ("clean_globs", "clean", "files"),
    ):
        value = _get(params, section, name)
        if value is not None:
            overrides[key] = _as_tuple(value)
    debounce = _get(params, "watch", "debounce")
    if debounce is not None:
        try:
            overrides["watch_debounce"] = float(debounce)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"watch.debounce must be a number, got {debounce!r}") from e
    return replace(base, **overrides)


def load_settings(
    config_path: str | Path | None = None,
    *,
    production: bool = False,
    bump: str | None = None,
    root: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    root_path = Path(root) if root is not None else Path.cwd()
    if environ is None:
        load_dotenv(root_path / ".env", override=False)
        environ = os.environ

    if config_path is not None:
        cfg = Path(config_path)
        if not cfg.is_absolute():
            cfg = root_path / cfg
        if not cfg.exists():
            raise ConfigError(f"Config file not found: {cfg}")
        params = load_config(cfg)
    elif (root_path / DEFAULT_CONFIG_FILE).exists():
        params = load_config(root_path / DEFAULT_CONFIG_FILE)
    else:
        params = {}

    settings = settings_from_params(params, root_path)
    if bump is not None:
        settings = replace(settings, bump=bump)
    if settings.bump not in BUMP_KINDS:
        raise ConfigError(
            f"Unknown bump type {settings.bump!r}; expected one of {', '.join(BUMP_KINDS)}"
        )
    return replace(settings, production=is_production(environ, production))
