"""Version bump task.

Rewrites the `version` field of the package manifest in place. The bump kind
comes from `--bump` (major, minor, patch, prerelease; default patch). Key
order, indentation and the trailing newline of the manifest are preserved.
"""

import json
import re
from pathlib import Path

import semver

from ..orchestrator import BuildContext, task
from ..orchestrator.config import BUMP_KINDS
from ..orchestrator.errors import BumpError
from ..orchestrator.logging import get_logger


PRERELEASE_TOKEN = "rc"


def bump_version(version: str, kind: str = "patch") -> str:
    """Return `version` incremented by `kind`, following npm's rules.

    A pre-release of the target version is promoted rather than skipped,
    e.g. 1.3.0-rc.1 bumped by minor gives 1.3.0.
    """
    if kind not in BUMP_KINDS:
        raise BumpError(f"Unknown bump type {kind!r}; expected one of {', '.join(BUMP_KINDS)}")
    try:
        v = semver.Version.parse(version.strip())
    except ValueError as e:
        raise BumpError(f"Not a semantic version: {version!r}") from e

    if kind == "prerelease":
        if not v.prerelease:
            v = v.bump_patch()
        return str(v.bump_prerelease(PRERELEASE_TOKEN))
    if v.prerelease and (
        kind == "patch"
        or (kind == "minor" and v.patch == 0)
        or (kind == "major" and v.minor == 0 and v.patch == 0)
    ):
        return str(v.finalize_version())
    return str(getattr(v, f"bump_{kind}")())


def _detect_indent(text: str):
    m = re.search(r"^([ \t]+)\S", text, flags=re.MULTILINE)
    if not m:
        return 2
    indent = m.group(1)
    return "\t" if indent.startswith("\t") else len(indent)


def bump_manifest(path: Path, kind: str = "patch") -> tuple[str, str]:
    """Bump the manifest's version in place; returns (old, new)."""
    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise BumpError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, dict) or "version" not in data:
        raise BumpError(f"{path} has no version field")
    old = str(data["version"])
    new = bump_version(old, kind)
    data["version"] = new
    out = json.dumps(data, indent=_detect_indent(text), ensure_ascii=False)
    if text.endswith("\n"):
        out += "\n"
    path.write_text(out, encoding="utf-8")
    return old, new


@task(name="bump")
def bump(ctx: BuildContext):
    """Bump the manifest version (--bump major|minor|patch|prerelease)."""
    s = ctx.settings
    old, new = bump_manifest(s.path(s.manifest), s.bump)
    get_logger("njord.task.bump").info("Bumped %s: %s → %s (%s)", s.manifest, old, new, s.bump)
