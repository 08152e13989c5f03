from __future__ import annotations

"""Glob helpers shared by the tasks and the watcher.

Patterns are relative to the project root and use forward slashes. ``**/``
matches zero or more directories; without ``**`` a pattern only matches paths
with the same number of directory levels.
"""

import fnmatch
import glob
import os
from pathlib import Path
from typing import Iterable, List


def normalize_pattern(pattern: str) -> str:
    pat = pattern.replace("\\", "/")
    while pat.startswith("./"):
        pat = pat[2:]
    return pat


def has_magic(pattern: str) -> bool:
    return any(ch in pattern for ch in "*?[")


def glob_base(pattern: str) -> str:
    """Leading directory of a pattern that contains no wildcard ('' for the root)."""
    parts = normalize_pattern(pattern).split("/")
    base: list[str] = []
    for part in parts[:-1]:
        if has_magic(part):
            break
        base.append(part)
    return "/".join(base)


def _match_one(rel: str, pattern: str) -> bool:
    pat = normalize_pattern(pattern)
    if "**" not in pat:
        return rel.count("/") == pat.count("/") and fnmatch.fnmatchcase(rel, pat)
    return fnmatch.fnmatchcase(rel, pat) or fnmatch.fnmatchcase(rel, pat.replace("**/", ""))


def match_path(rel_path: str, patterns: Iterable[str]) -> bool:
    rel = normalize_pattern(rel_path)
    return any(_match_one(rel, p) for p in patterns)


def relative_to_root(path: str | Path, root: Path) -> str | None:
    """Posix path of `path` relative to `root`, or None when outside it."""
    try:
        rel = Path(os.path.abspath(path)).relative_to(os.path.abspath(root))
    except ValueError:
        return None
    return rel.as_posix()


def expand_globs(patterns: Iterable[str], root: Path) -> List[Path]:
    """Expand patterns to existing files under `root`, in pattern order, without duplicates."""
    seen: set[Path] = set()
    paths: list[Path] = []
    for raw in patterns:
        for rel in sorted(glob.glob(normalize_pattern(raw), root_dir=root, recursive=True)):
            p = root / rel
            if p.is_file() and p not in seen:
                seen.add(p)
                paths.append(p)
    return paths
