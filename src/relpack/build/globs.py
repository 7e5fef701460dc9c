"""File glob resolution — expand package file patterns against a sources dir."""

from __future__ import annotations

import glob
from collections.abc import Iterable
from pathlib import Path


def _shallow_trailing_stars(pattern: str) -> str:
    """A final ``**`` segment matches one level, like ``*``.

    Only ``**/`` recurses; ``lib/**`` lists lib's children, not lib itself.
    """
    head, sep, last = pattern.rpartition("/")
    if last == "**":
        return f"{head}{sep}*"
    return pattern


def resolve_globs(patterns: Iterable[str], base_dir: str | Path) -> list[str]:
    """Expand glob patterns relative to base_dir.

    ``**/`` recurses through any number of directories, wildcards skip
    dotfiles. Matched files and directories are both returned as sorted,
    de-duplicated, ``/``-separated relative paths.
    """
    base_dir = Path(base_dir)
    matches: set[str] = set()
    for pattern in patterns:
        pattern = _shallow_trailing_stars(pattern)
        for match in glob.glob(pattern, root_dir=base_dir, recursive=True):
            matches.add(Path(match).as_posix())
    return sorted(matches)
