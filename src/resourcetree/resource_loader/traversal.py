"""
Depth-first walk of a resource directory.

Hidden entries (names starting with `.`) are never yielded or descended into.
Each subdirectory is exhausted before its next sibling is visited; within a
directory, entries come in the order the OS lists them.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from pathlib import Path

import pathspec

log = logging.getLogger(__name__)


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def _list_entries(directory: Path) -> Iterator[os.DirEntry[str]]:
    # Read the whole listing so only one directory handle is open at a time.
    with os.scandir(directory) as it:
        entries = list(it)
    return iter(entries)


def iter_resource_files(
    root: str | os.PathLike[str],
    exclude_spec: pathspec.PathSpec | None = None,
    onerror: Callable[[OSError], None] | None = None,
) -> Iterator[Path]:
    """
    Yield every non-hidden file under `root` in depth-first order.

    Listing errors raise `OSError`, unless `onerror` is given, in which case it
    is called with the error and that directory is skipped (as with `os.walk`).
    Symlinks are never followed as directories. The walk keeps its own stack,
    so tree depth is not limited by the recursion limit.
    """
    root = Path(root)
    stack: list[Iterator[os.DirEntry[str]]] = []

    def descend(directory: Path) -> None:
        try:
            stack.append(_list_entries(directory))
        except OSError as e:
            if onerror is None:
                raise
            onerror(e)

    descend(root)
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        if is_hidden(entry.name):
            log.debug("Skipping hidden entry: %s", entry.path)
            continue

        path = Path(entry.path)
        is_dir = entry.is_dir(follow_symlinks=False)
        if exclude_spec is not None:
            rel = path.relative_to(root).as_posix()
            if exclude_spec.match_file(rel + "/" if is_dir else rel):
                log.debug("Excluded: %s", path)
                continue
        if is_dir:
            descend(path)
        else:
            yield path
