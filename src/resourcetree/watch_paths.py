"""
Helpers for working out which directories and files need to be watched.

Classification and expansion are best-effort: a path that cannot be stat'd or
listed is left out of the result and recorded in `skipped` instead of raising.
All results are plain `str` sets; parent-directory matching is string based.
"""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from resourcetree.errors import ResourceNotFoundError
from resourcetree.resource_loader.traversal import is_hidden

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkippedPath:
    """A path left out of a best-effort result, with the reason why."""

    path: str
    reason: str


@dataclass
class ClassifiedPaths:
    """
    Input paths split into directories and files. Files whose parent directory
    is also in `dirs` are dropped, since watching the directory covers them.

    Unpacks as `dirs, files = classify_paths(paths)`.
    """

    dirs: set[str] = field(default_factory=set)
    files: set[str] = field(default_factory=set)
    skipped: list[SkippedPath] = field(default_factory=list)

    def __iter__(self) -> Iterator[set[str]]:
        return iter((self.dirs, self.files))


@dataclass
class SubDirectories:
    """The inclusive closure of non-hidden subdirectories of some roots."""

    dirs: set[str] = field(default_factory=set)
    skipped: list[SkippedPath] = field(default_factory=list)


@dataclass
class WatchTargets:
    """Everything an external watcher must observe for a set of input paths."""

    dirs: set[str] = field(default_factory=set)
    files: set[str] = field(default_factory=set)
    skipped: list[SkippedPath] = field(default_factory=list)


def _parent(path: str) -> str:
    """Containing directory of `path`, `.` for a bare name."""
    parent = os.path.dirname(path)
    return os.path.normpath(parent) if parent else "."


def _skip(skipped: list[SkippedPath], path: str, error: OSError) -> None:
    reason = error.strerror or str(error)
    log.debug("Skipping %s: %s", path, reason)
    skipped.append(SkippedPath(path, reason))


def classify_paths(paths: Iterable[str | os.PathLike[str]]) -> ClassifiedPaths:
    """
    Split `paths` into directories and files. Paths that cannot be stat'd are
    omitted and recorded in `skipped`. Symlinks are classified as files.
    """
    result = ClassifiedPaths()
    for path in {os.fspath(p) for p in paths}:
        try:
            st = os.lstat(path)
        except OSError as e:
            _skip(result.skipped, path, e)
            continue
        if stat.S_ISDIR(st.st_mode):
            result.dirs.add(path)
        else:
            result.files.add(path)

    # Ignore a file if its parent directory is watched as well.
    watched = {os.path.normpath(d) for d in result.dirs}
    result.files = {f for f in result.files if _parent(f) not in watched}
    return result


def expand_subdirs(roots: Iterable[str | os.PathLike[str]]) -> SubDirectories:
    """
    Return every root plus all of its non-hidden subdirectories, recursively.
    Directories that cannot be listed stay in the result but are not descended.
    """
    result = SubDirectories()
    stack = [os.fspath(r) for r in roots]
    stack.reverse()
    while stack:
        current = stack.pop()
        if current in result.dirs:
            continue
        result.dirs.add(current)
        try:
            with os.scandir(current) as it:
                children = [
                    os.path.normpath(os.path.join(current, entry.name))
                    for entry in it
                    if entry.is_dir(follow_symlinks=False) and not is_hidden(entry.name)
                ]
        except OSError as e:
            _skip(result.skipped, current, e)
            continue
        stack.extend(reversed(children))
    return result


def parent_dirs(files: Iterable[str | os.PathLike[str]]) -> set[str]:
    """Immediate containing directory of each file. Never touches the filesystem."""
    return {_parent(os.fspath(f)) for f in files}


def validate_output_path(raw: str | os.PathLike[str]) -> str:
    """
    Return `raw` as an absolute path, checking that its parent directory exists.

    Raises `ResourceNotFoundError` if the parent is missing and `OSError` if the
    path cannot be made absolute or the parent cannot be stat'd. Nothing is
    created or written.
    """
    output_path = os.path.abspath(os.fspath(raw))
    parent = os.path.dirname(output_path)
    try:
        os.stat(parent)
    except FileNotFoundError as e:
        raise ResourceNotFoundError(parent, f"output directory {parent} does not exist") from e
    return output_path


def watch_targets(paths: Iterable[str | os.PathLike[str]]) -> WatchTargets:
    """
    Full watch surface for `paths`: classified directories with all their
    subdirectories, plus the parent directory of every classified file.
    """
    classified = classify_paths(paths)
    subdirs = expand_subdirs(sorted(classified.dirs))
    return WatchTargets(
        dirs=subdirs.dirs | parent_dirs(classified.files),
        files=set(classified.files),
        skipped=classified.skipped + subdirs.skipped,
    )
