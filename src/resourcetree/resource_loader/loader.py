"""
ResourceLoader: main entry point for loading resource bundles from explicit
files and recursively from directories.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import replace
from pathlib import Path

import pathspec

from resourcetree.decoder import ResourceBundle
from resourcetree.errors import (
    LoadFailure,
    ResourceLoadErrors,
    ResourceNotFoundError,
    ResourceParseError,
)
from resourcetree.resource_loader.traversal import iter_resource_files
from resourcetree.resource_loader.types import ErrorPolicy, LoaderConfig

log = logging.getLogger(__name__)

PathLike = str | os.PathLike[str]


class ResourceLoader:
    """
    Loads one `ResourceBundle` per file. Explicit files are loaded in the order
    given, then each directory is walked depth-first, skipping hidden entries.

    Nothing is cached between calls: every load reads the filesystem afresh.
    """

    def __init__(self, config: LoaderConfig | None = None) -> None:
        self._config: LoaderConfig = config if config is not None else LoaderConfig()
        self._exclude_spec: pathspec.PathSpec | None = None
        if self._config.exclude:
            self._exclude_spec = pathspec.PathSpec.from_lines("gitignore", self._config.exclude)

    @property
    def config(self) -> LoaderConfig:
        return self._config

    def load_file(self, path: PathLike) -> ResourceBundle:
        """
        Read and decode a single file.

        Raises `ResourceNotFoundError` if the path does not exist, `OSError` for
        any other stat or read failure, and `ResourceParseError` (unchanged
        apart from its `path`) if the decoder rejects the content.
        """
        path = Path(path)
        try:
            path.stat()
        except FileNotFoundError as e:
            raise ResourceNotFoundError(path) from e

        data = path.read_bytes()
        try:
            bundle = self._config.decoder(data)
        except ResourceParseError as e:
            if e.path is None:
                e.path = path
            raise

        if isinstance(bundle, ResourceBundle):
            if bundle.source is None:
                bundle = replace(bundle, source=path)
            log.debug("Loaded %d documents from %s", len(bundle), path)
        else:
            log.debug("Loaded %s", path)
        return bundle

    def iter_directory(self, path: PathLike) -> Iterator[ResourceBundle]:
        """Lazily load every non-hidden file under `path`; stops at the first error."""
        for file_path in iter_resource_files(path, self._exclude_spec):
            yield self.load_file(file_path)

    def load_directory(self, path: PathLike) -> list[ResourceBundle]:
        return list(self.iter_directory(path))

    def iter_load_order(self, files: Iterable[PathLike], dirs: Iterable[PathLike]) -> Iterator[Path]:
        """The files `load()` would read, in the order it would read them."""
        for f in files:
            yield Path(f)
        for d in dirs:
            yield from iter_resource_files(d, self._exclude_spec)

    def load(self, files: Iterable[PathLike], dirs: Iterable[PathLike]) -> list[ResourceBundle]:
        """
        Load explicit `files` first, then everything under `dirs`.

        With `ErrorPolicy.FAIL_FAST` (the default) the first error is raised and
        no bundles are returned. With `ErrorPolicy.COLLECT` every file is tried
        and a `ResourceLoadErrors` listing all failures is raised at the end.
        """
        if self._config.error_policy is ErrorPolicy.COLLECT:
            return self._load_collecting(files, dirs)

        bundles: list[ResourceBundle] = []
        for f in files:
            bundles.append(self.load_file(f))
        for d in dirs:
            bundles.extend(self.iter_directory(d))
        log.info("Loaded %d resource bundles", len(bundles))
        return bundles

    def _load_collecting(
        self, files: Iterable[PathLike], dirs: Iterable[PathLike]
    ) -> list[ResourceBundle]:
        bundles: list[ResourceBundle] = []
        errors: list[LoadFailure] = []

        def try_load(path: Path) -> None:
            try:
                bundles.append(self.load_file(path))
            except (OSError, ValueError) as e:
                log.debug("Failed to load %s: %s", path, e)
                errors.append(LoadFailure(path, e))

        for f in files:
            try_load(Path(f))
        for d in dirs:

            def record_listing_error(e: OSError, d: PathLike = d) -> None:
                errors.append(LoadFailure(Path(e.filename or d), e))

            for file_path in iter_resource_files(d, self._exclude_spec, record_listing_error):
                try_load(file_path)

        if errors:
            raise ResourceLoadErrors(errors, bundles)
        log.info("Loaded %d resource bundles", len(bundles))
        return bundles


def load_from_files_and_dirs(
    files: Iterable[PathLike],
    dirs: Iterable[PathLike],
    config: LoaderConfig | None = None,
) -> list[ResourceBundle]:
    """Load resources from specific files and, recursively, from directories."""
    return ResourceLoader(config).load(files, dirs)
