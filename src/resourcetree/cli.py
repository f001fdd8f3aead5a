#!/usr/bin/env python3
"""
resourcetree: Load YAML resources from files and directory trees

Common usage:
  resourcetree gateway.yaml config/
  resourcetree config/ -o all-resources.yaml
  resourcetree --list-files config/
  resourcetree --watch-paths config/ extra/route.yaml

Hidden files and directories (names starting with '.') are always skipped.
Settings can also come from `.resourcetree.toml`, `resourcetree.toml`, or
`[tool.resourcetree]` in `pyproject.toml`.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from strif import atomic_output_file

from resourcetree.config import apply_config, find_config_file, load_config
from resourcetree.decoder import ResourceBundle
from resourcetree.errors import ResourceLoadErrors, ResourceParseError
from resourcetree.resource_loader import ErrorPolicy, LoaderConfig, ResourceLoader
from resourcetree.watch_paths import validate_output_path, watch_targets

log = logging.getLogger(__name__)


@dataclass
class Options:
    """Command-line options for the resourcetree tool."""

    paths: list[str]
    output: str
    exclude: list[str]
    error_policy: str
    list_files: bool
    watch_paths: bool
    verbose: int
    version: bool
    # Only settable from a config file
    files: list[str] = field(default_factory=list)
    dirs: list[str] = field(default_factory=list)


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns a tuple of (options, explicit_flags) where `explicit_flags` tracks
    which flags the user explicitly passed (for config merge precedence).
    """
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        prog="resourcetree",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=str,
        default=[],
        help="Resource files or directories (directories are loaded recursively)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default="-",
        help="Write loaded documents as a YAML stream to this file (use '-' for stdout)",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Gitignore-style pattern to skip during directory traversal. Can be repeated",
    )
    parser.add_argument(
        "--error-policy",
        type=str,
        choices=[p.value for p in ErrorPolicy],
        default=ErrorPolicy.FAIL_FAST.value,
        dest="error_policy",
        help="Stop at the first bad file, or try every file and report all failures "
        "(default: %(default)s)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--list-files",
        action="store_true",
        dest="list_files",
        help="Print the files that would be loaded, in load order, without loading them",
    )
    mode.add_argument(
        "--watch-paths",
        action="store_true",
        dest="watch_paths",
        help="Print the directories and files a watcher should observe for the given paths",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v for info, -vv for debug)",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    opts = parser.parse_args(args)

    # Re-parse with sentinel defaults to detect which flags were actually supplied.
    _SENTINEL = object()
    sentinel_parser = argparse.ArgumentParser(add_help=False)
    sentinel_parser.add_argument("-o", "--output", default=_SENTINEL)
    sentinel_parser.add_argument("--exclude", action="append", default=None)
    sentinel_parser.add_argument("--error-policy", dest="error_policy", default=_SENTINEL)
    sentinel_opts, _ = sentinel_parser.parse_known_args(args if args is not None else sys.argv[1:])

    explicit_flags: set[str] = set()
    if sentinel_opts.output is not _SENTINEL:
        explicit_flags.add("output")
    if sentinel_opts.exclude is not None:
        explicit_flags.add("exclude")
    if sentinel_opts.error_policy is not _SENTINEL:
        explicit_flags.add("error_policy")

    return (
        Options(
            paths=opts.paths,
            output=opts.output,
            exclude=opts.exclude,
            error_policy=opts.error_policy,
            list_files=opts.list_files,
            watch_paths=opts.watch_paths,
            verbose=opts.verbose,
            version=opts.version,
        ),
        explicit_flags,
    )


def _configure_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _split_inputs(options: Options) -> tuple[list[str], list[str]]:
    """
    Existing directories are loaded recursively; anything else is an explicit
    file, so a missing path fails the load instead of vanishing.
    """
    if not options.paths:
        return list(options.files), list(options.dirs)
    files: list[str] = []
    dirs: list[str] = []
    for p in options.paths:
        (dirs if Path(p).is_dir() else files).append(p)
    return files, dirs


def _write_documents(bundles: list[ResourceBundle], output: str) -> None:
    documents = [doc for bundle in bundles for doc in bundle.documents]
    text = yaml.safe_dump_all(documents, sort_keys=False)
    if output == "-":
        sys.stdout.write(text)
        return
    with atomic_output_file(output) as tmp_path:
        Path(tmp_path).write_text(text, encoding="utf-8")


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the resourcetree CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    options, explicit_flags = _parse_args(args)

    if options.version:
        try:
            version = importlib.metadata.version("resourcetree")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    _configure_logging(options.verbose)

    config_path = find_config_file(Path.cwd())
    if config_path:
        log.info("Using config file %s", config_path)
        try:
            config = load_config(config_path)
        except ValueError as e:
            print(f"Error: {config_path}: {e}", file=sys.stderr)
            return 1
        apply_config(options, config, explicit_flags)

    files, dirs = _split_inputs(options)
    if not files and not dirs:
        print(
            "Error: No input specified. Provide resource files or directories"
            " (use '.' for current directory). Use --help for more options.",
            file=sys.stderr,
        )
        return 1

    if options.watch_paths:
        targets = watch_targets(files + dirs)
        for skipped in targets.skipped:
            log.warning("Not watching %s: %s", skipped.path, skipped.reason)
        for d in sorted(targets.dirs):
            print(f"dir\t{d}")
        for f in sorted(targets.files):
            print(f"file\t{f}")
        return 0

    try:
        loader_config = LoaderConfig(
            exclude=options.exclude,
            error_policy=ErrorPolicy(options.error_policy),
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    loader = ResourceLoader(loader_config)

    try:
        if options.list_files:
            for f in loader.iter_load_order(files, dirs):
                print(f)
            return 0

        output = options.output
        if output != "-":
            output = validate_output_path(output)
        bundles = loader.load(files, dirs)
        _write_documents(bundles, output)
    except ResourceLoadErrors as e:
        for failure in e.errors:
            print(f"Error: {failure}", file=sys.stderr)
        return 2
    except (OSError, ResourceParseError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
