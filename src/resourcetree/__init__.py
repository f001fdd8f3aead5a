"""
Load declarative YAML resources from files and directory trees, and work out
which paths need to be watched for changes.
"""

from resourcetree.decoder import ContentDecoder, ResourceBundle, decode_yaml_bundle
from resourcetree.errors import (
    LoadFailure,
    ResourceLoadErrors,
    ResourceNotFoundError,
    ResourceParseError,
)
from resourcetree.resource_loader import (
    ErrorPolicy,
    LoaderConfig,
    ResourceLoader,
    load_from_files_and_dirs,
)
from resourcetree.watch_paths import (
    ClassifiedPaths,
    SkippedPath,
    SubDirectories,
    WatchTargets,
    classify_paths,
    expand_subdirs,
    parent_dirs,
    validate_output_path,
    watch_targets,
)

__all__ = [
    "ClassifiedPaths",
    "ContentDecoder",
    "ErrorPolicy",
    "LoadFailure",
    "LoaderConfig",
    "ResourceBundle",
    "ResourceLoadErrors",
    "ResourceLoader",
    "ResourceNotFoundError",
    "ResourceParseError",
    "SkippedPath",
    "SubDirectories",
    "WatchTargets",
    "classify_paths",
    "decode_yaml_bundle",
    "expand_subdirs",
    "load_from_files_and_dirs",
    "parent_dirs",
    "validate_output_path",
    "watch_targets",
]
