"""Configuration types for resource loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from resourcetree.decoder import ContentDecoder, decode_yaml_bundle


class ErrorPolicy(str, Enum):
    """What a bulk load does when a file fails."""

    FAIL_FAST = "fail-fast"
    COLLECT = "collect"


@dataclass
class LoaderConfig:
    """
    Configuration for loading resource files.

    `exclude` holds gitignore-style patterns matched against paths relative to
    each traversed directory. Hidden entries are always skipped, whatever the
    patterns say.
    """

    decoder: ContentDecoder = decode_yaml_bundle
    exclude: list[str] = field(default_factory=list)
    error_policy: ErrorPolicy = ErrorPolicy.FAIL_FAST
