"""
Decoding of one resource file into a `ResourceBundle`.

A decoder is any callable taking the raw bytes of a file and returning a
`ResourceBundle`. The default, `decode_yaml_bundle`, reads a multi-document
YAML stream.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

import yaml

from resourcetree.errors import ResourceParseError


@dataclass
class ResourceBundle:
    """The resources decoded from exactly one file."""

    documents: list[dict[str, Any]] = field(default_factory=list)
    source: Path | None = None

    @property
    def kinds(self) -> list[str]:
        """The `kind` of each document that declares one, in document order."""
        return [str(doc["kind"]) for doc in self.documents if "kind" in doc]

    def __len__(self) -> int:
        return len(self.documents)


ContentDecoder = Callable[[bytes], ResourceBundle]


def decode_yaml_bundle(data: bytes) -> ResourceBundle:
    """
    Decode a YAML stream into a bundle. Empty documents (such as those left by
    a trailing `---`) are dropped; any other non-mapping document is rejected.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ResourceParseError(f"content is not valid UTF-8: {e}") from e

    try:
        raw_docs = list(yaml.safe_load_all(text))
    except yaml.YAMLError as e:
        raise ResourceParseError(f"invalid YAML: {e}") from e

    documents: list[dict[str, Any]] = []
    for index, doc in enumerate(raw_docs):
        if doc is None:
            continue
        if not isinstance(doc, dict):
            raise ResourceParseError(
                f"document {index} is a {type(doc).__name__}, expected a mapping"
            )
        documents.append(cast(dict[str, Any], doc))

    return ResourceBundle(documents=documents)
