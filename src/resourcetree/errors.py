"""Exceptions raised while loading resources."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


class ResourceNotFoundError(FileNotFoundError):
    """A file or directory named for loading does not exist."""

    def __init__(self, path: str | Path, message: str | None = None) -> None:
        self.path: Path = Path(path)
        super().__init__(message or f"file {path} does not exist")

    def __str__(self) -> str:
        return str(self.args[0])


class ResourceParseError(ValueError):
    """
    The content of one file could not be decoded into a resource bundle.

    `path` is filled in by the loader when a decoder raises without one.
    """

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.path: Path | None = Path(path) if path is not None else None

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.path}: {self.message}"


@dataclass(frozen=True)
class LoadFailure:
    """One failed file or directory under `ErrorPolicy.COLLECT`."""

    path: Path
    error: Exception

    def __str__(self) -> str:
        return f"{self.path}: {self.error}"


class ResourceLoadErrors(Exception):
    """
    Raised at the end of a collecting load when any file failed. Carries every
    failure and the bundles that did load.
    """

    def __init__(self, errors: list[LoadFailure], bundles: list[Any]) -> None:
        self.errors: list[LoadFailure] = errors
        self.bundles: list[Any] = bundles
        noun = "error" if len(errors) == 1 else "errors"
        super().__init__(f"{len(errors)} {noun} while loading resources")

    def __str__(self) -> str:
        lines = [str(self.args[0])]
        lines.extend(f"  {failure}" for failure in self.errors)
        return "\n".join(lines)
