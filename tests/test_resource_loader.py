"""Tests for the resource_loader module."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import pytest

from resourcetree.decoder import ResourceBundle
from resourcetree.errors import ResourceLoadErrors, ResourceNotFoundError, ResourceParseError
from resourcetree.resource_loader import (
    ErrorPolicy,
    LoaderConfig,
    ResourceLoader,
    iter_resource_files,
    load_from_files_and_dirs,
)


def _write(path: Path, name: str, kind: str = "Gateway") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"kind: {kind}\nmetadata:\n  name: {name}\n")
    return path


def _names(bundles: list[ResourceBundle]) -> list[str]:
    return [doc["metadata"]["name"] for b in bundles for doc in b.documents]


class RecordingDecoder:
    """Decoder that records which inputs it saw."""

    def __init__(self) -> None:
        self.seen: list[bytes] = []

    def __call__(self, data: bytes) -> ResourceBundle:
        self.seen.append(data)
        return ResourceBundle(documents=[{"raw": data.decode()}])


def test_load_file(tmp_path: Path):
    f = _write(tmp_path / "gw.yaml", "eg")

    bundle = ResourceLoader().load_file(f)
    assert bundle.source == f
    assert bundle.kinds == ["Gateway"]
    assert bundle.documents[0]["metadata"]["name"] == "eg"


def test_load_file_multi_document(tmp_path: Path):
    f = tmp_path / "all.yaml"
    f.write_text("kind: Gateway\n---\nkind: HTTPRoute\n---\n")

    bundle = ResourceLoader().load_file(str(f))
    assert bundle.kinds == ["Gateway", "HTTPRoute"]
    assert len(bundle) == 2


def test_load_file_missing(tmp_path: Path):
    missing = tmp_path / "nope.yaml"
    with pytest.raises(ResourceNotFoundError) as exc:
        ResourceLoader().load_file(missing)
    assert exc.value.path == missing
    assert str(missing) in str(exc.value)
    assert isinstance(exc.value, FileNotFoundError)


def test_load_file_directory_is_io_error(tmp_path: Path):
    with pytest.raises(OSError) as exc:
        ResourceLoader().load_file(tmp_path)
    assert not isinstance(exc.value, ResourceNotFoundError)


def test_load_file_parse_error_carries_path(tmp_path: Path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("kind: [unclosed\n")

    with pytest.raises(ResourceParseError) as exc:
        ResourceLoader().load_file(bad)
    assert exc.value.path == bad
    assert str(bad) in str(exc.value)


def test_load_file_custom_decoder_error_propagates_unchanged(tmp_path: Path):
    f = _write(tmp_path / "gw.yaml", "eg")
    original = ResourceParseError("nope", path="/elsewhere.yaml")

    def decoder(data: bytes) -> ResourceBundle:
        raise original

    with pytest.raises(ResourceParseError) as exc:
        ResourceLoader(LoaderConfig(decoder=decoder)).load_file(f)
    assert exc.value is original
    assert exc.value.path == Path("/elsewhere.yaml")


def test_load_file_decoder_returning_plain_object(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    f = _write(tmp_path / "gw.yaml", "eg")
    sentinel = object()

    caplog.set_level(logging.DEBUG, logger="resourcetree")
    result = ResourceLoader(LoaderConfig(decoder=lambda data: sentinel)).load_file(f)
    assert result is sentinel
    assert str(f) in caplog.text


def test_load_directory_skips_hidden(tmp_path: Path):
    """Files under hidden directories are never decoded."""
    a = tmp_path / "a"
    _write(a / "x.yaml", "x")
    _write(a / ".hidden" / "y.yaml", "y")
    _write(a / "b" / "z.yaml", "z")
    _write(a / ".dotfile.yaml", "dot")

    decoder = RecordingDecoder()
    bundles = ResourceLoader(LoaderConfig(decoder=decoder)).load_directory(a)

    sources = sorted(b.source.relative_to(a).as_posix() for b in bundles if b.source)
    assert sources == ["b/z.yaml", "x.yaml"]
    assert len(decoder.seen) == 2
    assert not any(b"name: y" in d or b"name: dot" in d for d in decoder.seen)


def test_load_directory_missing_raises(tmp_path: Path):
    with pytest.raises(OSError):
        ResourceLoader().load_directory(tmp_path / "missing")


def test_load_directory_fails_fast(tmp_path: Path):
    _write(tmp_path / "good.yaml", "good")
    (tmp_path / "bad.yaml").write_text("- just\n- a list\n")

    with pytest.raises(ResourceParseError):
        ResourceLoader().load_directory(tmp_path)


def test_iter_directory_is_lazy(tmp_path: Path):
    for i in range(3):
        _write(tmp_path / f"r{i}.yaml", f"r{i}")

    decoder = RecordingDecoder()
    it = ResourceLoader(LoaderConfig(decoder=decoder)).iter_directory(tmp_path)
    assert decoder.seen == []
    next(it)
    assert len(decoder.seen) == 1


def test_traversal_depth_first(tmp_path: Path):
    """Each subdirectory is exhausted before the walk moves to a sibling."""
    for sub in ["b", "c", "d"]:
        for i in range(3):
            _write(tmp_path / sub / f"f{i}.yaml", f"{sub}{i}")
        _write(tmp_path / sub / "deeper" / "g.yaml", f"{sub}-deep")
    _write(tmp_path / "top.yaml", "top")

    found = [p.relative_to(tmp_path).parts[0] for p in iter_resource_files(tmp_path)]
    assert len(found) == 13
    for sub in ["b", "c", "d"]:
        positions = [i for i, first in enumerate(found) if first == sub]
        assert positions == list(range(positions[0], positions[0] + 4))


def test_traversal_deeper_than_recursion_limit(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    current = Path("r")
    current.mkdir()
    for _ in range(sys.getrecursionlimit() + 50):
        current = current / "d"
        current.mkdir()
    (current / "leaf.yaml").write_text("kind: Leaf\n")

    bundles = ResourceLoader().load_directory("r")
    assert [b.kinds for b in bundles] == [["Leaf"]]


def test_traversal_exclude_patterns(tmp_path: Path):
    _write(tmp_path / "keep.yaml", "keep")
    _write(tmp_path / "drafts" / "wip.yaml", "wip")
    _write(tmp_path / "sub" / "notes.txt", "notes")
    _write(tmp_path / "sub" / "route.yaml", "route")

    loader = ResourceLoader(LoaderConfig(exclude=["drafts/", "*.txt"]))
    assert sorted(_names(loader.load_directory(tmp_path))) == ["keep", "route"]


def test_traversal_exclude_negation_does_not_reveal_hidden(tmp_path: Path):
    _write(tmp_path / "keep.yaml", "keep")
    _write(tmp_path / ".secret" / "x.yaml", "secret")

    loader = ResourceLoader(LoaderConfig(exclude=["!.secret/"]))
    assert _names(loader.load_directory(tmp_path)) == ["keep"]


def test_traversal_without_excludes_skips_relative_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _write(tmp_path / "a.yaml", "a")
    _write(tmp_path / "sub" / "b.yaml", "b")

    def fail(self: Path, *other: object) -> Path:
        raise AssertionError("relative_to called without an exclude spec")

    monkeypatch.setattr(Path, "relative_to", fail)
    found = sorted(p.name for p in iter_resource_files(tmp_path))
    assert found == ["a.yaml", "b.yaml"]


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
def test_traversal_does_not_descend_symlinked_dirs(tmp_path: Path):
    target = tmp_path / "target"
    _write(target / "x.yaml", "x")
    root = tmp_path / "root"
    root.mkdir()
    (root / "link").symlink_to(target, target_is_directory=True)

    assert list(iter_resource_files(root)) == [root / "link"]


def test_load_files_before_dirs(tmp_path: Path):
    f1 = _write(tmp_path / "explicit" / "one.yaml", "one")
    f2 = _write(tmp_path / "explicit" / "two.yaml", "two")
    d = tmp_path / "dir"
    _write(d / "three.yaml", "three")

    bundles = ResourceLoader().load(files=[f2, f1], dirs=[d])
    assert _names(bundles) == ["two", "one", "three"]


def test_load_missing_file_aborts_everything(tmp_path: Path):
    b = tmp_path / "b"
    _write(b / "ok.yaml", "ok")

    decoder = RecordingDecoder()
    with pytest.raises(ResourceNotFoundError):
        ResourceLoader(LoaderConfig(decoder=decoder)).load(
            files=[tmp_path / "a" / "x.yaml"], dirs=[b]
        )
    assert decoder.seen == []


def test_load_empty_inputs():
    assert ResourceLoader().load([], []) == []


def test_load_from_files_and_dirs(tmp_path: Path):
    f = _write(tmp_path / "gw.yaml", "gw")
    d = tmp_path / "d"
    _write(d / "route.yaml", "route")

    assert _names(load_from_files_and_dirs([str(f)], [str(d)])) == ["gw", "route"]


def test_load_collect_reports_every_failure(tmp_path: Path):
    good = _write(tmp_path / "good.yaml", "good")
    d = tmp_path / "d"
    _write(d / "fine.yaml", "fine")
    (d / "broken.yaml").write_text("kind: [\n")
    missing = tmp_path / "missing.yaml"
    not_a_dir = good

    loader = ResourceLoader(LoaderConfig(error_policy=ErrorPolicy.COLLECT))
    with pytest.raises(ResourceLoadErrors) as exc:
        loader.load(files=[good, missing], dirs=[d, not_a_dir])

    failed = {f.path for f in exc.value.errors}
    assert failed == {missing, d / "broken.yaml", not_a_dir}
    assert sorted(_names(exc.value.bundles)) == ["fine", "good"]
    assert "3 errors" in str(exc.value)


def test_load_collect_without_failures(tmp_path: Path):
    _write(tmp_path / "a.yaml", "a")

    loader = ResourceLoader(LoaderConfig(error_policy=ErrorPolicy.COLLECT))
    assert _names(loader.load([], [tmp_path])) == ["a"]


def test_iter_load_order(tmp_path: Path):
    f = tmp_path / "explicit.yaml"
    d = tmp_path / "d"
    _write(d / "found.yaml", "found")
    _write(d / ".hidden.yaml", "hidden")

    order = list(ResourceLoader().iter_load_order([f], [d]))
    assert order == [f, d / "found.yaml"]
