from __future__ import annotations

from pathlib import Path

import pytest

from libvault.core.path_safety import PathTraversalError, resolve_under_root


@pytest.mark.parametrize(
    "raw_path",
    [
        "..",
        "../evil.bin",
        "/../evil.bin",
        "nested/../../escape.bin",
        "a/b/../../../escape.bin",
        "../library-other/file.txt",
        "..//..//etc/passwd",
        "bad\x00name.txt",
    ],
)
def test_resolve_rejects_paths_escaping_root(raw_path: str) -> None:
    with pytest.raises(PathTraversalError):
        resolve_under_root("/srv/library", raw_path)


@pytest.mark.parametrize("raw_path", ["", "/", ".", "./", "sub/..", "//"])
def test_resolve_maps_root_like_paths_to_root(raw_path: str) -> None:
    resolved = resolve_under_root("/srv/library", raw_path)
    assert resolved.is_root
    assert resolved.path == Path("/srv/library")
    assert resolved.relative == "/"


def test_resolve_none_is_root() -> None:
    assert resolve_under_root("/srv/library", None).is_root


@pytest.mark.parametrize(
    ("raw_path", "expected"),
    [
        ("sub/foo.txt", "/srv/library/sub/foo.txt"),
        ("/sub/foo.txt", "/srv/library/sub/foo.txt"),
        ("sub/./foo.txt", "/srv/library/sub/foo.txt"),
        ("sub/deeper/../foo.txt", "/srv/library/sub/foo.txt"),
        ("sub/", "/srv/library/sub"),
        ("~/notes.txt", "/srv/library/~/notes.txt"),
    ],
)
def test_resolve_keeps_paths_inside_root(raw_path: str, expected: str) -> None:
    resolved = resolve_under_root("/srv/library", raw_path)
    assert resolved.path == Path(expected)
    assert not resolved.is_root


def test_resolve_does_not_confuse_sibling_with_same_prefix() -> None:
    with pytest.raises(PathTraversalError):
        resolve_under_root("/srv/library", "../libraryfoo/secret.txt")


def test_resolve_normalizes_root_with_trailing_slash() -> None:
    resolved = resolve_under_root("/srv/library/", "sub/foo.txt")
    assert resolved.root == Path("/srv/library")
    assert resolved.relative == "/sub/foo.txt"
    assert resolved.name == "foo.txt"


def test_resolve_requires_absolute_root() -> None:
    with pytest.raises(PathTraversalError):
        resolve_under_root("relative/root", "file.txt")


def test_resolve_needs_no_filesystem_access(tmp_path: Path) -> None:
    missing_root = tmp_path / "does-not-exist"
    resolved = resolve_under_root(missing_root, "a/b/c.txt")
    assert resolved.path == missing_root / "a" / "b" / "c.txt"
    assert not missing_root.exists()
