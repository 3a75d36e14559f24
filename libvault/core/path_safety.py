from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


class PathTraversalError(ValueError):
    pass


@dataclass(frozen=True)
class ResolvedPath:
    """An absolute path proven to lie within ``root``.

    Only :func:`resolve_under_root` builds these; everything that touches the
    filesystem on behalf of a library takes one instead of a raw string.
    """

    root: Path
    path: Path

    @property
    def is_root(self) -> bool:
        return self.path == self.root

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def relative(self) -> str:
        if self.is_root:
            return "/"
        return "/" + self.path.relative_to(self.root).as_posix()


def _canonical(raw: str) -> Path:
    return Path(os.path.normpath(raw))


def resolve_under_root(root_folder: str | Path, user_path: str | None) -> ResolvedPath:
    raw_root = os.fspath(root_folder)
    if not os.path.isabs(raw_root):
        raise PathTraversalError("Library root must be absolute")
    root = _canonical(raw_root)

    raw_path = user_path or ""
    if "\x00" in raw_path:
        raise PathTraversalError("Path contains a NUL byte")

    # Leading separators are relative to the library root, not the host root.
    candidate = _canonical(os.path.join(root, raw_path.lstrip("/")))

    if candidate == root or root in candidate.parents:
        return ResolvedPath(root=root, path=candidate)

    raise PathTraversalError("Path escapes library root")
