from __future__ import annotations

import mimetypes
import os
import stat
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath

from libvault.core.path_safety import ResolvedPath
from libvault.entries.types import EntryCategory, FileInfo

_DOCUMENT_EXTENSIONS = {
    ".txt",
    ".md",
    ".pdf",
    ".doc",
    ".docx",
    ".odt",
    ".rtf",
    ".csv",
    ".xls",
    ".xlsx",
    ".ods",
    ".ppt",
    ".pptx",
    ".epub",
    ".mobi",
    ".json",
    ".xml",
    ".html",
}
_ARCHIVE_EXTENSIONS = {
    ".zip",
    ".tar",
    ".gz",
    ".tgz",
    ".bz2",
    ".xz",
    ".7z",
    ".rar",
    ".zst",
}


def categorize(name: str, *, is_directory: bool) -> EntryCategory:
    if is_directory:
        return EntryCategory.FOLDER

    extension = PurePosixPath(name).suffix.lower()
    if extension in _DOCUMENT_EXTENSIONS:
        return EntryCategory.DOCUMENT
    if extension in _ARCHIVE_EXTENSIONS:
        return EntryCategory.ARCHIVE

    guessed, _ = mimetypes.guess_type(name, strict=False)
    if guessed is None:
        return EntryCategory.BINARY
    major = guessed.split("/", 1)[0]
    if major == "image":
        return EntryCategory.IMAGE
    if major == "video":
        return EntryCategory.VIDEO
    if major == "audio":
        return EntryCategory.AUDIO
    if major == "text":
        return EntryCategory.DOCUMENT
    return EntryCategory.BINARY


def _to_file_info(name: str, parent: str, stat_result: os.stat_result) -> FileInfo:
    is_directory = stat.S_ISDIR(stat_result.st_mode)
    return FileInfo(
        name=name,
        parent=parent,
        is_directory=is_directory,
        size=0 if is_directory else int(stat_result.st_size),
        modified_at=datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc),
        category=categorize(name, is_directory=is_directory),
    )


def _stat_or_none(path: Path) -> os.stat_result | None:
    try:
        return path.stat()
    except (FileNotFoundError, NotADirectoryError):
        return None


class EntryLister:
    """Builds fresh, name-sorted views of entries under a library root.

    Nothing is cached: every call re-reads the filesystem, so a listing that
    races with external changes may be partial.
    """

    def list(self, resolved: ResolvedPath) -> list[FileInfo]:
        own_stat = _stat_or_none(resolved.path)
        if own_stat is None:
            return []
        if not stat.S_ISDIR(own_stat.st_mode):
            return [_to_file_info(resolved.name, self._parent_of(resolved), own_stat)]

        parent = resolved.relative
        items: list[FileInfo] = []
        with os.scandir(resolved.path) as iterator:
            for child in iterator:
                try:
                    child_stat = child.stat()
                except FileNotFoundError:
                    # Removed between enumeration and stat.
                    continue
                items.append(_to_file_info(child.name, parent, child_stat))

        items.sort(key=lambda item: item.name)
        return items

    def describe(self, resolved: ResolvedPath) -> list[FileInfo]:
        if resolved.is_root:
            return []
        own_stat = _stat_or_none(resolved.path)
        if own_stat is None:
            return []
        return [_to_file_info(resolved.name, self._parent_of(resolved), own_stat)]

    def _parent_of(self, resolved: ResolvedPath) -> str:
        return PurePosixPath(resolved.relative).parent.as_posix()
