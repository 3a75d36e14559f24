from __future__ import annotations

import mimetypes
import os
import shutil
import stat
from typing import BinaryIO, Iterator

from libvault.core.path_safety import ResolvedPath

_SNIFF_BYTES = 512
_FALLBACK_CONTENT_TYPE = "application/octet-stream"
_ENCODING_CONTENT_TYPES = {
    "gzip": "application/gzip",
    "bzip2": "application/x-bzip2",
    "xz": "application/x-xz",
    "compress": "application/x-compress",
    "br": "application/x-brotli",
}


class InvalidOperationError(RuntimeError):
    pass


class EntryNotFoundError(RuntimeError):
    pass


def sniff_content_type(name: str, head: bytes) -> str:
    guessed, encoding = mimetypes.guess_type(name, strict=False)
    # notes.txt.gz is served as the compressed bytes, not as text.
    if encoding is not None:
        return _ENCODING_CONTENT_TYPES.get(encoding, _FALLBACK_CONTENT_TYPE)
    if guessed is not None:
        return guessed
    if b"\x00" in head:
        return _FALLBACK_CONTENT_TYPE
    try:
        head.decode("utf-8")
    except UnicodeDecodeError as exc:
        # Only a multi-byte sequence cut by the sniff window is still text.
        truncated = len(head) == _SNIFF_BYTES and exc.reason == "unexpected end of data"
        if not truncated:
            return _FALLBACK_CONTENT_TYPE
    return "text/plain"


class EntryDownload:
    """An open file plus the metadata needed to serve it.

    The handle is closed when ``iter_chunks`` finishes or is closed early,
    when the object is used as a context manager, or on ``close()``.
    """

    def __init__(self, handle: BinaryIO, *, filename: str, content_type: str, size: int):
        self._handle = handle
        self.filename = filename
        self.content_type = content_type
        self.size = size

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def iter_chunks(self, chunk_size: int) -> Iterator[bytes]:
        try:
            while True:
                chunk = self._handle.read(chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            self.close()

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()

    def __enter__(self) -> "EntryDownload":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class EntryAccessor:
    def open(self, resolved: ResolvedPath) -> EntryDownload:
        if resolved.is_root:
            raise InvalidOperationError("The library root folder cannot be downloaded")

        try:
            handle = open(resolved.path, "rb")
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError) as exc:
            raise EntryNotFoundError(f"Entry not found: {resolved.relative}") from exc

        try:
            file_stat = os.fstat(handle.fileno())
            if not stat.S_ISREG(file_stat.st_mode):
                raise EntryNotFoundError(f"Entry not found: {resolved.relative}")
            head = handle.read(_SNIFF_BYTES)
            handle.seek(0)
        except BaseException:
            handle.close()
            raise

        return EntryDownload(
            handle,
            filename=resolved.name,
            content_type=sniff_content_type(resolved.name, head),
            size=int(file_stat.st_size),
        )

    def remove(self, resolved: ResolvedPath) -> bool:
        """Delete a file or a whole directory tree.

        Returns False when there was nothing to delete. A failing recursive
        delete leaves the tree partially removed and re-raises.
        """
        if resolved.is_root:
            raise InvalidOperationError("The library root folder cannot be deleted")

        try:
            entry_stat = os.lstat(resolved.path)
        except (FileNotFoundError, NotADirectoryError):
            return False

        if stat.S_ISDIR(entry_stat.st_mode):
            shutil.rmtree(resolved.path)
        else:
            try:
                os.unlink(resolved.path)
            except FileNotFoundError:
                return False
        return True
