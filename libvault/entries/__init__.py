from libvault.entries.accessor import EntryAccessor, EntryDownload, EntryNotFoundError, InvalidOperationError
from libvault.entries.lister import EntryLister
from libvault.entries.service import EntryService
from libvault.entries.types import EntryCategory, FileInfo

__all__ = [
    "EntryAccessor",
    "EntryDownload",
    "EntryNotFoundError",
    "InvalidOperationError",
    "EntryLister",
    "EntryService",
    "EntryCategory",
    "FileInfo",
]
