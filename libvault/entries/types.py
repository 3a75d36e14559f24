from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class EntryCategory(str, Enum):
    FOLDER = "Folder"
    DOCUMENT = "Document"
    IMAGE = "Image"
    VIDEO = "Video"
    AUDIO = "Audio"
    ARCHIVE = "Archive"
    BINARY = "Binary"


@dataclass(frozen=True)
class FileInfo:
    name: str
    parent: str
    is_directory: bool
    size: int
    modified_at: datetime
    category: EntryCategory
