from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from libvault.db.models import LibraryType
from libvault.users.types import UserSnapshot


@dataclass(frozen=True)
class LibrarySnapshot:
    id: int
    name: str
    type: LibraryType
    root_folder: Path
    owner_id: int | None


@dataclass(slots=True)
class LibrarySummary:
    id: int
    name: str
    type: LibraryType
    can_write: bool


@dataclass(slots=True)
class LibraryShareSnapshot:
    user: UserSnapshot
    can_write: bool


@dataclass(slots=True)
class LibraryDetails:
    library: LibrarySnapshot
    shared_with: list[LibraryShareSnapshot]


@dataclass(slots=True)
class LibraryPage:
    elements: list[LibrarySummary]
    total_elements: int
