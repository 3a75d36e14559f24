from libvault.libraries.access import (
    AccessDeniedError,
    AccessGate,
    AccessRight,
    DatabaseAccessGate,
    is_owner_or_admin,
    require_access,
)
from libvault.libraries.service import LibraryNotFoundError, LibraryPolicyError, LibraryService
from libvault.libraries.types import (
    LibraryDetails,
    LibraryPage,
    LibraryShareSnapshot,
    LibrarySnapshot,
    LibrarySummary,
)

__all__ = [
    "AccessDeniedError",
    "AccessGate",
    "AccessRight",
    "DatabaseAccessGate",
    "is_owner_or_admin",
    "require_access",
    "LibraryNotFoundError",
    "LibraryPolicyError",
    "LibraryService",
    "LibraryDetails",
    "LibraryPage",
    "LibraryShareSnapshot",
    "LibrarySnapshot",
    "LibrarySummary",
]
