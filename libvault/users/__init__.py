from libvault.users.service import (
    UsernameTakenError,
    UserNotFoundError,
    UserPolicyError,
    UserService,
)
from libvault.users.types import UserPage, UserSnapshot

__all__ = [
    "UserNotFoundError",
    "UserPage",
    "UserPolicyError",
    "UserService",
    "UserSnapshot",
    "UsernameTakenError",
]
