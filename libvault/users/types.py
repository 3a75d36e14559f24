from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UserSnapshot:
    id: int
    username: str
    first_name: str
    last_name: str
    is_admin: bool


@dataclass(slots=True)
class UserPage:
    elements: list[UserSnapshot]
    total_elements: int
