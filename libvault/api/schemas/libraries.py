from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from libvault.api.schemas.users import UserResponse
from libvault.db.models import LibraryType


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LibrarySummaryResponse(_CamelModel):
    id: int
    name: str
    type: LibraryType
    can_write: bool


class LibraryPageResponse(_CamelModel):
    elements: list[LibrarySummaryResponse]
    total_elements: int


class LibraryResponse(_CamelModel):
    id: int
    name: str
    type: LibraryType
    root_folder: str


class ShareResponse(_CamelModel):
    can_write: bool
    user: UserResponse


class LibraryDetailsResponse(LibraryResponse):
    shared_with: list[ShareResponse]


class CreateLibraryRequest(_CamelModel):
    name: str = Field(min_length=1, max_length=255)
    type: LibraryType = LibraryType.GENERIC
    root_folder: str = Field(min_length=1)


class UpdateLibraryRequest(_CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)


class ShareLibraryRequest(_CamelModel):
    user_id: int
    can_write: bool = False
