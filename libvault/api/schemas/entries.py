from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from libvault.entries.types import EntryCategory, FileInfo


class FileInfoResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    parent: str
    is_directory: bool
    size: int
    modified: datetime = Field(description="Last modification time (ISO-8601)")
    category: EntryCategory


def file_info_to_response(item: FileInfo) -> FileInfoResponse:
    return FileInfoResponse(
        name=item.name,
        parent=item.parent,
        is_directory=item.is_directory,
        size=item.size,
        modified=item.modified_at,
        category=item.category,
    )
