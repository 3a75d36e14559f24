from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserResponse(_CamelModel):
    id: int
    username: str
    first_name: str
    last_name: str
    is_admin: bool


class UserPageResponse(_CamelModel):
    elements: list[UserResponse]
    total_elements: int


class CreateUserRequest(_CamelModel):
    username: str = Field(min_length=1, max_length=255)
    first_name: str = Field(default="", max_length=255)
    last_name: str = Field(default="", max_length=255)


class UpdateUserRequest(_CamelModel):
    username: str | None = Field(default=None, min_length=1, max_length=255)
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)


class TokenResponse(_CamelModel):
    token: str
