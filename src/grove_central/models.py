"""Wire-format records returned by the central directory API.

These Pydantic models are plain decode targets. Unknown fields sent by the
server are ignored so that additive API changes do not break decoding.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    """Permission level of a membership."""

    NONE = ""
    ADMIN = "admin"
    PARTNER = "partner"
    USER = "user"


class Organization(BaseModel):
    """An organization node. Children are nested by value; there is no parent back-reference."""

    model_config = ConfigDict(extra="ignore")

    id: int = 0
    parent_id: int | None = None
    title: str = ""
    path: str = ""
    realm: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    organizations: list[Organization] = Field(default_factory=list)

    @field_validator("organizations", mode="before")
    @classmethod
    def null_children_to_empty(cls, v: Any) -> Any:
        """Treat a JSON ``null`` child list as no children."""
        if v is None:
            return []
        return v


class Application(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int = 0
    name: str = ""
    write_access: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    organization: Organization | None = None


class User(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int = 0
    name: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    identity_id: int = 0
    admin: bool = False


class Membership(BaseModel):
    """Association of a user to an organization with a role."""

    model_config = ConfigDict(extra="ignore")

    id: int = 0
    # unknown roles are kept as plain strings
    role: Role | str = Field(default=Role.NONE, union_mode="left_to_right")
    created_at: datetime | None = None
    updated_at: datetime | None = None
    organization_id: int = 0
    user: User | None = None
    organization: Organization | None = None

    @field_validator("role", mode="before")
    @classmethod
    def null_role_to_none(cls, v: Any) -> Any:
        """Treat a JSON ``null`` role as no role."""
        if v is None:
            return Role.NONE
        return v
