# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Project request/response schemas.

Only allow-listed fields are read from requests; ``createdBy``,
``teamMembers`` and ``id`` are server-assigned and silently dropped.
"""
from typing import Optional

from pydantic import Field, field_validator

from devtrack.schemas import CamelModel, UserSummary


class ProjectCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be blank")
        return v


class ProjectUpdate(CamelModel):
    """Partial update; only fields present in the body are applied."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            raise ValueError("title cannot be blank")
        return v.strip()


class MemberAdd(CamelModel):
    email: str = Field(..., min_length=1, max_length=320)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()


class ProjectOut(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    created_by: Optional[UserSummary] = None
    team_members: list[UserSummary] = []
    created_at: str
    updated_at: str
