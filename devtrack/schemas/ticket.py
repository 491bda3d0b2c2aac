# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Ticket and comment request/response schemas."""
from datetime import date, datetime
from typing import Optional

from pydantic import Field, field_validator

from devtrack.models.domain import Priority, Status, TicketType
from devtrack.schemas import CamelModel, ProjectSummary, UserSummary


def _clean_tags(tags: Optional[list[str]]) -> list[str]:
    seen: list[str] = []
    for tag in tags or []:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def _iso_date(v: Optional[str]) -> Optional[str]:
    """Accept ``YYYY-MM-DD`` or a full ISO-8601 timestamp; blank clears."""
    v = _blank_to_none(v)
    if v is None:
        return None
    try:
        if len(v) == 10:
            return date.fromisoformat(v).isoformat()
        return datetime.fromisoformat(v.replace("Z", "+00:00")).isoformat()
    except ValueError:
        raise ValueError("dueDate must be an ISO-8601 date")


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


class TicketCreate(CamelModel):
    project_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=300)
    description: str = Field(..., min_length=1, max_length=20000)
    priority: Optional[Priority] = None
    status: Optional[Status] = None
    type: Optional[TicketType] = None
    tags: list[str] = []
    assignee: Optional[str] = None
    reporter: Optional[str] = None
    due_date: Optional[str] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be blank")
        return v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str]) -> list[str]:
        return _clean_tags(v)

    @field_validator("assignee", "reporter")
    @classmethod
    def blank_reference(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @field_validator("due_date")
    @classmethod
    def parse_due_date(cls, v: Optional[str]) -> Optional[str]:
        return _iso_date(v)


class TicketUpdate(CamelModel):
    """Typed partial update.

    ``projectId``, ``createdBy``, ``comments`` and timestamps are not
    fields here, so a naive client echoing a whole ticket back is accepted
    and those keys are dropped.
    """
    title: Optional[str] = Field(default=None, max_length=300)
    description: Optional[str] = Field(default=None, max_length=20000)
    priority: Optional[Priority] = None
    status: Optional[Status] = None
    type: Optional[TicketType] = None
    tags: Optional[list[str]] = None
    assignee: Optional[str] = None
    reporter: Optional[str] = None
    due_date: Optional[str] = None

    @field_validator("title", "description")
    @classmethod
    def required_text(cls, v: Optional[str], info) -> str:
        if v is None or not v.strip():
            raise ValueError(f"{info.field_name} cannot be blank")
        return v.strip() if info.field_name == "title" else v

    @field_validator("priority", "status", "type")
    @classmethod
    def enum_not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: Optional[list[str]]) -> list[str]:
        return _clean_tags(v)

    @field_validator("assignee")
    @classmethod
    def blank_assignee(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @field_validator("due_date")
    @classmethod
    def parse_due_date(cls, v: Optional[str]) -> Optional[str]:
        return _iso_date(v)

    @field_validator("reporter")
    @classmethod
    def reporter_required(cls, v: Optional[str]) -> str:
        v = _blank_to_none(v)
        if v is None:
            raise ValueError("reporter cannot be empty")
        return v

    def changes(self) -> dict:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class AssignRequest(CamelModel):
    assignee_id: Optional[str] = None


class CommentCreate(CamelModel):
    text: str = Field(..., max_length=10000)

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Comment text cannot be empty")
        return v


class CommentOut(CamelModel):
    id: str
    author: Optional[UserSummary] = None
    text: str
    timestamp: str


class TicketOut(CamelModel):
    id: str
    project_id: str
    project: Optional[ProjectSummary] = None
    title: str
    description: str
    priority: Priority
    status: Status
    type: TicketType
    tags: list[str] = []
    assignee: Optional[UserSummary] = None
    due_date: Optional[str] = None
    reporter: Optional[UserSummary] = None
    created_by: Optional[UserSummary] = None
    comments: list[CommentOut] = []
    created_at: str
    updated_at: str
