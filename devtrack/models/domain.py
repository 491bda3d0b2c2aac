# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models: pure data structures, NO FastAPI dependency.

These are the snapshots the repositories return and the access policy
decides on. Field names are snake_case; the wire format lives in
``devtrack.schemas``.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Status(str, Enum):
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class TicketType(str, Enum):
    BUG = "Bug"
    FEATURE = "Feature"
    TASK = "Task"


class User(BaseModel):
    id: str
    name: str
    email: str
    password_hash: str = Field(repr=False)
    role: str
    created_at: str


class Project(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    created_by: str
    team_members: list[str] = []
    created_at: str
    updated_at: str

    def principals(self) -> set[str]:
        """Owner plus every current member."""
        return {self.created_by, *self.team_members}


class Comment(BaseModel):
    id: str
    author: str
    text: str
    timestamp: str


class Ticket(BaseModel):
    id: str
    project_id: str
    title: str
    description: str
    priority: Priority = Priority.MEDIUM
    status: Status = Status.TODO
    type: TicketType = TicketType.TASK
    tags: list[str] = []
    assignee: Optional[str] = None
    due_date: Optional[str] = None
    reporter: str
    created_by: str
    comments: list[Comment] = []
    created_at: str
    updated_at: str


# Fields a client may change after creation. Everything else on a ticket
# (project_id, created_by, comments, timestamps) is server-owned.
PROJECT_MUTABLE_FIELDS: frozenset[str] = frozenset({"title", "description"})
TICKET_MUTABLE_FIELDS: frozenset[str] = frozenset({
    "title", "description", "priority", "status", "type", "tags",
    "assignee", "reporter", "due_date",
})
