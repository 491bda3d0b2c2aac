# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas: API contract definitions.

Field names are snake_case in Python and camelCase on the wire.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict:
        """JSON-ready dict with camelCase keys, as sent over HTTP and sockets."""
        return self.model_dump(mode="json", by_alias=True)


class UserSummary(CamelModel):
    id: str
    name: str
    email: str


class ProjectSummary(CamelModel):
    id: str
    title: str


class MessageResponse(CamelModel):
    message: str


class ErrorResponse(CamelModel):
    error: str
    message: str
    detail: Optional[str] = None
