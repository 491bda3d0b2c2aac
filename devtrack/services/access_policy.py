# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Access policy: every authorization decision for projects and tickets.

Pure functions over snapshots the caller already fetched; nothing here
touches the store. Services call ``authorize`` with the decision so that
a denial always surfaces as ``AuthorizationError``.

Principal of a project: its creator or any current team member. The
creator is authorized even if not literally in ``team_members``.
"""
from typing import Optional

from devtrack.core.errors import AuthorizationError
from devtrack.metrics import ACCESS_DENIED
from devtrack.models.domain import Project, Ticket


def is_valid_project_principal(user_id: Optional[str], project: Project) -> bool:
    if not user_id:
        return False
    return user_id == project.created_by or user_id in project.team_members


def can_access_project(actor: str, project: Project) -> bool:
    return is_valid_project_principal(actor, project)


def can_modify_project(actor: str, project: Project) -> bool:
    """Owner-only: field updates, delete, member add/remove."""
    return actor == project.created_by


def can_remove_member(actor: str, project: Project, target_user: str) -> bool:
    # The owner can never be removed, not even by themself.
    return can_modify_project(actor, project) and target_user != project.created_by


def can_access_ticket(actor: str, project: Project) -> bool:
    return can_access_project(actor, project)


def can_create_ticket(actor: str, project: Project) -> bool:
    return can_access_project(actor, project)


def can_mutate_ticket(actor: str, project: Project, ticket: Ticket) -> bool:
    return can_access_project(actor, project) or actor == ticket.created_by


def can_delete_ticket(actor: str, project: Optional[Project], ticket: Ticket) -> bool:
    """Narrower than mutate: plain members may not delete others' tickets.

    ``project`` may be None for a ticket whose project was deleted (there is
    no cascade); its creator can still clean it up.
    """
    if project is not None and actor == project.created_by:
        return True
    return actor == ticket.created_by


def can_comment(actor: str, project: Project) -> bool:
    return can_access_project(actor, project)


def authorize(allowed: bool, reason: str, operation: str = "unspecified") -> None:
    """Raise ``AuthorizationError(reason)`` unless ``allowed``."""
    if not allowed:
        ACCESS_DENIED.labels(operation=operation).inc()
        raise AuthorizationError(reason)
