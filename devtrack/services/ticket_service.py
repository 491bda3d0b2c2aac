# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Business logic for tickets and their comment logs.

Every mutation runs fetch -> authorize -> validate -> persist -> broadcast.
Room events go to the ticket's project id:
    ticket_created, ticket_updated, ticket_deleted, comment_added
"""
import uuid
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic.alias_generators import to_camel
from starlette.concurrency import run_in_threadpool

from devtrack.core.errors import InvalidOperationError, NotFoundError
from devtrack.core.logging import get_logger
from devtrack.metrics import COMMENTS_ADDED, TICKET_MUTATIONS, TICKETS_CREATED
from devtrack.models.domain import (
    Comment, Priority, Project, Status, Ticket, TicketType, utcnow,
)
from devtrack.repositories.project_repository import ProjectRepository
from devtrack.repositories.ticket_repository import TicketRepository
from devtrack.repositories.user_repository import UserRepository
from devtrack.schemas import MessageResponse
from devtrack.schemas.ticket import (
    CommentCreate, CommentOut, TicketCreate, TicketOut, TicketUpdate,
)
from devtrack.services import access_policy as policy
from devtrack.services.event_relay import EventRelay

logger = get_logger(__name__)

NOT_A_MEMBER = "Access denied: Not a member of this project."


class TicketService:
    def __init__(
        self,
        user_repo: UserRepository,
        project_repo: ProjectRepository,
        ticket_repo: TicketRepository,
        relay: EventRelay,
    ) -> None:
        self._users = user_repo
        self._projects = project_repo
        self._tickets = ticket_repo
        self._relay = relay

    # ── Reads ──

    async def list_tickets(self, actor: str) -> List[TicketOut]:
        """Every ticket of every project the actor can see."""
        projects = await run_in_threadpool(self._projects.list_for_user, actor)
        tickets = await run_in_threadpool(self._tickets.list_by_projects, [p.id for p in projects])
        return await self._render_many(tickets)

    async def list_project_tickets(self, actor: str, project_id: str) -> List[TicketOut]:
        project = await self._load_project(project_id)
        policy.authorize(policy.can_access_project(actor, project), NOT_A_MEMBER, "list_tickets")
        tickets = await run_in_threadpool(self._tickets.list_by_project, project_id)
        return await self._render_many(tickets)

    async def get_ticket(self, actor: str, ticket_id: str) -> TicketOut:
        ticket, project = await self._load_with_project(ticket_id)
        policy.authorize(policy.can_access_ticket(actor, project), NOT_A_MEMBER, "get_ticket")
        return await self._render(ticket)

    # ── Writes ──

    async def create_ticket(self, actor: str, body: TicketCreate) -> TicketOut:
        project = await self._load_project(body.project_id)
        policy.authorize(policy.can_create_ticket(actor, project), NOT_A_MEMBER, "create_ticket")

        reporter = body.reporter or actor
        if body.assignee:
            await self._check_principal(body.assignee, project, "Assignee")
        await self._check_principal(reporter, project, "Reporter")

        now = utcnow()
        ticket = Ticket(
            id=str(uuid.uuid4()),
            project_id=project.id,
            title=body.title,
            description=body.description,
            priority=body.priority or Priority.MEDIUM,
            status=body.status or Status.TODO,
            type=body.type or TicketType.TASK,
            tags=body.tags,
            assignee=body.assignee,
            due_date=body.due_date,
            reporter=reporter,
            created_by=actor,
            created_at=now,
            updated_at=now,
        )
        await run_in_threadpool(self._tickets.create, ticket)
        TICKETS_CREATED.labels(type=ticket.type.value, priority=ticket.priority.value).inc()
        logger.info("Ticket created id=%s project=%s by=%s", ticket.id, project.id, actor)

        rendered = await self._render(ticket)
        await self._emit("ticket_created", ticket, actor, ticket=rendered.to_wire())
        return rendered

    async def update_ticket(self, actor: str, ticket_id: str, body: TicketUpdate) -> TicketOut:
        ticket, project = await self._load_with_project(ticket_id)
        policy.authorize(
            policy.can_mutate_ticket(actor, project, ticket), NOT_A_MEMBER, "update_ticket"
        )

        changes = body.changes()
        # Cross-references are only re-checked when the client sent them.
        if changes.get("assignee") is not None:
            await self._check_principal(changes["assignee"], project, "Assignee")
        if "reporter" in changes:
            await self._check_principal(changes["reporter"], project, "Reporter")

        updated = await run_in_threadpool(self._tickets.update_fields, ticket_id, changes, utcnow())
        if updated is None:
            raise NotFoundError("Ticket not found")
        TICKET_MUTATIONS.labels(action="update").inc()
        logger.info("Ticket updated id=%s fields=%s by=%s", ticket_id, sorted(changes), actor)

        rendered = await self._render(updated)
        await self._emit(
            "ticket_updated", updated, actor,
            changes=sorted(to_camel(f) for f in changes),
            ticket=rendered.to_wire(),
        )
        return rendered

    async def assign_ticket(self, actor: str, ticket_id: str, assignee_id: Optional[str]) -> TicketOut:
        return await self.update_ticket(actor, ticket_id, TicketUpdate(assignee=assignee_id))

    async def delete_ticket(self, actor: str, ticket_id: str) -> MessageResponse:
        ticket = await self._load_ticket(ticket_id)
        project = await run_in_threadpool(self._projects.get, ticket.project_id)
        policy.authorize(
            policy.can_delete_ticket(actor, project, ticket),
            "Access denied: You must be the project creator or ticket creator to delete this ticket.",
            "delete_ticket",
        )
        await run_in_threadpool(self._tickets.delete, ticket_id)
        TICKET_MUTATIONS.labels(action="delete").inc()
        logger.info("Ticket deleted id=%s by=%s", ticket_id, actor)

        await self._emit("ticket_deleted", ticket, actor)
        return MessageResponse(message="Ticket deleted successfully")

    async def add_comment(self, actor: str, ticket_id: str, body: CommentCreate) -> CommentOut:
        ticket, project = await self._load_with_project(ticket_id)
        policy.authorize(policy.can_comment(actor, project), NOT_A_MEMBER, "add_comment")

        comment = Comment(id=str(uuid.uuid4()), author=actor, text=body.text, timestamp=utcnow())
        await run_in_threadpool(self._tickets.append_comment, ticket_id, comment)
        COMMENTS_ADDED.inc()
        logger.info("Comment added ticket=%s by=%s", ticket_id, actor)

        users = await run_in_threadpool(self._users.get_summaries, [actor])
        rendered = self._comment_out(comment, users)
        await self._emit("comment_added", ticket, actor, comment=rendered.to_wire())
        return rendered

    # ── Helpers ──

    async def _load_ticket(self, ticket_id: str) -> Ticket:
        ticket = await run_in_threadpool(self._tickets.get, ticket_id)
        if ticket is None:
            raise NotFoundError("Ticket not found")
        return ticket

    async def _load_project(self, project_id: str) -> Project:
        project = await run_in_threadpool(self._projects.get, project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    async def _load_with_project(self, ticket_id: str) -> Tuple[Ticket, Project]:
        ticket = await self._load_ticket(ticket_id)
        return ticket, await self._load_project(ticket.project_id)

    async def _check_principal(self, user_id: str, project: Project, label: str) -> None:
        user = await run_in_threadpool(self._users.get, user_id)
        if user is None:
            raise NotFoundError(f"{label} user not found.")
        if not policy.is_valid_project_principal(user_id, project):
            raise InvalidOperationError(f"{label} must be a member of the project team.")

    async def _emit(self, event: str, source: Ticket, actor: str, **extra: Any) -> None:
        payload = {"ticketId": source.id, "projectId": source.project_id, "actor": actor, **extra}
        await self._relay.broadcast(source.project_id, event, payload)

    async def _render(self, ticket: Ticket) -> TicketOut:
        return (await self._render_many([ticket]))[0]

    async def _render_many(self, tickets: Iterable[Ticket]) -> List[TicketOut]:
        tickets = list(tickets)
        user_ids = set()
        for t in tickets:
            user_ids.update({t.assignee, t.reporter, t.created_by})
            user_ids.update(c.author for c in t.comments)
        users = await run_in_threadpool(self._users.get_summaries, user_ids)
        projects = await run_in_threadpool(self._projects.get_titles, [t.project_id for t in tickets])
        return [
            TicketOut(
                id=t.id,
                project_id=t.project_id,
                project=projects.get(t.project_id),
                title=t.title,
                description=t.description,
                priority=t.priority,
                status=t.status,
                type=t.type,
                tags=t.tags,
                assignee=users.get(t.assignee) if t.assignee else None,
                due_date=t.due_date,
                reporter=users.get(t.reporter),
                created_by=users.get(t.created_by),
                comments=[self._comment_out(c, users) for c in t.comments],
                created_at=t.created_at,
                updated_at=t.updated_at,
            )
            for t in tickets
        ]

    @staticmethod
    def _comment_out(comment: Comment, users: Dict[str, Dict[str, Any]]) -> CommentOut:
        return CommentOut(
            id=comment.id,
            author=users.get(comment.author),
            text=comment.text,
            timestamp=comment.timestamp,
        )
