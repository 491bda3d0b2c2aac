# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""Ticket service against the in-memory store with a recording relay."""

import asyncio
import uuid

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from devtrack.core import dependencies
from devtrack.models.domain import Comment, Project, User, utcnow
from devtrack.schemas.ticket import CommentCreate, TicketCreate, TicketUpdate
from devtrack.services.event_relay import Channel, EventRelay
from devtrack.services.ticket_service import TicketService


class RecordingChannel(Channel):
    def __init__(self, channel_id):
        super().__init__(channel_id)
        self.received = []

    async def send(self, event, payload):
        self.received.append((event, payload))


@pytest.fixture
def owner():
    user = User(
        id=str(uuid.uuid4()), name="Alice", email="alice@example.com",
        password_hash="x", role="Team Member", created_at=utcnow(),
    )
    return dependencies._user_repo.create(user)


@pytest.fixture
def project(owner):
    now = utcnow()
    return dependencies._project_repo.create(Project(
        id=str(uuid.uuid4()), title="Sprint", created_by=owner.id,
        team_members=[owner.id], created_at=now, updated_at=now,
    ))


@pytest.fixture
def room(project):
    relay = EventRelay()
    channel = RecordingChannel("watcher")
    relay.register(channel)
    relay.join("watcher", project.id)
    service = TicketService(
        dependencies._user_repo, dependencies._project_repo, dependencies._ticket_repo, relay,
    )
    return service, channel


def new_ticket(project_id, **fields):
    return TicketCreate(project_id=project_id, title="Fix login", description="500 on submit", **fields)


# ============================================
# Events follow successful writes
# ============================================
class TestTicketEvents:
    def test_create_returns_ticket_and_broadcasts_it(self, owner, project, room):
        service, channel = room
        out = asyncio.run(service.create_ticket(owner.id, new_ticket(project.id)))
        assert out.title == "Fix login"
        assert channel.received == [("ticket_created", {
            "ticketId": out.id, "projectId": project.id, "actor": owner.id, "ticket": out.to_wire(),
        })]

    def test_update_broadcasts_changed_fields(self, owner, project, room):
        service, channel = room
        created = asyncio.run(service.create_ticket(owner.id, new_ticket(project.id)))
        updated = asyncio.run(service.update_ticket(
            owner.id, created.id, TicketUpdate(status="Done", due_date="2026-04-01"),
        ))
        assert updated.status.value == "Done"
        event, payload = channel.received[-1]
        assert event == "ticket_updated"
        assert payload["changes"] == ["dueDate", "status"]
        assert payload["ticket"]["dueDate"] == "2026-04-01"

    def test_assign_broadcasts_update(self, owner, project, room):
        service, channel = room
        created = asyncio.run(service.create_ticket(owner.id, new_ticket(project.id)))
        out = asyncio.run(service.assign_ticket(owner.id, created.id, owner.id))
        assert out.assignee.id == owner.id
        assert channel.received[-1][1]["changes"] == ["assignee"]

    def test_comment_broadcasts_comment_only(self, owner, project, room):
        service, channel = room
        created = asyncio.run(service.create_ticket(owner.id, new_ticket(project.id)))
        comment = asyncio.run(service.add_comment(owner.id, created.id, CommentCreate(text="hi")))
        event, payload = channel.received[-1]
        assert event == "comment_added"
        assert payload["comment"] == comment.to_wire()
        assert "ticket" not in payload


# ============================================
# Comment log sequencing
# ============================================
class TestCommentSequence:
    def make_comment(self, author, text):
        return Comment(id=str(uuid.uuid4()), author=author, text=text, timestamp=utcnow())

    def test_duplicate_seq_rejected_by_store(self, owner, project, room):
        service, _ = room
        ticket = asyncio.run(service.create_ticket(owner.id, new_ticket(project.id)))
        repo = dependencies._ticket_repo
        repo.append_comment(ticket.id, self.make_comment(owner.id, "first"))
        with pytest.raises(IntegrityError):
            with dependencies._database.engine.begin() as conn:
                conn.execute(
                    text("""
                        INSERT INTO ticket_comments (id, ticket_id, seq, author, body, created_at)
                        VALUES (:id, :tid, 1, :author, 'dup', :ts)
                    """),
                    {"id": str(uuid.uuid4()), "tid": ticket.id, "author": owner.id, "ts": utcnow()},
                )

    def test_append_retries_after_seq_collision(self, owner, project, room, monkeypatch):
        service, _ = room
        ticket = asyncio.run(service.create_ticket(owner.id, new_ticket(project.id)))
        repo = dependencies._ticket_repo
        real_insert = repo._insert_comment
        attempts = {"n": 0}

        def racing_insert(conn, ticket_id, comment):
            attempts["n"] += 1
            if attempts["n"] == 1:
                raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
            real_insert(conn, ticket_id, comment)

        monkeypatch.setattr(repo, "_insert_comment", racing_insert)
        repo.append_comment(ticket.id, self.make_comment(owner.id, "after race"))

        assert attempts["n"] == 2
        assert [c.text for c in repo.get(ticket.id).comments] == ["after race"]

    def test_append_gives_up_after_repeated_collisions(self, owner, project, room, monkeypatch):
        service, _ = room
        ticket = asyncio.run(service.create_ticket(owner.id, new_ticket(project.id)))
        repo = dependencies._ticket_repo

        def always_collides(conn, ticket_id, comment):
            raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        monkeypatch.setattr(repo, "_insert_comment", always_collides)
        with pytest.raises(IntegrityError):
            repo.append_comment(ticket.id, self.make_comment(owner.id, "never"))
        assert repo.get(ticket.id).comments == []
