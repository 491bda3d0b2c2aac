# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for tickets and their embedded comment logs."""
import json
from typing import Any, Dict, List, Optional

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from devtrack.core.logging import get_logger
from devtrack.models.domain import TICKET_MUTABLE_FIELDS, Comment, Ticket

logger = get_logger(__name__)

APPEND_ATTEMPTS = 5

TICKET_COLS = (
    "id, project_id, title, description, priority, status, ticket_type, tags, "
    "assignee, due_date, reporter, created_by, created_at, updated_at"
)

# domain field -> column
_COLUMN_FOR = {"type": "ticket_type"}


def _row_to_ticket(row, comments: List[Comment]) -> Ticket:
    return Ticket(
        id=row["id"],
        project_id=row["project_id"],
        title=row["title"],
        description=row["description"],
        priority=row["priority"],
        status=row["status"],
        type=row["ticket_type"],
        tags=json.loads(row["tags"] or "[]"),
        assignee=row["assignee"],
        due_date=row["due_date"],
        reporter=row["reporter"],
        created_by=row["created_by"],
        comments=comments,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _column_value(field: str, value: Any) -> Any:
    if field == "tags":
        return json.dumps(list(value or []))
    if hasattr(value, "value"):
        return value.value
    return value


class TicketRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Write ──────────────────────────────────────────────────────────

    def create(self, ticket: Ticket) -> Ticket:
        with self._engine.begin() as conn:
            conn.execute(
                text(f"""
                    INSERT INTO tickets ({TICKET_COLS})
                    VALUES (:id, :project_id, :title, :description, :priority, :status,
                            :ticket_type, :tags, :assignee, :due_date, :reporter, :created_by,
                            :created_at, :updated_at)
                """),
                {
                    "id": ticket.id,
                    "project_id": ticket.project_id,
                    "title": ticket.title,
                    "description": ticket.description,
                    "priority": ticket.priority.value,
                    "status": ticket.status.value,
                    "ticket_type": ticket.type.value,
                    "tags": json.dumps(ticket.tags),
                    "assignee": ticket.assignee,
                    "due_date": ticket.due_date,
                    "reporter": ticket.reporter,
                    "created_by": ticket.created_by,
                    "created_at": ticket.created_at,
                    "updated_at": ticket.updated_at,
                },
            )
        return ticket

    def update_fields(self, ticket_id: str, fields: Dict[str, Any], updated_at: str) -> Optional[Ticket]:
        unknown = set(fields) - TICKET_MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Not mutable on a ticket: {sorted(unknown)}")
        assignments = ["updated_at = :updated_at"]
        params: Dict[str, Any] = {"id": ticket_id, "updated_at": updated_at}
        for field, value in fields.items():
            column = _COLUMN_FOR.get(field, field)
            assignments.append(f"{column} = :{column}")
            params[column] = _column_value(field, value)
        with self._engine.begin() as conn:
            conn.execute(
                text(f"UPDATE tickets SET {', '.join(assignments)} WHERE id = :id"), params
            )
        return self.get(ticket_id)

    def delete(self, ticket_id: str) -> bool:
        with self._engine.begin() as conn:
            conn.execute(text("DELETE FROM ticket_comments WHERE ticket_id = :id"), {"id": ticket_id})
            result = conn.execute(text("DELETE FROM tickets WHERE id = :id"), {"id": ticket_id})
        return result.rowcount > 0

    def append_comment(self, ticket_id: str, comment: Comment) -> Comment:
        """Append at the next sequence number of the ticket's log.

        Two writers racing for the same ``seq`` hit the unique index; the
        loser re-reads the tail and tries again.
        """
        for attempt in range(1, APPEND_ATTEMPTS + 1):
            try:
                with self._engine.begin() as conn:
                    self._insert_comment(conn, ticket_id, comment)
                return comment
            except IntegrityError:
                if attempt == APPEND_ATTEMPTS:
                    raise
                logger.warning("Comment seq collision on ticket %s, attempt=%d", ticket_id, attempt)

    @staticmethod
    def _insert_comment(conn: Connection, ticket_id: str, comment: Comment) -> None:
        next_seq = conn.execute(
            text("SELECT COALESCE(MAX(seq), 0) + 1 FROM ticket_comments WHERE ticket_id = :tid"),
            {"tid": ticket_id},
        ).scalar()
        conn.execute(
            text("""
                INSERT INTO ticket_comments (id, ticket_id, seq, author, body, created_at)
                VALUES (:id, :tid, :seq, :author, :body, :created_at)
            """),
            {"id": comment.id, "tid": ticket_id, "seq": next_seq, "author": comment.author,
             "body": comment.text, "created_at": comment.timestamp},
        )
        conn.execute(
            text("UPDATE tickets SET updated_at = :ts WHERE id = :id"),
            {"ts": comment.timestamp, "id": ticket_id},
        )

    # ── Read ───────────────────────────────────────────────────────────

    def get(self, ticket_id: str) -> Optional[Ticket]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {TICKET_COLS} FROM tickets WHERE id = :id"), {"id": ticket_id}
            ).mappings().first()
            if not row:
                return None
            comments = self._comments_by_ticket(conn, [ticket_id])
        return _row_to_ticket(row, comments.get(ticket_id, []))

    def list_by_projects(self, project_ids: List[str]) -> List[Ticket]:
        if not project_ids:
            return []
        stmt = text(f"""
            SELECT {TICKET_COLS} FROM tickets
            WHERE project_id IN :pids
            ORDER BY created_at DESC
        """).bindparams(bindparam("pids", expanding=True))
        with self._engine.connect() as conn:
            rows = conn.execute(stmt, {"pids": list(project_ids)}).mappings().all()
            comments = self._comments_by_ticket(conn, [r["id"] for r in rows])
        return [_row_to_ticket(r, comments.get(r["id"], [])) for r in rows]

    def list_by_project(self, project_id: str) -> List[Ticket]:
        return self.list_by_projects([project_id])

    # ── Private ────────────────────────────────────────────────────────

    @staticmethod
    def _comments_by_ticket(conn: Connection, ticket_ids: List[str]) -> Dict[str, List[Comment]]:
        if not ticket_ids:
            return {}
        stmt = text("""
            SELECT id, ticket_id, author, body, created_at FROM ticket_comments
            WHERE ticket_id IN :tids
            ORDER BY ticket_id, seq
        """).bindparams(bindparam("tids", expanding=True))
        comments: Dict[str, List[Comment]] = {}
        for r in conn.execute(stmt, {"tids": list(ticket_ids)}).mappings().all():
            comments.setdefault(r["ticket_id"], []).append(
                Comment(id=r["id"], author=r["author"], text=r["body"], timestamp=r["created_at"])
            )
        return comments
