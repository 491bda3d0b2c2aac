# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for projects and their membership sets.

NO business rules here; ownership and membership checks live in the
access policy.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from devtrack.core.logging import get_logger
from devtrack.models.domain import PROJECT_MUTABLE_FIELDS, Project

logger = get_logger(__name__)

PROJECT_COLS = "id, title, description, created_by, created_at, updated_at"


class ProjectRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Write ──────────────────────────────────────────────────────────

    def create(self, project: Project) -> Project:
        with self._engine.begin() as conn:
            conn.execute(
                text(f"""
                    INSERT INTO projects ({PROJECT_COLS})
                    VALUES (:id, :title, :description, :created_by, :created_at, :updated_at)
                """),
                project.model_dump(exclude={"team_members"}),
            )
            for user_id in project.team_members:
                self._insert_member(conn, project.id, user_id, project.created_at)
        return project

    def update_fields(self, project_id: str, fields: Dict[str, Any], updated_at: str) -> Optional[Project]:
        unknown = set(fields) - PROJECT_MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Not mutable on a project: {sorted(unknown)}")
        assignments = [f"{name} = :{name}" for name in fields] + ["updated_at = :updated_at"]
        with self._engine.begin() as conn:
            conn.execute(
                text(f"UPDATE projects SET {', '.join(assignments)} WHERE id = :id"),
                {**fields, "updated_at": updated_at, "id": project_id},
            )
        return self.get(project_id)

    def delete(self, project_id: str) -> bool:
        with self._engine.begin() as conn:
            conn.execute(
                text("DELETE FROM project_members WHERE project_id = :id"), {"id": project_id}
            )
            result = conn.execute(text("DELETE FROM projects WHERE id = :id"), {"id": project_id})
        return result.rowcount > 0

    def add_member(self, project_id: str, user_id: str, added_at: str) -> bool:
        """Insert into the membership set. Returns False if already present."""
        try:
            with self._engine.begin() as conn:
                self._insert_member(conn, project_id, user_id, added_at)
                self._touch(conn, project_id, added_at)
        except IntegrityError:
            logger.info("Member %s already in project %s", user_id, project_id)
            return False
        return True

    def remove_member(self, project_id: str, user_id: str, removed_at: str) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(
                text("DELETE FROM project_members WHERE project_id = :pid AND user_id = :uid"),
                {"pid": project_id, "uid": user_id},
            )
            self._touch(conn, project_id, removed_at)
        return result.rowcount > 0

    # ── Read ───────────────────────────────────────────────────────────

    def get(self, project_id: str) -> Optional[Project]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {PROJECT_COLS} FROM projects WHERE id = :id"), {"id": project_id}
            ).mappings().first()
            if not row:
                return None
            members = self._members_by_project(conn, [project_id])
        return Project(**row, team_members=members.get(project_id, []))

    def list_for_user(self, user_id: str) -> List[Project]:
        """Projects the user owns or belongs to, newest first."""
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"""
                    SELECT {PROJECT_COLS} FROM projects
                    WHERE created_by = :uid
                       OR id IN (SELECT project_id FROM project_members WHERE user_id = :uid)
                    ORDER BY created_at DESC
                """),
                {"uid": user_id},
            ).mappings().all()
            members = self._members_by_project(conn, [r["id"] for r in rows])
        return [Project(**r, team_members=members.get(r["id"], [])) for r in rows]

    def get_titles(self, project_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        ids = sorted(set(project_ids))
        if not ids:
            return {}
        stmt = text("SELECT id, title FROM projects WHERE id IN :ids").bindparams(
            bindparam("ids", expanding=True)
        )
        with self._engine.connect() as conn:
            rows = conn.execute(stmt, {"ids": ids}).mappings().all()
        return {r["id"]: {"id": r["id"], "title": r["title"]} for r in rows}

    # ── Private ────────────────────────────────────────────────────────

    @staticmethod
    def _insert_member(conn: Connection, project_id: str, user_id: str, added_at: str) -> None:
        conn.execute(
            text("""
                INSERT INTO project_members (project_id, user_id, added_at)
                VALUES (:pid, :uid, :added_at)
            """),
            {"pid": project_id, "uid": user_id, "added_at": added_at},
        )

    @staticmethod
    def _touch(conn: Connection, project_id: str, ts: str) -> None:
        conn.execute(
            text("UPDATE projects SET updated_at = :ts WHERE id = :id"), {"ts": ts, "id": project_id}
        )

    @staticmethod
    def _members_by_project(conn: Connection, project_ids: List[str]) -> Dict[str, List[str]]:
        if not project_ids:
            return {}
        stmt = text("""
            SELECT project_id, user_id FROM project_members
            WHERE project_id IN :ids
            ORDER BY added_at, user_id
        """).bindparams(bindparam("ids", expanding=True))
        members: Dict[str, List[str]] = {}
        for r in conn.execute(stmt, {"ids": list(project_ids)}).mappings().all():
            members.setdefault(r["project_id"], []).append(r["user_id"])
        return members
