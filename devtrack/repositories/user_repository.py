# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for user records (the identity store)."""
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from devtrack.core.errors import ConflictError
from devtrack.core.logging import get_logger
from devtrack.models.domain import User

logger = get_logger(__name__)

USER_COLS = "id, name, email, password_hash, role, created_at"


class UserRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Write ──────────────────────────────────────────────────────────

    def create(self, user: User) -> User:
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    text(f"""
                        INSERT INTO users ({USER_COLS})
                        VALUES (:id, :name, :email, :password_hash, :role, :created_at)
                    """),
                    user.model_dump(),
                )
        except IntegrityError:
            raise ConflictError("User already exists with this email.")
        return user

    # ── Read ───────────────────────────────────────────────────────────

    def get(self, user_id: str) -> Optional[User]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {USER_COLS} FROM users WHERE id = :id"), {"id": user_id}
            ).mappings().first()
        return User(**row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {USER_COLS} FROM users WHERE email = :email"), {"email": email}
            ).mappings().first()
        return User(**row) if row else None

    def list_all(self) -> List[User]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT {USER_COLS} FROM users ORDER BY created_at")
            ).mappings().all()
        return [User(**r) for r in rows]

    def get_summaries(self, user_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Resolve ids to ``{id, name, email}``; unknown ids are simply absent."""
        ids = sorted({i for i in user_ids if i})
        if not ids:
            return {}
        stmt = text(
            "SELECT id, name, email FROM users WHERE id IN :ids"
        ).bindparams(bindparam("ids", expanding=True))
        with self._engine.connect() as conn:
            rows = conn.execute(stmt, {"ids": ids}).mappings().all()
        return {r["id"]: {"id": r["id"], "name": r["name"], "email": r["email"]} for r in rows}
