# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Database handle: single source of truth for store connectivity.

The engine is created eagerly but nothing touches the server until
``Database.connect`` runs; that call retries according to an injectable
``RetryPolicy`` and bootstraps the schema once the store answers.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from starlette.concurrency import run_in_threadpool

from devtrack.core.config import settings
from devtrack.core.logging import get_logger

logger = get_logger(__name__)

# Timestamps are stored as ISO-8601 text so the same DDL runs on
# PostgreSQL and SQLite.
SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id            VARCHAR(36) PRIMARY KEY,
        name          TEXT NOT NULL,
        email         VARCHAR(320) NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        role          TEXT NOT NULL,
        created_at    VARCHAR(40) NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS projects (
        id          VARCHAR(36) PRIMARY KEY,
        title       TEXT NOT NULL,
        description TEXT,
        created_by  VARCHAR(36) NOT NULL,
        created_at  VARCHAR(40) NOT NULL,
        updated_at  VARCHAR(40) NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS project_members (
        project_id VARCHAR(36) NOT NULL,
        user_id    VARCHAR(36) NOT NULL,
        added_at   VARCHAR(40) NOT NULL,
        PRIMARY KEY (project_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tickets (
        id          VARCHAR(36) PRIMARY KEY,
        project_id  VARCHAR(36) NOT NULL,
        title       TEXT NOT NULL,
        description TEXT NOT NULL,
        priority    VARCHAR(16) NOT NULL,
        status      VARCHAR(16) NOT NULL,
        ticket_type VARCHAR(16) NOT NULL,
        tags        TEXT NOT NULL,
        assignee    VARCHAR(36),
        due_date    VARCHAR(40),
        reporter    VARCHAR(36) NOT NULL,
        created_by  VARCHAR(36) NOT NULL,
        created_at  VARCHAR(40) NOT NULL,
        updated_at  VARCHAR(40) NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS ticket_comments (
        id         VARCHAR(36) PRIMARY KEY,
        ticket_id  VARCHAR(36) NOT NULL,
        seq        INTEGER NOT NULL,
        author     VARCHAR(36) NOT NULL,
        body       TEXT NOT NULL,
        created_at VARCHAR(40) NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_project_members_user ON project_members (user_id)",
    "CREATE INDEX IF NOT EXISTS ix_tickets_project ON tickets (project_id)",
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_ticket_comments_seq ON ticket_comments (ticket_id, seq)",
)

TABLES: tuple[str, ...] = ("ticket_comments", "tickets", "project_members", "projects", "users")


class RetryPolicy(ABC):
    """Decides how long to wait before connection attempt ``attempt + 1``."""

    @abstractmethod
    def next_delay(self, attempt: int) -> Optional[float]:
        """Return seconds to wait, or None to give up."""


class FixedIntervalRetry(RetryPolicy):
    """Same delay every time; ``max_attempts=None`` retries forever."""

    def __init__(self, interval: float, max_attempts: Optional[int] = None):
        self.interval = interval
        self.max_attempts = max_attempts

    def next_delay(self, attempt: int) -> Optional[float]:
        if self.max_attempts is not None and attempt >= self.max_attempts:
            return None
        return self.interval


def create_store_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every thread sees its own empty DB.
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )


class Database:
    """Explicit store handle shared by every repository."""

    def __init__(self, url: str):
        self.url = url
        self.engine = create_store_engine(url)
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    def verify_connection(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def init_schema(self) -> None:
        with self.engine.begin() as conn:
            for statement in SCHEMA_STATEMENTS:
                conn.execute(text(statement))

    def truncate_all(self) -> None:
        with self.engine.begin() as conn:
            for table in TABLES:
                conn.execute(text(f"DELETE FROM {table}"))

    def _bootstrap(self) -> None:
        self.verify_connection()
        self.init_schema()

    async def connect(
        self,
        policy: RetryPolicy,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Block until the store answers, retrying per ``policy``."""
        attempt = 0
        while True:
            attempt += 1
            try:
                logger.info("Connecting to store attempt=%d", attempt)
                await run_in_threadpool(self._bootstrap)
            except SQLAlchemyError as exc:
                delay = policy.next_delay(attempt)
                if delay is None:
                    logger.error("Giving up on store after %d attempts", attempt)
                    raise
                logger.warning("Store connection failed: %s, retrying in %.1fs", exc, delay)
                await sleep(delay)
                continue
            self._connected = True
            logger.info("Store connected")
            return

    def dispose(self) -> None:
        self._connected = False
        self.engine.dispose()
