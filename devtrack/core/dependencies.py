# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection: wire the store handle, repositories and services.
"""
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from devtrack.core.config import settings
from devtrack.core.database import Database, FixedIntervalRetry
from devtrack.repositories.project_repository import ProjectRepository
from devtrack.repositories.ticket_repository import TicketRepository
from devtrack.repositories.user_repository import UserRepository
from devtrack.services.auth_service import AuthService
from devtrack.services.credentials import CredentialService
from devtrack.services.event_relay import EventRelay
from devtrack.services.project_service import ProjectService
from devtrack.services.ticket_service import TicketService
from devtrack.services.token_service import TokenService

# ── Singletons ──
_database = Database(settings.DATABASE_URL)
_retry_policy = FixedIntervalRetry(settings.DB_CONNECT_RETRY_SECONDS)

_user_repo = UserRepository(_database.engine)
_project_repo = ProjectRepository(_database.engine)
_ticket_repo = TicketRepository(_database.engine)

_relay = EventRelay()
_credentials = CredentialService(rounds=settings.BCRYPT_ROUNDS)
_tokens = TokenService(
    secret=settings.JWT_SECRET,
    algorithm=settings.JWT_ALGORITHM,
    expires_hours=settings.JWT_EXPIRES_HOURS,
)

_auth_service = AuthService(_user_repo, _credentials, _tokens, settings.DEFAULT_ROLE)
_project_service = ProjectService(_user_repo, _project_repo)
_ticket_service = TicketService(_user_repo, _project_repo, _ticket_repo, _relay)

_bearer = HTTPBearer(auto_error=False)


# ── FastAPI dependency functions ──
def get_database() -> Database:
    return _database


def get_retry_policy() -> FixedIntervalRetry:
    return _retry_policy


def get_relay() -> EventRelay:
    return _relay


def get_token_service() -> TokenService:
    return _tokens


def get_auth_service() -> AuthService:
    return _auth_service


def get_project_service() -> ProjectService:
    return _project_service


def get_ticket_service() -> TicketService:
    return _ticket_service


def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """Resolve the bearer token to the acting user's id."""
    token = credentials.credentials if credentials else ""
    return tokens.verify(token)["id"]
