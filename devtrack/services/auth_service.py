# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Authentication service: registration, login and identity lookups."""
import uuid
from typing import List

from starlette.concurrency import run_in_threadpool

from devtrack.core.errors import AuthenticationError, ConflictError, NotFoundError
from devtrack.core.logging import get_logger
from devtrack.metrics import AUTH_FAILURES, USERS_REGISTERED
from devtrack.models.domain import User, utcnow
from devtrack.repositories.user_repository import UserRepository
from devtrack.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserOut
from devtrack.services.credentials import CredentialService
from devtrack.services.token_service import TokenService

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials. Please check your email and password."


def _user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id, name=user.name, email=user.email, role=user.role, created_at=user.created_at,
    )


class AuthService:
    def __init__(
        self,
        user_repo: UserRepository,
        credentials: CredentialService,
        tokens: TokenService,
        default_role: str = "Team Member",
    ) -> None:
        self._users = user_repo
        self._credentials = credentials
        self._tokens = tokens
        self._default_role = default_role

    async def register(self, body: RegisterRequest) -> AuthResponse:
        if await run_in_threadpool(self._users.get_by_email, body.email):
            raise ConflictError("User already exists with this email.")
        password_hash = await run_in_threadpool(self._credentials.hash, body.password)
        user = User(
            id=str(uuid.uuid4()),
            name=body.name,
            email=body.email,
            password_hash=password_hash,
            role=body.role or self._default_role,
            created_at=utcnow(),
        )
        await run_in_threadpool(self._users.create, user)
        USERS_REGISTERED.inc()
        logger.info("User registered id=%s", user.id)
        return AuthResponse(token=self._tokens.issue(user.id, user.email), user=_user_out(user))

    async def login(self, body: LoginRequest) -> AuthResponse:
        user = await run_in_threadpool(self._users.get_by_email, body.email)
        if user is None:
            AUTH_FAILURES.labels(reason="unknown_email").inc()
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not await run_in_threadpool(self._credentials.verify, body.password, user.password_hash):
            AUTH_FAILURES.labels(reason="bad_password").inc()
            logger.warning("Failed login for user=%s", user.id)
            raise AuthenticationError(INVALID_CREDENTIALS)
        logger.info("User logged in id=%s", user.id)
        return AuthResponse(token=self._tokens.issue(user.id, user.email), user=_user_out(user))

    async def me(self, actor: str) -> UserOut:
        user = await run_in_threadpool(self._users.get, actor)
        if user is None:
            raise NotFoundError("User not found.")
        return _user_out(user)

    async def list_users(self) -> List[UserOut]:
        users = await run_in_threadpool(self._users.list_all)
        return [_user_out(u) for u in users]
