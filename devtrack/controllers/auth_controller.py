# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Authentication: register, login, current user, user directory."""
from typing import List

from fastapi import APIRouter, Depends

from devtrack.core.dependencies import get_auth_service, get_current_actor
from devtrack.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserOut
from devtrack.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", status_code=201, response_model=AuthResponse)
async def register(body: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    return await service.register(body)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, service: AuthService = Depends(get_auth_service)):
    return await service.login(body)


@router.get("/me", response_model=UserOut)
async def me(
    actor: str = Depends(get_current_actor),
    service: AuthService = Depends(get_auth_service),
):
    return await service.me(actor)


@router.get("/users", response_model=List[UserOut])
async def list_users(
    actor: str = Depends(get_current_actor),
    service: AuthService = Depends(get_auth_service),
):
    """All users, for assignee/reporter pickers."""
    return await service.list_users()
