# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Project CRUD and team membership.
Thin HTTP layer; rules live in ProjectService and access_policy.
"""
from typing import List

from fastapi import APIRouter, Depends

from devtrack.core.dependencies import get_current_actor, get_project_service
from devtrack.schemas import MessageResponse
from devtrack.schemas.project import MemberAdd, ProjectCreate, ProjectOut, ProjectUpdate
from devtrack.services.project_service import ProjectService

router = APIRouter(prefix="/api/projects", tags=["Projects"])


@router.post("", status_code=201, response_model=ProjectOut)
async def create_project(
    body: ProjectCreate,
    actor: str = Depends(get_current_actor),
    service: ProjectService = Depends(get_project_service),
):
    return await service.create_project(actor, body)


@router.get("", response_model=List[ProjectOut])
async def list_projects(
    actor: str = Depends(get_current_actor),
    service: ProjectService = Depends(get_project_service),
):
    return await service.list_projects(actor)


@router.get("/{project_id}", response_model=ProjectOut)
async def get_project(
    project_id: str,
    actor: str = Depends(get_current_actor),
    service: ProjectService = Depends(get_project_service),
):
    return await service.get_project(actor, project_id)


@router.put("/{project_id}", response_model=ProjectOut)
async def update_project(
    project_id: str,
    body: ProjectUpdate,
    actor: str = Depends(get_current_actor),
    service: ProjectService = Depends(get_project_service),
):
    return await service.update_project(actor, project_id, body)


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: str,
    actor: str = Depends(get_current_actor),
    service: ProjectService = Depends(get_project_service),
):
    return await service.delete_project(actor, project_id)


@router.post("/{project_id}/members", response_model=ProjectOut)
async def add_member(
    project_id: str,
    body: MemberAdd,
    actor: str = Depends(get_current_actor),
    service: ProjectService = Depends(get_project_service),
):
    return await service.add_member(actor, project_id, body.email)


@router.delete("/{project_id}/members/{user_id}", response_model=ProjectOut)
async def remove_member(
    project_id: str,
    user_id: str,
    actor: str = Depends(get_current_actor),
    service: ProjectService = Depends(get_project_service),
):
    return await service.remove_member(actor, project_id, user_id)
