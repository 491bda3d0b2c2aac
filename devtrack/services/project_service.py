# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Business logic for projects and their team membership."""
import uuid
from typing import Iterable, List

from starlette.concurrency import run_in_threadpool

from devtrack.core.errors import ConflictError, InvalidOperationError, NotFoundError
from devtrack.core.logging import get_logger
from devtrack.metrics import PROJECT_MEMBERSHIP_CHANGES, PROJECTS_CREATED
from devtrack.models.domain import Project, utcnow
from devtrack.repositories.project_repository import ProjectRepository
from devtrack.repositories.user_repository import UserRepository
from devtrack.schemas import MessageResponse
from devtrack.schemas.project import ProjectCreate, ProjectOut, ProjectUpdate
from devtrack.services import access_policy as policy

logger = get_logger(__name__)


class ProjectService:
    def __init__(self, user_repo: UserRepository, project_repo: ProjectRepository):
        self._users = user_repo
        self._projects = project_repo

    # ── Reads ──

    async def list_projects(self, actor: str) -> List[ProjectOut]:
        projects = await run_in_threadpool(self._projects.list_for_user, actor)
        return await self._render_many(projects)

    async def get_project(self, actor: str, project_id: str) -> ProjectOut:
        project = await self.load(project_id)
        policy.authorize(policy.can_access_project(actor, project), "Access denied", "get_project")
        return (await self._render_many([project]))[0]

    async def load(self, project_id: str) -> Project:
        project = await run_in_threadpool(self._projects.get, project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    # ── Writes ──

    async def create_project(self, actor: str, body: ProjectCreate) -> ProjectOut:
        now = utcnow()
        project = Project(
            id=str(uuid.uuid4()),
            title=body.title,
            description=body.description,
            created_by=actor,
            team_members=[actor],
            created_at=now,
            updated_at=now,
        )
        await run_in_threadpool(self._projects.create, project)
        PROJECTS_CREATED.inc()
        logger.info("Project created id=%s owner=%s", project.id, actor)
        return (await self._render_many([project]))[0]

    async def update_project(self, actor: str, project_id: str, body: ProjectUpdate) -> ProjectOut:
        project = await self.load(project_id)
        policy.authorize(
            policy.can_modify_project(actor, project),
            "Only project creator can update project details",
            "update_project",
        )
        changes = body.model_dump(exclude_unset=True)
        updated = await run_in_threadpool(self._projects.update_fields, project_id, changes, utcnow())
        if updated is None:
            raise NotFoundError("Project not found")
        logger.info("Project updated id=%s fields=%s", project_id, sorted(changes))
        return (await self._render_many([updated]))[0]

    async def delete_project(self, actor: str, project_id: str) -> MessageResponse:
        project = await self.load(project_id)
        policy.authorize(
            policy.can_modify_project(actor, project),
            "Only project creator can delete project",
            "delete_project",
        )
        await run_in_threadpool(self._projects.delete, project_id)
        logger.info("Project deleted id=%s by=%s", project_id, actor)
        return MessageResponse(message="Project deleted")

    async def add_member(self, actor: str, project_id: str, email: str) -> ProjectOut:
        project = await self.load(project_id)
        policy.authorize(
            policy.can_modify_project(actor, project),
            "Only project creator can add members",
            "add_member",
        )
        user = await run_in_threadpool(self._users.get_by_email, email)
        if user is None:
            raise NotFoundError("User not found")
        if user.id in project.principals():
            raise ConflictError("User is already a team member")

        # A concurrent add of the same user is absorbed by the membership set.
        if await run_in_threadpool(self._projects.add_member, project_id, user.id, utcnow()):
            PROJECT_MEMBERSHIP_CHANGES.labels(action="add").inc()
            logger.info("Member added project=%s user=%s", project_id, user.id)
        return await self.get_project(actor, project_id)

    async def remove_member(self, actor: str, project_id: str, user_id: str) -> ProjectOut:
        project = await self.load(project_id)
        policy.authorize(
            policy.can_modify_project(actor, project),
            "Only project creator can remove members",
            "remove_member",
        )
        if not policy.can_remove_member(actor, project, user_id):
            raise InvalidOperationError("Cannot remove project creator")

        if await run_in_threadpool(self._projects.remove_member, project_id, user_id, utcnow()):
            PROJECT_MEMBERSHIP_CHANGES.labels(action="remove").inc()
            logger.info("Member removed project=%s user=%s", project_id, user_id)
        return await self.get_project(actor, project_id)

    # ── Rendering ──

    async def _render_many(self, projects: Iterable[Project]) -> List[ProjectOut]:
        projects = list(projects)
        user_ids = {p.created_by for p in projects}
        for p in projects:
            user_ids.update(p.team_members)
        users = await run_in_threadpool(self._users.get_summaries, user_ids)
        return [
            ProjectOut(
                id=p.id,
                title=p.title,
                description=p.description,
                created_by=users.get(p.created_by),
                team_members=[users[m] for m in p.team_members if m in users],
                created_at=p.created_at,
                updated_at=p.updated_at,
            )
            for p in projects
        ]
