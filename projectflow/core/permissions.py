"""
Role-based permission checking utilities for project collaboration
"""
import uuid
from dataclasses import dataclass
from typing import List, Optional, Union
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from projectflow.core.exceptions import InsufficientPermissionsError, ResourceNotFoundError
from projectflow.models.project import Project, ProjectMember


OWNER = "owner"
ADMIN = "admin"
MEMBER = "member"
VIEWER = "viewer"

MEMBER_ROLES = (OWNER, ADMIN, MEMBER, VIEWER)


def can_view_project(role: Optional[str]) -> bool:
    """Check if role can read the project and its entities"""
    return role in MEMBER_ROLES


def can_edit_tasks(role: Optional[str]) -> bool:
    """Check if role can create, move and assign tasks"""
    return role in [OWNER, ADMIN, MEMBER]


def can_manage_project(role: Optional[str]) -> bool:
    """Check if role can mutate features and manage members"""
    return role in [OWNER, ADMIN]


def resolve_role(project: Project, user_id: str) -> Optional[str]:
    """The caller's effective role: the owner is implicit, everyone else comes from the role map"""
    if project.owner_id == user_id:
        return OWNER
    return project.members_with_role.get(user_id)


def is_project_member(project: Project, user_id: str) -> bool:
    return resolve_role(project, user_id) is not None


@dataclass
class ProjectAccess:
    project: Project
    role: str
    user_id: str

    @property
    def is_owner(self) -> bool:
        return self.project.owner_id == self.user_id


async def get_project(db: AsyncSession, project_id: Union[str, uuid.UUID]) -> Optional[Project]:
    result = await db.execute(select(Project).where(Project.id == project_id))
    return result.scalar_one_or_none()


async def require_project_access(
    db: AsyncSession,
    project_id: Union[str, uuid.UUID],
    user_id: str,
    level: str = VIEWER,
    message: Optional[str] = None
) -> ProjectAccess:
    """Load a project and check the caller holds at least the given level.

    Levels: ``viewer`` (any membership), ``member`` (task editing),
    ``admin`` (feature and member management), ``owner`` (the project owner only).
    """
    project = await get_project(db, project_id)
    if not project:
        raise ResourceNotFoundError("Project")

    role = resolve_role(project, user_id)
    if not can_view_project(role):
        raise InsufficientPermissionsError(message or "Access denied: you are not a member of this project")

    allowed = {
        VIEWER: can_view_project,
        MEMBER: can_edit_tasks,
        ADMIN: can_manage_project,
        OWNER: lambda _role: project.owner_id == user_id,
    }[level]
    if not allowed(role):
        raise InsufficientPermissionsError(
            message or f"Access denied: requires {level} access to this project, current role: {role}"
        )

    return ProjectAccess(project=project, role=role, user_id=user_id)


async def find_visible_project(
    db: AsyncSession,
    project_id: Union[str, uuid.UUID],
    user_id: str
) -> Optional[Project]:
    """Project if it exists and the caller can see it; list queries degrade to empty on None"""
    project = await get_project(db, project_id)
    if project is None or not is_project_member(project, user_id):
        return None
    return project


async def visible_project_ids(db: AsyncSession, user_id: str) -> List[uuid.UUID]:
    """Every project the user owns or holds a role in, without duplicates"""
    owned = await db.execute(select(Project.id).where(Project.owner_id == user_id))
    shared = await db.execute(select(ProjectMember.project_id).where(ProjectMember.user_id == user_id))

    return list(dict.fromkeys(list(owned.scalars().all()) + list(shared.scalars().all())))
