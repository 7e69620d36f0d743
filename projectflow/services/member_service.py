"""
Project collaboration service
Adds, re-roles and removes collaborators and notifies them by email
"""
import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional
from fastapi import BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from projectflow.core.exceptions import ResourceNotFoundError, ValidationError
from projectflow.core.permissions import (
    ADMIN, OWNER, MEMBER_ROLES, require_project_access, find_visible_project, visible_project_ids
)
from projectflow.core.security import CurrentUser
from projectflow.models.project import Project, ProjectMember
from projectflow.services.email_service import EmailService, email_service as default_email_service
from projectflow.services.user_service import UserService

logger = logging.getLogger(__name__)

MANAGE_DENIED = "Access denied: only the project owner or an admin can manage members"


class MemberService:
    """Service for the project role map"""

    def __init__(self, db: AsyncSession, email_service: Optional[EmailService] = None):
        self.db = db
        self.email_service = email_service or default_email_service
        self.users = UserService(db)

    async def _actor_name(self, user: CurrentUser) -> str:
        profile = (await self.users.get_profiles([user.user_id])).get(user.user_id)
        if profile and profile.full_name:
            return profile.full_name
        return user.name or user.email or "A user"

    async def _notify(self, send: Callable[..., Awaitable[bool]], **kwargs) -> None:
        """Deliver a notification; failures never reach the caller"""
        try:
            await send(**kwargs)
        except Exception as e:
            logger.error(
                f"Failed to send member notification: {e}",
                extra={"notification": getattr(send, "__name__", "notification"), "to": kwargs.get("to_email")}
            )

    async def _schedule(self, background_tasks: Optional[BackgroundTasks],
                        send: Callable[..., Awaitable[bool]], **kwargs) -> None:
        if background_tasks is not None:
            background_tasks.add_task(self._notify, send, **kwargs)
        else:
            await self._notify(send, **kwargs)

    @staticmethod
    def _check_role(role: str) -> None:
        if role not in MEMBER_ROLES:
            raise ValidationError(f"Role must be one of {', '.join(MEMBER_ROLES)}")

    @staticmethod
    def _find_member(project: Project, member_user_id: str) -> ProjectMember:
        if member_user_id == project.owner_id:
            raise ValidationError("The project owner's role cannot be changed or removed")
        for member in project.members:
            if member.user_id == member_user_id:
                return member
        raise ResourceNotFoundError("Project member")

    async def list_members(self, user: CurrentUser, project_id: uuid.UUID) -> List[Dict[str, Any]]:
        """Owner first, then collaborators, each with profile details where known"""
        project = await find_visible_project(self.db, project_id, user.user_id)
        if project is None:
            return []

        entries = [(project.owner_id, OWNER, True)]
        entries += [(m.user_id, m.role, False) for m in sorted(project.members, key=lambda m: m.created_at)]
        profiles = await self.users.get_profiles(user_id for user_id, _, _ in entries)

        members = []
        for user_id, role, is_owner in entries:
            profile = profiles.get(user_id)
            members.append({
                "user_id": user_id,
                "role": role,
                "is_owner": is_owner,
                "email": profile.email if profile else None,
                "name": (profile.full_name or None) if profile else None,
                "image_url": profile.image_url if profile else None,
            })
        return members

    async def list_directory(self, user: CurrentUser) -> List[Dict[str, Any]]:
        """Everyone who shares a project with the user, with their role in each shared project"""
        project_ids = await visible_project_ids(self.db, user.user_id)
        if not project_ids:
            return []

        result = await self.db.execute(
            select(Project).where(Project.id.in_(project_ids)).order_by(Project.created_at)
        )
        directory: Dict[str, Dict[str, Any]] = {}
        for project in result.scalars().all():
            entries = [(project.owner_id, OWNER)] + [(m.user_id, m.role) for m in project.members]
            for member_id, role in entries:
                entry = directory.setdefault(member_id, {"user_id": member_id, "projects": []})
                entry["projects"].append({"project_id": project.id, "project_name": project.name, "role": role})

        profiles = await self.users.get_profiles(directory.keys())
        for member_id, entry in directory.items():
            profile = profiles.get(member_id)
            entry["email"] = profile.email if profile else None
            entry["name"] = (profile.full_name or None) if profile else None
            entry["image_url"] = profile.image_url if profile else None

        # Caller first, everyone else by name
        return sorted(
            directory.values(),
            key=lambda e: (e["user_id"] != user.user_id, (e["name"] or e["email"] or e["user_id"]).lower())
        )

    async def add_member(
        self,
        user: CurrentUser,
        project_id: uuid.UUID,
        email: str,
        role: str,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> ProjectMember:
        access = await require_project_access(self.db, project_id, user.user_id, ADMIN, MANAGE_DENIED)
        project = access.project
        self._check_role(role)

        profile = await self.users.get_by_email(email)
        if not profile:
            raise ValidationError("No user found with this email address")
        if profile.user_id == project.owner_id:
            raise ValidationError("The project owner is already a member of this project")

        existing = next((m for m in project.members if m.user_id == profile.user_id), None)
        if existing:
            previous_role = existing.role
            existing.role = role
            member = existing
        else:
            previous_role = None
            member = ProjectMember(user_id=profile.user_id, role=role, added_by=user.user_id)
            project.members.append(member)

        await self.db.commit()
        logger.info(
            "Project member added",
            extra={"project_id": str(project_id), "member_user_id": profile.user_id, "role": role}
        )

        actor = await self._actor_name(user)
        if previous_role is None:
            await self._schedule(
                background_tasks, self.email_service.send_project_invitation_email,
                to_email=profile.email, project_name=project.name or "Untitled project",
                inviter_name=actor, role=role, project_id=project.id
            )
        elif previous_role != role:
            await self._schedule(
                background_tasks, self.email_service.send_role_update_email,
                to_email=profile.email, project_name=project.name or "Untitled project",
                updater_name=actor, new_role=role, project_id=project.id
            )
        return member

    async def update_member_role(
        self,
        user: CurrentUser,
        project_id: uuid.UUID,
        member_user_id: str,
        role: str,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> ProjectMember:
        access = await require_project_access(self.db, project_id, user.user_id, ADMIN, MANAGE_DENIED)
        project = access.project
        self._check_role(role)
        member = self._find_member(project, member_user_id)

        member.role = role
        await self.db.commit()
        logger.info(
            "Project member role updated",
            extra={"project_id": str(project_id), "member_user_id": member_user_id, "role": role}
        )

        profile = (await self.users.get_profiles([member_user_id])).get(member_user_id)
        if profile and profile.email:
            await self._schedule(
                background_tasks, self.email_service.send_role_update_email,
                to_email=profile.email, project_name=project.name or "Untitled project",
                updater_name=await self._actor_name(user), new_role=role, project_id=project.id
            )
        return member

    async def remove_member(
        self,
        user: CurrentUser,
        project_id: uuid.UUID,
        member_user_id: str,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> None:
        access = await require_project_access(self.db, project_id, user.user_id, ADMIN, MANAGE_DENIED)
        project = access.project
        member = self._find_member(project, member_user_id)

        project.members.remove(member)
        await self.db.commit()
        logger.info(
            "Project member removed",
            extra={"project_id": str(project_id), "member_user_id": member_user_id}
        )

        profile = (await self.users.get_profiles([member_user_id])).get(member_user_id)
        if profile and profile.email:
            await self._schedule(
                background_tasks, self.email_service.send_removal_email,
                to_email=profile.email, project_name=project.name or "Untitled project",
                remover_name=await self._actor_name(user)
            )
