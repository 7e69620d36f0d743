"""
Project lifecycle service

Drives a project through the six wizard steps (name, description, questions,
features, prompts, summary). Every step mutation is owner-only, checks that
the previous step has been completed, does any AI work before touching the
project, and commits once.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete

from projectflow.core.db_types import utcnow
from projectflow.core.exceptions import ValidationError
from projectflow.core.permissions import OWNER, VIEWER, require_project_access
from projectflow.core.security import CurrentUser
from projectflow.models.chat import ChatMessage
from projectflow.models.feature import Feature
from projectflow.models.project import Project, ProjectMember, PROJECT_STATUSES, TOTAL_STEPS
from projectflow.models.prompt import Prompt
from projectflow.models.question import ProjectQuestion, ProjectAnswer
from projectflow.models.task import Task
from projectflow.schemas.feature import FeatureCreate
from projectflow.schemas.project import ProjectUpdate
from projectflow.schemas.question import AnswerInput
from projectflow.services.ai_service import AIService
from projectflow.services.feature_service import FeatureService
from projectflow.services.prompt_service import PromptService
from projectflow.services.question_service import QuestionService

logger = logging.getLogger(__name__)

NAME_STEP, DESCRIPTION_STEP, QUESTIONS_STEP, FEATURES_STEP, PROMPTS_STEP, SUMMARY_STEP = range(1, TOTAL_STEPS + 1)

STEP_NAMES = {
    NAME_STEP: "name",
    DESCRIPTION_STEP: "description",
    QUESTIONS_STEP: "questions",
    FEATURES_STEP: "features",
    PROMPTS_STEP: "prompts",
    SUMMARY_STEP: "summary",
}


class ProjectService:
    """Service for projects and the creation wizard"""

    def __init__(self, db: AsyncSession, ai_service: Optional[AIService] = None):
        self.db = db
        self.ai_service = ai_service or AIService()
        self.questions = QuestionService(db, self.ai_service)
        self.features = FeatureService(db)
        self.prompts = PromptService(db, self.ai_service)

    async def _owned(self, user: CurrentUser, project_id: uuid.UUID) -> Project:
        access = await require_project_access(
            self.db, project_id, user.user_id, OWNER, "Not authorized: only the project owner can do this"
        )
        return access.project

    @staticmethod
    def _require_step(project: Project, step: int) -> None:
        if project.last_edited_step < step:
            previous = STEP_NAMES[step - 1]
            raise ValidationError(
                f"Complete the {previous} step first",
                details={"required_step": step, "last_edited_step": project.last_edited_step}
            )

    @staticmethod
    def _advance(project: Project, completed_step: int) -> None:
        next_step = min(completed_step + 1, project.total_steps)
        project.current_step = next_step
        # Revisiting an earlier step never locks later ones
        project.last_edited_step = max(project.last_edited_step, next_step)
        project.last_draft_save = utcnow()

    async def _wizard_step(self, user: CurrentUser, project_id: uuid.UUID, step: int) -> Project:
        project = await self._owned(user, project_id)
        self._require_step(project, step)
        return project

    async def create_project(self, user: CurrentUser) -> Project:
        project = Project(
            owner_id=user.user_id,
            name="",
            description="",
            category="Other",
            platform="Web",
            status="draft",
            current_step=NAME_STEP,
            last_edited_step=NAME_STEP,
            total_steps=TOTAL_STEPS,
            last_draft_save=utcnow(),
            members=[],
        )
        self.db.add(project)
        await self.db.commit()

        logger.info("Project created", extra={"project_id": str(project.id), "user_id": user.user_id})
        return project

    async def get_project(self, user: CurrentUser, project_id: uuid.UUID) -> Project:
        access = await require_project_access(self.db, project_id, user.user_id, VIEWER)
        return access.project

    async def list_user_projects(self, user: CurrentUser,
                                 statuses: Optional[Sequence[str]] = None) -> List[Project]:
        query = select(Project).where(Project.owner_id == user.user_id)
        if statuses:
            unknown = [s for s in statuses if s not in PROJECT_STATUSES]
            if unknown:
                raise ValidationError(f"Unknown project status: {', '.join(unknown)}")
            query = query.where(Project.status.in_(statuses))
        result = await self.db.execute(query.order_by(Project.created_at.desc()))
        return list(result.scalars().all())

    async def list_shared_projects(self, user: CurrentUser) -> List[Project]:
        """Projects where the user holds a role but is not the owner"""
        result = await self.db.execute(
            select(Project)
            .join(ProjectMember, ProjectMember.project_id == Project.id)
            .where(ProjectMember.user_id == user.user_id, Project.owner_id != user.user_id)
            .order_by(Project.created_at.desc())
        )
        return list(result.scalars().unique().all())

    async def update_project_name(self, user: CurrentUser, project_id: uuid.UUID, name: str) -> Project:
        project = await self._wizard_step(user, project_id, NAME_STEP)
        if not name or not name.strip():
            raise ValidationError("Project name is required")

        project.name = name.strip()
        self._advance(project, NAME_STEP)
        await self.db.commit()
        return project

    async def update_project_description(
        self,
        user: CurrentUser,
        project_id: uuid.UUID,
        description: str,
        tech_stack: Optional[str] = None
    ) -> Project:
        project = await self._wizard_step(user, project_id, DESCRIPTION_STEP)
        if not description or not description.strip():
            raise ValidationError("Project description is required")

        description = description.strip()
        await self.questions.ensure_questions(project, description)

        project.description = description
        if tech_stack:
            project.tech_stack = {"name": tech_stack}
        self._advance(project, DESCRIPTION_STEP)
        await self.db.commit()

        logger.info("Project description saved", extra={"project_id": str(project_id)})
        return project

    async def save_question_answers(
        self,
        user: CurrentUser,
        project_id: uuid.UUID,
        answers: Sequence[AnswerInput]
    ) -> Project:
        project = await self._wizard_step(user, project_id, QUESTIONS_STEP)
        if not project.questions_generated:
            raise ValidationError("Questions have not been generated for this project")

        missing = await self.questions.missing_required(project, answers)
        if missing:
            raise ValidationError(
                "All required questions must be answered",
                details={"missing_question_ids": [str(q.id) for q in missing]}
            )

        await self.questions.apply_answers(project, answers)
        project.questions_answered = True
        project.can_proceed_from_context = True
        self._advance(project, QUESTIONS_STEP)
        await self.db.commit()
        return project

    async def generate_features(self, user: CurrentUser, project_id: uuid.UUID, count: int = 1) -> List[Feature]:
        """Ask the AI for new features and store them; the wizard stays on the features step"""
        project = await self._wizard_step(user, project_id, FEATURES_STEP)
        if not project.questions_answered:
            raise ValidationError("Answer the project questions before generating features")

        existing = await self.features.project_features(project.id)
        generated = await self.ai_service.generate_features(
            project.name,
            project.description,
            await self.questions.answered_questions(project),
            [feature.title for feature in existing],
            count,
        )

        features = [
            self.features.build_feature(
                project.id,
                FeatureCreate(
                    title=item.title,
                    description=item.description,
                    priority=item.priority,
                    effort=item.effort,
                    category=item.category,
                    implementation_details=item.implementation_details(),
                ),
                user.user_id,
            )
            for item in generated
        ]
        project.last_draft_save = utcnow()
        await self.db.commit()

        logger.info("Features generated", extra={"project_id": str(project_id), "count": len(features)})
        return features

    async def complete_features_step(self, user: CurrentUser, project_id: uuid.UUID) -> Project:
        project = await self._wizard_step(user, project_id, FEATURES_STEP)
        self._advance(project, FEATURES_STEP)
        await self.db.commit()
        return project

    async def generate_prompt(self, user: CurrentUser, project_id: uuid.UUID,
                              feature_id: Optional[uuid.UUID] = None) -> Prompt:
        return await self.prompts.generate_prompt(user, project_id, feature_id)

    async def complete_prompts_step(self, user: CurrentUser, project_id: uuid.UUID) -> Project:
        project = await self._wizard_step(user, project_id, PROMPTS_STEP)
        self._advance(project, PROMPTS_STEP)
        await self.db.commit()
        return project

    async def generate_summary(self, user: CurrentUser, project_id: uuid.UUID) -> Project:
        """Final step: synthesize the summary and activate the project"""
        project = await self._wizard_step(user, project_id, SUMMARY_STEP)

        result = await self.ai_service.generate_summary(
            project.name,
            project.description,
            await self.features.project_features(project.id),
            await self.questions.answered_questions(project),
        )

        project.summary = result.overview
        project.summary_details = result.model_dump(by_alias=True)
        project.status = "active"
        project.current_step = SUMMARY_STEP
        project.last_edited_step = SUMMARY_STEP
        project.last_draft_save = utcnow()
        await self.db.commit()

        logger.info("Project summary generated", extra={"project_id": str(project_id)})
        return project

    async def go_to_previous_step(self, user: CurrentUser, project_id: uuid.UUID) -> Project:
        project = await self._owned(user, project_id)
        project.current_step = max(NAME_STEP, project.current_step - 1)
        await self.db.commit()
        return project

    async def set_current_step(self, user: CurrentUser, project_id: uuid.UUID, step: int) -> Project:
        """Navigate to any step already reached; no skipping ahead"""
        project = await self._owned(user, project_id)
        if step < NAME_STEP or step > project.last_edited_step:
            raise ValidationError(
                f"Step must be between 1 and {project.last_edited_step}",
                details={"requested_step": step}
            )
        project.current_step = step
        await self.db.commit()
        return project

    async def update_project(self, user: CurrentUser, project_id: uuid.UUID, patch: ProjectUpdate) -> Project:
        project = await self._owned(user, project_id)
        changes: Dict[str, Any] = patch.model_dump(exclude_unset=True)

        for field in ("name", "description"):
            if field in changes and not (changes[field] or "").strip():
                raise ValidationError(f"Project {field} cannot be empty")

        for field, value in changes.items():
            setattr(project, field, value)
        project.last_draft_save = utcnow()
        await self.db.commit()
        return project

    async def archive_project(self, user: CurrentUser, project_id: uuid.UUID) -> Project:
        project = await self._owned(user, project_id)
        project.status = "archived"
        project.last_draft_save = utcnow()
        await self.db.commit()

        logger.info("Project archived", extra={"project_id": str(project_id)})
        return project

    async def delete_project(self, user: CurrentUser, project_id: uuid.UUID) -> None:
        """Delete the project and everything that belongs to it"""
        project = await self._owned(user, project_id)

        for model in (Prompt, Task, Feature, ProjectAnswer, ProjectQuestion, ChatMessage):
            await self.db.execute(delete(model).where(model.project_id == project.id))
        await self.db.delete(project)
        await self.db.commit()

        logger.info("Project deleted", extra={"project_id": str(project_id), "user_id": user.user_id})
