"""
Clarifying question generation and answer storage
"""
import logging
import uuid
from typing import Dict, List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from projectflow.core.exceptions import ValidationError
from projectflow.core.permissions import OWNER, require_project_access, find_visible_project
from projectflow.core.security import CurrentUser
from projectflow.models.project import Project
from projectflow.models.question import ProjectQuestion, ProjectAnswer
from projectflow.schemas.question import AnswerInput
from projectflow.services.ai_service import AIService

logger = logging.getLogger(__name__)


class QuestionService:
    """Service for project questions and their answers"""

    def __init__(self, db: AsyncSession, ai_service: Optional[AIService] = None):
        self.db = db
        self.ai_service = ai_service or AIService()

    async def _questions(self, project_id: uuid.UUID) -> List[ProjectQuestion]:
        result = await self.db.execute(
            select(ProjectQuestion)
            .where(ProjectQuestion.project_id == project_id)
            .order_by(ProjectQuestion.order_index)
        )
        return list(result.scalars().all())

    async def _answers(self, project_id: uuid.UUID) -> Dict[uuid.UUID, ProjectAnswer]:
        result = await self.db.execute(
            select(ProjectAnswer).where(ProjectAnswer.project_id == project_id)
        )
        return {answer.question_id: answer for answer in result.scalars().all()}

    async def ensure_questions(self, project: Project,
                               description: Optional[str] = None) -> List[ProjectQuestion]:
        """Generate the project's questions once; later calls return the existing set.

        ``description`` overrides the stored description when it has not been saved yet.

        Does not commit; callers own the unit of work.
        """
        existing = await self._questions(project.id)
        if existing:
            logger.info("Questions already exist, skipping generation", extra={"project_id": str(project.id)})
            project.questions_generated = True
            return existing

        generated = await self.ai_service.generate_questions(project.name, description or project.description)

        questions = [
            ProjectQuestion(
                project_id=project.id,
                section=item.section,
                question_text=item.question,
                placeholder_text=item.placeholder,
                input_type=item.type,
                options=item.options,
                order_index=index,
                is_required=item.required,
            )
            for index, item in enumerate(generated)
        ]
        self.db.add_all(questions)
        project.questions_generated = True
        await self.db.flush()

        logger.info(
            "Questions generated",
            extra={"project_id": str(project.id), "count": len(questions)}
        )
        return questions

    async def generate_questions(self, user: CurrentUser, project_id: uuid.UUID) -> List[ProjectQuestion]:
        access = await require_project_access(self.db, project_id, user.user_id, OWNER)
        project = access.project
        if not project.description.strip():
            raise ValidationError("Project description is required before generating questions")

        questions = await self.ensure_questions(project)
        await self.db.commit()
        return questions

    async def list_questions(self, user: CurrentUser, project_id: uuid.UUID) -> List[ProjectQuestion]:
        project = await find_visible_project(self.db, project_id, user.user_id)
        if project is None:
            return []
        return await self._questions(project.id)

    async def list_answers(self, user: CurrentUser, project_id: uuid.UUID) -> List[ProjectAnswer]:
        project = await find_visible_project(self.db, project_id, user.user_id)
        if project is None:
            return []
        return list((await self._answers(project.id)).values())

    async def missing_required(self, project: Project, answers: Sequence[AnswerInput]) -> List[ProjectQuestion]:
        """Required questions left blank once the submitted answers are merged over the stored ones"""
        questions = await self._questions(project.id)
        merged = {
            question_id: (answer.answer_text or "")
            for question_id, answer in (await self._answers(project.id)).items()
        }
        for item in answers:
            merged[item.question_id] = item.answer

        return [
            question for question in questions
            if question.is_required and not merged.get(question.id, "").strip()
        ]

    async def apply_answers(self, project: Project, answers: Sequence[AnswerInput]) -> List[ProjectAnswer]:
        """Upsert answers keyed by question; does not commit"""
        question_ids = {question.id for question in await self._questions(project.id)}
        unknown = [str(item.question_id) for item in answers if item.question_id not in question_ids]
        if unknown:
            raise ValidationError("Answer references a question outside this project",
                                  details={"question_ids": unknown})

        stored = await self._answers(project.id)
        for item in answers:
            answer = stored.get(item.question_id)
            if answer:
                answer.answer_text = item.answer
            else:
                answer = ProjectAnswer(
                    project_id=project.id,
                    question_id=item.question_id,
                    answer_text=item.answer,
                )
                self.db.add(answer)
                stored[item.question_id] = answer

        await self.db.flush()
        return list(stored.values())

    async def upsert_answers(
        self,
        user: CurrentUser,
        project_id: uuid.UUID,
        answers: Sequence[AnswerInput]
    ) -> List[ProjectAnswer]:
        """Save a draft of answers without advancing the wizard"""
        access = await require_project_access(self.db, project_id, user.user_id, OWNER)
        if not access.project.questions_generated:
            raise ValidationError("Questions have not been generated for this project")

        saved = await self.apply_answers(access.project, answers)
        await self.db.commit()
        return saved

    async def answered_questions(self, project: Project) -> List[Dict[str, str]]:
        """Question/answer pairs with a non-empty answer, in display order"""
        stored = await self._answers(project.id)
        pairs = []
        for question in await self._questions(project.id):
            answer = stored.get(question.id)
            if answer and (answer.answer_text or "").strip():
                pairs.append({"question": question.question_text, "answer": answer.answer_text})
        return pairs
