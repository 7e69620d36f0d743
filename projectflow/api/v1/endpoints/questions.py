"""
Project question and answer endpoints
"""
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projectflow.core.database import get_db
from projectflow.core.deps import get_current_user, get_ai_service
from projectflow.core.security import CurrentUser
from projectflow.schemas.question import QuestionResponse, AnswerResponse, AnswersSave
from projectflow.services.ai_service import AIService
from projectflow.services.question_service import QuestionService

router = APIRouter()


@router.get("/{project_id}/questions", response_model=List[QuestionResponse])
async def list_questions(
    project_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    questions = await QuestionService(db, ai_service).list_questions(current_user, project_id)
    return [QuestionResponse.model_validate(q) for q in questions]


@router.post("/{project_id}/questions/generate", response_model=List[QuestionResponse])
async def generate_questions(
    project_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    """Generate the clarifying questions; repeated calls return the existing set"""
    questions = await QuestionService(db, ai_service).generate_questions(current_user, project_id)
    return [QuestionResponse.model_validate(q) for q in questions]


@router.get("/{project_id}/answers", response_model=List[AnswerResponse])
async def list_answers(
    project_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    answers = await QuestionService(db, ai_service).list_answers(current_user, project_id)
    return [AnswerResponse.model_validate(a) for a in answers]


@router.patch("/{project_id}/answers", response_model=List[AnswerResponse])
async def save_answer_draft(
    project_id: UUID,
    payload: AnswersSave,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    """Upsert answers without advancing the wizard"""
    answers = await QuestionService(db, ai_service).upsert_answers(current_user, project_id, payload.answers)
    return [AnswerResponse.model_validate(a) for a in answers]
