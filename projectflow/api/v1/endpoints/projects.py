"""
Project and creation wizard endpoints
"""
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from projectflow.core.database import get_db
from projectflow.core.deps import get_current_user, get_ai_service
from projectflow.core.security import CurrentUser
from projectflow.schemas.feature import FeatureGenerateRequest, FeatureResponse
from projectflow.schemas.project import (
    ProjectNameUpdate, ProjectDescriptionUpdate, ProjectStepUpdate, ProjectUpdate, ProjectResponse
)
from projectflow.schemas.prompt import PromptGenerateRequest, PromptResponse
from projectflow.schemas.question import AnswersSave
from projectflow.services.ai_service import AIService
from projectflow.services.project_service import ProjectService

router = APIRouter()


def _project(project) -> ProjectResponse:
    return ProjectResponse.model_validate(project)


@router.post("", response_model=ProjectResponse)
async def create_project(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    """Start a new draft project at step 1"""
    project = await ProjectService(db, ai_service).create_project(current_user)
    return _project(project)


@router.get("", response_model=List[ProjectResponse])
async def list_projects(
    status: Optional[List[str]] = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    """Projects owned by the caller, optionally filtered by status"""
    projects = await ProjectService(db, ai_service).list_user_projects(current_user, status)
    return [_project(p) for p in projects]


@router.get("/shared", response_model=List[ProjectResponse])
async def list_shared_projects(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    """Projects shared with the caller by other owners"""
    projects = await ProjectService(db, ai_service).list_shared_projects(current_user)
    return [_project(p) for p in projects]


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    project = await ProjectService(db, ai_service).get_project(current_user, project_id)
    return _project(project)


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: UUID,
    project_data: ProjectUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    project = await ProjectService(db, ai_service).update_project(current_user, project_id, project_data)
    return _project(project)


@router.post("/{project_id}/archive", response_model=ProjectResponse)
async def archive_project(
    project_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    project = await ProjectService(db, ai_service).archive_project(current_user, project_id)
    return _project(project)


@router.delete("/{project_id}")
async def delete_project(
    project_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    """Delete a project and everything attached to it"""
    await ProjectService(db, ai_service).delete_project(current_user, project_id)
    return {"success": True, "message": "Project deleted successfully"}


# Wizard steps

@router.put("/{project_id}/name", response_model=ProjectResponse)
async def update_project_name(
    project_id: UUID,
    payload: ProjectNameUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    project = await ProjectService(db, ai_service).update_project_name(current_user, project_id, payload.name)
    return _project(project)


@router.put("/{project_id}/description", response_model=ProjectResponse)
async def update_project_description(
    project_id: UUID,
    payload: ProjectDescriptionUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    """Save the description and generate the clarifying questions"""
    project = await ProjectService(db, ai_service).update_project_description(
        current_user, project_id, payload.description, payload.tech_stack
    )
    return _project(project)


@router.put("/{project_id}/answers", response_model=ProjectResponse)
async def save_question_answers(
    project_id: UUID,
    payload: AnswersSave,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    """Save answers and move on once every required question is answered"""
    project = await ProjectService(db, ai_service).save_question_answers(
        current_user, project_id, payload.answers
    )
    return _project(project)


@router.post("/{project_id}/features/generate", response_model=List[FeatureResponse])
async def generate_features(
    project_id: UUID,
    payload: FeatureGenerateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    features = await ProjectService(db, ai_service).generate_features(current_user, project_id, payload.count)
    return [FeatureResponse.model_validate(f) for f in features]


@router.post("/{project_id}/features/complete", response_model=ProjectResponse)
async def complete_features_step(
    project_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    project = await ProjectService(db, ai_service).complete_features_step(current_user, project_id)
    return _project(project)


@router.post("/{project_id}/prompts", response_model=PromptResponse)
async def generate_prompt(
    project_id: UUID,
    payload: PromptGenerateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    """Generate an implementation prompt for the project or one promoted feature"""
    prompt = await ProjectService(db, ai_service).generate_prompt(current_user, project_id, payload.feature_id)
    return PromptResponse.model_validate(prompt)


@router.post("/{project_id}/prompts/complete", response_model=ProjectResponse)
async def complete_prompts_step(
    project_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    project = await ProjectService(db, ai_service).complete_prompts_step(current_user, project_id)
    return _project(project)


@router.post("/{project_id}/summary", response_model=ProjectResponse)
async def generate_summary(
    project_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    """Finish the wizard and activate the project"""
    project = await ProjectService(db, ai_service).generate_summary(current_user, project_id)
    return _project(project)


@router.post("/{project_id}/previous-step", response_model=ProjectResponse)
async def go_to_previous_step(
    project_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    project = await ProjectService(db, ai_service).go_to_previous_step(current_user, project_id)
    return _project(project)


@router.put("/{project_id}/step", response_model=ProjectResponse)
async def set_current_step(
    project_id: UUID,
    payload: ProjectStepUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    project = await ProjectService(db, ai_service).set_current_step(current_user, project_id, payload.current_step)
    return _project(project)
