"""
Saved prompt and generated documentation endpoints
"""
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projectflow.core.database import get_db
from projectflow.core.deps import get_current_user, get_ai_service
from projectflow.core.security import CurrentUser
from projectflow.schemas.ai import ImplementationGuide
from projectflow.schemas.prompt import DocumentationResponse, PromptResponse
from projectflow.services.ai_service import AIService
from projectflow.services.document_service import DocumentService
from projectflow.services.prompt_service import PromptService

router = APIRouter()


@router.get("/projects/{project_id}/prompts", response_model=List[PromptResponse])
async def list_project_prompts(
    project_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    prompts = await PromptService(db, ai_service).list_project_prompts(current_user, project_id)
    return [PromptResponse.model_validate(p) for p in prompts]


@router.get("/features/{feature_id}/prompts", response_model=List[PromptResponse])
async def list_feature_prompts(
    feature_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    prompts = await PromptService(db, ai_service).list_feature_prompts(current_user, feature_id)
    return [PromptResponse.model_validate(p) for p in prompts]


@router.delete("/prompts/{prompt_id}")
async def delete_prompt(
    prompt_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    await PromptService(db, ai_service).delete_prompt(current_user, prompt_id)
    return {"success": True, "message": "Prompt deleted successfully"}


@router.post("/projects/{project_id}/documentation", response_model=DocumentationResponse)
async def generate_documentation(
    project_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    """Markdown documentation for the whole project"""
    return await DocumentService(db, ai_service).generate_documentation(current_user, project_id)


@router.post("/features/{feature_id}/implementation-guide", response_model=ImplementationGuide)
async def generate_implementation_guide(
    feature_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service)
):
    return await DocumentService(db, ai_service).generate_implementation_guide(current_user, feature_id)
