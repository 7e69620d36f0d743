"""
Feature catalog endpoints
"""
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projectflow.core.database import get_db
from projectflow.core.deps import get_current_user
from projectflow.core.security import CurrentUser
from projectflow.schemas.feature import FeatureCreate, FeaturesBulkCreate, FeatureUpdate, FeatureResponse
from projectflow.services.feature_service import FeatureService

router = APIRouter()


@router.get("/projects/{project_id}/features", response_model=List[FeatureResponse])
async def list_features(
    project_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    features = await FeatureService(db).list_features(current_user, project_id)
    return [FeatureResponse.model_validate(f) for f in features]


@router.post("/projects/{project_id}/features", response_model=FeatureResponse)
async def create_feature(
    project_id: UUID,
    feature_data: FeatureCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    feature = await FeatureService(db).create_feature(current_user, project_id, feature_data)
    return FeatureResponse.model_validate(feature)


@router.post("/projects/{project_id}/features/bulk", response_model=List[FeatureResponse])
async def create_features(
    project_id: UUID,
    payload: FeaturesBulkCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    features = await FeatureService(db).create_features(current_user, project_id, payload.features)
    return [FeatureResponse.model_validate(f) for f in features]


@router.get("/features/{feature_id}", response_model=FeatureResponse)
async def get_feature(
    feature_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    feature = await FeatureService(db).get_feature(current_user, feature_id)
    return FeatureResponse.model_validate(feature)


@router.patch("/features/{feature_id}", response_model=FeatureResponse)
async def update_feature(
    feature_id: UUID,
    patch: FeatureUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    feature = await FeatureService(db).update_feature(current_user, feature_id, patch)
    return FeatureResponse.model_validate(feature)


@router.delete("/features/{feature_id}")
async def delete_feature(
    feature_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete a feature and the task promoted from it"""
    await FeatureService(db).delete_feature(current_user, feature_id)
    return {"success": True, "message": "Feature deleted successfully"}
