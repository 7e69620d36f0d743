"""
Dashboard endpoints
"""
from typing import Dict, List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from projectflow.config import settings
from projectflow.core.database import get_db
from projectflow.core.deps import get_current_user
from projectflow.core.security import CurrentUser
from projectflow.schemas.dashboard import DashboardStatsResponse, ActivityResponse, FeatureStatsResponse
from projectflow.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await DashboardService(db).get_dashboard_stats(current_user)


@router.get("/activities", response_model=List[ActivityResponse])
async def get_recent_activities(
    limit: int = Query(settings.recent_activity_limit, ge=1, le=100),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await DashboardService(db).get_recent_activities(current_user, limit)


@router.get("/categories", response_model=Dict[str, int])
async def get_project_stats_by_category(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await DashboardService(db).get_project_stats_by_category(current_user)


@router.get("/features", response_model=FeatureStatsResponse)
async def get_feature_stats(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await DashboardService(db).get_feature_stats(current_user)
