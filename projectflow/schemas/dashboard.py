"""
Dashboard schemas
"""
from pydantic import BaseModel
from typing import Any, Dict, List
from datetime import datetime
from uuid import UUID

from projectflow.schemas.project import ProjectResponse


class DashboardStatsResponse(BaseModel):
    total_projects: int
    projects_by_status: Dict[str, int]
    member_projects_count: int
    tasks_by_status: Dict[str, int]
    total_tasks: int
    recent_projects: List[ProjectResponse]


class ActivityResponse(BaseModel):
    type: str
    timestamp: datetime
    project_id: UUID
    project_name: str
    data: Dict[str, Any]


class FeatureStatsResponse(BaseModel):
    by_priority: Dict[str, int]
    by_effort: Dict[str, int]
    by_category: Dict[str, int]
