"""
Main API router for v1 endpoints
"""
import time
from fastapi import APIRouter

from projectflow.api.v1.endpoints import (
    users, projects, questions, features, tasks, members, chat, prompts, dashboard, workspace
)

api_router = APIRouter(prefix="/v1")


@api_router.get("/")
async def api_root():
    """API v1 root endpoint"""
    return {
        "success": True,
        "data": {
            "message": "ProjectFlow API v1",
            "endpoints": {
                "users": "/api/v1/users",
                "projects": "/api/v1/projects",
                "features": "/api/v1/features",
                "tasks": "/api/v1/tasks",
                "dashboard": "/api/v1/dashboard",
                "workspace": "/api/v1/workspace"
            }
        },
        "timestamp": time.time()
    }


api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(projects.router, prefix="/projects", tags=["Projects"])
api_router.include_router(questions.router, prefix="/projects", tags=["Questions"])
api_router.include_router(members.router, prefix="/projects", tags=["Members"])
api_router.include_router(features.router, tags=["Features"])
api_router.include_router(tasks.router, tags=["Tasks"])
api_router.include_router(chat.router, tags=["Chat"])
api_router.include_router(prompts.router, tags=["Prompts"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(workspace.router, prefix="/workspace", tags=["Workspace"])
