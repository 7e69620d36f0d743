# Database models
from .user import UserProfile
from .project import Project, ProjectMember
from .question import ProjectQuestion, ProjectAnswer
from .feature import Feature
from .task import Task
from .chat import ChatMessage
from .prompt import Prompt

__all__ = [
    "UserProfile",
    "Project", "ProjectMember",
    "ProjectQuestion", "ProjectAnswer",
    "Feature",
    "Task",
    "ChatMessage",
    "Prompt",
]
