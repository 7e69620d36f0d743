"""
Dependency injection utilities
"""
from typing import Optional
from fastapi import Depends, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from projectflow.config import settings
from projectflow.core.exceptions import AuthenticationError
from projectflow.core.security import CurrentUser, principal_from_token
from projectflow.services.ai_service import AIService
from projectflow.services.email_service import EmailService, email_service


security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    x_mock_user_id: Optional[str] = Header(None),
) -> CurrentUser:
    """
    Resolve the caller from the identity provider's bearer token.
    For development, supports mock user ID header
    """
    if x_mock_user_id and settings.is_development:
        return CurrentUser(user_id=x_mock_user_id)

    if not credentials:
        raise AuthenticationError("Authentication required")

    return principal_from_token(credentials.credentials)


_ai_service: Optional[AIService] = None


def get_ai_service() -> AIService:
    """Shared AI client; built lazily so tests can override it"""
    global _ai_service
    if _ai_service is None:
        _ai_service = AIService()
    return _ai_service


def get_email_service() -> EmailService:
    return email_service
