"""
Identity token verification for tokens issued by the external identity provider
"""
from dataclasses import dataclass
from typing import Optional, Dict, Any
from jose import ExpiredSignatureError, JWTError, jwt

from projectflow.config import settings
from projectflow.core.exceptions import AuthenticationError, TokenExpiredError


@dataclass(frozen=True)
class CurrentUser:
    """The resolved caller, passed explicitly into every service operation"""
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    image_url: Optional[str] = None


def decode_identity_token(token: str) -> Dict[str, Any]:
    """Verify signature, expiry and (when configured) issuer and audience"""
    options = {"verify_aud": bool(settings.auth_audience)}
    kwargs: Dict[str, Any] = {}
    if settings.auth_audience:
        kwargs["audience"] = settings.auth_audience
    if settings.auth_issuer_domain:
        kwargs["issuer"] = settings.auth_issuer_domain

    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options=options,
            **kwargs
        )
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError as e:
        raise AuthenticationError(f"Invalid token: {e}")


def principal_from_token(token: str) -> CurrentUser:
    """Build the caller principal from a bearer token"""
    payload = decode_identity_token(token)
    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Token has no subject")

    return CurrentUser(
        user_id=str(subject),
        email=payload.get("email"),
        name=payload.get("name"),
        image_url=payload.get("picture"),
    )
