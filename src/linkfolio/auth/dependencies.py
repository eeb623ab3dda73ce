"""Authentication dependencies for FastAPI."""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..context import AppContext, get_app_context
from ..core.exceptions import Unauthenticated
from .jwt_auth import UserSession

# Bearer is accepted as an alternative to the session cookie
security = HTTPBearer(auto_error=False)


def _extract_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
    cookie_name: str,
) -> Optional[str]:
    token = request.cookies.get(cookie_name)
    if token:
        return token
    if credentials and credentials.credentials:
        return credentials.credentials
    return None


def get_current_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    context: AppContext = Depends(get_app_context),
) -> UserSession:
    """
    Get the authenticated caller from the session cookie or Bearer header.

    Raises:
        Unauthenticated: If no token is present or it does not verify
    """
    token = _extract_token(request, credentials, context.config.app.session_cookie_name)
    if not token:
        raise Unauthenticated("Unauthorized")

    session = context.jwt_manager.verify_token(token)
    if session is None:
        raise Unauthenticated("Unauthorized")
    return session
