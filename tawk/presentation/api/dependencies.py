from typing import Optional

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...application.services.auth_service import AuthService
from ...core.dependencies import get_auth_service
from ...domain.models import UserAccount

_bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    jwt_cookie: Optional[str] = Cookie(default=None, alias="jwt"),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserAccount:
    """Resolve the session from the bearer header, falling back to the ``jwt`` cookie."""
    token = None
    if credentials is not None and credentials.scheme.lower() == "bearer":
        token = credentials.credentials
    elif jwt_cookie:
        token = jwt_cookie
    return auth_service.authenticate_token(token)
