# =======================================================================================
# qrbadge/api/dependencies.py - FastAPI Dependencies
# =======================================================================================
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..database import DatabaseManager
from ..models.schemas import TokenClaims
from ..services import AccessService, AuthService, BadgeService, UserService
from ..services.auth_service import AUTH_REQUIRED
from ..utils.exceptions import UnauthorizedError

bearer_scheme = HTTPBearer(auto_error=False)


def get_db(request: Request) -> DatabaseManager:
    """The store client built by create_app()."""
    return request.app.state.db


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth


def get_badge_service(db: DatabaseManager = Depends(get_db)) -> BadgeService:
    return BadgeService(db)


def get_access_service(db: DatabaseManager = Depends(get_db)) -> AccessService:
    return AccessService(db)


def get_user_service(
    db: DatabaseManager = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
) -> UserService:
    return UserService(db, auth)


def require_auth(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> TokenClaims:
    """
    Credential gate for admin routes: any valid, unexpired token passes.
    The claims are also left on request.state.user.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError(AUTH_REQUIRED)

    claims = auth.decode_token(credentials.credentials)
    request.state.user = claims
    return claims


def client_ip(request: Request) -> Optional[str]:
    """First X-Forwarded-For hop, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None
