# =======================================================================================
# qrbadge/services/__init__.py - Services Package
# =======================================================================================
from .access_service import AccessService
from .auth_service import AuthService
from .badge_service import BadgeService
from .user_service import UserService

__all__ = ["AccessService", "AuthService", "BadgeService", "UserService"]
