# =======================================================================================
# qrbadge/models/__init__.py - Models Package
# =======================================================================================
from .schemas import *
from .tables import metadata, badges, accesses, users

__all__ = [
    "Badge", "Access", "AccessWithBadge", "User", "UserRecord", "TokenClaims",
    "ValidateBadgeRequest", "CreateBadgeRequest", "UpdateBadgeRequest",
    "LoginRequest", "CreateUserRequest", "UpdateUserRequest", "AccessStats",
    "metadata", "badges", "accesses", "users",
]
