# =======================================================================================
# qrbadge/utils/__init__.py - Utils Package
# =======================================================================================
from .exceptions import *
from .validators import *

__all__ = [
    "QRBadgeError", "InvalidInputError", "UnauthorizedError", "ForbiddenError",
    "NotFoundError", "ConflictError",
    "is_valid_qr_code", "is_valid_email", "is_valid_username", "is_valid_password",
    "is_valid_device_brand", "is_valid_device_model", "is_valid_expiration",
    "default_expiration", "to_utc_naive", "utcnow",
]
