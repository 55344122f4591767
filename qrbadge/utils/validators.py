# =======================================================================================
# qrbadge/utils/validators.py - Validation Helpers
# =======================================================================================
import re
from datetime import datetime, timezone
from typing import Any, Optional
from ..config import config

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _length_between(value: Any, minimum: int, maximum: Optional[int] = None) -> bool:
    if not isinstance(value, str):
        return False
    if len(value) < minimum:
        return False
    return maximum is None or len(value) <= maximum


def is_valid_qr_code(qr_code: Any) -> bool:
    return _length_between(qr_code, 5, 100)


def is_valid_email(email: Any) -> bool:
    return isinstance(email, str) and EMAIL_PATTERN.match(email) is not None


def is_valid_username(username: Any) -> bool:
    return _length_between(username, 3, 50)


def is_valid_password(password: Any) -> bool:
    return _length_between(password, 8)


def is_valid_device_brand(brand: Any) -> bool:
    return _length_between(brand, 1, 50)


def is_valid_device_model(model: Any) -> bool:
    return _length_between(model, 1, 100)


# ----------------- expiration -----------------

def to_utc_naive(value: datetime) -> datetime:
    """Timestamps are stored and compared as naive UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def default_expiration() -> datetime:
    """
    Fixed end of the event, not computed from "now".
    Also the latest expiration an admin may set.
    """
    return config.BADGE_EXPIRATION_CEILING


def is_valid_expiration(value: Any) -> bool:
    """Valid iff strictly in the future and not after the ceiling."""
    if not isinstance(value, datetime):
        return False
    value = to_utc_naive(value)
    return utcnow() < value <= default_expiration()


def parse_expiration(value: Any) -> Optional[datetime]:
    """
    Read an expiration from a request body: a datetime or an ISO-8601 string.
    Anything unreadable gives None so callers fall back instead of failing.
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
