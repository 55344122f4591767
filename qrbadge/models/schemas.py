# =======================================================================================
# qrbadge/models/schemas.py - Pydantic Models
# =======================================================================================
from datetime import date, datetime, timezone
from typing import Annotated, Any, Optional, List
from pydantic import BaseModel, Field, PlainSerializer


def _utc_iso(value: datetime) -> str:
    """Stored timestamps are naive UTC; say so on the wire."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")

UTCDateTime = Annotated[datetime, PlainSerializer(_utc_iso, return_type=str, when_used="json")]

# ========== Store records ==========
# Rows are mapped to these once, in the services; raw rows never leave them.

class Badge(BaseModel):
    """Badge row."""
    id: int
    qr_code: str
    name: Optional[str] = None
    device_brand: Optional[str] = None
    device_model: Optional[str] = None
    validation_time: Optional[UTCDateTime] = None
    expiration_time: UTCDateTime
    is_active: bool = True
    created_at: UTCDateTime
    updated_at: UTCDateTime

class Access(BaseModel):
    """Access event row; immutable once written."""
    id: int
    badge_id: int
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: UTCDateTime

class AccessWithBadge(Access):
    qr_code: str
    name: Optional[str] = None
    device_brand: Optional[str] = None
    device_model: Optional[str] = None

class User(BaseModel):
    """User as exposed by the API (no password)."""
    id: int
    name: str
    email: str
    role: str = "user"
    created_at: UTCDateTime
    updated_at: UTCDateTime

class UserRecord(User):
    password: str

    def public(self) -> User:
        return User(**self.model_dump(exclude={"password"}))

class TokenClaims(BaseModel):
    """Decoded bearer token."""
    subject_id: int
    role: str
    expires_at: datetime

# ========== Badges ==========

class ValidateBadgeRequest(BaseModel):
    qrCode: Optional[str] = Field(None, description="Scanned QR code")
    name: Optional[str] = Field(None, description="Display name, kept if omitted on rescan")
    deviceBrand: Optional[str] = None
    deviceModel: Optional[str] = None

class CreateBadgeRequest(BaseModel):
    qrCode: Optional[str] = None
    name: Optional[str] = None
    deviceBrand: Optional[str] = None
    deviceModel: Optional[str] = None
    expirationTime: Optional[Any] = Field(
        None, description="Falls back to the event end if missing or out of range"
    )

class UpdateBadgeRequest(BaseModel):
    name: Optional[str] = None
    deviceBrand: Optional[str] = None
    deviceModel: Optional[str] = None
    expirationTime: Optional[Any] = None
    isActive: Optional[bool] = None

class BadgeResponse(BaseModel):
    success: bool = True
    badge: Badge

class BadgeListResponse(BaseModel):
    success: bool = True
    count: int
    badges: List[Badge]

class MessageResponse(BaseModel):
    success: bool = True
    message: str

# ========== Accesses ==========

class AccessListResponse(BaseModel):
    success: bool = True
    count: int
    accesses: List[AccessWithBadge]

class BadgeAccessesResponse(BaseModel):
    success: bool = True
    count: int
    badge: Badge
    accesses: List[Access]

class DailyCount(BaseModel):
    day: date = Field(..., alias="date")
    count: int

class DeviceCount(BaseModel):
    device_brand: Optional[str] = None
    count: int

class AccessStats(BaseModel):
    total: int
    uniqueBadges: int
    daily: List[DailyCount]
    devices: List[DeviceCount]

class AccessStatsResponse(BaseModel):
    success: bool = True
    stats: AccessStats

# ========== Users ==========

class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

class LoginResponse(BaseModel):
    success: bool = True
    user: User
    token: str

class CreateUserRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = Field(None, description="Defaults to 'user'")

class UpdateUserRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None

class UserResponse(BaseModel):
    success: bool = True
    user: User

class UserListResponse(BaseModel):
    success: bool = True
    count: int
    users: List[User]

# ========== Service ==========

class HealthResponse(BaseModel):
    status: str
    timestamp: UTCDateTime

class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None
