# =======================================================================================
# qrbadge/api/routes/badges.py - Badge Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends, Request, status
from ...models.schemas import (
    BadgeListResponse, BadgeResponse, CreateBadgeRequest, MessageResponse,
    UpdateBadgeRequest, ValidateBadgeRequest,
)
from ...services import BadgeService
from ..dependencies import client_ip, get_badge_service, require_auth

public_router = APIRouter()
router = APIRouter(dependencies=[Depends(require_auth)])


# ---- public scan endpoints ----

@public_router.post("/badges/validate", response_model=BadgeResponse)
def validate_badge(
    body: ValidateBadgeRequest,
    request: Request,
    badges: BadgeService = Depends(get_badge_service),
):
    """Scan a QR code: creates the badge on first sight, renews it afterwards, logs the access."""
    badge = badges.validate_or_create(
        body.qrCode, body.name, body.deviceBrand, body.deviceModel,
        client_ip(request), request.headers.get("user-agent"),
    )
    return BadgeResponse(badge=badge)


@public_router.get("/badges/check/{qr_code}", response_model=BadgeResponse)
def check_badge(qr_code: str, badges: BadgeService = Depends(get_badge_service)):
    return BadgeResponse(badge=badges.check_status(qr_code))


# ---- admin ----

@router.get("/badges", response_model=BadgeListResponse)
def list_badges(badges: BadgeService = Depends(get_badge_service)):
    items = badges.list_badges()
    return BadgeListResponse(count=len(items), badges=items)


@router.post("/badges/close-event", response_model=MessageResponse)
def close_event(badges: BadgeService = Depends(get_badge_service)):
    badges.close_event()
    return MessageResponse(message="Tous les badges ont été désactivés")


@router.get("/badges/{badge_id}", response_model=BadgeResponse)
def get_badge(badge_id: int, badges: BadgeService = Depends(get_badge_service)):
    return BadgeResponse(badge=badges.get_badge(badge_id))


@router.post("/badges", response_model=BadgeResponse, status_code=status.HTTP_201_CREATED)
def create_badge(body: CreateBadgeRequest, badges: BadgeService = Depends(get_badge_service)):
    badge = badges.create_badge(
        body.qrCode, body.name, body.deviceBrand, body.deviceModel, body.expirationTime
    )
    return BadgeResponse(badge=badge)


@router.put("/badges/{badge_id}", response_model=BadgeResponse)
def update_badge(
    badge_id: int,
    body: UpdateBadgeRequest,
    badges: BadgeService = Depends(get_badge_service),
):
    badge = badges.update_badge(
        badge_id,
        name=body.name,
        device_brand=body.deviceBrand,
        device_model=body.deviceModel,
        expiration_time=body.expirationTime,
        is_active=body.isActive,
    )
    return BadgeResponse(badge=badge)


@router.delete("/badges/{badge_id}", response_model=MessageResponse)
def delete_badge(badge_id: int, badges: BadgeService = Depends(get_badge_service)):
    badges.delete_badge(badge_id)
    return MessageResponse(message="Badge supprimé avec succès")
