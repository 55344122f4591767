# =======================================================================================
# qrbadge/api/routes/accesses.py - Access Log Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends
from ...models.schemas import (
    AccessListResponse, AccessStatsResponse, BadgeAccessesResponse, MessageResponse,
)
from ...services import AccessService
from ..dependencies import get_access_service, require_auth

router = APIRouter(dependencies=[Depends(require_auth)])


@router.get("/accesses", response_model=AccessListResponse)
def list_accesses(accesses: AccessService = Depends(get_access_service)):
    items = accesses.list_accesses()
    return AccessListResponse(count=len(items), accesses=items)


@router.get("/accesses/stats", response_model=AccessStatsResponse)
def access_stats(accesses: AccessService = Depends(get_access_service)):
    return AccessStatsResponse(stats=accesses.get_stats())


@router.get("/accesses/badge/{badge_id}", response_model=BadgeAccessesResponse)
def badge_accesses(badge_id: int, accesses: AccessService = Depends(get_access_service)):
    badge, items = accesses.list_by_badge(badge_id)
    return BadgeAccessesResponse(count=len(items), badge=badge, accesses=items)


@router.delete("/accesses/{access_id}", response_model=MessageResponse)
def delete_access(access_id: int, accesses: AccessService = Depends(get_access_service)):
    accesses.delete_access(access_id)
    return MessageResponse(message="Accès supprimé avec succès")
