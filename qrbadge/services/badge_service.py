# =======================================================================================
# qrbadge/services/badge_service.py - Badge Lifecycle
# =======================================================================================
from typing import Any, List, Optional
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.engine import Connection

from ..database import DatabaseManager, sql
from ..models.schemas import Badge
from ..utils.exceptions import (
    ConflictError, ForbiddenError, InvalidInputError, NotFoundError,
)
from ..utils.logging import get_logger
from ..utils.validators import (
    default_expiration, is_valid_device_brand, is_valid_device_model,
    is_valid_expiration, is_valid_qr_code, parse_expiration, to_utc_naive, utcnow,
)
from .access_service import AccessService, BADGE_NOT_FOUND

logger = get_logger("badges")

INVALID_QR_CODE = "QR code invalide"
INVALID_DEVICE_BRAND = "Marque d'appareil invalide"
INVALID_DEVICE_MODEL = "Modèle d'appareil invalide"
BADGE_INACTIVE = "Badge inactif"
BADGE_EXPIRED = "Badge expiré"
QR_CODE_EXISTS = "Ce QR code existe déjà"


class BadgeService:
    """
    Badge lifecycle:
    - first scan creates the badge, later scans renew it (validation_time, device)
    - every scan appends one access row
    - a badge is usable while is_active and not past expiration_time
    - close event deactivates every badge at once
    """

    def __init__(self, db: DatabaseManager):
        self.db = db

    # ----------------- helpers -----------------

    @staticmethod
    def _check_qr_code(qr_code: Optional[str]) -> None:
        if not is_valid_qr_code(qr_code):
            raise InvalidInputError(INVALID_QR_CODE)

    @staticmethod
    def _check_device(device_brand: Optional[str], device_model: Optional[str]) -> None:
        """Device fields are optional; when supplied they must fit their columns."""
        if device_brand and not is_valid_device_brand(device_brand):
            raise InvalidInputError(INVALID_DEVICE_BRAND)
        if device_model and not is_valid_device_model(device_model):
            raise InvalidInputError(INVALID_DEVICE_MODEL)

    @staticmethod
    def _fetch_by_qr(conn: Connection, qr_code: str) -> Optional[Badge]:
        row = conn.execute(
            text("SELECT * FROM badges WHERE qr_code = :qr"), {"qr": qr_code}
        ).mappings().first()
        return Badge(**row) if row else None

    @staticmethod
    def _fetch_by_id(conn: Connection, badge_id: int) -> Optional[Badge]:
        row = conn.execute(
            text("SELECT * FROM badges WHERE id = :bid"), {"bid": badge_id}
        ).mappings().first()
        return Badge(**row) if row else None

    # ----------------- public scan endpoints -----------------

    def validate_or_create(self, qr_code: Optional[str], name: Optional[str],
                           device_brand: Optional[str], device_model: Optional[str],
                           client_ip: Optional[str], user_agent: Optional[str]) -> Badge:
        """Create the badge on first scan or renew it, then log the access."""
        self._check_qr_code(qr_code)
        # scanners send "" for unknown device fields
        device_brand = device_brand or None
        device_model = device_model or None
        self._check_device(device_brand, device_model)

        try:
            return self._scan(qr_code, name, device_brand, device_model, client_ip, user_agent)
        except IntegrityError:
            # a concurrent first scan inserted the same QR code; renew that badge
            logger.info("Concurrent first scan, renewing", extra={"qr_code": qr_code})
            return self._scan(qr_code, name, device_brand, device_model, client_ip, user_agent)

    def _scan(self, qr_code: str, name: Optional[str], device_brand: Optional[str],
              device_model: Optional[str], client_ip: Optional[str],
              user_agent: Optional[str]) -> Badge:
        now = utcnow()

        with self.db.get_connection() as conn:
            existing = self._fetch_by_qr(conn, qr_code)

            if existing is None:
                result = conn.execute(
                    sql("""
                        INSERT INTO badges (qr_code, name, device_brand, device_model,
                                            validation_time, expiration_time, created_at, updated_at)
                        VALUES (:qr, :name, :brand, :model, :now, :exp, :now, :now)
                    """, "now", "exp"),
                    {
                        "qr": qr_code, "name": name or None, "brand": device_brand,
                        "model": device_model, "now": now, "exp": default_expiration(),
                    },
                )
                badge_id = result.lastrowid
                logger.info("Badge %s created", badge_id, extra={"qr_code": qr_code})
            else:
                badge_id = existing.id
                # an empty name keeps the one already on file
                conn.execute(
                    sql("""
                        UPDATE badges
                        SET name = COALESCE(:name, name),
                            device_brand = :brand,
                            device_model = :model,
                            validation_time = :now,
                            updated_at = :now
                        WHERE id = :bid
                    """, "now"),
                    {
                        "name": name or None, "brand": device_brand, "model": device_model,
                        "now": now, "bid": badge_id,
                    },
                )
                logger.info("Badge %s renewed", badge_id)

            AccessService.record(conn, badge_id, client_ip, user_agent)
            return self._fetch_by_id(conn, badge_id)

    def check_status(self, qr_code: Optional[str]) -> Badge:
        """Read-only usability check; does not log an access."""
        self._check_qr_code(qr_code)

        with self.db.get_connection() as conn:
            badge = self._fetch_by_qr(conn, qr_code)

        if badge is None:
            raise NotFoundError(BADGE_NOT_FOUND)
        if not badge.is_active:
            raise ForbiddenError(BADGE_INACTIVE)
        if utcnow() > to_utc_naive(badge.expiration_time):
            raise ForbiddenError(BADGE_EXPIRED)
        return badge

    # ----------------- administration -----------------

    def list_badges(self) -> List[Badge]:
        with self.db.get_connection() as conn:
            rows = conn.execute(
                text("SELECT * FROM badges ORDER BY created_at DESC, id DESC")
            ).mappings().all()
        return [Badge(**row) for row in rows]

    def get_badge(self, badge_id: int) -> Badge:
        with self.db.get_connection() as conn:
            badge = self._fetch_by_id(conn, badge_id)
        if badge is None:
            raise NotFoundError(BADGE_NOT_FOUND)
        return badge

    def create_badge(self, qr_code: Optional[str], name: Optional[str] = None,
                     device_brand: Optional[str] = None, device_model: Optional[str] = None,
                     expiration_time: Any = None) -> Badge:
        """
        expiration_time may be a datetime or an ISO string; anything missing,
        unreadable or out of range falls back to the event end.
        """
        self._check_qr_code(qr_code)
        self._check_device(device_brand, device_model)

        expiration = parse_expiration(expiration_time)
        if expiration is None or not is_valid_expiration(expiration):
            expiration = default_expiration()
        else:
            expiration = to_utc_naive(expiration)
        now = utcnow()

        try:
            with self.db.get_connection() as conn:
                if self._fetch_by_qr(conn, qr_code) is not None:
                    raise ConflictError(QR_CODE_EXISTS)

                result = conn.execute(
                    sql("""
                        INSERT INTO badges (qr_code, name, device_brand, device_model,
                                            expiration_time, created_at, updated_at)
                        VALUES (:qr, :name, :brand, :model, :exp, :now, :now)
                    """, "exp", "now"),
                    {
                        "qr": qr_code, "name": name or None, "brand": device_brand or None,
                        "model": device_model or None, "exp": expiration, "now": now,
                    },
                )
                badge = self._fetch_by_id(conn, result.lastrowid)
        except IntegrityError:
            # lost the race against another insert of the same QR code
            raise ConflictError(QR_CODE_EXISTS)

        logger.info("Badge %s created by admin", badge.id)
        return badge

    def update_badge(self, badge_id: int, name: Optional[str] = None,
                     device_brand: Optional[str] = None, device_model: Optional[str] = None,
                     expiration_time: Any = None,
                     is_active: Optional[bool] = None) -> Badge:
        """Absent fields keep their value; an unreadable or out-of-range expiration is ignored."""
        device_brand = device_brand or None
        device_model = device_model or None
        self._check_device(device_brand, device_model)

        with self.db.get_connection() as conn:
            current = self._fetch_by_id(conn, badge_id)
            if current is None:
                raise NotFoundError(BADGE_NOT_FOUND)

            expiration = current.expiration_time
            requested = parse_expiration(expiration_time)
            if requested is not None and is_valid_expiration(requested):
                expiration = to_utc_naive(requested)

            conn.execute(
                sql("""
                    UPDATE badges
                    SET name = COALESCE(:name, name),
                        device_brand = COALESCE(:brand, device_brand),
                        device_model = COALESCE(:model, device_model),
                        expiration_time = :exp,
                        is_active = COALESCE(:active, is_active),
                        updated_at = :now
                    WHERE id = :bid
                """, "exp", "now"),
                {
                    "name": name, "brand": device_brand, "model": device_model,
                    "exp": expiration, "active": is_active, "now": utcnow(), "bid": badge_id,
                },
            )
            return self._fetch_by_id(conn, badge_id)

    def delete_badge(self, badge_id: int) -> None:
        """Delete the badge and its accesses in one transaction."""
        with self.db.get_connection() as conn:
            if self._fetch_by_id(conn, badge_id) is None:
                raise NotFoundError(BADGE_NOT_FOUND)

            conn.execute(text("DELETE FROM accesses WHERE badge_id = :bid"), {"bid": badge_id})
            conn.execute(text("DELETE FROM badges WHERE id = :bid"), {"bid": badge_id})
        logger.info("Badge %s deleted with its accesses", badge_id)

    def close_event(self) -> int:
        """Deactivate every badge in one statement; returns the number of rows touched."""
        with self.db.get_connection() as conn:
            result = conn.execute(
                sql("UPDATE badges SET is_active = :active, updated_at = :now", "now"),
                {"active": False, "now": utcnow()},
            )
        logger.info("Event closed, %s badges deactivated", result.rowcount)
        return result.rowcount
