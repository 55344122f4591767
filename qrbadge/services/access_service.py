# =======================================================================================
# qrbadge/services/access_service.py - Access Log
# =======================================================================================
from typing import List, Optional, Tuple
from sqlalchemy import text
from sqlalchemy.engine import Connection

from ..database import DatabaseManager, sql
from ..models.schemas import (
    Access, AccessStats, AccessWithBadge, Badge, DailyCount, DeviceCount,
)
from ..utils.exceptions import NotFoundError
from ..utils.logging import get_logger
from ..utils.validators import utcnow

logger = get_logger("accesses")

BADGE_NOT_FOUND = "Badge non trouvé"
ACCESS_NOT_FOUND = "Accès non trouvé"


class AccessService:
    """One immutable row per successful badge validation, plus read-back and stats."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    @staticmethod
    def record(conn: Connection, badge_id: int, ip_address: Optional[str],
               user_agent: Optional[str]) -> None:
        """Append an access row; runs inside the caller's transaction."""
        conn.execute(
            sql("""
                INSERT INTO accesses (badge_id, ip_address, user_agent, created_at)
                VALUES (:bid, :ip, :ua, :now)
            """, "now"),
            {"bid": badge_id, "ip": ip_address, "ua": user_agent, "now": utcnow()},
        )

    def list_accesses(self) -> List[AccessWithBadge]:
        with self.db.get_connection() as conn:
            rows = conn.execute(
                text("""
                    SELECT a.id, a.badge_id, a.ip_address, a.user_agent, a.created_at,
                           b.qr_code, b.name, b.device_brand, b.device_model
                    FROM accesses a
                    JOIN badges b ON a.badge_id = b.id
                    ORDER BY a.created_at DESC, a.id DESC
                """)
            ).mappings().all()
        return [AccessWithBadge(**row) for row in rows]

    def list_by_badge(self, badge_id: int) -> Tuple[Badge, List[Access]]:
        with self.db.get_connection() as conn:
            badge = conn.execute(
                text("SELECT * FROM badges WHERE id = :bid"), {"bid": badge_id}
            ).mappings().first()
            if not badge:
                raise NotFoundError(BADGE_NOT_FOUND)

            rows = conn.execute(
                text("""
                    SELECT id, badge_id, ip_address, user_agent, created_at
                    FROM accesses
                    WHERE badge_id = :bid
                    ORDER BY created_at DESC, id DESC
                """),
                {"bid": badge_id},
            ).mappings().all()
        return Badge(**badge), [Access(**row) for row in rows]

    def get_stats(self) -> AccessStats:
        """Totals, distinct badges, per-day counts and per-brand counts; independent queries."""
        with self.db.get_connection() as conn:
            total = conn.execute(text("SELECT COUNT(*) FROM accesses")).scalar_one()
            unique_badges = conn.execute(
                text("SELECT COUNT(DISTINCT badge_id) FROM accesses")
            ).scalar_one()

            daily = conn.execute(
                text("""
                    SELECT DATE(created_at) AS date, COUNT(*) AS count
                    FROM accesses
                    GROUP BY DATE(created_at)
                    ORDER BY date DESC
                """)
            ).mappings().all()

            devices = conn.execute(
                text("""
                    SELECT b.device_brand AS device_brand, COUNT(*) AS count
                    FROM accesses a
                    JOIN badges b ON a.badge_id = b.id
                    GROUP BY b.device_brand
                    ORDER BY count DESC
                """)
            ).mappings().all()

        return AccessStats(
            total=int(total or 0),
            uniqueBadges=int(unique_badges or 0),
            daily=[DailyCount(**row) for row in daily],
            devices=[DeviceCount(**row) for row in devices],
        )

    def delete_access(self, access_id: int) -> None:
        with self.db.get_connection() as conn:
            found = conn.execute(
                text("SELECT id FROM accesses WHERE id = :aid"), {"aid": access_id}
            ).first()
            if not found:
                raise NotFoundError(ACCESS_NOT_FOUND)

            conn.execute(text("DELETE FROM accesses WHERE id = :aid"), {"aid": access_id})
        logger.info("Access %s deleted", access_id)
