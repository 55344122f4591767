# =======================================================================================
# qrbadge/services/user_service.py - User Management Service
# =======================================================================================
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import text
from sqlalchemy.engine import Connection

from ..database import DatabaseManager, sql
from ..models.schemas import User, UserRecord
from ..utils.exceptions import (
    ConflictError, InvalidInputError, NotFoundError, UnauthorizedError,
)
from ..utils.logging import get_logger
from ..utils.validators import (
    is_valid_email, is_valid_password, is_valid_username, utcnow,
)
from .auth_service import AuthService

logger = get_logger("users")

USER_COLUMNS = "id, name, email, role, created_at, updated_at"

INVALID_NAME = "Nom invalide"
INVALID_EMAIL = "Email invalide"
INVALID_PASSWORD = "Mot de passe invalide (minimum 8 caractères)"
INVALID_CREDENTIALS = "Identifiants invalides"
EMAIL_TAKEN = "Cet email est déjà utilisé"
USER_NOT_FOUND = "Utilisateur non trouvé"


class UserService:
    """Admin accounts: login, CRUD. The password hash never leaves this class."""

    def __init__(self, db: DatabaseManager, auth: Optional[AuthService] = None):
        self.db = db
        self.auth = auth or AuthService()

    # ----------------- helpers -----------------

    @staticmethod
    def _fetch(conn: Connection, user_id: int) -> Optional[User]:
        row = conn.execute(
            text(f"SELECT {USER_COLUMNS} FROM users WHERE id = :uid"), {"uid": user_id}
        ).mappings().first()
        return User(**row) if row else None

    @staticmethod
    def _email_taken(conn: Connection, email: str, exclude_id: Optional[int] = None) -> bool:
        query = "SELECT id FROM users WHERE email = :email"
        params: Dict[str, Any] = {"email": email}
        if exclude_id is not None:
            query += " AND id <> :uid"
            params["uid"] = exclude_id
        return conn.execute(text(query), params).first() is not None

    # ----------------- login -----------------

    def login(self, email: Optional[str], password: Optional[str]) -> Tuple[User, str]:
        """
        Check credentials and issue a token.
        Unknown email and wrong password fail with the same message.
        """
        if not is_valid_email(email):
            raise InvalidInputError(INVALID_EMAIL)

        with self.db.get_connection() as conn:
            row = conn.execute(
                text(f"SELECT {USER_COLUMNS}, password FROM users WHERE email = :email"),
                {"email": email},
            ).mappings().first()

        if not row or not self.auth.verify_password(password, row["password"]):
            logger.warning("Failed login for %s", email)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        record = UserRecord(**row)
        token = self.auth.create_token(record.id, record.role)
        return record.public(), token

    # ----------------- CRUD -----------------

    def list_users(self) -> List[User]:
        with self.db.get_connection() as conn:
            rows = conn.execute(
                text(f"SELECT {USER_COLUMNS} FROM users ORDER BY created_at DESC, id DESC")
            ).mappings().all()
        return [User(**row) for row in rows]

    def get_user(self, user_id: int) -> User:
        with self.db.get_connection() as conn:
            user = self._fetch(conn, user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)
        return user

    def create_user(self, name: Optional[str], email: Optional[str], password: Optional[str],
                    role: Optional[str] = None) -> User:
        if not is_valid_username(name):
            raise InvalidInputError(INVALID_NAME)
        if not is_valid_email(email):
            raise InvalidInputError(INVALID_EMAIL)
        if not is_valid_password(password):
            raise InvalidInputError(INVALID_PASSWORD)

        now = utcnow()
        with self.db.get_connection() as conn:
            if self._email_taken(conn, email):
                raise ConflictError(EMAIL_TAKEN)

            result = conn.execute(
                sql("""
                    INSERT INTO users (name, email, password, role, created_at, updated_at)
                    VALUES (:name, :email, :password, :role, :now, :now)
                """, "now"),
                {
                    "name": name, "email": email,
                    "password": self.auth.hash_password(password),
                    "role": role or "user", "now": now,
                },
            )
            user = self._fetch(conn, result.lastrowid)

        logger.info("User %s created with role %s", user.id, user.role)
        return user

    def update_user(self, user_id: int, name: Optional[str] = None, email: Optional[str] = None,
                    password: Optional[str] = None, role: Optional[str] = None) -> User:
        """Only the supplied fields are validated and written."""
        with self.db.get_connection() as conn:
            current = self._fetch(conn, user_id)
            if current is None:
                raise NotFoundError(USER_NOT_FOUND)

            if name is not None and not is_valid_username(name):
                raise InvalidInputError(INVALID_NAME)
            if email is not None and not is_valid_email(email):
                raise InvalidInputError(INVALID_EMAIL)
            if password is not None and not is_valid_password(password):
                raise InvalidInputError(INVALID_PASSWORD)

            if email is not None and email != current.email and self._email_taken(conn, email, user_id):
                raise ConflictError(EMAIL_TAKEN)

            fields_to_set: List[str] = []
            params: Dict[str, Any] = {"uid": user_id, "now": utcnow()}

            if name is not None:
                fields_to_set.append("name = :name")
                params["name"] = name
            if email is not None:
                fields_to_set.append("email = :email")
                params["email"] = email
            if password is not None:
                fields_to_set.append("password = :password")
                params["password"] = self.auth.hash_password(password)
            if role is not None:
                fields_to_set.append("role = :role")
                params["role"] = role
            fields_to_set.append("updated_at = :now")

            conn.execute(
                sql(f"UPDATE users SET {', '.join(fields_to_set)} WHERE id = :uid", "now"),
                params,
            )
            return self._fetch(conn, user_id)

    def delete_user(self, user_id: int) -> None:
        with self.db.get_connection() as conn:
            if self._fetch(conn, user_id) is None:
                raise NotFoundError(USER_NOT_FOUND)
            conn.execute(text("DELETE FROM users WHERE id = :uid"), {"uid": user_id})
        logger.info("User %s deleted", user_id)
