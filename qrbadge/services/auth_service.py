# =======================================================================================
# qrbadge/services/auth_service.py - Password hashing and bearer tokens
# =======================================================================================
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from ..config import config
from ..models.schemas import TokenClaims
from ..utils.exceptions import UnauthorizedError

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

AUTH_REQUIRED = "Authentification requise"
TOKEN_EXPIRED = "Token expiré"
TOKEN_INVALID = "Token invalide"


class AuthService:
    """Hashes passwords and signs/verifies the stateless admin tokens."""

    def __init__(self, secret: Optional[str] = None, algorithm: Optional[str] = None,
                 expire_hours: Optional[int] = None):
        self.secret = secret or config.JWT_SECRET
        self.algorithm = algorithm or config.JWT_ALGORITHM
        self.expire_hours = expire_hours or config.JWT_EXPIRE_HOURS

    def hash_password(self, password: str) -> str:
        return pwd_context.hash(password)

    def verify_password(self, plain_password: Optional[str], hashed_password: str) -> bool:
        if not plain_password:
            return False
        return pwd_context.verify(plain_password, hashed_password)

    def create_token(self, user_id: int, role: str, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "id": user_id,
            "role": role,
            "iat": issued_at,
            "exp": issued_at + timedelta(hours=self.expire_hours),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_token(self, token: str) -> TokenClaims:
        """
        Verify signature and expiry and return the typed claims.
        Raises UnauthorizedError with a reason the client can show.
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise UnauthorizedError(TOKEN_EXPIRED)
        except JWTError:
            raise UnauthorizedError(TOKEN_INVALID)

        try:
            return TokenClaims(
                subject_id=payload["id"],
                role=payload["role"],
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError):
            raise UnauthorizedError(TOKEN_INVALID)
