"""
Password hashing and JWT access tokens
"""
from datetime import datetime, timedelta, timezone
from typing import List, Optional
import logging

from jose import jwt, JWTError
from passlib.context import CryptContext

from ..config import settings
from ..domain.repositories import IAuthProvider

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


def _truncate_to_72_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class JwtAuthProvider(IAuthProvider):
    """passlib hashing plus HS256 bearer tokens carrying the user id in `sub`"""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60 * 24,
        schemes: Optional[List[str]] = None
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
        self.pwd_context = CryptContext(schemes=schemes or ["bcrypt"], deprecated="auto")

    def hash_password(self, password: str) -> str:
        return self.pwd_context.hash(_truncate_to_72_bytes(password))

    def verify_password(self, password: str, password_hash: str) -> bool:
        if not password_hash:
            return False
        try:
            return self.pwd_context.verify(_truncate_to_72_bytes(password), password_hash)
        except ValueError:
            # Stored value is not a hash this context understands
            logger.warning("Unrecognized password hash format")
            return False

    def create_access_token(self, user_id: str) -> str:
        expire = datetime.now(timezone.utc) + timedelta(minutes=self.expire_minutes)
        to_encode = {"sub": user_id, "type": "access", "exp": expire}
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> Optional[str]:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None

        if payload.get("type") != "access":
            return None
        return payload.get("sub")


# Global auth provider instance
auth_provider = JwtAuthProvider(
    secret_key=settings.JWT_SECRET_KEY,
    algorithm=settings.JWT_ALGORITHM,
    expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    schemes=settings.PASSWORD_HASH_SCHEMES,
)


async def get_auth_provider() -> IAuthProvider:
    """Dependency for getting the auth provider"""
    return auth_provider
