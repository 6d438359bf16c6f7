"""
Password hashing, JWT issuing and the bearer-token dependency.

A request is authenticated only when the JWT decodes with our secret AND a
persisted session still holds that exact token.
"""

from datetime import datetime, timedelta, timezone

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import UnauthorizedError
from app.core.logging import get_logger
from app.db.session import get_db
from app.repositories import user_repository

logger = get_logger(__name__)
settings = get_settings()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

bearer_scheme = HTTPBearer(
    scheme_name="JWT",
    description="Token returned by POST /auth/sign-in",
    auto_error=False,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> int:
    """Resolve the caller's user id or raise 401."""
    if credentials is None:
        raise UnauthorizedError()

    token = credentials.credentials
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        logger.info("auth_rejected", reason="invalid_token")
        raise UnauthorizedError()

    user_id = payload.get("userId")
    if not isinstance(user_id, int):
        raise UnauthorizedError()

    session = await user_repository.find_session_by_token(db, token)
    if session is None or session.user_id != user_id:
        logger.info("auth_rejected", reason="no_session", user_id=user_id)
        raise UnauthorizedError()

    return user_id
