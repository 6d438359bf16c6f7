"""
Authentication service handling user registration and sign-in.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.schemas.user import UserCreate, SignIn
from app.core.exceptions import ConflictError, UnauthorizedError
from app.core.security import hash_password, verify_password, create_access_token
from app.core.logging import get_logger
from app.repositories import user_repository

logger = get_logger(__name__)


async def register_user(db: AsyncSession, user_data: UserCreate) -> User:
    """
    Register a new user with hashed password.
    Raises 409 if the email is already registered.
    """
    if await user_repository.find_user_by_email(db, user_data.email):
        logger.warning("registration_failed", reason="email_exists", email=user_data.email)
        raise ConflictError("There is already an user with given email")

    user = await user_repository.create_user(
        db, email=user_data.email, hashed_password=hash_password(user_data.password)
    )

    logger.info("user_registered", user_id=user.id, email=user.email)
    return user


async def sign_in(db: AsyncSession, login_data: SignIn) -> tuple[User, str]:
    """
    Check credentials, issue a JWT and persist the session holding it.
    Raises 401 if credentials are invalid.
    """
    user = await user_repository.find_user_by_email(db, login_data.email)

    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed", email=login_data.email)
        raise UnauthorizedError("email or password are incorrect")

    token = create_access_token(data={"userId": user.id})
    await user_repository.create_session(db, user.id, token)

    logger.info("user_signed_in", user_id=user.id)
    return user, token
