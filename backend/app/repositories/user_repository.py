from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import User, Session


async def find_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, email: str, hashed_password: str) -> User:
    user = User(email=email, hashed_password=hashed_password)
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


async def create_session(db: AsyncSession, user_id: int, token: str) -> Session:
    session = Session(user_id=user_id, token=token)
    db.add(session)
    await db.flush()
    return session


async def find_session_by_token(db: AsyncSession, token: str) -> Session | None:
    result = await db.execute(select(Session).where(Session.token == token))
    return result.scalars().first()
