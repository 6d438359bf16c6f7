from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models import Enrollment


async def find_with_address_by_user_id(db: AsyncSession, user_id: int) -> Enrollment | None:
    result = await db.execute(
        select(Enrollment)
        .options(selectinload(Enrollment.address))
        .where(Enrollment.user_id == user_id)
    )
    return result.scalar_one_or_none()
