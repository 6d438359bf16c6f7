from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Room


async def find_room_by_id(db: AsyncSession, room_id: int, for_update: bool = False) -> Room | None:
    """
    Load a room by id.

    With for_update=True the row stays locked (SELECT ... FOR UPDATE) until the
    surrounding transaction ends, so concurrent writers targeting the same room
    count its occupants one at a time. SQLite ignores the lock clause.
    """
    query = select(Room).where(Room.id == room_id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()
