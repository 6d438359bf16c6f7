from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models import Booking


async def find_booking_by_user_id(db: AsyncSession, user_id: int) -> Booking | None:
    """The user's booking with its room eagerly loaded."""
    result = await db.execute(
        select(Booking)
        .options(selectinload(Booking.room))
        .where(Booking.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def find_bookings_by_room_id(db: AsyncSession, room_id: int) -> list[Booking]:
    result = await db.execute(select(Booking).where(Booking.room_id == room_id))
    return list(result.scalars().all())


async def find_booking_by_id(db: AsyncSession, booking_id: int) -> Booking | None:
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    return result.scalar_one_or_none()


async def create_booking(db: AsyncSession, user_id: int, room_id: int) -> Booking:
    booking = Booking(user_id=user_id, room_id=room_id)
    db.add(booking)
    await db.flush()
    await db.refresh(booking)
    return booking


async def update_booking(db: AsyncSession, booking_id: int, room_id: int) -> int:
    """Point an existing booking at another room. Returns the booking id."""
    await db.execute(
        update(Booking)
        .where(Booking.id == booking_id)
        .values(room_id=room_id)
        .execution_options(synchronize_session="fetch")
    )
    return booking_id
