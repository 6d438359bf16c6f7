"""
Booking endpoints: read, create and move the caller's hotel room booking.
"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.booking import BookingBody, BookingResponse, BookingIdResponse
from app.services import booking_service
from app.services.cache_service import get_cached_booking, set_cached_booking, invalidate_booking_cache
from app.core.security import get_current_user_id
from app.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/booking", tags=["Booking"])


async def _commit_then_invalidate(db: AsyncSession, user_id: int) -> None:
    # Readers see the old row until commit, so the key goes after it
    await db.commit()
    await invalidate_booking_cache(user_id)


@router.get("", response_model=BookingResponse)
async def get_booking(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the caller's booking and the room it points to.
    Served from Redis when cached; 404 when the caller has no booking.
    """
    cached = await get_cached_booking(user_id)
    if cached:
        logger.info("booking_cache_hit", user_id=user_id)
        return BookingResponse.model_validate(cached)

    booking = await booking_service.get_user_booking(db, user_id)
    response = BookingResponse.model_validate(booking)

    await set_cached_booking(user_id, response.model_dump(mode="json"))
    return response


@router.post("", response_model=BookingIdResponse)
async def create_booking(
    body: BookingBody,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Reserve a room. Requires an enrollment with a paid, in-person ticket
    that includes hotel, no previous booking, and a free bed in the room.
    """
    booking = await booking_service.create_booking(db, user_id, body.room_id)
    await _commit_then_invalidate(db, user_id)
    return BookingIdResponse(booking_id=booking.id)


@router.put("/{booking_id}", response_model=BookingIdResponse)
async def update_booking(
    body: BookingBody,
    booking_id: int = Path(..., gt=0),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Move the caller's booking to another room with a free bed."""
    updated_id = await booking_service.update_booking(db, user_id, body.room_id, booking_id)
    await _commit_then_invalidate(db, user_id)
    return BookingIdResponse(booking_id=updated_id)
