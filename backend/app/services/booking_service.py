"""
Booking service: eligibility and capacity rules for hotel rooms.

RULES
=====

Create (checked in this order, the first failure wins):
  1. The user has an enrollment                       -> else 403
  2. Its ticket is PAID, not remote, includes hotel   -> else 403
  3. The room exists                                  -> else 404
  4. The user holds no booking yet                    -> else 403
  5. Bookings in the room < room capacity             -> else 403

Update (ticket eligibility is not re-checked):
  1. The booking exists                               -> else 404
  2. The booking belongs to the caller                -> else 403
  3. The target room exists                           -> else 404
  4. Bookings in the target room < its capacity       -> else 403
  Moving into the room the caller already occupies counts the caller's own
  booking like any other occupant.

CONCURRENCY STRATEGY: Pessimistic room lock
===========================================

Problem:
  Two users ask for the last bed of a room simultaneously.
  Both count N-1 occupants, both insert. Result: N+1 occupants.

Solution:
  When BOOKING_ROOM_LOCK is on, the target room is read with
  SELECT ... FOR UPDATE before counting its bookings. A second writer for the
  same room blocks on that row until the first transaction commits, then
  counts the committed booking. Rooms hold a handful of guests, so
  serializing writers per room costs nothing measurable.

  Duplicate bookings for one user are rejected by the policy and, for two
  racing requests, by the unique constraint on bookings.user_id. The
  constraint violation is reported as 403 like the policy check.

  With the flag off the service does a plain read-then-write and the
  overbooking race above is possible.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Booking, Room, TicketStatus
from app.core.config import get_settings
from app.core.exceptions import ForbiddenError, NotFoundError
from app.core.logging import get_logger
from app.core.metrics import booking_latency, record_booking_attempt
from app.repositories import (
    booking_repository,
    enrollment_repository,
    room_repository,
    ticket_repository,
)

logger = get_logger(__name__)
settings = get_settings()


def _reject(operation: str, error: Exception, reason: str, **context) -> Exception:
    outcome = "not_found" if isinstance(error, NotFoundError) else "forbidden"
    record_booking_attempt(operation, outcome)
    logger.info("booking_rejected", operation=operation, reason=reason, **context)
    return error


async def _load_room(db: AsyncSession, operation: str, room_id: int) -> Room:
    room = await room_repository.find_room_by_id(db, room_id, for_update=settings.BOOKING_ROOM_LOCK)
    if not room:
        raise _reject(operation, NotFoundError("Room not found"), "room_not_found", room_id=room_id)
    return room


async def _ensure_vacancy(db: AsyncSession, operation: str, room: Room) -> None:
    occupants = await booking_repository.find_bookings_by_room_id(db, room.id)
    if len(occupants) >= room.capacity:
        raise _reject(
            operation,
            ForbiddenError("Room is fully booked"),
            "room_full",
            room_id=room.id,
            capacity=room.capacity,
            occupants=len(occupants),
        )


async def _ensure_hotel_ticket(db: AsyncSession, user_id: int) -> None:
    enrollment = await enrollment_repository.find_with_address_by_user_id(db, user_id)
    if not enrollment:
        raise _reject("create", ForbiddenError("Enrollment not found"), "no_enrollment", user_id=user_id)

    ticket = await ticket_repository.find_ticket_by_enrollment_id(db, enrollment.id)
    if (
        not ticket
        or ticket.status != TicketStatus.PAID
        or ticket.ticket_type.is_remote
        or not ticket.ticket_type.includes_hotel
    ):
        raise _reject(
            "create",
            ForbiddenError("Ticket does not include a hotel stay"),
            "ineligible_ticket",
            user_id=user_id,
            ticket_id=ticket.id if ticket else None,
        )


async def get_user_booking(db: AsyncSession, user_id: int) -> Booking:
    """Return the user's booking with its room. Raises 404 if there is none."""
    booking = await booking_repository.find_booking_by_user_id(db, user_id)
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


async def create_booking(db: AsyncSession, user_id: int, room_id: int) -> Booking:
    """Reserve a room for a user with a paid in-person hotel ticket."""
    with booking_latency.labels(operation="create").time():
        await _ensure_hotel_ticket(db, user_id)

        room = await _load_room(db, "create", room_id)

        if await booking_repository.find_booking_by_user_id(db, user_id):
            raise _reject("create", ForbiddenError("User already has a booking"), "already_booked", user_id=user_id)

        await _ensure_vacancy(db, "create", room)

        try:
            booking = await booking_repository.create_booking(db, user_id, room_id)
        except IntegrityError:
            # A concurrent request booked for this user between check and insert
            await db.rollback()
            raise _reject("create", ForbiddenError("User already has a booking"), "already_booked", user_id=user_id)

        record_booking_attempt("create", "success")
        logger.info(
            "booking_created",
            booking_id=booking.id,
            user_id=user_id,
            room_id=room_id,
        )
        return booking


async def update_booking(db: AsyncSession, user_id: int, room_id: int, booking_id: int) -> int:
    """Move the caller's booking to another room. Returns the unchanged booking id."""
    with booking_latency.labels(operation="update").time():
        booking = await booking_repository.find_booking_by_id(db, booking_id)
        if not booking:
            raise _reject("update", NotFoundError("Booking not found"), "booking_not_found", booking_id=booking_id)

        if booking.user_id != user_id:
            raise _reject(
                "update",
                ForbiddenError("Booking belongs to another user"),
                "not_owner",
                booking_id=booking_id,
                user_id=user_id,
            )

        previous_room_id = booking.room_id
        room = await _load_room(db, "update", room_id)
        await _ensure_vacancy(db, "update", room)

        updated_id = await booking_repository.update_booking(db, booking_id, room_id)

        record_booking_attempt("update", "success")
        logger.info(
            "booking_updated",
            booking_id=updated_id,
            user_id=user_id,
            from_room_id=previous_room_id,
            to_room_id=room_id,
        )
        return updated_id
