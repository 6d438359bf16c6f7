"""
Unit tests for the booking policy with the repositories stubbed out.

These pin down the order in which rules are evaluated, which decides the
status code a caller sees when several rules fail at once.
"""

from types import SimpleNamespace

import pytest

from app.core.exceptions import ForbiddenError, NotFoundError
from app.models import TicketStatus
from app.services import booking_service


class FakeRepositories:
    """In-memory stand-ins for the collaborator functions the policy calls."""

    def __init__(self, monkeypatch, enrollment=None, ticket=None, rooms=None, bookings=None):
        self.enrollment = enrollment
        self.ticket = ticket
        self.rooms = {room.id: room for room in (rooms or [])}
        self.bookings = list(bookings or [])
        self.calls = []
        self.locked_rooms = []

        repos = booking_service
        monkeypatch.setattr(repos.enrollment_repository, "find_with_address_by_user_id", self.find_enrollment)
        monkeypatch.setattr(repos.ticket_repository, "find_ticket_by_enrollment_id", self.find_ticket)
        monkeypatch.setattr(repos.room_repository, "find_room_by_id", self.find_room)
        monkeypatch.setattr(repos.booking_repository, "find_booking_by_user_id", self.find_by_user)
        monkeypatch.setattr(repos.booking_repository, "find_bookings_by_room_id", self.find_by_room)
        monkeypatch.setattr(repos.booking_repository, "find_booking_by_id", self.find_by_id)
        monkeypatch.setattr(repos.booking_repository, "create_booking", self.create)
        monkeypatch.setattr(repos.booking_repository, "update_booking", self.update)

    async def find_enrollment(self, db, user_id):
        self.calls.append("enrollment")
        return self.enrollment

    async def find_ticket(self, db, enrollment_id):
        self.calls.append("ticket")
        return self.ticket

    async def find_room(self, db, room_id, for_update=False):
        self.calls.append("room")
        if for_update:
            self.locked_rooms.append(room_id)
        return self.rooms.get(room_id)

    async def find_by_user(self, db, user_id):
        self.calls.append("booking_by_user")
        return next((b for b in self.bookings if b.user_id == user_id), None)

    async def find_by_room(self, db, room_id):
        self.calls.append("bookings_by_room")
        return [b for b in self.bookings if b.room_id == room_id]

    async def find_by_id(self, db, booking_id):
        self.calls.append("booking_by_id")
        return next((b for b in self.bookings if b.id == booking_id), None)

    async def create(self, db, user_id, room_id):
        booking = SimpleNamespace(id=len(self.bookings) + 1, user_id=user_id, room_id=room_id)
        self.bookings.append(booking)
        return booking

    async def update(self, db, booking_id, room_id):
        booking = await self.find_by_id(db, booking_id)
        booking.room_id = room_id
        return booking_id


def _ticket(status=TicketStatus.PAID, is_remote=False, includes_hotel=True):
    ticket_type = SimpleNamespace(is_remote=is_remote, includes_hotel=includes_hotel)
    return SimpleNamespace(id=7, status=status, ticket_type=ticket_type)


def _room(room_id, capacity):
    return SimpleNamespace(id=room_id, capacity=capacity)


def _booking(booking_id, user_id, room_id):
    return SimpleNamespace(id=booking_id, user_id=user_id, room_id=room_id)


ENROLLMENT = SimpleNamespace(id=11)


@pytest.mark.asyncio
async def test_create_checks_ticket_before_room(monkeypatch):
    """Ineligible caller asking for a missing room gets 403, not 404."""
    repos = FakeRepositories(monkeypatch, enrollment=ENROLLMENT, ticket=None)

    with pytest.raises(ForbiddenError):
        await booking_service.create_booking(None, user_id=1, room_id=99)
    assert "room" not in repos.calls


@pytest.mark.asyncio
async def test_create_without_enrollment_skips_ticket_lookup(monkeypatch):
    repos = FakeRepositories(monkeypatch)

    with pytest.raises(ForbiddenError):
        await booking_service.create_booking(None, user_id=1, room_id=1)
    assert repos.calls == ["enrollment"]


@pytest.mark.asyncio
async def test_create_checks_room_before_existing_booking(monkeypatch):
    """Already booked caller asking for a missing room gets 404."""
    FakeRepositories(
        monkeypatch,
        enrollment=ENROLLMENT,
        ticket=_ticket(),
        bookings=[_booking(1, user_id=1, room_id=5)],
    )

    with pytest.raises(NotFoundError):
        await booking_service.create_booking(None, user_id=1, room_id=99)


@pytest.mark.asyncio
async def test_create_existing_booking_wins_over_full_room(monkeypatch):
    repos = FakeRepositories(
        monkeypatch,
        enrollment=ENROLLMENT,
        ticket=_ticket(),
        rooms=[_room(5, capacity=1)],
        bookings=[_booking(1, user_id=1, room_id=5)],
    )

    with pytest.raises(ForbiddenError):
        await booking_service.create_booking(None, user_id=1, room_id=5)
    assert "bookings_by_room" not in repos.calls


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "ticket",
    [
        _ticket(status=TicketStatus.RESERVED),
        _ticket(is_remote=True),
        _ticket(includes_hotel=False),
        _ticket(is_remote=True, includes_hotel=True),
    ],
)
async def test_create_rejects_ineligible_ticket(monkeypatch, ticket):
    FakeRepositories(monkeypatch, enrollment=ENROLLMENT, ticket=ticket, rooms=[_room(5, capacity=3)])

    with pytest.raises(ForbiddenError):
        await booking_service.create_booking(None, user_id=1, room_id=5)


@pytest.mark.asyncio
async def test_create_at_capacity(monkeypatch):
    repos = FakeRepositories(
        monkeypatch,
        enrollment=ENROLLMENT,
        ticket=_ticket(),
        rooms=[_room(5, capacity=2)],
        bookings=[_booking(1, user_id=2, room_id=5), _booking(2, user_id=3, room_id=5)],
    )

    with pytest.raises(ForbiddenError):
        await booking_service.create_booking(None, user_id=1, room_id=5)
    assert len(repos.bookings) == 2


@pytest.mark.asyncio
async def test_create_below_capacity(monkeypatch):
    repos = FakeRepositories(
        monkeypatch,
        enrollment=ENROLLMENT,
        ticket=_ticket(),
        rooms=[_room(5, capacity=2)],
        bookings=[_booking(1, user_id=2, room_id=5)],
    )

    booking = await booking_service.create_booking(None, user_id=1, room_id=5)

    assert booking.user_id == 1
    assert booking.room_id == 5
    assert len(repos.bookings) == 2


@pytest.mark.asyncio
async def test_room_lock_follows_setting(monkeypatch):
    repos = FakeRepositories(monkeypatch, enrollment=ENROLLMENT, ticket=_ticket(), rooms=[_room(5, capacity=2)])
    monkeypatch.setattr(booking_service.settings, "BOOKING_ROOM_LOCK", False)

    await booking_service.create_booking(None, user_id=1, room_id=5)
    assert repos.locked_rooms == []

    monkeypatch.setattr(booking_service.settings, "BOOKING_ROOM_LOCK", True)
    await booking_service.create_booking(None, user_id=2, room_id=5)
    assert repos.locked_rooms == [5]


@pytest.mark.asyncio
async def test_update_missing_booking(monkeypatch):
    FakeRepositories(monkeypatch, rooms=[_room(5, capacity=2)])

    with pytest.raises(NotFoundError):
        await booking_service.update_booking(None, user_id=1, room_id=5, booking_id=42)


@pytest.mark.asyncio
async def test_update_ownership_checked_before_room(monkeypatch):
    """Someone else's booking and a missing room: 403 wins."""
    repos = FakeRepositories(monkeypatch, bookings=[_booking(42, user_id=2, room_id=5)])

    with pytest.raises(ForbiddenError):
        await booking_service.update_booking(None, user_id=1, room_id=99, booking_id=42)
    assert "room" not in repos.calls


@pytest.mark.asyncio
async def test_update_missing_room(monkeypatch):
    FakeRepositories(monkeypatch, bookings=[_booking(42, user_id=1, room_id=5)], rooms=[_room(5, capacity=2)])

    with pytest.raises(NotFoundError):
        await booking_service.update_booking(None, user_id=1, room_id=99, booking_id=42)


@pytest.mark.asyncio
async def test_update_skips_ticket_checks(monkeypatch):
    repos = FakeRepositories(
        monkeypatch,
        bookings=[_booking(42, user_id=1, room_id=5)],
        rooms=[_room(5, capacity=2), _room(6, capacity=1)],
    )

    booking_id = await booking_service.update_booking(None, user_id=1, room_id=6, booking_id=42)

    assert booking_id == 42
    assert repos.bookings[0].room_id == 6
    assert "enrollment" not in repos.calls
    assert "ticket" not in repos.calls


@pytest.mark.asyncio
async def test_update_into_own_room_counts_self(monkeypatch):
    FakeRepositories(
        monkeypatch,
        bookings=[_booking(42, user_id=1, room_id=5)],
        rooms=[_room(5, capacity=1)],
    )

    with pytest.raises(ForbiddenError):
        await booking_service.update_booking(None, user_id=1, room_id=5, booking_id=42)


@pytest.mark.asyncio
async def test_get_user_booking_not_found(monkeypatch):
    FakeRepositories(monkeypatch)

    with pytest.raises(NotFoundError):
        await booking_service.get_user_booking(None, user_id=1)
