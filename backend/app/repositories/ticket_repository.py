from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models import Ticket


async def find_ticket_by_enrollment_id(db: AsyncSession, enrollment_id: int) -> Ticket | None:
    """The enrollment's ticket with its ticket type eagerly loaded."""
    result = await db.execute(
        select(Ticket)
        .options(selectinload(Ticket.ticket_type))
        .where(Ticket.enrollment_id == enrollment_id)
    )
    return result.scalar_one_or_none()
