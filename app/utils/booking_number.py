"""Booking reference generation."""

import random
import string

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


async def generate_booking_reference(db: AsyncSession) -> str:
    """Generate a unique booking reference in format HS-XXXXXX.

    Args:
        db: Database session for uniqueness check

    Returns:
        str: Unique booking reference like 'HS-A3B7K9'
    """
    from app.models.booking import Booking

    chars = string.ascii_uppercase + string.digits
    while True:
        reference = f"HS-{''.join(random.choices(chars, k=6))}"

        result = await db.execute(
            select(Booking.id).where(Booking.booking_reference == reference)
        )
        if result.scalar_one_or_none() is None:
            return reference
