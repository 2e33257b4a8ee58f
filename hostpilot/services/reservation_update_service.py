import logging
from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hostpilot.models import ReservationUpdate

logger = logging.getLogger(__name__)


class ReservationUpdateService:
    """Writes the reservation_updates audit trail, one unit of work per row."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def create_reservation_update(
        self,
        guest_name: str,
        check_in: datetime,
        check_out: datetime,
        status: str,
        listing_id: str,
    ) -> ReservationUpdate:
        """
        Insert one row and commit it.

        Errors propagate: the dispatcher decides whether a failed write
        matters. No retry, no dedup.
        """
        async with self.session_factory() as session:
            update = ReservationUpdate(
                guest_name=guest_name,
                check_in_date=check_in,
                check_out_date=check_out,
                status=status,
                listing_id=listing_id,
            )
            session.add(update)
            await session.commit()

            logger.info(
                "Reservation update %s stored for listing %s",
                update.id,
                listing_id,
            )
            return update

    async def list_reservation_updates(self, limit: int = 100) -> List[ReservationUpdate]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ReservationUpdate)
                .order_by(ReservationUpdate.created_at, ReservationUpdate.id)
                .limit(limit)
            )
            return list(result.scalars().all())
