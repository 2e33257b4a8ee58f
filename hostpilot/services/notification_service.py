import logging
from typing import Protocol

from hostpilot.models import ReservationUpdate

logger = logging.getLogger(__name__)


class CleanerNotifier(Protocol):
    """Hand-off point to whatever actually pings the cleaners."""

    async def enqueue(self, update: ReservationUpdate) -> None: ...


class LoggingCleanerNotifier:
    """
    Default notifier: records the hand-off in the log.

    The workflow engine that delivers cleaner messages lives outside this
    service; swap in a real CleanerNotifier once it exposes an enqueue API.
    """

    async def enqueue(self, update: ReservationUpdate) -> None:
        logger.info(
            "Notify cleaner: listing %s, guest %r, arrival %s (%s)",
            update.listing_id,
            update.guest_name,
            update.check_in_date.isoformat(),
            update.status,
            extra={
                "reservation_update_id": update.id,
                "listing_id": update.listing_id,
            },
        )


notification_service = LoggingCleanerNotifier()
