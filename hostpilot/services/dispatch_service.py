import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Sequence

from hostpilot.lodgify.schemas import (
    AvailabilityChangeEvent,
    BookingChangeEvent,
    GuestMessageReceivedEvent,
    RateChangeEvent,
    WebhookEvent,
)
from hostpilot.services.notification_service import CleanerNotifier
from hostpilot.services.reservation_update_service import ReservationUpdateService

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


class DispatchResult(str, Enum):
    PERSISTED = "persisted"  # inside the window, row written
    SKIPPED = "skipped"  # booking_change outside the window
    OBSERVED = "observed"  # logged only
    FAILED = "failed"  # persistence error, swallowed
    IGNORED = "ignored"  # decoded but no handler


@dataclass
class DispatchOutcome:
    index: int
    action: str
    result: DispatchResult
    detail: Optional[str] = None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def hours_until(arrival: datetime, now: datetime) -> float:
    return (arrival - now).total_seconds() / SECONDS_PER_HOUR


def _naive_utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class WebhookDispatcher:
    """
    Applies per-action handling to decoded Lodgify events.

    Events are handled one at a time in payload order and each one stands
    alone: a failed write is logged and the batch carries on.
    """

    def __init__(
        self,
        store: ReservationUpdateService,
        notifier: CleanerNotifier,
        threshold_hours: float = 72.0,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.notifier = notifier
        self.threshold_hours = threshold_hours
        self.clock = clock

    async def dispatch(self, events: Sequence[WebhookEvent]) -> List[DispatchOutcome]:
        outcomes = []
        for index, event in enumerate(events):
            outcome = await self._dispatch_one(index, event)
            logger.debug(
                "Event %s (%s): %s", index, outcome.action, outcome.result.value
            )
            outcomes.append(outcome)
        return outcomes

    async def _dispatch_one(self, index: int, event: WebhookEvent) -> DispatchOutcome:
        if isinstance(event, BookingChangeEvent):
            return await self.handle_booking_change(index, event)

        if isinstance(event, RateChangeEvent):
            logger.info(
                "Rate change for property %s, room types %s",
                event.property_id,
                event.room_type_ids,
            )
            return DispatchOutcome(index, event.action, DispatchResult.OBSERVED)

        if isinstance(event, AvailabilityChangeEvent):
            logger.info(
                "Availability change for property %s (%s -> %s, source %s)",
                event.property_id,
                event.start.isoformat(),
                event.end.isoformat(),
                event.source,
            )
            return DispatchOutcome(index, event.action, DispatchResult.OBSERVED)

        if isinstance(event, GuestMessageReceivedEvent):
            # Auto-reply enqueueing attaches here once the messaging side exists
            logger.info(
                "Guest message %s in thread %s from %r",
                event.message_id,
                event.thread_uid,
                event.guest_name,
            )
            return DispatchOutcome(index, event.action, DispatchResult.OBSERVED)

        return DispatchOutcome(
            index, getattr(event, "action", "unknown"), DispatchResult.IGNORED
        )

    async def handle_booking_change(
        self, index: int, event: BookingChangeEvent
    ) -> DispatchOutcome:
        booking = event.booking
        hours = hours_until(booking.date_arrival, self.clock())

        if hours >= self.threshold_hours:
            logger.info(
                "Booking %s arrives in %.1fh (threshold %sh), no cleaner notification",
                booking.id,
                hours,
                self.threshold_hours,
            )
            return DispatchOutcome(index, event.action, DispatchResult.SKIPPED)

        try:
            update = await self.store.create_reservation_update(
                guest_name=event.guest.name or "",
                check_in=_naive_utc(booking.date_arrival),
                check_out=_naive_utc(booking.date_departure),
                status=booking.status,
                listing_id=str(booking.property_id),
            )
        except Exception as e:
            logger.error(
                "Failed to store reservation update for booking %s: %s",
                booking.id,
                e,
                exc_info=True,
                extra={
                    "booking_id": booking.id,
                    "action": event.action,
                    "event_index": index,
                },
            )
            return DispatchOutcome(
                index, event.action, DispatchResult.FAILED, detail=str(e)
            )

        try:
            await self.notifier.enqueue(update)
        except Exception as e:
            # The audit row is already committed; only the hand-off is lost
            logger.error(
                "Cleaner notification enqueue failed for booking %s: %s",
                booking.id,
                e,
                exc_info=True,
                extra={"booking_id": booking.id, "event_index": index},
            )

        return DispatchOutcome(index, event.action, DispatchResult.PERSISTED)
