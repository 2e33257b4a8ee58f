import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from hostpilot.database import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ReservationUpdate(Base):
    """
    Append-only audit row for a booking change that landed inside the
    cleaner notification window. Never updated or deleted.
    """

    __tablename__ = "reservation_updates"
    # Fetch created_at right after INSERT so callers never lazy-load it
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    guest_name: Mapped[str] = mapped_column(String)

    # Naive UTC, same as the booking timestamps after normalization
    check_in_date: Mapped[datetime] = mapped_column(DateTime)
    check_out_date: Mapped[datetime] = mapped_column(DateTime)

    # Raw Lodgify status ("Booked", "Tentative", "Declined", ...)
    status: Mapped[str] = mapped_column(String)
    # Naive UTC with microseconds, assigned at insert; listings order by it
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, server_default=func.now()
    )
    listing_id: Mapped[str] = mapped_column(String, index=True)

    def __repr__(self) -> str:
        return (
            f"<ReservationUpdate {self.id} listing={self.listing_id} "
            f"guest={self.guest_name!r} status={self.status}>"
        )
