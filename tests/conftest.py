"""
Pytest configuration for HostPilot tests
"""
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio

# Settings are read at import time: pin them before anything imports hostpilot
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LODGIFY_KEY"] = ""
os.environ["CLEAN_NOTIFY_THRESHOLD_HOURS"] = "72"

# Ensure hostpilot is importable without an install
sys.path.insert(0, str(Path(__file__).parent.parent))

NOW = datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)


def booking_change_event(
    booking_id=1001,
    arrival=None,
    departure=None,
    guest_name="Ada Lovelace",
    status="Booked",
    property_id=4321,
    **extra,
):
    """Minimal-but-complete booking_change payload as Lodgify sends it."""
    arrival = arrival or NOW + timedelta(hours=10)
    departure = departure or arrival + timedelta(days=3)
    event = {
        "action": "booking_change",
        "booking": {
            "type": "Booking",
            "id": booking_id,
            "date_arrival": arrival.isoformat(),
            "date_departure": departure.isoformat(),
            "date_created": (NOW - timedelta(days=1)).isoformat(),
            "property_id": property_id,
            "property_name": "Seaside Cabin",
            "property_image_url": "https://example.com/cabin.jpg",
            "status": status,
            "room_types": [
                {
                    "id": 1,
                    "room_type_id": 77,
                    "image_url": None,
                    "name": "Whole cabin",
                    "people": 2,
                }
            ],
            "add_ons": [],
            "currency_code": "EUR",
            "source": "Manual",
            "source_text": "Direct",
            "notes": None,
            "language": "en",
            "ip_address": None,
            "ip_country": None,
            "is_policy_active": True,
            "external_url": None,
            "nights": 3,
            "promotion_code": None,
        },
        "guest": {
            "uid": "g-1",
            "name": guest_name,
            "email": "ada@example.com",
            "phone_number": "+441234567",
            "country": "United Kingdom",
            "country_code": "GB",
        },
    }
    event.update(extra)
    return event


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_booking_event():
    return booking_change_event


@pytest.fixture
def rate_change_event():
    return {"action": "rate_change", "property_id": 4321, "room_type_ids": [77, 78]}


@pytest.fixture
def availability_change_event():
    return {
        "action": "availability_change",
        "property_id": 4321,
        "room_type_ids": [77],
        "start": "2026-11-01T00:00:00",
        "end": "2026-11-05T00:00:00",
        "source": "Airbnb",
    }


@pytest.fixture
def guest_message_event():
    return {
        "action": "guest_message_received",
        "thread_uid": "th-9",
        "message_id": 55,
        "inbox_uid": "inbox-1",
        "guest_name": "Ada Lovelace",
        "subject": None,
        "message": "Is early check-in possible?",
        "creation_time": "2026-10-17T09:30:00Z",
        "has_attachments": False,
        "sub_owner_id": 12,
    }


class RecordingStore:
    """In-memory stand-in for ReservationUpdateService."""

    def __init__(self, fail_for_guests=()):
        self.rows = []
        self.fail_for_guests = set(fail_for_guests)

    async def create_reservation_update(
        self, guest_name, check_in, check_out, status, listing_id
    ):
        from hostpilot.models import ReservationUpdate

        if guest_name in self.fail_for_guests:
            raise RuntimeError(f"database unavailable for {guest_name}")

        row = ReservationUpdate(
            id=f"row-{len(self.rows) + 1}",
            guest_name=guest_name,
            check_in_date=check_in,
            check_out_date=check_out,
            status=status,
            listing_id=listing_id,
        )
        self.rows.append(row)
        return row


class RecordingNotifier:
    def __init__(self):
        self.enqueued = []

    async def enqueue(self, update):
        self.enqueued.append(update)


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def make_store():
    return RecordingStore


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Fresh file-backed SQLite database per test."""
    from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

    from hostpilot.database import Base
    import hostpilot.models  # noqa: F401

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()
