"""
Lodgify webhook payloads.

Lodgify posts either a single event object or an array of them. Every event
carries an `action` tag; the four tags we subscribe to are modelled as a
closed discriminated union and anything else is rejected at the boundary.

Field notes:
- Optional[...] without a default means "present but nullable": Lodgify
  sends explicit nulls and a missing key is still a validation error.
- Scalars are strict (no "123" -> 123 coercion).
- Timestamps must be ISO-8601 strings; naive values are taken as UTC.
"""
from datetime import datetime, timezone
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import (
    AfterValidator,
    AllowInfNan,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
)


def _require_iso_string(value: Any) -> Any:
    if not isinstance(value, str):
        raise ValueError("timestamp must be an ISO-8601 string")

    # pydantic would read "1700000000" as a Unix epoch
    try:
        float(value)
    except ValueError:
        return value
    raise ValueError("timestamp must be an ISO-8601 string, not an epoch number")


def _assume_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


Timestamp = Annotated[
    datetime, BeforeValidator(_require_iso_string), AfterValidator(_assume_utc)
]
Number = Union[StrictInt, Annotated[StrictFloat, AllowInfNan(False)]]


class LodgifyModel(BaseModel):
    # Unknown keys are dropped so upstream schema additions don't break us
    model_config = ConfigDict(extra="ignore", frozen=True)


# -------------------------------------------------
# booking_change
# -------------------------------------------------


class RoomType(LodgifyModel):
    id: StrictInt
    room_type_id: StrictInt
    image_url: Optional[StrictStr]
    name: StrictStr
    people: StrictInt


class BookingSnapshot(LodgifyModel):
    type: StrictStr = Field(..., description="Booking or Enquiry")
    id: StrictInt
    date_arrival: Timestamp
    date_departure: Timestamp
    date_created: Timestamp
    property_id: StrictInt
    property_name: StrictStr
    property_image_url: StrictStr
    status: StrictStr = Field(..., description="Booked, Tentative, Declined, Open")
    room_types: List[RoomType]
    add_ons: List[Any]
    currency_code: StrictStr
    source: StrictStr
    source_text: StrictStr
    notes: Optional[StrictStr]
    language: StrictStr
    ip_address: Optional[StrictStr]
    ip_country: Optional[StrictStr]
    is_policy_active: StrictBool
    external_url: Optional[StrictStr]
    nights: StrictInt
    promotion_code: Optional[StrictStr]


class GuestSnapshot(LodgifyModel):
    uid: StrictStr
    # null for owner blocks and some channel imports
    name: Optional[StrictStr]
    email: StrictStr
    phone_number: StrictStr
    country: Optional[StrictStr]
    country_code: Optional[StrictStr]


class OrderAmount(LodgifyModel):
    amount: StrictStr
    total_room_rate_amount: StrictStr
    total_fees_amount: StrictStr
    total_taxes_amount: StrictStr
    total_promotions_amount: StrictStr


class OrderSnapshot(LodgifyModel):
    id: StrictInt
    property_id: StrictInt
    currency_code: StrictStr
    status: StrictStr
    amount_gross: OrderAmount
    amount_net: OrderAmount
    amount_vat: OrderAmount
    date_agreed: Optional[StrictStr]
    cancellation_policy_text: Optional[StrictStr]
    security_deposit_text: Optional[StrictStr]
    scheduled_policy_text: Optional[StrictStr]
    rate_policy_name: Optional[StrictStr]
    rental_agreement_accepted: StrictBool
    owner_payout: Number


class SubOwnerSnapshot(LodgifyModel):
    user_id: StrictInt
    first_name: StrictStr
    last_name: StrictStr
    email: StrictStr
    phone: StrictStr


class TransactionsTotal(LodgifyModel):
    amount: StrictStr


class BookingChangeEvent(LodgifyModel):
    action: Literal["booking_change"]
    booking: BookingSnapshot
    guest: GuestSnapshot

    # Financial / ownership snapshot, absent on some plans
    current_order: Optional[OrderSnapshot] = None
    subowner: Optional[SubOwnerSnapshot] = None
    booking_total_amount: Optional[StrictStr] = None
    booking_currency_code: Optional[StrictStr] = None
    total_transactions: Optional[TransactionsTotal] = None
    balance_due: Optional[StrictStr] = None


# -------------------------------------------------
# rate_change / availability_change
# -------------------------------------------------


class RateChangeEvent(LodgifyModel):
    action: Literal["rate_change"]
    property_id: StrictInt
    room_type_ids: List[StrictInt]


class AvailabilityChangeEvent(LodgifyModel):
    action: Literal["availability_change"]
    property_id: StrictInt
    room_type_ids: List[StrictInt]
    start: Timestamp
    end: Timestamp
    source: StrictStr


# -------------------------------------------------
# guest_message_received
# -------------------------------------------------


class GuestMessageReceivedEvent(LodgifyModel):
    action: Literal["guest_message_received"]
    thread_uid: StrictStr
    message_id: StrictInt
    inbox_uid: StrictStr
    guest_name: StrictStr
    subject: Optional[StrictStr]
    message: StrictStr
    creation_time: Timestamp
    has_attachments: StrictBool
    sub_owner_id: StrictInt


WebhookEvent = Annotated[
    Union[
        BookingChangeEvent,
        RateChangeEvent,
        AvailabilityChangeEvent,
        GuestMessageReceivedEvent,
    ],
    Field(discriminator="action"),
]

_batch_adapter = TypeAdapter(Annotated[List[WebhookEvent], Field(min_length=1)])


class WebhookDecodeError(Exception):
    """Payload did not match any known Lodgify event shape."""

    def __init__(self, errors: List[dict]):
        self.errors = errors
        super().__init__(f"{len(errors)} validation error(s) in webhook payload")

    @classmethod
    def from_validation_error(
        cls, exc: ValidationError, single: bool = False
    ) -> "WebhookDecodeError":
        errors = []
        for err in exc.errors(include_url=False):
            loc = list(err["loc"])
            # A lone object was wrapped as [obj]; report paths relative to it
            if single and loc and loc[0] == 0:
                loc = loc[1:]
            errors.append(
                {
                    "path": ".".join(str(part) for part in loc),
                    "message": err["msg"],
                    "type": err["type"],
                    "input": err.get("input"),
                }
            )
        return cls(errors)


def decode_events(payload: Any) -> List[WebhookEvent]:
    """
    Validate a parsed JSON body into an ordered list of typed events.

    A single object becomes a one-element list. Arrays are all-or-nothing:
    one unknown or malformed element rejects the whole batch.
    """
    if isinstance(payload, dict):
        single = True
        items = [payload]
    elif isinstance(payload, list):
        single = False
        items = payload
    else:
        raise WebhookDecodeError(
            [
                {
                    "path": "",
                    "message": "Expected an event object or an array of event objects",
                    "type": "payload_type",
                    "input": type(payload).__name__,
                }
            ]
        )

    try:
        return _batch_adapter.validate_python(items)
    except ValidationError as e:
        raise WebhookDecodeError.from_validation_error(e, single=single) from e
