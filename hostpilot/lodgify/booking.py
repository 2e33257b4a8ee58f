"""
Read-side lookup of a single Lodgify booking, used by the booking page.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from hostpilot.lodgify.deps import get_lodgify_api_service
from hostpilot.services.lodgify_api_service import (
    LodgifyAPIError,
    LodgifyAPIService,
    LodgifyConfigError,
)

router = APIRouter(prefix="/lodgify", tags=["lodgify"])
logger = logging.getLogger(__name__)


@router.get("/booking")
def lodgify_booking(
    raw_id: Optional[str] = Query(None, alias="id"),
    service: LodgifyAPIService = Depends(get_lodgify_api_service),
):
    # Plain def: requests is blocking, FastAPI runs this in its threadpool
    try:
        booking_id = int(raw_id)
    except (TypeError, ValueError):
        return JSONResponse(status_code=400, content={"error": "Invalid booking ID"})

    try:
        return service.get_booking(booking_id)
    except (LodgifyAPIError, LodgifyConfigError) as e:
        logger.error(
            f"Error fetching booking {booking_id}: {e}",
            extra={
                "booking_id": booking_id,
                "lodgify_key_present": bool(service.api_key),
            },
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": str(e) or "Failed to fetch booking",
                "details": {
                    "booking_id": booking_id,
                    "lodgify_key_present": bool(service.api_key),
                    "status_code": getattr(e, "status_code", None),
                    "body": getattr(e, "body", None),
                },
            },
        )
