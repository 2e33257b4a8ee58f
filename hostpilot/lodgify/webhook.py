"""
Lodgify webhook endpoint.

Contract with Lodgify:
- POST only (Starlette answers other methods with 405 + Allow: POST)
- 400 when the body is not JSON or not a known event shape; nothing is processed
- 200 once the shape is valid, even if some events were skipped by policy
  or their audit row failed to write (those failures are logged, not retried)
"""

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from hostpilot.core.config import settings
from hostpilot.core.rate_limiter import limiter
from hostpilot.lodgify.deps import get_dispatcher
from hostpilot.lodgify.schemas import WebhookDecodeError, decode_events
from hostpilot.services.dispatch_service import DispatchResult, WebhookDispatcher

router = APIRouter(prefix="/lodgify", tags=["lodgify"])
logger = logging.getLogger(__name__)


def _reject_constant(name: str):
    # NaN / Infinity / -Infinity are Python extensions, not JSON
    raise ValueError(f"{name} is not valid JSON")


@router.post("/webhook")
@limiter.limit(settings.rate_limit_webhook)
async def lodgify_webhook(
    request: Request,
    dispatcher: WebhookDispatcher = Depends(get_dispatcher),
):
    body = await request.body()
    request_id = getattr(request.state, "request_id", None)

    try:
        payload = json.loads(body, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        logger.error(f"Failed to parse webhook payload as JSON: {e}")
        return JSONResponse(status_code=400, content={"error": "Invalid JSON payload"})

    try:
        events = decode_events(payload)
    except WebhookDecodeError as e:
        logger.warning(
            "Rejected Lodgify webhook: %s",
            e,
            extra={"request_id": request_id, "errors": e.errors},
        )
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid webhook payload", "details": e.errors},
        )

    logger.info(
        "Received Lodgify webhook: %s",
        ", ".join(event.action for event in events),
        extra={"request_id": request_id},
    )

    outcomes = await dispatcher.dispatch(events)

    return {
        "message": "Event(s) processed",
        "processed": len(outcomes),
        "persisted": sum(1 for o in outcomes if o.result == DispatchResult.PERSISTED),
        "failed": sum(1 for o in outcomes if o.result == DispatchResult.FAILED),
    }
