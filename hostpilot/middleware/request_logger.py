import time
import logging
import uuid
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from hostpilot.core.config import settings

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
LODGIFY_PATH_PREFIX = "/lodgify/"


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """
    Request correlation and timing.

    - every response carries X-Request-ID (an inbound one is reused)
    - requests slower than LOG_SLOW_REQUEST_THRESHOLD_MS are logged
    - rejected Lodgify calls (4xx/5xx under /lodgify/) are always logged
      with the caller IP, so bad deliveries can be traced
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        # Webhook handlers attach it to their log records
        request.state.request_id = request_id

        status_code = 500
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            status_code = response.status_code
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            context = {
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 2),
                "request_id": request_id,
            }

            if duration_ms > settings.log_slow_request_threshold_ms:
                logger.warning(
                    "Slow request: %s %s took %.2fms",
                    request.method,
                    request.url.path,
                    duration_ms,
                    extra=context,
                )

            if status_code >= 400 and request.url.path.startswith(LODGIFY_PATH_PREFIX):
                logger.info(
                    "Lodgify %s %s answered %s to %s",
                    request.method,
                    request.url.path,
                    status_code,
                    _client_ip(request),
                    extra=context,
                )

        return response
