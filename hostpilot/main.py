import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from hostpilot.core.config import settings
from hostpilot.core.logging import setup_logging
from hostpilot.core.rate_limiter import limiter
from hostpilot.middleware.request_logger import RequestLoggerMiddleware

from hostpilot.api.health import router as health_router
from hostpilot.lodgify.webhook import router as lodgify_webhook_router
from hostpilot.lodgify.booking import router as lodgify_booking_router


# -------------------------------------------------
# Logging
# -------------------------------------------------

setup_logging()
logger = logging.getLogger(__name__)


# -------------------------------------------------
# FastAPI
# -------------------------------------------------

app = FastAPI(
    title="HostPilot Lodgify Relay",
    description="Lodgify webhook ingestion + cleaner notification relay",
    version="0.1.0",
)

# -------------------------------------------------
# Rate Limiting (slowapi)
# -------------------------------------------------
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestLoggerMiddleware)

app.include_router(health_router)
app.include_router(lodgify_webhook_router)
app.include_router(lodgify_booking_router)


# -------------------------------------------------
# Lifecycle
# -------------------------------------------------


@app.on_event("startup")
async def on_startup():
    logger.info(
        "Starting HostPilot relay (cleaner threshold %sh, rate limit %s)",
        settings.clean_notify_threshold_hours,
        settings.rate_limit_webhook if settings.rate_limit_enabled else "off",
    )
    if not settings.lodgify_key:
        logger.warning("LODGIFY_KEY is not set; booking lookup will fail")

    from hostpilot.database import init_db

    await init_db()


@app.on_event("shutdown")
async def on_shutdown():
    logger.info("FastAPI shutdown")

    from hostpilot.database import dispose_db

    await dispose_db()
