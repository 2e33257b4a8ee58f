import os
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load variables from .env
load_dotenv()


class Settings(BaseModel):
    # Lodgify API
    lodgify_key: str = ""
    lodgify_base_url: str = "https://api.lodgify.com"
    lodgify_timeout_seconds: int = 15
    # Public URL of our /lodgify/webhook, used only by the registration utility
    lodgify_webhook_url: str = ""

    database_url: str = "sqlite+aiosqlite:///./hostpilot.db"

    # Cleaner notification window (hours before arrival)
    clean_notify_threshold_hours: float = Field(72.0, allow_inf_nan=False)

    # Rate limiting settings
    rate_limit_enabled: bool = True  # Killswitch for quick disable
    rate_limit_webhook: str = "30/minute"

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "console"  # Options: "console", "json"
    log_slow_request_threshold_ms: int = 500  # Log timing only if duration > threshold


def resolve_database_url(raw_url: str | None) -> str:
    """Map plain Postgres URLs (docker-compose, Railway) onto the asyncpg driver."""
    if not raw_url:
        return "sqlite+aiosqlite:///./hostpilot.db"

    for prefix in ("postgres://", "postgresql://"):
        if raw_url.startswith(prefix):
            return "postgresql+asyncpg://" + raw_url[len(prefix):]
    return raw_url


def load_settings() -> Settings:
    return Settings(
        lodgify_key=os.environ.get("LODGIFY_KEY", ""),
        lodgify_base_url=os.environ.get(
            "LODGIFY_BASE_URL", "https://api.lodgify.com"
        ).rstrip("/"),
        lodgify_timeout_seconds=int(os.environ.get("LODGIFY_TIMEOUT_SECONDS", "15")),
        lodgify_webhook_url=os.environ.get("LODGIFY_WEBHOOK_URL", ""),
        database_url=resolve_database_url(os.environ.get("DATABASE_URL")),
        clean_notify_threshold_hours=os.environ.get(
            "CLEAN_NOTIFY_THRESHOLD_HOURS", "72"
        ),
        rate_limit_enabled=os.environ.get("RATE_LIMIT_ENABLED", "true").lower()
        == "true",
        rate_limit_webhook=os.environ.get("RATE_LIMIT_WEBHOOK", "30/minute"),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        log_format=os.environ.get("LOG_FORMAT", "console"),
        log_slow_request_threshold_ms=int(
            os.environ.get("LOG_SLOW_REQUEST_THRESHOLD_MS", "500")
        ),
    )


settings = load_settings()
