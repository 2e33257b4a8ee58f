from hostpilot.core.config import settings
from hostpilot.database import AsyncSessionLocal
from hostpilot.services.dispatch_service import WebhookDispatcher
from hostpilot.services.lodgify_api_service import LodgifyAPIService
from hostpilot.services.notification_service import notification_service
from hostpilot.services.reservation_update_service import ReservationUpdateService


def get_reservation_update_service() -> ReservationUpdateService:
    return ReservationUpdateService(AsyncSessionLocal)


def get_dispatcher() -> WebhookDispatcher:
    """Request-path dispatcher bound to the process-wide session factory."""
    return WebhookDispatcher(
        store=get_reservation_update_service(),
        notifier=notification_service,
        threshold_hours=settings.clean_notify_threshold_hours,
    )


def get_lodgify_api_service() -> LodgifyAPIService:
    return LodgifyAPIService()
