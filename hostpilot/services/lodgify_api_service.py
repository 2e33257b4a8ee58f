"""
Lodgify REST client: webhook subscriptions and booking lookup.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from hostpilot.core.config import settings

logger = logging.getLogger(__name__)


class LodgifyConfigError(RuntimeError):
    pass


class LodgifyAPIError(Exception):
    """Non-2xx answer (or no answer at all) from Lodgify."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class LodgifyAPIService:
    """Thin wrapper over the Lodgify API, authenticated with X-ApiKey."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = settings.lodgify_key if api_key is None else api_key
        self.base_url = (base_url or settings.lodgify_base_url).rstrip("/")
        self.timeout = timeout or settings.lodgify_timeout_seconds
        self.session = session or requests.Session()

    def _headers(self, with_body: bool = False) -> Dict[str, str]:
        if not self.api_key:
            raise LodgifyConfigError("LODGIFY_KEY is missing in env")

        headers = {"X-ApiKey": self.api_key, "accept": "application/json"}
        if with_body:
            # Lodgify's webhook endpoints insist on this media type
            headers["Content-Type"] = "application/*+json"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        json_body: Optional[dict] = None,
        allow_statuses: tuple = (),
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                headers=self._headers(with_body=json_body is not None),
                json=json_body,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Lodgify request {method} {path} failed: {e}")
            raise LodgifyAPIError(f"Lodgify request failed: {e}") from e

        if response.status_code in allow_statuses:
            return response

        if not response.ok:
            body = _response_body(response)
            logger.error(
                f"Lodgify {method} {path} returned {response.status_code}: {body}"
            )
            raise LodgifyAPIError(
                f"Lodgify returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=body,
            )
        return response

    # -------------------------------------------------
    # Webhooks
    # -------------------------------------------------

    def subscribe_webhook(self, target_url: str, event: str) -> Dict:
        logger.info(f"Subscribing {target_url} to Lodgify event {event}")
        response = self._request(
            "POST",
            "/webhooks/v1/subscribe",
            json_body={"target_url": target_url, "event": event},
        )
        return _response_body(response)

    def list_webhooks(self) -> List[Dict]:
        response = self._request("GET", "/webhooks/v1/list")
        data = _response_body(response)
        if not isinstance(data, list):
            logger.warning(f"Unexpected webhook list payload: {data!r}")
            return []
        return data

    def unsubscribe_webhook(self, webhook_id: str) -> bool:
        """
        Remove one subscription.

        Returns False when Lodgify no longer knows the id, so repeated
        cleanups are harmless.
        """
        response = self._request(
            "DELETE",
            "/webhooks/v1/unsubscribe",
            json_body={"id": webhook_id},
            allow_statuses=(404,),
        )
        if response.status_code == 404:
            logger.info(f"Webhook {webhook_id} already gone")
            return False

        logger.info(f"Deregistered webhook {webhook_id}")
        return True

    # -------------------------------------------------
    # Bookings
    # -------------------------------------------------

    def get_booking(self, booking_id: int) -> Dict:
        logger.info(f"Fetching Lodgify booking {booking_id}")
        response = self._request("GET", f"/v2/reservations/bookings/{booking_id}")
        return _response_body(response)


def _response_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
