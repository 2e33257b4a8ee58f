"""
Register / inspect / remove our Lodgify webhook subscriptions.

Usage:
    python -m hostpilot.lodgify.registration subscribe [--url URL] [--event booking_change ...]
    python -m hostpilot.lodgify.registration list
    python -m hostpilot.lodgify.registration cleanup

Run `subscribe` once after deploying; `cleanup` before rotating the URL.
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from hostpilot.core.config import settings
from hostpilot.core.logging import setup_logging
from hostpilot.services.lodgify_api_service import (
    LodgifyAPIError,
    LodgifyAPIService,
    LodgifyConfigError,
)

logger = logging.getLogger(__name__)

DEFAULT_EVENTS = ["booking_change"]


@dataclass
class DeregistrationReport:
    removed: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def register_webhook(
    service: LodgifyAPIService, target_url: str, event: str = "booking_change"
) -> Dict:
    if not target_url:
        raise LodgifyConfigError("LODGIFY_WEBHOOK_URL is missing in env")

    logger.info(f"Registering Lodgify webhook {event} -> {target_url}")
    return service.subscribe_webhook(target_url, event)


def deregister_all_webhooks(service: LodgifyAPIService) -> DeregistrationReport:
    """
    Remove every subscription on the account.

    A failure on one id is recorded and the loop moves on to the next.
    """
    report = DeregistrationReport()

    webhooks = service.list_webhooks()
    if not webhooks:
        logger.info("No webhooks registered.")
        return report

    logger.info(f"Found {len(webhooks)} webhook(s). Deregistering...")

    for wh in webhooks:
        webhook_id = str(wh.get("id"))
        try:
            if service.unsubscribe_webhook(webhook_id):
                report.removed.append(webhook_id)
            else:
                report.missing.append(webhook_id)
        except LodgifyAPIError as e:
            logger.error(f"Failed to deregister webhook {webhook_id}: {e.body or e}")
            report.failed[webhook_id] = str(e)

    return report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage Lodgify webhook subscriptions")
    sub = parser.add_subparsers(dest="command", required=True)

    subscribe = sub.add_parser("subscribe", help="Register our webhook URL")
    subscribe.add_argument(
        "--url",
        default=None,
        help="Public webhook URL (defaults to LODGIFY_WEBHOOK_URL)",
    )
    subscribe.add_argument(
        "--event",
        action="append",
        dest="events",
        help="Lodgify event name, repeatable (default: booking_change)",
    )

    sub.add_parser("list", help="Show current subscriptions")
    sub.add_parser("cleanup", help="Deregister every subscription")
    return parser


def main(argv: Optional[List[str]] = None, service: Optional[LodgifyAPIService] = None) -> int:
    args = build_parser().parse_args(argv)
    service = service or LodgifyAPIService()

    try:
        if args.command == "subscribe":
            target_url = args.url or settings.lodgify_webhook_url
            for event in args.events or DEFAULT_EVENTS:
                result = register_webhook(service, target_url, event)
                print(json.dumps(result, ensure_ascii=False))
            return 0

        if args.command == "list":
            print(json.dumps(service.list_webhooks(), ensure_ascii=False, indent=2))
            return 0

        report = deregister_all_webhooks(service)
        print(
            f"Removed {len(report.removed)}, already gone {len(report.missing)}, "
            f"failed {len(report.failed)}"
        )
        return 0 if report.ok else 1

    except (LodgifyAPIError, LodgifyConfigError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


def cli() -> None:
    setup_logging()
    sys.exit(main())


if __name__ == "__main__":
    cli()
