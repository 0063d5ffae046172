# push/dispatcher.py
# -------------------------------
# Broadcasts a notification to every registered browser via Web Push.
# Best effort: each subscriber gets exactly one attempt per broadcast.
# Subscribers whose push service reports the endpoint gone (404/410) are
# pruned on the spot; any other failure just means that subscriber misses
# this message.
# -------------------------------

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from pywebpush import WebPushException, webpush

from models import NotificationPayload, PushSubscription
from push.registry import SubscriptionRegistry, short_endpoint

logger = logging.getLogger(__name__)

# Push-service statuses meaning "this subscription will never work again".
PERMANENT_FAILURE_STATUSES = frozenset({404, 410})


@dataclass(frozen=True)
class BroadcastResult:
    sent: int
    failed: int
    removed: int
    active: int

    def to_dict(self) -> Dict[str, int]:
        return {"sent": self.sent, "activeSubscriptions": self.active}


def failure_status(exc: WebPushException) -> Optional[int]:
    """HTTP status reported by the push service, if there was a response."""
    response = getattr(exc, "response", None)
    return getattr(response, "status_code", None)


class NotificationDispatcher:
    def __init__(
        self,
        registry: SubscriptionRegistry,
        vapid_private_key: str,
        vapid_subject: str,
        ttl: int = 60,
        sender: Callable[..., Any] = webpush,
    ):
        self.registry = registry
        self.vapid_private_key = vapid_private_key
        self.vapid_subject = vapid_subject
        self.ttl = ttl
        self.sender = sender

    def send_one(self, subscription: PushSubscription, payload: NotificationPayload) -> None:
        """Deliver to one subscriber. Raises whatever the sender raises."""
        self.sender(
            subscription_info=subscription.to_subscription_info(),
            data=json.dumps(payload.to_dict()),
            vapid_private_key=self.vapid_private_key,
            # pywebpush fills in aud/exp on the dict it gets, so never share it.
            vapid_claims={"sub": self.vapid_subject},
            ttl=self.ttl,
        )

    def broadcast(self, payload: NotificationPayload) -> BroadcastResult:
        """Send payload to a snapshot of all current subscribers."""
        sent = failed = removed = 0
        for endpoint, subscription in self.registry.all():
            try:
                self.send_one(subscription, payload)
                sent += 1
            except WebPushException as e:
                failed += 1
                status = failure_status(e)
                if status in PERMANENT_FAILURE_STATUSES:
                    if self.registry.remove(endpoint, expected=subscription):
                        removed += 1
                    logger.info("Push endpoint gone (HTTP %s), pruned: %s", status, short_endpoint(endpoint))
                else:
                    logger.warning("Push to %s failed (HTTP %s): %s", short_endpoint(endpoint), status, e)
            except Exception as e:
                # Bad keys, connection errors, etc. Never abort the fan-out.
                failed += 1
                logger.warning("Push to %s failed: %s", short_endpoint(endpoint), e)

        result = BroadcastResult(sent=sent, failed=failed, removed=removed, active=len(self.registry))
        logger.info(
            "Broadcast '%s': sent=%d failed=%d removed=%d active=%d",
            payload.title, result.sent, result.failed, result.removed, result.active,
        )
        return result
