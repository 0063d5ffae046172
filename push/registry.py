# push/registry.py
# -------------------------------
# In-memory registry of browser push subscriptions, keyed by endpoint URL.
# One instance is owned by the Flask app (app.extensions["push_registry"]).
# It is shared by all request threads of a worker process, so every access
# to the underlying dict goes through a lock. Nothing is persisted; a restart
# starts from an empty registry.
# -------------------------------

from __future__ import annotations

import logging
import threading
from urllib.parse import urlsplit
from typing import Any, Dict, List, Optional, Tuple

from models import PushSubscription

logger = logging.getLogger(__name__)


def short_endpoint(endpoint: str) -> str:
    """
    Log-safe form of a push endpoint: host plus the last few characters.
    The full URL is enough to deliver pushes, so it never goes to the logs.
    """
    host = urlsplit(endpoint).hostname or "?"
    return f"{host}/...{endpoint[-6:]}"


class InvalidSubscriptionError(ValueError):
    """Raised when a subscription body has no usable endpoint."""


class SubscriptionRegistry:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: Dict[str, PushSubscription] = {}

    def register(self, data: Any) -> PushSubscription:
        """
        Store (or silently replace) the subscription for data["endpoint"].
        Raises InvalidSubscriptionError if the endpoint is missing or blank.
        """
        if not isinstance(data, dict):
            raise InvalidSubscriptionError("Subscription must be a JSON object.")
        endpoint = data.get("endpoint")
        if not isinstance(endpoint, str) or not endpoint.strip():
            raise InvalidSubscriptionError("Subscription is missing an endpoint.")

        subscription = PushSubscription.from_json(data)
        with self._lock:
            replaced = subscription.endpoint in self._subscriptions
            self._subscriptions[subscription.endpoint] = subscription
        logger.info("Push subscription %s: %s", "updated" if replaced else "added", short_endpoint(endpoint))
        return subscription

    def all(self) -> List[Tuple[str, PushSubscription]]:
        """Snapshot of (endpoint, subscription) pairs at call time."""
        with self._lock:
            return list(self._subscriptions.items())

    def get(self, endpoint: str) -> Optional[PushSubscription]:
        with self._lock:
            return self._subscriptions.get(endpoint)

    def remove(self, endpoint: str, expected: Optional[PushSubscription] = None) -> bool:
        """
        Drop the entry for endpoint. No-op if absent.
        With `expected`, only drop it if it is still that exact subscription,
        so a re-registration that raced a failed delivery survives.
        Returns True when something was removed.
        """
        with self._lock:
            current = self._subscriptions.get(endpoint)
            if current is None:
                return False
            if expected is not None and current is not expected:
                return False
            del self._subscriptions[endpoint]
        logger.info("Push subscription removed: %s", short_endpoint(endpoint))
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def __contains__(self, endpoint: object) -> bool:
        with self._lock:
            return endpoint in self._subscriptions
