# models.py
# -------------------------------
# Data models for the SofaScore relay.
# Nothing here is persisted: subscriptions live in the in-memory registry
# for the lifetime of the process, and stats records / notification payloads
# are built per request.
# -------------------------------

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class PushSubscription:
    """A browser push endpoint plus the keys needed to encrypt for it."""
    endpoint: str
    keys: Dict[str, str] = field(default_factory=dict)
    expiration_time: Optional[Any] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "PushSubscription":
        """Build from the JSON a browser's PushSubscription.toJSON() produces."""
        keys = data.get("keys")
        if not isinstance(keys, Mapping):
            keys = {}
        return cls(
            endpoint=data["endpoint"],
            # null key values are dropped rather than sent as the text "None"
            keys={str(k): str(v) for k, v in keys.items() if v is not None},
            expiration_time=data.get("expirationTime"),
        )

    def to_subscription_info(self) -> Dict[str, Any]:
        """Shape expected by pywebpush.webpush(subscription_info=...)."""
        return {"endpoint": self.endpoint, "keys": dict(self.keys)}

    def __repr__(self):
        return f"<PushSubscription {self.endpoint}>"


@dataclass(frozen=True)
class NotificationPayload:
    title: str
    body: str

    @classmethod
    def from_request(
        cls,
        data: Optional[Mapping[str, Any]],
        default_title: str,
        default_body: str,
    ) -> "NotificationPayload":
        """Fill in missing or blank title/body with the configured defaults."""
        data = data or {}
        title = data.get("title")
        body = data.get("body")
        return cls(
            title=str(title) if title else default_title,
            body=str(body) if body else default_body,
        )

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "body": self.body}


@dataclass(frozen=True)
class PlayerStatsRecord:
    """
    Normalized per-match statistics for one player, derived from a
    SofaScore lineups document. Serialized with camelCase keys.
    """
    display_name: str
    player_id: Optional[int]
    minutes: Any = 0
    tackles: Any = 0
    fouls: Any = 0
    fouls_drawn: Any = 0
    shots_total: Any = 0
    shots_on_target: Any = 0
    yellow_cards: Any = 0
    red_cards: Any = 0
    rating: Any = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "displayName": self.display_name,
            "playerId": self.player_id,
            "minutes": self.minutes,
            "tackles": self.tackles,
            "fouls": self.fouls,
            "foulsDrawn": self.fouls_drawn,
            "shotsTotal": self.shots_total,
            "shotsOnTarget": self.shots_on_target,
            "yellowCards": self.yellow_cards,
            "redCards": self.red_cards,
            "rating": self.rating,
        }

    def __repr__(self):
        return f"<PlayerStatsRecord {self.display_name} ({self.player_id})>"
