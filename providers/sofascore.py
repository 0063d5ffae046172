# providers/sofascore.py
# Thin client for SofaScore's public JSON API and its image CDN.
# Every call sends the same browser-like headers; SofaScore tends to answer
# bare clients with 403. No retries and no caching: callers get the body or
# an UpstreamError and decide what to tell their own client.

from __future__ import annotations
from typing import Any, Optional

import httpx

DEFAULT_API_BASE = "https://api.sofascore.com/api/v1"
DEFAULT_IMAGE_BASE = "https://img.sofascore.com/api/v1"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/144.0.0.0 Safari/537.36"
)
REFERER = "https://www.sofascore.com/"


class UpstreamError(Exception):
    """SofaScore answered with a non-2xx status (status_code holds it)."""

    def __init__(self, status_code: Optional[int], message: str = ""):
        self.status_code = status_code
        super().__init__(message or f"SofaScore responded with HTTP {status_code}")


class UpstreamTransportError(UpstreamError):
    """The call never produced a usable response (network, timeout, bad JSON)."""

    def __init__(self, message: str):
        super().__init__(None, message)


def build_headers(accept: str = "application/json") -> dict[str, str]:
    return {
        "User-Agent": USER_AGENT,
        "Accept": accept,
        "Referer": REFERER,
    }


class SofaScoreClient:
    """Issues one outbound request per call against SofaScore."""

    def __init__(
        self,
        api_base: str = DEFAULT_API_BASE,
        image_base: str = DEFAULT_IMAGE_BASE,
        sport: str = "football",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.image_base = image_base.rstrip("/")
        self.sport = sport
        self.timeout = timeout
        # Tests pass an httpx.MockTransport here; production uses the default.
        self.transport = transport

    # ----- Public API -----

    def get_live_events(self) -> Any:
        """Live events for the configured sport, verbatim."""
        return self._get_json(f"{self.api_base}/sport/{self.sport}/events/live")

    def get_lineups(self, event_id: int) -> Any:
        """Lineups (with per-player statistics) for one event, verbatim."""
        return self._get_json(f"{self.api_base}/event/{event_id}/lineups")

    def get_player_image(self, player_id: int) -> bytes:
        """Raw image bytes for a player portrait."""
        resp = self._get(f"{self.image_base}/player/{player_id}/image", accept="image/*")
        return resp.content

    # ----- Internals -----

    def _get(self, url: str, accept: str = "application/json") -> httpx.Response:
        try:
            with httpx.Client(
                timeout=self.timeout,
                transport=self.transport,
                follow_redirects=True,
            ) as client:
                resp = client.get(url, headers=build_headers(accept))
                # Read inside the context so the body survives client close.
                resp.read()
        except httpx.HTTPError as exc:
            raise UpstreamTransportError(f"GET {url} failed: {exc}") from exc

        if not resp.is_success:
            raise UpstreamError(resp.status_code)
        return resp

    def _get_json(self, url: str) -> Any:
        resp = self._get(url)
        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamTransportError(f"GET {url} returned invalid JSON") from exc
