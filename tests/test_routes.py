# tests/test_routes.py
# --------------------------------------------
# End-to-end tests of the HTTP surface through Flask's test client.
# SofaScore is replaced by an httpx.MockTransport and push delivery by a
# fake sender, so nothing leaves the process.
# --------------------------------------------

from urllib.parse import quote

import httpx
import pytest
from pywebpush import WebPushException

from app import create_app
from providers.sofascore import SofaScoreClient

TEST_CONFIG = {
    "TESTING": True,
    "VAPID_PUBLIC_KEY": "test-public-key",
    "VAPID_PRIVATE_KEY": "test-private-key",
}

LINEUPS = {
    "home": {"players": [
        {"player": {"name": "João Silva", "id": 10}, "statistics": {"totalTackle": 3}},
    ]},
    "away": {"players": [
        {"player": {"name": "Kylian Mbappé", "id": 7},
         "statistics": {"minutesPlayed": 90, "totalShots": 4, "rating": 7.9}},
    ]},
}


def make_client(handler):
    """Test client whose SofaScore calls are answered by `handler`."""
    app = create_app(TEST_CONFIG)
    app.extensions["sofascore"] = SofaScoreClient(
        api_base="https://sofa.test/api/v1",
        image_base="https://img.sofa.test/api/v1",
        transport=httpx.MockTransport(handler),
    )
    return app, app.test_client()


def _status(code, **kwargs):
    return lambda request: httpx.Response(code, **kwargs)


def _unreachable(request):
    raise httpx.ConnectError("connection refused", request=request)


# ---------- /live ----------

def test_live_relays_upstream_json():
    payload = {"events": [{"id": 1, "homeTeam": {"name": "Flamengo"}}]}
    _, client = make_client(_status(200, json=payload))
    resp = client.get("/live")
    assert resp.status_code == 200
    assert resp.get_json() == payload


def test_live_upstream_403_passes_status_through():
    _, client = make_client(_status(403))
    resp = client.get("/live")
    assert resp.status_code == 403
    assert resp.get_json() == {"error": "SofaScore blocked"}


def test_live_transport_failure_is_500():
    _, client = make_client(_unreachable)
    resp = client.get("/live")
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "internal error"}


# ---------- /lineups ----------

def test_lineups_relays_upstream_json():
    _, client = make_client(_status(200, json=LINEUPS))
    resp = client.get("/lineups/11352")
    assert resp.status_code == 200
    assert resp.get_json() == LINEUPS


def test_lineups_upstream_error():
    _, client = make_client(_status(404))
    resp = client.get("/lineups/11352")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Lineups unavailable"}


def test_lineups_non_numeric_event_is_json_404():
    _, client = make_client(_status(200, json=LINEUPS))
    resp = client.get("/lineups/abc")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


# ---------- /player ----------

def test_player_stats_found():
    _, client = make_client(_status(200, json=LINEUPS))
    resp = client.get("/player/11352/joao")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["playerId"] == 10
    assert body["tackles"] == 3
    assert body["fouls"] == 0
    assert body["displayName"] == "João Silva"


def test_player_stats_accented_query_in_url():
    _, client = make_client(_status(200, json=LINEUPS))
    resp = client.get("/player/11352/" + quote("Mbappé"))
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["playerId"] == 7
    assert body["shotsTotal"] == 4
    assert body["rating"] == 7.9


def test_player_not_found():
    _, client = make_client(_status(200, json=LINEUPS))
    resp = client.get("/player/11352/ronaldo")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Player not found"}


def test_player_upstream_error():
    _, client = make_client(_status(503))
    resp = client.get("/player/11352/joao")
    assert resp.status_code == 503
    assert resp.get_json() == {"error": "Stats unavailable"}


def test_player_transport_failure():
    _, client = make_client(_unreachable)
    resp = client.get("/player/11352/joao")
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "internal error"}


# ---------- /player-image ----------

def test_player_image_proxied_with_cache_header():
    _, client = make_client(_status(200, content=b"\xff\xd8\xffimage"))
    resp = client.get("/player-image/7")
    assert resp.status_code == 200
    assert resp.data == b"\xff\xd8\xffimage"
    assert resp.mimetype == "image/jpeg"
    assert resp.headers["Cache-Control"] == "public, max-age=86400"


def test_player_image_upstream_error_is_empty_404():
    _, client = make_client(_status(403))
    resp = client.get("/player-image/7")
    assert resp.status_code == 404
    assert resp.data == b""


def test_player_image_transport_failure_is_empty_500():
    _, client = make_client(_unreachable)
    resp = client.get("/player-image/7")
    assert resp.status_code == 500
    assert resp.data == b""


# ---------- /push ----------

class RecordingSender:
    def __init__(self, fail_with=None):
        self.fail_with = fail_with or {}
        self.endpoints = []

    def __call__(self, **kwargs):
        endpoint = kwargs["subscription_info"]["endpoint"]
        self.endpoints.append(endpoint)
        if endpoint in self.fail_with:
            raise self.fail_with[endpoint]


class _Resp:
    def __init__(self, status_code):
        self.status_code = status_code


@pytest.fixture
def push_app():
    app, client = make_client(_status(200, json={}))
    return app, client


def test_subscribe_and_send(push_app):
    app, client = push_app
    sender = RecordingSender({
        "https://push.example/gone": WebPushException("gone", response=_Resp(410)),
    })
    app.extensions["push_dispatcher"].sender = sender

    for name in ("a", "b", "gone"):
        resp = client.post("/push/subscribe", json={
            "endpoint": f"https://push.example/{name}",
            "keys": {"p256dh": "k", "auth": "x"},
        })
        assert resp.status_code == 201
        assert resp.get_json() == {"success": True}

    resp = client.post("/push/send", json={"title": "Goal", "body": "1-0"})
    assert resp.status_code == 200
    assert resp.get_json() == {"sent": 2, "activeSubscriptions": 2}
    assert sorted(sender.endpoints) == [
        "https://push.example/a", "https://push.example/b", "https://push.example/gone",
    ]
    assert "https://push.example/gone" not in app.extensions["push_registry"]


def test_subscribe_same_endpoint_twice_does_not_duplicate(push_app):
    app, client = push_app
    body = {"endpoint": "https://push.example/a", "keys": {"p256dh": "k", "auth": "x"}}
    client.post("/push/subscribe", json=body)
    client.post("/push/subscribe", json=body)
    assert len(app.extensions["push_registry"]) == 1


@pytest.mark.parametrize("body", [{}, {"keys": {"auth": "x"}}, {"endpoint": ""}])
def test_subscribe_without_endpoint_is_400(push_app, body):
    app, client = push_app
    resp = client.post("/push/subscribe", json=body)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Invalid subscription"}
    assert len(app.extensions["push_registry"]) == 0


def test_subscribe_with_non_json_body_is_400(push_app):
    _, client = push_app
    resp = client.post("/push/subscribe", data="not json", content_type="text/plain")
    assert resp.status_code == 400


def test_send_with_no_subscribers(push_app):
    _, client = push_app
    resp = client.post("/push/send")
    assert resp.status_code == 200
    assert resp.get_json() == {"sent": 0, "activeSubscriptions": 0}


def test_vapid_public_key_endpoint(push_app):
    _, client = push_app
    resp = client.get("/push/vapid-public-key")
    assert resp.get_json() == {"publicKey": "test-public-key"}


# ---------- upstream redirects ----------

def _redirecting(request):
    if request.url.path == "/api/v1/sport/football/events/live":
        return httpx.Response(301, headers={"Location": "https://sofa.test/api/v2/live"})
    if request.url.path == "/api/v1/player/42/image":
        return httpx.Response(302, headers={"Location": "https://img.sofa.test/cdn/42.jpg"})
    if request.url.path == "/api/v2/live":
        return httpx.Response(200, json={"events": []})
    if request.url.path == "/cdn/42.jpg":
        return httpx.Response(200, content=b"\xff\xd8\xffimage")
    return httpx.Response(404)


def test_live_follows_upstream_redirect():
    _, client = make_client(_redirecting)
    resp = client.get("/live")
    assert resp.status_code == 200
    assert resp.get_json() == {"events": []}


def test_player_image_follows_upstream_redirect():
    _, client = make_client(_redirecting)
    resp = client.get("/player-image/42")
    assert resp.status_code == 200
    assert resp.data == b"\xff\xd8\xffimage"


def test_player_row_with_non_object_player_is_not_an_error():
    lineups = {"home": {"players": [
        {"player": "unknown", "statistics": "n/a"},
    ]}}
    _, client = make_client(_status(200, json=lineups))
    resp = client.get("/player/1/joao")
    # The row carries no name, so it matches like any nameless row would.
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["playerId"] is None
    assert body["tackles"] == 0
