# config.py
# -------------------------------
# Centralized configuration.
# Everything comes from environment variables (a local .env is loaded if
# present) so no keys are hard-coded. create_app() may layer overrides on
# top, which is how the tests configure the app.
# -------------------------------

import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class ConfigurationError(RuntimeError):
    """Raised at startup when required settings are missing."""


class Config:
    PORT = int(os.environ.get("PORT", "3000"))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # -------------------------------
    # Upstream (SofaScore)
    # -------------------------------
    SOFASCORE_API_BASE = os.environ.get("SOFASCORE_API_BASE", "https://api.sofascore.com/api/v1")
    SOFASCORE_IMAGE_BASE = os.environ.get("SOFASCORE_IMAGE_BASE", "https://img.sofascore.com/api/v1")
    SOFASCORE_SPORT = os.environ.get("SOFASCORE_SPORT", "football")
    UPSTREAM_TIMEOUT = float(os.environ.get("UPSTREAM_TIMEOUT", "10"))

    # -------------------------------
    # Web Push (VAPID)
    # Generate a key pair once (e.g. `vapid --gen` from py-vapid) and keep
    # it stable; browsers bind their subscriptions to the public key.
    # -------------------------------
    VAPID_PUBLIC_KEY = os.environ.get("VAPID_PUBLIC_KEY", "").strip()
    VAPID_PRIVATE_KEY = os.environ.get("VAPID_PRIVATE_KEY", "").strip()
    VAPID_SUBJECT = os.environ.get("VAPID_SUBJECT", "mailto:admin@example.com")
    REQUIRE_VAPID_KEYS = _env_bool("REQUIRE_VAPID_KEYS", "true")

    PUSH_TTL = int(os.environ.get("PUSH_TTL", "60"))
    PUSH_DEFAULT_TITLE = os.environ.get("PUSH_DEFAULT_TITLE", "SofaScore")
    PUSH_DEFAULT_BODY = os.environ.get("PUSH_DEFAULT_BODY", "New update available")


def validate_config(config) -> None:
    """Refuse to start without push credentials (unless explicitly relaxed)."""
    if not config.get("REQUIRE_VAPID_KEYS", True):
        return
    missing = [k for k in ("VAPID_PUBLIC_KEY", "VAPID_PRIVATE_KEY") if not config.get(k)]
    if missing:
        raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")
