"""Central configuration for the activity report functions.

All values are constants imported by the rest of the package. Secrets are read
from environment variables (optionally via a local `.env`) and are never
hardcoded.
"""

from __future__ import annotations

import importlib
import os
from typing import Mapping

from .models import Credentials


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except Exception:
    _load_dotenv = None

if callable(_load_dotenv) and _env_bool("ACTIVITY_REPORTS_LOAD_DOTENV", True):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Spotify settings
# ---------------------------------------------------------------------------
SPOTIFY_API_BASE = "https://api.spotify.com/v1"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"

# Size of the recently-played window (Spotify maximum is 50).
SPOTIFY_RECENT_LIMIT = _env_int("SPOTIFY_RECENT_LIMIT", 50)

# Artist ids per /artists lookup. Spotify documents 50 as the ceiling.
SPOTIFY_ARTIST_BATCH_LIMIT = 50
SPOTIFY_ARTIST_BATCH_SIZE = _env_int("SPOTIFY_ARTIST_BATCH_SIZE", 50)


# ---------------------------------------------------------------------------
# Strava settings
# ---------------------------------------------------------------------------
STRAVA_BASE_URL = "https://www.strava.com/api/v3"
STRAVA_OAUTH_URL = "https://www.strava.com/oauth/token"

# Recent activities sampled for personal records.
STRAVA_ACTIVITIES_PER_PAGE = _env_int("STRAVA_ACTIVITIES_PER_PAGE", 30)

# Only the most recent N activities get a per-activity segment lookup.
STRAVA_SEGMENT_ACTIVITY_LIMIT = _env_int("STRAVA_SEGMENT_ACTIVITY_LIMIT", 10)

# Personal records kept in the report (most recent first).
PERSONAL_RECORD_LIMIT = _env_int("PERSONAL_RECORD_LIMIT", 10)


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
# Request timeout in seconds. A timeout surfaces as an ApiError.
REQUEST_TIMEOUT = _env_int("REQUEST_TIMEOUT", 15)


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------
def _clean(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_spotify_credentials(env: Mapping[str, str] | None = None) -> Credentials:
    """Build Spotify credentials from ``env`` (defaults to ``os.environ``).

    Missing values are left as ``None``; validation happens when the token
    manager is constructed.
    """

    env = os.environ if env is None else env
    return Credentials(
        client_id=_clean(env, "SPOTIFY_CLIENT_ID"),
        client_secret=_clean(env, "SPOTIFY_CLIENT_SECRET"),
        refresh_token=_clean(env, "SPOTIFY_REFRESH_TOKEN"),
    )


def load_strava_credentials(env: Mapping[str, str] | None = None) -> Credentials:
    """Build Strava credentials (including the seed access token) from ``env``."""

    env = os.environ if env is None else env
    return Credentials(
        client_id=_clean(env, "STRAVA_CLIENT_ID"),
        client_secret=_clean(env, "STRAVA_CLIENT_SECRET"),
        refresh_token=_clean(env, "STRAVA_REFRESH_TOKEN"),
        access_token=_clean(env, "STRAVA_ACCESS_TOKEN"),
    )
