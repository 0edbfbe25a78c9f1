"""Request handlers for the listening and fitness reports.

Each handler takes a serverless-style event (only ``httpMethod`` is read),
runs one stateless invocation and returns ``{statusCode, headers, body}``
with a JSON string body. A fresh session, token manager and client are built
per invocation; nothing is shared between calls.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Mapping

import requests

from .api_client import SPOTIFY, STRAVA, ResilientClient, create_session
from .auth import SpotifyTokenManager, StravaTokenManager
from .config import load_spotify_credentials, load_strava_credentials
from .errors import ActivityReportsError
from .models import FitnessReport, ListeningReport
from .services import FitnessService, ListeningService
from .utils import isoformat_z, utc_now

LOGGER = logging.getLogger(__name__)

HandlerResponse = Dict[str, Any]

SPOTIFY_ERROR_LABEL = "Internal server error"
STRAVA_ERROR_LABEL = "Failed to fetch Strava data"

_HEADERS = {"Content-Type": "application/json"}

__all__ = [
    "build_fitness_report",
    "build_listening_report",
    "handle_request",
    "spotify_genres_handler",
    "strava_stats_handler",
]


def _response(status: int, body: Any) -> HandlerResponse:
    return {
        "statusCode": status,
        "headers": dict(_HEADERS),
        "body": body if isinstance(body, str) else json.dumps(body),
    }


def handle_request(
    event: Mapping[str, Any],
    build_report: Callable[[], Any],
    *,
    error_label: str = SPOTIFY_ERROR_LABEL,
) -> HandlerResponse:
    """Dispatch on method, build the report and wrap it in a response.

    OPTIONS gets an empty 200, anything other than GET a 405. Failures while
    building the report become a 500 carrying the original message.
    """

    method = str(event.get("httpMethod") or "").upper()
    if method == "OPTIONS":
        return _response(200, "")
    if method != "GET":
        return _response(405, {"error": "Method not allowed"})

    try:
        report = build_report()
    except ActivityReportsError as exc:
        LOGGER.exception("Report generation failed: %s", exc)
        return _error_response(error_label, exc)
    except Exception as exc:
        LOGGER.exception("Unexpected error while building report")
        return _error_response(error_label, exc)
    return _response(200, report.to_dict())


def _error_response(label: str, exc: Exception) -> HandlerResponse:
    return _response(
        500,
        {
            "error": label,
            "message": str(exc),
            "timestamp": isoformat_z(utc_now()),
        },
    )


@contextmanager
def _invocation_session(
    session: requests.Session | None,
) -> Iterator[requests.Session]:
    """Yield the caller's session, or a fresh one closed on exit."""

    if session is not None:
        yield session
        return
    with create_session() as owned:
        yield owned


def build_listening_report(
    env: Mapping[str, str] | None = None,
    *,
    session: requests.Session | None = None,
) -> ListeningReport:
    credentials = load_spotify_credentials(env)
    with _invocation_session(session) as active:
        tokens = SpotifyTokenManager(credentials, session=active)
        client = ResilientClient(SPOTIFY, tokens, session=active)
        return ListeningService(client).build_report()


def build_fitness_report(
    env: Mapping[str, str] | None = None,
    *,
    session: requests.Session | None = None,
) -> FitnessReport:
    credentials = load_strava_credentials(env)
    with _invocation_session(session) as active:
        tokens = StravaTokenManager(credentials, session=active)
        client = ResilientClient(STRAVA, tokens, session=active)
        return FitnessService(client).build_report()


def spotify_genres_handler(
    event: Mapping[str, Any],
    context: Any = None,
    *,
    env: Mapping[str, str] | None = None,
    session: requests.Session | None = None,
) -> HandlerResponse:
    return handle_request(
        event,
        lambda: build_listening_report(env, session=session),
        error_label=SPOTIFY_ERROR_LABEL,
    )


def strava_stats_handler(
    event: Mapping[str, Any],
    context: Any = None,
    *,
    env: Mapping[str, str] | None = None,
    session: requests.Session | None = None,
) -> HandlerResponse:
    return handle_request(
        event,
        lambda: build_fitness_report(env, session=session),
        error_label=STRAVA_ERROR_LABEL,
    )
