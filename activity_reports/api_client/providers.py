"""Provider descriptors: endpoints and the shape of their error payloads.

Spotify reports errors as ``{"error": {"status": 401, "message": ...}}`` on the
Web API and ``{"error": "invalid_grant", "error_description": ...}`` on the
accounts service. Strava uses ``{"message": ..., "errors": [{resource, field,
code}]}``. Each provider supplies one extractor mapping its shape to a
``(status, message)`` pair so the client logic stays provider-agnostic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from .. import config

ErrorInfo = Tuple[Optional[int], str]

__all__ = ["ErrorInfo", "Provider", "SPOTIFY", "STRAVA"]


def _spotify_error(data: Any) -> Optional[ErrorInfo]:
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if not error:
        return None
    if isinstance(error, dict):
        status = error.get("status")
        message = error.get("message") or "Unknown Spotify error"
        return (status if isinstance(status, int) else None), str(message)
    description = data.get("error_description") or "No description"
    return None, f"{error} - {description}"


def _strava_error(data: Any) -> Optional[ErrorInfo]:
    if not isinstance(data, dict):
        return None
    errors = data.get("errors")
    if not isinstance(errors, list):
        return None
    parts: List[str] = []
    message = data.get("message")
    if message:
        parts.append(str(message))
    for err in errors:
        if not isinstance(err, dict):
            continue
        resource = err.get("resource")
        field = err.get("field")
        code = err.get("code")
        spec = "/".join(filter(None, (resource, field)))
        if code and spec:
            parts.append(f"{spec}:{code}")
        elif code:
            parts.append(str(code))
    return None, " | ".join(parts) if parts else "Unknown Strava error"


@dataclass(frozen=True)
class Provider:
    name: str
    api_base: str
    token_url: str
    extract_error: Callable[[Any], Optional[ErrorInfo]]

    def url(self, path: str) -> str:
        return f"{self.api_base.rstrip('/')}/{path.lstrip('/')}"


SPOTIFY = Provider(
    name="Spotify",
    api_base=config.SPOTIFY_API_BASE,
    token_url=config.SPOTIFY_TOKEN_URL,
    extract_error=_spotify_error,
)

STRAVA = Provider(
    name="Strava",
    api_base=config.STRAVA_BASE_URL,
    token_url=config.STRAVA_OAUTH_URL,
    extract_error=_strava_error,
)
