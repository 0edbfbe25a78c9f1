"""Shared HTTP response helpers: map provider responses onto ApiError."""

from __future__ import annotations

import logging
from typing import Any, Optional, Type

import requests

from ..errors import ApiError
from .providers import Provider

RequestsJSONDecodeError: Type[Exception]
if hasattr(requests.exceptions, "JSONDecodeError"):
    RequestsJSONDecodeError = requests.exceptions.JSONDecodeError
else:  # pragma: no cover - fallback for old requests versions
    RequestsJSONDecodeError = ValueError

LOGGER = logging.getLogger(__name__)

__all__ = [
    "extract_error",
    "is_unauthorized",
    "normalize_response",
]


def normalize_response(
    provider: Provider, response: requests.Response, context: str
) -> Any:
    """Return the decoded JSON body or raise ApiError.

    Covers the three failure shapes: a non-2xx status, a body that is not
    JSON, and a 2xx body carrying an embedded provider error.
    """

    status = response.status_code
    if not 200 <= status < 300:
        detail = extract_error(provider, response)
        message = f"{provider.name} API error: {status}"
        if detail:
            message = f"{message} | {detail}"
        raise ApiError(status, f"{context}: {message}")

    try:
        data = response.json()
    except (ValueError, RequestsJSONDecodeError) as exc:
        raise ApiError(
            status, f"{context}: {provider.name} returned a non-JSON payload"
        ) from exc

    embedded = provider.extract_error(data)
    if embedded is not None:
        embedded_status, embedded_message = embedded
        raise ApiError(
            embedded_status if embedded_status is not None else status,
            f"{context}: {provider.name} API error: {embedded_message}",
        )
    return data


def is_unauthorized(error: ApiError) -> bool:
    """Whether ``error`` means the bearer token was rejected."""

    return error.status == 401


def extract_error(
    provider: Provider, resp: Optional[requests.Response]
) -> Optional[str]:
    """Return a compact error description from a failed response, if any."""

    if resp is None:
        return None
    data = _safe_json(resp)
    if data is None:
        return _extract_error_text(resp)
    embedded = provider.extract_error(data)
    if embedded is None:
        return None
    return embedded[1]


def _safe_json(resp: requests.Response) -> Optional[Any]:
    """Safely parse JSON; return None if parsing fails."""

    try:
        return resp.json()
    except (
        ValueError,
        RequestsJSONDecodeError,
    ) as exc:  # pragma: no cover - logging path
        LOGGER.debug(
            "Failed to decode JSON from %s: %s", getattr(resp, "url", "?"), exc
        )
        return None


def _extract_error_text(resp: requests.Response) -> Optional[str]:
    """Best-effort plain-text extraction when JSON parsing fails."""

    text = getattr(resp, "text", "")
    if not isinstance(text, str):
        return None
    trimmed = text.strip()
    if not trimmed:
        return None
    return (trimmed[:197] + "...") if len(trimmed) > 200 else trimmed
