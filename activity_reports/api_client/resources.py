"""Authenticated JSON fetcher with a one-shot refresh-and-retry budget."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

import requests

from ..config import REQUEST_TIMEOUT
from ..errors import ApiError
from .providers import Provider
from .response_handling import is_unauthorized, normalize_response
from .session import create_session

if TYPE_CHECKING:  # pragma: no cover
    from ..auth import TokenManager

LOGGER = logging.getLogger(__name__)

__all__ = ["ResilientClient"]


class ResilientClient:
    """Issues bearer-authenticated GETs against one provider.

    When a call is rejected as unauthorized the token manager is asked for a
    new token once and the same request is retried once. Every other failure,
    including a failed refresh or a failed retry, surfaces as ApiError.
    """

    def __init__(
        self,
        provider: Provider,
        tokens: "TokenManager",
        *,
        session: requests.Session | None = None,
        timeout: int = REQUEST_TIMEOUT,
    ) -> None:
        self.provider = provider
        self._tokens = tokens
        self._session = session or create_session()
        self._timeout = timeout

    def call(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        context: str = "request",
    ) -> Any:
        token = self._tokens.current_token()
        try:
            return self._request(url, params, token, context)
        except ApiError as exc:
            if not is_unauthorized(exc):
                raise
            LOGGER.info(
                "%s unauthorized (%s); refreshing %s token and retrying once.",
                context,
                exc.status,
                self.provider.name,
            )
        # AuthError from the refresh is an ApiError and propagates unchanged.
        token = self._tokens.refresh()
        return self._request(url, params, token, context)

    def _request(
        self,
        url: str,
        params: Optional[Dict[str, Any]],
        token: str,
        context: str,
    ) -> Any:
        try:
            response = self._session.get(
                url,
                headers={"Authorization": f"Bearer {token}"},
                params=params,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            message = f"{context}: network error {exc.__class__.__name__}"
            LOGGER.error(message)
            raise ApiError(None, message) from exc
        return normalize_response(self.provider, response, context)
