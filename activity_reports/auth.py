"""OAuth access-token management for the Spotify and Strava APIs.

A :class:`TokenManager` owns the single access token used by one invocation
and exchanges the long-lived refresh token for a new one on demand. Expiry is
never predicted; callers discover a stale token when a request is rejected
and ask for a refresh (see :class:`~activity_reports.api_client.ResilientClient`).
Secrets are masked in every log line.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

import requests

from .api_client.providers import SPOTIFY, STRAVA, Provider
from .api_client.response_handling import extract_error
from .api_client.session import create_session
from .config import REQUEST_TIMEOUT
from .errors import AuthError, ConfigError
from .models import Credentials
from .utils import mask_tail

LOGGER = logging.getLogger(__name__)

__all__ = ["TokenManager", "SpotifyTokenManager", "StravaTokenManager"]


class TokenManager(ABC):
    """Holds the current access token for one provider.

    Subclasses set ``provider`` and describe the token request body.
    """

    provider: Provider
    required_fields: Tuple[str, ...] = ("client_id", "client_secret", "refresh_token")

    def __init__(
        self,
        credentials: Credentials,
        *,
        session: requests.Session | None = None,
        timeout: int = REQUEST_TIMEOUT,
    ) -> None:
        missing = credentials.missing(self.required_fields)
        if missing:
            raise ConfigError(
                f"Missing required {self.provider.name} credentials: {', '.join(missing)}"
            )
        self._credentials = credentials
        self._session = session or create_session()
        self._timeout = timeout
        self._token: str | None = credentials.access_token

    def current_token(self) -> str:
        """Return the held token, performing the first exchange when unseeded."""

        if not self._token:
            return self.refresh()
        return self._token

    def refresh(self) -> str:
        """Exchange the refresh token for a new access token.

        Raises:
            AuthError: transport failure, non-2xx status, embedded ``error``
                field, invalid JSON or a response without ``access_token``.
        """

        provider = self.provider
        LOGGER.info(
            "Refreshing %s token refresh_token=%s",
            provider.name,
            mask_tail(self._credentials.refresh_token),
        )
        LOGGER.debug("Token endpoint: %s", provider.token_url)
        try:
            resp = self._session.post(
                provider.token_url, timeout=self._timeout, **self._request_kwargs()
            )
        except requests.exceptions.RequestException as e:
            LOGGER.error("Token request transport error: %s", e)
            raise AuthError(
                None, f"Transport failure during {provider.name} token refresh"
            ) from e

        status = resp.status_code
        LOGGER.debug("Token endpoint status=%s", status)
        if not 200 <= status < 300:
            detail = extract_error(provider, resp)
            LOGGER.error(
                "Token refresh failed status=%s%s",
                status,
                f" detail={detail}" if detail else "",
            )
            message = f"{provider.name} token refresh failed with status {status}"
            if detail:
                message = f"{message}: {detail}"
            raise AuthError(status, message)

        try:
            data = resp.json()
        except ValueError as e:
            LOGGER.error("Invalid JSON in token response: %s", e)
            raise AuthError(status, "Invalid JSON in token response") from e

        if not isinstance(data, dict):
            LOGGER.error("Unexpected token response shape: %s", type(data).__name__)
            raise AuthError(status, "Unexpected token response shape")

        embedded = provider.extract_error(data)
        if embedded is not None:
            LOGGER.error("Token refresh rejected: %s", embedded[1])
            raise AuthError(
                embedded[0] or status, f"Token refresh failed: {embedded[1]}"
            )

        access_token = data.get("access_token")
        new_refresh_token = data.get("refresh_token")
        LOGGER.info(
            "Token refresh access_token_len=%s refresh_token_changed=%s",
            len(access_token) if access_token else 0,
            bool(
                new_refresh_token
                and new_refresh_token != self._credentials.refresh_token
            ),
        )
        if not access_token:
            LOGGER.error("No access_token in token response")
            raise AuthError(status, "No access_token in token response")
        self._token = access_token
        return access_token

    @abstractmethod
    def _request_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for the token endpoint POST."""


class SpotifyTokenManager(TokenManager):
    """Client credentials via HTTP Basic auth, form-encoded body."""

    provider = SPOTIFY

    def _request_kwargs(self) -> Dict[str, Any]:
        creds = self._credentials
        return {
            "auth": (creds.client_id, creds.client_secret),
            "data": {
                "grant_type": "refresh_token",
                "refresh_token": creds.refresh_token,
            },
        }


class StravaTokenManager(TokenManager):
    """Client credentials in a JSON body; requires a seed access token."""

    provider = STRAVA
    required_fields = (
        "client_id",
        "client_secret",
        "access_token",
        "refresh_token",
    )

    def _request_kwargs(self) -> Dict[str, Any]:
        creds = self._credentials
        return {
            "json": {
                "client_id": creds.client_id,
                "client_secret": creds.client_secret,
                "refresh_token": creds.refresh_token,
                "grant_type": "refresh_token",
            },
        }
