"""HTTP session factory for provider API calls."""

from __future__ import annotations

import requests
from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

__all__ = ["create_session"]


def _build_retry() -> Retry:
    # One attempt per request; the only retry is ResilientClient's
    # refresh-and-retry cycle.
    return Retry(total=0, raise_on_status=False)


def create_session() -> Session:
    """Return a fresh session; each invocation builds its own."""

    session = requests.Session()
    adapter = HTTPAdapter(max_retries=_build_retry())
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update(
        {
            "Accept-Encoding": "gzip, deflate",
            "Accept": "application/json",
        }
    )
    return session
