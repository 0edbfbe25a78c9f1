"""Global pytest fixtures & helpers.

Adds project root to path and provides a scripted fake HTTP session so the
token manager, client and services can be exercised without network access.
"""
from __future__ import annotations

import json
import os
import sys
from collections import deque
from urllib.parse import urlparse

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from activity_reports.models import Credentials


class FakeResp:
    """Minimal fake response matching needed parts of requests.Response."""

    def __init__(self, status_code=200, data=None, text=None):
        self.status_code = status_code
        self._data = data
        self._text = text
        self.headers = {}

    def json(self):
        if isinstance(self._data, Exception):  # force JSON error
            raise self._data
        return self._data

    @property
    def text(self):
        if self._text is not None:
            return self._text
        try:
            return json.dumps(self._data)
        except Exception:
            return str(self._data)


class FakeSession:
    """Routes requests by URL path to queued responses and records every call.

    A route value may be a FakeResp, an exception instance (raised), a
    callable ``(call) -> FakeResp`` or a list of those consumed in order
    (the last entry repeats).
    """

    def __init__(self, routes=None):
        self.routes = {path: self._queue(v) for path, v in (routes or {}).items()}
        self.calls = []

    @staticmethod
    def _queue(value):
        return deque(value if isinstance(value, list) else [value])

    def add(self, path, value):
        self.routes[path] = self._queue(value)

    def _dispatch(self, method, url, **kwargs):
        call = {"method": method, "url": url, "path": urlparse(url).path, **kwargs}
        self.calls.append(call)
        queue = self.routes.get(call["path"])
        if not queue:
            raise AssertionError(f"Unexpected {method} {url}")
        value = queue.popleft() if len(queue) > 1 else queue[0]
        if isinstance(value, Exception):
            raise value
        if callable(value):
            return value(call)
        return value

    def get(self, url, headers=None, params=None, timeout=None):
        return self._dispatch("GET", url, headers=headers, params=params, timeout=timeout)

    def post(self, url, data=None, json=None, auth=None, headers=None, timeout=None):
        return self._dispatch(
            "POST", url, data=data, json=json, auth=auth, headers=headers, timeout=timeout
        )

    closed = False

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def calls_to(self, path):
        return [c for c in self.calls if c["path"] == path]


SPOTIFY_TOKEN_PATH = "/api/token"
STRAVA_TOKEN_PATH = "/oauth/token"


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def spotify_credentials():
    return Credentials(client_id="cid", client_secret="csec", refresh_token="spot-refresh-1234")


@pytest.fixture
def strava_credentials():
    return Credentials(
        client_id="cid",
        client_secret="csec",
        refresh_token="strava-refresh-5678",
        access_token="seed-token",
    )


def make_activity(activity_id, start_date, pr_count=0, **extra):
    activity = {
        "id": activity_id,
        "name": f"Run {activity_id}",
        "type": "Run",
        "start_date": start_date,
        "distance": 5000.0,
        "moving_time": 1500,
        "elapsed_time": 1600,
        "total_elevation_gain": 42.0,
        "pr_count": pr_count,
        "achievement_count": pr_count,
    }
    activity.update(extra)
    return activity


def make_effort(kom_rank, start_date, segment_id=1, activity_id=10):
    return {
        "kom_rank": kom_rank,
        "start_date": start_date,
        "elapsed_time": 300,
        "moving_time": 290,
        "activity": {"id": activity_id},
        "segment": {
            "id": segment_id,
            "name": f"Segment {segment_id}",
            "distance": 1200.0,
            "average_grade": 3.1,
            "maximum_grade": 8.0,
            "elevation_high": 120.0,
            "elevation_low": 80.0,
        },
    }
