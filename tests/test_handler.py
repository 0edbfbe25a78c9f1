import json
import logging

import pytest

from activity_reports import handler
from activity_reports.errors import ApiError

from conftest import SPOTIFY_TOKEN_PATH, STRAVA_TOKEN_PATH, FakeResp, FakeSession, make_activity, make_effort

SPOTIFY_ENV = {
    "SPOTIFY_CLIENT_ID": "cid",
    "SPOTIFY_CLIENT_SECRET": "csec",
    "SPOTIFY_REFRESH_TOKEN": "rt",
}
STRAVA_ENV = {
    "STRAVA_CLIENT_ID": "cid",
    "STRAVA_CLIENT_SECRET": "csec",
    "STRAVA_ACCESS_TOKEN": "at",
    "STRAVA_REFRESH_TOKEN": "rt",
}


def _body(response):
    return json.loads(response["body"])


def test_options_preflight_returns_empty_200(fake_session):
    response = handler.spotify_genres_handler({"httpMethod": "OPTIONS"}, session=fake_session)
    assert response["statusCode"] == 200
    assert response["body"] == ""
    assert fake_session.calls == []


@pytest.mark.parametrize("method", ["POST", "DELETE", None])
def test_non_get_methods_rejected(fake_session, method):
    response = handler.strava_stats_handler({"httpMethod": method}, session=fake_session)
    assert response["statusCode"] == 405
    assert _body(response) == {"error": "Method not allowed"}
    assert response["headers"]["Content-Type"] == "application/json"
    assert fake_session.calls == []


@pytest.mark.parametrize("missing", sorted(STRAVA_ENV))
def test_missing_strava_config_yields_500_without_network(fake_session, missing):
    env = dict(STRAVA_ENV)
    env[missing] = "  "
    response = handler.strava_stats_handler({"httpMethod": "GET"}, env=env, session=fake_session)

    assert response["statusCode"] == 500
    body = _body(response)
    assert body["error"] == "Failed to fetch Strava data"
    assert "Missing required Strava credentials" in body["message"]
    assert body["timestamp"].endswith("Z")
    assert fake_session.calls == []


def test_missing_spotify_config_yields_500_without_network(fake_session):
    env = {k: v for k, v in SPOTIFY_ENV.items() if k != "SPOTIFY_REFRESH_TOKEN"}
    response = handler.spotify_genres_handler({"httpMethod": "GET"}, env=env, session=fake_session)

    assert response["statusCode"] == 500
    assert _body(response)["error"] == "Internal server error"
    assert fake_session.calls == []


def test_spotify_get_returns_genre_report(fake_session):
    fake_session.add(SPOTIFY_TOKEN_PATH, FakeResp(200, {"access_token": "AAA"}))
    fake_session.add(
        "/v1/me/player/recently-played",
        FakeResp(
            200,
            {
                "items": [
                    {"track": {"artists": [{"id": "x"}]}},
                    {"track": {"artists": [{"id": "y"}]}},
                ]
            },
        ),
    )
    fake_session.add(
        "/v1/artists",
        FakeResp(200, {"artists": [{"id": "x", "genres": ["rock", "pop"]}, {"id": "y", "genres": ["rock"]}]}),
    )

    response = handler.spotify_genres_handler({"httpMethod": "GET"}, env=SPOTIFY_ENV, session=fake_session)

    assert response["statusCode"] == 200
    body = _body(response)
    assert set(body) == {"timestamp", "totalTracks", "totalGenres", "genres", "lastUpdated"}
    assert body["genres"] == [{"genre": "rock", "count": 2}, {"genre": "pop", "count": 1}]
    assert body["totalTracks"] == 2
    assert body["totalGenres"] == 2


def test_strava_get_refreshes_expired_seed_token(fake_session):
    fake_session.add(
        "/api/v3/athlete",
        [FakeResp(401, {"message": "Authorization Error", "errors": []}), FakeResp(200, {"id": 3})],
    )
    fake_session.add(STRAVA_TOKEN_PATH, FakeResp(200, {"access_token": "fresh"}))
    fake_session.add(
        "/api/v3/athlete/activities",
        FakeResp(200, [make_activity(8, "2024-01-01T00:00:00Z", pr_count=2)]),
    )
    fake_session.add(
        "/api/v3/activities/8/segments",
        FakeResp(200, [make_effort(1, "2024-01-01T00:10:00Z", activity_id=8)]),
    )

    response = handler.strava_stats_handler({"httpMethod": "GET"}, env=STRAVA_ENV, session=fake_session)

    assert response["statusCode"] == 200
    body = _body(response)
    assert body["athlete"]["id"] == 3
    assert [pr["id"] for pr in body["personalRecords"]] == [8]
    assert len(body["koms"]) == 1
    assert body["top10Placements"] == []
    assert len(fake_session.calls_to(STRAVA_TOKEN_PATH)) == 1
    later = [c for c in fake_session.calls if c["method"] == "GET"][1:]
    assert all(c["headers"]["Authorization"] == "Bearer fresh" for c in later)


def test_api_error_is_wrapped_with_original_message():
    def failing():
        raise ApiError(503, "Activities: Strava API error: 503")

    response = handler.handle_request({"httpMethod": "get"}, failing, error_label="Boom")

    assert response["statusCode"] == 500
    body = _body(response)
    assert body["error"] == "Boom"
    assert body["message"] == "Activities: Strava API error: 503"


def test_unexpected_error_is_wrapped():
    def failing():
        raise KeyError("items")

    response = handler.handle_request({"httpMethod": "GET"}, failing)
    assert response["statusCode"] == 500
    assert _body(response)["error"] == "Internal server error"


def test_fatal_error_is_logged_with_traceback(caplog):
    def failing():
        raise ApiError(502, "Athlete: Strava API error: 502")

    with caplog.at_level(logging.ERROR, logger="activity_reports.handler"):
        handler.handle_request({"httpMethod": "GET"}, failing)

    (record,) = [r for r in caplog.records if r.name == "activity_reports.handler"]
    assert record.exc_info is not None
    assert record.exc_info[0] is ApiError


def test_owned_session_is_closed_after_invocation(monkeypatch):
    owned = FakeSession()
    monkeypatch.setattr(handler, "create_session", lambda: owned)

    response = handler.strava_stats_handler({"httpMethod": "GET"}, env={})

    assert response["statusCode"] == 500
    assert owned.closed
    assert owned.calls == []


def test_caller_session_is_left_open(fake_session):
    handler.strava_stats_handler({"httpMethod": "GET"}, env={}, session=fake_session)
    assert not fake_session.closed
