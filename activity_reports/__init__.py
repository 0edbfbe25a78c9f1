"""Spotify genre and Strava achievement reports."""

from .errors import ActivityReportsError, ApiError, AuthError, ConfigError
from .handler import spotify_genres_handler, strava_stats_handler
from .main import main
from .models import Credentials, FitnessReport, ListeningReport

__all__ = [
    "main",
    "spotify_genres_handler",
    "strava_stats_handler",
    "Credentials",
    "FitnessReport",
    "ListeningReport",
    "ActivityReportsError",
    "ApiError",
    "AuthError",
    "ConfigError",
]
