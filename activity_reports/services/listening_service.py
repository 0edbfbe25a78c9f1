"""Listening report service.

Fetches the recently-played window, looks up the genres of every distinct
artist in id batches and reduces them with the pure ``count_genres``
aggregation. Artist batches that fail are skipped; their tracks simply
contribute no genres.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence

from ..aggregation import count_genres, unique_artist_ids
from ..api_client import ResilientClient, fetch_flat, fetch_id_batches, successful
from ..config import (
    SPOTIFY_ARTIST_BATCH_LIMIT,
    SPOTIFY_ARTIST_BATCH_SIZE,
    SPOTIFY_RECENT_LIMIT,
)
from ..errors import ApiError, ConfigError
from ..models import ListeningReport
from ..utils import utc_now


@dataclass(slots=True)
class ListeningServiceConfig:
    recent_limit: int = SPOTIFY_RECENT_LIMIT
    artist_batch_size: int = SPOTIFY_ARTIST_BATCH_SIZE
    logger: logging.Logger | None = None


def _genre_lookup(payloads: Sequence[Any]) -> Dict[str, List[str]]:
    lookup: Dict[str, List[str]] = {}
    for payload in payloads:
        artists = payload.get("artists") if isinstance(payload, Mapping) else None
        for artist in artists or []:
            # Spotify returns null for ids it does not recognise.
            if not isinstance(artist, Mapping) or not artist.get("id"):
                continue
            lookup[artist["id"]] = list(artist.get("genres") or [])
    return lookup


class ListeningService:
    def __init__(
        self,
        client: ResilientClient,
        config: ListeningServiceConfig | None = None,
    ):
        self.client = client
        self.config = config or ListeningServiceConfig()
        batch_size = self.config.artist_batch_size
        if not 1 <= batch_size <= SPOTIFY_ARTIST_BATCH_LIMIT:
            raise ConfigError(
                f"SPOTIFY_ARTIST_BATCH_SIZE must be between 1 and "
                f"{SPOTIFY_ARTIST_BATCH_LIMIT}, got {batch_size}"
            )
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)

    def build_report(self) -> ListeningReport:
        provider = self.client.provider
        recent = fetch_flat(
            self.client,
            provider.url("/me/player/recently-played"),
            page_size=self.config.recent_limit,
            page_param="limit",
            context="Recently played",
        )
        items = recent.get("items") if isinstance(recent, Mapping) else None
        if not isinstance(items, list):
            raise ApiError(None, "Recently played: response has no items list")

        artist_ids = unique_artist_ids(items)
        self._log.info(
            "Fetched %d recent tracks with %d distinct artists",
            len(items),
            len(artist_ids),
        )
        outcomes = fetch_id_batches(
            self.client,
            provider.url("/artists"),
            artist_ids,
            batch_size=self.config.artist_batch_size,
            max_batch_size=SPOTIFY_ARTIST_BATCH_LIMIT,
            context="Artists",
        )
        genres = count_genres(items, _genre_lookup(successful(outcomes)))
        self._log.info("Counted %d genres", len(genres))
        return ListeningReport(
            total_tracks=len(items),
            genres=tuple(genres),
            generated_at=utc_now(),
        )
