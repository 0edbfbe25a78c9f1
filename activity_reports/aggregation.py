"""Report aggregation helpers.

Pure functions that reduce fetched provider records into ranked summary
entries. Kept free of I/O so ordering and tie-break rules are testable in
isolation:

* genres: count desc, ties in first-encountered order
* personal records: date desc, most recent ``limit``
* KOMs: start date desc
* top-10 placements: rank asc, then start date desc
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from .models import GenreCount, PersonalRecord, SegmentPlacement
from .utils import parse_iso_datetime

JSONObj = Dict[str, Any]

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)

__all__ = [
    "classify_segment_efforts",
    "count_genres",
    "extract_personal_records",
    "track_artists",
    "unique_artist_ids",
]


def _date_key(value: Any) -> datetime:
    """Sort key: unparseable or missing dates compare as the oldest."""

    return parse_iso_datetime(value) or _OLDEST


def _sorted_recent_first(rows: Iterable[Any], date_of) -> List[Any]:
    return sorted(rows, key=lambda row: _date_key(date_of(row)), reverse=True)


# ---------------------------------------------------------------------------
# Genres
# ---------------------------------------------------------------------------
def track_artists(item: Mapping[str, Any]) -> List[JSONObj]:
    """Artists of a recently-played item (``{"track": {...}}``) or bare track."""

    track = item.get("track") if isinstance(item.get("track"), Mapping) else item
    artists = track.get("artists") or []
    return [a for a in artists if isinstance(a, Mapping)]


def unique_artist_ids(items: Iterable[Mapping[str, Any]]) -> List[str]:
    seen: Dict[str, None] = {}
    for item in items:
        for artist in track_artists(item):
            artist_id = artist.get("id")
            if artist_id and artist_id not in seen:
                seen[artist_id] = None
    return list(seen)


def count_genres(
    items: Iterable[Mapping[str, Any]],
    genre_lookup: Mapping[str, Sequence[str]] | None = None,
) -> List[GenreCount]:
    """Count genres per (track, artist, genre) occurrence.

    An artist's genres come from ``genre_lookup`` (artist id -> genres) when
    the id is present there, otherwise from the artist record itself. An
    artist appearing on several tracks is counted once per track.
    """

    lookup = genre_lookup or {}
    counts: Dict[str, int] = {}
    for item in items:
        for artist in track_artists(item):
            artist_id = artist.get("id")
            if artist_id is not None and artist_id in lookup:
                genres = lookup[artist_id]
            else:
                genres = artist.get("genres") or []
            for genre in genres:
                counts[genre] = counts.get(genre, 0) + 1
    # sorted() is stable, so equal counts keep first-seen order.
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [GenreCount(genre=genre, count=count) for genre, count in ranked]


# ---------------------------------------------------------------------------
# Personal records
# ---------------------------------------------------------------------------
def _pr_count(activity: Mapping[str, Any]) -> int:
    value = activity.get("pr_count")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value):
        return 0
    return int(value)


def extract_personal_records(
    activities: Iterable[Mapping[str, Any]], limit: int = 10
) -> List[PersonalRecord]:
    records = [
        PersonalRecord(
            id=activity.get("id"),
            name=activity.get("name"),
            type=activity.get("type"),
            date=activity.get("start_date"),
            distance=activity.get("distance"),
            moving_time=activity.get("moving_time"),
            elapsed_time=activity.get("elapsed_time"),
            total_elevation_gain=activity.get("total_elevation_gain"),
            pr_count=_pr_count(activity),
            achievement_count=activity.get("achievement_count"),
        )
        for activity in activities
        if _pr_count(activity) > 0
    ]
    return _sorted_recent_first(records, lambda pr: pr.date)[: max(limit, 0)]


# ---------------------------------------------------------------------------
# Segment placements
# ---------------------------------------------------------------------------
def _effort_rank(effort: Mapping[str, Any]) -> int | None:
    rank = effort.get("kom_rank")
    if isinstance(rank, bool) or not isinstance(rank, (int, float)):
        return None
    if not math.isfinite(rank) or rank != int(rank):
        return None
    return int(rank)


def _placement(effort: Mapping[str, Any], rank: int) -> SegmentPlacement:
    segment = effort.get("segment") or {}
    activity = effort.get("activity") or {}
    return SegmentPlacement(
        segment_id=segment.get("id"),
        segment_name=segment.get("name"),
        activity_id=activity.get("id"),
        rank=rank,
        elapsed_time=effort.get("elapsed_time"),
        moving_time=effort.get("moving_time"),
        distance=segment.get("distance"),
        average_grade=segment.get("average_grade"),
        maximum_grade=segment.get("maximum_grade"),
        elevation_high=segment.get("elevation_high"),
        elevation_low=segment.get("elevation_low"),
        start_date=effort.get("start_date"),
    )


def classify_segment_efforts(
    efforts: Iterable[Mapping[str, Any]],
) -> Tuple[List[SegmentPlacement], List[SegmentPlacement]]:
    """Split efforts into ``(koms, top10)``.

    KOMs are rank 1 efforts, most recent first. Top-10 placements are ranks
    2..10, best rank first with ties broken by most recent.
    """

    koms: List[SegmentPlacement] = []
    top10: List[SegmentPlacement] = []
    for effort in efforts:
        rank = _effort_rank(effort)
        if rank is None:
            continue
        if rank == 1:
            koms.append(_placement(effort, rank))
        elif 1 < rank <= 10:
            top10.append(_placement(effort, rank))

    koms = _sorted_recent_first(koms, lambda p: p.start_date)
    top10 = _sorted_recent_first(top10, lambda p: p.start_date)
    top10.sort(key=lambda p: p.rank)
    return koms, top10
