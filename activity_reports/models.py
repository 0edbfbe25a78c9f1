from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .utils import isoformat_z, short_date


@dataclass(frozen=True)
class Credentials:
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    refresh_token: Optional[str] = None
    # Seed token; Strava supplies one, Spotify obtains its first via refresh
    access_token: Optional[str] = None

    def missing(self, fields: Tuple[str, ...]) -> List[str]:
        """Return the names in ``fields`` that are unset or blank."""
        return [name for name in fields if not getattr(self, name)]


@dataclass(frozen=True)
class GenreCount:
    genre: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"genre": self.genre, "count": self.count}


@dataclass(frozen=True)
class PersonalRecord:
    id: Any
    name: Optional[str]
    type: Optional[str]
    date: Optional[str]
    distance: Optional[float] = None
    moving_time: Optional[int] = None
    elapsed_time: Optional[int] = None
    total_elevation_gain: Optional[float] = None
    pr_count: int = 0
    achievement_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "date": self.date,
            "distance": self.distance,
            "moving_time": self.moving_time,
            "elapsed_time": self.elapsed_time,
            "total_elevation_gain": self.total_elevation_gain,
            "pr_count": self.pr_count,
            "achievement_count": self.achievement_count,
        }


@dataclass(frozen=True)
class SegmentPlacement:
    segment_id: Any
    segment_name: Optional[str]
    activity_id: Any
    rank: int
    elapsed_time: Optional[int] = None
    moving_time: Optional[int] = None
    distance: Optional[float] = None
    average_grade: Optional[float] = None
    maximum_grade: Optional[float] = None
    elevation_high: Optional[float] = None
    elevation_low: Optional[float] = None
    start_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "segment_id": self.segment_id,
            "segment_name": self.segment_name,
            "activity_id": self.activity_id,
            "rank": self.rank,
            "elapsed_time": self.elapsed_time,
            "moving_time": self.moving_time,
            "distance": self.distance,
            "average_grade": self.average_grade,
            "maximum_grade": self.maximum_grade,
            "elevation_high": self.elevation_high,
            "elevation_low": self.elevation_low,
            "start_date": self.start_date,
        }


@dataclass(frozen=True)
class Athlete:
    id: Any
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    profile: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "firstname": self.firstname,
            "lastname": self.lastname,
            "profile": self.profile,
        }


@dataclass(frozen=True)
class ListeningReport:
    total_tracks: int
    genres: Tuple[GenreCount, ...]
    generated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": isoformat_z(self.generated_at),
            "totalTracks": self.total_tracks,
            "totalGenres": len(self.genres),
            "genres": [entry.to_dict() for entry in self.genres],
            "lastUpdated": short_date(self.generated_at),
        }


@dataclass(frozen=True)
class FitnessReport:
    athlete: Athlete
    generated_at: datetime
    personal_records: Tuple[PersonalRecord, ...] = field(default_factory=tuple)
    koms: Tuple[SegmentPlacement, ...] = field(default_factory=tuple)
    top10_placements: Tuple[SegmentPlacement, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "athlete": self.athlete.to_dict(),
            "personalRecords": [pr.to_dict() for pr in self.personal_records],
            "koms": [kom.to_dict() for kom in self.koms],
            "top10Placements": [p.to_dict() for p in self.top10_placements],
            "lastUpdated": isoformat_z(self.generated_at),
        }
