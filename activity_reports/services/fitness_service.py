"""Fitness report service.

The athlete profile and the recent activities page are required; the
per-activity segment lookups are best effort and only issued for the most
recent activities.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from ..aggregation import classify_segment_efforts, extract_personal_records
from ..api_client import ResilientClient, fetch_fan_out, fetch_flat
from ..config import (
    PERSONAL_RECORD_LIMIT,
    STRAVA_ACTIVITIES_PER_PAGE,
    STRAVA_SEGMENT_ACTIVITY_LIMIT,
)
from ..errors import ApiError
from ..models import Athlete, FitnessReport
from ..utils import utc_now

ActivityRow = Dict[str, Any]


@dataclass(slots=True)
class FitnessServiceConfig:
    activities_per_page: int = STRAVA_ACTIVITIES_PER_PAGE
    segment_activity_limit: int = STRAVA_SEGMENT_ACTIVITY_LIMIT
    personal_record_limit: int = PERSONAL_RECORD_LIMIT
    logger: logging.Logger | None = None


class FitnessService:
    def __init__(
        self,
        client: ResilientClient,
        config: FitnessServiceConfig | None = None,
    ):
        self.client = client
        self.config = config or FitnessServiceConfig()
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)

    def fetch_athlete(self) -> Athlete:
        data = self.client.call(self.client.provider.url("/athlete"), context="Athlete")
        if not isinstance(data, Mapping):
            raise ApiError(None, "Athlete: unexpected response shape")
        return Athlete(
            id=data.get("id"),
            firstname=data.get("firstname"),
            lastname=data.get("lastname"),
            profile=data.get("profile"),
        )

    def fetch_activities(self) -> List[ActivityRow]:
        data = fetch_flat(
            self.client,
            self.client.provider.url("/athlete/activities"),
            page_size=self.config.activities_per_page,
            context="Activities",
        )
        if not isinstance(data, list):
            raise ApiError(None, "Activities: response is not a list")
        return [a for a in data if isinstance(a, Mapping)]

    def fetch_segment_efforts(self, activities: List[ActivityRow]) -> List[ActivityRow]:
        provider = self.client.provider
        outcomes = fetch_fan_out(
            self.client,
            activities,
            lambda activity: provider.url(f"/activities/{activity.get('id')}/segments"),
            limit=self.config.segment_activity_limit,
            key_for=lambda activity: activity.get("id"),
            context="Segments for activity",
        )
        efforts: List[ActivityRow] = []
        for outcome in outcomes:
            if not outcome.ok:
                continue
            if not isinstance(outcome.value, list):
                self._log.warning(
                    "Ignoring non-list segment payload for activity %s", outcome.key
                )
                continue
            efforts.extend(e for e in outcome.value if isinstance(e, Mapping))
        skipped = sum(1 for o in outcomes if not o.ok)
        self._log.info(
            "Fetched %d segment efforts from %d activities (%d skipped)",
            len(efforts),
            len(outcomes),
            skipped,
        )
        return efforts

    def build_report(self) -> FitnessReport:
        athlete = self.fetch_athlete()
        activities = self.fetch_activities()
        efforts = self.fetch_segment_efforts(activities)
        koms, top10 = classify_segment_efforts(efforts)
        personal_records = extract_personal_records(
            activities, limit=self.config.personal_record_limit
        )
        self._log.info(
            "Athlete %s: %d personal records, %d KOMs, %d top-10 placements",
            athlete.id,
            len(personal_records),
            len(koms),
            len(top10),
        )
        return FitnessReport(
            athlete=athlete,
            generated_at=utc_now(),
            personal_records=tuple(personal_records),
            koms=tuple(koms),
            top10_placements=tuple(top10),
        )
