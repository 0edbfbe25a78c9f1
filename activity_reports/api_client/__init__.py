"""Provider API client components (session, token-aware client, batch fetch)."""

from .batching import (  # noqa: F401
    FetchOutcome,
    fetch_fan_out,
    fetch_flat,
    fetch_id_batches,
    successful,
)
from .providers import SPOTIFY, STRAVA, Provider  # noqa: F401
from .resources import ResilientClient  # noqa: F401
from .session import create_session  # noqa: F401
